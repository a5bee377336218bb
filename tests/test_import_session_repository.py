"""
tests/test_import_session_repository.py

Compare-and-set advancement of page progress rows.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
from sqlalchemy import update
from sqlalchemy.orm import Session

from db.models.import_session import ImportSession, PageStatus
from db.repositories.import_session_repository import ImportSessionRepository

CATEGORY_URL = "https://www.macupdate.com/explore/categories/productivity"


def _scraped_pages(db: Session, count: int) -> list[ImportSession]:
    repository = ImportSessionRepository(db)
    base = datetime(2026, 10, 1, tzinfo=timezone.utc)
    rows = []
    for page_number in range(1, count + 1):
        row = repository.record_page_scraped(
            category_url=CATEGORY_URL,
            category_name="Productivity",
            page_number=page_number,
        )
        row.created_at = base + timedelta(minutes=page_number)
        rows.append(row)
    db.commit()
    return rows


class TestAdvanceLatestScraped:
    def test_each_call_takes_a_different_row(self, db_session: Session) -> None:
        page_1, page_2 = _scraped_pages(db_session, 2)
        repository = ImportSessionRepository(db_session)

        first = repository.advance_latest_scraped(category_url=CATEGORY_URL, apps_imported=4, apps_skipped=1)
        second = repository.advance_latest_scraped(category_url=CATEGORY_URL, apps_imported=2, apps_skipped=0)
        third = repository.advance_latest_scraped(category_url=CATEGORY_URL, apps_imported=9, apps_skipped=0)

        assert first is not None and first.id == page_2.id
        assert second is not None and second.id == page_1.id
        assert third is None
        assert (first.apps_imported, first.apps_skipped) == (4, 1)
        assert (second.apps_imported, second.apps_skipped) == (2, 0)

    def test_row_taken_between_select_and_update_is_skipped(
        self,
        db_session: Session,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        page_1, page_2 = _scraped_pages(db_session, 2)
        original_scalar = db_session.scalar
        taken: list[Any] = []

        def scalar_then_concurrent_import(statement: Any, *args: Any, **kwargs: Any) -> Any:
            candidate_id = original_scalar(statement, *args, **kwargs)
            if candidate_id == page_2.id and not taken:
                db_session.execute(
                    update(ImportSession)
                    .where(ImportSession.id == candidate_id)
                    .values(page_status=PageStatus.IMPORTED, apps_imported=7)
                )
                taken.append(candidate_id)
            return candidate_id

        monkeypatch.setattr(db_session, "scalar", scalar_then_concurrent_import)

        advanced = ImportSessionRepository(db_session).advance_latest_scraped(
            category_url=CATEGORY_URL,
            apps_imported=3,
            apps_skipped=2,
        )
        db_session.commit()

        assert taken == [page_2.id]
        assert advanced is not None
        assert advanced.id == page_1.id
        assert (advanced.apps_imported, advanced.apps_skipped) == (3, 2)
        db_session.refresh(page_2)
        assert page_2.apps_imported == 7

    def test_nothing_left_to_advance(self, db_session: Session) -> None:
        (page_1,) = _scraped_pages(db_session, 1)
        page_1.page_status = PageStatus.IMPORTED
        db_session.commit()

        advanced = ImportSessionRepository(db_session).advance_latest_scraped(
            category_url=CATEGORY_URL,
            apps_imported=1,
            apps_skipped=0,
        )

        assert advanced is None
