"""
Repository for per-page crawl/import progress rows.
"""

from __future__ import annotations

import re
import uuid

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db.base import utc_now
from db.models.import_session import ImportSession, ImportSessionSourceType, PageStatus
from db.repositories.errors import StoreError

PAGE_NUMBER_PATTERN = re.compile(r"Page (\d+)")
PAGE_NAME_FILTER = "%Page %"
MAX_ADVANCE_ATTEMPTS = 3


def page_session_name(category_name: str, page_number: int) -> str:
    return f"{category_name} - Page {page_number}"


def page_number_from_name(session_name: str | None) -> int | None:
    match = PAGE_NUMBER_PATTERN.search(session_name or "")
    return int(match.group(1)) if match else None


class ImportSessionRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def record_page_scraped(
        self,
        *,
        category_url: str,
        category_name: str,
        page_number: int,
    ) -> ImportSession:
        row = ImportSession(
            session_name=page_session_name(category_name, page_number),
            category_url=category_url,
            source_type=ImportSessionSourceType.BULK_PAGE,
            page_status=PageStatus.SCRAPED,
            apps_imported=0,
            apps_skipped=0,
            completed_at=utc_now(),
        )
        try:
            self._session.add(row)
            self._session.flush()
        except SQLAlchemyError as exc:
            raise StoreError(
                f"Failed to record page {page_number} for {category_url}: {exc}"
            ) from exc
        return row

    def list_for_category(self, category_url: str) -> list[ImportSession]:
        stmt = (
            select(ImportSession)
            .where(
                ImportSession.category_url == category_url,
                ImportSession.session_name.like(PAGE_NAME_FILTER),
            )
            .order_by(ImportSession.created_at.asc(), ImportSession.session_name.asc())
        )
        return list(self._session.scalars(stmt).all())

    def last_page_number(self, category_url: str) -> int:
        numbers = [
            number
            for number in (page_number_from_name(row.session_name) for row in self.list_for_category(category_url))
            if number is not None
        ]
        return max(numbers, default=0)

    def advance_latest_scraped(
        self,
        *,
        category_url: str,
        apps_imported: int,
        apps_skipped: int,
    ) -> ImportSession | None:
        """
        Move the newest ``scraped`` row of a category to ``imported``.

        The UPDATE is guarded by ``page_status = 'scraped'``; when a concurrent
        import already took the row, the next newest candidate is tried.
        Returns the advanced row, or None when nothing was left to advance.
        """

        skipped_ids: list[uuid.UUID] = []
        for _ in range(MAX_ADVANCE_ATTEMPTS):
            stmt = (
                select(ImportSession.id)
                .where(
                    ImportSession.category_url == category_url,
                    ImportSession.page_status == PageStatus.SCRAPED,
                    ImportSession.session_name.like(PAGE_NAME_FILTER),
                )
                .order_by(ImportSession.created_at.desc())
                .limit(1)
            )
            if skipped_ids:
                stmt = stmt.where(ImportSession.id.not_in(skipped_ids))
            candidate_id = self._session.scalar(stmt)
            if candidate_id is None:
                return None

            now = utc_now()
            try:
                result = self._session.execute(
                    update(ImportSession)
                    .where(
                        ImportSession.id == candidate_id,
                        ImportSession.page_status == PageStatus.SCRAPED,
                    )
                    .values(
                        page_status=PageStatus.IMPORTED,
                        apps_imported=apps_imported,
                        apps_skipped=apps_skipped,
                        imported_at=now,
                        updated_at=now,
                    )
                    .execution_options(synchronize_session="fetch")
                )
            except SQLAlchemyError as exc:
                raise StoreError(f"Failed to advance page progress for {category_url}: {exc}") from exc

            if result.rowcount == 1:
                return self._session.get(ImportSession, candidate_id)
            skipped_ids.append(candidate_id)
        return None

    def delete_for_category(self, category_url: str) -> int:
        try:
            result = self._session.execute(
                delete(ImportSession)
                .where(
                    ImportSession.category_url == category_url,
                    ImportSession.session_name.like(PAGE_NAME_FILTER),
                )
                .execution_options(synchronize_session="fetch")
            )
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to reset progress for {category_url}: {exc}") from exc
        return int(result.rowcount or 0)

    def list_recent(self, *, limit: int = 10) -> list[ImportSession]:
        stmt = select(ImportSession).order_by(ImportSession.created_at.desc()).limit(max(1, limit))
        return list(self._session.scalars(stmt).all())
