"""
tests/test_category_progress_service.py

Derived per-category crawl/import progress.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from app.services.category_progress_service import CategoryProgressService
from db.models.import_session import PageStatus
from db.repositories.import_session_repository import ImportSessionRepository

CATEGORY_URL = "https://www.macupdate.com/explore/categories/developer-tools"
OTHER_URL = "https://www.macupdate.com/explore/categories/games"


def _record(db: Session, category_url: str, category_name: str, pages: dict[int, str]) -> None:
    repository = ImportSessionRepository(db)
    base = datetime(2026, 10, 1, tzinfo=timezone.utc)
    for page_number, status in pages.items():
        row = repository.record_page_scraped(
            category_url=category_url,
            category_name=category_name,
            page_number=page_number,
        )
        row.created_at = base + timedelta(minutes=page_number)
        if status == PageStatus.IMPORTED:
            row.page_status = PageStatus.IMPORTED
            row.apps_imported = 5
    db.commit()


class TestGetCategoryProgress:
    def test_mixed_progress(self, db_session: Session) -> None:
        _record(
            db_session,
            CATEGORY_URL,
            "Developer Tools",
            {1: PageStatus.IMPORTED, 2: PageStatus.SCRAPED, 3: PageStatus.SCRAPED},
        )

        progress = CategoryProgressService().get_category_progress(db=db_session, category_url=CATEGORY_URL)

        assert progress.category_name == "Developer Tools"
        assert progress.total_pages == 3
        assert progress.pages_scraped == 3
        assert progress.pages_imported == 1
        assert progress.pages_pending == 2
        assert progress.last_scraped_page == 3
        assert progress.last_imported_page == 1
        assert progress.next_page_to_scrape == 4
        assert progress.next_page_to_import == 2
        assert progress.scrape_progress_percent == 100.0
        assert progress.import_progress_percent == 33.0
        assert [page.page_number for page in progress.pages] == [1, 2, 3]
        assert progress.pages[0].apps_imported == 5

    def test_missing_page_lowers_scrape_percent(self, db_session: Session) -> None:
        _record(db_session, CATEGORY_URL, "Developer Tools", {1: PageStatus.SCRAPED, 3: PageStatus.SCRAPED})

        progress = CategoryProgressService().get_category_progress(db=db_session, category_url=CATEGORY_URL)

        assert progress.total_pages == 3
        assert progress.pages_scraped == 2
        assert progress.scrape_progress_percent == 67.0
        assert progress.import_progress_percent == 0.0

    def test_unknown_category(self, db_session: Session) -> None:
        progress = CategoryProgressService().get_category_progress(db=db_session, category_url=CATEGORY_URL)

        assert progress.category_name == "Developer Tools"
        assert progress.total_pages == 0
        assert progress.pages == []
        assert progress.last_scraped_page is None
        assert progress.next_page_to_scrape == 1
        assert progress.next_page_to_import is None
        assert progress.scrape_progress_percent == 0.0
        assert progress.import_progress_percent == 0.0


def test_reset_only_touches_one_category(db_session: Session) -> None:
    _record(db_session, CATEGORY_URL, "Developer Tools", {1: PageStatus.SCRAPED, 2: PageStatus.IMPORTED})
    _record(db_session, OTHER_URL, "Games", {1: PageStatus.SCRAPED})
    service = CategoryProgressService()

    removed = service.reset_category_progress(db=db_session, category_url=CATEGORY_URL)

    assert removed == 2
    assert service.get_category_progress(db=db_session, category_url=CATEGORY_URL).pages == []
    assert service.get_category_progress(db=db_session, category_url=OTHER_URL).pages_scraped == 1
