"""
tests/test_catalog_import_service.py

Batch import: per-item isolation, the wall-clock budget and page progress.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from conftest import FakeClock
from sqlalchemy.orm import Session

from app.config import CatalogImportSettings
from app.domain.catalog_import import ImportItemStatus
from app.domain.errors import ImportTimeoutError
from app.domain.scraped_app import ScrapedApp
from app.services.catalog_import_service import CatalogImportService
from db.models.import_session import PageStatus
from db.repositories.catalog_app_repository import CatalogAppRepository
from db.repositories.category_repository import CategoryRepository
from db.repositories.errors import StoreError
from db.repositories.import_session_repository import ImportSessionRepository

CATEGORY_URL = "https://www.macupdate.com/explore/categories/utilities"


def _scraped(name: str, **overrides) -> ScrapedApp:
    values = {
        "source_url": f"https://{name.lower().replace(' ', '') or 'blank'}.macupdate.com/",
        "name": name,
        "developer": "Surtees Studios",
    }
    values.update(overrides)
    return ScrapedApp(**values)


def _service(**settings) -> CatalogImportService:
    values = {"time_budget_seconds": 25.0, "max_batch_size": 100, "item_delay_seconds": 0.0}
    values.update(settings)
    return CatalogImportService(settings=CatalogImportSettings(**values), clock=FakeClock(), sleep=lambda _s: None)


def _record_pages(db: Session, *page_numbers: int) -> None:
    repository = ImportSessionRepository(db)
    base = datetime(2026, 10, 1, tzinfo=timezone.utc)
    for page_number in page_numbers:
        row = repository.record_page_scraped(
            category_url=CATEGORY_URL,
            category_name="Utilities",
            page_number=page_number,
        )
        row.created_at = base + timedelta(minutes=page_number)
    db.commit()


class TestImportBatch:
    def test_mixed_batch_isolates_failures(self, db_session: Session) -> None:
        service = _service()
        service.import_batch(db=db_session, apps=[_scraped("Bartender")])

        summary = service.import_batch(
            db=db_session,
            apps=[_scraped("Bartender"), _scraped("Alfred"), _scraped("")],
        )

        assert (summary.total, summary.successful, summary.failed) == (3, 2, 1)
        assert [result.status for result in summary.results] == [
            ImportItemStatus.EXISTING,
            ImportItemStatus.IMPORTED,
            ImportItemStatus.FAILED,
        ]
        assert summary.results[0].is_new is False
        assert summary.results[1].is_new is True
        assert CatalogAppRepository(db_session).count_all() == 2

    def test_new_app_fields_and_screenshots(self, db_session: Session) -> None:
        scraped = _scraped(
            "Bartender",
            price_text="$16.00",
            rating_text="4.5",
            rating_count=1200,
            category="Music & Audio",
            requirements="macOS 12.0 or later",
            screenshot_urls=("https://cdn.example/1.png", "https://cdn.example/2.png"),
        )
        summary = _service().import_batch(db=db_session, apps=[scraped])

        result = summary.results[0]
        assert result.screenshots == 2
        repository = CatalogAppRepository(db_session)
        app = repository.find_existing(name="Bartender", source_url=scraped.source_url)
        assert str(app.id) == result.app_id
        assert app.price == pytest.approx(16.0)
        assert app.is_free is False
        assert app.rating == pytest.approx(4.5)
        assert app.minimum_os_version == "macOS 12.0 or later"
        category = CategoryRepository(db_session).get_by_slug("video-audio")
        assert app.category_id == category.id
        screenshots = repository.list_screenshots(app.id)
        assert [(shot.display_order, shot.caption) for shot in screenshots] == [
            (1, "Bartender Screenshot 1"),
            (2, "Bartender Screenshot 2"),
        ]

    def test_free_app_without_category_uses_default(self, db_session: Session) -> None:
        _service().import_batch(db=db_session, apps=[_scraped("Alfred", price_text="Free")])

        app = CatalogAppRepository(db_session).find_existing(
            name="Alfred",
            source_url="https://alfred.macupdate.com/",
        )
        assert app.is_free is True
        assert app.price == 0.0
        assert app.category_id == CategoryRepository(db_session).get_by_slug("utilities").id

    def test_oversized_batch_is_rejected(self, db_session: Session) -> None:
        with pytest.raises(ValueError):
            _service(max_batch_size=2).import_batch(
                db=db_session,
                apps=[_scraped("A"), _scraped("B"), _scraped("C")],
            )
        assert CatalogAppRepository(db_session).count_all() == 0


class TestTimeBudget:
    def test_timeout_carries_committed_partial_results(self, db_session: Session) -> None:
        clock = FakeClock()
        service = CatalogImportService(
            settings=CatalogImportSettings(time_budget_seconds=10.0, max_batch_size=100, item_delay_seconds=6.0),
            clock=clock,
            sleep=clock.advance,
        )

        with pytest.raises(ImportTimeoutError) as exc_info:
            service.import_batch(
                db=db_session,
                apps=[_scraped("Alpha"), _scraped("Beta"), _scraped("Gamma")],
                category_url=CATEGORY_URL,
            )

        partial = exc_info.value.partial
        assert partial.total == 3
        assert partial.successful == 2
        assert [result.name for result in partial.results] == ["Alpha", "Beta"]
        assert CatalogAppRepository(db_session).count_all() == 2


class TestPageProgress:
    def test_first_page_is_marked_imported(self, db_session: Session) -> None:
        _record_pages(db_session, 1)

        summary = _service().import_batch(
            db=db_session,
            apps=[_scraped("Alpha"), _scraped("Beta"), _scraped("")],
            category_url=CATEGORY_URL,
        )

        assert summary.progress_updated is True
        (row,) = ImportSessionRepository(db_session).list_for_category(CATEGORY_URL)
        assert row.session_name == "Utilities - Page 1"
        assert row.page_status == PageStatus.IMPORTED
        assert row.apps_imported == 2
        assert row.apps_skipped == 1
        assert row.imported_at is not None

    def test_newest_scraped_page_is_advanced_first(self, db_session: Session) -> None:
        _record_pages(db_session, 1, 2)
        service = _service()

        service.import_batch(db=db_session, apps=[_scraped("Alpha")], category_url=CATEGORY_URL)
        statuses = {
            row.session_name: row.page_status
            for row in ImportSessionRepository(db_session).list_for_category(CATEGORY_URL)
        }
        assert statuses == {
            "Utilities - Page 1": PageStatus.SCRAPED,
            "Utilities - Page 2": PageStatus.IMPORTED,
        }

        service.import_batch(db=db_session, apps=[_scraped("Beta")], category_url=CATEGORY_URL)
        third = service.import_batch(db=db_session, apps=[_scraped("Gamma")], category_url=CATEGORY_URL)
        assert third.progress_updated is False

    def test_no_success_leaves_progress_alone(self, db_session: Session) -> None:
        _record_pages(db_session, 1)

        summary = _service().import_batch(db=db_session, apps=[_scraped("")], category_url=CATEGORY_URL)

        assert summary.progress_updated is False
        (row,) = ImportSessionRepository(db_session).list_for_category(CATEGORY_URL)
        assert row.page_status == PageStatus.SCRAPED

    def test_progress_failure_does_not_fail_the_batch(
        self,
        db_session: Session,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        _record_pages(db_session, 1)

        def failing_advance(self, *, category_url, apps_imported, apps_skipped):
            raise StoreError("progress table locked")

        monkeypatch.setattr(ImportSessionRepository, "advance_latest_scraped", failing_advance)
        summary = _service().import_batch(db=db_session, apps=[_scraped("Alpha")], category_url=CATEGORY_URL)

        assert summary.successful == 1
        assert summary.progress_updated is False
        assert CatalogAppRepository(db_session).count_all() == 1


def test_import_stats(db_session: Session) -> None:
    _record_pages(db_session, 1)
    _service().import_batch(db=db_session, apps=[_scraped("Alpha"), _scraped("Beta")], category_url=CATEGORY_URL)

    stats = _service().get_import_stats(db=db_session)

    assert stats.total_apps == 2
    assert stats.listing_apps == 2
    assert stats.recent_imports == 2
    assert [session.session_name for session in stats.recent_sessions] == ["Utilities - Page 1"]
    assert stats.recent_sessions[0].page_status == PageStatus.IMPORTED
