"""
app/services/catalog_import_service.py

Batch import of scraped apps into the catalog under a wall-clock budget.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from functools import lru_cache

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import CatalogImportSettings, get_catalog_import_settings
from app.domain.catalog_import import (
    BatchImportSummary,
    ImportItemResult,
    ImportItemStatus,
    ImportStats,
    RecentSession,
)
from app.domain.errors import ImportTimeoutError
from app.domain.scraped_app import ScrapedApp
from app.scraping.logging_utils import log_event
from db.models.catalog_app import CatalogAppSource
from db.repositories.catalog_app_repository import CatalogAppRepository
from db.repositories.errors import RecordValidationError, StoreError
from db.repositories.import_session_repository import ImportSessionRepository

logger = logging.getLogger(__name__)

RECENT_IMPORT_DAYS = 7
RECENT_SESSION_LIMIT = 10


class CatalogImportService:
    """
    Imports scraped apps one by one, isolating failures per item, and marks
    the category's newest scraped page as imported when anything succeeded.
    """

    def __init__(
        self,
        *,
        settings: CatalogImportSettings | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._settings = settings or get_catalog_import_settings()
        self._clock = clock
        self._sleep = sleep

    @property
    def settings(self) -> CatalogImportSettings:
        return self._settings

    def import_batch(
        self,
        *,
        db: Session,
        apps: Sequence[ScrapedApp],
        category_url: str | None = None,
    ) -> BatchImportSummary:
        """
        Import ``apps`` and return per-item results.

        Raises:
            ValueError: when the batch exceeds the configured maximum size.
            ImportTimeoutError: when the budget runs out; ``partial`` holds
                everything already committed.
        """

        if len(apps) > self._settings.max_batch_size:
            raise ValueError(
                f"Batch of {len(apps)} apps exceeds the maximum of {self._settings.max_batch_size}."
            )

        started = self._clock()
        repository = CatalogAppRepository(db)
        results: list[ImportItemResult] = []

        for index, app in enumerate(apps):
            self._check_budget(started, total=len(apps), results=results, checkpoint="before_item")
            results.append(self._import_one(db=db, repository=repository, app=app))
            if self._settings.item_delay_seconds > 0 and index < len(apps) - 1:
                self._sleep(self._settings.item_delay_seconds)

        self._check_budget(started, total=len(apps), results=results, checkpoint="after_items")

        successful = sum(1 for result in results if result.success)
        failed = len(results) - successful
        progress_updated = False
        if category_url and successful > 0:
            self._check_budget(started, total=len(apps), results=results, checkpoint="before_progress")
            progress_updated = self._advance_progress(
                db=db,
                category_url=category_url,
                successful=successful,
                failed=failed,
            )

        summary = BatchImportSummary(
            total=len(apps),
            successful=successful,
            failed=failed,
            results=results,
            execution_time_ms=self._elapsed_ms(started),
            progress_updated=progress_updated,
        )
        log_event(
            logger,
            logging.INFO,
            "batch_import_completed",
            total=summary.total,
            successful=summary.successful,
            failed=summary.failed,
            category_url=category_url,
            progress_updated=progress_updated,
            execution_time_ms=summary.execution_time_ms,
        )
        return summary

    def get_import_stats(self, *, db: Session) -> ImportStats:
        apps = CatalogAppRepository(db)
        sessions = ImportSessionRepository(db)
        recent = [
            RecentSession(
                session_name=row.session_name,
                category_url=row.category_url,
                page_status=row.page_status,
                apps_imported=row.apps_imported,
                apps_skipped=row.apps_skipped,
                created_at=row.created_at.isoformat() if row.created_at else None,
            )
            for row in sessions.list_recent(limit=RECENT_SESSION_LIMIT)
        ]
        return ImportStats(
            total_apps=apps.count_all(),
            listing_apps=apps.count_by_source(CatalogAppSource.CUSTOM),
            recent_imports=apps.count_created_since(days=RECENT_IMPORT_DAYS),
            recent_sessions=recent,
        )

    def _import_one(
        self,
        *,
        db: Session,
        repository: CatalogAppRepository,
        app: ScrapedApp,
    ) -> ImportItemResult:
        name = (app.name or "").strip()
        source_url = (app.source_url or "").strip()
        try:
            if not name or not source_url:
                raise RecordValidationError("App name and source_url are required")

            existing = repository.find_existing(name=name, source_url=source_url)
            if existing is not None:
                return ImportItemResult(
                    name=name,
                    source_url=source_url,
                    success=True,
                    status=ImportItemStatus.EXISTING,
                    message="App already exists in catalog",
                    is_new=False,
                    app_id=str(existing.id),
                )

            created, screenshots = repository.create_from_scraped(app)
            app_id = str(created.id)
            db.commit()
        except (RecordValidationError, StoreError, SQLAlchemyError) as exc:
            db.rollback()
            log_event(
                logger,
                logging.WARNING,
                "batch_import_item_failed",
                name=name or None,
                source_url=source_url or None,
                error=str(exc),
            )
            return ImportItemResult(
                name=name,
                source_url=source_url,
                success=False,
                status=ImportItemStatus.FAILED,
                message=str(exc),
            )

        return ImportItemResult(
            name=name,
            source_url=source_url,
            success=True,
            status=ImportItemStatus.IMPORTED,
            message="App imported",
            is_new=True,
            app_id=app_id,
            screenshots=screenshots,
        )

    def _advance_progress(
        self,
        *,
        db: Session,
        category_url: str,
        successful: int,
        failed: int,
    ) -> bool:
        try:
            row = ImportSessionRepository(db).advance_latest_scraped(
                category_url=category_url,
                apps_imported=successful,
                apps_skipped=failed,
            )
            db.commit()
        except (StoreError, SQLAlchemyError) as exc:
            db.rollback()
            log_event(
                logger,
                logging.ERROR,
                "page_progress_update_failed",
                category_url=category_url,
                error=str(exc),
            )
            return False

        if row is None:
            log_event(logger, logging.INFO, "page_progress_not_found", category_url=category_url)
            return False
        log_event(
            logger,
            logging.INFO,
            "page_progress_advanced",
            category_url=category_url,
            session_name=row.session_name,
            apps_imported=successful,
            apps_skipped=failed,
        )
        return True

    def _check_budget(
        self,
        started: float,
        *,
        total: int,
        results: list[ImportItemResult],
        checkpoint: str,
    ) -> None:
        elapsed = self._clock() - started
        if elapsed < self._settings.time_budget_seconds:
            return
        successful = sum(1 for result in results if result.success)
        partial = BatchImportSummary(
            total=total,
            successful=successful,
            failed=len(results) - successful,
            results=list(results),
            execution_time_ms=self._elapsed_ms(started),
        )
        log_event(
            logger,
            logging.WARNING,
            "batch_import_timeout",
            checkpoint=checkpoint,
            processed=len(results),
            total=total,
            budget_seconds=self._settings.time_budget_seconds,
        )
        raise ImportTimeoutError(
            f"Batch import exceeded {self._settings.time_budget_seconds:g}s budget "
            f"after {len(results)} of {total} apps",
            partial=partial,
        )

    def _elapsed_ms(self, started: float) -> int:
        return int(round((self._clock() - started) * 1000))


@lru_cache(maxsize=1)
def get_catalog_import_service() -> CatalogImportService:
    """
    Build and cache the catalog import service.
    """

    return CatalogImportService()
