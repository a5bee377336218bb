"""
app/services/itunes_match_service.py

Resolves catalog apps against the iTunes lookup API and applies confident
matches to the catalog.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from functools import lru_cache

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import (
    MatchSettings,
    get_external_http_settings,
    get_itunes_lookup_settings,
    get_match_settings,
)
from app.connectors.itunes_connector import ItunesLookupConnector
from app.domain.errors import FetchError
from app.domain.itunes_match import BulkMatchSummary, MatchOutcome, MatchResult
from app.scraping.logging_utils import log_event
from db.models.itunes_match_attempt import ItunesMatchAttempt, MatchAttemptStatus
from db.repositories.catalog_app_repository import CatalogAppRepository
from db.repositories.errors import StoreError
from db.repositories.itunes_match_attempt_repository import ItunesMatchAttemptRepository

logger = logging.getLogger(__name__)


class ItunesMatchService:
    """
    Records one attempt per app and lookup, and writes MAS identifiers to the
    catalog only for matches at or above the auto-apply threshold.
    """

    def __init__(
        self,
        *,
        connector: ItunesLookupConnector,
        settings: MatchSettings,
    ) -> None:
        self._connector = connector
        self._settings = settings

    @property
    def settings(self) -> MatchSettings:
        return self._settings

    def match_single(
        self,
        *,
        db: Session,
        app_id: uuid.UUID,
        auto_apply: bool = True,
    ) -> MatchOutcome:
        """
        Look up one catalog app and record the attempt.

        Raises:
            AppNotFoundError: when ``app_id`` is not in the catalog.
            StoreError: when the attempt itself cannot be recorded.
        """

        apps = CatalogAppRepository(db)
        attempts = ItunesMatchAttemptRepository(db)
        app = apps.get_or_raise(app_id)
        app_name = app.name
        developer = app.developer

        try:
            result = self._connector.search_app(app_name, developer)
        except FetchError as exc:
            result = MatchResult(found=False, confidence=0.0, error=str(exc))

        status = MatchAttemptStatus.FOUND if result.found else MatchAttemptStatus.FAILED
        try:
            attempts.upsert(
                app_id=app_id,
                search_term=app_name,
                developer_name=developer,
                status=status,
                confidence_score=result.confidence,
                mas_id=result.mas_id,
                mas_url=result.mas_url,
                itunes_response=result.itunes_data,
                error_message=result.error,
            )
            db.commit()
        except (StoreError, SQLAlchemyError):
            db.rollback()
            raise

        log_event(
            logger,
            logging.INFO,
            "itunes_match_recorded",
            app_id=str(app_id),
            found=result.found,
            confidence=result.confidence,
            status=status,
        )

        auto_applied = False
        if auto_apply and result.found and result.confidence >= self._settings.auto_apply_threshold:
            auto_applied = self._apply(db=db, app_id=app_id, result=result)
            if auto_applied:
                status = MatchAttemptStatus.CONFIRMED

        return MatchOutcome(
            app_id=str(app_id),
            app_name=app_name,
            found=result.found,
            confidence=result.confidence,
            mas_id=result.mas_id,
            mas_url=result.mas_url,
            error=result.error,
            auto_applied=auto_applied,
            attempt_status=status,
        )

    def match_bulk(
        self,
        *,
        db: Session,
        app_ids: Sequence[uuid.UUID] | None = None,
        auto_apply: bool = True,
        limit: int | None = None,
    ) -> BulkMatchSummary:
        """
        Match apps that still lack MAS identifiers, in batches.

        Per-app store failures are counted as failed and do not stop the run.
        """

        effective_limit = min(self._settings.bulk_limit, max(1, limit or self._settings.bulk_limit))
        candidates = CatalogAppRepository(db).list_unmatched(limit=effective_limit, app_ids=app_ids)
        candidate_ids = [app.id for app in candidates]

        results: list[MatchOutcome] = []
        failed = 0
        batch_size = self._settings.bulk_batch_size
        for offset in range(0, len(candidate_ids), batch_size):
            for app_id in candidate_ids[offset : offset + batch_size]:
                try:
                    outcome = self.match_single(db=db, app_id=app_id, auto_apply=auto_apply)
                except (StoreError, SQLAlchemyError) as exc:
                    failed += 1
                    log_event(
                        logger,
                        logging.ERROR,
                        "itunes_match_failed",
                        app_id=str(app_id),
                        error=str(exc),
                    )
                    continue
                results.append(outcome)
                if not outcome.found:
                    failed += 1
            log_event(
                logger,
                logging.INFO,
                "itunes_match_batch_completed",
                processed=min(offset + batch_size, len(candidate_ids)),
                total=len(candidate_ids),
            )

        return BulkMatchSummary(
            total=len(candidate_ids),
            found=sum(1 for outcome in results if outcome.found),
            auto_applied=sum(1 for outcome in results if outcome.auto_applied),
            failed=failed,
            results=results,
        )

    def list_attempts(
        self,
        *,
        db: Session,
        app_id: uuid.UUID | None = None,
        status: str | None = None,
        limit: int = 100,
    ) -> list[ItunesMatchAttempt]:
        return ItunesMatchAttemptRepository(db).list_attempts(app_id=app_id, status=status, limit=limit)

    def _apply(self, *, db: Session, app_id: uuid.UUID, result: MatchResult) -> bool:
        if not result.mas_id or not result.mas_url:
            return False
        try:
            CatalogAppRepository(db).apply_mas_identifiers(
                app_id=app_id,
                mas_id=result.mas_id,
                mas_url=result.mas_url,
            )
            db.commit()
        except (StoreError, SQLAlchemyError) as exc:
            db.rollback()
            log_event(
                logger,
                logging.ERROR,
                "itunes_match_apply_failed",
                app_id=str(app_id),
                error=str(exc),
            )
            return False

        try:
            ItunesMatchAttemptRepository(db).mark_confirmed(app_id=app_id)
            db.commit()
        except (StoreError, SQLAlchemyError) as exc:
            db.rollback()
            log_event(
                logger,
                logging.ERROR,
                "itunes_match_confirm_failed",
                app_id=str(app_id),
                error=str(exc),
            )
        log_event(
            logger,
            logging.INFO,
            "itunes_match_applied",
            app_id=str(app_id),
            mas_id=result.mas_id,
            confidence=result.confidence,
        )
        return True


@lru_cache(maxsize=1)
def get_itunes_match_service() -> ItunesMatchService:
    """
    Build and cache the iTunes match service.
    """

    match_settings = get_match_settings()
    connector = ItunesLookupConnector(
        settings=get_itunes_lookup_settings(),
        match_settings=match_settings,
        http_settings=get_external_http_settings(),
    )
    return ItunesMatchService(connector=connector, settings=match_settings)
