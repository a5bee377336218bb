"""
tests/test_itunes_match_service.py

Match recording and auto-apply rules against an in-memory catalog.
"""

from __future__ import annotations

import uuid

import pytest
import requests
from conftest import FakeHTTPSession
from sqlalchemy.orm import Session

from app.config import ExternalHTTPSettings, ItunesLookupSettings, MatchSettings
from app.connectors.itunes_connector import ItunesLookupConnector
from app.domain.errors import FetchError
from app.domain.itunes_match import MatchResult
from app.domain.scraped_app import ScrapedApp
from app.services.itunes_match_service import ItunesMatchService
from db.models.catalog_app import CatalogApp
from db.models.itunes_match_attempt import MatchAttemptStatus
from db.repositories.catalog_app_repository import CatalogAppRepository
from db.repositories.errors import AppNotFoundError, StoreError
from db.repositories.itunes_match_attempt_repository import ItunesMatchAttemptRepository


class StubConnector:
    """Returns a canned result (or raises) per searched app name."""

    def __init__(self, results: dict[str, MatchResult | Exception]) -> None:
        self.results = results
        self.searches: list[tuple[str, str | None]] = []

    def search_app(self, name: str, developer: str | None = None) -> MatchResult:
        self.searches.append((name, developer))
        result = self.results.get(name, MatchResult(found=False, confidence=0.0, error="No results found"))
        if isinstance(result, Exception):
            raise result
        return result


def _found(confidence: float, mas_id: str = "441258766") -> MatchResult:
    return MatchResult(
        found=True,
        confidence=confidence,
        mas_id=mas_id,
        mas_url=f"https://apps.apple.com/us/app/id{mas_id}",
        itunes_data={"trackId": int(mas_id)},
    )


def _add_app(db: Session, name: str, developer: str = "Surtees Studios") -> CatalogApp:
    app, _ = CatalogAppRepository(db).create_from_scraped(
        ScrapedApp(
            source_url=f"https://{name.lower().replace(' ', '')}.macupdate.com/",
            name=name,
            developer=developer,
        )
    )
    db.commit()
    return app


def _service(results: dict[str, MatchResult | Exception]) -> ItunesMatchService:
    return ItunesMatchService(connector=StubConnector(results), settings=MatchSettings())


class TestMatchSingle:
    def test_below_threshold_records_without_writing_catalog(self, db_session: Session) -> None:
        app = _add_app(db_session, "Bartender")
        outcome = _service({"Bartender": _found(0.79)}).match_single(db=db_session, app_id=app.id)

        assert outcome.found is True
        assert outcome.auto_applied is False
        assert outcome.attempt_status == MatchAttemptStatus.FOUND
        db_session.refresh(app)
        assert app.mas_id is None
        assert app.is_on_mas is False
        attempt = ItunesMatchAttemptRepository(db_session).get_for_app(app.id)
        assert attempt is not None
        assert attempt.status == MatchAttemptStatus.FOUND
        assert attempt.confidence_score == pytest.approx(0.79)

    def test_at_threshold_applies_and_confirms(self, db_session: Session) -> None:
        app = _add_app(db_session, "Bartender")
        outcome = _service({"Bartender": _found(0.8)}).match_single(db=db_session, app_id=app.id)

        assert outcome.auto_applied is True
        assert outcome.attempt_status == MatchAttemptStatus.CONFIRMED
        db_session.refresh(app)
        assert app.mas_id == "441258766"
        assert app.mas_url == "https://apps.apple.com/us/app/id441258766"
        assert app.is_on_mas is True
        attempt = ItunesMatchAttemptRepository(db_session).get_for_app(app.id)
        assert attempt.status == MatchAttemptStatus.CONFIRMED

    def test_auto_apply_disabled(self, db_session: Session) -> None:
        app = _add_app(db_session, "Bartender")
        outcome = _service({"Bartender": _found(0.95)}).match_single(
            db=db_session,
            app_id=app.id,
            auto_apply=False,
        )

        assert outcome.auto_applied is False
        db_session.refresh(app)
        assert app.mas_id is None

    def test_catalog_write_failure_keeps_found_attempt(
        self,
        db_session: Session,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        app = _add_app(db_session, "Bartender")

        def failing_apply(self, *, app_id, mas_id, mas_url):
            raise StoreError("catalog is read-only")

        monkeypatch.setattr(CatalogAppRepository, "apply_mas_identifiers", failing_apply)
        outcome = _service({"Bartender": _found(0.92)}).match_single(db=db_session, app_id=app.id)

        assert outcome.found is True
        assert outcome.auto_applied is False
        assert outcome.attempt_status == MatchAttemptStatus.FOUND
        attempt = ItunesMatchAttemptRepository(db_session).get_for_app(app.id)
        assert attempt.status == MatchAttemptStatus.FOUND
        assert attempt.mas_id == "441258766"
        db_session.refresh(app)
        assert app.mas_id is None

    def test_unreachable_api_records_failed_attempt(self, db_session: Session) -> None:
        app = _add_app(db_session, "Bartender")
        outcome = _service({"Bartender": FetchError("itunes: HTTP 403", status_code=403)}).match_single(
            db=db_session,
            app_id=app.id,
        )

        assert outcome.found is False
        assert outcome.error == "itunes: HTTP 403"
        attempt = ItunesMatchAttemptRepository(db_session).get_for_app(app.id)
        assert attempt.status == MatchAttemptStatus.FAILED
        assert attempt.error_message == "itunes: HTTP 403"

    def test_broken_transport_still_records_failed_attempt(self, db_session: Session) -> None:
        app = _add_app(db_session, "Bartender")
        connector = ItunesLookupConnector(
            settings=ItunesLookupSettings(rate_limit_per_second=1000.0),
            match_settings=MatchSettings(),
            http_settings=ExternalHTTPSettings(timeout_seconds=5.0, max_retries=1),
            session=FakeHTTPSession(
                [
                    requests.exceptions.ChunkedEncodingError("connection broken"),
                    requests.TooManyRedirects("redirect loop"),
                ]
            ),
            sleep=lambda seconds: None,
        )
        service = ItunesMatchService(connector=connector, settings=MatchSettings())

        outcome = service.match_single(db=db_session, app_id=app.id)

        assert outcome.found is False
        assert outcome.attempt_status == MatchAttemptStatus.FAILED
        attempt = ItunesMatchAttemptRepository(db_session).get_for_app(app.id)
        assert attempt is not None
        assert attempt.status == MatchAttemptStatus.FAILED
        assert "redirect loop" in attempt.error_message

    def test_rematch_replaces_the_attempt(self, db_session: Session) -> None:
        app = _add_app(db_session, "Bartender")
        service = _service({"Bartender": _found(0.5)})
        service.match_single(db=db_session, app_id=app.id)
        service._connector.results["Bartender"] = MatchResult(found=False, confidence=0.1, error="No match")
        service.match_single(db=db_session, app_id=app.id)

        attempts = service.list_attempts(db=db_session, app_id=app.id)
        assert len(attempts) == 1
        assert attempts[0].status == MatchAttemptStatus.FAILED
        assert attempts[0].mas_id is None

    def test_unknown_app(self, db_session: Session) -> None:
        with pytest.raises(AppNotFoundError):
            _service({}).match_single(db=db_session, app_id=uuid.uuid4())


class TestMatchBulk:
    def test_counts_and_skips_matched_apps(self, db_session: Session) -> None:
        bartender = _add_app(db_session, "Bartender")
        _add_app(db_session, "Alfred", developer="Running with Crayons")
        _add_app(db_session, "Obscure Tool", developer="Unknown Developer")
        service = _service({"Bartender": _found(0.97), "Alfred": _found(0.6, mas_id="405843582")})

        summary = service.match_bulk(db=db_session)

        assert summary.total == 3
        assert summary.found == 2
        assert summary.auto_applied == 1
        assert summary.failed == 1
        assert [outcome.app_name for outcome in summary.results] == ["Bartender", "Alfred", "Obscure Tool"]

        second = service.match_bulk(db=db_session)
        assert second.total == 2
        assert str(bartender.id) not in {outcome.app_id for outcome in second.results}

    def test_explicit_ids_and_limit(self, db_session: Session) -> None:
        first = _add_app(db_session, "Bartender")
        second = _add_app(db_session, "Alfred")
        service = _service({})

        summary = service.match_bulk(db=db_session, app_ids=[second.id])
        assert [outcome.app_id for outcome in summary.results] == [str(second.id)]

        limited = service.match_bulk(db=db_session, limit=1)
        assert [outcome.app_id for outcome in limited.results] == [str(first.id)]
