"""
tests/test_duplicate_resolver.py

Duplicate detection by normalized (name, developer) and idempotent cleanup.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from app.domain.scraped_app import ScrapedApp
from app.services.duplicate_resolver_service import DuplicateResolverService, duplicate_signature
from db.models.catalog_app import CatalogApp
from db.models.itunes_match_attempt import MatchAttemptStatus
from db.repositories.catalog_app_repository import CatalogAppRepository
from db.repositories.itunes_match_attempt_repository import ItunesMatchAttemptRepository

BASE_TIME = datetime(2026, 9, 1, tzinfo=timezone.utc)


def _add(db: Session, name: str, developer: str, *, minutes: int, screenshots: int = 0) -> CatalogApp:
    app, _ = CatalogAppRepository(db).create_from_scraped(
        ScrapedApp(
            source_url=f"https://listing.example/{minutes}",
            name=name,
            developer=developer,
            screenshot_urls=tuple(f"https://cdn.example/{minutes}/{index}.png" for index in range(screenshots)),
        )
    )
    app.created_at = BASE_TIME + timedelta(minutes=minutes)
    db.commit()
    return app


def test_signature_normalizes_case_and_punctuation() -> None:
    assert duplicate_signature("Bartender!", " SURTEES  Studios ") == "bartender|surtees studios"


class TestFindDuplicates:
    def test_groups_keep_earliest_first(self, db_session: Session) -> None:
        later = _add(db_session, "bartender!", "surtees studios", minutes=5)
        earliest = _add(db_session, "Bartender", "Surtees Studios", minutes=1)
        _add(db_session, "Bartender", "Someone Else", minutes=2)
        _add(db_session, "Alfred", "Running with Crayons", minutes=3)

        groups = DuplicateResolverService().find_duplicates(db=db_session)

        assert len(groups) == 1
        group = groups[0]
        assert group.signature == "bartender|surtees studios"
        assert group.app_ids == [str(earliest.id), str(later.id)]
        assert group.keep_id == str(earliest.id)
        assert group.remove_ids == [str(later.id)]
        assert group.count == 2

    def test_ties_break_on_id(self, db_session: Session) -> None:
        first = _add(db_session, "Hazel", "Noodlesoft", minutes=1)
        second = _add(db_session, "Hazel", "Noodlesoft", minutes=1)

        (group,) = DuplicateResolverService().find_duplicates(db=db_session)

        assert group.app_ids == sorted([str(first.id), str(second.id)])

    def test_no_duplicates(self, db_session: Session) -> None:
        _add(db_session, "Hazel", "Noodlesoft", minutes=1)
        assert DuplicateResolverService().find_duplicates(db=db_session) == []


class TestRemoveDuplicates:
    def test_removes_copies_with_children_and_is_idempotent(self, db_session: Session) -> None:
        keeper = _add(db_session, "Bartender", "Surtees Studios", minutes=1)
        copy_a = _add(db_session, "Bartender", "Surtees Studios", minutes=2, screenshots=2)
        copy_b = _add(db_session, "BARTENDER", "Surtees Studios.", minutes=3)
        other = _add(db_session, "Alfred", "Running with Crayons", minutes=4)
        ItunesMatchAttemptRepository(db_session).upsert(
            app_id=copy_a.id,
            search_term="Bartender",
            developer_name="Surtees Studios",
            status=MatchAttemptStatus.FAILED,
            confidence_score=0.1,
            mas_id=None,
            mas_url=None,
            itunes_response=None,
            error_message="No results found",
        )
        db_session.commit()
        service = DuplicateResolverService()

        summary = service.remove_duplicates(db=db_session)

        assert summary.kept == [str(keeper.id)]
        assert sorted(summary.removed) == sorted([str(copy_a.id), str(copy_b.id)])
        assert summary.errors == []
        repository = CatalogAppRepository(db_session)
        assert repository.count_all() == 2
        assert repository.get(keeper.id) is not None
        assert repository.get(other.id) is not None
        assert repository.list_screenshots(copy_a.id) == []
        assert ItunesMatchAttemptRepository(db_session).get_for_app(copy_a.id) is None

        again = service.remove_duplicates(db=db_session)
        assert again.removed == []
        assert again.kept == []
        assert repository.count_all() == 2
