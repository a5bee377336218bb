"""
app/services/duplicate_resolver_service.py

Finds catalog apps that share a normalized (name, developer) signature and
removes all but the earliest-created record of each group.
"""

from __future__ import annotations

import logging
import uuid
from functools import lru_cache

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.duplicates import DuplicateGroup, DuplicateRemovalSummary
from app.matching.similarity import clean_name
from app.scraping.logging_utils import log_event
from db.repositories.catalog_app_repository import CatalogAppRepository
from db.repositories.errors import StoreError

logger = logging.getLogger(__name__)


def duplicate_signature(name: str | None, developer: str | None) -> str:
    return f"{clean_name(name)}|{clean_name(developer)}"


class DuplicateResolverService:
    def find_duplicates(self, *, db: Session) -> list[DuplicateGroup]:
        """
        Groups of two or more apps, ordered by signature; members are
        ordered by (created_at, id) so the first one is the keeper.
        """

        grouped: dict[str, list] = {}
        for app in CatalogAppRepository(db).list_for_duplicates():
            grouped.setdefault(duplicate_signature(app.name, app.developer), []).append(app)

        groups: list[DuplicateGroup] = []
        for signature in sorted(grouped):
            members = grouped[signature]
            if len(members) < 2:
                continue
            members.sort(key=lambda app: (app.created_at, str(app.id)))
            groups.append(
                DuplicateGroup(
                    signature=signature,
                    name=members[0].name,
                    developer=members[0].developer,
                    app_ids=[str(app.id) for app in members],
                )
            )
        return groups

    def remove_duplicates(self, *, db: Session) -> DuplicateRemovalSummary:
        """
        Delete every non-keeper of every group. Running it again finds no
        groups and removes nothing.
        """

        repository = CatalogAppRepository(db)
        removed: list[str] = []
        kept: list[str] = []
        errors: list[str] = []

        for group in self.find_duplicates(db=db):
            try:
                repository.delete_apps([uuid.UUID(app_id) for app_id in group.remove_ids])
                db.commit()
            except (StoreError, SQLAlchemyError) as exc:
                db.rollback()
                errors.append(f"{group.name}: {exc}")
                log_event(
                    logger,
                    logging.ERROR,
                    "duplicate_removal_failed",
                    signature=group.signature,
                    error=str(exc),
                )
                continue
            kept.append(group.keep_id)
            removed.extend(group.remove_ids)

        log_event(
            logger,
            logging.INFO,
            "duplicates_removed",
            removed=len(removed),
            kept=len(kept),
            errors=len(errors),
        )
        return DuplicateRemovalSummary(removed=removed, kept=kept, errors=errors)


@lru_cache(maxsize=1)
def get_duplicate_resolver_service() -> DuplicateResolverService:
    return DuplicateResolverService()
