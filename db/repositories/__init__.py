"""
Repository layer exports.
"""

from db.repositories.catalog_app_repository import CatalogAppRepository
from db.repositories.category_repository import CategoryRepository, resolve_category_slug
from db.repositories.errors import (
    AppNotFoundError,
    CatalogRepositoryError,
    RecordValidationError,
    StoreError,
)
from db.repositories.import_session_repository import (
    ImportSessionRepository,
    page_number_from_name,
    page_session_name,
)
from db.repositories.itunes_match_attempt_repository import ItunesMatchAttemptRepository

__all__ = [
    "CatalogAppRepository",
    "CategoryRepository",
    "ImportSessionRepository",
    "ItunesMatchAttemptRepository",
    "resolve_category_slug",
    "page_number_from_name",
    "page_session_name",
    "CatalogRepositoryError",
    "RecordValidationError",
    "StoreError",
    "AppNotFoundError",
]
