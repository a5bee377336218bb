"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.catalog_app import CatalogApp, CatalogAppSource, CatalogAppStatus
from db.models.category import Category
from db.models.import_session import ImportSession, ImportSessionSourceType, PageStatus
from db.models.itunes_match_attempt import ItunesMatchAttempt, MatchAttemptStatus
from db.models.screenshot import Screenshot

__all__ = [
    "CatalogApp",
    "CatalogAppSource",
    "CatalogAppStatus",
    "Category",
    "ImportSession",
    "ImportSessionSourceType",
    "ItunesMatchAttempt",
    "MatchAttemptStatus",
    "PageStatus",
    "Screenshot",
]
