"""
Repository-layer exceptions for catalog store flows.
"""

from __future__ import annotations


class CatalogRepositoryError(Exception):
    """Base exception for catalog store failures."""


class RecordValidationError(CatalogRepositoryError):
    """Raised when identifying fields are missing before a store write."""


class StoreError(CatalogRepositoryError):
    """Raised when the catalog store rejects a write."""


class AppNotFoundError(CatalogRepositoryError):
    """Raised when a referenced catalog app does not exist."""
