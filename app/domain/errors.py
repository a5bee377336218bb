"""
app/domain/errors.py

Pipeline error kinds shared by the crawler, extraction and import flows.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.domain.catalog_import import BatchImportSummary


class PipelineError(Exception):
    """Base exception for ingestion pipeline failures."""


class FetchError(PipelineError):
    """Raised when a remote document cannot be fetched (network or non-2xx)."""

    def __init__(self, message: str, *, url: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ParseError(PipelineError):
    """Raised when a document yields nothing usable."""


class ImportTimeoutError(PipelineError):
    """
    Raised when a batch import exceeds its wall-clock budget.

    ``partial`` holds the results gathered before the budget ran out; that
    work is already committed.
    """

    def __init__(self, message: str, *, partial: "BatchImportSummary") -> None:
        super().__init__(message)
        self.partial = partial
