"""
app/domain package marker.
"""

from app.domain.catalog_import import (
    BatchImportSummary,
    ImportItemResult,
    ImportItemStatus,
    ImportStats,
    RecentSession,
)
from app.domain.catalog_scraping import CategoryScrapeResult, PaginationInfo
from app.domain.category_progress import CategoryProgress, PageProgressEntry
from app.domain.duplicates import DuplicateGroup, DuplicateRemovalSummary
from app.domain.errors import FetchError, ImportTimeoutError, ParseError, PipelineError
from app.domain.itunes_match import BulkMatchSummary, MatchOutcome, MatchResult
from app.domain.scraped_app import AppPreview, ScrapedApp

__all__ = [
    "AppPreview",
    "BatchImportSummary",
    "BulkMatchSummary",
    "CategoryProgress",
    "CategoryScrapeResult",
    "DuplicateGroup",
    "DuplicateRemovalSummary",
    "FetchError",
    "ImportItemResult",
    "ImportItemStatus",
    "ImportStats",
    "ImportTimeoutError",
    "MatchOutcome",
    "MatchResult",
    "PageProgressEntry",
    "PaginationInfo",
    "ParseError",
    "PipelineError",
    "RecentSession",
    "ScrapedApp",
]
