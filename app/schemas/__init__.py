"""
app/schemas package marker.
"""

from app.schemas.catalog import (
    BatchImportRequest,
    BatchImportResponse,
    CategoryProgressResponse,
    CategoryScrapeResponse,
    DuplicateListResponse,
    DuplicateRemovalResponse,
    ImportStatsResponse,
    ResetProgressResponse,
    ScrapeAppRequest,
    ScrapeAppResponse,
    ScrapeCategoryRequest,
    ScrapedAppPayload,
)
from app.schemas.itunes_match import (
    BulkMatchResponse,
    MatchAttemptListResponse,
    MatchBulkRequest,
    MatchOutcomeResponse,
    MatchSingleRequest,
)

__all__ = [
    "BatchImportRequest",
    "BatchImportResponse",
    "BulkMatchResponse",
    "CategoryProgressResponse",
    "CategoryScrapeResponse",
    "DuplicateListResponse",
    "DuplicateRemovalResponse",
    "ImportStatsResponse",
    "MatchAttemptListResponse",
    "MatchBulkRequest",
    "MatchOutcomeResponse",
    "MatchSingleRequest",
    "ResetProgressResponse",
    "ScrapeAppRequest",
    "ScrapeAppResponse",
    "ScrapeCategoryRequest",
    "ScrapedAppPayload",
]
