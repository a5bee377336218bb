"""
app/schemas/catalog.py

Request and response schemas for listing crawls, imports, progress and
duplicate maintenance.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from app.domain.scraped_app import ScrapedApp


class ScrapeCategoryRequest(BaseModel):
    category_url: str = Field(..., min_length=1)
    limit: int | None = Field(default=None, ge=1)
    reset: bool = False


class ScrapeAppRequest(BaseModel):
    url: str = Field(..., min_length=1)


class AppPreviewResponse(BaseModel):
    url: str
    name: str
    developer: str | None = None
    version: str | None = None
    price_text: str | None = None
    rating_text: str | None = None
    size_bytes: int | None = None
    source: str


class PaginationResponse(BaseModel):
    current_page: int
    total_pages: int | None = None
    processed_pages: list[int] = Field(default_factory=list)


class CategoryScrapeResponse(BaseModel):
    success: bool = True
    error: str | None = None
    category_name: str
    total_apps: int = Field(..., ge=0)
    new_apps: int = Field(..., ge=0)
    existing_apps: int = Field(..., ge=0)
    app_urls: list[str] = Field(default_factory=list)
    new_app_urls: list[str] = Field(default_factory=list)
    app_previews: list[AppPreviewResponse] = Field(default_factory=list)
    pagination: PaginationResponse
    errors: list[str] = Field(default_factory=list)
    execution_time_ms: int = Field(..., ge=0)


class ScrapedAppPayload(BaseModel):
    """
    One app as submitted for import; identity fields may be missing and are
    then reported as a per-item failure.
    """

    source_url: str | None = None
    name: str | None = None
    developer: str | None = None
    version: str | None = None
    price_text: str | None = None
    size_bytes: int | None = Field(default=None, ge=0)
    category: str | None = None
    screenshot_urls: list[str] = Field(default_factory=list)
    rating_text: str | None = None
    rating_count: int | None = Field(default=None, ge=0)
    description: str | None = None
    icon_url: str | None = None
    requirements: str | None = None

    def to_domain(self) -> ScrapedApp:
        return ScrapedApp(
            source_url=self.source_url or "",
            name=self.name or "",
            developer=self.developer or "",
            version=self.version,
            price_text=self.price_text,
            size_bytes=self.size_bytes,
            category=self.category,
            screenshot_urls=tuple(self.screenshot_urls),
            rating_text=self.rating_text,
            rating_count=self.rating_count,
            description=self.description,
            icon_url=self.icon_url,
            requirements=self.requirements,
        )


class ScrapeAppResponse(BaseModel):
    success: bool = True
    error: str | None = None
    app: ScrapedAppPayload


class BatchImportRequest(BaseModel):
    apps: list[ScrapedAppPayload] = Field(..., min_length=1)
    category_url: str | None = None


class ImportItemResponse(BaseModel):
    name: str
    source_url: str
    success: bool
    status: str
    message: str
    is_new: bool = False
    app_id: str | None = None
    screenshots: int = 0


class BatchImportResponse(BaseModel):
    success: bool = True
    error: str | None = None
    total: int = Field(..., ge=0)
    successful: int = Field(..., ge=0)
    failed: int = Field(..., ge=0)
    results: list[ImportItemResponse] = Field(default_factory=list)
    execution_time_ms: int = Field(default=0, ge=0)
    progress_updated: bool = False


class RecentSessionResponse(BaseModel):
    session_name: str
    category_url: str
    page_status: str
    apps_imported: int
    apps_skipped: int
    created_at: str | None = None


class ImportStatsResponse(BaseModel):
    success: bool = True
    total_apps: int = Field(..., ge=0)
    listing_apps: int = Field(..., ge=0)
    recent_imports: int = Field(..., ge=0)
    recent_sessions: list[RecentSessionResponse] = Field(default_factory=list)


class PageProgressResponse(BaseModel):
    page_number: int
    session_name: str
    status: str
    apps_imported: int
    apps_skipped: int
    created_at: datetime | None = None
    imported_at: datetime | None = None


class CategoryProgressResponse(BaseModel):
    success: bool = True
    category_url: str
    category_name: str
    total_pages: int
    pages_scraped: int
    pages_imported: int
    pages_pending: int
    last_scraped_page: int | None = None
    last_imported_page: int | None = None
    next_page_to_scrape: int
    next_page_to_import: int | None = None
    scrape_progress_percent: float
    import_progress_percent: float
    pages: list[PageProgressResponse] = Field(default_factory=list)


class ResetProgressResponse(BaseModel):
    success: bool = True
    category_url: str
    removed: int = Field(..., ge=0)


class DuplicateGroupResponse(BaseModel):
    signature: str
    name: str
    developer: str
    count: int
    keep_id: str
    remove_ids: list[str]


class DuplicateListResponse(BaseModel):
    success: bool = True
    groups: list[DuplicateGroupResponse] = Field(default_factory=list)
    total_groups: int = 0
    total_duplicates: int = 0


class DuplicateRemovalResponse(BaseModel):
    success: bool = True
    removed: list[str] = Field(default_factory=list)
    kept: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
