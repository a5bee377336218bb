"""
app/domain/catalog_scraping.py

Domain models for listing category crawls.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from app.domain.scraped_app import AppPreview


@dataclass(frozen=True)
class PaginationInfo:
    current_page: int
    total_pages: int | None
    processed_pages: list[int] = field(default_factory=list)


@dataclass(frozen=True)
class CategoryScrapeResult:
    """
    Outcome of one category crawl invocation.
    """

    category_name: str
    total_apps: int
    new_apps: int
    existing_apps: int
    app_urls: list[str]
    new_app_urls: list[str]
    app_previews: list[AppPreview]
    pagination: PaginationInfo
    errors: list[str] = field(default_factory=list)
    execution_time_ms: int = 0
