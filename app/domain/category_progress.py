"""
app/domain/category_progress.py

Derived crawl/import progress for one listing category.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class PageProgressEntry:
    page_number: int
    session_name: str
    status: str
    apps_imported: int
    apps_skipped: int
    created_at: datetime | None
    imported_at: datetime | None


@dataclass(frozen=True)
class CategoryProgress:
    category_url: str
    category_name: str
    total_pages: int
    pages_scraped: int
    pages_imported: int
    pages_pending: int
    last_scraped_page: int | None
    last_imported_page: int | None
    next_page_to_scrape: int
    next_page_to_import: int | None
    scrape_progress_percent: float
    import_progress_percent: float
    pages: list[PageProgressEntry] = field(default_factory=list)
