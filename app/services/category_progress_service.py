"""
app/services/category_progress_service.py

Crawl/import progress per listing category, derived from its page rows.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from sqlalchemy.orm import Session

from app.domain.category_progress import CategoryProgress, PageProgressEntry
from app.scraping.logging_utils import log_event
from app.scraping.parsing.listing_parsers import extract_category_name
from db.models.import_session import PageStatus
from db.repositories.import_session_repository import ImportSessionRepository, page_number_from_name

logger = logging.getLogger(__name__)

PAGE_NAME_SEPARATOR = " - Page "


def _percent(part: int, whole: int) -> float:
    return float(round(part / whole * 100)) if whole > 0 else 0.0


class CategoryProgressService:
    def get_category_progress(self, *, db: Session, category_url: str) -> CategoryProgress:
        rows = ImportSessionRepository(db).list_for_category(category_url)
        pages: list[PageProgressEntry] = []
        for row in rows:
            page_number = page_number_from_name(row.session_name)
            if page_number is None:
                continue
            pages.append(
                PageProgressEntry(
                    page_number=page_number,
                    session_name=row.session_name,
                    status=row.page_status,
                    apps_imported=row.apps_imported,
                    apps_skipped=row.apps_skipped,
                    created_at=row.created_at,
                    imported_at=row.imported_at,
                )
            )

        if pages and PAGE_NAME_SEPARATOR in pages[0].session_name:
            category_name = pages[0].session_name.split(PAGE_NAME_SEPARATOR)[0]
        else:
            category_name = extract_category_name(category_url)

        imported = [page.page_number for page in pages if page.status == PageStatus.IMPORTED]
        pending = [page.page_number for page in pages if page.status == PageStatus.SCRAPED]
        total_pages = max((page.page_number for page in pages), default=0)
        pages_scraped = len(pages)

        return CategoryProgress(
            category_url=category_url,
            category_name=category_name,
            total_pages=total_pages,
            pages_scraped=pages_scraped,
            pages_imported=len(imported),
            pages_pending=len(pending),
            last_scraped_page=total_pages or None,
            last_imported_page=max(imported, default=None),
            next_page_to_scrape=total_pages + 1,
            next_page_to_import=pending[0] if pending else None,
            scrape_progress_percent=_percent(pages_scraped, total_pages),
            import_progress_percent=_percent(len(imported), pages_scraped),
            pages=pages,
        )

    def reset_category_progress(self, *, db: Session, category_url: str) -> int:
        removed = ImportSessionRepository(db).delete_for_category(category_url)
        db.commit()
        log_event(logger, logging.INFO, "category_progress_reset", category_url=category_url, removed=removed)
        return removed


@lru_cache(maxsize=1)
def get_category_progress_service() -> CategoryProgressService:
    return CategoryProgressService()
