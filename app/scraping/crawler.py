"""
Listing crawler for paginated category pages.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, as_completed

from sqlalchemy.orm import Session

from app.domain.catalog_scraping import CategoryScrapeResult, PaginationInfo
from app.domain.errors import FetchError, ParseError
from app.domain.scraped_app import AppPreview, ScrapedApp
from app.scraping.config.models import CatalogScrapingSettings
from app.scraping.fetcher import PageFetcher
from app.scraping.logging_utils import log_event
from app.scraping.parsing.extractor import ExtractionEngine
from app.scraping.parsing.listing_parsers import (
    build_page_url,
    extract_app_urls,
    extract_category_name,
    extract_listing_previews,
    extract_pagination,
)
from db.repositories.catalog_app_repository import CatalogAppRepository
from db.repositories.errors import StoreError
from db.repositories.import_session_repository import ImportSessionRepository

logger = logging.getLogger(__name__)


class ListingCrawler:
    """
    Crawls the next unscraped pages of a category and records one progress
    row per successfully parsed page.
    """

    def __init__(
        self,
        *,
        settings: CatalogScrapingSettings,
        fetcher: PageFetcher | None = None,
        engine: ExtractionEngine | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._settings = settings
        self._fetcher = fetcher or PageFetcher(settings=settings)
        self._engine = engine or ExtractionEngine()
        self._clock = clock

    def scrape_category(
        self,
        db: Session,
        category_url: str,
        page_limit: int | None = None,
        *,
        reset: bool = False,
    ) -> CategoryScrapeResult:
        started = self._clock()
        category_name = extract_category_name(category_url)
        sessions = ImportSessionRepository(db)
        errors: list[str] = []

        if reset:
            removed = sessions.delete_for_category(category_url)
            db.commit()
            log_event(logger, logging.INFO, "category_progress_reset", category_url=category_url, removed=removed)

        limit = min(self._settings.max_page_limit, max(1, page_limit or self._settings.default_page_limit))
        start_page = sessions.last_page_number(category_url) + 1

        app_urls: list[str] = []
        seen_urls: set[str] = set()
        listing_previews: dict[str, AppPreview] = {}
        processed_pages: list[int] = []
        current_page = start_page
        total_pages: int | None = None

        for page_number in range(start_page, start_page + limit):
            if self._clock() - started >= self._settings.crawl_budget_seconds:
                errors.append(f"Crawl budget exhausted before page {page_number}")
                break

            page_url = build_page_url(category_url, page_number)
            try:
                markup = self._fetcher.fetch_text(page_url)
            except FetchError as exc:
                errors.append(f"Page {page_number}: {exc}")
                log_event(
                    logger,
                    logging.WARNING,
                    "category_page_fetch_failed",
                    category_url=category_url,
                    page=page_number,
                    error=str(exc),
                )
                break

            page_urls = extract_app_urls(
                markup,
                site_base_url=self._settings.site_base_url,
                host_suffix=self._settings.allowed_host_suffix,
            )
            if not page_urls:
                log_event(
                    logger,
                    logging.INFO,
                    "category_page_empty",
                    category_url=category_url,
                    page=page_number,
                )
                break

            pagination = extract_pagination(markup, fallback_page=page_number)
            try:
                sessions.record_page_scraped(
                    category_url=category_url,
                    category_name=category_name,
                    page_number=page_number,
                )
                db.commit()
            except StoreError as exc:
                db.rollback()
                errors.append(f"Page {page_number}: {exc}")
                logger.error("Failed to record page progress category_url=%s page=%s error=%s", category_url, page_number, exc)
                break

            processed_pages.append(page_number)
            current_page = page_number
            if pagination.total_pages is not None:
                total_pages = max(total_pages or 0, pagination.total_pages)
            for url in page_urls:
                if url not in seen_urls:
                    seen_urls.add(url)
                    app_urls.append(url)
            for url, preview in extract_listing_previews(
                markup,
                site_base_url=self._settings.site_base_url,
                host_suffix=self._settings.allowed_host_suffix,
            ).items():
                listing_previews.setdefault(url, preview)

            log_event(
                logger,
                logging.INFO,
                "category_page_scraped",
                category_url=category_url,
                page=page_number,
                apps=len(page_urls),
            )
            if total_pages is not None and page_number >= total_pages:
                break

        existing_urls = CatalogAppRepository(db).find_existing_urls(app_urls)
        new_app_urls = [url for url in app_urls if url not in existing_urls]
        previews = self._build_previews(new_app_urls[: self._settings.preview_cap], listing_previews)

        return CategoryScrapeResult(
            category_name=category_name,
            total_apps=len(app_urls),
            new_apps=len(new_app_urls),
            existing_apps=len(app_urls) - len(new_app_urls),
            app_urls=app_urls,
            new_app_urls=new_app_urls,
            app_previews=previews,
            pagination=PaginationInfo(
                current_page=current_page,
                total_pages=total_pages,
                processed_pages=processed_pages,
            ),
            errors=errors,
            execution_time_ms=int(round((self._clock() - started) * 1000)),
        )

    def scrape_app(self, url: str) -> ScrapedApp:
        """
        Fetch one detail page and run it through the extraction engine.

        Raises:
            FetchError: when the page cannot be fetched.
            ParseError: when the page has no recognizable app name.
        """

        markup = self._fetcher.fetch_text(url)
        return self._engine.extract_app(self._engine.parse(markup, url=url), url)

    def _build_previews(
        self,
        urls: list[str],
        listing_previews: dict[str, AppPreview],
    ) -> list[AppPreview]:
        by_url: dict[str, AppPreview] = {}
        detail_urls: list[str] = []
        for url in urls:
            if url in listing_previews:
                by_url[url] = listing_previews[url]
            else:
                detail_urls.append(url)

        if detail_urls:
            workers = min(self._settings.preview_max_workers, len(detail_urls))
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = {executor.submit(self._detail_preview, url): url for url in detail_urls}
                for future in as_completed(futures):
                    url = futures[future]
                    try:
                        by_url[url] = future.result()
                    except (FetchError, ParseError) as exc:
                        log_event(
                            logger,
                            logging.WARNING,
                            "preview_fetch_failed",
                            url=url,
                            error=str(exc),
                        )

        return [by_url[url] for url in urls if url in by_url]

    def _detail_preview(self, url: str) -> AppPreview:
        app = self.scrape_app(url)
        return AppPreview(
            url=url,
            name=app.name,
            developer=app.developer,
            version=app.version,
            price_text=app.price_text,
            rating_text=app.rating_text,
            size_bytes=app.size_bytes,
            source="detail",
        )
