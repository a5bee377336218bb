"""
app/services/catalog_scraping_service.py

Service orchestration for listing-site category crawls and detail extraction.
"""

from __future__ import annotations

from functools import lru_cache

from sqlalchemy.orm import Session

from app.domain.catalog_scraping import CategoryScrapeResult
from app.domain.scraped_app import ScrapedApp
from app.scraping.config import CatalogScrapingSettings, get_catalog_scraping_settings
from app.scraping.crawler import ListingCrawler


class CatalogScrapingService:
    """
    Runs category crawls and single detail-page extractions.
    """

    def __init__(
        self,
        *,
        settings: CatalogScrapingSettings | None = None,
        crawler: ListingCrawler | None = None,
    ) -> None:
        self._settings = settings or get_catalog_scraping_settings()
        self._crawler = crawler or ListingCrawler(settings=self._settings)

    @property
    def settings(self) -> CatalogScrapingSettings:
        return self._settings

    def scrape_category(
        self,
        *,
        db: Session,
        category_url: str,
        page_limit: int | None = None,
        reset: bool = False,
    ) -> CategoryScrapeResult:
        return self._crawler.scrape_category(db, category_url, page_limit, reset=reset)

    def scrape_app(self, *, url: str) -> ScrapedApp:
        return self._crawler.scrape_app(url)


@lru_cache(maxsize=1)
def get_catalog_scraping_service() -> CatalogScrapingService:
    """
    Build and cache the catalog scraping service.
    """

    return CatalogScrapingService()
