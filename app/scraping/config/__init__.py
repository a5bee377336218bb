"""
Config helpers for listing crawls.
"""

from app.scraping.config.loader import clamp_request_delay_ms, get_catalog_scraping_settings
from app.scraping.config.models import DEFAULT_BROWSER_HEADERS, CatalogScrapingSettings

__all__ = [
    "CatalogScrapingSettings",
    "DEFAULT_BROWSER_HEADERS",
    "clamp_request_delay_ms",
    "get_catalog_scraping_settings",
]
