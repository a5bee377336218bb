"""
Environment loader for listing crawl settings.
"""

from __future__ import annotations

import os
from functools import lru_cache

from db.config import load_env_files

from app.scraping.config.models import CatalogScrapingSettings

MIN_REQUEST_DELAY_MS = 100
MAX_REQUEST_DELAY_MS = 2000


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    stripped = raw.strip()
    return stripped if stripped else default


def clamp_request_delay_ms(value: int) -> int:
    return min(MAX_REQUEST_DELAY_MS, max(MIN_REQUEST_DELAY_MS, value))


@lru_cache(maxsize=1)
def get_catalog_scraping_settings() -> CatalogScrapingSettings:
    """
    Return cached listing crawl settings from environment variables.
    """

    load_env_files()
    default_page_limit = max(1, _get_int_env("CATALOG_SCRAPE_DEFAULT_PAGE_LIMIT", 5))
    return CatalogScrapingSettings(
        site_base_url=_get_str_env("CATALOG_SCRAPE_SITE_BASE_URL", "https://www.macupdate.com").rstrip("/"),
        allowed_host_suffix=_get_str_env("CATALOG_SCRAPE_ALLOWED_HOST_SUFFIX", "macupdate.com").lower(),
        user_agent=_get_str_env(
            "CATALOG_SCRAPE_USER_AGENT",
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
        ),
        default_page_limit=default_page_limit,
        max_page_limit=max(default_page_limit, _get_int_env("CATALOG_SCRAPE_MAX_PAGE_LIMIT", 10)),
        request_delay_seconds=clamp_request_delay_ms(
            _get_int_env("CATALOG_SCRAPE_REQUEST_DELAY_MS", 2000)
        )
        / 1000.0,
        timeout_seconds=max(1.0, _get_float_env("CATALOG_SCRAPE_TIMEOUT_SECONDS", 30.0)),
        max_retries=max(0, _get_int_env("CATALOG_SCRAPE_MAX_RETRIES", 2)),
        backoff_initial_seconds=max(0.1, _get_float_env("CATALOG_SCRAPE_BACKOFF_INITIAL_SECONDS", 0.5)),
        backoff_multiplier=max(1.0, _get_float_env("CATALOG_SCRAPE_BACKOFF_MULTIPLIER", 2.0)),
        preview_cap=max(0, _get_int_env("CATALOG_SCRAPE_PREVIEW_CAP", 10)),
        preview_max_workers=max(1, _get_int_env("CATALOG_SCRAPE_PREVIEW_WORKERS", 3)),
        crawl_budget_seconds=max(1.0, _get_float_env("CATALOG_SCRAPE_BUDGET_SECONDS", 15.0)),
    )
