"""
Listing crawl configuration models.
"""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_BROWSER_HEADERS: dict[str, str] = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Accept-Encoding": "gzip, deflate",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
}


@dataclass(frozen=True)
class CatalogScrapingSettings:
    """
    Runtime settings for listing-site crawls and detail-page extraction.
    """

    site_base_url: str
    allowed_host_suffix: str
    user_agent: str
    default_page_limit: int
    max_page_limit: int
    request_delay_seconds: float
    timeout_seconds: float
    max_retries: int
    backoff_initial_seconds: float
    backoff_multiplier: float
    preview_cap: int
    preview_max_workers: int
    crawl_budget_seconds: float
    headers: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_BROWSER_HEADERS))

    @property
    def request_headers(self) -> dict[str, str]:
        return {"User-Agent": self.user_agent, **self.headers}
