"""
HTML document fetcher for the listing site.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

import requests

from app.domain.errors import FetchError
from app.scraping.config.models import CatalogScrapingSettings
from app.scraping.logging_utils import log_event
from app.scraping.rate_limiter import DomainRateLimiter

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}
TRANSIENT_ERRORS: tuple[type[requests.RequestException], ...] = (
    requests.Timeout,
    requests.ConnectionError,
    requests.exceptions.ChunkedEncodingError,
)


class PageFetcher:
    """
    Fetches listing and detail pages with browser-like headers, per-domain
    pacing, a finite timeout and exponential backoff on transient failures.

    Every transport problem surfaces as ``FetchError``.
    """

    def __init__(
        self,
        *,
        settings: CatalogScrapingSettings,
        session: requests.Session | None = None,
        rate_limiter: DomainRateLimiter | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.settings = settings
        self.session = session or requests.Session()
        self.rate_limiter = rate_limiter or DomainRateLimiter(
            min_delay_seconds=settings.request_delay_seconds
        )
        self.request_headers = settings.request_headers
        self._sleep = sleep

    def fetch_text(self, url: str) -> str:
        """
        Return the response body of ``url`` or raise ``FetchError``.
        """

        self.rate_limiter.wait(url=url)
        response = self._request_with_retry(url)
        return response.text

    def _request_with_retry(self, url: str) -> requests.Response:
        last_error: Exception | None = None

        for attempt in range(self.settings.max_retries + 1):
            try:
                response = self.session.get(
                    url,
                    headers=self.request_headers,
                    timeout=self.settings.timeout_seconds,
                    allow_redirects=True,
                )
                if response.status_code in RETRYABLE_STATUS_CODES:
                    raise requests.HTTPError(
                        f"Retryable status={response.status_code}",
                        response=response,
                    )
                response.raise_for_status()
                return response
            except requests.HTTPError as exc:
                last_error = exc
                status_code = exc.response.status_code if exc.response is not None else None
                if status_code not in RETRYABLE_STATUS_CODES:
                    raise FetchError(
                        f"Failed to fetch {url}: HTTP {status_code}",
                        url=url,
                        status_code=status_code,
                    ) from exc
            except TRANSIENT_ERRORS as exc:
                last_error = exc
            except requests.RequestException as exc:
                log_event(logger, logging.ERROR, "page_fetch_failed", url=url, error=str(exc))
                raise FetchError(f"Failed to fetch {url}: {exc}", url=url) from exc

            if attempt >= self.settings.max_retries:
                break

            backoff_seconds = self.settings.backoff_initial_seconds * (
                self.settings.backoff_multiplier**attempt
            )
            log_event(
                logger,
                logging.WARNING,
                "page_fetch_retry",
                url=url,
                attempt=attempt + 1,
                max_retries=self.settings.max_retries,
                wait_seconds=round(backoff_seconds, 2),
                error=str(last_error),
            )
            self._sleep(backoff_seconds)

        status_code = None
        if isinstance(last_error, requests.HTTPError) and last_error.response is not None:
            status_code = last_error.response.status_code
        raise FetchError(
            f"Failed to fetch {url} after retries: {last_error}",
            url=url,
            status_code=status_code,
        ) from last_error
