"""
app/connectors/base.py

Shared HTTP mechanics for JSON lookup APIs.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from typing import Any

import requests

from app.config import ExternalHTTPSettings
from app.domain.errors import FetchError

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}
TRANSIENT_ERRORS: tuple[type[requests.RequestException], ...] = (
    requests.Timeout,
    requests.ConnectionError,
    requests.exceptions.ChunkedEncodingError,
)


class JSONAPIConnector:
    """
    Base for connectors that call a JSON API with a finite timeout, a minimum
    interval between requests and exponential backoff on transient failures.

    Transport failures surface as ``FetchError``; callers decide how an
    unreachable API is recorded.
    """

    source: str

    def __init__(
        self,
        *,
        source: str,
        http_settings: ExternalHTTPSettings,
        rate_limit_per_second: float | None = None,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.source = source
        self._session = session or requests.Session()
        self._sleep = sleep
        self._timeout_seconds = http_settings.timeout_seconds
        self._max_retries = http_settings.max_retries
        self._backoff_initial_seconds = http_settings.backoff_initial_seconds
        self._backoff_multiplier = http_settings.backoff_multiplier
        per_second = rate_limit_per_second or http_settings.rate_limit_per_second
        self._min_request_interval_seconds = 1.0 / per_second if per_second > 0 else 0.0
        self._last_request_monotonic: float | None = None
        self._rate_lock = threading.Lock()

    def _get_json(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        response = self._get(url, params=params, headers=headers)
        try:
            return response.json()
        except ValueError as exc:
            raise FetchError(
                f"{self.source}: response was not valid JSON.",
                url=url,
                status_code=response.status_code,
            ) from exc

    def _get(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> requests.Response:
        last_error: Exception | None = None
        for attempt in range(self._max_retries + 1):
            self._apply_rate_limit()
            try:
                response = self._session.get(
                    url,
                    params=params,
                    headers=headers,
                    timeout=self._timeout_seconds,
                )
                if response.status_code in RETRYABLE_STATUS_CODES:
                    raise requests.HTTPError(
                        f"Retryable HTTP status code: {response.status_code}",
                        response=response,
                    )
                response.raise_for_status()
                return response
            except requests.HTTPError as exc:
                last_error = exc
                status_code = exc.response.status_code if exc.response is not None else None
                if status_code not in RETRYABLE_STATUS_CODES:
                    logger.error(
                        "Lookup request failed source=%s status=%s url=%s error=%s",
                        self.source,
                        status_code,
                        url,
                        exc,
                    )
                    raise FetchError(
                        f"{self.source}: HTTP {status_code}",
                        url=url,
                        status_code=status_code,
                    ) from exc
            except TRANSIENT_ERRORS as exc:
                last_error = exc
            except requests.RequestException as exc:
                logger.error(
                    "Lookup request failed source=%s url=%s error=%s",
                    self.source,
                    url,
                    exc,
                )
                raise FetchError(f"{self.source}: {exc}", url=url) from exc

            if attempt >= self._max_retries:
                break

            backoff_seconds = self._backoff_initial_seconds * (self._backoff_multiplier**attempt)
            logger.warning(
                "Lookup request retry source=%s attempt=%s/%s wait_seconds=%.2f url=%s",
                self.source,
                attempt + 1,
                self._max_retries,
                backoff_seconds,
                url,
            )
            self._sleep(backoff_seconds)

        logger.error(
            "Lookup request exhausted retries source=%s url=%s error=%s",
            self.source,
            url,
            last_error,
        )
        status_code = None
        if isinstance(last_error, requests.HTTPError) and last_error.response is not None:
            status_code = last_error.response.status_code
        raise FetchError(
            f"{self.source}: request failed after retries: {last_error}",
            url=url,
            status_code=status_code,
        ) from last_error

    def _apply_rate_limit(self) -> None:
        if self._min_request_interval_seconds <= 0:
            return
        with self._rate_lock:
            if self._last_request_monotonic is not None:
                remaining = self._min_request_interval_seconds - (
                    time.monotonic() - self._last_request_monotonic
                )
                if remaining > 0:
                    self._sleep(remaining)
            self._last_request_monotonic = time.monotonic()
