"""
Domain-aware request pacing for listing-site fetches.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from urllib.parse import urlparse


class DomainRateLimiter:
    """
    Enforces a minimum delay between requests to the same domain.

    Safe to share between preview worker threads.
    """

    def __init__(
        self,
        *,
        min_delay_seconds: float,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._min_delay_seconds = max(0.0, min_delay_seconds)
        self._sleep = sleep
        self._last_request_by_domain: dict[str, float] = {}
        self._lock = threading.Lock()

    @property
    def min_delay_seconds(self) -> float:
        return self._min_delay_seconds

    def wait(self, *, url: str) -> None:
        """
        Sleep as needed so outbound requests respect per-domain pacing.
        """

        parsed = urlparse(url)
        domain = parsed.netloc.lower() or parsed.path.lower()
        if not domain or self._min_delay_seconds <= 0:
            return

        with self._lock:
            last_time = self._last_request_by_domain.get(domain)
            if last_time is not None:
                wait_seconds = self._min_delay_seconds - (time.monotonic() - last_time)
                if wait_seconds > 0:
                    self._sleep(wait_seconds)
            self._last_request_by_domain[domain] = time.monotonic()
