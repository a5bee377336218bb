"""
app/domain/scraped_app.py

Values produced by the extraction engine and the listing crawler.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass(frozen=True)
class ScrapedApp:
    """
    One app as extracted from a listing detail page.
    """

    source_url: str
    name: str
    developer: str
    version: str | None = None
    price_text: str | None = None
    size_bytes: int | None = None
    category: str | None = None
    screenshot_urls: tuple[str, ...] = field(default_factory=tuple)
    rating_text: str | None = None
    rating_count: int | None = None
    description: str | None = None
    icon_url: str | None = None
    requirements: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["screenshot_urls"] = list(self.screenshot_urls)
        return payload


@dataclass(frozen=True)
class AppPreview:
    """
    Lightweight preview of a listing entry.

    ``source`` is ``"listing"`` when the data came from JSON embedded in the
    listing page, ``"detail"`` when the detail page had to be fetched.
    """

    url: str
    name: str
    developer: str | None = None
    version: str | None = None
    price_text: str | None = None
    rating_text: str | None = None
    size_bytes: int | None = None
    source: str = "detail"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
