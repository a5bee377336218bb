"""
Field extraction over parsed app detail pages.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from app.domain.errors import ParseError
from app.domain.scraped_app import ScrapedApp
from app.scraping.parsing.strategies import FIELD_NAMES, FIELD_STRATEGIES, FieldStrategy, ParsedDocument

logger = logging.getLogger(__name__)

UNKNOWN_DEVELOPER = "Unknown Developer"


def _is_absent(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, tuple, list, dict)) and not value:
        return True
    return False


class ExtractionEngine:
    """
    Applies each field's ordered strategies and keeps the first non-absent
    value. Holds no per-call state, so one instance can serve many threads.
    """

    def __init__(self, strategies: Mapping[str, tuple[FieldStrategy, ...]] | None = None) -> None:
        self.strategies: dict[str, tuple[FieldStrategy, ...]] = dict(strategies or FIELD_STRATEGIES)

    @staticmethod
    def parse(markup: str | None, *, url: str | None = None) -> ParsedDocument:
        return ParsedDocument(markup, url=url)

    def extract_field(self, document: ParsedDocument, field: str) -> Any:
        try:
            chain = self.strategies[field]
        except KeyError as exc:
            raise ValueError(f"Unknown field: {field}") from exc

        for strategy in chain:
            try:
                value = strategy.extract(document)
            except Exception as exc:  # noqa: BLE001 - a broken strategy counts as absent
                logger.debug(
                    "Strategy %s for field %s failed on %s: %s",
                    strategy.name,
                    field,
                    document.url,
                    exc,
                )
                continue
            if not _is_absent(value):
                return value
        return None

    def extract_fields(
        self,
        document: ParsedDocument,
        fields: Iterable[str] | None = None,
    ) -> dict[str, Any]:
        requested = list(fields) if fields is not None else list(self.strategies)
        return {field: self.extract_field(document, field) for field in requested}

    def extract_app(self, document: ParsedDocument, source_url: str) -> ScrapedApp:
        """
        Build a ``ScrapedApp`` from a detail page.

        Raises:
            ParseError: when no strategy yields an app name.
        """

        values = self.extract_fields(document, FIELD_NAMES)
        name = values.get("name")
        if not name:
            raise ParseError(f"No app name found at {source_url}")

        return ScrapedApp(
            source_url=source_url,
            name=name,
            developer=values.get("developer") or UNKNOWN_DEVELOPER,
            version=values.get("version"),
            price_text=values.get("price_text"),
            size_bytes=values.get("size_bytes"),
            category=values.get("category"),
            screenshot_urls=tuple(values.get("screenshot_urls") or ()),
            rating_text=values.get("rating_text"),
            rating_count=values.get("rating_count"),
            description=values.get("description"),
            icon_url=values.get("icon_url"),
            requirements=values.get("requirements"),
        )
