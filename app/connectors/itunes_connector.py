"""
app/connectors/itunes_connector.py

iTunes Search API connector for resolving catalog apps to Mac App Store listings.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from app.config import ExternalHTTPSettings, ItunesLookupSettings, MatchSettings
from app.connectors.base import JSONAPIConnector
from app.domain.itunes_match import MatchResult
from app.matching.similarity import compute_confidence

logger = logging.getLogger(__name__)

NO_RESULTS_ERROR = "No results found"
LOW_CONFIDENCE_ERROR = "No match above confidence floor"


class ItunesLookupConnector(JSONAPIConnector):
    """
    Searches the lookup API by app name and scores every candidate against
    the catalog identity.
    """

    def __init__(
        self,
        *,
        settings: ItunesLookupSettings,
        match_settings: MatchSettings,
        http_settings: ExternalHTTPSettings,
        session: requests.Session | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            source="itunes",
            http_settings=http_settings,
            rate_limit_per_second=settings.rate_limit_per_second,
            session=session,
            **kwargs,
        )
        self._settings = settings
        self._match_settings = match_settings

    def search_app(self, name: str, developer: str | None = None) -> MatchResult:
        """
        Return the best-scoring candidate for ``name`` / ``developer``.

        Raises:
            FetchError: when the API cannot be reached or answers non-2xx.
        """

        payload = self._get_json(
            self._settings.base_url,
            params={
                "term": name,
                "entity": self._settings.entity,
                "country": self._settings.country,
                "limit": self._settings.result_limit,
            },
        )
        results = payload.get("results", []) if isinstance(payload, dict) else []
        candidates = [item for item in results if isinstance(item, dict)]
        if not candidates:
            return MatchResult(found=False, confidence=0.0, error=NO_RESULTS_ERROR)

        best: dict[str, Any] | None = None
        best_confidence = 0.0
        for candidate in candidates:
            confidence = self._score(candidate, name=name, developer=developer)
            logger.debug(
                "Lookup candidate track=%r artist=%r confidence=%.3f",
                candidate.get("trackName"),
                candidate.get("artistName"),
                confidence,
            )
            if best is None or confidence > best_confidence:
                best = candidate
                best_confidence = confidence

        confidence = round(best_confidence, 4)
        if best is None or best_confidence < self._match_settings.confidence_floor:
            return MatchResult(found=False, confidence=confidence, error=LOW_CONFIDENCE_ERROR)

        mas_id = str(best.get("trackId") or "").strip() or None
        mas_url = str(best.get("trackViewUrl") or "").strip() or None
        if mas_id is None or mas_url is None:
            return MatchResult(
                found=False,
                confidence=confidence,
                itunes_data=best,
                error="Best candidate is missing store identifiers",
            )

        return MatchResult(
            found=True,
            confidence=confidence,
            mas_id=mas_id,
            mas_url=mas_url,
            itunes_data=best,
        )

    def _score(self, candidate: dict[str, Any], *, name: str, developer: str | None) -> float:
        return compute_confidence(
            candidate_name=candidate.get("trackName"),
            candidate_developer=candidate.get("artistName"),
            name=name,
            developer=developer,
            name_weight=self._match_settings.name_weight,
            developer_weight=self._match_settings.developer_weight,
        )
