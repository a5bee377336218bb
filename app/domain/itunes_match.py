"""
app/domain/itunes_match.py

Domain models for resolving catalog apps against the iTunes lookup API.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class MatchResult:
    """
    Best lookup candidate for one (name, developer) identity.

    ``found`` is only ever true together with both ``mas_id`` and ``mas_url``.
    """

    found: bool
    confidence: float
    mas_id: str | None = None
    mas_url: str | None = None
    itunes_data: dict[str, Any] | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence out of range: {self.confidence}")
        if self.found and (not self.mas_id or not self.mas_url):
            raise ValueError("a found match requires both mas_id and mas_url")


@dataclass(frozen=True)
class MatchOutcome:
    """
    Result of matching one catalog app, including whether it was auto-applied.
    """

    app_id: str
    app_name: str
    found: bool
    confidence: float
    mas_id: str | None
    mas_url: str | None
    error: str | None
    auto_applied: bool
    attempt_status: str


@dataclass(frozen=True)
class BulkMatchSummary:
    total: int
    found: int
    auto_applied: int
    failed: int
    results: list[MatchOutcome] = field(default_factory=list)
