"""
app/domain/duplicates.py

Domain models for catalog duplicate detection and cleanup.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DuplicateGroup:
    """
    Apps sharing one normalized (name, developer) signature.

    ``app_ids`` is ordered oldest first; the first entry is the keeper.
    """

    signature: str
    name: str
    developer: str
    app_ids: list[str]

    @property
    def count(self) -> int:
        return len(self.app_ids)

    @property
    def keep_id(self) -> str:
        return self.app_ids[0]

    @property
    def remove_ids(self) -> list[str]:
        return self.app_ids[1:]


@dataclass(frozen=True)
class DuplicateRemovalSummary:
    removed: list[str] = field(default_factory=list)
    kept: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
