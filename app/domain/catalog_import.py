"""
app/domain/catalog_import.py

Domain models for batch imports into the catalog.
"""

from __future__ import annotations

from dataclasses import dataclass, field


class ImportItemStatus:
    IMPORTED = "imported"
    EXISTING = "existing"
    FAILED = "failed"


@dataclass(frozen=True)
class ImportItemResult:
    """
    Per-item outcome of a batch import.
    """

    name: str
    source_url: str
    success: bool
    status: str
    message: str
    is_new: bool = False
    app_id: str | None = None
    screenshots: int = 0


@dataclass(frozen=True)
class BatchImportSummary:
    total: int
    successful: int
    failed: int
    results: list[ImportItemResult] = field(default_factory=list)
    execution_time_ms: int = 0
    progress_updated: bool = False


@dataclass(frozen=True)
class RecentSession:
    session_name: str
    category_url: str
    page_status: str
    apps_imported: int
    apps_skipped: int
    created_at: str | None


@dataclass(frozen=True)
class ImportStats:
    total_apps: int
    listing_apps: int
    recent_imports: int
    recent_sessions: list[RecentSession] = field(default_factory=list)
