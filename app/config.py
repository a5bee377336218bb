"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


@dataclass(frozen=True)
class ExternalHTTPSettings:
    """
    Shared HTTP behavior settings for external connectors.
    """

    timeout_seconds: float = 15.0
    max_retries: int = 3
    backoff_initial_seconds: float = 0.5
    backoff_multiplier: float = 2.0
    rate_limit_per_second: float = 5.0


@dataclass(frozen=True)
class ItunesLookupSettings:
    """
    iTunes Search API connector settings.
    """

    base_url: str = "https://itunes.apple.com/search"
    entity: str = "macSoftware"
    country: str = "us"
    result_limit: int = 10
    rate_limit_per_second: float = 1.0


@dataclass(frozen=True)
class MatchSettings:
    """
    Scoring and auto-apply rules for catalog-to-store matching.

    ``name_weight`` and ``developer_weight`` are tunable; name similarity is
    expected to dominate.
    """

    confidence_floor: float = 0.3
    auto_apply_threshold: float = 0.8
    name_weight: float = 0.6
    developer_weight: float = 0.4
    bulk_batch_size: int = 10
    bulk_limit: int = 100


@dataclass(frozen=True)
class CatalogImportSettings:
    """
    Runtime settings for batch imports into the catalog.
    """

    time_budget_seconds: float = 25.0
    max_batch_size: int = 100
    item_delay_seconds: float = 0.1


@dataclass(frozen=True)
class MaintenanceSchedulerSettings:
    """
    Periodic catalog maintenance jobs.
    """

    enabled: bool = False
    duplicate_cleanup_hour: int = 4
    unmatched_sweep_interval_hours: int = 6
    unmatched_sweep_limit: int = 50


@lru_cache(maxsize=1)
def get_external_http_settings() -> ExternalHTTPSettings:
    """
    Return shared connector HTTP settings from environment variables.
    """

    return ExternalHTTPSettings(
        timeout_seconds=max(1.0, _get_float_env("EXTERNAL_HTTP_TIMEOUT_SECONDS", 15.0)),
        max_retries=max(0, _get_int_env("EXTERNAL_HTTP_MAX_RETRIES", 3)),
        backoff_initial_seconds=max(0.1, _get_float_env("EXTERNAL_HTTP_BACKOFF_INITIAL_SECONDS", 0.5)),
        backoff_multiplier=max(1.0, _get_float_env("EXTERNAL_HTTP_BACKOFF_MULTIPLIER", 2.0)),
        rate_limit_per_second=max(0.1, _get_float_env("EXTERNAL_HTTP_RATE_LIMIT_PER_SECOND", 5.0)),
    )


@lru_cache(maxsize=1)
def get_itunes_lookup_settings() -> ItunesLookupSettings:
    """
    Return iTunes lookup connector settings from environment variables.
    """

    return ItunesLookupSettings(
        base_url=_get_str_env("ITUNES_SEARCH_URL", "https://itunes.apple.com/search"),
        entity=_get_str_env("ITUNES_SEARCH_ENTITY", "macSoftware"),
        country=_get_str_env("ITUNES_SEARCH_COUNTRY", "us"),
        result_limit=min(200, max(1, _get_int_env("ITUNES_SEARCH_LIMIT", 10))),
        rate_limit_per_second=max(0.1, _get_float_env("ITUNES_RATE_LIMIT_PER_SECOND", 1.0)),
    )


@lru_cache(maxsize=1)
def get_match_settings() -> MatchSettings:
    """
    Return match scoring settings from environment variables.
    """

    return MatchSettings(
        confidence_floor=min(1.0, max(0.0, _get_float_env("ITUNES_MATCH_CONFIDENCE_FLOOR", 0.3))),
        auto_apply_threshold=min(1.0, max(0.0, _get_float_env("ITUNES_MATCH_AUTO_APPLY_THRESHOLD", 0.8))),
        name_weight=max(0.0, _get_float_env("ITUNES_MATCH_NAME_WEIGHT", 0.6)),
        developer_weight=max(0.0, _get_float_env("ITUNES_MATCH_DEVELOPER_WEIGHT", 0.4)),
        bulk_batch_size=max(1, _get_int_env("ITUNES_MATCH_BULK_BATCH_SIZE", 10)),
        bulk_limit=max(1, _get_int_env("ITUNES_MATCH_BULK_LIMIT", 100)),
    )


@lru_cache(maxsize=1)
def get_catalog_import_settings() -> CatalogImportSettings:
    """
    Return batch import settings from environment variables.
    """

    return CatalogImportSettings(
        time_budget_seconds=max(1.0, _get_float_env("CATALOG_IMPORT_TIME_BUDGET_SECONDS", 25.0)),
        max_batch_size=max(1, _get_int_env("CATALOG_IMPORT_MAX_BATCH_SIZE", 100)),
        item_delay_seconds=max(0.0, _get_int_env("CATALOG_IMPORT_ITEM_DELAY_MS", 100) / 1000.0),
    )


@lru_cache(maxsize=1)
def get_maintenance_scheduler_settings() -> MaintenanceSchedulerSettings:
    """
    Return maintenance scheduler settings from environment variables.
    """

    return MaintenanceSchedulerSettings(
        enabled=_get_bool_env("CATALOG_SCHEDULER_ENABLED", False),
        duplicate_cleanup_hour=min(23, max(0, _get_int_env("CATALOG_SCHEDULER_DUPLICATE_CLEANUP_HOUR", 4))),
        unmatched_sweep_interval_hours=max(1, _get_int_env("CATALOG_SCHEDULER_UNMATCHED_SWEEP_HOURS", 6)),
        unmatched_sweep_limit=max(1, _get_int_env("CATALOG_SCHEDULER_UNMATCHED_SWEEP_LIMIT", 50)),
    )
