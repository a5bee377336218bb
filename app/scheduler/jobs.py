"""
app/scheduler/jobs.py

APScheduler-based maintenance scheduler for the catalog.

Schedule (all times UTC)
--------------------------
  catalog_duplicate_cleanup : daily at CATALOG_SCHEDULER_DUPLICATE_CLEANUP_HOUR
  itunes_unmatched_sweep    : every CATALOG_SCHEDULER_UNMATCHED_SWEEP_HOURS hours

Lifecycle
----------
Call ``build_scheduler()`` once to get a configured ``BackgroundScheduler``.
Start it on app boot; shut it down gracefully on app shutdown.
The scheduler is wired into FastAPI via the ``lifespan`` context in main.py
and only started when ``CATALOG_SCHEDULER_ENABLED`` is true.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from apscheduler.schedulers.background import BackgroundScheduler
from sqlalchemy.orm import Session

from app.config import MaintenanceSchedulerSettings, get_maintenance_scheduler_settings
from app.services.duplicate_resolver_service import get_duplicate_resolver_service
from app.services.itunes_match_service import get_itunes_match_service
from db.session import SessionLocal

logger = logging.getLogger(__name__)


@contextmanager
def _session_scope() -> Iterator[Session]:
    """Yield a fresh session and ensure it is closed on exit."""
    session: Session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def run_duplicate_cleanup() -> None:
    """
    Remove duplicate catalog apps, keeping the earliest record of each group.
    The resolver commits per group.
    """
    logger.info("Scheduler: catalog_duplicate_cleanup starting")
    with _session_scope() as db:
        try:
            summary = get_duplicate_resolver_service().remove_duplicates(db=db)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Scheduler: catalog_duplicate_cleanup failed: %s", exc)
            return
    logger.info(
        "Scheduler: catalog_duplicate_cleanup complete removed=%d kept=%d errors=%d",
        len(summary.removed),
        len(summary.kept),
        len(summary.errors),
    )


def run_unmatched_sweep(limit: int | None = None) -> None:
    """
    Bulk-match apps that still lack store identifiers, with auto-apply.
    """
    sweep_limit = limit or get_maintenance_scheduler_settings().unmatched_sweep_limit
    logger.info("Scheduler: itunes_unmatched_sweep starting limit=%d", sweep_limit)
    with _session_scope() as db:
        try:
            summary = get_itunes_match_service().match_bulk(db=db, auto_apply=True, limit=sweep_limit)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Scheduler: itunes_unmatched_sweep failed: %s", exc)
            return
    logger.info(
        "Scheduler: itunes_unmatched_sweep complete total=%d found=%d auto_applied=%d failed=%d",
        summary.total,
        summary.found,
        summary.auto_applied,
        summary.failed,
    )


def build_scheduler(settings: MaintenanceSchedulerSettings | None = None) -> BackgroundScheduler:
    """
    Build and register all maintenance jobs.

    Returns a configured but *not yet started* ``BackgroundScheduler``.
    """
    settings = settings or get_maintenance_scheduler_settings()
    scheduler = BackgroundScheduler(timezone="UTC")

    scheduler.add_job(
        run_duplicate_cleanup,
        trigger="cron",
        hour=settings.duplicate_cleanup_hour,
        minute=0,
        id="catalog_duplicate_cleanup",
        name="Daily catalog duplicate cleanup",
        replace_existing=True,
        misfire_grace_time=3600,
    )
    scheduler.add_job(
        run_unmatched_sweep,
        trigger="interval",
        hours=settings.unmatched_sweep_interval_hours,
        kwargs={"limit": settings.unmatched_sweep_limit},
        id="itunes_unmatched_sweep",
        name="iTunes unmatched app sweep",
        replace_existing=True,
        misfire_grace_time=1800,
        coalesce=True,
        max_instances=1,
    )

    return scheduler
