"""
Repository for catalog apps, their screenshots and MAS identifiers.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta, timezone

from sqlalchemy import Select, delete, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.scraped_app import ScrapedApp
from app.scraping.parsing.units import parse_price, parse_rating
from db.base import utc_now
from db.models.catalog_app import CatalogApp, CatalogAppSource, CatalogAppStatus
from db.models.itunes_match_attempt import ItunesMatchAttempt
from db.models.screenshot import Screenshot
from db.repositories.category_repository import CategoryRepository
from db.repositories.errors import AppNotFoundError, RecordValidationError, StoreError


class CatalogAppRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, app_id: uuid.UUID) -> CatalogApp | None:
        return self._session.get(CatalogApp, app_id)

    def get_or_raise(self, app_id: uuid.UUID) -> CatalogApp:
        app = self.get(app_id)
        if app is None:
            raise AppNotFoundError(f"App not found: {app_id}")
        return app

    def find_existing(self, *, name: str, source_url: str) -> CatalogApp | None:
        """
        Match by (name, listing URL) first, then by name among listing imports.
        """

        by_url = self._session.scalars(
            select(CatalogApp)
            .where(CatalogApp.name == name, CatalogApp.website_url == source_url)
            .order_by(CatalogApp.created_at.asc())
            .limit(1)
        ).first()
        if by_url is not None:
            return by_url

        return self._session.scalars(
            select(CatalogApp)
            .where(CatalogApp.name == name, CatalogApp.source == CatalogAppSource.CUSTOM)
            .order_by(CatalogApp.created_at.asc())
            .limit(1)
        ).first()

    def find_existing_urls(self, urls: Iterable[str]) -> set[str]:
        candidates = sorted({url for url in urls if url})
        if not candidates:
            return set()
        stmt = select(CatalogApp.website_url).where(CatalogApp.website_url.in_(candidates))
        return set(self._session.scalars(stmt).all())

    def create_from_scraped(self, scraped: ScrapedApp) -> tuple[CatalogApp, int]:
        """
        Insert a listing import with its screenshots; returns (app, screenshot count).

        Raises:
            RecordValidationError: when name or listing URL is missing.
            StoreError: when the store rejects the insert.
        """

        name = (scraped.name or "").strip()
        source_url = (scraped.source_url or "").strip()
        if not name:
            raise RecordValidationError("App name is required")
        if not source_url:
            raise RecordValidationError("App source_url is required")

        price = parse_price(scraped.price_text)
        try:
            category = CategoryRepository(self._session).resolve_for_label(scraped.category)
            app = CatalogApp(
                name=name,
                developer=(scraped.developer or "").strip() or "Unknown Developer",
                description=scraped.description or "",
                category_id=category.id if category is not None else None,
                price=price if price is not None else 0.0,
                currency="USD",
                is_free=not price,
                version=scraped.version or "",
                size_bytes=scraped.size_bytes,
                rating=parse_rating(scraped.rating_text),
                rating_count=scraped.rating_count or 0,
                website_url=source_url,
                icon_url=scraped.icon_url,
                minimum_os_version=scraped.requirements,
                source=CatalogAppSource.CUSTOM,
                status=CatalogAppStatus.ACTIVE,
                last_updated=utc_now(),
                is_on_mas=False,
            )
            self._session.add(app)
            self._session.flush()

            for index, url in enumerate(scraped.screenshot_urls, start=1):
                self._session.add(
                    Screenshot(
                        app_id=app.id,
                        url=url,
                        display_order=index,
                        caption=f"{name} Screenshot {index}",
                    )
                )
            self._session.flush()
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to insert app {name!r}: {exc}") from exc
        return app, len(scraped.screenshot_urls)

    def apply_mas_identifiers(self, *, app_id: uuid.UUID, mas_id: str, mas_url: str) -> None:
        """
        Write only the MAS columns of one app in a single UPDATE.
        """

        try:
            result = self._session.execute(
                update(CatalogApp)
                .where(CatalogApp.id == app_id)
                .values(mas_id=mas_id, mas_url=mas_url, is_on_mas=True, updated_at=utc_now())
                .execution_options(synchronize_session="fetch")
            )
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to apply MAS identifiers to {app_id}: {exc}") from exc
        if result.rowcount == 0:
            raise AppNotFoundError(f"App not found: {app_id}")

    def list_unmatched(self, *, limit: int, app_ids: Sequence[uuid.UUID] | None = None) -> list[CatalogApp]:
        stmt: Select[tuple[CatalogApp]] = select(CatalogApp).where(
            or_(CatalogApp.mas_id.is_(None), CatalogApp.mas_url.is_(None))
        )
        if app_ids is not None:
            stmt = stmt.where(CatalogApp.id.in_(list(app_ids)))
        stmt = stmt.order_by(CatalogApp.created_at.asc(), CatalogApp.id.asc()).limit(max(1, limit))
        return list(self._session.scalars(stmt).all())

    def list_for_duplicates(self) -> list[CatalogApp]:
        stmt = select(CatalogApp).order_by(CatalogApp.created_at.asc(), CatalogApp.id.asc())
        return list(self._session.scalars(stmt).all())

    def delete_apps(self, app_ids: Sequence[uuid.UUID]) -> int:
        """
        Delete apps together with their screenshots and match attempts.
        """

        ids = list(app_ids)
        if not ids:
            return 0
        try:
            self._session.execute(delete(Screenshot).where(Screenshot.app_id.in_(ids)))
            self._session.execute(delete(ItunesMatchAttempt).where(ItunesMatchAttempt.app_id.in_(ids)))
            result = self._session.execute(
                delete(CatalogApp)
                .where(CatalogApp.id.in_(ids))
                .execution_options(synchronize_session="fetch")
            )
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to delete {len(ids)} apps: {exc}") from exc
        return int(result.rowcount or 0)

    def count_all(self) -> int:
        return int(self._session.scalar(select(func.count()).select_from(CatalogApp)) or 0)

    def count_by_source(self, source: str) -> int:
        stmt = select(func.count()).select_from(CatalogApp).where(CatalogApp.source == source)
        return int(self._session.scalar(stmt) or 0)

    def count_created_since(self, *, days: int, now: datetime | None = None) -> int:
        since = (now or datetime.now(timezone.utc)) - timedelta(days=days)
        stmt = select(func.count()).select_from(CatalogApp).where(CatalogApp.created_at >= since)
        return int(self._session.scalar(stmt) or 0)

    def list_screenshots(self, app_id: uuid.UUID) -> list[Screenshot]:
        stmt = (
            select(Screenshot)
            .where(Screenshot.app_id == app_id)
            .order_by(Screenshot.display_order.asc())
        )
        return list(self._session.scalars(stmt).all())
