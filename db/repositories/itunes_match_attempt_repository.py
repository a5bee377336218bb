"""
Repository for iTunes match attempts, one row per catalog app.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import Select, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db.base import utc_now
from db.models.itunes_match_attempt import ItunesMatchAttempt, MatchAttemptStatus
from db.repositories.errors import StoreError


class ItunesMatchAttemptRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def _insert_for_dialect(self):
        dialect_name = self._session.get_bind().dialect.name
        if dialect_name == "postgresql":
            return postgresql.insert(ItunesMatchAttempt)
        if dialect_name == "sqlite":
            return sqlite.insert(ItunesMatchAttempt)
        raise StoreError(f"Unsupported dialect for attempt upsert: {dialect_name}")

    def upsert(
        self,
        *,
        app_id: uuid.UUID,
        search_term: str,
        developer_name: str | None,
        status: str,
        confidence_score: float,
        mas_id: str | None,
        mas_url: str | None,
        itunes_response: dict[str, Any] | None,
        error_message: str | None,
    ) -> ItunesMatchAttempt:
        """
        Insert or replace the attempt keyed by ``app_id``.
        """

        now = utc_now()
        values = {
            "search_term": search_term,
            "developer_name": developer_name,
            "status": status,
            "confidence_score": confidence_score,
            "mas_id": mas_id,
            "mas_url": mas_url,
            "itunes_response": itunes_response,
            "error_message": error_message,
            "updated_at": now,
        }
        stmt = self._insert_for_dialect().values(
            id=uuid.uuid4(),
            app_id=app_id,
            created_at=now,
            **values,
        )
        stmt = stmt.on_conflict_do_update(index_elements=["app_id"], set_=values)

        try:
            self._session.execute(stmt)
            self._session.flush()
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to record match attempt for {app_id}: {exc}") from exc

        attempt = self.get_for_app(app_id)
        if attempt is None:
            raise StoreError(f"Match attempt for {app_id} missing after upsert")
        self._session.refresh(attempt)
        return attempt

    def get_for_app(self, app_id: uuid.UUID) -> ItunesMatchAttempt | None:
        return self._session.scalars(
            select(ItunesMatchAttempt).where(ItunesMatchAttempt.app_id == app_id)
        ).first()

    def mark_confirmed(self, *, app_id: uuid.UUID) -> bool:
        try:
            result = self._session.execute(
                update(ItunesMatchAttempt)
                .where(
                    ItunesMatchAttempt.app_id == app_id,
                    ItunesMatchAttempt.status == MatchAttemptStatus.FOUND,
                )
                .values(status=MatchAttemptStatus.CONFIRMED, updated_at=utc_now())
                .execution_options(synchronize_session="fetch")
            )
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to confirm match attempt for {app_id}: {exc}") from exc
        return result.rowcount == 1

    def list_attempts(
        self,
        *,
        app_id: uuid.UUID | None = None,
        status: str | None = None,
        limit: int = 100,
    ) -> list[ItunesMatchAttempt]:
        stmt: Select[tuple[ItunesMatchAttempt]] = select(ItunesMatchAttempt)
        if app_id is not None:
            stmt = stmt.where(ItunesMatchAttempt.app_id == app_id)
        if status:
            stmt = stmt.where(ItunesMatchAttempt.status == status)
        stmt = stmt.order_by(ItunesMatchAttempt.updated_at.desc()).limit(max(1, limit))
        return list(self._session.scalars(stmt).all())
