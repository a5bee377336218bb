"""
db/models/itunes_match_attempt.py

Latest iTunes lookup attempt per catalog app.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import Float, ForeignKey, Index, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, JSONPayload, TimestampMixin


class MatchAttemptStatus:
    FOUND = "found"
    FAILED = "failed"
    CONFIRMED = "confirmed"


class ItunesMatchAttempt(Base, TimestampMixin):
    __tablename__ = "itunes_match_attempts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    app_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("apps.id", ondelete="CASCADE"),
        nullable=False,
    )
    search_term: Mapped[str] = mapped_column(String(255), nullable=False)
    developer_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    itunes_response: Mapped[dict[str, Any] | None] = mapped_column(
        JSONPayload,
        nullable=True,
        comment="Raw best-candidate payload returned by the lookup API",
    )
    confidence_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        comment="found, failed, confirmed",
    )
    mas_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    mas_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("app_id", name="uq_itunes_match_attempts_app_id"),
        Index("ix_itunes_match_attempts_status", "status"),
        Index("ix_itunes_match_attempts_created_at", "created_at"),
    )
