"""
db/models/screenshot.py

Ordered screenshot URLs attached to a catalog app.
"""

from __future__ import annotations

import uuid

from sqlalchemy import ForeignKey, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class Screenshot(Base, TimestampMixin):
    __tablename__ = "screenshots"

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
    url: Mapped[str] = mapped_column(String(2048), nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False)
    caption: Mapped[str | None] = mapped_column(String(512), nullable=True)

    __table_args__ = (Index("ix_screenshots_app_id_display_order", "app_id", "display_order"),)
