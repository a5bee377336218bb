"""
db/models/catalog_app.py

Normalized catalog app record.

Listing imports create rows; the iTunes match flow only ever touches the
MAS columns (``mas_id``, ``mas_url``, ``is_on_mas``).
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class CatalogAppSource:
    CUSTOM = "CUSTOM"
    MAS = "MAS"


class CatalogAppStatus:
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class CatalogApp(Base, TimestampMixin):
    __tablename__ = "apps"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    developer: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
    )
    price: Mapped[float | None] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=True)
    currency: Mapped[str] = mapped_column(String(8), nullable=False, default="USD")
    is_free: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    version: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    size_bytes: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    rating: Mapped[float | None] = mapped_column(Float, nullable=True)
    rating_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    website_url: Mapped[str] = mapped_column(
        String(1024),
        nullable=False,
        default="",
        comment="Listing page the app was imported from",
    )
    icon_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    minimum_os_version: Mapped[str | None] = mapped_column(String(255), nullable=True)
    source: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=CatalogAppSource.CUSTOM,
    )
    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=CatalogAppStatus.ACTIVE,
    )
    last_updated: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    is_on_mas: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    mas_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    mas_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    __table_args__ = (
        Index("ix_apps_name", "name"),
        Index("ix_apps_website_url", "website_url"),
        Index("ix_apps_source", "source"),
        Index("ix_apps_created_at", "created_at"),
        Index("ix_apps_mas_id", "mas_id"),
    )
