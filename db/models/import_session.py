"""
db/models/import_session.py

Per-category, per-page crawl/import progress rows.

Rows are named ``"<Category Name> - Page <N>"``; the page number is read
back from the name, so the naming scheme is part of the stored format.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class ImportSessionSourceType:
    BULK_PAGE = "BULK_PAGE"


class PageStatus:
    SCRAPED = "scraped"
    IMPORTED = "imported"


class ImportSession(Base, TimestampMixin):
    __tablename__ = "import_sessions"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    session_name: Mapped[str] = mapped_column(String(255), nullable=False)
    category_url: Mapped[str] = mapped_column(String(1024), nullable=False)
    source_type: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=ImportSessionSourceType.BULK_PAGE,
    )
    page_status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=PageStatus.SCRAPED,
        comment="scraped, imported",
    )
    apps_imported: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    apps_skipped: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    imported_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_import_sessions_category_url", "category_url"),
        Index("ix_import_sessions_category_url_status", "category_url", "page_status"),
        Index("ix_import_sessions_created_at", "created_at"),
    )
