"""create catalog tables

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "categories",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("slug", sa.String(length=120), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug"),
    )
    op.create_index("ix_categories_name", "categories", ["name"], unique=False)

    op.create_table(
        "apps",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("developer", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("price", sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column("currency", sa.String(length=8), nullable=False),
        sa.Column("is_free", sa.Boolean(), nullable=False),
        sa.Column("version", sa.String(length=64), nullable=False),
        sa.Column("size_bytes", sa.BigInteger(), nullable=True),
        sa.Column("rating", sa.Float(), nullable=True),
        sa.Column("rating_count", sa.Integer(), nullable=False),
        sa.Column(
            "website_url",
            sa.String(length=1024),
            nullable=False,
            comment="Listing page the app was imported from",
        ),
        sa.Column("icon_url", sa.String(length=1024), nullable=True),
        sa.Column("minimum_os_version", sa.String(length=255), nullable=True),
        sa.Column("source", sa.String(length=16), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("last_updated", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_on_mas", sa.Boolean(), nullable=False),
        sa.Column("mas_id", sa.String(length=64), nullable=True),
        sa.Column("mas_url", sa.String(length=1024), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["category_id"], ["categories.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_apps_name", "apps", ["name"], unique=False)
    op.create_index("ix_apps_website_url", "apps", ["website_url"], unique=False)
    op.create_index("ix_apps_source", "apps", ["source"], unique=False)
    op.create_index("ix_apps_created_at", "apps", ["created_at"], unique=False)
    op.create_index("ix_apps_mas_id", "apps", ["mas_id"], unique=False)

    op.create_table(
        "screenshots",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("app_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("url", sa.String(length=2048), nullable=False),
        sa.Column("display_order", sa.Integer(), nullable=False),
        sa.Column("caption", sa.String(length=512), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["app_id"], ["apps.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_screenshots_app_id_display_order",
        "screenshots",
        ["app_id", "display_order"],
        unique=False,
    )

    op.create_table(
        "itunes_match_attempts",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("app_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("search_term", sa.String(length=255), nullable=False),
        sa.Column("developer_name", sa.String(length=255), nullable=True),
        sa.Column(
            "itunes_response",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=True,
            comment="Raw best-candidate payload returned by the lookup API",
        ),
        sa.Column("confidence_score", sa.Float(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False, comment="found, failed, confirmed"),
        sa.Column("mas_id", sa.String(length=64), nullable=True),
        sa.Column("mas_url", sa.String(length=1024), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["app_id"], ["apps.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("app_id", name="uq_itunes_match_attempts_app_id"),
    )
    op.create_index("ix_itunes_match_attempts_status", "itunes_match_attempts", ["status"], unique=False)
    op.create_index(
        "ix_itunes_match_attempts_created_at",
        "itunes_match_attempts",
        ["created_at"],
        unique=False,
    )

    op.create_table(
        "import_sessions",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("session_name", sa.String(length=255), nullable=False),
        sa.Column("category_url", sa.String(length=1024), nullable=False),
        sa.Column("source_type", sa.String(length=32), nullable=False),
        sa.Column("page_status", sa.String(length=16), nullable=False, comment="scraped, imported"),
        sa.Column("apps_imported", sa.Integer(), nullable=False),
        sa.Column("apps_skipped", sa.Integer(), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("imported_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_import_sessions_category_url", "import_sessions", ["category_url"], unique=False)
    op.create_index(
        "ix_import_sessions_category_url_status",
        "import_sessions",
        ["category_url", "page_status"],
        unique=False,
    )
    op.create_index("ix_import_sessions_created_at", "import_sessions", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_import_sessions_created_at", table_name="import_sessions")
    op.drop_index("ix_import_sessions_category_url_status", table_name="import_sessions")
    op.drop_index("ix_import_sessions_category_url", table_name="import_sessions")
    op.drop_table("import_sessions")

    op.drop_index("ix_itunes_match_attempts_created_at", table_name="itunes_match_attempts")
    op.drop_index("ix_itunes_match_attempts_status", table_name="itunes_match_attempts")
    op.drop_table("itunes_match_attempts")

    op.drop_index("ix_screenshots_app_id_display_order", table_name="screenshots")
    op.drop_table("screenshots")

    op.drop_index("ix_apps_mas_id", table_name="apps")
    op.drop_index("ix_apps_source", table_name="apps")
    op.drop_index("ix_apps_created_at", table_name="apps")
    op.drop_index("ix_apps_website_url", table_name="apps")
    op.drop_index("ix_apps_name", table_name="apps")
    op.drop_table("apps")

    op.drop_index("ix_categories_name", table_name="categories")
    op.drop_table("categories")
