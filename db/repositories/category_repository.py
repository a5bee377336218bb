"""
Repository for catalog categories.
"""

from __future__ import annotations

import re

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.models.category import Category

DEFAULT_CATEGORY_SLUG = "utilities"

# Listing-site label words → catalog slug; first whole-word match wins.
CATEGORY_MAP: tuple[tuple[str, str], ...] = (
    ("productivity", "productivity"),
    ("development", "development"),
    ("design", "design"),
    ("utilities", "utilities"),
    ("entertainment", "entertainment"),
    ("education", "education"),
    ("business", "business"),
    ("graphics", "graphics-design"),
    ("graphic design", "graphics-design"),
    ("video", "video-audio"),
    ("audio", "video-audio"),
    ("music & audio", "video-audio"),
    ("social", "social-networking"),
    ("games", "games"),
    ("health", "health-fitness"),
    ("health & fitness", "health-fitness"),
    ("lifestyle", "lifestyle"),
    ("lifestyle & hobby", "lifestyle"),
    ("finance", "finance"),
    ("reference", "reference"),
    ("security", "security"),
    ("system utilities", "utilities"),
    ("internet utilities", "utilities"),
    ("developer tools", "development"),
    ("photography", "graphics-design"),
    ("ai", "productivity"),
    ("browsing", "utilities"),
    ("customization", "utilities"),
    ("medical software", "health-fitness"),
    ("travel", "lifestyle"),
)

CATEGORY_NAMES: dict[str, str] = {
    "productivity": "Productivity",
    "development": "Development",
    "design": "Design",
    "utilities": "Utilities",
    "entertainment": "Entertainment",
    "education": "Education",
    "business": "Business",
    "graphics-design": "Graphics & Design",
    "video-audio": "Video & Audio",
    "social-networking": "Social Networking",
    "games": "Games",
    "health-fitness": "Health & Fitness",
    "lifestyle": "Lifestyle",
    "finance": "Finance",
    "reference": "Reference",
    "security": "Security",
}


def resolve_category_slug(label: str | None) -> str:
    search_term = (label or "").strip().lower()
    if not search_term:
        return DEFAULT_CATEGORY_SLUG
    for key, slug in CATEGORY_MAP:
        if re.search(rf"\b{re.escape(key)}\b", search_term):
            return slug
    return DEFAULT_CATEGORY_SLUG


class CategoryRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get_by_slug(self, slug: str) -> Category | None:
        return self._session.scalars(select(Category).where(Category.slug == slug)).first()

    def get_or_create(self, slug: str) -> Category:
        category = self.get_by_slug(slug)
        if category is not None:
            return category
        category = Category(
            slug=slug,
            name=CATEGORY_NAMES.get(slug, slug.replace("-", " ").title()),
        )
        self._session.add(category)
        self._session.flush()
        return category

    def resolve_for_label(self, label: str | None) -> Category:
        return self.get_or_create(resolve_category_slug(label))
