"""
Ordered, typed extraction strategies for app detail pages.

Each field owns a tuple of ``FieldStrategy`` objects tried in order; a
strategy returns a normalized value or ``None`` when it has nothing to offer.
Strategies only read from a ``ParsedDocument`` and never mutate it.
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from app.scraping.parsing.units import (
    clean_text,
    clean_version,
    format_price_cents,
    parse_count,
    parse_rating,
    parse_size_bytes,
)

SITE_TITLE_SUFFIX = re.compile(r"\s*[-|–]\s*MacUpdate.*$", flags=re.IGNORECASE)
DOWNLOAD_PREFIX = re.compile(r"^download\s+", flags=re.IGNORECASE)
PLATFORM_SUFFIX = re.compile(r"\s+(?:for\s+mac(?:os)?|\(mac(?:os)?\))$", flags=re.IGNORECASE)

EMBEDDED_DEVELOPER = re.compile(r'"developer"\s*:\s*\{[^{}]*?"name"\s*:\s*"([^"]+)"')
EMBEDDED_PRICE_CENTS = re.compile(r'"price"\s*:\s*\{[^{}]*?"value"\s*:\s*(\d+(?:\.\d+)?)')
EMBEDDED_RATING = re.compile(r'"rating"\s*:\s*"?(\d+(?:\.\d+)?)')
EMBEDDED_CATEGORY = re.compile(r'"category"\s*:\s*"([^"]+)"')
EMBEDDED_FILESIZE = re.compile(r'"filesize"\s*:\s*"?([^",}]+)')

TEXT_VERSION = re.compile(r"\bVersion\s*:?\s*v?(\d+(?:\.\d+)+)", flags=re.IGNORECASE)
TEXT_SIZE = re.compile(r"\b(?:File\s+)?Size\s*:?\s*(\d[\d.,]*\s*[KMGT]?B)\b", flags=re.IGNORECASE)
TEXT_RATING = re.compile(r"(\d+(?:\.\d+)?)\s*(?:out\s+of|/)\s*5\b", flags=re.IGNORECASE)
TEXT_RATING_COUNT = re.compile(r"(\d[\d,]*(?:\.\d+)?\s*[KMB]?)\s+Ratings?\b", flags=re.IGNORECASE)
TEXT_REQUIREMENTS = re.compile(r"\b(?:macOS|OS X)\s+\d+(?:\.\d+)*(?:\s+or\s+later)?", flags=re.IGNORECASE)
SCREENSHOT_SRC = re.compile(r"(?:screenshot|screen|shot)[^\"']*\.(?:jpe?g|png|gif|webp)", flags=re.IGNORECASE)

MAX_DESCRIPTION_LENGTH = 5000

# Keyword → category label for breadcrumb/navigation fallbacks; first match wins.
BREADCRUMB_CATEGORY_KEYWORDS: tuple[tuple[str, str], ...] = (
    ("music", "Music & Audio"),
    ("audio", "Music & Audio"),
    ("system", "System Utilities"),
    ("utilities", "System Utilities"),
    ("video", "Video"),
    ("photo", "Photography"),
    ("productivity", "Productivity"),
    ("developer", "Developer Tools"),
    ("development", "Developer Tools"),
    ("games", "Games"),
    ("education", "Education"),
    ("business", "Business"),
    ("customization", "Customization"),
    ("finance", "Finance"),
    ("graphic", "Graphic Design"),
    ("design", "Graphic Design"),
    ("health", "Health & Fitness"),
    ("fitness", "Health & Fitness"),
    ("internet", "Internet Utilities"),
    ("lifestyle", "Lifestyle & Hobby"),
    ("medical", "Medical Software"),
    ("security", "Security"),
    ("travel", "Travel"),
)

_APP_JSON_LD_TYPES = {"softwareapplication", "mobileapplication", "webapplication", "product"}


class ParsedDocument:
    """
    Raw markup plus the derived views strategies read from.

    Everything is computed once in ``__init__`` so one instance can be shared
    across threads.
    """

    def __init__(self, markup: str | None, *, url: str | None = None) -> None:
        self.markup = markup or ""
        self.url = url
        self.soup = BeautifulSoup(self.markup, "html.parser")
        self.json_ld: tuple[dict[str, Any], ...] = tuple(_iter_json_ld_objects(self.soup))
        self.specs: dict[str, str] = _collect_specs(self.soup)

    def absolute_url(self, value: str | None) -> str | None:
        raw = (value or "").strip()
        if not raw or raw.startswith("data:"):
            return None
        if raw.startswith("//"):
            return "https:" + raw
        if self.url:
            return urljoin(self.url, raw)
        return raw

    def app_json_ld(self) -> dict[str, Any] | None:
        for item in self.json_ld:
            raw_type = item.get("@type")
            types = raw_type if isinstance(raw_type, list) else [raw_type]
            if any(isinstance(t, str) and t.lower() in _APP_JSON_LD_TYPES for t in types):
                return item
        return None


@dataclass(frozen=True)
class FieldStrategy:
    """
    One named way of extracting one field.
    """

    name: str
    extract: Callable[[ParsedDocument], Any]


# ---------------------------------------------------------------------------
# Document helpers
# ---------------------------------------------------------------------------


def _iter_json_ld_objects(soup: BeautifulSoup) -> Iterator[dict[str, Any]]:
    for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
        raw = script.string or script.get_text()
        if not raw or not raw.strip():
            continue
        try:
            data = json.loads(raw)
        except ValueError:
            continue
        stack = [data]
        while stack:
            item = stack.pop(0)
            if isinstance(item, list):
                stack.extend(item)
            elif isinstance(item, dict):
                if isinstance(item.get("@graph"), list):
                    stack.extend(item["@graph"])
                yield item


def _collect_specs(soup: BeautifulSoup) -> dict[str, str]:
    specs: dict[str, str] = {}
    for item in soup.select(".specs_list .specs_list_item"):
        title_node = item.select_one(".specs_list_title")
        value_node = item.select_one(".specs_list_description")
        if title_node is None or value_node is None:
            continue
        title = clean_text(title_node.get_text(" ", strip=True)).rstrip(":").lower()
        value = clean_text(value_node.get_text(" ", strip=True))
        if title and value and title not in specs:
            specs[title] = value
    for term in soup.find_all("dt"):
        definition = term.find_next_sibling("dd")
        if definition is None:
            continue
        title = clean_text(term.get_text(" ", strip=True)).rstrip(":").lower()
        value = clean_text(definition.get_text(" ", strip=True))
        if title and value and title not in specs:
            specs[title] = value
    return specs


def _select_text(doc: ParsedDocument, selector: str) -> str | None:
    node = doc.soup.select_one(selector)
    if node is None:
        return None
    return clean_text(node.get_text(" ", strip=True)) or None


def _select_attr(doc: ParsedDocument, selector: str, attribute: str) -> str | None:
    node = doc.soup.select_one(selector)
    if not isinstance(node, Tag):
        return None
    value = node.get(attribute)
    if isinstance(value, list):
        value = " ".join(value)
    return clean_text(value) or None


def _meta_content(doc: ParsedDocument, *, name: str | None = None, prop: str | None = None) -> str | None:
    attrs = {"name": name} if name else {"property": prop}
    node = doc.soup.find("meta", attrs=attrs)
    if not isinstance(node, Tag):
        return None
    return clean_text(node.get("content")) or None


def _search(pattern: re.Pattern[str], doc: ParsedDocument) -> str | None:
    match = pattern.search(doc.markup)
    if match is None:
        return None
    return clean_text(match.group(1)) or None


def _json_ld_name(value: Any) -> str | None:
    if isinstance(value, list):
        value = value[0] if value else None
    if isinstance(value, dict):
        value = value.get("name")
    return clean_text(value) if isinstance(value, str) else None


def _clean_app_name(raw: str | None) -> str | None:
    name = clean_text(raw)
    name = SITE_TITLE_SUFFIX.sub("", name)
    name = DOWNLOAD_PREFIX.sub("", name)
    name = PLATFORM_SUFFIX.sub("", name)
    return name.strip() or None


def _text_strategy(selector: str, transform: Callable[[str | None], Any] = lambda v: v) -> Callable[[ParsedDocument], Any]:
    return lambda doc: transform(_select_text(doc, selector))


def _attr_strategy(
    selector: str,
    attribute: str,
    transform: Callable[[str | None], Any] = lambda v: v,
) -> Callable[[ParsedDocument], Any]:
    return lambda doc: transform(_select_attr(doc, selector, attribute))


def _spec_strategy(title: str, transform: Callable[[str | None], Any] = lambda v: v) -> Callable[[ParsedDocument], Any]:
    return lambda doc: transform(doc.specs.get(title))


def _rating_text(value: str | None) -> str | None:
    rating = parse_rating(value)
    return None if rating is None else f"{rating:g}"


# ---------------------------------------------------------------------------
# name
# ---------------------------------------------------------------------------


def name_from_json_ld(doc: ParsedDocument) -> str | None:
    app = doc.app_json_ld()
    return _clean_app_name(app.get("name")) if app else None


def name_from_title_tag(doc: ParsedDocument) -> str | None:
    if doc.soup.title is None:
        return None
    return _clean_app_name(doc.soup.title.get_text(" ", strip=True))


# ---------------------------------------------------------------------------
# developer
# ---------------------------------------------------------------------------


def developer_from_embedded_json(doc: ParsedDocument) -> str | None:
    return _search(EMBEDDED_DEVELOPER, doc)


def developer_from_json_ld(doc: ParsedDocument) -> str | None:
    app = doc.app_json_ld()
    if not app:
        return None
    for key in ("author", "creator", "publisher"):
        name = _json_ld_name(app.get(key))
        if name:
            return name
    return None


def developer_from_profile_link(doc: ParsedDocument) -> str | None:
    for link in doc.soup.select('a[href*="/developer/"]'):
        text = clean_text(link.get_text(" ", strip=True))
        if text:
            return text
    return None


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


def version_from_json_ld(doc: ParsedDocument) -> str | None:
    app = doc.app_json_ld()
    return clean_version(app.get("softwareVersion")) if app else None


def version_from_text(doc: ParsedDocument) -> str | None:
    return clean_version(_search(TEXT_VERSION, doc))


# ---------------------------------------------------------------------------
# price
# ---------------------------------------------------------------------------


def price_from_embedded_json(doc: ParsedDocument) -> str | None:
    cents = _search(EMBEDDED_PRICE_CENTS, doc)
    return format_price_cents(float(cents)) if cents is not None else None


def price_from_json_ld(doc: ParsedDocument) -> str | None:
    app = doc.app_json_ld()
    offers = app.get("offers") if app else None
    if isinstance(offers, list):
        offers = offers[0] if offers else None
    if not isinstance(offers, dict) or offers.get("price") is None:
        return None
    try:
        amount = float(offers["price"])
    except (TypeError, ValueError):
        return clean_text(str(offers["price"])) or None
    return "Free" if amount <= 0 else f"${amount:.2f}"


# ---------------------------------------------------------------------------
# size
# ---------------------------------------------------------------------------


def size_from_json_ld(doc: ParsedDocument) -> int | None:
    app = doc.app_json_ld()
    return parse_size_bytes(app.get("fileSize")) if app else None


def size_from_embedded_json(doc: ParsedDocument) -> int | None:
    raw = _search(EMBEDDED_FILESIZE, doc)
    if raw is None:
        return None
    if raw.isdigit():
        return int(raw)
    return parse_size_bytes(raw)


def size_from_text(doc: ParsedDocument) -> int | None:
    return parse_size_bytes(_search(TEXT_SIZE, doc))


# ---------------------------------------------------------------------------
# category
# ---------------------------------------------------------------------------


def category_from_json_ld(doc: ParsedDocument) -> str | None:
    app = doc.app_json_ld()
    value = app.get("applicationCategory") if app else None
    return clean_text(value) or None if isinstance(value, str) else None


def category_from_embedded_json(doc: ParsedDocument) -> str | None:
    return _search(EMBEDDED_CATEGORY, doc)


def category_from_breadcrumbs(doc: ParsedDocument) -> str | None:
    chunks = [node.get_text(" ", strip=True) for node in doc.soup.select(".breadcrumb, nav")]
    haystack = " ".join(chunks).lower()
    if not haystack:
        return None
    for keyword, label in BREADCRUMB_CATEGORY_KEYWORDS:
        if keyword in haystack:
            return label
    return None


# ---------------------------------------------------------------------------
# screenshots
# ---------------------------------------------------------------------------


def _collect_urls(doc: ParsedDocument, raw_values: list[str | None]) -> tuple[str, ...] | None:
    urls: list[str] = []
    for raw in raw_values:
        url = doc.absolute_url(raw)
        if url and url not in urls:
            urls.append(url)
    return tuple(urls) or None


def screenshots_from_gallery(doc: ParsedDocument) -> tuple[str, ...] | None:
    raw_values: list[str | None] = []
    for gallery in doc.soup.select(".mu_app_gallery"):
        for source in gallery.select("picture source[srcset]"):
            srcset = str(source.get("srcset") or "")
            first = srcset.split(",")[0].strip().split(" ")[0]
            raw_values.append(first)
        for image in gallery.select("img[src]"):
            raw_values.append(str(image.get("src")))
    return _collect_urls(doc, raw_values)


def screenshots_from_list(doc: ParsedDocument) -> tuple[str, ...] | None:
    return _collect_urls(doc, [str(node.get("src")) for node in doc.soup.select(".screenshots img[src]")])


def screenshots_from_image_names(doc: ParsedDocument) -> tuple[str, ...] | None:
    raw_values = [
        str(node.get("src"))
        for node in doc.soup.find_all("img", src=True)
        if SCREENSHOT_SRC.search(str(node.get("src")))
    ]
    return _collect_urls(doc, raw_values)


# ---------------------------------------------------------------------------
# rating
# ---------------------------------------------------------------------------


def rating_from_embedded_json(doc: ParsedDocument) -> str | None:
    return _rating_text(_search(EMBEDDED_RATING, doc))


def rating_from_json_ld(doc: ParsedDocument) -> str | None:
    app = doc.app_json_ld()
    aggregate = app.get("aggregateRating") if app else None
    if not isinstance(aggregate, dict):
        return None
    return _rating_text(str(aggregate.get("ratingValue", "")))


def rating_from_text(doc: ParsedDocument) -> str | None:
    return _rating_text(_search(TEXT_RATING, doc))


def rating_count_from_text(doc: ParsedDocument) -> int | None:
    return parse_count(_search(TEXT_RATING_COUNT, doc))


def rating_count_from_json_ld(doc: ParsedDocument) -> int | None:
    app = doc.app_json_ld()
    aggregate = app.get("aggregateRating") if app else None
    if not isinstance(aggregate, dict):
        return None
    raw = aggregate.get("ratingCount", aggregate.get("reviewCount"))
    return parse_count(str(raw)) if raw is not None else None


# ---------------------------------------------------------------------------
# description, icon, requirements
# ---------------------------------------------------------------------------


def _truncate_description(value: str | None) -> str | None:
    text = clean_text(value)
    if not text:
        return None
    if len(text) > MAX_DESCRIPTION_LENGTH:
        return text[:MAX_DESCRIPTION_LENGTH].rstrip() + "..."
    return text


def description_from_json_ld(doc: ParsedDocument) -> str | None:
    app = doc.app_json_ld()
    value = app.get("description") if app else None
    return _truncate_description(value) if isinstance(value, str) else None


def description_from_meta(doc: ParsedDocument) -> str | None:
    return _truncate_description(
        _meta_content(doc, name="description") or _meta_content(doc, prop="og:description")
    )


def icon_from_meta(doc: ParsedDocument) -> str | None:
    return doc.absolute_url(_meta_content(doc, prop="og:image"))


def requirements_from_list(doc: ParsedDocument) -> str | None:
    items = [clean_text(node.get_text(" ", strip=True)) for node in doc.soup.select(".system-requirements li")]
    joined = "; ".join(item for item in items if item)
    return joined or None


def requirements_from_text(doc: ParsedDocument) -> str | None:
    match = TEXT_REQUIREMENTS.search(doc.markup)
    return clean_text(match.group(0)) if match else None


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


FIELD_STRATEGIES: dict[str, tuple[FieldStrategy, ...]] = {
    "name": (
        FieldStrategy("json_ld", name_from_json_ld),
        FieldStrategy("h1", _text_strategy("h1", _clean_app_name)),
        FieldStrategy("app_title", _text_strategy(".app-title", _clean_app_name)),
        FieldStrategy("og_title", lambda doc: _clean_app_name(_meta_content(doc, prop="og:title"))),
        FieldStrategy("title_tag", name_from_title_tag),
    ),
    "developer": (
        FieldStrategy("embedded_json", developer_from_embedded_json),
        FieldStrategy("json_ld", developer_from_json_ld),
        FieldStrategy("developer_name", _text_strategy(".developer-name")),
        FieldStrategy("data_developer", _attr_strategy("[data-developer]", "data-developer")),
        FieldStrategy("profile_link", developer_from_profile_link),
    ),
    "version": (
        FieldStrategy("specs", _spec_strategy("version", clean_version)),
        FieldStrategy("version_node", _text_strategy(".version", clean_version)),
        FieldStrategy("data_version", _attr_strategy("[data-version]", "data-version", clean_version)),
        FieldStrategy("json_ld", version_from_json_ld),
        FieldStrategy("labeled_text", version_from_text),
    ),
    "price_text": (
        FieldStrategy("embedded_json", price_from_embedded_json),
        FieldStrategy("price_node", _text_strategy(".price")),
        FieldStrategy("data_price", _attr_strategy("[data-price]", "data-price")),
        FieldStrategy("specs", _spec_strategy("price")),
        FieldStrategy("json_ld", price_from_json_ld),
    ),
    "size_bytes": (
        FieldStrategy("specs", _spec_strategy("size", parse_size_bytes)),
        FieldStrategy("file_size_node", _text_strategy(".file-size", parse_size_bytes)),
        FieldStrategy("json_ld", size_from_json_ld),
        FieldStrategy("embedded_json", size_from_embedded_json),
        FieldStrategy("labeled_text", size_from_text),
    ),
    "category": (
        FieldStrategy("category_node", _text_strategy(".category")),
        FieldStrategy("data_category", _attr_strategy("[data-category]", "data-category")),
        FieldStrategy("json_ld", category_from_json_ld),
        FieldStrategy("embedded_json", category_from_embedded_json),
        FieldStrategy("breadcrumbs", category_from_breadcrumbs),
    ),
    "screenshot_urls": (
        FieldStrategy("gallery", screenshots_from_gallery),
        FieldStrategy("screenshot_list", screenshots_from_list),
        FieldStrategy("image_names", screenshots_from_image_names),
    ),
    "rating_text": (
        FieldStrategy("embedded_json", rating_from_embedded_json),
        FieldStrategy("rating_node", _text_strategy(".rating", _rating_text)),
        FieldStrategy("data_rating", _attr_strategy("[data-rating]", "data-rating", _rating_text)),
        FieldStrategy("json_ld", rating_from_json_ld),
        FieldStrategy("out_of_five", rating_from_text),
    ),
    "rating_count": (
        FieldStrategy("ratings_label", rating_count_from_text),
        FieldStrategy("rating_count_node", _text_strategy(".rating-count", parse_count)),
        FieldStrategy("json_ld", rating_count_from_json_ld),
    ),
    "description": (
        FieldStrategy("json_ld", description_from_json_ld),
        FieldStrategy("description_node", _text_strategy(".description", _truncate_description)),
        FieldStrategy("app_description", _text_strategy(".app-description", _truncate_description)),
        FieldStrategy("meta", description_from_meta),
    ),
    "icon_url": (
        FieldStrategy("main_logo", lambda doc: doc.absolute_url(_select_attr(doc, "img.main_logo", "src"))),
        FieldStrategy("app_icon", lambda doc: doc.absolute_url(_select_attr(doc, ".app-icon img", "src"))),
        FieldStrategy("icon", lambda doc: doc.absolute_url(_select_attr(doc, ".icon img", "src"))),
        FieldStrategy("og_image", icon_from_meta),
    ),
    "requirements": (
        FieldStrategy("specs", _spec_strategy("os")),
        FieldStrategy("requirements_node", _text_strategy(".requirements")),
        FieldStrategy("requirements_list", requirements_from_list),
        FieldStrategy("macos_text", requirements_from_text),
    ),
}

FIELD_NAMES: tuple[str, ...] = tuple(FIELD_STRATEGIES)
