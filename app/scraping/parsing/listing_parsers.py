"""
Parsers for category listing pages: app URLs, pagination and embedded previews.
"""

from __future__ import annotations

import html
import json
import re
from typing import Any
from urllib.parse import urljoin, urlsplit, urlunsplit

from bs4 import BeautifulSoup

from app.domain.catalog_scraping import PaginationInfo
from app.domain.scraped_app import AppPreview
from app.scraping.parsing.units import clean_text, clean_version, format_price_cents, parse_size_bytes

EXCLUDED_PATH_SEGMENTS: tuple[str, ...] = (
    "/explore/",
    "/categories/",
    "/search",
    "/about",
    "/contact",
    "/best-picks",
    "/reviews",
    "/articles",
    "/help",
    "/terms",
    "/privacy",
    "/cookie",
    "/rss",
    "/developer/",
    "/comparisons",
    "/how-to",
    "/content/",
    "/discontinued-apps",
    "/article/",
)
NON_APP_SUBDOMAINS = {"static", "cdn", "images", "img", "api", "assets", "media", "blog"}

CUSTOM_URL_PATTERN = re.compile(r'"custom_url"\s*:\s*"((?:[^"\\]|\\.)+)"')
APP_CANDIDATE_PATTERN = re.compile(
    r"""(?:"custom_url"\s*:\s*"((?:[^"\\]|\\.)+)")"""
    r"""|(?:\bhref\s*=\s*(?:"([^"]*)"|'([^']*)'))"""
)
PAGE_QUERY_PATTERN = re.compile(r"[?&]page=(\d+)")

_json_decoder = json.JSONDecoder()


def is_valid_app_url(url: str, host_suffix: str = "macupdate.com") -> bool:
    """
    Return True for app detail pages on the listing site.

    Two shapes are accepted: ``https://<app>.<suffix>/...`` and
    ``https://www.<suffix>/app/<slug>``.
    """

    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    if parts.scheme != "https":
        return False
    host = (parts.hostname or "").lower()
    suffix = host_suffix.lower()
    if not host.endswith("." + suffix):
        return False

    path = parts.path or "/"
    if any(segment in path for segment in EXCLUDED_PATH_SEGMENTS):
        return False

    subdomain = host[: -len(suffix) - 1]
    if "." in subdomain or not subdomain:
        return False
    if subdomain == "www":
        segments = [segment for segment in path.split("/") if segment]
        return len(segments) >= 2 and segments[0] == "app"
    return subdomain not in NON_APP_SUBDOMAINS


def canonicalize_app_url(raw_url: str, site_base_url: str) -> str:
    """
    Absolutize against the site root and drop query and fragment.
    """

    absolute = urljoin(site_base_url.rstrip("/") + "/", raw_url.strip())
    parts = urlsplit(absolute)
    return urlunsplit((parts.scheme, parts.netloc.lower(), parts.path, "", ""))


def extract_category_name(category_url: str) -> str:
    """
    Title-case the last path segment: ``.../music-audio`` → ``Music Audio``.
    """

    try:
        path = urlsplit(category_url).path
    except ValueError:
        return "Unknown Category"
    segments = [segment for segment in path.split("/") if segment]
    if not segments:
        return "Unknown Category"
    words = [word for word in segments[-1].split("-") if word]
    return " ".join(word[:1].upper() + word[1:] for word in words) or "Unknown Category"


def build_page_url(category_url: str, page_number: int) -> str:
    if page_number <= 1:
        return category_url
    separator = "&" if "?" in category_url else "?"
    return f"{category_url}{separator}page={page_number}"


def _unescape_json_string(raw: str) -> str:
    try:
        return json.loads(f'"{raw}"')
    except ValueError:
        return raw


def extract_app_urls(markup: str, *, site_base_url: str, host_suffix: str) -> list[str]:
    """
    Candidate app URLs in order of first appearance, deduplicated.

    Embedded ``custom_url`` JSON values and anchor hrefs (relative or
    absolute) are read in a single pass over the document.
    """

    urls: list[str] = []
    seen: set[str] = set()
    for match in APP_CANDIDATE_PATTERN.finditer(markup):
        custom_url, href = match.group(1), match.group(2) or match.group(3) or ""
        raw = _unescape_json_string(custom_url) if custom_url is not None else html.unescape(href)
        url = canonicalize_app_url(raw, site_base_url)
        if url in seen or not is_valid_app_url(url, host_suffix):
            continue
        seen.add(url)
        urls.append(url)
    return urls


def _page_number(text: str) -> int | None:
    cleaned = clean_text(text)
    return int(cleaned) if cleaned.isdigit() else None


def extract_pagination(markup: str, *, fallback_page: int = 1) -> PaginationInfo:
    """
    Current and highest page number from the listing pagination widget.

    Without the widget, ``page=N`` links are used for the total; a page with
    neither is reported as a single page.
    """

    soup = BeautifulSoup(markup, "html.parser")
    container = soup.select_one(".mu_search_results_pagination .muui_pagination")
    if container is not None:
        current_page = fallback_page
        for item in container.select(".muui_pagination_item_active"):
            number = _page_number(item.get_text(" ", strip=True))
            if number is not None:
                current_page = number
        total_pages = current_page
        for item in container.select(".muui_pagination_item"):
            number = _page_number(item.get_text(" ", strip=True))
            if number is not None and number > total_pages:
                total_pages = number
        return PaginationInfo(current_page=current_page, total_pages=total_pages)

    linked_pages = [int(match.group(1)) for match in PAGE_QUERY_PATTERN.finditer(markup)]
    total_pages = max([fallback_page, *linked_pages])
    return PaginationInfo(current_page=fallback_page, total_pages=total_pages)


def _enclosing_object_start(markup: str, index: int) -> int | None:
    depth = 0
    in_string = False
    position = index - 1
    while position >= 0:
        char = markup[position]
        if char == '"' and (position == 0 or markup[position - 1] != "\\"):
            in_string = not in_string
        elif not in_string:
            if char == "}":
                depth += 1
            elif char == "{":
                if depth == 0:
                    return position
                depth -= 1
        position -= 1
    return None


def _preview_from_listing_object(
    payload: dict[str, Any],
    *,
    site_base_url: str,
    host_suffix: str,
) -> AppPreview | None:
    raw_url = payload.get("custom_url")
    title = payload.get("title") or payload.get("name")
    if not isinstance(raw_url, str) or not isinstance(title, str) or not title.strip():
        return None
    url = canonicalize_app_url(raw_url, site_base_url)
    if not is_valid_app_url(url, host_suffix):
        return None

    developer = payload.get("developer")
    if isinstance(developer, dict):
        developer = developer.get("name")

    price = payload.get("price")
    if isinstance(price, dict):
        price = price.get("value")
    price_text = format_price_cents(float(price)) if isinstance(price, (int, float)) else None

    rating = payload.get("rating")
    rating_text = f"{float(rating):g}" if isinstance(rating, (int, float)) and rating > 0 else None

    filesize = payload.get("filesize")
    size_bytes = filesize if isinstance(filesize, int) else parse_size_bytes(filesize if isinstance(filesize, str) else None)

    version = payload.get("version")
    return AppPreview(
        url=url,
        name=clean_text(title),
        developer=clean_text(developer) or None if isinstance(developer, str) else None,
        version=clean_version(version) if isinstance(version, str) else None,
        price_text=price_text,
        rating_text=rating_text,
        size_bytes=size_bytes,
        source="listing",
    )


def extract_listing_previews(
    markup: str,
    *,
    site_base_url: str,
    host_suffix: str,
) -> dict[str, AppPreview]:
    """
    Previews keyed by canonical app URL, read from the JSON objects the
    listing page embeds around each ``custom_url``.
    """

    previews: dict[str, AppPreview] = {}
    for match in CUSTOM_URL_PATTERN.finditer(markup):
        start = _enclosing_object_start(markup, match.start())
        if start is None:
            continue
        try:
            payload, _ = _json_decoder.raw_decode(markup, start)
        except ValueError:
            continue
        if not isinstance(payload, dict):
            continue
        preview = _preview_from_listing_object(
            payload,
            site_base_url=site_base_url,
            host_suffix=host_suffix,
        )
        if preview is not None and preview.url not in previews:
            previews[preview.url] = preview
    return previews
