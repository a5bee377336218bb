"""
tests/test_listing_parsers.py

Category listing parsing: URL filtering, pagination, embedded previews.
"""

from __future__ import annotations

import pytest

from app.scraping.parsing.listing_parsers import (
    build_page_url,
    canonicalize_app_url,
    extract_app_urls,
    extract_category_name,
    extract_listing_previews,
    extract_pagination,
    is_valid_app_url,
)

SITE = "https://www.macupdate.com"

LISTING_MARKUP = r"""
<html><body>
<script>
window.__DATA__ = {"apps":[{"custom_url":"https:\/\/bartender.macupdate.com\/","title":"Bartender 5",
"developer":{"name":"Surtees Studios"},"price":{"value":1600},"rating":4.5,"version":"5.0.1","filesize":"12 MB"}]};
</script>
<a href="/app/mac/123/alfred?ref=list">Alfred</a>
<a href="https://bartender.macupdate.com/">Bartender again</a>
<a href="https://cdn.macupdate.com/logo.png">Logo</a>
<a href="https://www.macupdate.com/explore/categories/utilities">Utilities</a>
</body></html>
"""

PAGINATION_MARKUP = """
<div class="mu_search_results_pagination">
  <ul class="muui_pagination">
    <li class="muui_pagination_item">1</li>
    <li class="muui_pagination_item muui_pagination_item_active">2</li>
    <li class="muui_pagination_item">3</li>
    <li class="muui_pagination_item">7</li>
    <li class="muui_pagination_item">Next</li>
  </ul>
</div>
"""


class TestIsValidAppUrl:
    @pytest.mark.parametrize(
        "url",
        [
            "https://bartender.macupdate.com/",
            "https://www.macupdate.com/app/mac/12345/bartender",
        ],
    )
    def test_accepts_app_pages(self, url: str) -> None:
        assert is_valid_app_url(url)

    @pytest.mark.parametrize(
        "url",
        [
            "http://bartender.macupdate.com/",
            "https://www.macupdate.com/explore/categories/utilities",
            "https://cdn.macupdate.com/logo.png",
            "https://a.b.macupdate.com/",
            "https://example.com/app/mac/1/thing",
            "https://www.macupdate.com/",
            "https://bartender.macupdate.com/developer/surtees",
        ],
    )
    def test_rejects_everything_else(self, url: str) -> None:
        assert not is_valid_app_url(url)


def test_canonicalize_drops_query_and_fragment() -> None:
    assert (
        canonicalize_app_url("/app/mac/1/thing?ref=x#top", SITE)
        == "https://www.macupdate.com/app/mac/1/thing"
    )


class TestExtractAppUrls:
    def test_order_of_first_appearance_without_duplicates(self) -> None:
        urls = extract_app_urls(LISTING_MARKUP, site_base_url=SITE, host_suffix="macupdate.com")
        assert urls == [
            "https://bartender.macupdate.com/",
            "https://www.macupdate.com/app/mac/123/alfred",
        ]

    def test_relative_links_keep_query_and_fragment_targets(self) -> None:
        markup = """
        <a href="/app/mac/55/hazel#reviews">Hazel</a>
        <a href='/app/mac/77/istat-menus?utm=list&amp;ref=1'>iStat</a>
        """
        urls = extract_app_urls(markup, site_base_url=SITE, host_suffix="macupdate.com")
        assert urls == [
            "https://www.macupdate.com/app/mac/55/hazel",
            "https://www.macupdate.com/app/mac/77/istat-menus",
        ]

    def test_mixed_sources_follow_document_order(self) -> None:
        markup = r"""
        <a href="https://hazel.macupdate.com/">Hazel</a>
        <script>{"custom_url":"https:\/\/bartender.macupdate.com\/"}</script>
        <a href="/app/mac/123/alfred">Alfred</a>
        <a href="https://istat-menus.macupdate.com/">iStat</a>
        """
        urls = extract_app_urls(markup, site_base_url=SITE, host_suffix="macupdate.com")
        assert urls == [
            "https://hazel.macupdate.com/",
            "https://bartender.macupdate.com/",
            "https://www.macupdate.com/app/mac/123/alfred",
            "https://istat-menus.macupdate.com/",
        ]

    def test_empty_page(self) -> None:
        assert extract_app_urls("<html></html>", site_base_url=SITE, host_suffix="macupdate.com") == []


class TestExtractPagination:
    def test_reads_widget(self) -> None:
        pagination = extract_pagination(PAGINATION_MARKUP, fallback_page=1)
        assert pagination.current_page == 2
        assert pagination.total_pages == 7

    def test_page_links_without_widget(self) -> None:
        markup = '<a href="?page=2">2</a><a href="?page=4">4</a>'
        pagination = extract_pagination(markup, fallback_page=1)
        assert pagination.current_page == 1
        assert pagination.total_pages == 4

    def test_no_pagination_is_single_page(self) -> None:
        pagination = extract_pagination("<p>nothing</p>", fallback_page=3)
        assert pagination.current_page == 3
        assert pagination.total_pages == 3


def test_embedded_previews() -> None:
    previews = extract_listing_previews(LISTING_MARKUP, site_base_url=SITE, host_suffix="macupdate.com")
    assert list(previews) == ["https://bartender.macupdate.com/"]
    preview = previews["https://bartender.macupdate.com/"]
    assert preview.name == "Bartender 5"
    assert preview.developer == "Surtees Studios"
    assert preview.price_text == "$16.00"
    assert preview.rating_text == "4.5"
    assert preview.version == "5.0.1"
    assert preview.size_bytes == 12 * 1024**2
    assert preview.source == "listing"


class TestPageUrls:
    def test_first_page_is_bare(self) -> None:
        assert build_page_url(f"{SITE}/explore/categories/utilities", 1) == f"{SITE}/explore/categories/utilities"

    def test_later_pages_use_query(self) -> None:
        assert build_page_url(f"{SITE}/explore/categories/utilities", 3) == f"{SITE}/explore/categories/utilities?page=3"
        assert build_page_url(f"{SITE}/search?q=x", 2) == f"{SITE}/search?q=x&page=2"


class TestCategoryName:
    def test_title_cases_last_segment(self) -> None:
        assert extract_category_name(f"{SITE}/explore/categories/music-audio") == "Music Audio"

    def test_unknown_without_path(self) -> None:
        assert extract_category_name(f"{SITE}/") == "Unknown Category"


def test_preview_version_drops_label_and_build() -> None:
    markup = r"""<script>{"custom_url":"https:\/\/bartender.macupdate.com\/","title":"Bartender 5","version":"Version 5.0 (Build 3)"}</script>"""
    previews = extract_listing_previews(markup, site_base_url=SITE, host_suffix="macupdate.com")
    assert previews["https://bartender.macupdate.com/"].version == "5.0"
