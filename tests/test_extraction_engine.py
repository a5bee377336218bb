"""
tests/test_extraction_engine.py

Field extraction over app detail pages.
"""

from __future__ import annotations

import pytest

from app.domain.errors import ParseError
from app.scraping.parsing.extractor import UNKNOWN_DEVELOPER, ExtractionEngine
from app.scraping.parsing.strategies import FieldStrategy

APP_URL = "https://bartender.macupdate.com/"

DETAIL_MARKUP = """
<html>
<head>
  <title>Download Bartender 5 for Mac | MacUpdate</title>
  <meta name="description" content="Organize your menu bar.">
  <meta property="og:image" content="https://cdn.macupdate.com/icons/bartender.png">
</head>
<body>
  <nav>Home Utilities</nav>
  <h1>Bartender 5</h1>
  <a href="https://www.macupdate.com/developer/surtees">Surtees Studios</a>
  <ul class="specs_list">
    <li class="specs_list_item">
      <span class="specs_list_title">Version</span>
      <span class="specs_list_description">5.0.1</span>
    </li>
    <li class="specs_list_item">
      <span class="specs_list_title">Size</span>
      <span class="specs_list_description">12.5 MB</span>
    </li>
    <li class="specs_list_item">
      <span class="specs_list_title">OS</span>
      <span class="specs_list_description">macOS 12.0 or later</span>
    </li>
  </ul>
  <div class="price">$16.00</div>
  <div class="rating">4.5</div>
  <span>1.2K Ratings</span>
  <div class="mu_app_gallery">
    <img src="//cdn.macupdate.com/shots/1.png">
    <img src="/shots/2.png">
  </div>
</body>
</html>
"""

JSON_LD_MARKUP = """
<html><head>
<script type="application/ld+json">
{"@context": "https://schema.org", "@graph": [
  {"@type": "WebPage", "name": "Alfred page"},
  {"@type": "SoftwareApplication", "name": "Alfred", "author": {"name": "Running with Crayons"},
   "softwareVersion": "5.1", "offers": {"price": "0"},
   "aggregateRating": {"ratingValue": "4.8", "ratingCount": "250"},
   "applicationCategory": "Productivity"}
]}
</script>
</head><body></body></html>
"""


@pytest.fixture()
def engine() -> ExtractionEngine:
    return ExtractionEngine()


class TestDetailPage:
    def test_extracts_every_field(self, engine: ExtractionEngine) -> None:
        app = engine.extract_app(engine.parse(DETAIL_MARKUP, url=APP_URL), APP_URL)

        assert app.source_url == APP_URL
        assert app.name == "Bartender 5"
        assert app.developer == "Surtees Studios"
        assert app.version == "5.0.1"
        assert app.price_text == "$16.00"
        assert app.size_bytes == 13_107_200
        assert app.category == "System Utilities"
        assert app.rating_text == "4.5"
        assert app.rating_count == 1200
        assert app.description == "Organize your menu bar."
        assert app.icon_url == "https://cdn.macupdate.com/icons/bartender.png"
        assert app.requirements == "macOS 12.0 or later"
        assert app.screenshot_urls == (
            "https://cdn.macupdate.com/shots/1.png",
            "https://bartender.macupdate.com/shots/2.png",
        )

    def test_json_ld_graph(self, engine: ExtractionEngine) -> None:
        values = engine.extract_fields(
            engine.parse(JSON_LD_MARKUP, url=APP_URL),
            ["name", "developer", "version", "price_text", "rating_text", "rating_count", "category"],
        )
        assert values == {
            "name": "Alfred",
            "developer": "Running with Crayons",
            "version": "5.1",
            "price_text": "Free",
            "rating_text": "4.8",
            "rating_count": 250,
            "category": "Productivity",
        }

    def test_title_tag_name_is_cleaned(self, engine: ExtractionEngine) -> None:
        document = engine.parse("<title>Download Bartender 5 for Mac | MacUpdate</title>")
        assert engine.extract_field(document, "name") == "Bartender 5"


class TestFieldSelection:
    def test_requested_order_does_not_change_values(self, engine: ExtractionEngine) -> None:
        document = engine.parse(DETAIL_MARKUP, url=APP_URL)
        forward = engine.extract_fields(document, ["name", "rating_text", "size_bytes"])
        backward = engine.extract_fields(document, ["size_bytes", "rating_text", "name"])
        assert forward == backward

    def test_unknown_field(self, engine: ExtractionEngine) -> None:
        with pytest.raises(ValueError):
            engine.extract_field(engine.parse("<html></html>"), "colour")

    def test_absent_field_is_none(self, engine: ExtractionEngine) -> None:
        assert engine.extract_field(engine.parse("<html></html>"), "version") is None


class TestStrategyChain:
    def test_failing_and_empty_strategies_are_skipped(self) -> None:
        def broken(_document):
            raise RuntimeError("selector exploded")

        engine = ExtractionEngine(
            {
                "name": (
                    FieldStrategy("broken", broken),
                    FieldStrategy("empty", lambda _document: ""),
                    FieldStrategy("fixed", lambda _document: "Fallback Name"),
                ),
            }
        )
        assert engine.extract_field(engine.parse("<html></html>"), "name") == "Fallback Name"

    def test_first_present_value_wins(self) -> None:
        engine = ExtractionEngine(
            {
                "name": (
                    FieldStrategy("first", lambda _document: "First"),
                    FieldStrategy("second", lambda _document: "Second"),
                ),
            }
        )
        assert engine.extract_field(engine.parse(""), "name") == "First"


class TestExtractApp:
    def test_missing_name_raises(self, engine: ExtractionEngine) -> None:
        with pytest.raises(ParseError):
            engine.extract_app(engine.parse("<html><body><p>404</p></body></html>"), APP_URL)

    def test_developer_defaults_when_absent(self, engine: ExtractionEngine) -> None:
        app = engine.extract_app(engine.parse("<html><body><h1>Lonely App</h1></body></html>"), APP_URL)
        assert app.developer == UNKNOWN_DEVELOPER
        assert app.screenshot_urls == ()
