"""
tests/conftest.py

Shared fixtures: an in-memory catalog store and fake HTTP collaborators.
"""

from __future__ import annotations

from collections.abc import Callable, Generator
from typing import Any

import pytest
import requests
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import db.models  # noqa: F401 - registers every table on Base.metadata
from app.domain.errors import FetchError
from app.scraping.config.models import CatalogScrapingSettings
from db.base import Base


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    """Fresh SQLite database per test, schema created from the models."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, class_=Session, autoflush=False, expire_on_commit=False)
    session = factory()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture()
def scraping_settings() -> CatalogScrapingSettings:
    return CatalogScrapingSettings(
        site_base_url="https://www.macupdate.com",
        allowed_host_suffix="macupdate.com",
        user_agent="catalog-ingest-tests",
        default_page_limit=5,
        max_page_limit=10,
        request_delay_seconds=0.0,
        timeout_seconds=5.0,
        max_retries=0,
        backoff_initial_seconds=0.1,
        backoff_multiplier=2.0,
        preview_cap=10,
        preview_max_workers=2,
        crawl_budget_seconds=60.0,
    )


class FakeFetcher:
    """
    Serves canned markup by URL. Values that are exceptions are raised;
    unknown URLs raise ``FetchError`` with a 404.
    """

    def __init__(self, pages: dict[str, str | Exception]) -> None:
        self.pages = dict(pages)
        self.requested: list[str] = []

    def fetch_text(self, url: str) -> str:
        self.requested.append(url)
        value = self.pages.get(url)
        if value is None:
            raise FetchError(f"Failed to fetch {url}: HTTP 404", url=url, status_code=404)
        if isinstance(value, Exception):
            raise value
        return value


@pytest.fixture()
def fake_fetcher_factory() -> Callable[[dict[str, str | Exception]], FakeFetcher]:
    return FakeFetcher


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, *, text: str | None = None) -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else ""

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}", response=self)


class FakeHTTPSession:
    """
    Stand-in for ``requests.Session`` returning queued responses in order.
    """

    def __init__(self, responses: list[FakeResponse | Exception]) -> None:
        self.responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"url": url, **kwargs})
        if not self.responses:
            raise AssertionError(f"Unexpected request to {url}")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture()
def fake_http_session_factory() -> Callable[[list[FakeResponse | Exception]], FakeHTTPSession]:
    return FakeHTTPSession


class FakeClock:
    """Monotonic clock advanced manually or by a fixed step per reading."""

    def __init__(self, start: float = 0.0, step: float = 0.0) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> float:
        current = self.now
        self.now += self.step
        return current

    def advance(self, seconds: float) -> None:
        self.now += seconds
