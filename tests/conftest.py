"""Shared test fixtures."""

import asyncio
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from stash_library.api import get_session
from stash_library.app import app
from stash_library.classification import classify
from stash_library.models.content import ContentMetadata, SavedContent
from stash_library.search.keyword import KeywordSearch
from stash_library.session.machine import LibrarySession
from stash_library.storage.gateway import InMemoryContentStore

BASE_TIME = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


def build_content(url: str = "https://example.com/article", age_minutes: int = 0, **overrides) -> SavedContent:
    """Build a SavedContent classified from its URL; older items get larger age_minutes."""
    values = {
        "id": uuid4(),
        "title": "example.com",
        "source_url": url,
        "category": classify(url),
        "created_at": BASE_TIME - timedelta(minutes=age_minutes),
    }
    values.update(overrides)
    return SavedContent(**values)


class FakeFetcher:
    """MetadataFetcher returning canned metadata per URL, or raising a canned error."""

    def __init__(self, responses: dict[str, ContentMetadata | Exception] | None = None):
        self.responses = responses or {}
        self.calls: list[str] = []

    async def fetch(self, url: str) -> ContentMetadata:
        self.calls.append(url)
        response = self.responses.get(url)
        if response is None:
            return ContentMetadata(title=f"Title for {url}", description="A description")
        if isinstance(response, Exception):
            raise response
        return response


class GatedSearch:
    """SearchService whose answers are released by the test, one query at a time."""

    def __init__(self):
        self._gates: dict[str, asyncio.Event] = {}
        self._results: dict[str, list[SavedContent] | Exception] = {}
        self.calls: list[str] = []

    def _gate(self, query: str) -> asyncio.Event:
        return self._gates.setdefault(query, asyncio.Event())

    def respond(self, query: str, results: list[SavedContent] | Exception) -> None:
        self._results[query] = results
        self._gate(query).set()

    async def search(self, query: str) -> list[SavedContent]:
        self.calls.append(query)
        await self._gate(query).wait()
        result = self._results.get(query, [])
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def make_content():
    """Factory for SavedContent test records."""
    return build_content


@pytest.fixture
def store() -> InMemoryContentStore:
    return InMemoryContentStore()


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def gated_search() -> GatedSearch:
    return GatedSearch()


@pytest.fixture
def client(store: InMemoryContentStore, fetcher: FakeFetcher):
    """TestClient whose session uses the in-memory store and fake fetcher."""
    session = LibrarySession(store=store, fetcher=fetcher, search=KeywordSearch(store))
    app.dependency_overrides[get_session] = lambda: session
    yield TestClient(app)
    app.dependency_overrides.clear()
