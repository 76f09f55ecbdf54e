"""Shared test fixtures: a controllable clock and in-memory upstream fakes.

No network access. Upstream pages are served from dictionaries keyed by URL.
"""

from __future__ import annotations

import asyncio
from typing import Dict, List, Optional, Union

import pytest

from aggregator_service.adapters.interfaces.page_source import DetailFetcher, PageFetcher
from aggregator_service.core.exceptions import UpstreamUnavailable
from aggregator_service.domain.models.item import AggregatedResult, Item, ItemUpdate, id_key
from aggregator_service.domain.models.page import Page
from aggregator_service.infrastructure.cache.memory_cache import MemoryCache
from aggregator_service.services.aggregator import Aggregator
from aggregator_service.services.catalog_service import CatalogService
from aggregator_service.services.paginator import Paginator

CONTAINERS_URL = "https://upstream.test/users/{subject}/games?limit=50"
ITEMS_URL = "https://upstream.test/games/{container_id}/passes?limit=50"


class FakeClock:
    """Clock whose time only moves when told to."""

    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakePageFetcher(PageFetcher):
    """Serves pages by exact URL and records every request."""

    def __init__(self, pages: Optional[Dict[str, Union[Page, Exception]]] = None, delay: float = 0.0):
        self.pages = pages or {}
        self.delay = delay
        self.calls: List[str] = []

    async def fetch_page(self, url: str) -> Page:
        self.calls.append(url)
        if self.delay:
            await asyncio.sleep(self.delay)
        response = self.pages.get(url)
        if response is None:
            raise UpstreamUnavailable(url, status_code=404)
        if isinstance(response, Exception):
            raise response
        return response


class FakeDetailFetcher(DetailFetcher):
    """Serves item details by id; ids without details fail like a 500."""

    def __init__(self, details: Optional[Dict[str, ItemUpdate]] = None):
        self.details = details or {}
        self.calls: List[str] = []
        self.closed = False

    async def fetch_details(self, item_id) -> ItemUpdate:
        self.calls.append(id_key(item_id))
        update = self.details.get(id_key(item_id))
        if update is None:
            raise UpstreamUnavailable(f"details/{item_id}", status_code=500)
        return update

    async def close(self) -> None:
        self.closed = True


def make_item(item_id, container_id=10, container_name="Obby", **fields) -> Item:
    return Item(
        id=item_id,
        name=fields.pop("name", f"Pass {item_id}"),
        container_id=container_id,
        container_name=container_name,
        **fields,
    )


def two_container_pages() -> Dict[str, Page]:
    """Subject 42 owns containers 10 and 20; container 10's items span two pages."""
    return {
        "https://upstream.test/users/42/games?limit=50": Page(
            items=[{"id": 10, "name": "Obby"}, {"id": 20, "name": "Tycoon"}]
        ),
        "https://upstream.test/games/10/passes?limit=50": Page(
            items=[{"id": 1, "name": "VIP"}], next_cursor="c1"
        ),
        "https://upstream.test/games/10/passes?limit=50&cursor=c1": Page(
            items=[{"id": 2, "name": "Speed"}]
        ),
        "https://upstream.test/games/20/passes?limit=50": Page(
            items=[{"id": 3, "name": "Cash"}]
        ),
    }


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> MemoryCache:
    return MemoryCache(ttl=60, clock=clock)


@pytest.fixture
def page_fetcher() -> FakePageFetcher:
    return FakePageFetcher(two_container_pages())


@pytest.fixture
def detail_fetcher() -> FakeDetailFetcher:
    return FakeDetailFetcher()


@pytest.fixture
def aggregator(page_fetcher: FakePageFetcher) -> Aggregator:
    return Aggregator(
        paginator=Paginator(page_fetcher),
        containers_url_template=CONTAINERS_URL,
        items_url_template=ITEMS_URL,
    )


@pytest.fixture
def catalog_service(
    cache: MemoryCache, aggregator: Aggregator, detail_fetcher: FakeDetailFetcher
) -> CatalogService:
    return CatalogService(cache=cache, aggregator=aggregator, detail_fetcher=detail_fetcher)


@pytest.fixture
def sample_result() -> AggregatedResult:
    return AggregatedResult(
        subject="42",
        items=[
            make_item(7, price=None),
            make_item(8, description="Old", price=25),
            make_item("9", container_id=20, container_name="Tycoon"),
        ],
    )
