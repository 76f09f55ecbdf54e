"""End-to-end tests of the HTTP routes with faked upstream endpoints."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from aggregator_service.core.config import Settings
from aggregator_service.infrastructure.cache.memory_cache import MemoryCache
from aggregator_service.infrastructure.cache.persistence import JsonFilePersistence
from aggregator_service.main import create_application
from aggregator_service.services.catalog_service import CatalogService
from aggregator_service.domain.models.item import ItemUpdate
from aggregator_service.domain.models.page import Page
from aggregator_service.services.aggregator import Aggregator
from aggregator_service.services.paginator import Paginator
from tests.conftest import CONTAINERS_URL, ITEMS_URL, FakeClock, FakeDetailFetcher, FakePageFetcher

PREFIX = "/api/v1"


@pytest.fixture
def client(catalog_service: CatalogService):
    app = create_application(settings=Settings(), catalog_service=catalog_service)
    with TestClient(app) as test_client:
        yield test_client


def test_get_items_returns_flattened_collection(client: TestClient):
    response = client.get(f"{PREFIX}/subjects/42/items")

    assert response.status_code == 200
    body = response.json()
    assert body["subject"] == "42"
    assert [item["id"] for item in body["items"]] == [1, 2, 3]
    assert body["items"][2] == {
        "id": 3,
        "name": "Cash",
        "containerId": 20,
        "containerName": "Tycoon",
        "description": None,
        "price": None,
    }


def test_cache_hit_has_same_shape(client: TestClient, page_fetcher):
    first = client.get(f"{PREFIX}/subjects/42/items").json()
    second = client.get(f"{PREFIX}/subjects/42/items").json()

    assert first == second
    assert len(page_fetcher.calls) == 4


def test_enrichment_without_base_is_404(client: TestClient):
    response = client.post(f"{PREFIX}/subjects/42/enrichment", json={"updates": [{"id": 1, "price": 0}]})

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "no_base_collection"


def test_enrichment_applies_explicit_fields(client: TestClient):
    client.get(f"{PREFIX}/subjects/42/items")

    response = client.post(
        f"{PREFIX}/subjects/42/enrichment",
        json={"updates": [
            {"id": 1, "price": 0},
            {"id": "2", "description": ""},
            {"id": 404, "price": 9},
        ]},
    )

    assert response.status_code == 200
    assert response.json() == {"ok": True, "updated": 2, "total": 3}

    items = client.get(f"{PREFIX}/subjects/42/items").json()["items"]
    assert (items[0]["description"], items[0]["price"]) == (None, 0)
    assert (items[1]["description"], items[1]["price"]) == ("", None)


def test_enrichment_requires_id(client: TestClient, page_fetcher):
    response = client.post(f"{PREFIX}/subjects/42/enrichment", json={"updates": [{"price": 1}]})

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "validation_error"
    assert page_fetcher.calls == []


def test_refresh_details(client: TestClient, detail_fetcher: FakeDetailFetcher):
    detail_fetcher.details = {"2": ItemUpdate(id=2, description="Fast", price=0)}
    client.get(f"{PREFIX}/subjects/42/items")

    response = client.post(f"{PREFIX}/subjects/42/details/refresh")

    assert response.json() == {"ok": True, "updated": 1, "total": 3}
    items = client.get(f"{PREFIX}/subjects/42/items").json()["items"]
    assert (items[1]["description"], items[1]["price"]) == ("Fast", 0)


def test_invalidate(client: TestClient, page_fetcher):
    client.get(f"{PREFIX}/subjects/42/items")

    assert client.delete(f"{PREFIX}/subjects/42/cache").json() == {"ok": True, "invalidated": True}
    assert client.delete(f"{PREFIX}/subjects/42/cache").json() == {"ok": True, "invalidated": False}


def test_correlation_id_is_echoed(client: TestClient):
    response = client.get(f"{PREFIX}/health", headers={"X-Correlation-ID": "req-123"})

    assert response.status_code == 200
    assert response.headers["X-Correlation-ID"] == "req-123"
    assert response.json()["status"] == "ok"


def test_detailed_health_reports_cache_stats(client: TestClient):
    client.get(f"{PREFIX}/subjects/42/items")

    body = client.get(f"{PREFIX}/health/detailed").json()

    cache = next(dep for dep in body["dependencies"] if dep["name"] == "cache")
    assert cache["details"]["entries"] == 1


def test_persisted_cache_is_loaded_at_startup(tmp_path: Path, aggregator, page_fetcher):
    clock = FakeClock()
    path = tmp_path / "cache.json"
    path.write_text(json.dumps({
        "99": {
            "value": {"subject": "99", "items": [{
                "id": 5, "name": "Saved", "containerId": 1, "containerName": "Old",
                "description": "kept", "price": 0,
            }]},
            "expires_at": clock.now + 30,
        }
    }))
    service = CatalogService(
        cache=MemoryCache(ttl=60, persistence=JsonFilePersistence(path), clock=clock),
        aggregator=aggregator,
        detail_fetcher=FakeDetailFetcher(),
    )

    with TestClient(create_application(settings=Settings(), catalog_service=service)) as client:
        items = client.get(f"{PREFIX}/subjects/99/items").json()["items"]

    assert items[0]["description"] == "kept"
    assert items[0]["price"] == 0
    assert page_fetcher.calls == []


def test_malformed_upstream_records_do_not_break_the_collection(clock):
    fetcher = FakePageFetcher({
        "https://upstream.test/users/42/games?limit=50": Page(
            items=[{"id": 10, "name": 2024}, {"id": None, "name": "Ghost"}]
        ),
        "https://upstream.test/games/10/passes?limit=50": Page(
            items=[{"id": None, "name": "Null"}, {"id": 1, "name": 99}]
        ),
    })
    service = CatalogService(
        cache=MemoryCache(ttl=60, clock=clock),
        aggregator=Aggregator(Paginator(fetcher), CONTAINERS_URL, ITEMS_URL),
        detail_fetcher=FakeDetailFetcher(),
    )

    with TestClient(create_application(settings=Settings(), catalog_service=service)) as client:
        first = client.get(f"{PREFIX}/subjects/42/items")
        second = client.get(f"{PREFIX}/subjects/42/items")

    assert first.status_code == 200
    assert first.json()["items"] == [{
        "id": 1,
        "name": "99",
        "containerId": 10,
        "containerName": "2024",
        "description": None,
        "price": None,
    }]
    assert second.json() == first.json()
