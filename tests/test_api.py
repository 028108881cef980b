"""Tests for the HTTP binding in strangler_router.api."""

from fastapi.testclient import TestClient

from strangler_router.api import create_app
from strangler_router.config import Settings
from strangler_router.models import CustomerProvider
from strangler_router.observer import CompositeObserver, CountingObserver, LoggingObserver
from strangler_router.policy import PrefixPolicy
from strangler_router.providers import FixtureCustomerProvider, SyntheticCustomerProvider
from strangler_router.router import StranglerRouter


class DownProvider(CustomerProvider):

    async def lookup(self, customer_id):
        raise ConnectionError("refused")


def _client(settings=None, **kwargs):
    return TestClient(create_app(settings, **kwargs))


def test_modern_customer():
    response = _client().get("/api/customer", params={"id": "MODERN_1"})
    assert response.status_code == 200
    assert response.json() == {"id": "MODERN_1", "name": "Modern Customer"}


def test_legacy_customer():
    response = _client().get("/api/customer", params={"id": "LEGACY_1"})
    assert response.status_code == 200
    assert response.json() == {"id": "LEGACY_1", "name": "Legacy Customer"}


def test_source_exposed_when_configured():
    response = _client(Settings(expose_source=True)).get("/api/customer", params={"id": "MODERN_1"})
    assert response.json()["source"] == "modern"


def test_missing_id_is_400_and_not_routed():
    counter = CountingObserver()
    router = StranglerRouter(
        PrefixPolicy.modern_prefix(),
        {"legacy": SyntheticCustomerProvider("legacy", "L"), "modern": SyntheticCustomerProvider("modern", "M")},
        counter,
    )
    client = _client(router=router)
    assert client.get("/api/customer").status_code == 400
    assert client.get("/api/customer", params={"id": ""}).status_code == 400
    assert counter.total == 0


def test_not_found_is_404():
    router = StranglerRouter(
        PrefixPolicy.modern_prefix(),
        {"legacy": FixtureCustomerProvider("legacy", {}), "modern": FixtureCustomerProvider("modern", {})},
    )
    response = _client(router=router).get("/api/customer", params={"id": "LEGACY_9"})
    assert response.status_code == 404
    assert "LEGACY_9" in response.json()["detail"]


def test_backend_down_is_503_naming_backend():
    router = StranglerRouter(
        PrefixPolicy.modern_prefix(),
        {"legacy": SyntheticCustomerProvider("legacy", "L"), "modern": DownProvider("modern")},
    )
    response = _client(router=router).get("/api/customer", params={"id": "MODERN_1"})
    assert response.status_code == 503
    assert response.json()["backend"] == "modern"


def test_migration_progress():
    client = _client()
    for key in ["MODERN_1", "MODERN_2", "LEGACY_1", "other"]:
        client.get("/api/customer", params={"id": key})
    body = client.get("/api/migration").json()
    assert body["total"] == 4
    assert body["counts"] == {"modern": 2, "legacy": 2}
    assert body["fractions"] == {"modern": 0.5, "legacy": 0.5}


def test_health():
    body = _client().get("/health").json()
    assert body == {"status": "ok", "backends": ["legacy", "modern"]}


def test_migration_progress_found_inside_composite_observer():
    counter = CountingObserver()
    router = StranglerRouter(
        PrefixPolicy.modern_prefix(),
        {"legacy": SyntheticCustomerProvider("legacy", "L"), "modern": SyntheticCustomerProvider("modern", "M")},
        CompositeObserver(LoggingObserver("DEBUG"), counter),
    )
    client = _client(router=router)
    client.get("/api/customer", params={"id": "MODERN_1"})
    response = client.get("/api/migration")
    assert response.status_code == 200
    assert response.json()["counts"] == {"modern": 1}
