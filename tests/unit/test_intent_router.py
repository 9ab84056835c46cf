"""Tests for the inbound intent adapter."""

from collections.abc import Generator
from unittest.mock import AsyncMock

import httpx
import pytest
from fastapi.testclient import TestClient

from omamori import main
from omamori.core.config import Settings
from omamori.core.kv_store import InMemoryStore, RedisStore
from omamori.domain.scope import Scope
from omamori.interface.intent_router import get_runtime
from omamori.main import app
from omamori.services import task_cache
from omamori.services.runtime import build_runtime, close_runtime
from tests.unit.helpers import make_task


TASKS_PATH = "/rest/v1/tasks"


@pytest.fixture
def client(runtime) -> Generator[TestClient, None, None]:
    """Test client wired to the fixture runtime (lifespan not started)."""
    app.dependency_overrides[get_runtime] = lambda: runtime
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.mark.unit
def test_health_endpoint_returns_healthy(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


@pytest.mark.unit
async def test_toggle_intent(client: TestClient, seed_cache, backend) -> None:
    await seed_cache(Scope.ME, [make_task(id="t1")])
    backend.queue("PATCH", TASKS_PATH, httpx.Response(204))

    response = client.post("/intents/toggle", json={"task_id": "t1", "scope": "me"})

    assert response.status_code == 202
    body = response.json()
    assert body["status"] == "synced"
    assert body["scope"] == "me"
    assert body["updates"]["is_done"] is True


@pytest.mark.unit
def test_toggle_unknown_task_is_accepted(client: TestClient) -> None:
    response = client.post("/intents/toggle", json={"task_id": "missing"})

    assert response.status_code == 202
    assert response.json()["status"] == "not_found"


@pytest.mark.unit
def test_toggle_rejects_unknown_scope(client: TestClient) -> None:
    response = client.post("/intents/toggle", json={"task_id": "t1", "scope": "partner9"})

    assert response.status_code == 422


@pytest.mark.unit
def test_refresh_intent(client: TestClient, backend) -> None:
    backend.queue("GET", TASKS_PATH, httpx.Response(200, text="[]"))

    response = client.post("/intents/refresh", json={"scope": "partner1"})

    assert response.status_code == 202
    assert response.json() == {"scope": "partner1", "outcome": "refreshed"}


@pytest.mark.unit
def test_refresh_all_intent(client: TestClient, backend) -> None:
    backend.queue("GET", TASKS_PATH, httpx.Response(200, text="[]"), httpx.Response(200, text="[]"))

    response = client.post("/intents/refresh-all")

    assert response.status_code == 202
    assert response.json() == {
        "me": "refreshed",
        "partner1": "refreshed",
        "partner2": "skipped",
        "partner3": "skipped",
    }


@pytest.mark.unit
async def test_snapshot_endpoint(client: TestClient, store) -> None:
    await task_cache.write_tasks(store, Scope.ME, [make_task(id="t1", title="Laundry")])

    response = client.get("/widgets/me/snapshot")

    assert response.status_code == 200
    body = response.json()
    assert body["header"] == "MY TASKS"
    assert body["tasks"][0]["title"] == "Laundry"


@pytest.mark.unit
def test_snapshot_unknown_scope(client: TestClient) -> None:
    assert client.get("/widgets/nobody/snapshot").status_code == 422


@pytest.mark.unit
def test_lifespan_closes_redis_store_on_shutdown(monkeypatch) -> None:
    redis_store = RedisStore("redis://localhost:6379/0")
    redis_store._client = AsyncMock()
    runtime = build_runtime(Settings(storage_backend="memory"), store=redis_store)
    monkeypatch.setattr(main, "configure_logfire", lambda: None)
    monkeypatch.setattr(main, "build_runtime", lambda _settings: runtime)

    with TestClient(app) as lifespan_client:
        assert lifespan_client.get("/health").status_code == 200
        redis_store._client.aclose.assert_not_awaited()

    redis_store._client.aclose.assert_awaited_once()


@pytest.mark.unit
async def test_close_runtime_leaves_other_stores_alone() -> None:
    store = InMemoryStore({"k": "v"})

    await close_runtime(build_runtime(Settings(storage_backend="memory"), store=store))

    assert await store.get("k") == "v"
