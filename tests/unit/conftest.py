"""Pytest configuration and fixtures for unit tests."""

from collections.abc import Callable
from datetime import datetime

import httpx
import pytest

from omamori.core.config import Constants, Settings
from omamori.core.kv_store import InMemoryStore
from omamori.domain.scope import Scope
from omamori.domain.task import TaskRecord
from omamori.interface.timeline import TimelineCenter
from omamori.services import task_cache
from omamori.services.runtime import WidgetRuntime, build_runtime
from tests.unit.helpers import ANON_KEY, BACKEND_URL, FIXED_NOW, RecordingBackend


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    return lambda: FIXED_NOW


@pytest.fixture
def store() -> InMemoryStore:
    """Shared store seeded with backend credentials and two scope user ids."""
    return InMemoryStore(
        {
            Constants.BACKEND_URL_KEY: BACKEND_URL,
            Constants.ANON_KEY_KEY: ANON_KEY,
            Constants.ACCESS_TOKEN_KEY: "access-1",
            Constants.REFRESH_TOKEN_KEY: "refresh-1",
            Constants.MY_USER_ID_KEY: "user-me",
            Constants.PARTNER_USER_ID_KEYS[0]: "user-p1",
        }
    )


@pytest.fixture
def backend() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture
def timeline() -> TimelineCenter:
    return TimelineCenter()


@pytest.fixture
def runtime(
    store: InMemoryStore,
    backend: RecordingBackend,
    timeline: TimelineCenter,
    fixed_clock: Callable[[], datetime],
) -> WidgetRuntime:
    return build_runtime(
        Settings(storage_backend="memory", supabase_url=None, supabase_anon_key=None),
        store=store,
        transport=httpx.MockTransport(backend),
        clock=fixed_clock,
        timeline=timeline,
    )


@pytest.fixture
def seed_cache(store: InMemoryStore) -> Callable:
    """Write task lists into scope caches without counting as engine writes."""

    async def _seed(scope: Scope, tasks: list[TaskRecord]) -> None:
        await task_cache.write_tasks(store, scope, tasks)
        store.write_counts.clear()

    return _seed
