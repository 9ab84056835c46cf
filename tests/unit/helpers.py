"""Shared helpers for unit tests: fixed clock values, task factory, fake backend."""

from collections import defaultdict, deque
from datetime import UTC, datetime

import httpx

from omamori.core.kv_store import InMemoryStore
from omamori.domain.task import TaskRecord


FIXED_NOW = datetime(2025, 1, 15, 9, 30, tzinfo=UTC)
FIXED_NOW_ISO = "2025-01-15T09:30:00.000Z"

BACKEND_URL = "https://example.supabase.co"
ANON_KEY = "anon-key"


class RejectingStore(InMemoryStore):
    """In-memory store whose writes to the given keys fail like a full disk would."""

    def __init__(self, initial: dict[str, str] | None = None, *, rejected_keys: set[str]) -> None:
        super().__init__(initial)
        self.rejected_keys = rejected_keys

    async def set(self, key: str, value: str) -> bool:
        if key in self.rejected_keys:
            return False
        return await super().set(key, value)


class RecordingBackend:
    """httpx.MockTransport handler replaying queued responses per (method, path).

    Every request is recorded. A request without a queued response fails the test.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._queued: dict[tuple[str, str], deque[httpx.Response | Exception]] = defaultdict(deque)

    def queue(self, method: str, path: str, *responses: httpx.Response | Exception) -> None:
        self._queued[(method, path)].extend(responses)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queued = self._queued[(request.method, request.url.path)]
        if not queued:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")
        response = queued.popleft()
        if isinstance(response, Exception):
            raise response
        return response


def make_task(**overrides: object) -> TaskRecord:
    """Build a task with sensible defaults."""
    data: dict[str, object] = {
        "id": "t1",
        "title": "Water the plants",
        "is_done": False,
        "done_at": None,
        "created_at": "2025-01-01T08:00:00.000Z",
    }
    data.update(overrides)
    return TaskRecord(**data)
