"""Wiring of the engine's collaborators."""

from dataclasses import dataclass, field

import httpx

from omamori.core.config import Settings
from omamori.core.kv_store import KeyValueStore, RedisStore, build_store
from omamori.core.timestamps import Clock, utc_now
from omamori.interface.supabase_client import SupabaseTaskClient
from omamori.interface.timeline import TimelineCenter, timeline_center
from omamori.services.credential_store import CredentialStore
from omamori.services.token_refresher import TokenRefresher


@dataclass
class WidgetRuntime:
    """Collaborators shared by every entry point of one process."""

    store: KeyValueStore
    credentials: CredentialStore
    sync_client: SupabaseTaskClient
    timeline: TimelineCenter = field(default_factory=lambda: timeline_center)
    clock: Clock = utc_now


def build_runtime(
    settings: Settings,
    *,
    store: KeyValueStore | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    clock: Clock | None = None,
    timeline: TimelineCenter | None = None,
) -> WidgetRuntime:
    """Build a runtime from settings, with optional overrides for tests."""
    store = store if store is not None else build_store(settings)
    credentials = CredentialStore(store, settings)
    refresher = TokenRefresher(credentials, transport=transport)
    return WidgetRuntime(
        store=store,
        credentials=credentials,
        sync_client=SupabaseTaskClient(credentials, refresher, transport=transport),
        timeline=timeline or timeline_center,
        clock=clock or utc_now,
    )


async def close_runtime(runtime: WidgetRuntime) -> None:
    """Release connections held by the runtime's storage backend."""
    if isinstance(runtime.store, RedisStore):
        await runtime.store.close()
