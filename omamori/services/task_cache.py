"""Per-scope task list cache on top of the shared key-value store.

Entries are always replaced as a whole list, never merged.
"""

import logging

from pydantic import ValidationError

from omamori.core.kv_store import KeyValueStore
from omamori.domain.scope import SCOPE_KEYS, Scope
from omamori.domain.task import TaskRecord, decode_task_list, encode_task_list


logger = logging.getLogger(__name__)


async def read_raw(store: KeyValueStore, scope: Scope) -> str | None:
    return await store.get(SCOPE_KEYS[scope].cache_key)


async def write_raw(store: KeyValueStore, scope: Scope, raw: str) -> bool:
    return await store.set(SCOPE_KEYS[scope].cache_key, raw)


async def read_tasks(store: KeyValueStore, scope: Scope) -> list[TaskRecord] | None:
    """Load a scope's cached tasks.

    Returns:
        The task list, or None when the entry is absent or cannot be decoded
    """
    raw = await read_raw(store, scope)
    if raw is None:
        return None
    try:
        return decode_task_list(raw)
    except ValidationError as e:
        logger.error("task_cache_decode_failed", extra={"scope": str(scope), "error": str(e)})
        return None


async def write_tasks(store: KeyValueStore, scope: Scope, tasks: list[TaskRecord]) -> bool:
    """Replace a scope's cached list."""
    written = await write_raw(store, scope, encode_task_list(tasks))
    if not written:
        logger.error("task_cache_write_failed", extra={"scope": str(scope)})
    return written
