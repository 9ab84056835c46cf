"""Free-text last-error channel shared with the host app."""

import logging

from omamori.core.config import Constants
from omamori.core.errors import SyncError
from omamori.core.kv_store import KeyValueStore
from omamori.core.timestamps import Clock, format_timestamp, utc_now


logger = logging.getLogger(__name__)


async def record_error(
    store: KeyValueStore,
    *,
    operation: str,
    error: SyncError | str,
    clock: Clock = utc_now,
) -> str:
    """Overwrite the last-error entry and log it.

    Returns:
        The recorded line
    """
    detail = error.describe() if isinstance(error, SyncError) else error
    line = f"{format_timestamp(clock())} {operation}: {detail}"
    logger.warning("widget_error_recorded", extra={"operation": operation, "detail": detail})
    await store.set(Constants.LAST_ERROR_KEY, line)
    return line


async def read_last_error(store: KeyValueStore) -> str | None:
    return await store.get(Constants.LAST_ERROR_KEY)


async def clear_last_error(store: KeyValueStore) -> bool:
    return await store.delete(Constants.LAST_ERROR_KEY)
