"""Key-value storage shared between the host app and widget processes.

Every backend offers atomic single-key reads and writes. There are no
transactions across keys or processes: the last writer wins.
"""

import asyncio
import logging
import os
import re
import tempfile
import threading
from collections import Counter
from pathlib import Path
from typing import Protocol

from redis.asyncio import Redis
from redis.asyncio.connection import ConnectionPool
from redis.exceptions import RedisError

from omamori.core.config import Constants, Settings


logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


def validate_key(key: str) -> None:
    """Validate that a storage key is safe to use as a file name or Redis key."""
    if not _KEY_PATTERN.match(key) or key in {".", ".."}:
        msg = f"Invalid storage key: {key!r}. Only letters, digits, '_', '.' and '-' are allowed."
        raise ValueError(msg)


class KeyValueStore(Protocol):
    """Narrow string storage interface used by the engine."""

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> bool: ...

    async def delete(self, *keys: str) -> bool: ...


class InMemoryStore:
    """Thread-safe in-memory store."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()
        self.write_counts: Counter[str] = Counter()

    async def get(self, key: str) -> str | None:
        validate_key(key)
        with self._lock:
            return self._data.get(key)

    async def set(self, key: str, value: str) -> bool:
        validate_key(key)
        with self._lock:
            self._data[key] = value
            self.write_counts[key] += 1
            logger.debug("Stored key: %s", key)
            return True

    async def delete(self, *keys: str) -> bool:
        if not keys:
            return False
        with self._lock:
            for key in keys:
                self._data.pop(key, None)
            logger.debug("Deleted %d key(s)", len(keys))
            return True

    def snapshot(self) -> dict[str, str]:
        """Return a copy of all stored values."""
        with self._lock:
            return dict(self._data)


class FileStore:
    """Store that keeps one file per key inside a shared directory.

    Writes land in a temporary file that is renamed over the target, so readers
    in other processes see either the old or the new value.
    """

    def __init__(self, directory: Path) -> None:
        self._directory = Path(directory)
        self._directory.mkdir(parents=True, exist_ok=True)

    @property
    def directory(self) -> Path:
        return self._directory

    def _path(self, key: str) -> Path:
        validate_key(key)
        return self._directory / key

    async def get(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return await asyncio.to_thread(path.read_text, encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning("File store read error for key %s: %s", key, e)
            return None

    async def set(self, key: str, value: str) -> bool:
        path = self._path(key)
        try:
            await asyncio.to_thread(self._write_atomic, path, value)
        except OSError as e:
            logger.warning("File store write error for key %s: %s", key, e)
            return False
        logger.debug("Stored key: %s", key)
        return True

    def _write_atomic(self, path: Path, value: str) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=self._directory, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    async def delete(self, *keys: str) -> bool:
        if not keys:
            return False
        try:
            paths = [self._path(key) for key in keys]
            await asyncio.to_thread(self._unlink_all, paths)
        except OSError as e:
            logger.warning("File store delete error: %s", e)
            return False
        logger.debug("Deleted %d key(s)", len(keys))
        return True

    @staticmethod
    def _unlink_all(paths: list[Path]) -> None:
        for path in paths:
            path.unlink(missing_ok=True)


class RedisStore:
    """Async Redis store with connection pooling.

    Redis errors are logged and reported through the return value.
    """

    def __init__(self, redis_url: str) -> None:
        self._pool = ConnectionPool.from_url(
            redis_url,
            decode_responses=True,
            max_connections=Constants.REDIS_MAX_CONNECTIONS,
        )
        self._client: Redis = Redis(connection_pool=self._pool)
        logger.info("Redis store initialized")

    async def get(self, key: str) -> str | None:
        validate_key(key)
        try:
            return await self._client.get(key)
        except RedisError as e:
            logger.warning("Redis GET error for key %s: %s", key, e)
            return None

    async def set(self, key: str, value: str) -> bool:
        validate_key(key)
        try:
            await self._client.set(key, value)
        except RedisError as e:
            logger.warning("Redis SET error for key %s: %s", key, e)
            return False
        logger.debug("Stored key: %s", key)
        return True

    async def delete(self, *keys: str) -> bool:
        if not keys:
            return False
        try:
            await self._client.delete(*keys)
        except RedisError as e:
            logger.warning("Redis DELETE error: %s", e)
            return False
        return True

    async def close(self) -> None:
        """Close Redis connection."""
        await self._client.aclose()
        logger.info("Redis store closed")


def build_store(settings: Settings) -> KeyValueStore:
    """Create the storage backend selected in settings."""
    if settings.storage_backend == "memory":
        return InMemoryStore()
    if settings.storage_backend == "redis":
        redis_url = settings.require_credential("redis_url", "Redis")
        return RedisStore(redis_url)
    return FileStore(settings.storage_dir)
