"""Response caching: cache policy, key derivation and backends."""

from __future__ import annotations

import copy
import hashlib
import json
import time
from threading import Lock
from typing import Any, Callable, Protocol, runtime_checkable

from ..utils.logging import get_logger

logger = get_logger(__name__)

# Read-only endpoints whose responses may be served from cache.
CACHEABLE_ENDPOINTS: tuple[str, ...] = (
    "/client/getContacts",
    "/client/getChats",
    "/session/status",
    "/client/getState",
    "/client/getClassInfo",
    "/client/getWWebVersion",
)


@runtime_checkable
class CacheBackend(Protocol):
    """Minimal store the request pipeline caches responses in."""

    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any, ttl: int) -> None: ...

    def delete(self, key: str) -> None: ...


def should_cache(method: str, endpoint: str) -> bool:
    """Only GET calls to whitelisted read-only endpoints are cached."""
    if method.upper() != "GET":
        return False
    path = endpoint.split("?", 1)[0]
    return any(path == prefix or path.startswith(prefix + "/") for prefix in CACHEABLE_ENDPOINTS)


def cache_key(method: str, endpoint: str, payload: Any, session_id: str) -> str:
    """Derive a deterministic cache key for one request."""
    normalized = endpoint.replace("/", "_").replace("{", "").replace("}", "")
    serialized = json.dumps(payload or {}, sort_keys=True, separators=(",", ":"), default=str)
    digest = hashlib.md5(serialized.encode("utf-8")).hexdigest()
    return f"whatsapp_api_{method.upper()}_{normalized}_{session_id}_{digest}"


class MemoryCache:
    """In-process TTL cache.

    Values are deep-copied on the way in and out, so callers never share
    mutable state with the store or with each other. Entries are evicted
    lazily on read. The clock is injectable so expiry can be driven from
    tests.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[float | None, Any]] = {}
        self._lock = Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if expires_at is not None and self._clock() >= expires_at:
                del self._entries[key]
                return None
        return copy.deepcopy(value)

    def set(self, key: str, value: Any, ttl: int) -> None:
        expires_at = self._clock() + ttl if ttl > 0 else None
        stored = copy.deepcopy(value)
        with self._lock:
            self._entries[key] = (expires_at, stored)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


CACHE_BACKENDS: dict[str, Callable[[], CacheBackend]] = {
    "memory": MemoryCache,
}


def build_cache(name: str) -> CacheBackend | None:
    """Create the cache backend registered under ``name``.

    Unknown names are logged and yield ``None`` so callers run uncached.
    """
    factory = CACHE_BACKENDS.get(name)
    if factory is None:
        logger.warning("Cache component '%s' not found, caching disabled", name)
        return None
    return factory()
