"""In-memory TTL store used for per-identity attempt counters.

Thread-safe and bounded; designed to be swapped for Redis behind
``AbstractKeyValueStore`` when running more than one worker.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable

from reset_guard.adapters.cache.base import AbstractKeyValueStore

logger = logging.getLogger(__name__)


@dataclass
class CacheItem:
    """Container for cached values with expiration metadata."""

    value: Any
    expires_at: float | None


class InMemoryKeyValueStore(AbstractKeyValueStore):
    """Thread-safe, in-memory TTL store with LRU eviction.

    Attributes:
        max_entries: Maximum number of stored items (None for unlimited).
    """

    def __init__(
        self,
        max_entries: int | None = 10_000,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be >= 1 or None")
        self._max_entries = max_entries
        self._clock = clock
        self._store: OrderedDict[str, CacheItem] = OrderedDict()
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"InMemoryKeyValueStore(max_entries={self._max_entries}, "
            f"size={len(self._store)}, hits={self._hits}, misses={self._misses}, "
            f"evictions={self._evictions})"
        )

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            item = self._live_item_locked(key)
            if item is None:
                self._misses += 1
                return default

            self._hits += 1
            self._store.move_to_end(key)  # mark as recently used
            return item.value

    def put(self, key: str, value: Any, ttl_seconds: float | None = None) -> None:
        with self._lock:
            self._write_locked(key, value, ttl_seconds)

    def increment(self, key: str, amount: int = 1, *, ttl_seconds: float | None = None) -> int:
        with self._lock:
            item = self._live_item_locked(key)
            current = 0 if item is None else item.value
            if not isinstance(current, int):
                raise TypeError(f"value stored under {key[:32]!r} is not an integer")

            new_value = current + amount
            if ttl_seconds is None and item is not None:
                # Keep the existing expiry
                self._write_locked(key, new_value, None, expires_at=item.expires_at)
            else:
                self._write_locked(key, new_value, ttl_seconds)
            return new_value

    def ttl(self, key: str) -> float | None:
        with self._lock:
            item = self._live_item_locked(key)
            if item is None or item.expires_at is None:
                return None
            return max(0.0, item.expires_at - self._clock())

    def forget(self, key: str) -> None:
        with self._lock:
            self._store.pop(key, None)

    def clear(self) -> None:
        """Remove all entries and reset counters."""

        with self._lock:
            self._store.clear()
            self._hits = 0
            self._misses = 0
            self._evictions = 0

    def stats(self) -> dict[str, int | float | None]:
        with self._lock:
            return {
                "max_entries": self._max_entries,
                "entries": len(self._store),
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
            }

    def _live_item_locked(self, key: str) -> CacheItem | None:
        item = self._store.get(key)
        if item is None:
            return None
        if item.expires_at is not None and item.expires_at <= self._clock():
            self._store.pop(key, None)
            self._evictions += 1
            return None
        return item

    def _write_locked(
        self,
        key: str,
        value: Any,
        ttl_seconds: float | None,
        *,
        expires_at: float | None = None,
    ) -> None:
        if ttl_seconds is not None:
            if ttl_seconds <= 0:
                raise ValueError("ttl_seconds must be > 0")
            expires_at = self._clock() + ttl_seconds

        self._evict_expired_locked()
        self._store[key] = CacheItem(value=value, expires_at=expires_at)
        self._store.move_to_end(key)
        self._evict_if_over_capacity_locked()

    def _evict_expired_locked(self) -> None:
        now = self._clock()
        expired = [
            k for k, item in self._store.items()
            if item.expires_at is not None and item.expires_at <= now
        ]
        for key in expired:
            self._store.pop(key, None)
            self._evictions += 1

    def _evict_if_over_capacity_locked(self) -> None:
        if self._max_entries is None:
            return

        while len(self._store) > self._max_entries:
            # popitem(last=False) removes the least recently used entry
            key, _ = self._store.popitem(last=False)
            self._evictions += 1
            logger.debug("store.evicted", extra={"store_key": key[:24], "reason": "capacity"})
