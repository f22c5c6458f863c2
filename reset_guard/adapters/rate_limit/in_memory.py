"""In-memory rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: uses a lock around shared state.
"""

from __future__ import annotations

import math
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable

from reset_guard.adapters.rate_limit.base import AbstractRateLimiter


@dataclass
class _WindowState:
    attempts: int
    expires_at: float


class InMemoryRateLimiter(AbstractRateLimiter):
    """Rate limiter keeping one decaying window per key.

    A window starts with the first hit on a key and expires ``decay_seconds``
    later; hits inside an open window do not extend it.

    Important:
        This limiter is per-process only. If the API runs with multiple workers
        (e.g., multiple Uvicorn/Gunicorn workers), each worker will enforce its
        own independent limits.
    """

    def __init__(
        self,
        *,
        max_keys: int | None = 10_000,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            max_keys: Maximum number of open windows kept (None for unlimited).
                When exceeded, the oldest windows are dropped first.
            clock: Time source function returning UNIX time in seconds.

        Raises:
            ValueError: If max_keys is invalid.
        """
        if max_keys is not None and max_keys < 1:
            raise ValueError("max_keys must be >= 1 or None")

        self._max_keys = max_keys
        self._clock = clock
        self._lock = threading.RLock()
        self._state_by_key: OrderedDict[str, _WindowState] = OrderedDict()

    def _live_state(self, key: str, now: float) -> _WindowState | None:
        """Return the open window for key, dropping it if it has expired."""
        state = self._state_by_key.get(key)
        if state is not None and state.expires_at <= now:
            del self._state_by_key[key]
            return None
        return state

    @staticmethod
    def _check_key(key: str) -> None:
        if not key:
            raise ValueError("key must be a non-empty string")

    def too_many_attempts(self, key: str, max_attempts: int) -> bool:
        self._check_key(key)
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

        with self._lock:
            state = self._live_state(key, self._clock())
            return state is not None and state.attempts >= max_attempts

    def hit(self, key: str, decay_seconds: int = 60) -> int:
        self._check_key(key)
        if decay_seconds < 1:
            raise ValueError("decay_seconds must be >= 1")

        now = self._clock()
        with self._lock:
            state = self._live_state(key, now)
            if state is None:
                self._evict_expired_locked(now)
                state = _WindowState(attempts=0, expires_at=now + decay_seconds)
                self._state_by_key[key] = state
                self._evict_if_over_capacity_locked()
            state.attempts += 1
            return state.attempts

    def __len__(self) -> int:
        """Number of windows currently held, expired or not."""
        with self._lock:
            return len(self._state_by_key)

    def _evict_expired_locked(self, now: float) -> None:
        expired = [k for k, state in self._state_by_key.items() if state.expires_at <= now]
        for key in expired:
            del self._state_by_key[key]

    def _evict_if_over_capacity_locked(self) -> None:
        if self._max_keys is None:
            return

        while len(self._state_by_key) > self._max_keys:
            # Insertion order: the first entry is the oldest window
            self._state_by_key.popitem(last=False)

    def attempts(self, key: str) -> int:
        with self._lock:
            state = self._live_state(key, self._clock())
            return state.attempts if state else 0

    def available_in(self, key: str) -> int:
        now = self._clock()
        with self._lock:
            state = self._live_state(key, now)
            if state is None:
                return 0
            return max(0, int(math.ceil(state.expires_at - now)))

    def clear(self, key: str) -> None:
        with self._lock:
            self._state_by_key.pop(key, None)
