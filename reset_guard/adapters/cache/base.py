"""Key-value store interface for short-lived counters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class AbstractKeyValueStore(ABC):
    """Interface for TTL-aware key-value stores."""

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Return the live value for key, or ``default`` if missing/expired."""
        raise NotImplementedError

    @abstractmethod
    def put(self, key: str, value: Any, ttl_seconds: float | None = None) -> None:
        """Store value, expiring after ``ttl_seconds`` (None keeps it forever)."""
        raise NotImplementedError

    @abstractmethod
    def increment(self, key: str, amount: int = 1, *, ttl_seconds: float | None = None) -> int:
        """Atomically add ``amount`` to an integer value and return the result.

        Missing or expired keys start from zero. When ``ttl_seconds`` is given
        the expiry is reset to ``now + ttl_seconds`` within the same atomic
        step; otherwise the current expiry is kept.
        """
        raise NotImplementedError

    @abstractmethod
    def forget(self, key: str) -> None:
        """Remove key if present."""
        raise NotImplementedError

    @abstractmethod
    def clear(self) -> None:
        """Remove all entries."""
        raise NotImplementedError

    @abstractmethod
    def stats(self) -> dict[str, int | float | None]:
        """Return lightweight metrics without exposing values."""
        raise NotImplementedError

    def ttl(self, key: str) -> float | None:
        """Seconds until key expires; None when missing or without expiry."""
        return None
