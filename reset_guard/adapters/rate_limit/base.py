"""Rate limiter interfaces.

Callers depend on this abstraction (not the concrete implementation) so the
storage backend can be swapped (e.g., Redis) with minimal changes.

The model is hit-based: a key's window opens on its first hit and lasts
``decay_seconds``. Checking and recording are separate calls so callers can
reject a request before charging it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @abstractmethod
    def too_many_attempts(self, key: str, max_attempts: int) -> bool:
        """Return True when ``key`` has reached ``max_attempts`` in its open window."""
        raise NotImplementedError

    @abstractmethod
    def hit(self, key: str, decay_seconds: int = 60) -> int:
        """Record one attempt for ``key`` and return the attempts in the window.

        Opens a new window of ``decay_seconds`` when none is active. The
        increment must be atomic with respect to concurrent hits.
        """
        raise NotImplementedError

    @abstractmethod
    def attempts(self, key: str) -> int:
        """Return the attempts recorded for ``key`` in its open window."""
        raise NotImplementedError

    @abstractmethod
    def available_in(self, key: str) -> int:
        """Return whole seconds until the window of ``key`` closes (0 if none)."""
        raise NotImplementedError

    @abstractmethod
    def clear(self, key: str) -> None:
        """Forget all attempts recorded for ``key``."""
        raise NotImplementedError
