"""Key-value store adapters for ephemeral counters."""

from reset_guard.adapters.cache.base import AbstractKeyValueStore
from reset_guard.adapters.cache.in_memory import InMemoryKeyValueStore

__all__ = ["AbstractKeyValueStore", "InMemoryKeyValueStore"]
