# src/cache/base_cache_store.py - v1
"""Abstract cache store interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from labeliq.cache.models import CacheEntry


class BaseCacheStore(ABC):
    """Unified interface for response cache backends.

    Implementations must tolerate concurrent use by independent pipeline
    runs; no ordering is guaranteed between them.
    """

    @abstractmethod
    async def get(self, key: str) -> CacheEntry | None:
        """Retrieve cache entry by fingerprint key."""

    @abstractmethod
    async def put(self, key: str, entry: CacheEntry) -> None:
        """Store cache entry."""

    @abstractmethod
    async def clear(self) -> None:
        """Remove every entry."""

    @abstractmethod
    def size(self) -> int:
        """Number of stored entries."""
