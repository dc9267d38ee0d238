# src/cache/cache_factory.py - v1
"""Factory for cache store instantiation."""

from __future__ import annotations

from labeliq.cache.base_cache_store import BaseCacheStore
from labeliq.config.settings import Settings


def create_cache_store(settings: Settings | None = None) -> BaseCacheStore:
    """Instantiate the configured cache backend.

    Args:
        settings: Application settings. Defaults to an unbounded memory store.
    """
    from labeliq.cache.memory_store import MemoryCacheStore

    if settings is None:
        return MemoryCacheStore()

    if settings.cache_backend == "memory":
        return MemoryCacheStore(max_entries=settings.cache_max_entries)

    if settings.cache_backend == "json":
        from labeliq.cache.json_store import JsonCacheStore
        return JsonCacheStore(cache_root=settings.cache_root)

    raise ValueError(f"Unsupported cache backend: {settings.cache_backend!r}")
