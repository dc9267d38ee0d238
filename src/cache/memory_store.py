# src/cache/memory_store.py - v1
"""In-process cache store (default CACHE_BACKEND=memory)."""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict

from labeliq.cache.base_cache_store import BaseCacheStore
from labeliq.cache.models import CacheEntry

logger = logging.getLogger(__name__)


class MemoryCacheStore(BaseCacheStore):
    """Dict-backed cache shared by every run in the process.

    Unbounded unless ``max_entries`` is given, in which case the oldest
    insertion is evicted first.
    """

    def __init__(self, max_entries: int | None = None) -> None:
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._max_entries = max_entries
        # Never held across an await; also guards use from worker threads.
        self._lock = threading.Lock()

    async def get(self, key: str) -> CacheEntry | None:
        with self._lock:
            return self._entries.get(key)

    async def put(self, key: str, entry: CacheEntry) -> None:
        with self._lock:
            self._entries[key] = entry
            if self._max_entries is not None:
                while len(self._entries) > self._max_entries:
                    evicted, _ = self._entries.popitem(last=False)
                    logger.debug("Evicted cache entry %s", evicted)

    async def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def size(self) -> int:
        with self._lock:
            return len(self._entries)
