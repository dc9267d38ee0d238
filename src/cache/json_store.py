# src/cache/json_store.py - v1
"""JSON file-based cache store (CACHE_BACKEND=json).

Stores each entry as an individual JSON file under CACHE_ROOT so responses
survive process restarts.
"""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path

from pydantic import ValidationError

from labeliq.cache.base_cache_store import BaseCacheStore
from labeliq.cache.models import CacheEntry

logger = logging.getLogger(__name__)


class JsonCacheStore(BaseCacheStore):
    """File-based cache store using JSON files."""

    def __init__(self, cache_root: Path | str) -> None:
        self._root = Path(cache_root).expanduser()
        self._root.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    async def get(self, key: str) -> CacheEntry | None:
        """Retrieve cache entry by key; unreadable files count as misses."""
        path = self._entry_path(key)
        if not path.exists():
            return None
        try:
            return CacheEntry.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            logger.warning("Failed to read cache entry %s: %s", key, e)
            return None

    async def put(self, key: str, entry: CacheEntry) -> None:
        """Store a cache entry (write to a temp file, then rename)."""
        path = self._entry_path(key)
        tmp = path.with_suffix(f".{os.getpid()}.{threading.get_ident()}.tmp")
        with self._lock:
            tmp.write_text(entry.model_dump_json(indent=2), encoding="utf-8")
            os.replace(tmp, path)

    async def clear(self) -> None:
        """Remove all cache files."""
        with self._lock:
            for path in self._root.glob("*.json"):
                path.unlink(missing_ok=True)

    def size(self) -> int:
        return sum(1 for _ in self._root.glob("*.json"))

    def _entry_path(self, key: str) -> Path:
        """Return file path for a cache key."""
        safe_key = key.replace("/", "_").replace("\\", "_")
        return self._root / f"{safe_key}.json"
