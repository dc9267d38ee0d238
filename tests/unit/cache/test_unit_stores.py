# tests/unit/cache/test_unit_stores.py - v1
"""Tests for the memory and JSON cache stores and the cache factory."""

from __future__ import annotations

import asyncio

import pytest

from labeliq.cache.base_cache_store import BaseCacheStore
from labeliq.cache.cache_factory import create_cache_store
from labeliq.cache.json_store import JsonCacheStore
from labeliq.cache.memory_store import MemoryCacheStore
from labeliq.cache.models import CacheEntry
from labeliq.config.settings import Settings


def _entry(key: str, value: int = 1) -> CacheEntry:
    return CacheEntry(fingerprint=key, provider="usda", payload={"value": value})


class TestBaseCacheStore:
    def test_cannot_instantiate(self):
        with pytest.raises(TypeError):
            BaseCacheStore()  # type: ignore[abstract]


class TestMemoryCacheStore:
    @pytest.mark.asyncio
    async def test_miss_returns_none(self):
        store = MemoryCacheStore()
        assert await store.get("nope") is None

    @pytest.mark.asyncio
    async def test_put_get(self):
        store = MemoryCacheStore()
        await store.put("k1", _entry("k1", 7))
        entry = await store.get("k1")
        assert entry is not None
        assert entry.payload == {"value": 7}
        assert store.size() == 1

    @pytest.mark.asyncio
    async def test_clear(self):
        store = MemoryCacheStore()
        await store.put("k1", _entry("k1"))
        await store.put("k2", _entry("k2"))
        await store.clear()
        assert store.size() == 0
        assert await store.get("k1") is None

    @pytest.mark.asyncio
    async def test_unbounded_by_default(self):
        store = MemoryCacheStore()
        for i in range(500):
            await store.put(f"k{i}", _entry(f"k{i}", i))
        assert store.size() == 500

    @pytest.mark.asyncio
    async def test_max_entries_evicts_oldest(self):
        store = MemoryCacheStore(max_entries=2)
        await store.put("a", _entry("a"))
        await store.put("b", _entry("b"))
        await store.put("c", _entry("c"))
        assert store.size() == 2
        assert await store.get("a") is None
        assert await store.get("c") is not None

    @pytest.mark.asyncio
    async def test_concurrent_writers(self):
        store = MemoryCacheStore()

        async def writer(prefix: str) -> None:
            for i in range(50):
                await store.put(f"{prefix}{i}", _entry(f"{prefix}{i}", i))
                await asyncio.sleep(0)

        await asyncio.gather(writer("a"), writer("b"), writer("c"))
        assert store.size() == 150


class TestJsonCacheStore:
    @pytest.mark.asyncio
    async def test_roundtrip_survives_new_instance(self, tmp_path):
        await JsonCacheStore(tmp_path).put("usda_abc", _entry("usda_abc", 3))
        entry = await JsonCacheStore(tmp_path).get("usda_abc")
        assert entry is not None
        assert entry.payload == {"value": 3}

    @pytest.mark.asyncio
    async def test_corrupt_file_is_a_miss(self, tmp_path):
        store = JsonCacheStore(tmp_path)
        (tmp_path / "bad.json").write_text("{not json", encoding="utf-8")
        assert await store.get("bad") is None

    @pytest.mark.asyncio
    async def test_clear_and_size(self, tmp_path):
        store = JsonCacheStore(tmp_path)
        await store.put("a", _entry("a"))
        await store.put("b", _entry("b"))
        assert store.size() == 2
        await store.clear()
        assert store.size() == 0

    @pytest.mark.asyncio
    async def test_key_with_slash_is_sanitized(self, tmp_path):
        store = JsonCacheStore(tmp_path)
        await store.put("a/b", _entry("a/b"))
        assert (tmp_path / "a_b.json").exists()


class TestCreateCacheStore:
    def test_default_memory(self):
        assert isinstance(create_cache_store(), MemoryCacheStore)

    def test_json_backend(self, tmp_path):
        s = Settings(_env_file=None, cache_backend="json", cache_root=tmp_path)
        assert isinstance(create_cache_store(s), JsonCacheStore)

    @pytest.mark.asyncio
    async def test_memory_bound_from_settings(self):
        s = Settings(_env_file=None, cache_max_entries=1)
        store = create_cache_store(s)
        await store.put("a", _entry("a"))
        await store.put("b", _entry("b"))
        assert store.size() == 1
