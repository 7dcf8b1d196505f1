# tests/unit/cache/test_unit_memory_store.py — v1
"""Tests for cache/memory_store.py."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from salesintel.cache.categories import CacheCategory
from salesintel.cache.memory_store import MemoryCacheStore
from salesintel.cache.models import CacheEntry

NOW = datetime(2026, 3, 1, tzinfo=timezone.utc)


def _entry(key: str) -> CacheEntry:
    return CacheEntry(
        key=key, category=CacheCategory.UNKNOWN, payload="1",
        created_at=NOW, expires_at=NOW + timedelta(hours=1),
    )


class TestMemoryCacheStore:
    @pytest.mark.asyncio
    async def test_put_get_delete(self):
        store = MemoryCacheStore()
        await store.put_item(_entry("a"))
        assert (await store.get_item("a")).key == "a"
        assert await store.delete_item("a") is True
        assert await store.delete_item("a") is False
        assert await store.get_item("a") is None

    @pytest.mark.asyncio
    async def test_scan_is_case_sensitive_glob(self):
        store = MemoryCacheStore()
        for key in ("serpapi_news_a", "serpapi_jobs_a", "Serpapi_news_b"):
            await store.put_item(_entry(key))
        keys = sorted(e.key for e in await store.scan_items("serpapi_*"))
        assert keys == ["serpapi_jobs_a", "serpapi_news_a"]
        assert len(store) == 3
