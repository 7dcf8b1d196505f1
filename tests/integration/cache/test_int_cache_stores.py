# tests/integration/cache/test_int_cache_stores.py — v3
"""Integration tests for the file-backed cache backends: JSON + SQLite.

No external services required. Entries written by one store instance must
be readable by a fresh instance over the same files.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from salesintel.api.facade import SalesIntelligenceService
from salesintel.cache.cache_factory import create_typed_cache
from salesintel.cache.categories import CacheCategory
from salesintel.cache.json_store import JsonCacheStore
from salesintel.cache.sqlite_store import SqliteCacheStore
from salesintel.cache.typed_cache import TypedCacheStore
from salesintel.config.settings import Settings


def _open(kind: str, root) -> TypedCacheStore:
    if kind == "json":
        return TypedCacheStore(JsonCacheStore(root))
    return TypedCacheStore(SqliteCacheStore(root / "cache.db"))


@pytest.mark.parametrize("kind", ["json", "sqlite"])
class TestPersistentBackends:
    @pytest.mark.asyncio
    async def test_survives_reopen(self, kind, tmp_cache_dir):
        store = _open(kind, tmp_cache_dir)
        assert await store.set("enriched:acme.com:alice", {"target": "acme.com"}, CacheCategory.COMPANY_ENRICHMENT)
        assert await store.set_raw_json("serpapi_news_acme_com", [{"title": "t"}], CacheCategory.SERP_API_NEWS_RESULTS)
        await store.close()

        reopened = _open(kind, tmp_cache_dir)
        assert await reopened.get("enriched:acme.com:alice") == {"target": "acme.com"}
        assert await reopened.get_raw_json("serpapi_news_acme_com") == [{"title": "t"}]
        stats = await reopened.stats()
        assert stats.backend == kind
        assert stats.total_entries == 2
        await reopened.close()

    @pytest.mark.asyncio
    async def test_expiry_by_category(self, kind, tmp_cache_dir):
        now = datetime(2026, 1, 1, tzinfo=timezone.utc)
        clock = {"now": now}
        backend = JsonCacheStore(tmp_cache_dir) if kind == "json" else SqliteCacheStore(tmp_cache_dir / "cache.db")
        store = TypedCacheStore(backend, clock=lambda: clock["now"])
        await store.set_raw_json("serpapi_news_acme_com", [], CacheCategory.SERP_API_NEWS_RESULTS)

        clock["now"] = now + timedelta(hours=23)
        assert await store.get_raw_json("serpapi_news_acme_com") == []

        clock["now"] = now + timedelta(hours=25)
        assert await store.get_raw_json("serpapi_news_acme_com") is None
        assert await store.list_keys() == []
        await store.close()

    @pytest.mark.asyncio
    async def test_list_and_clear(self, kind, tmp_cache_dir):
        store = _open(kind, tmp_cache_dir)
        await store.set_raw_json("serpapi_news_acme_com", [], CacheCategory.SERP_API_NEWS_RESULTS)
        await store.set_raw_json("serpapi_jobs_acme_com", [], CacheCategory.SERP_API_JOBS_RESULTS)
        await store.set("enriched:acme.com:alice", {}, CacheCategory.COMPANY_ENRICHMENT)

        assert await store.list_keys("serpapi_*") == ["serpapi_jobs_acme_com", "serpapi_news_acme_com"]
        assert await store.list_keys(category=CacheCategory.COMPANY_ENRICHMENT) == ["enriched:acme.com:alice"]
        assert await store.clear() == 3
        assert await store.list_keys() == []
        await store.close()


class TestServiceOverSqlite:
    @pytest.mark.asyncio
    async def test_record_shared_across_service_instances(self, tmp_path, five_adapters, make_adapter):
        settings = Settings(
            _env_file=None, cache_backend="sqlite", cache_root=tmp_path,
            anthropic_api_key="", openai_api_key="",
        )
        async with SalesIntelligenceService(settings, adapters=five_adapters) as service:
            first = await service.enrich("acme.com", "alice")

        fresh = [make_adapter("google_news", "news")]
        async with SalesIntelligenceService(settings, adapters=fresh) as service:
            second = await service.enrich("acme.com", "alice")

        assert second.from_cache is True
        assert second.insights == first.insights
        assert fresh[0].calls == 0

        store = create_typed_cache(settings)
        assert await store.list_keys("enriched:*") == ["enriched:acme.com:alice"]
        await store.close()
