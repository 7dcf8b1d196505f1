# tests/unit/sources/test_client.py — v1
"""Tests for sources/client.py — RateLimitedClient over httpx.MockTransport."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock

import httpx
import pytest

from salesintel.cache.categories import CacheCategory
from salesintel.cache.memory_store import MemoryCacheStore
from salesintel.cache.typed_cache import TypedCacheStore
from salesintel.core.errors import (
    ConfigurationError,
    RetryExhaustedError,
    TransientNetworkError,
    UpstreamApplicationError,
)
from salesintel.core.retry import CallPolicy, RetryPolicy
from salesintel.sources.client import USER_AGENT, RateLimitedClient
from salesintel.sources.models import FetchOptions

FAST_POLICY = CallPolicy(
    retry=RetryPolicy(max_attempts=3, base_delay_s=0.0, max_delay_s=0.0),
    calls_per_minute=60_000,
    timeout_s=5.0,
)


class Recorder:
    """MockTransport handler replaying queued responses and recording requests."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        item = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(item, Exception):
            raise item
        return item


def _client(handler, credential: str | None = "secret", **kwargs) -> RateLimitedClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return RateLimitedClient(
        name="serpapi:news",
        base_url="https://serpapi.test/search",
        credential=credential,
        store=kwargs.pop("store", TypedCacheStore(MemoryCacheStore())),
        policy=FAST_POLICY,
        http_client=http,
        default_params={"output": "json"},
        **kwargs,
    )


class TestRequestBuilding:
    @pytest.mark.asyncio
    async def test_query_credential_and_defaults(self):
        rec = Recorder(httpx.Response(200, json={"news_results": []}))
        client = _client(rec)
        data = await client.request({"q": "acme"})
        assert data == {"news_results": []}
        params = rec.requests[0].url.params
        assert params["api_key"] == "secret"
        assert params["output"] == "json"
        assert params["q"] == "acme"
        assert rec.requests[0].headers["User-Agent"] == USER_AGENT == "SalesIntelligence/1.0"
        assert rec.requests[0].method == "GET"

    @pytest.mark.asyncio
    async def test_bearer_credential(self):
        rec = Recorder(httpx.Response(200, json={"ok": True}))
        client = _client(rec, auth_mode="bearer")
        await client.request({"q": "acme"})
        req = rec.requests[0]
        assert req.headers["Authorization"] == "Bearer secret"
        assert "api_key" not in req.url.params

    @pytest.mark.asyncio
    async def test_post_json_body_and_path(self):
        rec = Recorder(httpx.Response(200, json={"ok": True}))
        client = _client(rec)
        await client.request(path="/lookup", method="POST", json_body={"domain": "acme.com"})
        req = rec.requests[0]
        assert req.method == "POST"
        assert req.url.path == "/search/lookup"
        assert json.loads(req.content) == {"domain": "acme.com"}

    @pytest.mark.asyncio
    async def test_missing_credential_sends_nothing(self):
        rec = Recorder(httpx.Response(200, json={}))
        client = _client(rec, credential="")
        with pytest.raises(ConfigurationError):
            await client.request({"q": "acme"})
        assert rec.requests == []

    @pytest.mark.asyncio
    async def test_unauthenticated_call_skips_credential(self):
        rec = Recorder(httpx.Response(200, json={"ok": True}))
        client = _client(rec, credential="")
        await client.request({"q": "acme"}, authenticated=False)
        assert "api_key" not in rec.requests[0].url.params

    def test_redact(self):
        client = _client(Recorder(httpx.Response(200, json={})))
        assert client._redact({"api_key": "secret", "q": "x"}) == {"api_key": "[REDACTED]", "q": "x"}


class TestErrorMapping:
    @pytest.mark.asyncio
    async def test_5xx_retried_then_success(self):
        rec = Recorder(
            httpx.Response(500), httpx.Response(502), httpx.Response(200, json={"ok": True}),
        )
        data = await _client(rec).request({"q": "acme"})
        assert data == {"ok": True}
        assert len(rec.requests) == 3

    @pytest.mark.asyncio
    async def test_429_exhausts_retries(self):
        rec = Recorder(httpx.Response(429))
        with pytest.raises(RetryExhaustedError) as exc_info:
            await _client(rec).request({"q": "acme"})
        assert exc_info.value.status_code == 429
        assert len(rec.requests) == 3

    @pytest.mark.asyncio
    async def test_4xx_not_retried(self):
        rec = Recorder(httpx.Response(401, text="Invalid API key"))
        with pytest.raises(UpstreamApplicationError) as exc_info:
            await _client(rec).request({"q": "acme"})
        assert exc_info.value.status_code == 401
        assert len(rec.requests) == 1

    @pytest.mark.asyncio
    async def test_error_field_not_retried(self):
        rec = Recorder(httpx.Response(200, json={"error": "Invalid API key."}))
        with pytest.raises(UpstreamApplicationError, match="Invalid API key"):
            await _client(rec).request({"q": "acme"})
        assert len(rec.requests) == 1

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        rec = Recorder(httpx.Response(200, text="<html>oops</html>"))
        with pytest.raises(UpstreamApplicationError, match="non-JSON"):
            await _client(rec).request({"q": "acme"})

    @pytest.mark.asyncio
    async def test_json_array_body(self):
        rec = Recorder(httpx.Response(200, json=[1, 2]))
        with pytest.raises(UpstreamApplicationError, match="expected an object"):
            await _client(rec).request({"q": "acme"})

    @pytest.mark.asyncio
    async def test_timeout_is_transient(self):
        rec = Recorder(httpx.ReadTimeout("slow"))
        with pytest.raises(RetryExhaustedError) as exc_info:
            await _client(rec).request({"q": "acme"})
        assert isinstance(exc_info.value.last_error, TransientNetworkError)
        assert "timed out" in str(exc_info.value.last_error)
        assert len(rec.requests) == 3

    @pytest.mark.asyncio
    async def test_connect_error_recovers(self):
        rec = Recorder(httpx.ConnectError("refused"), httpx.Response(200, json={"ok": 1}))
        assert await _client(rec).request({"q": "acme"}) == {"ok": 1}


class TestGetCachedOrFetch:
    @pytest.mark.asyncio
    async def test_fetch_once_then_cached(self):
        client = _client(Recorder(httpx.Response(200, json={})))
        fetch = AsyncMock(return_value=[{"title": "a"}])
        first = await client.get_cached_or_fetch("serpapi_news_acme", CacheCategory.SERP_API_NEWS_RESULTS, fetch)
        second = await client.get_cached_or_fetch("serpapi_news_acme", CacheCategory.SERP_API_NEWS_RESULTS, fetch)
        assert fetch.await_count == 1
        assert first.value == second.value == [{"title": "a"}]
        assert first.cached is False
        assert second.cached is True

    @pytest.mark.asyncio
    async def test_force_refresh_always_fetches(self):
        client = _client(Recorder(httpx.Response(200, json={})))
        fetch = AsyncMock(side_effect=[["old"], ["new"]])
        options = FetchOptions(force_refresh=True)
        await client.get_cached_or_fetch("k", CacheCategory.SERP_API_NEWS_RESULTS, fetch, options)
        outcome = await client.get_cached_or_fetch("k", CacheCategory.SERP_API_NEWS_RESULTS, fetch, options)
        assert fetch.await_count == 2
        assert outcome.value == ["new"]
        assert outcome.cached is False
        assert await client.store.get_raw_json("k") == ["new"]

    @pytest.mark.asyncio
    async def test_written_under_category(self):
        store = TypedCacheStore(MemoryCacheStore())
        client = _client(Recorder(httpx.Response(200, json={})), store=store)
        await client.get_cached_or_fetch("k", CacheCategory.SERP_API_JOBS_RESULTS, AsyncMock(return_value=[]))
        inspection = await store.inspect("k")
        assert inspection.category == CacheCategory.SERP_API_JOBS_RESULTS
        assert inspection.format == "raw_json"

    @pytest.mark.asyncio
    async def test_empty_list_counts_as_hit(self):
        client = _client(Recorder(httpx.Response(200, json={})))
        fetch = AsyncMock(return_value=[])
        await client.get_cached_or_fetch("k", CacheCategory.SERP_API_NEWS_RESULTS, fetch)
        outcome = await client.get_cached_or_fetch("k", CacheCategory.SERP_API_NEWS_RESULTS, fetch)
        assert outcome.cached is True
        assert fetch.await_count == 1

    @pytest.mark.asyncio
    async def test_fresh_value_matches_cached_copy(self):
        client = _client(Recorder(httpx.Response(200, json={})))
        fetch = AsyncMock(return_value={"knowledge_graph": {"title": "Acme", "founded": None}})
        first = await client.get_cached_or_fetch("k", CacheCategory.SERP_API_RAW_RESPONSE, fetch)
        second = await client.get_cached_or_fetch("k", CacheCategory.SERP_API_RAW_RESPONSE, fetch)
        assert first.value == {"knowledge_graph": {"title": "Acme"}}
        assert second.value == first.value

    @pytest.mark.asyncio
    async def test_fetch_error_not_cached(self):
        client = _client(Recorder(httpx.Response(200, json={})))
        fetch = AsyncMock(side_effect=UpstreamApplicationError("bad"))
        with pytest.raises(UpstreamApplicationError):
            await client.get_cached_or_fetch("k", CacheCategory.SERP_API_NEWS_RESULTS, fetch)
        assert await client.store.get_raw_json("k") is None


class TestClose:
    @pytest.mark.asyncio
    async def test_injected_client_left_open(self):
        http = httpx.AsyncClient(transport=httpx.MockTransport(Recorder(httpx.Response(200, json={}))))
        client = RateLimitedClient("x", "https://x.test", "k", TypedCacheStore(MemoryCacheStore()), FAST_POLICY, http_client=http)
        await client.aclose()
        assert not http.is_closed
        await http.aclose()

    @pytest.mark.asyncio
    async def test_owned_client_closed(self):
        client = RateLimitedClient("x", "https://x.test", "k", TypedCacheStore(MemoryCacheStore()), FAST_POLICY)
        await client.aclose()
        assert client._http.is_closed
