# tests/conftest.py — v2
"""Shared test fixtures for all unit and integration tests.

Provides mock LLM clients, fake source adapters, an in-memory typed cache
and a sample collection. No external dependencies — all I/O is mocked.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from salesintel.cache.categories import CacheCategory
from salesintel.cache.memory_store import MemoryCacheStore
from salesintel.cache.typed_cache import TypedCacheStore
from salesintel.llm.models import LLMResponse
from salesintel.sources.base_adapter import BaseSourceAdapter
from salesintel.sources.models import CollectionResponse, FetchOptions, FetchOutcome


# === Fake source adapter ===


class FakeAdapter(BaseSourceAdapter):
    """Adapter whose collect() returns a fixed payload after an optional delay."""

    category = CacheCategory.SERP_API_NEWS_RESULTS

    def __init__(
        self,
        name: str,
        field: str,
        payload: Any = None,
        error: Exception | None = None,
        delay: float = 0.0,
        cached: bool = False,
        key: str | None = None,
    ) -> None:
        super().__init__(MagicMock())
        self.name = name
        self.field = field
        self.key = key or field
        self._payload = payload if payload is not None else [{"title": f"{name} item"}]
        self._error = error
        self._delay = delay
        self._cached = cached
        self.calls = 0

    def empty_value(self) -> Any:
        return {} if self.field == "organic" else []

    async def collect(self, target: str, options: FetchOptions | None = None) -> FetchOutcome:
        self.calls += 1
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._error is not None:
            raise self._error
        return FetchOutcome(self._payload, self._cached)

    async def is_cached(self, target: str) -> bool:
        return self._cached

    def build_params(self, target: str) -> dict[str, Any]:
        return {"q": target}

    def normalize(self, raw: dict[str, Any]) -> Any:
        return raw


@pytest.fixture
def make_adapter() -> Callable[..., FakeAdapter]:
    """Factory for FakeAdapter instances."""
    return FakeAdapter


@pytest.fixture
def five_adapters() -> list[FakeAdapter]:
    """The default five sources; linkedin and youtube fail."""
    return [
        FakeAdapter("google_organic", "organic", payload={"results": [{"title": "Acme", "snippet": "Acme makes anvils."}]}),
        FakeAdapter("google_news", "news", payload=[{"title": "Acme raises $10M Series A", "source": "TechNews"}]),
        FakeAdapter("google_jobs", "jobs", payload=[{"title": "Backend Engineer", "company": "Acme"}]),
        FakeAdapter("linkedin", "linkedin", error=ConnectionError("linkedin down")),
        FakeAdapter("youtube", "youtube", error=TimeoutError("youtube timed out")),
    ]


# === FIXTURES: Cache ===


@pytest.fixture
def memory_backend() -> MemoryCacheStore:
    return MemoryCacheStore()


@pytest.fixture
def typed_store(memory_backend: MemoryCacheStore) -> TypedCacheStore:
    """TypedCacheStore over a fresh in-memory backend."""
    return TypedCacheStore(memory_backend, environment="production")


# === FIXTURES: Sample data ===


@pytest.fixture
def sample_collection() -> CollectionResponse:
    """Collection with organic, news, jobs and linkedin data."""
    return CollectionResponse(
        target="acme.com",
        organic={
            "results": [{"position": 1, "title": "Acme Corp", "link": "https://acme.com", "snippet": "Acme makes anvils."}],
            "knowledge_graph": {"title": "Acme Corporation", "type": "Manufacturing", "headquarters": "Phoenix, AZ"},
        },
        news=[{"title": "Acme launches rocket skates", "link": "https://news.example/1", "source": "Daily", "date": "2 days ago"}],
        jobs=[{"title": "Site Reliability Engineer", "company": "Acme", "location": "Remote"}],
        linkedin=[{"name": "Wile E. Coyote", "title": "VP of Engineering", "profile_url": "https://linkedin.com/in/wile"}],
        cached={"organic": False, "news": False, "jobs": False, "linkedin": False, "youtube": False},
        api_calls=4,
        total_cost=0.09,
        cost_estimate="$0.090",
        sources=["google_organic", "google_news", "google_jobs", "linkedin"],
        failures={"youtube": "TimeoutError: youtube timed out"},
    )


# === FIXTURES: Mock LLM ===


VALID_INSIGHTS_JSON = (
    '{"company": {"name": "acme.com", "industry": "Manufacturing"},'
    ' "products": ["Anvils"], "competitors": ["Globex"],'
    ' "news_signals": [{"headline": "Acme launches rocket skates", "signal_type": "product"}],'
    ' "talking_points": ["Ask about rocket skates"]}'
)


@pytest.fixture
def mock_llm_response() -> LLMResponse:
    """Standard mock LLM response carrying valid CompanyInsights JSON."""
    return LLMResponse(
        content=VALID_INSIGHTS_JSON,
        input_tokens=1000,
        output_tokens=500,
        model="claude-sonnet-4-20250514",
        provider="anthropic",
        latency_ms=500,
    )


@pytest.fixture
def mock_llm_client(mock_llm_response: LLMResponse) -> AsyncMock:
    """Mock BaseLLMClient with default response."""
    client = AsyncMock()
    client.complete = AsyncMock(return_value=mock_llm_response)
    client.provider_name = "mock"
    client.model_name = "mock-model"
    return client


# === FIXTURES: Temp dirs ===


@pytest.fixture
def tmp_cache_dir(tmp_path: Path) -> Path:
    """Temporary cache directory."""
    cache = tmp_path / "cache"
    cache.mkdir()
    return cache
