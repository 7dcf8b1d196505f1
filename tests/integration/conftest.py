# tests/integration/conftest.py — v8
"""Shared fixtures for integration tests.

Real source adapters, clients, cache and pipeline; only the network edge
is replaced: upstream HTTP goes through httpx.MockTransport and the
analysis model is a MockLLMClient.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
import pytest
from pydantic import BaseModel

from salesintel.config.settings import Settings
from salesintel.llm.base_client import BaseLLMClient
from salesintel.llm.models import LLMResponse, Message

logger = logging.getLogger(__name__)

INSIGHTS_JSON = (
    '{"company": {"name": "acme.com", "industry": "Industrial manufacturing",'
    ' "headquarters": "Phoenix, Arizona"},'
    ' "products": ["Anvils", "Robotic assembly lines"],'
    ' "news_signals": [{"headline": "Acme raises $40M Series B to expand robotics line",'
    ' "signal_type": "funding", "insight": "Fresh budget for automation"}],'
    ' "hiring_signals": [{"title": "Senior Backend Engineer", "location": "Remote"}],'
    ' "talking_points": ["Congratulate on the Series B", "Ask about the robotics roadmap"]}'
)


# =====================================================================
#  MOCK LLM CLIENT
# =====================================================================

class MockLLMClient(BaseLLMClient):
    """Mock LLM client for integration testing without real LLM services.

    Responses are served from a queue, then the default. Every call is
    recorded in .calls.
    """

    def __init__(self, default_response: str = INSIGHTS_JSON):
        self._default_response = default_response
        self._response_queue: list[str] = []
        self.calls: list[dict[str, Any]] = []

    def set_responses(self, *responses: str) -> None:
        self._response_queue = list(responses)

    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.2,
        response_format: type[BaseModel] | None = None,
    ) -> LLMResponse:
        content = self._response_queue.pop(0) if self._response_queue else self._default_response
        self.calls.append({
            "messages": messages, "system": system,
            "max_tokens": max_tokens, "temperature": temperature,
        })
        return LLMResponse(
            content=content, input_tokens=50, output_tokens=len(content) // 4,
            model="mock-model", provider="mock", latency_ms=10,
            raw_response={"mock": True},
        )

    @property
    def provider_name(self) -> str:
        return "mock"

    @property
    def model_name(self) -> str:
        return "mock-model"


# =====================================================================
#  MOCK SERPAPI
# =====================================================================

ORGANIC_BODY = {
    "organic_results": [
        {"position": 1, "title": "Acme Corporation", "link": "https://acme.com",
         "snippet": "Acme builds industrial anvils and robotic assembly lines."},
    ],
    "knowledge_graph": {
        "title": "Acme Corporation", "type": "Industrial manufacturer",
        "headquarters": "Phoenix, Arizona",
    },
}

NEWS_BODY = {
    "news_results": [
        {"title": "Acme raises $40M Series B to expand robotics line",
         "link": "https://news.test/acme-series-b", "source": {"name": "TechDaily"},
         "date": "3 days ago", "snippet": "The round was led by Globex Ventures."},
    ],
}

JOBS_BODY = {
    "jobs_results": [
        {"title": "Senior Backend Engineer", "company_name": "Acme", "location": "Remote",
         "detected_extensions": {"posted_at": "2 days ago", "schedule_type": "Full-time"}},
    ],
}


class MockSerpApi:
    """httpx.MockTransport handler answering like SerpAPI per engine.

    Default behaviour: organic, news and jobs succeed; the LinkedIn query
    returns a JSON error field; YouTube returns HTTP 401.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.overrides: dict[str, list[httpx.Response]] = {}

    def fail_next(self, route: str, *responses: httpx.Response) -> None:
        self.overrides.setdefault(route, []).extend(responses)

    def count(self, route: str) -> int:
        return sum(1 for r in self.requests if self.route(r) == route)

    @staticmethod
    def route(request: httpx.Request) -> str:
        params = request.url.params
        if params.get("engine") == "youtube":
            return "youtube"
        if params.get("engine") == "google_jobs":
            return "jobs"
        if params.get("tbm") == "nws":
            return "news"
        if params.get("q", "").startswith("site:linkedin.com/in"):
            return "linkedin"
        return "organic"

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.route(request)
        if self.overrides.get(route):
            return self.overrides[route].pop(0)
        if route == "organic":
            return httpx.Response(200, json=ORGANIC_BODY)
        if route == "news":
            return httpx.Response(200, json=NEWS_BODY)
        if route == "jobs":
            return httpx.Response(200, json=JOBS_BODY)
        if route == "linkedin":
            return httpx.Response(200, json={"error": "Google hasn't returned any results for this query."})
        return httpx.Response(401, json={"error": "Invalid API key."})


# =====================================================================
#  FIXTURES
# =====================================================================

@pytest.fixture
def mock_serpapi() -> MockSerpApi:
    return MockSerpApi()


@pytest.fixture
def mock_llm() -> MockLLMClient:
    return MockLLMClient()


@pytest.fixture
def int_settings() -> Settings:
    """Settings for the five SerpAPI sources with no retry delay."""
    return Settings(
        _env_file=None,
        serpapi_api_key="test-serpapi-key",
        anthropic_api_key="",
        openai_api_key="",
        enabled_sources="organic,news,jobs,linkedin,youtube",
        retry_max_attempts=3,
        retry_base_delay_s=0.0,
        retry_max_delay_s=0.0,
        source_rate_limit_per_minute=60_000,
    )
