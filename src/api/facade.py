# src/api/facade.py — v2
"""Public API facade and composition root.

Usage:
    async with SalesIntelligenceService(settings) as service:
        response = await service.enrich("acme.com", requester="alice")

Builds every collaborator from Settings exactly once: cache backend and
TypedCacheStore, one shared httpx.AsyncClient, source adapters, the
collector, the analysis strategies and the pipeline. Nothing is a
module-level singleton.
"""

from __future__ import annotations

import logging
from typing import Sequence

import httpx

from salesintel.analysis.base_analyzer import BaseInsightExtractor
from salesintel.analysis.heuristic_analyzer import HeuristicInsightExtractor
from salesintel.analysis.llm_analyzer import LLMInsightExtractor
from salesintel.api.models import EnrichmentResponse
from salesintel.cache.base_cache_store import BaseCacheStore
from salesintel.cache.cache_factory import create_typed_cache
from salesintel.cache.typed_cache import TypedCacheStore
from salesintel.collection.collector import MultiSourceCollector
from salesintel.config.settings import Settings, load_settings
from salesintel.core.retry import CallPolicy
from salesintel.llm.base_client import BaseLLMClient
from salesintel.llm.client_factory import create_llm_client
from salesintel.pipeline.enrichment_pipeline import EnrichmentPipeline
from salesintel.pipeline.state import PipelineRequest
from salesintel.sources.adapter_factory import create_default_adapters
from salesintel.sources.base_adapter import BaseSourceAdapter
from salesintel.sources.models import CollectionResponse, FetchOptions, SourceAvailability

logger = logging.getLogger(__name__)


class SalesIntelligenceService:
    """Enrichment entry point.

    Args:
        settings: Application settings. Loaded from .env if None.
        backend: Cache backend. Built from CACHE_BACKEND if None.
        llm: Analysis model client. Built from LLM_DEFAULT_PROVIDER when
            an API key is configured; otherwise only the heuristic runs.
        adapters: Source adapters. Built from ENABLED_SOURCES if None.
        http_client: Shared HTTP client. Created and owned if None.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        backend: BaseCacheStore | None = None,
        llm: BaseLLMClient | None = None,
        adapters: Sequence[BaseSourceAdapter] | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or load_settings()
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient()
        self._store = create_typed_cache(self._settings, backend=backend)
        if adapters is None:
            adapters = create_default_adapters(self._settings, self._store, http_client=self._http)
        self._collector = MultiSourceCollector(adapters)
        self._analyzer = self._build_analyzer(llm)
        self._pipeline = EnrichmentPipeline(
            self._store,
            self._collector,
            self._analyzer,
            require_persistence=self._settings.require_persistence,
        )
        logger.info(
            "Service ready: sources=%s, analyzer=%s, cache=%s/%s",
            ",".join(self._collector.source_keys),
            self._analyzer.name,
            self._store.backend.backend_name,
            self._store.environment,
        )

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def store(self) -> TypedCacheStore:
        return self._store

    @property
    def collector(self) -> MultiSourceCollector:
        return self._collector

    @property
    def pipeline(self) -> EnrichmentPipeline:
        return self._pipeline

    async def enrich(
        self,
        target: str,
        requester: str,
        request_id: str | None = None,
        force_refresh: bool = False,
    ) -> EnrichmentResponse:
        """Enrich a company for a requester.

        Raises:
            PipelineError: Total collection failure or persistence failure.
        """
        request = PipelineRequest(target=target, requester=requester, force_refresh=force_refresh)
        if request_id:
            request.request_id = request_id
        result = await self._pipeline.run(request)
        return EnrichmentResponse.from_result(result)

    async def collect(
        self,
        target: str,
        sources: Sequence[str] | None = None,
        force_refresh: bool = False,
        max_cost: float | None = None,
    ) -> CollectionResponse:
        """Collection only, without analysis or persistence.

        max_cost caps the USD spent on new upstream calls; sources that do
        not fit are skipped and listed in the response.
        """
        options = FetchOptions(force_refresh=force_refresh, max_cost=max_cost)
        if sources:
            return await self._collector.collect_selective(target, sources, options)
        return await self._collector.collect_all(target, options)

    async def source_availability(self, target: str) -> SourceAvailability:
        """Which configured sources are already cached for target."""
        return await self._collector.source_availability(target)

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()
        await self._store.close()

    async def __aenter__(self) -> SalesIntelligenceService:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def _build_analyzer(self, llm: BaseLLMClient | None) -> BaseInsightExtractor:
        s = self._settings
        if llm is None and _provider_key(s):
            llm = create_llm_client(s.llm_default_provider, s.llm_default_model, settings=s)
        if llm is None:
            logger.warning("No LLM API key configured, using heuristic analysis only")
            return HeuristicInsightExtractor()
        logger.info("Analysis model: %s", llm.describe())
        return LLMInsightExtractor(
            llm,
            policy=CallPolicy.from_settings(s),
            max_tokens=s.llm_max_tokens,
            temperature=s.llm_temperature,
        )


def _provider_key(settings: Settings) -> str:
    if settings.llm_default_provider == "openai":
        return settings.openai_api_key
    if settings.llm_default_provider == "anthropic":
        return settings.anthropic_api_key
    return ""
