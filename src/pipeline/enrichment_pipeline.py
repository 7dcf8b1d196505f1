# src/pipeline/enrichment_pipeline.py — v1
"""Four-stage enrichment pipeline: CacheCheck -> Collect -> Analyze -> Persist.

At most one analysis-model invocation per request; concurrent requests for
the same enriched key share one run. Only PipelineError leaves run():
source failures are contained by the collector and analysis failures by
the heuristic fallback.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from salesintel.analysis.base_analyzer import BaseInsightExtractor
from salesintel.analysis.fallback_analyzer import FallbackInsightExtractor
from salesintel.analysis.heuristic_analyzer import HeuristicInsightExtractor
from salesintel.analysis.models import AnalysisResult
from salesintel.cache.categories import CacheCategory
from salesintel.cache.keys import analysis_key
from salesintel.cache.typed_cache import TypedCacheStore, to_jsonable
from salesintel.collection.collector import MultiSourceCollector
from salesintel.core.errors import PipelineError
from salesintel.logging.context import clear_context, set_request_context, set_stage_context
from salesintel.pipeline.single_flight import SingleFlight
from salesintel.pipeline.state import (
    RECORD_DATA_FIELDS,
    AnalysisOutcome,
    CacheCheckOutcome,
    CollectOutcome,
    EnrichedRecord,
    EnrichmentMetrics,
    PersistOutcome,
    PipelineRequest,
    PipelineResult,
    PipelineStage,
    validate_outcome,
)
from salesintel.sources.models import CollectionResponse, FetchOptions

logger = logging.getLogger(__name__)


class EnrichmentPipeline:
    """Run enrichment requests through the four stages.

    Args:
        store: Typed cache used for the enriched record and analysis.
        collector: Multi-source collector.
        analyzer: Primary insight extractor (usually model-backed).
        fallback: Used when analyzer raises AnalysisError. Defaults to
            HeuristicInsightExtractor.
        require_persistence: Raise PipelineError when the record write
            fails instead of returning it with persisted=False.
    """

    def __init__(
        self,
        store: TypedCacheStore,
        collector: MultiSourceCollector,
        analyzer: BaseInsightExtractor,
        fallback: BaseInsightExtractor | None = None,
        require_persistence: bool = True,
    ) -> None:
        self._store = store
        self._collector = collector
        self._analyzer = FallbackInsightExtractor(
            analyzer, fallback or HeuristicInsightExtractor()
        )
        self._require_persistence = require_persistence
        self._flight = SingleFlight()

    async def run(self, request: PipelineRequest) -> PipelineResult:
        """Enrich one target for one requester.

        Raises:
            PipelineError: Every source failed, or the record could not
                be persisted while persistence is required.
        """
        flight_key = f"{request.cache_key}:refresh" if request.force_refresh else request.cache_key
        return await self._flight.do(flight_key, lambda: self._run(request))

    async def _run(self, request: PipelineRequest) -> PipelineResult:
        set_request_context(request.request_id, request.target, request.requester)
        logger.info("Enrichment started: %s", request.cache_key)
        try:
            check = await self._cache_check(request)
            if check.hit and check.record is not None:
                request.advance(PipelineStage.DONE)
                logger.info("Enrichment served from cache: %s", request.cache_key)
                return PipelineResult(
                    request_id=request.request_id,
                    cache_key=request.cache_key,
                    record=check.record,
                    from_cache=True,
                    persisted=True,
                    stages=list(request.history),
                )

            request.advance(PipelineStage.COLLECT)
            collected = await self._collect(request)

            request.advance(PipelineStage.ANALYZE)
            analyzed = await self._analyze(request, collected.collection)

            request.advance(PipelineStage.PERSIST)
            persisted = await self._persist(request, collected.collection, analyzed.analysis)

            request.advance(PipelineStage.DONE)
            logger.info(
                "Enrichment done: %s, cost $%.4f, analysis %s",
                request.cache_key,
                persisted.record.metrics.total_cost,
                persisted.record.metrics.analysis_source,
            )
            return PipelineResult(
                request_id=request.request_id,
                cache_key=request.cache_key,
                record=persisted.record,
                from_cache=False,
                persisted=persisted.persisted,
                stages=list(request.history),
                timing=collected.collection.timing,
            )
        except PipelineError as e:
            request.advance(PipelineStage.FAILED)
            logger.error("Enrichment failed: %s", e)
            raise
        finally:
            clear_context()

    # --- Stages ---

    async def _cache_check(self, request: PipelineRequest) -> CacheCheckOutcome:
        set_stage_context(PipelineStage.CACHE_CHECK.value)
        key = request.cache_key
        if request.force_refresh:
            return validate_outcome(CacheCheckOutcome(key=key, hit=False))

        cached = await self._store.get(key)
        if cached is None:
            return validate_outcome(CacheCheckOutcome(key=key, hit=False))
        try:
            record = EnrichedRecord.model_validate(cached)
        except ValidationError as e:
            logger.warning("Discarding invalid cached record %s: %d errors", key, e.error_count())
            return validate_outcome(CacheCheckOutcome(key=key, hit=False))
        return validate_outcome(CacheCheckOutcome(key=key, hit=True, record=record))

    async def _collect(self, request: PipelineRequest) -> CollectOutcome:
        set_stage_context(PipelineStage.COLLECT.value)
        try:
            collection = await self._collector.collect_all(
                request.target, FetchOptions(force_refresh=request.force_refresh)
            )
        except Exception as e:
            raise PipelineError(
                "collection failed", request.request_id, PipelineStage.COLLECT.value, cause=e,
            ) from e
        if not collection.succeeded:
            failed = ", ".join(f"{k} ({v})" for k, v in collection.failures.items())
            raise PipelineError(
                f"no source succeeded: {failed or 'no sources configured'}",
                request.request_id,
                PipelineStage.COLLECT.value,
            )
        return validate_outcome(CollectOutcome(collection=collection))

    async def _analyze(
        self, request: PipelineRequest, collection: CollectionResponse
    ) -> AnalysisOutcome:
        set_stage_context(PipelineStage.ANALYZE.value)
        key = analysis_key(request.target, request.requester)

        if not request.force_refresh:
            cached = await self._load_analysis(key)
            if cached is not None:
                return validate_outcome(AnalysisOutcome(analysis=cached, cached=True))

        try:
            analysis = await self._analyzer.extract(request.target, collection)
        except Exception as e:
            raise PipelineError(
                "analysis failed", request.request_id, PipelineStage.ANALYZE.value, cause=e,
            ) from e
        if analysis.source == "llm":
            await self._store.set(key, analysis.model_dump(mode="json"), CacheCategory.LLM_ANALYSIS)
        return validate_outcome(AnalysisOutcome(analysis=analysis))

    async def _persist(
        self,
        request: PipelineRequest,
        collection: CollectionResponse,
        analysis: AnalysisResult,
    ) -> PersistOutcome:
        set_stage_context(PipelineStage.PERSIST.value)
        # return exactly what a later cache hit will read back
        record = EnrichedRecord.model_validate(to_jsonable(build_record(request, collection, analysis)))
        persisted = await self._store.set(request.cache_key, record, CacheCategory.COMPANY_ENRICHMENT)
        if not persisted:
            if self._require_persistence:
                raise PipelineError(
                    f"could not write {request.cache_key}",
                    request.request_id,
                    PipelineStage.PERSIST.value,
                )
            logger.warning("Enriched record not persisted: %s", request.cache_key)
        return validate_outcome(PersistOutcome(record=record, persisted=persisted))

    async def _load_analysis(self, key: str) -> AnalysisResult | None:
        cached = await self._store.get(key)
        if cached is None:
            return None
        try:
            analysis = AnalysisResult.model_validate(cached)
        except ValidationError as e:
            logger.warning("Discarding invalid cached analysis %s: %d errors", key, e.error_count())
            return None
        logger.debug("Analysis cache hit: %s", key)
        return analysis.model_copy(update={"source": "cache", "llm_cost": 0.0})


def build_record(
    request: PipelineRequest,
    collection: CollectionResponse,
    analysis: AnalysisResult,
) -> EnrichedRecord:
    """Assemble the enriched record. Deterministic in its inputs."""
    data: dict[str, Any] = collection.model_dump(include=set(RECORD_DATA_FIELDS))
    metrics = EnrichmentMetrics(
        total_cost=round(collection.total_cost + analysis.llm_cost, 6),
        collection_cost=collection.total_cost,
        llm_cost=analysis.llm_cost,
        api_calls=collection.api_calls,
        cache_hits=collection.cache_hits,
        analysis_source=analysis.source,
        sources=list(collection.sources),
    )
    return EnrichedRecord(
        target=request.target,
        requester=request.requester,
        request_id=request.request_id,
        data=data,
        failures=dict(collection.failures),
        analysis=analysis,
        metrics=metrics,
    )
