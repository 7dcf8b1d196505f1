# src/api/models.py — v2
"""API-level models: EnrichmentResponse, ErrorResponse."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from salesintel.analysis.models import CompanyInsights
from salesintel.core.errors import PipelineError
from salesintel.pipeline.state import EnrichmentMetrics, PipelineResult


class EnrichmentResponse(BaseModel):
    """Return value of SalesIntelligenceService.enrich()."""

    request_id: str
    target: str
    requester: str
    cache_key: str
    from_cache: bool
    persisted: bool
    insights: CompanyInsights
    metrics: EnrichmentMetrics
    failures: dict[str, str] = Field(default_factory=dict)
    data: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_result(cls, result: PipelineResult) -> EnrichmentResponse:
        record = result.record
        return cls(
            request_id=result.request_id,
            target=record.target,
            requester=record.requester,
            cache_key=result.cache_key,
            from_cache=result.from_cache,
            persisted=result.persisted,
            insights=record.analysis.insights,
            metrics=record.metrics,
            failures=record.failures,
            data=record.data,
        )


class ErrorResponse(BaseModel):
    """Single structured error returned to callers."""

    error: str
    message: str
    request_id: str
    stage: str
    cause: str | None = None

    @classmethod
    def from_error(cls, error: PipelineError) -> ErrorResponse:
        return cls(**error.to_dict())
