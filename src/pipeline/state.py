# src/pipeline/state.py — v2
"""Enrichment request state machine and tagged stage outputs.

Stage graph:
    CACHE_CHECK -> DONE                       (hit)
    CACHE_CHECK -> COLLECT -> ANALYZE -> PERSIST -> DONE   (miss)
    any non-terminal stage -> FAILED

A PipelineRequest only ever moves forward along this graph. Each stage
returns one member of the StageOutcome tagged union (discriminator: kind).
"""

from __future__ import annotations

import uuid
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter

from salesintel.analysis.models import AnalysisResult, AnalysisSource
from salesintel.cache.keys import enriched_key
from salesintel.sources.models import CollectionResponse, CollectionTiming

# CollectionResponse fields copied into the persisted record
RECORD_DATA_FIELDS = frozenset({"organic", "news", "jobs", "linkedin", "youtube", "contacts"})


class PipelineStage(str, Enum):
    CACHE_CHECK = "cache_check"
    COLLECT = "collect"
    ANALYZE = "analyze"
    PERSIST = "persist"
    DONE = "done"
    FAILED = "failed"


_TRANSITIONS: dict[PipelineStage, frozenset[PipelineStage]] = {
    PipelineStage.CACHE_CHECK: frozenset({PipelineStage.COLLECT, PipelineStage.DONE}),
    PipelineStage.COLLECT: frozenset({PipelineStage.ANALYZE}),
    PipelineStage.ANALYZE: frozenset({PipelineStage.PERSIST}),
    PipelineStage.PERSIST: frozenset({PipelineStage.DONE}),
    PipelineStage.DONE: frozenset(),
    PipelineStage.FAILED: frozenset(),
}


class StageTransitionError(ValueError):
    """Raised on a backward, skipping or post-terminal stage transition."""


def can_transition(current: PipelineStage, target: PipelineStage) -> bool:
    if target is PipelineStage.FAILED:
        return bool(_TRANSITIONS[current])
    return target in _TRANSITIONS[current]


class PipelineRequest(BaseModel):
    """One enrichment request. Mutated only through advance()."""

    target: str = Field(min_length=1)
    requester: str = Field(min_length=1)
    request_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    force_refresh: bool = False
    stage: PipelineStage = PipelineStage.CACHE_CHECK
    history: list[PipelineStage] = Field(default_factory=lambda: [PipelineStage.CACHE_CHECK])

    @property
    def cache_key(self) -> str:
        return enriched_key(self.target, self.requester)

    @property
    def is_terminal(self) -> bool:
        return self.stage in (PipelineStage.DONE, PipelineStage.FAILED)

    def advance(self, stage: PipelineStage) -> None:
        """Move to the next stage.

        Raises:
            StageTransitionError: If the move is not a forward edge.
        """
        if not can_transition(self.stage, stage):
            raise StageTransitionError(
                f"Invalid stage transition {self.stage.value} -> {stage.value}"
            )
        self.stage = stage
        self.history.append(stage)


class EnrichmentMetrics(BaseModel):
    total_cost: float
    collection_cost: float
    llm_cost: float
    api_calls: int
    cache_hits: int
    analysis_source: AnalysisSource
    sources: list[str]


class EnrichedRecord(BaseModel):
    """The persisted unit. Holds no wall-clock values, so it is a pure
    function of the collected data and the analysis."""

    target: str
    requester: str
    request_id: str
    data: dict[str, Any]
    failures: dict[str, str] = Field(default_factory=dict)
    analysis: AnalysisResult
    metrics: EnrichmentMetrics


# --- Stage outcomes (tagged union) ---


class CacheCheckOutcome(BaseModel):
    kind: Literal["cache_check"] = "cache_check"
    key: str
    hit: bool
    record: EnrichedRecord | None = None


class CollectOutcome(BaseModel):
    kind: Literal["collect"] = "collect"
    collection: CollectionResponse


class AnalysisOutcome(BaseModel):
    kind: Literal["analysis"] = "analysis"
    analysis: AnalysisResult
    cached: bool = False


class PersistOutcome(BaseModel):
    kind: Literal["persist"] = "persist"
    record: EnrichedRecord
    persisted: bool


StageOutcome = Annotated[
    Union[CacheCheckOutcome, CollectOutcome, AnalysisOutcome, PersistOutcome],
    Field(discriminator="kind"),
]

STAGE_OUTCOME_ADAPTER: TypeAdapter[Any] = TypeAdapter(StageOutcome)


def validate_outcome(outcome: Any) -> Any:
    """Validate a stage output (model or dict) against the StageOutcome union."""
    if isinstance(outcome, BaseModel):
        outcome = outcome.model_dump()
    return STAGE_OUTCOME_ADAPTER.validate_python(outcome)


class PipelineResult(BaseModel):
    """What EnrichmentPipeline.run returns."""

    request_id: str
    cache_key: str
    record: EnrichedRecord
    from_cache: bool
    persisted: bool
    stages: list[PipelineStage]
    timing: CollectionTiming | None = None
