# src/sources/models.py — v1
"""Source-level types: normalized items, per-adapter results, aggregate response.

Normalized items are validated with pydantic and stored as plain dicts
(model_dump with exclude_none) so the aggregate can be cached and compared
byte-for-byte.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, NamedTuple

from pydantic import BaseModel, ConfigDict, Field


class FetchOptions(BaseModel):
    """Per-call options passed from the pipeline down to each adapter."""

    force_refresh: bool = False
    # USD budget for new upstream calls; cached sources are free. None means unlimited.
    max_cost: float | None = Field(default=None, ge=0)


class FetchOutcome(NamedTuple):
    """Result of get_cached_or_fetch: the value and whether it came from cache."""

    value: Any
    cached: bool


# --- Normalized items ---


class OrganicResult(BaseModel):
    position: int | None = None
    title: str
    link: str
    snippet: str = ""
    date: str | None = None


class NewsItem(BaseModel):
    title: str
    link: str
    snippet: str = ""
    date: str | None = None
    source: str | None = None
    thumbnail: str | None = None


class SalaryRange(BaseModel):
    min: float | None = None
    max: float | None = None
    currency: str | None = None


class JobPosting(BaseModel):
    title: str
    company: str
    location: str = ""
    via: str | None = None
    description: str | None = None
    posted_at: str | None = None
    schedule_type: str | None = None
    salary: SalaryRange | None = None


class ProfessionalProfile(BaseModel):
    name: str
    title: str = ""
    company: str = ""
    location: str = ""
    profile_url: str
    snippet: str = ""


class VideoItem(BaseModel):
    title: str
    link: str
    channel: str = ""
    duration: str | None = None
    views: int | str | None = None
    published: str | None = None
    thumbnail: str | None = None
    snippet: str = ""


class ContactRecord(BaseModel):
    email: str
    first_name: str = ""
    last_name: str = ""
    position: str = ""
    social_url: str | None = None
    company: str = ""


# --- Collection results ---


class SourceAdapterResult(BaseModel):
    """Outcome of one adapter within a collection run."""

    source: str
    status: Literal["fulfilled", "rejected"]
    data: Any = None
    cost: float = 0.0
    cached: bool = False
    error: str | None = None
    duration_ms: int = 0


class CollectionTiming(BaseModel):
    total_ms: int = 0
    parallel_ms: int = 0
    parallel_ratio: float = 0.0


class CollectionResponse(BaseModel):
    """Aggregate of one multi-source collection. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    target: str
    organic: dict[str, Any] = Field(default_factory=dict)
    news: list[dict[str, Any]] = Field(default_factory=list)
    jobs: list[dict[str, Any]] = Field(default_factory=list)
    linkedin: list[dict[str, Any]] = Field(default_factory=list)
    youtube: list[dict[str, Any]] = Field(default_factory=list)
    contacts: list[dict[str, Any]] = Field(default_factory=list)
    cached: dict[str, bool] = Field(default_factory=dict)
    api_calls: int = 0
    total_cost: float = 0.0
    cost_estimate: str = "$0.000"
    timing: CollectionTiming = Field(default_factory=CollectionTiming)
    sources: list[str] = Field(default_factory=list)
    failures: dict[str, str] = Field(default_factory=dict)
    skipped: list[str] = Field(default_factory=list)

    @property
    def cache_hits(self) -> int:
        return sum(1 for hit in self.cached.values() if hit)

    @property
    def succeeded(self) -> bool:
        """True when at least one source delivered data."""
        return bool(self.sources)


class SourceAvailability(BaseModel):
    """Which sources hold a live cached payload for a target."""

    target: str
    sources: dict[str, bool] = Field(default_factory=dict)
    checked_at: datetime

    @property
    def overall(self) -> float:
        """Fraction of sources available from cache."""
        if not self.sources:
            return 0.0
        return sum(1 for hit in self.sources.values() if hit) / len(self.sources)
