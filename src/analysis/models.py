# src/analysis/models.py — v1
"""Analysis output types: CompanyInsights and the AnalysisResult envelope."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

SignalType = Literal["expansion", "funding", "hiring", "product", "leadership", "partnership", "other"]
ContactRole = Literal["Decision Maker", "Champion", "Technical Buyer", "Influencer"]
AnalysisSource = Literal["llm", "heuristic", "cache"]


class DataQuality(BaseModel):
    """Scores in [0, 1]; overall is the mean of the three others."""

    completeness: float = Field(ge=0.0, le=1.0)
    freshness: float = Field(ge=0.0, le=1.0)
    reliability: float = Field(ge=0.0, le=1.0)
    overall: float = Field(ge=0.0, le=1.0)


class CompanyProfile(BaseModel):
    name: str
    industry: str | None = None
    size: str | None = None
    headquarters: str | None = None
    founded: str | None = None
    description: str | None = None
    website: str | None = None


class NewsSignal(BaseModel):
    headline: str
    date: str | None = None
    source: str | None = None
    insight: str = ""
    signal_type: SignalType = "other"


class HiringSignal(BaseModel):
    title: str
    location: str | None = None
    insight: str = ""


class KeyContact(BaseModel):
    title: str
    name: str | None = None
    role: ContactRole = "Influencer"
    profile_url: str | None = None
    signal: str | None = None


class CompanyInsights(BaseModel):
    """Structured intelligence report for one target company."""

    company: CompanyProfile
    products: list[str] = Field(default_factory=list)
    competitors: list[str] = Field(default_factory=list)
    news_signals: list[NewsSignal] = Field(default_factory=list)
    hiring_signals: list[HiringSignal] = Field(default_factory=list)
    key_contacts: list[KeyContact] = Field(default_factory=list)
    talking_points: list[str] = Field(default_factory=list)
    data_quality: DataQuality | None = None


class AnalysisResult(BaseModel):
    """Insights plus how they were produced and what they cost."""

    insights: CompanyInsights
    source: AnalysisSource
    model: str | None = None
    llm_cost: float = 0.0
    input_tokens: int = 0
    output_tokens: int = 0
