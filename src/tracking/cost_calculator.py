# src/tracking/cost_calculator.py — v1
"""Cost estimation for source calls and LLM analysis calls.

Source costs are flat USD per upstream call. LLM cost is computed from
token usage; models without a pricing entry are charged a flat fallback.
"""

from __future__ import annotations

from typing import Iterable

from salesintel.llm.models import LLMResponse
from salesintel.sources.models import SourceAdapterResult
from salesintel.tracking.models import CollectionCostSummary, ModelPricing

# Default pricing per 1M tokens
DEFAULT_PRICING: dict[str, ModelPricing] = {
    "claude-sonnet-4-20250514": ModelPricing(
        model="claude-sonnet-4-20250514",
        input_price_per_1m=3.0, output_price_per_1m=15.0,
        cache_read_per_1m=0.3, cache_write_per_1m=3.75,
    ),
    "claude-haiku-4-5-20251001": ModelPricing(
        model="claude-haiku-4-5-20251001",
        input_price_per_1m=0.80, output_price_per_1m=4.0,
        cache_read_per_1m=0.08, cache_write_per_1m=1.0,
    ),
    "gpt-4o": ModelPricing(
        model="gpt-4o",
        input_price_per_1m=2.50, output_price_per_1m=10.0,
    ),
    "gpt-4o-mini": ModelPricing(
        model="gpt-4o-mini",
        input_price_per_1m=0.15, output_price_per_1m=0.60,
    ),
}

# Charged when the model has no pricing entry
FALLBACK_LLM_COST_USD = 0.02

# USD per upstream call, keyed by source name
SOURCE_COSTS: dict[str, float] = {
    "google_organic": 0.02,
    "google_news": 0.02,
    "google_jobs": 0.02,
    "linkedin": 0.03,
    "youtube": 0.02,
    "contacts": 0.10,
}


def compute_llm_cost(
    response: LLMResponse, pricing: dict[str, ModelPricing] | None = None
) -> float:
    """Estimated USD cost of one LLM call."""
    pricing = pricing or DEFAULT_PRICING
    model_pricing = pricing.get(response.model)
    if model_pricing is None:
        return FALLBACK_LLM_COST_USD
    return model_pricing.cost_of(
        response.input_tokens,
        response.output_tokens,
        response.cache_read_tokens,
        response.cache_write_tokens,
    )


def source_cost(source: str) -> float:
    """Flat per-call cost of a source; 0.0 for unpriced sources."""
    return SOURCE_COSTS.get(source, 0.0)


def summarize_collection(results: Iterable[SourceAdapterResult]) -> CollectionCostSummary:
    """Split the spend of fulfilled sources into paid calls and cache hits."""
    summary = CollectionCostSummary()
    by_source: dict[str, float] = {}
    for r in results:
        if r.status != "fulfilled":
            continue
        if r.cached:
            summary.cache_hits += 1
            summary.cache_savings_usd += r.cost
            by_source[r.source] = 0.0
        else:
            summary.api_calls += 1
            summary.new_cost_usd += r.cost
            by_source[r.source] = r.cost
    summary.by_source = by_source
    return summary


def format_cost(amount: float) -> str:
    """Dollar string with three decimals, e.g. "$0.070"."""
    return f"${amount:.3f}"
