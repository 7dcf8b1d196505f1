# src/tracking/models.py — v2
"""Spend accounting types: per-model token prices and per-collection totals."""

from __future__ import annotations

from pydantic import BaseModel, Field

_PER_MILLION = 1_000_000


class ModelPricing(BaseModel):
    """USD per million tokens for one model."""

    model: str
    input_price_per_1m: float
    output_price_per_1m: float
    cache_read_per_1m: float = 0.0
    cache_write_per_1m: float = 0.0

    def cost_of(
        self,
        input_tokens: int,
        output_tokens: int,
        cache_read_tokens: int = 0,
        cache_write_tokens: int = 0,
    ) -> float:
        return (
            input_tokens * self.input_price_per_1m
            + output_tokens * self.output_price_per_1m
            + cache_read_tokens * self.cache_read_per_1m
            + cache_write_tokens * self.cache_write_per_1m
        ) / _PER_MILLION


class CollectionCostSummary(BaseModel):
    """Spend of one collection run: paid calls versus calls answered from cache."""

    new_cost_usd: float = 0.0
    cache_savings_usd: float = 0.0
    api_calls: int = 0
    cache_hits: int = 0
    by_source: dict[str, float] = Field(default_factory=dict)
