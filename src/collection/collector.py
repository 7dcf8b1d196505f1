# src/collection/collector.py — v2
"""Parallel multi-source collection with settle-all semantics.

Every selected adapter runs concurrently; one adapter failing never cancels
or fails the others. With a cost budget, adapters are selected in order and
any whose new-call cost no longer fits is skipped; cached sources cost
nothing. Successful payloads are merged under the adapter's field. Failed
and skipped fields keep their empty value. Failures are recorded with their
error, skipped sources by name.
The collector always returns a response; deciding that zero successful
sources is fatal belongs to the caller.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Sequence

from salesintel.logging.context import set_source_context
from salesintel.sources.base_adapter import BaseSourceAdapter
from salesintel.sources.models import (
    CollectionResponse,
    CollectionTiming,
    FetchOptions,
    SourceAdapterResult,
    SourceAvailability,
)
from salesintel.tracking.cost_calculator import format_cost, summarize_collection

logger = logging.getLogger(__name__)

# float slack when comparing summed costs with the budget
_COST_EPSILON = 1e-9


class MultiSourceCollector:
    """Fan out one target to a set of source adapters.

    Args:
        adapters: Adapters in reporting order. Keys and names must be unique.
        clock: Monotonic seconds (injectable for tests).
    """

    def __init__(
        self,
        adapters: Sequence[BaseSourceAdapter],
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        names = [a.name for a in adapters]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate source adapters: {names}")
        self._adapters = list(adapters)
        self._clock = clock

    @property
    def source_names(self) -> list[str]:
        return [a.name for a in self._adapters]

    @property
    def source_keys(self) -> list[str]:
        return [a.key for a in self._adapters]

    async def collect_all(
        self, target: str, options: FetchOptions | None = None
    ) -> CollectionResponse:
        """Collect from every configured adapter."""
        return await self._collect(target, self._adapters, options)

    async def collect_selective(
        self,
        target: str,
        sources: Sequence[str],
        options: FetchOptions | None = None,
    ) -> CollectionResponse:
        """Collect from a subset, selected by short key or source name.

        Raises:
            ValueError: If any requested source is not configured.
        """
        by_id = {a.key: a for a in self._adapters}
        by_id.update({a.name: a for a in self._adapters})
        unknown = [s for s in sources if s not in by_id]
        if unknown:
            raise ValueError(
                f"Unknown sources: {', '.join(unknown)}. "
                f"Configured: {', '.join(self.source_keys)}"
            )
        selected: list[BaseSourceAdapter] = []
        for s in sources:
            if by_id[s] not in selected:
                selected.append(by_id[s])
        return await self._collect(target, selected, options)

    async def source_availability(self, target: str) -> SourceAvailability:
        """Per-source cache status for target, keyed by short source key.

        Read-only: nothing is fetched and expired entries are not evicted.
        """
        hits = await asyncio.gather(*(_is_cached(a, target) for a in self._adapters))
        return SourceAvailability(
            target=target,
            sources={a.key: hit for a, hit in zip(self._adapters, hits)},
            checked_at=datetime.now(timezone.utc),
        )

    async def plan(
        self,
        target: str,
        adapters: Sequence[BaseSourceAdapter],
        options: FetchOptions,
    ) -> tuple[list[BaseSourceAdapter], list[str]]:
        """Split adapters into those within the cost budget and skipped names."""
        if options.max_cost is None:
            return list(adapters), []
        if options.force_refresh:
            hits = [False] * len(adapters)
        else:
            hits = await asyncio.gather(*(_is_cached(a, target) for a in adapters))

        selected: list[BaseSourceAdapter] = []
        skipped: list[str] = []
        spent = 0.0
        for adapter, hit in zip(adapters, hits):
            cost = 0.0 if hit else adapter.cost
            if spent + cost > options.max_cost + _COST_EPSILON:
                skipped.append(adapter.name)
                continue
            selected.append(adapter)
            spent += cost
        if skipped:
            logger.info(
                "Budget %s for %s: planned %s, skipped %s",
                format_cost(options.max_cost), target, format_cost(spent), ", ".join(skipped),
            )
        return selected, skipped

    async def _collect(
        self,
        target: str,
        requested: list[BaseSourceAdapter],
        options: FetchOptions | None,
    ) -> CollectionResponse:
        options = options or FetchOptions()
        adapters, skipped = await self.plan(target, requested, options)
        logger.info(
            "Collecting %s from %d sources: %s",
            target, len(adapters), ", ".join(a.name for a in adapters),
        )
        start = self._clock()

        parallel_start = self._clock()
        outcomes = await asyncio.gather(
            *(self._run_adapter(a, target, options) for a in adapters),
            return_exceptions=True,
        )
        parallel_ms = _elapsed_ms(parallel_start, self._clock())

        results: list[SourceAdapterResult] = []
        fields: dict[str, Any] = {a.field: a.empty_value() for a in requested}
        cached: dict[str, bool] = {}
        sources: list[str] = []
        failures: dict[str, str] = {}

        for adapter, outcome in zip(adapters, outcomes):
            if isinstance(outcome, BaseException) and not isinstance(outcome, Exception):
                raise outcome
            if isinstance(outcome, Exception):
                # raised outside adapter.collect
                outcome = SourceAdapterResult(
                    source=adapter.name, status="rejected", error=_describe(outcome),
                )
            results.append(outcome)
            if outcome.status == "fulfilled":
                fields[adapter.field] = outcome.data
                cached[adapter.field] = outcome.cached
                sources.append(adapter.name)
            else:
                cached[adapter.field] = False
                failures[adapter.name] = outcome.error or "unknown error"

        summary = summarize_collection(results)
        total_ms = _elapsed_ms(start, self._clock())
        response = CollectionResponse(
            target=target,
            **fields,
            cached=cached,
            api_calls=summary.api_calls,
            total_cost=round(summary.new_cost_usd, 6),
            cost_estimate=format_cost(summary.new_cost_usd),
            timing=CollectionTiming(
                total_ms=total_ms,
                parallel_ms=parallel_ms,
                parallel_ratio=round(parallel_ms / total_ms, 3) if total_ms else 1.0,
            ),
            sources=sources,
            failures=failures,
            skipped=skipped,
        )

        logger.info(
            "Collected %s: %d/%d sources, %d api calls, %d cache hits, cost %s, %dms",
            target, len(sources), len(adapters), summary.api_calls,
            summary.cache_hits, response.cost_estimate, total_ms,
        )
        return response

    async def _run_adapter(
        self,
        adapter: BaseSourceAdapter,
        target: str,
        options: FetchOptions,
    ) -> SourceAdapterResult:
        # gather runs each coroutine in its own task, so this context is per adapter
        set_source_context(adapter.name)
        start = self._clock()
        try:
            value, hit = await adapter.collect(target, options)
        except Exception as e:
            logger.warning("Source %s failed for %s: %s", adapter.name, target, _describe(e))
            return SourceAdapterResult(
                source=adapter.name,
                status="rejected",
                error=_describe(e),
                duration_ms=_elapsed_ms(start, self._clock()),
            )
        finally:
            set_source_context(None)
        return SourceAdapterResult(
            source=adapter.name,
            status="fulfilled",
            data=value,
            cost=adapter.cost,
            cached=hit,
            duration_ms=_elapsed_ms(start, self._clock()),
        )


async def _is_cached(adapter: BaseSourceAdapter, target: str) -> bool:
    try:
        return await adapter.is_cached(target)
    except ValueError as e:
        logger.debug("No cache key for %s on %s: %s", target, adapter.name, e)
        return False


def _elapsed_ms(start: float, end: float) -> int:
    return max(0, int(round((end - start) * 1000)))


def _describe(error: BaseException) -> str:
    return f"{type(error).__name__}: {error}"
