# src/sources/adapters/organic_adapter.py — v1
"""Google organic search results plus the knowledge graph panel."""

from __future__ import annotations

from typing import Any

from salesintel.cache.categories import CacheCategory
from salesintel.sources.base_adapter import SerpApiAdapter, normalize_items
from salesintel.sources.models import OrganicResult


class OrganicSearchAdapter(SerpApiAdapter):
    """Payload: {"results": [OrganicResult...], "knowledge_graph": {...}}."""

    name = "google_organic"
    field = "organic"
    key = "organic"
    category = CacheCategory.SERP_API_ORGANIC_RESULTS

    def empty_value(self) -> dict[str, Any]:
        return {}

    def normalize(self, raw: dict[str, Any]) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "results": normalize_items(
                OrganicResult,
                (
                    {
                        "position": r.get("position"),
                        "title": r.get("title"),
                        "link": r.get("link"),
                        "snippet": r.get("snippet") or "",
                        "date": r.get("date"),
                    }
                    for r in raw.get("organic_results") or []
                ),
            ),
        }
        knowledge_graph = raw.get("knowledge_graph")
        if isinstance(knowledge_graph, dict) and knowledge_graph:
            payload["knowledge_graph"] = knowledge_graph
        return payload
