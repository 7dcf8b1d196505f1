# src/sources/adapters/news_adapter.py — v1
"""Google News results for a company."""

from __future__ import annotations

from typing import Any

from salesintel.cache.categories import CacheCategory
from salesintel.sources.base_adapter import SerpApiAdapter, normalize_items
from salesintel.sources.models import NewsItem


class NewsSearchAdapter(SerpApiAdapter):
    name = "google_news"
    field = "news"
    key = "news"
    category = CacheCategory.SERP_API_NEWS_RESULTS

    def build_params(self, target: str) -> dict[str, Any]:
        return self.search_params(target, tbm="nws")

    def normalize(self, raw: dict[str, Any]) -> list[dict[str, Any]]:
        # tbm=nws answers under news_results; older responses used organic_results
        items = raw.get("news_results") or raw.get("organic_results") or []
        return normalize_items(
            NewsItem,
            (
                {
                    "title": r.get("title"),
                    "link": r.get("link"),
                    "snippet": r.get("snippet") or "",
                    "date": r.get("date"),
                    "source": _source_name(r.get("source")),
                    "thumbnail": r.get("thumbnail"),
                }
                for r in items
            ),
        )


def _source_name(source: Any) -> str | None:
    if isinstance(source, dict):
        return source.get("name")
    return source
