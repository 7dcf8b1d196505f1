# src/sources/adapters/youtube_adapter.py — v1
"""Company videos from the YouTube search engine."""

from __future__ import annotations

from typing import Any

from salesintel.cache.categories import CacheCategory
from salesintel.sources.base_adapter import SerpApiAdapter, normalize_items
from salesintel.sources.models import VideoItem


class YouTubeSearchAdapter(SerpApiAdapter):
    name = "youtube"
    field = "youtube"
    key = "youtube"
    category = CacheCategory.SERP_API_YOUTUBE_RESULTS
    engine = "youtube"

    def build_params(self, target: str) -> dict[str, Any]:
        # the youtube engine reads search_query, not q
        query = f'"{target}"'
        return self.search_params(query, search_query=query)

    def normalize(self, raw: dict[str, Any]) -> list[dict[str, Any]]:
        return normalize_items(
            VideoItem,
            (
                {
                    "title": v.get("title"),
                    "link": v.get("link"),
                    "channel": _nested(v.get("channel"), "name") or "",
                    "duration": v.get("length") or v.get("duration"),
                    "views": v.get("views"),
                    "published": v.get("published_date"),
                    "thumbnail": _nested(v.get("thumbnail"), "static"),
                    "snippet": v.get("description") or v.get("snippet") or "",
                }
                for v in raw.get("video_results") or []
            ),
        )


def _nested(value: Any, key: str) -> Any:
    """value[key] for objects, the value itself for plain strings."""
    if isinstance(value, dict):
        return value.get(key)
    return value
