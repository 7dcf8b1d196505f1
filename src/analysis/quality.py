# src/analysis/quality.py — v1
"""Data quality scoring for a collection.

completeness = share of source fields with data; freshness drops when any
source was served from cache; reliability is fixed per analysis source.
"""

from __future__ import annotations

from salesintel.analysis.models import DataQuality
from salesintel.sources.models import CollectionResponse

DATA_FIELDS = ("organic", "news", "jobs", "linkedin", "youtube", "contacts")

FRESH_SCORE = 0.9
CACHED_SCORE = 0.7
LLM_RELIABILITY = 0.85
HEURISTIC_RELIABILITY = 0.7


def assess_data_quality(collection: CollectionResponse, reliability: float = LLM_RELIABILITY) -> DataQuality:
    """Score how much usable data the collection holds."""
    attempted = [f for f in DATA_FIELDS if f in collection.cached]
    filled = [f for f in attempted if getattr(collection, f)]
    completeness = len(filled) / len(attempted) if attempted else 0.0
    freshness = CACHED_SCORE if collection.cache_hits else FRESH_SCORE
    overall = (completeness + freshness + reliability) / 3
    return DataQuality(
        completeness=round(completeness, 3),
        freshness=freshness,
        reliability=reliability,
        overall=round(overall, 3),
    )
