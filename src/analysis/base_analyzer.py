# src/analysis/base_analyzer.py — v1
"""Insight extraction strategy interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from salesintel.analysis.models import AnalysisResult
from salesintel.sources.models import CollectionResponse


class BaseInsightExtractor(ABC):
    """Turns a collection into CompanyInsights."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Strategy identifier (llm, heuristic, fallback)."""

    @abstractmethod
    async def extract(self, target: str, collection: CollectionResponse) -> AnalysisResult:
        """Analyze one collection.

        Args:
            target: Company identifier the collection was made for.
            collection: Merged source data.

        Returns:
            AnalysisResult with insights, source and cost.

        Raises:
            AnalysisError: Model failure or unusable output.
        """
