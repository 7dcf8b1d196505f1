# src/analysis/fallback_analyzer.py — v1
"""Primary-then-fallback extraction: the model first, rules when it fails."""

from __future__ import annotations

import logging

from salesintel.analysis.base_analyzer import BaseInsightExtractor
from salesintel.analysis.models import AnalysisResult
from salesintel.core.errors import AnalysisError
from salesintel.sources.models import CollectionResponse

logger = logging.getLogger(__name__)


class FallbackInsightExtractor(BaseInsightExtractor):
    """Run primary; on AnalysisError run fallback instead. Never raises AnalysisError
    as long as the fallback does not."""

    def __init__(self, primary: BaseInsightExtractor, fallback: BaseInsightExtractor) -> None:
        self._primary = primary
        self._fallback = fallback

    @property
    def name(self) -> str:
        return f"{self._primary.name}+{self._fallback.name}"

    async def extract(self, target: str, collection: CollectionResponse) -> AnalysisResult:
        try:
            return await self._primary.extract(target, collection)
        except AnalysisError as e:
            logger.warning(
                "%s analysis failed for %s, using %s: %s",
                self._primary.name, target, self._fallback.name, e,
            )
            return await self._fallback.extract(target, collection)
