# src/analysis/llm_analyzer.py — v1
"""Model-backed insight extraction.

One model call per extraction, run under the shared CallPolicy retry.
Any call failure or output that does not validate as CompanyInsights
surfaces as AnalysisError.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from salesintel.analysis.base_analyzer import BaseInsightExtractor
from salesintel.analysis.json_extractor import extract_json
from salesintel.analysis.models import AnalysisResult, CompanyInsights
from salesintel.analysis.prompt_builder import SYSTEM_PROMPT, build_insights_prompt
from salesintel.analysis.quality import LLM_RELIABILITY, assess_data_quality
from salesintel.core.errors import AnalysisError
from salesintel.core.retry import CallPolicy
from salesintel.llm.base_client import BaseLLMClient
from salesintel.llm.models import LLMResponse, Message
from salesintel.sources.models import CollectionResponse
from salesintel.tracking.cost_calculator import compute_llm_cost

logger = logging.getLogger(__name__)


class LLMInsightExtractor(BaseInsightExtractor):
    """Extract insights with a language model.

    Args:
        llm: Model client.
        policy: Retry policy for the model call. Defaults to CallPolicy().
        max_tokens: Completion budget.
        temperature: Sampling temperature.
    """

    def __init__(
        self,
        llm: BaseLLMClient,
        policy: CallPolicy | None = None,
        max_tokens: int = 2048,
        temperature: float = 0.2,
    ) -> None:
        self._llm = llm
        self._policy = policy or CallPolicy()
        self._max_tokens = max_tokens
        self._temperature = temperature

    @property
    def name(self) -> str:
        return "llm"

    async def extract(self, target: str, collection: CollectionResponse) -> AnalysisResult:
        prompt = build_insights_prompt(target, collection)
        try:
            response: LLMResponse = await self._policy.retry.run(
                self._llm.complete,
                [Message.user(prompt)],
                system=SYSTEM_PROMPT,
                max_tokens=self._max_tokens,
                temperature=self._temperature,
                operation=f"{self._llm.provider_name} insights for {target}",
            )
        except Exception as e:
            raise AnalysisError(f"model call failed: {e}") from e

        if response.truncated:
            logger.warning("LLM output for %s hit the %d token ceiling", target, self._max_tokens)
        insights = self._parse_insights(target, response.content)
        insights.data_quality = assess_data_quality(collection, LLM_RELIABILITY)
        cost = compute_llm_cost(response)
        logger.info(
            "LLM insights for %s: %d tokens, $%.4f", target, response.total_tokens, cost,
        )
        return AnalysisResult(
            insights=insights,
            source="llm",
            model=response.model,
            llm_cost=cost,
            input_tokens=response.input_tokens,
            output_tokens=response.output_tokens,
        )

    @staticmethod
    def _parse_insights(target: str, content: str) -> CompanyInsights:
        data: dict[str, Any] = extract_json(content)
        company = data.get("company")
        if isinstance(company, dict):
            company.setdefault("name", target)
        try:
            return CompanyInsights.model_validate(data)
        except ValidationError as e:
            raise AnalysisError(
                f"model output is not valid CompanyInsights ({e.error_count()} errors)"
            ) from e
