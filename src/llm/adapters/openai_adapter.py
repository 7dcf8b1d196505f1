# src/llm/adapters/openai_adapter.py — v2
"""OpenAI chat completions adapter.

Structured output uses the json_schema response format; the SDK client
is created per call, so the adapter holds no open connections.
SDK-level retries are off; CallPolicy is the only retry layer.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from pydantic import BaseModel

from salesintel.llm.base_client import BaseLLMClient
from salesintel.llm.models import LLMResponse, Message
from salesintel.llm.sdk_errors import translate_sdk_error

logger = logging.getLogger(__name__)


class OpenAIAdapter(BaseLLMClient):
    def __init__(self, model: str = "gpt-4o", api_key: str = "", **kwargs: Any):
        self._model = model
        self._api_key = api_key

    @property
    def provider_name(self) -> str:
        return "openai"

    @property
    def model_name(self) -> str:
        return self._model

    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.2,
        response_format: type[BaseModel] | None = None,
    ) -> LLMResponse:
        import openai

        request = self._request_body(messages, system, max_tokens, temperature)
        if response_format is not None:
            request["response_format"] = _json_schema_format(response_format)

        client = openai.AsyncOpenAI(api_key=self._api_key, max_retries=0)
        started = time.monotonic()
        try:
            completion = await client.chat.completions.create(**request)
        except openai.APIError as e:
            raise translate_sdk_error(e, openai, self.provider_name) from e
        elapsed_ms = int((time.monotonic() - started) * 1000)

        choice = completion.choices[0]
        usage = completion.usage
        result = LLMResponse(
            content=choice.message.content or "",
            model=self._model,
            provider=self.provider_name,
            input_tokens=getattr(usage, "prompt_tokens", 0) or 0,
            output_tokens=getattr(usage, "completion_tokens", 0) or 0,
            latency_ms=elapsed_ms,
            stop_reason=getattr(choice, "finish_reason", None),
            raw_response=completion,
        )
        logger.debug("openai %s: %d tokens, %dms", self._model, result.total_tokens, elapsed_ms)
        return result

    def _request_body(
        self,
        messages: list[Message],
        system: str | None,
        max_tokens: int,
        temperature: float,
    ) -> dict[str, Any]:
        chat = [{"role": "system", "content": system}] if system else []
        chat.extend({"role": m.role, "content": m.content} for m in messages)
        return {
            "model": self._model,
            "messages": chat,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }


def _json_schema_format(model: type[BaseModel]) -> dict[str, Any]:
    return {
        "type": "json_schema",
        "json_schema": {"name": model.__name__, "schema": model.model_json_schema()},
    }
