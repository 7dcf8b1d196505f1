# src/llm/adapters/anthropic_adapter.py — v3
"""Anthropic Messages API adapter.

Structured output is requested as a forced call to a single tool whose
input_schema is the pydantic model; the tool input comes back as the
response content, serialized to JSON.
SDK-level retries are off; CallPolicy is the only retry layer.
"""

from __future__ import annotations

import json
import logging
import time
from types import ModuleType
from typing import Any

from pydantic import BaseModel

from salesintel.llm.base_client import BaseLLMClient
from salesintel.llm.models import LLMResponse, Message
from salesintel.llm.sdk_errors import translate_sdk_error

logger = logging.getLogger(__name__)

STRUCTURED_TOOL = "structured_output"


class AnthropicAdapter(BaseLLMClient):
    """Claude models. The SDK and its client are loaded on the first call."""

    def __init__(
        self,
        model: str = "claude-sonnet-4-20250514",
        api_key: str | None = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self.__sdk: ModuleType | None = None
        self.__client = None

    @property
    def provider_name(self) -> str:
        return "anthropic"

    @property
    def model_name(self) -> str:
        return self._model

    @property
    def _sdk(self) -> ModuleType:
        if self.__sdk is None:
            import anthropic

            self.__sdk = anthropic
        return self.__sdk

    @property
    def _client(self):
        if self.__client is None:
            self.__client = self._sdk.AsyncAnthropic(api_key=self._api_key or "", max_retries=0)
        return self.__client

    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.2,
        response_format: type[BaseModel] | None = None,
    ) -> LLMResponse:
        request: dict[str, Any] = {
            "model": self._model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [
                {"role": m.role, "content": m.content}
                for m in messages if m.role != "system"
            ],
        }
        system_prompt = _merge_system(system, messages)
        if system_prompt:
            request["system"] = system_prompt
        if response_format is not None:
            request["tools"] = [_structured_tool(response_format)]
            request["tool_choice"] = {"type": "tool", "name": STRUCTURED_TOOL}

        started = time.monotonic()
        try:
            message = await self._client.messages.create(**request)
        except self._sdk.APIError as e:
            raise translate_sdk_error(e, self._sdk, self.provider_name) from e
        elapsed_ms = int((time.monotonic() - started) * 1000)

        usage = message.usage
        logger.debug(
            "anthropic %s: %d in / %d out tokens, %dms",
            message.model, usage.input_tokens, usage.output_tokens, elapsed_ms,
        )
        return LLMResponse(
            content=_response_text(message.content, structured=response_format is not None),
            model=message.model,
            provider=self.provider_name,
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
            cache_read_tokens=getattr(usage, "cache_read_input_tokens", 0) or 0,
            cache_write_tokens=getattr(usage, "cache_creation_input_tokens", 0) or 0,
            latency_ms=elapsed_ms,
            stop_reason=getattr(message, "stop_reason", None),
            raw_response=message,
        )


def _merge_system(system: str | None, messages: list[Message]) -> str:
    """Explicit system prompt first, then any system turns in order."""
    parts = [system] if system else []
    parts.extend(m.content for m in messages if m.role == "system")
    return "\n\n".join(parts)


def _structured_tool(model: type[BaseModel]) -> dict[str, Any]:
    return {
        "name": STRUCTURED_TOOL,
        "description": f"Return a {model.__name__} object",
        "input_schema": model.model_json_schema(),
    }


def _response_text(blocks: list[Any], structured: bool) -> str:
    for block in blocks:
        kind = getattr(block, "type", None)
        if structured and kind == "tool_use":
            return json.dumps(block.input)
        if kind == "text":
            return block.text
    return ""
