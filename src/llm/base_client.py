# src/llm/base_client.py — v2
"""Contract every analysis model client fulfils.

The analyzer only needs one structured completion per company, so the
interface is a single coroutine plus identity properties used in logs
and cost lookup.

Failures must surface as salesintel errors, never raw SDK exceptions:
429, 5xx, timeouts and dropped connections as TransientNetworkError so
the shared CallPolicy retries them, anything else as
UpstreamApplicationError. llm.sdk_errors does that mapping.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel

from salesintel.llm.models import LLMResponse, Message


class BaseLLMClient(ABC):
    """Async chat-completion client for one provider and model."""

    @abstractmethod
    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.2,
        response_format: type[BaseModel] | None = None,
    ) -> LLMResponse:
        """Run one completion.

        When response_format is given the provider is asked for JSON
        matching that model's schema; content is then the JSON text.
        """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Short provider key, as registered in client_factory."""

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Configured model id, used for pricing."""

    def describe(self) -> str:
        return f"{self.provider_name}/{self.model_name}"
