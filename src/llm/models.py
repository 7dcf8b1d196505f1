# src/llm/models.py — v2
"""Provider-neutral chat types exchanged with the analysis model.

Adapters map their SDK objects onto these so the analyzer, cost
calculator and tests never touch anthropic or openai types directly.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

ChatRole = Literal["user", "assistant", "system"]

# stop reasons meaning the output hit the max_tokens ceiling
_TRUNCATION_REASONS = frozenset({"max_tokens", "length"})


class Message(BaseModel):
    """One chat turn. System turns are folded into the system prompt by adapters."""

    role: ChatRole
    content: str

    @classmethod
    def user(cls, content: str) -> Message:
        return cls(role="user", content=content)


class LLMResponse(BaseModel):
    """A completion with its token accounting.

    Token counts feed tracking.cost_calculator; cache_* counts stay zero
    for providers without prompt caching.
    """

    content: str
    model: str
    provider: str
    input_tokens: int = Field(ge=0)
    output_tokens: int = Field(ge=0)
    cache_read_tokens: int = 0
    cache_write_tokens: int = 0
    latency_ms: int = 0
    stop_reason: str | None = None
    raw_response: Any = None

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    @property
    def truncated(self) -> bool:
        """True when generation stopped on the token ceiling, not naturally."""
        return self.stop_reason in _TRUNCATION_REASONS
