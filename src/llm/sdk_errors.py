# src/llm/sdk_errors.py — v1
"""Translate anthropic / openai SDK exceptions into salesintel errors.

Both SDKs expose the same hierarchy (APIError > APIConnectionError,
APIStatusError > RateLimitError, InternalServerError), so one mapping
serves every adapter.
"""

from __future__ import annotations

from types import ModuleType

from salesintel.core.errors import (
    SalesIntelError,
    TransientNetworkError,
    UpstreamApplicationError,
)


def translate_sdk_error(error: Exception, sdk: ModuleType, provider: str) -> SalesIntelError:
    """Map one SDK exception to TransientNetworkError or UpstreamApplicationError."""
    status = getattr(error, "status_code", None)
    message = f"{provider}: {error}"
    if isinstance(error, sdk.APIConnectionError):  # includes APITimeoutError
        return TransientNetworkError(message, source=provider)
    if status is not None and (status == 429 or status >= 500):
        return TransientNetworkError(message, source=provider, status_code=status)
    return UpstreamApplicationError(message, source=provider, status_code=status)
