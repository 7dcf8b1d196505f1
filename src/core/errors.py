# src/core/errors.py — v1
"""Error taxonomy shared by the cache, source clients, analysis and pipeline.

Source-level errors are contained by the collector; only PipelineError
ever reaches a caller of the enrichment pipeline.
"""

from __future__ import annotations

from typing import Any


class SalesIntelError(Exception):
    """Base class for all salesintel errors."""


class ConfigurationError(SalesIntelError):
    """Missing credential or internally inconsistent settings. Never retried."""


class TransientNetworkError(SalesIntelError):
    """Timeout, connection failure, HTTP 429 or 5xx. Retried with backoff."""

    def __init__(
        self,
        message: str,
        source: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self.source = source
        self.status_code = status_code
        super().__init__(message)


class RetryExhaustedError(TransientNetworkError):
    """All attempts of a retried call failed with transient errors."""

    def __init__(self, operation: str, attempts: int, last_error: Exception) -> None:
        self.operation = operation
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"'{operation}' failed after {attempts} attempts: {last_error}",
            source=getattr(last_error, "source", None),
            status_code=getattr(last_error, "status_code", None),
        )


class UpstreamApplicationError(SalesIntelError):
    """Upstream API reported a logical error (error field or non-retryable 4xx)."""

    def __init__(
        self,
        message: str,
        source: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self.source = source
        self.status_code = status_code
        super().__init__(message)


class CacheError(SalesIntelError):
    """Cache backend unreachable or entry malformed. Swallowed by TypedCacheStore."""


class AnalysisError(SalesIntelError):
    """Model invocation failed or returned unparseable output."""


class PipelineError(SalesIntelError):
    """Pipeline-level failure: total collection failure or persistence failure."""

    def __init__(
        self,
        message: str,
        request_id: str,
        stage: str,
        cause: Exception | None = None,
    ) -> None:
        self.request_id = request_id
        self.stage = stage
        self.cause = cause
        super().__init__(f"[{request_id}] {stage}: {message}")
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        """Structured error payload for callers and logs."""
        payload: dict[str, Any] = {
            "error": type(self).__name__,
            "message": self.message,
            "request_id": self.request_id,
            "stage": self.stage,
        }
        if self.cause is not None:
            payload["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return payload
