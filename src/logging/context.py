# src/logging/context.py — v1
"""Contextual logging support: attach request id, company, stage, source to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging, set per enrichment request.
_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)
_company: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "company", default=None
)
_requester: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "requester", default=None
)
_stage: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "stage", default=None
)
_source: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "source", default=None
)


@dataclass
class LogContext:
    """Snapshot of the current logging context."""

    request_id: str | None = None
    company: str | None = None
    requester: str | None = None
    stage: str | None = None
    source: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        request_id=_request_id.get(),
        company=_company.get(),
        requester=_requester.get(),
        stage=_stage.get(),
        source=_source.get(),
    )


def set_request_context(request_id: str, company: str, requester: str) -> None:
    """Set request-level context (once per pipeline run)."""
    _request_id.set(request_id)
    _company.set(company)
    _requester.set(requester)


def set_stage_context(stage: str) -> None:
    """Set the current pipeline stage."""
    _stage.set(stage)


def set_source_context(source: str | None) -> None:
    """Set the source adapter being collected (per adapter task)."""
    _source.set(source)


def clear_context() -> None:
    """Reset all context variables."""
    _request_id.set(None)
    _company.set(None)
    _requester.set(None)
    _stage.set(None)
    _source.set(None)
