# src/logging/logger.py — v2
"""Formatters and setup for the salesintel logger tree.

Both formatters stamp each record with the enrichment context from
logging.context (request id, company, stage, source), so concurrent
requests can be told apart in one stream.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from salesintel.logging.context import LogContext, get_context

ROOT_LOGGER = "salesintel"

# third-party loggers that log every request at INFO
_CHATTY_LIBRARIES = ("httpx", "httpcore", "anthropic", "openai")


class _ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        trace = None
        if record.exc_info and record.exc_info[1] is not None:
            trace = self.formatException(record.exc_info)
        return self.render(record, get_context(), datetime.now(timezone.utc), trace)

    def render(
        self, record: logging.LogRecord, ctx: LogContext, now: datetime, trace: str | None
    ) -> str:
        raise NotImplementedError


class JsonFormatter(_ContextFormatter):
    """One JSON object per line; context and extra={"data": ...} as nested keys."""

    def render(
        self, record: logging.LogRecord, ctx: LogContext, now: datetime, trace: str | None
    ) -> str:
        entry: dict[str, Any] = {
            "timestamp": now.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = ctx.as_dict()
        if context:
            entry["context"] = context
        data = getattr(record, "data", None)
        if data:
            entry["data"] = data
        if trace:
            entry["exception"] = trace
        return json.dumps(entry, default=str)


class TextFormatter(_ContextFormatter):
    """`2026-01-01 12:00:00 [INFO    ] salesintel.x <req> [stage] (source) | message`"""

    def render(
        self, record: logging.LogRecord, ctx: LogContext, now: datetime, trace: str | None
    ) -> str:
        prefix = [now.strftime("%Y-%m-%d %H:%M:%S"), f"[{record.levelname:8s}]", record.name]
        if ctx.request_id:
            prefix.append(f"<{ctx.request_id[:8]}>")
        if ctx.stage:
            prefix.append(f"[{ctx.stage}]")
        if ctx.source:
            prefix.append(f"({ctx.source})")
        line = f"{' '.join(prefix)} | {record.getMessage()}"
        return f"{line}\n{trace}" if trace else line


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    log_file: str | None = None,
    rotation: str = "10MB",
    retention: int = 30,
) -> None:
    """(Re)configure the salesintel logger from LOG_* settings.

    Safe to call repeatedly: previous handlers are closed and replaced.
    Console output goes to stderr so CLI JSON on stdout stays parseable.

    Args:
        level: DEBUG, INFO, WARNING or ERROR.
        log_format: "json" or "text".
        log_file: Optional rotating log file, in addition to stderr.
        rotation: Size that triggers rotation, e.g. "10MB".
        retention: Rotated files kept.
    """
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for old in list(root.handlers):
        root.removeHandler(old)
        old.close()

    formatter = JsonFormatter() if log_format == "json" else TextFormatter()
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        from salesintel.logging.handlers import create_rotating_handler

        handlers.append(create_rotating_handler(log_file, rotation=rotation, retention=retention))
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    for name in _CHATTY_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)
