# src/logging/handlers.py — v2
"""Rotating file output for LOG_FILE."""

from __future__ import annotations

import re
from logging.handlers import RotatingFileHandler
from pathlib import Path

_SIZE = re.compile(r"^(?P<count>\d+)\s*(?P<unit>[KMG]?B)?$", re.IGNORECASE)
_SHIFT = {"B": 0, "KB": 10, "MB": 20, "GB": 30}


def parse_size(text: str) -> int:
    """Byte count of "10MB", "512kb", "100 B" or a bare "2048"."""
    match = _SIZE.match(text.strip())
    if match is None:
        raise ValueError(f"Invalid size format: {text!r}. Use e.g. '10MB'.")
    unit = (match["unit"] or "B").upper()
    return int(match["count"]) << _SHIFT[unit]


def create_rotating_handler(
    log_file: str | Path,
    rotation: str = "10MB",
    retention: int = 30,
) -> RotatingFileHandler:
    path = Path(log_file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        path, maxBytes=parse_size(rotation), backupCount=retention, encoding="utf-8",
    )
