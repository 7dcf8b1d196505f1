# src/analysis/json_extractor.py — v1
"""Robust extraction of a JSON object from model output.

Tried in order: the whole text, the first fenced ```json block, the
outermost {...} span.
"""

from __future__ import annotations

import json
import re
from typing import Any

from salesintel.core.errors import AnalysisError

_FENCED = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)


def extract_json(text: str) -> dict[str, Any]:
    """Return the first JSON object found in text.

    Raises:
        AnalysisError: If no candidate parses to a JSON object.
    """
    stripped = text.strip()
    candidates = [stripped]
    fenced = _FENCED.search(stripped)
    if fenced:
        candidates.append(fenced.group(1).strip())
    start, end = stripped.find("{"), stripped.rfind("}")
    if start != -1 and end > start:
        candidates.append(stripped[start:end + 1])

    for candidate in candidates:
        try:
            value = json.loads(candidate)
        except ValueError:
            continue
        if isinstance(value, dict):
            return value
    raise AnalysisError(f"No JSON object in model output ({len(text)} chars)")
