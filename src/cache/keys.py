# src/cache/keys.py — v1
"""Deterministic cache keys derived from target, operation and parameters."""

from __future__ import annotations

import hashlib
import json
import re
from typing import Any

_NON_ALNUM = re.compile(r"[^a-z0-9]")
_WHITESPACE = re.compile(r"\s+")


def normalize_target(name: str) -> str:
    """Source-key form of a company name: lowercase, each non-alphanumeric char -> '_'.

    >>> normalize_target("Acme Corp.")
    'acme_corp_'
    """
    return _NON_ALNUM.sub("_", name.strip().lower())


def pipeline_target(name: str) -> str:
    """Pipeline-key form of a target: lowercase, whitespace runs -> '_'."""
    return _WHITESPACE.sub("_", name.strip().lower())


def source_cache_key(source: str, target: str) -> str:
    """Key for one normalized source result, e.g. serpapi_news_acme_com."""
    return f"serpapi_{source}_{normalize_target(target)}"


def contacts_cache_key(domain: str) -> str:
    return f"snov_contacts_{normalize_target(domain)}"


def enriched_key(target: str, requester: str) -> str:
    """Persistence key of the enriched record for a target/requester pair."""
    return f"enriched:{pipeline_target(target)}:{requester.strip()}"


def analysis_key(target: str, requester: str) -> str:
    return f"llm_analysis:{pipeline_target(target)}:{requester.strip()}"


def params_digest(params: dict[str, Any], length: int = 16) -> str:
    """Stable short digest of request parameters, independent of key order."""
    canonical = json.dumps(params, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:length]
