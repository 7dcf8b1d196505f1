# src/analysis/prompt_builder.py — v1
"""Prompt rendering for the company insights model call.

The collection is rendered section by section; empty sources are left out
and every section is truncated so the prompt stays bounded.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from salesintel.analysis.models import CompanyInsights
from salesintel.sources.models import CollectionResponse

_PROMPT_PATH = Path(__file__).parent / "prompts" / "company_insights.txt"

SYSTEM_PROMPT = (
    "You are a B2B sales research analyst. "
    "Extract concrete, verifiable facts about the target company. "
    "Respond only with valid JSON."
)

_MAX_SECTION_ITEMS = 5
_MAX_SECTION_CHARS = 4000

_SECTION_TITLES = {
    "organic": "Company Search Results",
    "knowledge_graph": "Knowledge Graph",
    "news": "Recent News",
    "jobs": "Open Positions",
    "linkedin": "Professional Profiles",
    "youtube": "Videos",
    "contacts": "Contacts",
}

_template: str | None = None


def _load_template() -> str:
    global _template
    if _template is None:
        _template = _PROMPT_PATH.read_text(encoding="utf-8")
    return _template


def render_sections(collection: CollectionResponse) -> str:
    """Render non-empty sources as titled JSON sections."""
    organic = collection.organic or {}
    blocks: dict[str, Any] = {
        "organic": organic.get("results"),
        "knowledge_graph": organic.get("knowledge_graph"),
        "news": collection.news,
        "jobs": collection.jobs,
        "linkedin": collection.linkedin,
        "youtube": collection.youtube,
        "contacts": collection.contacts,
    }
    sections: list[str] = []
    for name, value in blocks.items():
        if not value:
            continue
        if isinstance(value, list):
            value = value[:_MAX_SECTION_ITEMS]
        body = json.dumps(value, ensure_ascii=False, default=str)[:_MAX_SECTION_CHARS]
        sections.append(f"## {_SECTION_TITLES[name]}\n{body}")
    return "\n\n".join(sections) or "(no data collected)"


def build_insights_prompt(company: str, collection: CollectionResponse) -> str:
    return _load_template().format(
        company=company,
        sections=render_sections(collection),
        schema=json.dumps(CompanyInsights.model_json_schema()),
    )
