# src/sources/adapters/linkedin_adapter.py — v1
"""Professional profiles found through a site-restricted Google search.

Profile fields are parsed from the result title and snippet, which follow
the "Name - Title - Company | LinkedIn" and "Title at Company" shapes.
"""

from __future__ import annotations

import re
from typing import Any

from salesintel.cache.categories import CacheCategory
from salesintel.sources.base_adapter import SerpApiAdapter, normalize_items
from salesintel.sources.models import ProfessionalProfile

_PROFILE_PATH = "linkedin.com/in/"
_TITLE_SUFFIX = re.compile(r"[|\-–]\s*(LinkedIn|Professional Profile).*$", re.IGNORECASE)
_SEPARATOR = re.compile(r"\s*[|\-–]\s*")
_JOB_TITLE = re.compile(r"^([^|•\n]+?)(?:\s+at\s+|\s*[|\-–]\s*)", re.IGNORECASE)
_AT_COMPANY = re.compile(r"\s+at\s+([^|\n•]+)", re.IGNORECASE)
_DASH_COMPANY = re.compile(r"[|\-–]\s*([^|\n•]+)")
_CITY_REGION = re.compile(r"([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*,\s*[A-Z]{2,})")
_GREATER_AREA = re.compile(r"Greater\s+([^•\n|]+?)\s+Area", re.IGNORECASE)


class LinkedInSearchAdapter(SerpApiAdapter):
    name = "linkedin"
    field = "linkedin"
    key = "linkedin"
    category = CacheCategory.SERP_API_LINKEDIN_RESULTS

    def query(self, target: str) -> str:
        return f'site:{_PROFILE_PATH.rstrip("/")} "{target}"'

    def normalize(self, raw: dict[str, Any]) -> list[dict[str, Any]]:
        profiles = (
            _map_profile(r)
            for r in raw.get("organic_results") or []
            if _PROFILE_PATH in (r.get("link") or "")
            and r.get("title")
            and "linkedin" not in r["title"].lower()
        )
        return normalize_items(ProfessionalProfile, profiles)


def _map_profile(result: dict[str, Any]) -> dict[str, Any]:
    snippet = result.get("snippet") or ""
    return {
        "name": person_name(result["title"]),
        "title": job_title(snippet or result["title"]),
        "company": company_name(snippet),
        "location": location(snippet),
        "profile_url": result["link"],
        "snippet": snippet,
    }


def person_name(title: str) -> str:
    clean = _TITLE_SUFFIX.sub("", title).strip()
    parts = _SEPARATOR.split(clean)
    return parts[0] or clean


def job_title(text: str) -> str:
    match = _JOB_TITLE.match(text)
    if match:
        return match.group(1).strip()
    first_line = text.split("\n")[0]
    return first_line[:100] + "..." if len(first_line) > 100 else first_line


def company_name(snippet: str) -> str:
    match = _AT_COMPANY.search(snippet) or _DASH_COMPANY.search(snippet)
    return match.group(1).strip() if match else ""


def location(snippet: str) -> str:
    match = _CITY_REGION.search(snippet)
    if match:
        return match.group(1)
    match = _GREATER_AREA.search(snippet)
    return match.group(0) if match else ""
