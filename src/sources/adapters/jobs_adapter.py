# src/sources/adapters/jobs_adapter.py — v1
"""Open positions from Google Jobs."""

from __future__ import annotations

from typing import Any

from salesintel.cache.categories import CacheCategory
from salesintel.sources.base_adapter import SerpApiAdapter, normalize_items
from salesintel.sources.models import JobPosting


class JobsSearchAdapter(SerpApiAdapter):
    name = "google_jobs"
    field = "jobs"
    key = "jobs"
    category = CacheCategory.SERP_API_JOBS_RESULTS
    engine = "google_jobs"

    def query(self, target: str) -> str:
        return f"jobs at {target}"

    def normalize(self, raw: dict[str, Any]) -> list[dict[str, Any]]:
        return normalize_items(JobPosting, (_map_job(j) for j in raw.get("jobs_results") or []))


def _map_job(job: dict[str, Any]) -> dict[str, Any]:
    extensions = job.get("detected_extensions") or {}
    salary = job.get("salary")
    return {
        "title": job.get("title"),
        "company": job.get("company_name"),
        "location": job.get("location") or "",
        "via": job.get("via"),
        "description": job.get("description"),
        "posted_at": extensions.get("posted_at"),
        "schedule_type": extensions.get("schedule_type"),
        "salary": salary if isinstance(salary, dict) else None,
    }
