# src/cache/models.py — v1
"""Cache domain models: CacheEntry, CacheStats, CacheInspection."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

from salesintel.cache.categories import CacheCategory

PayloadFormat = Literal["record", "raw_json"]


class CacheEntry(BaseModel):
    """Single stored value. The payload is JSON text; expiry is never extended."""

    key: str
    category: CacheCategory
    payload: str
    format: PayloadFormat = "record"
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime | None = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now >= self.expires_at

    def ttl_remaining_s(self, now: datetime | None = None) -> float:
        now = now or datetime.now(timezone.utc)
        return max((self.expires_at - now).total_seconds(), 0.0)

    @property
    def size_bytes(self) -> int:
        return len(self.payload.encode("utf-8"))


class CacheStats(BaseModel):
    """Read-only summary of the store contents."""

    backend: str
    healthy: bool = True
    total_entries: int = 0
    expired_entries: int = 0
    total_bytes: int = 0
    by_category: dict[str, int] = Field(default_factory=dict)
    by_group: dict[str, int] = Field(default_factory=dict)


class CacheInspection(BaseModel):
    """Detailed read-only view of one entry."""

    key: str
    category: CacheCategory
    display_name: str
    group: str
    kind: str
    format: PayloadFormat
    created_at: datetime
    expires_at: datetime
    ttl_remaining_s: float
    expired: bool
    size_bytes: int
    preview: str
