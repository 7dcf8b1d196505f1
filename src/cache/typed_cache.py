# src/cache/typed_cache.py — v1
"""Category-driven cache over any BaseCacheStore backend.

Every write carries a CacheCategory, which alone decides the expiry
(created_at + retention_hours). Reads never extend an entry's lifetime;
an expired entry is a miss and is removed best-effort.

Backend failures never propagate: reads degrade to a miss, writes to a
no-op, introspection to an empty result. Callers always have the slower
fallback of recomputing from source.

Two payload conventions coexist:
  - "record" (set/get): payload stored as JSON; on read, a top-level
    "generated_at" ISO string is restored to a datetime.
  - "raw_json" (set_raw_json/get_raw_json): the JSON value is returned
    exactly as written.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections import Counter
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable

from pydantic import BaseModel

from salesintel.cache.base_cache_store import BaseCacheStore
from salesintel.cache.categories import (
    CacheCategory,
    Environment,
    category_group,
    entry_kind,
    infer_category_from_key,
    retention_hours,
)
from salesintel.cache.models import CacheEntry, CacheInspection, CacheStats, PayloadFormat

logger = logging.getLogger(__name__)

_PREVIEW_CHARS = 200
_HEALTH_KEY = "__salesintel_health__"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TypedCacheStore:
    """Typed, TTL-aware cache facade. Injected into every component that caches.

    Args:
        backend: Storage medium.
        environment: Retention profile ("development" or "production").
        clock: Returns the current aware datetime (injectable for tests).
    """

    def __init__(
        self,
        backend: BaseCacheStore,
        environment: Environment = "production",
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._backend = backend
        self._environment = environment
        self._clock = clock

    @property
    def backend(self) -> BaseCacheStore:
        return self._backend

    @property
    def environment(self) -> Environment:
        return self._environment

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get(self, key: str) -> Any | None:
        """Deserialized payload, or None when absent, expired or unreadable."""
        entry = await self._load(key)
        if entry is None:
            return None
        try:
            value = json.loads(entry.payload)
        except ValueError as e:
            logger.warning("Malformed cache payload for %s: %s", key, e)
            return None
        if entry.format == "record":
            value = _restore_generated_at(value)
        return value

    async def get_raw_json(self, key: str) -> Any | None:
        """Payload exactly as written, with no record-format conversion."""
        entry = await self._load(key)
        if entry is None:
            return None
        try:
            return json.loads(entry.payload)
        except ValueError as e:
            logger.warning("Malformed cache payload for %s: %s", key, e)
            return None

    async def has(self, key: str) -> bool:
        """True when a live entry exists. Expired entries are left in place."""
        entry = await self._load(key, drop_expired=False)
        return entry is not None and not entry.is_expired(self._clock())

    async def get_multiple(self, keys: list[str]) -> dict[str, Any]:
        """Concurrent get; only hits are returned."""
        values = await asyncio.gather(*(self.get(k) for k in keys))
        return {k: v for k, v in zip(keys, values) if v is not None}

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def set(self, key: str, payload: Any, category: CacheCategory | str) -> bool:
        """Store a payload under its category. Returns False if the write failed."""
        return await self._store(key, payload, CacheCategory(category), "record")

    async def set_raw_json(
        self, key: str, payload: Any, category: CacheCategory | str
    ) -> bool:
        return await self._store(key, payload, CacheCategory(category), "raw_json")

    async def delete(self, key: str) -> bool:
        try:
            return await self._backend.delete_item(key)
        except Exception as e:
            logger.warning("Cache delete failed for %s: %s", key, e)
            return False

    async def clear(self) -> int:
        """Delete every entry. O(n); maintenance and tests only."""
        try:
            entries = await self._backend.scan_items("*")
        except Exception as e:
            logger.warning("Cache clear failed: %s", e)
            return 0
        deleted = 0
        for entry in entries:
            if await self.delete(entry.key):
                deleted += 1
        logger.info("Cleared %d cache entries", deleted)
        return deleted

    async def migrate_legacy(self, key: str) -> CacheCategory | None:
        """Re-tag an UNKNOWN entry with the category inferred from its key.

        Expiry is recomputed from the original created_at. Returns the new
        category, or None when nothing was migrated.
        """
        entry = await self._load(key, drop_expired=False)
        if entry is None or entry.category != CacheCategory.UNKNOWN:
            return None
        inferred = infer_category_from_key(key)
        if inferred == CacheCategory.UNKNOWN:
            return None
        migrated = entry.model_copy(
            update={
                "category": inferred,
                "expires_at": entry.created_at
                + timedelta(hours=retention_hours(inferred, self._environment)),
            }
        )
        try:
            await self._backend.put_item(migrated)
        except Exception as e:
            logger.warning("Cache migration failed for %s: %s", key, e)
            return None
        logger.info("Migrated legacy cache entry %s -> %s", key, inferred.value)
        return inferred

    # ------------------------------------------------------------------
    # Introspection (read-only)
    # ------------------------------------------------------------------

    async def stats(self) -> CacheStats:
        try:
            entries = await self._backend.scan_items("*")
        except Exception as e:
            logger.warning("Cache stats failed: %s", e)
            return CacheStats(backend=self._backend.backend_name, healthy=False)
        now = self._clock()
        by_category = Counter(e.category.value for e in entries)
        by_group = Counter(category_group(e.category) for e in entries)
        return CacheStats(
            backend=self._backend.backend_name,
            total_entries=len(entries),
            expired_entries=sum(1 for e in entries if e.is_expired(now)),
            total_bytes=sum(e.size_bytes for e in entries),
            by_category=dict(sorted(by_category.items())),
            by_group=dict(sorted(by_group.items())),
        )

    async def list_keys(
        self, pattern: str = "*", category: CacheCategory | str | None = None
    ) -> list[str]:
        """Sorted keys matching a glob pattern, optionally of one category."""
        wanted = CacheCategory(category) if category is not None else None
        try:
            entries = await self._backend.scan_items(pattern)
        except Exception as e:
            logger.warning("Cache listing failed for %r: %s", pattern, e)
            return []
        return sorted(
            e.key for e in entries if wanted is None or e.category == wanted
        )

    async def inspect(self, key: str) -> CacheInspection | None:
        entry = await self._load(key, drop_expired=False)
        if entry is None:
            return None
        now = self._clock()
        return CacheInspection(
            key=entry.key,
            category=entry.category,
            display_name=entry.category.display_name,
            group=category_group(entry.category),
            kind=entry_kind(entry.category),
            format=entry.format,
            created_at=entry.created_at,
            expires_at=entry.expires_at,
            ttl_remaining_s=entry.ttl_remaining_s(now),
            expired=entry.is_expired(now),
            size_bytes=entry.size_bytes,
            preview=entry.payload[:_PREVIEW_CHARS],
        )

    async def health_check(self) -> bool:
        try:
            await self._backend.get_item(_HEALTH_KEY)
        except Exception as e:
            logger.error("Cache health check failed: %s", e)
            return False
        return True

    async def close(self) -> None:
        await self._backend.close()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _load(self, key: str, drop_expired: bool = True) -> CacheEntry | None:
        try:
            entry = await self._backend.get_item(key)
        except Exception as e:
            logger.warning("Cache read failed for %s: %s", key, e)
            return None
        if entry is None or not drop_expired:
            return entry
        if entry.is_expired(self._clock()):
            logger.debug("Cache entry expired: %s", key)
            await self.delete(key)
            return None
        return entry

    async def _store(
        self,
        key: str,
        payload: Any,
        category: CacheCategory,
        fmt: PayloadFormat,
    ) -> bool:
        now = self._clock()
        try:
            text = json.dumps(to_jsonable(payload), default=str)
        except (TypeError, ValueError) as e:
            logger.warning("Cache payload for %s not serializable: %s", key, e)
            return False
        entry = CacheEntry(
            key=key,
            category=category,
            payload=text,
            format=fmt,
            created_at=now,
            expires_at=now + timedelta(hours=retention_hours(category, self._environment)),
        )
        try:
            await self._backend.put_item(entry)
        except Exception as e:
            logger.warning("Cache write failed for %s: %s", key, e)
            return False
        logger.debug("Cached %s (%s, %d bytes)", key, category.value, entry.size_bytes)
        return True


def to_jsonable(value: Any) -> Any:
    """Convert a payload to plain JSON types.

    Timestamps become ISO-8601 strings, models are dumped, and None values
    are dropped from mappings and sequences instead of being written.
    """
    if isinstance(value, BaseModel):
        return to_jsonable(value.model_dump(mode="json", exclude_none=True))
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {
            str(k): to_jsonable(v) for k, v in value.items() if v is not None
        }
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value if v is not None]
    if isinstance(value, (set, frozenset)):
        return sorted(to_jsonable(v) for v in value if v is not None)
    return value


def _restore_generated_at(value: Any) -> Any:
    if isinstance(value, dict) and isinstance(value.get("generated_at"), str):
        try:
            value["generated_at"] = datetime.fromisoformat(value["generated_at"])
        except ValueError:
            pass  # not ISO-8601, leave as written
    return value
