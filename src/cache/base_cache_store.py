# src/cache/base_cache_store.py — v2
"""Storage medium behind TypedCacheStore.

A backend only persists CacheEntry objects by key. It never decides
whether an entry is still fresh, never serializes payloads and may raise
freely: TypedCacheStore owns expiry, encoding and error tolerance.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from salesintel.cache.models import CacheEntry


class BaseCacheStore(ABC):
    """Key/value persistence of CacheEntry, one implementation per CACHE_BACKEND."""

    backend_name: str = "base"

    @abstractmethod
    async def get_item(self, key: str) -> CacheEntry | None:
        """Stored entry for key, including expired ones; None when absent."""

    @abstractmethod
    async def put_item(self, entry: CacheEntry) -> None:
        """Insert or overwrite entry.key."""

    @abstractmethod
    async def delete_item(self, key: str) -> bool:
        """Drop key; True when something was removed."""

    @abstractmethod
    async def scan_items(self, pattern: str = "*") -> list[CacheEntry]:
        """Entries whose key matches an fnmatch-style glob."""

    async def close(self) -> None:
        """Release connections or file handles. No-op by default."""
