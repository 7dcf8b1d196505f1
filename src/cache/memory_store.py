# src/cache/memory_store.py — v1
"""In-process cache store (CACHE_BACKEND=memory).

Default for development and tests. Contents are lost on exit.
"""

from __future__ import annotations

from fnmatch import fnmatchcase

from salesintel.cache.base_cache_store import BaseCacheStore
from salesintel.cache.models import CacheEntry


class MemoryCacheStore(BaseCacheStore):
    """Dict-backed cache store."""

    backend_name = "memory"

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}

    async def get_item(self, key: str) -> CacheEntry | None:
        return self._entries.get(key)

    async def put_item(self, entry: CacheEntry) -> None:
        self._entries[entry.key] = entry

    async def delete_item(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    async def scan_items(self, pattern: str = "*") -> list[CacheEntry]:
        return [e for k, e in self._entries.items() if fnmatchcase(k, pattern)]

    def __len__(self) -> int:
        return len(self._entries)
