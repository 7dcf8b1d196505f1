# src/cache/redis_store.py — v2
"""Redis cache backend (CACHE_BACKEND=redis) for multi-instance deployments.

Uses the asyncio client from the redis package so cache traffic never
blocks the event loop. Values are CacheEntry JSON under a namespaced key;
each key also carries a native expiry a little past its own expires_at,
letting Redis reclaim abandoned entries.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from salesintel.cache.base_cache_store import BaseCacheStore
from salesintel.cache.models import CacheEntry

logger = logging.getLogger(__name__)

NAMESPACE = "salesintel:cache:"
# seconds Redis keeps a key after the entry itself has expired
_EXPIRY_GRACE_S = 60


class RedisCacheStore(BaseCacheStore):
    backend_name = "redis"

    def __init__(self, redis_url: str) -> None:
        try:
            from redis import asyncio as aioredis
        except ImportError as e:
            raise ImportError("redis package required: pip install redis") from e

        self._client = aioredis.Redis.from_url(redis_url, decode_responses=True)

    async def get_item(self, key: str) -> CacheEntry | None:
        raw = await self._client.get(NAMESPACE + key)
        return None if raw is None else CacheEntry.model_validate_json(raw)

    async def put_item(self, entry: CacheEntry) -> None:
        await self._client.set(
            NAMESPACE + entry.key,
            entry.model_dump_json(),
            exat=int(entry.expires_at.timestamp()) + _EXPIRY_GRACE_S,
        )

    async def delete_item(self, key: str) -> bool:
        return await self._client.delete(NAMESPACE + key) > 0

    async def scan_items(self, pattern: str = "*") -> list[CacheEntry]:
        names = [name async for name in self._client.scan_iter(match=NAMESPACE + pattern)]
        if not names:
            return []
        entries: list[CacheEntry] = []
        for name, raw in zip(names, await self._client.mget(names)):
            if raw is None:
                continue  # expired between SCAN and MGET
            try:
                entries.append(CacheEntry.model_validate_json(raw))
            except ValidationError as e:
                logger.warning("Skipping malformed cache value %s: %d errors", name, e.error_count())
        return entries

    async def close(self) -> None:
        await self._client.aclose()
