# src/cache/cache_factory.py — v1
"""Factory for cache backend and TypedCacheStore instantiation."""

from __future__ import annotations

import logging

from salesintel.cache.base_cache_store import BaseCacheStore
from salesintel.cache.typed_cache import TypedCacheStore
from salesintel.config.settings import ConfigurationError, Settings

logger = logging.getLogger(__name__)


def create_cache_store(settings: Settings | None = None) -> BaseCacheStore:
    """Instantiate the configured cache backend.

    Args:
        settings: Application settings. Defaults to the in-memory backend.

    Returns:
        Configured BaseCacheStore implementation.
    """
    backend = "memory" if settings is None else settings.cache_backend

    if backend == "memory":
        from salesintel.cache.memory_store import MemoryCacheStore
        return MemoryCacheStore()

    if backend == "json":
        from salesintel.cache.json_store import JsonCacheStore
        return JsonCacheStore(cache_root=settings.cache_root)

    if backend == "sqlite":
        from salesintel.cache.sqlite_store import SqliteCacheStore
        return SqliteCacheStore(db_path=settings.cache_root / "salesintel_cache.db")

    if backend == "redis":
        from salesintel.cache.redis_store import RedisCacheStore
        if not settings.cache_redis_url:
            raise ConfigurationError(
                "CACHE_REDIS_URL must be set when CACHE_BACKEND=redis"
            )
        return RedisCacheStore(redis_url=settings.cache_redis_url)

    raise ValueError(f"Unsupported cache backend: {backend!r}")


def create_typed_cache(
    settings: Settings | None = None,
    backend: BaseCacheStore | None = None,
) -> TypedCacheStore:
    """Build the TypedCacheStore owned by the composition root."""
    backend = backend or create_cache_store(settings)
    environment = "production" if settings is None else settings.environment
    logger.debug(
        "Cache store: backend=%s, environment=%s", backend.backend_name, environment,
    )
    return TypedCacheStore(backend, environment=environment)
