# src/sources/adapter_factory.py — v1
"""Factory: instantiate source adapters from their short keys.

Each adapter gets its own RateLimitedClient (private rate limiter state);
all clients share one httpx.AsyncClient and one CallPolicy.
"""

from __future__ import annotations

import importlib
import logging

import httpx

from salesintel.cache.typed_cache import TypedCacheStore
from salesintel.config.settings import Settings
from salesintel.core.retry import CallPolicy
from salesintel.sources.base_adapter import BaseSourceAdapter
from salesintel.sources.client import RateLimitedClient

logger = logging.getLogger(__name__)

# Registry of source key → adapter class path (lazy import).
_ADAPTER_REGISTRY: dict[str, str] = {
    "organic": "salesintel.sources.adapters.organic_adapter.OrganicSearchAdapter",
    "news": "salesintel.sources.adapters.news_adapter.NewsSearchAdapter",
    "jobs": "salesintel.sources.adapters.jobs_adapter.JobsSearchAdapter",
    "linkedin": "salesintel.sources.adapters.linkedin_adapter.LinkedInSearchAdapter",
    "youtube": "salesintel.sources.adapters.youtube_adapter.YouTubeSearchAdapter",
    "contacts": "salesintel.sources.adapters.contacts_adapter.ContactsAdapter",
}


class UnsupportedSourceError(ValueError):
    """Raised when a source key is not registered."""


def available_sources() -> list[str]:
    return sorted(_ADAPTER_REGISTRY)


def create_adapter(
    key: str,
    settings: Settings,
    store: TypedCacheStore,
    policy: CallPolicy | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> BaseSourceAdapter:
    """Instantiate one adapter with a dedicated client.

    Raises:
        UnsupportedSourceError: If key is not registered.
    """
    if key not in _ADAPTER_REGISTRY:
        raise UnsupportedSourceError(
            f"Unsupported source: {key!r}. "
            f"Available: {', '.join(available_sources())}"
        )
    adapter_cls = _import_class(_ADAPTER_REGISTRY[key])
    policy = policy or CallPolicy.from_settings(settings)

    if key == "contacts":
        from salesintel.sources.adapters.contacts_adapter import SnovClient
        client: RateLimitedClient = SnovClient(
            client_id=settings.snov_client_id,
            client_secret=settings.snov_client_secret,
            store=store,
            policy=policy.with_overrides(
                calls_per_minute=settings.snov_rate_limit_per_minute,
                timeout_s=settings.snov_timeout_s,
            ),
            base_url=settings.snov_base_url,
            http_client=http_client,
        )
        logger.debug("Creating source adapter: %s (snov)", key)
        return adapter_cls(client)

    client = RateLimitedClient(
        name=f"serpapi:{key}",
        base_url=settings.serpapi_base_url,
        credential=settings.serpapi_api_key,
        store=store,
        policy=policy,
        http_client=http_client,
        default_params={"output": "json"},
    )
    logger.debug("Creating source adapter: %s (serpapi)", key)
    return adapter_cls(
        client,
        location=settings.serpapi_location,
        language=settings.serpapi_language,
        country=settings.serpapi_country,
        num_results=settings.serpapi_num_results,
    )


def create_default_adapters(
    settings: Settings,
    store: TypedCacheStore,
    http_client: httpx.AsyncClient | None = None,
) -> list[BaseSourceAdapter]:
    """Adapters for every key in ENABLED_SOURCES, in configured order."""
    policy = CallPolicy.from_settings(settings)
    return [
        create_adapter(key, settings, store, policy=policy, http_client=http_client)
        for key in settings.enabled_sources_list
    ]


def register_adapter(key: str, class_path: str) -> None:
    """Register a custom source adapter.

    Args:
        key: Short source key.
        class_path: Fully qualified class path implementing BaseSourceAdapter.
    """
    _ADAPTER_REGISTRY[key] = class_path
    logger.info("Registered source adapter: %s → %s", key, class_path)


def _import_class(class_path: str) -> type:
    """Dynamically import a class from its fully qualified path."""
    module_path, class_name = class_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)
