# src/sources/base_adapter.py — v1
"""Abstract source adapter interface.

An adapter turns a target company into one normalized payload from one
upstream. Concrete adapters supply only parameter building and
normalization; HTTP, auth, retry, rate limiting and caching live in the
RateLimitedClient.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Iterable

from pydantic import BaseModel, ValidationError

from salesintel.cache.categories import CacheCategory
from salesintel.cache.keys import source_cache_key
from salesintel.sources.client import RateLimitedClient
from salesintel.sources.models import FetchOptions, FetchOutcome
from salesintel.tracking.cost_calculator import source_cost

logger = logging.getLogger(__name__)

# Upper bound on normalized items kept per source
MAX_ITEMS = 10


class BaseSourceAdapter(ABC):
    """Base class for all source adapters.

    Class attributes:
        name: Source name reported in CollectionResponse.sources.
        field: CollectionResponse field the payload is merged into.
        key: Short source key (ENABLED_SOURCES, cache key segment).
        category: Cache category of the normalized payload.
    """

    name: str
    field: str
    key: str
    category: CacheCategory

    def __init__(self, client: RateLimitedClient) -> None:
        self._client = client

    @property
    def client(self) -> RateLimitedClient:
        return self._client

    @property
    def cost(self) -> float:
        return source_cost(self.name)

    def empty_value(self) -> Any:
        """Zero value stored in the response field when this source fails."""
        return []

    def cache_key(self, target: str) -> str:
        return source_cache_key(self.key, target)

    async def collect(self, target: str, options: FetchOptions | None = None) -> FetchOutcome:
        """Cache-first fetch of the normalized payload for target."""
        return await self._client.get_cached_or_fetch(
            self.cache_key(target),
            self.category,
            lambda: self.fetch(target),
            options,
        )

    async def is_cached(self, target: str) -> bool:
        """Whether collect() would be served from cache. Never fetches."""
        return await self._client.store.has(self.cache_key(target))

    async def fetch(self, target: str) -> Any:
        """Call the upstream and normalize its response. Never cached here."""
        raw = await self._client.request(self.build_params(target))
        return self.normalize(raw)

    @abstractmethod
    def build_params(self, target: str) -> dict[str, Any]:
        """Upstream query parameters for target."""

    @abstractmethod
    def normalize(self, raw: dict[str, Any]) -> Any:
        """Map the upstream JSON body to this source's payload."""


class SerpApiAdapter(BaseSourceAdapter):
    """Adapter over the SerpAPI search endpoint.

    Args:
        client: Client configured for https://serpapi.com/search.
        location: Search location.
        language: Interface language (hl).
        country: Country code (gl).
        num_results: Results requested per search.
    """

    engine: str = "google"

    def __init__(
        self,
        client: RateLimitedClient,
        location: str = "United States",
        language: str = "en",
        country: str = "us",
        num_results: int = MAX_ITEMS,
    ) -> None:
        super().__init__(client)
        self._location = location
        self._language = language
        self._country = country
        self._num_results = num_results

    def search_params(self, query: str, **extra: Any) -> dict[str, Any]:
        params: dict[str, Any] = {
            "engine": self.engine,
            "q": query,
            "location": self._location,
            "hl": self._language,
            "gl": self._country,
            "num": self._num_results,
            "start": 0,
        }
        params.update(extra)
        return params

    def build_params(self, target: str) -> dict[str, Any]:
        return self.search_params(self.query(target))

    def query(self, target: str) -> str:
        return target


def normalize_items(
    model: type[BaseModel], items: Iterable[dict[str, Any]], limit: int = MAX_ITEMS
) -> list[dict[str, Any]]:
    """Validate mapped upstream items, drop invalid ones, keep the first limit."""
    normalized: list[dict[str, Any]] = []
    for item in items:
        try:
            normalized.append(model.model_validate(item).model_dump(exclude_none=True))
        except ValidationError as e:
            logger.debug("Dropping %s item: %s", model.__name__, e.error_count())
            continue
        if len(normalized) >= limit:
            break
    return normalized
