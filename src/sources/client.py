# src/sources/client.py — v1
"""Rate-limited, retrying HTTP client shared by all source adapters.

One RateLimitedClient per upstream adapter. It owns the credential, the
per-instance rate limiter and the cache-first fetch helper; retry, backoff
and timeout come from the shared CallPolicy.

Error mapping:
  - httpx timeout / transport failure, HTTP 429, HTTP 5xx -> TransientNetworkError
  - other non-2xx, non-JSON body, JSON body with an "error" field
    -> UpstreamApplicationError
  - missing credential -> ConfigurationError (raised before any I/O)
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Literal

import httpx

from salesintel.cache.categories import CacheCategory
from salesintel.cache.typed_cache import TypedCacheStore, to_jsonable
from salesintel.core.errors import (
    ConfigurationError,
    TransientNetworkError,
    UpstreamApplicationError,
)
from salesintel.core.retry import CallPolicy
from salesintel.sources.models import FetchOptions, FetchOutcome

logger = logging.getLogger(__name__)

USER_AGENT = "SalesIntelligence/1.0"
_REDACTED = "[REDACTED]"

AuthMode = Literal["query", "bearer"]


class RateLimitedClient:
    """Authenticated JSON client for one upstream API.

    Args:
        name: Upstream identifier used in logs and errors.
        base_url: Endpoint root; request paths are appended to it.
        credential: API key (query mode) or bearer token (bearer mode).
        store: Cache consulted by get_cached_or_fetch.
        policy: Shared retry / rate limit / timeout policy.
        auth_mode: Where the credential goes.
        credential_param: Query parameter name in query mode.
        http_client: Shared httpx.AsyncClient. A private one is created
            (and closed by aclose) when omitted.
        default_params: Query parameters added to every request.
    """

    def __init__(
        self,
        name: str,
        base_url: str,
        credential: str | None,
        store: TypedCacheStore,
        policy: CallPolicy,
        auth_mode: AuthMode = "query",
        credential_param: str = "api_key",
        http_client: httpx.AsyncClient | None = None,
        default_params: dict[str, Any] | None = None,
    ) -> None:
        self.name = name
        self._base_url = base_url.rstrip("/")
        self._credential = credential or ""
        self._store = store
        self._policy = policy
        self._auth_mode = auth_mode
        self._credential_param = credential_param
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient()
        self._default_params = dict(default_params or {})
        self._limiter = policy.new_rate_limiter()

    @property
    def store(self) -> TypedCacheStore:
        return self._store

    @property
    def policy(self) -> CallPolicy:
        return self._policy

    def validate_config(self) -> None:
        """Fail fast when the credential is missing."""
        if not self._credential:
            raise ConfigurationError(f"{self.name} credential is required")

    async def request(
        self,
        params: dict[str, Any] | None = None,
        *,
        path: str = "",
        method: str = "GET",
        json_body: dict[str, Any] | None = None,
        authenticated: bool = True,
    ) -> dict[str, Any]:
        """Issue one logical call, retried under the call policy.

        Raises:
            ConfigurationError: Missing credential (no request is sent).
            UpstreamApplicationError: Logical error reported by the API.
            RetryExhaustedError: Every attempt failed transiently.
        """
        if authenticated:
            self.validate_config()
        return await self._policy.retry.run(
            self._send_once,
            dict(params or {}),
            path,
            method,
            json_body,
            authenticated,
            operation=f"{self.name} {method} {path or '/'}",
        )

    async def get_cached_or_fetch(
        self,
        key: str,
        category: CacheCategory,
        fetch_fn: Callable[[], Awaitable[Any]],
        options: FetchOptions | None = None,
    ) -> FetchOutcome:
        """Return the cached value for key, or fetch it and write it back.

        With options.force_refresh the cache read is skipped; the fetched
        value is written back in every case.
        """
        options = options or FetchOptions()
        if not options.force_refresh:
            cached = await self._store.get_raw_json(key)
            if cached is not None:
                logger.debug("Cache hit: %s (%s)", key, category.value)
                return FetchOutcome(cached, True)

        logger.debug("Cache miss, fetching: %s (%s)", key, category.value)
        value = to_jsonable(await fetch_fn())
        await self._store.set_raw_json(key, value, category)
        return FetchOutcome(value, False)

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    # --- Internal helpers ---

    async def _send_once(
        self,
        params: dict[str, Any],
        path: str,
        method: str,
        json_body: dict[str, Any] | None,
        authenticated: bool,
    ) -> dict[str, Any]:
        await self._limiter.acquire()

        headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
        query = {**self._default_params, **params}
        if authenticated:
            await self._apply_credentials(headers, query)

        url = f"{self._base_url}{path}"
        logger.debug("%s %s %s", method, url, self._redact(query))
        try:
            response = await self._http.request(
                method,
                url,
                params=query or None,
                json=json_body,
                headers=headers,
                timeout=self._policy.timeout_s,
            )
        except httpx.TimeoutException as e:
            raise TransientNetworkError(
                f"{self.name} request timed out after {self._policy.timeout_s}s",
                source=self.name,
            ) from e
        except httpx.TransportError as e:
            raise TransientNetworkError(
                f"{self.name} transport error: {e}", source=self.name,
            ) from e

        self._raise_for_status(response)
        return self._parse_body(response)

    async def _apply_credentials(
        self, headers: dict[str, str], params: dict[str, Any]
    ) -> None:
        """Inject the credential. Subclasses with token exchange override this."""
        if self._auth_mode == "bearer":
            headers["Authorization"] = f"Bearer {self._credential}"
        else:
            params[self._credential_param] = self._credential

    def _raise_for_status(self, response: httpx.Response) -> None:
        status = response.status_code
        if status == 429 or status >= 500:
            raise TransientNetworkError(
                f"{self.name} HTTP {status}", source=self.name, status_code=status,
            )
        if not response.is_success:
            raise UpstreamApplicationError(
                f"{self.name} HTTP {status}: {response.text[:200]}",
                source=self.name,
                status_code=status,
            )

    def _parse_body(self, response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamApplicationError(
                f"{self.name} returned a non-JSON body",
                source=self.name,
                status_code=response.status_code,
            ) from e
        if not isinstance(data, dict):
            raise UpstreamApplicationError(
                f"{self.name} returned {type(data).__name__}, expected an object",
                source=self.name,
                status_code=response.status_code,
            )
        if data.get("error"):
            raise UpstreamApplicationError(
                f"{self.name} error: {data['error']}",
                source=self.name,
                status_code=response.status_code,
            )
        return data

    def _redact(self, params: dict[str, Any]) -> dict[str, Any]:
        if self._credential_param in params:
            return {**params, self._credential_param: _REDACTED}
        return params
