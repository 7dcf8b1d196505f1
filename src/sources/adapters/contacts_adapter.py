# src/sources/adapters/contacts_adapter.py — v1
"""Company contacts from the Snov.io domain search API.

Snov.io uses OAuth client credentials: a bearer token is exchanged once,
cached as raw JSON with its expiry, and reused until it expires or the API
rejects it. A rejected token is dropped from cache and the call is retried
with a fresh one.
"""

from __future__ import annotations

import logging
import re
import time
from typing import Any, Callable

import httpx

from salesintel.cache.categories import CacheCategory
from salesintel.cache.keys import contacts_cache_key, params_digest
from salesintel.cache.typed_cache import TypedCacheStore
from salesintel.core.errors import (
    ConfigurationError,
    TransientNetworkError,
    UpstreamApplicationError,
)
from salesintel.core.retry import CallPolicy
from salesintel.sources.base_adapter import BaseSourceAdapter, normalize_items
from salesintel.sources.client import RateLimitedClient
from salesintel.sources.models import ContactRecord

logger = logging.getLogger(__name__)

SNOV_BASE_URL = "https://api.snov.io/v1"
_TOKEN_PATH = "/oauth/access_token"
_DOMAIN_SEARCH_PATH = "/get-domain-emails-with-info"
_DOMAIN = re.compile(r"^(?:https?://)?(?:www\.)?([a-z0-9-]+(?:\.[a-z0-9-]+)+)/?$")
# token lifetime when the response omits expires_in, and the early-renewal margin
_DEFAULT_TOKEN_TTL_S = 3600
_TOKEN_RENEW_MARGIN_S = 60


class SnovClient(RateLimitedClient):
    """RateLimitedClient with OAuth client-credentials token exchange."""

    def __init__(
        self,
        client_id: str | None,
        client_secret: str | None,
        store: TypedCacheStore,
        policy: CallPolicy,
        base_url: str = SNOV_BASE_URL,
        http_client: httpx.AsyncClient | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(
            name="snov",
            base_url=base_url,
            credential=client_secret,
            store=store,
            policy=policy,
            auth_mode="bearer",
            http_client=http_client,
        )
        self._client_id = client_id or ""
        self._client_secret = client_secret or ""
        self._token_key = f"snov_access_token_{params_digest({'client_id': self._client_id})}"
        self._clock = clock

    def validate_config(self) -> None:
        if not self._client_id or not self._client_secret:
            raise ConfigurationError("snov client id and secret are required")

    async def access_token(self) -> str:
        cached = await self._store.get_raw_json(self._token_key)
        if (
            isinstance(cached, dict)
            and cached.get("access_token")
            and cached.get("expires_at", 0) > self._clock()
        ):
            return cached["access_token"]

        data = await self.request(
            path=_TOKEN_PATH,
            method="POST",
            json_body={
                "grant_type": "client_credentials",
                "client_id": self._client_id,
                "client_secret": self._client_secret,
            },
            authenticated=False,
        )
        token = data.get("access_token")
        if not token:
            raise UpstreamApplicationError("snov token response has no access_token", source=self.name)
        ttl = int(data.get("expires_in") or _DEFAULT_TOKEN_TTL_S)
        await self._store.set_raw_json(
            self._token_key,
            {"access_token": token, "expires_at": self._clock() + ttl - _TOKEN_RENEW_MARGIN_S},
            CacheCategory.ASYNC_REQUEST_TRACKING,
        )
        logger.info("Obtained new Snov.io access token, valid %ds", ttl)
        return token

    async def _apply_credentials(
        self, headers: dict[str, str], params: dict[str, Any]
    ) -> None:
        headers["Authorization"] = f"Bearer {await self.access_token()}"

    async def _send_once(
        self,
        params: dict[str, Any],
        path: str,
        method: str,
        json_body: dict[str, Any] | None,
        authenticated: bool,
    ) -> dict[str, Any]:
        try:
            return await super()._send_once(params, path, method, json_body, authenticated)
        except UpstreamApplicationError as e:
            if not authenticated or e.status_code != 401:
                raise
            await self._store.delete(self._token_key)
            raise TransientNetworkError(
                "snov access token rejected", source=self.name, status_code=401,
            ) from e


class ContactsAdapter(BaseSourceAdapter):
    """Payload: list of ContactRecord dicts for the target's domain."""

    name = "contacts"
    field = "contacts"
    key = "contacts"
    category = CacheCategory.SNOV_CONTACTS_RAW

    def __init__(self, client: RateLimitedClient, limit: int = 100) -> None:
        super().__init__(client)
        self._limit = limit

    def cache_key(self, target: str) -> str:
        return contacts_cache_key(target_domain(target))

    def build_params(self, target: str) -> dict[str, Any]:
        return {"domain": target_domain(target), "type": "all", "limit": self._limit}

    async def fetch(self, target: str) -> list[dict[str, Any]]:
        raw = await self._client.request(
            path=_DOMAIN_SEARCH_PATH, method="POST", json_body=self.build_params(target),
        )
        return self.normalize(raw)

    def normalize(self, raw: dict[str, Any]) -> list[dict[str, Any]]:
        company = raw.get("companyName") or ""
        return normalize_items(
            ContactRecord,
            (
                {
                    "email": e.get("email"),
                    "first_name": e.get("firstName") or "",
                    "last_name": e.get("lastName") or "",
                    "position": e.get("position") or "",
                    "social_url": e.get("socialUrl"),
                    "company": e.get("companyName") or company,
                }
                for e in raw.get("emails") or []
            ),
            limit=self._limit,
        )


def target_domain(target: str) -> str:
    """Bare domain of a target such as "acme.com" or "https://www.acme.com/".

    Raises:
        ValueError: If target is a company name rather than a domain.
    """
    match = _DOMAIN.match(target.strip().lower())
    if match is None:
        raise ValueError(f"contacts lookup needs a domain target, got {target!r}")
    return match.group(1)
