import asyncio
import json
import logging
import re
from functools import lru_cache

import aiohttp

from shop_by_specs.config import settings
from shop_by_specs.errors import (
    MalformedResponseError,
    NotFoundError,
    RateLimitedError,
    ShopifyError,
    ThrottledError,
    TransientNetworkError,
    UpstreamValidationError,
)
from shop_by_specs.shopify.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

_NEXT_LINK_RE = re.compile(r"<([^>]+)>\s*;\s*rel=(?:\"|')?next(?:\"|')?", re.IGNORECASE)


def parse_next_link(link_header: str | None) -> str | None:
    if not link_header:
        return None
    match = _NEXT_LINK_RE.search(link_header)
    return match.group(1) if match else None


def _parse_retry_after(value: str | None) -> float | None:
    try:
        return float(value) if value else None
    except ValueError:
        return None


def raise_for_status(method: str, endpoint: str, status: int, text: str, retry_after: str | None = None) -> None:
    if status < 400:
        return
    where = f"{method} {endpoint}"
    if status == 429:
        raise RateLimitedError(f"{where} rate limited", retry_after=_parse_retry_after(retry_after))
    if status >= 500:
        raise TransientNetworkError(f"{where} returned {status}: {text[:300]}")
    if status == 404:
        raise NotFoundError(f"{where} not found")
    if status in (400, 422):
        try:
            errors = json.loads(text).get("errors")
        except (ValueError, AttributeError):
            errors = text
        raise UpstreamValidationError(f"{where} rejected ({status}): {errors}", errors=errors)
    raise ShopifyError(f"{where} returned {status}: {text[:300]}")


def _graphql_throttled(errors) -> bool:
    for err in errors or []:
        if isinstance(err, dict) and (err.get("extensions") or {}).get("code") == "THROTTLED":
            return True
    return False


class ShopifyClient:
    def __init__(self, store_url=None, access_token=None, api_version=None, rate_limiter=None, timeout=None):
        # Use provided params or fall back to settings
        self.store_url = store_url or settings.SHOPIFY_STORE_URL
        self.access_token = access_token or settings.SHOPIFY_ACCESS_TOKEN
        self.api_version = api_version or settings.SHOPIFY_API_VERSION
        self.timeout = timeout or settings.REQUEST_TIMEOUT

        self.base_url = f"https://{self.store_url}/admin/api/{self.api_version}"
        self.rate_limiter = rate_limiter or RateLimiter(
            min_interval=settings.RATE_LIMIT_MIN_INTERVAL,
            max_attempts=settings.RATE_LIMIT_MAX_ATTEMPTS,
            backoff_base=settings.RATE_LIMIT_BACKOFF_BASE,
            max_backoff=settings.RATE_LIMIT_MAX_BACKOFF,
        )

    def _url(self, endpoint: str) -> str:
        # endpoint examples: "smart_collections.json", "graphql.json", or a full next-page URL
        if endpoint.startswith("http"):
            return endpoint
        if endpoint.startswith("/"):
            endpoint = endpoint[1:]
        return f"{self.base_url}/{endpoint}"

    def _headers(self) -> dict:
        return {
            "X-Shopify-Access-Token": self.access_token,
            "Content-Type": "application/json",
        }

    async def _send(self, method: str, endpoint: str, params: dict | None = None, payload: dict | None = None):
        url = self._url(endpoint)
        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout)) as session:
                async with session.request(method, url, params=params, json=payload, headers=self._headers()) as resp:
                    text = await resp.text()
                    status = resp.status
                    headers = dict(resp.headers)
        except (aiohttp.ClientConnectionError, asyncio.TimeoutError) as e:
            raise TransientNetworkError(f"{method} {endpoint} failed: {e}") from e

        if status >= 400:
            logger.error(f"Shopify {method} Error {status}: {text[:500]}")
        raise_for_status(method, endpoint, status, text, headers.get("Retry-After"))

        if not text.strip():
            return {}, headers
        try:
            return json.loads(text), headers
        except ValueError as e:
            raise MalformedResponseError(f"{method} {endpoint} returned non-JSON body") from e

    async def request(self, method: str, endpoint: str, params: dict | None = None, payload: dict | None = None) -> dict:
        async def call():
            data, _headers = await self._send(method, endpoint, params=params, payload=payload)
            return data

        return await self.rate_limiter.run(call, description=f"{method} {endpoint}")

    async def get(self, endpoint: str, params: dict | None = None) -> dict:
        return await self.request("GET", endpoint, params=params)

    async def post(self, endpoint: str, payload: dict) -> dict:
        return await self.request("POST", endpoint, payload=payload)

    async def delete(self, endpoint: str) -> dict:
        return await self.request("DELETE", endpoint)

    async def get_page(self, endpoint: str, params: dict | None = None) -> tuple[dict, str | None]:
        """GET one REST page; returns (body, next endpoint or None) from the Link header."""

        async def call():
            return await self._send("GET", endpoint, params=params)

        data, headers = await self.rate_limiter.run(call, description=f"GET {endpoint}")
        link_header = headers.get("Link") or headers.get("link")
        return data, parse_next_link(link_header)

    async def graphql(self, query: str, variables: dict | None = None) -> dict:
        async def call():
            body, _headers = await self._send(
                "POST", "graphql.json", payload={"query": query, "variables": variables or {}}
            )
            errors = body.get("errors")
            if _graphql_throttled(errors):
                raise ThrottledError("GraphQL query throttled")
            if errors:
                # Partial data can still be usable
                logger.error(f"GraphQL errors: {errors}")
            if not body.get("data"):
                raise MalformedResponseError(f"GraphQL response without data: {errors}")
            return body["data"]

        return await self.rate_limiter.run(call, description="GraphQL query")


@lru_cache(maxsize=1)
def get_default_client() -> ShopifyClient:
    return ShopifyClient()
