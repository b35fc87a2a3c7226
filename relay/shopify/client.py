"""Shopify GraphQL Admin API client.

Thin async wrapper around the Admin GraphQL endpoint. Returns the ``data``
member of the response and raises ``GraphQLError`` when the response carries
top-level ``errors``. No retries and no caching: every call hits the API.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

import httpx

from relay.config import Settings
from relay.errors import UpstreamError

logger = logging.getLogger(__name__)


class GraphQLError(UpstreamError):
    """The Admin API answered with top-level GraphQL errors."""

    def __init__(self, errors: list[dict[str, Any]]):
        self.errors = errors
        super().__init__(f"GraphQL errors: {json.dumps(errors)}")


class GraphQLClient(Protocol):
    """Anything that can run an Admin API query or mutation."""

    async def execute(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        ...


class ShopifyAdminClient:
    """Async Admin GraphQL client bound to one shop."""

    def __init__(
        self,
        shop_domain: str,
        access_token: str,
        api_version: str = "2025-07",
        http: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ):
        self.endpoint = f"https://{shop_domain}/admin/api/{api_version}/graphql.json"
        self._access_token = access_token
        self._http = http or httpx.AsyncClient(timeout=timeout)
        self._owns_http = http is None

    @classmethod
    def from_settings(cls, settings: Settings, http: httpx.AsyncClient | None = None) -> ShopifyAdminClient:
        return cls(
            shop_domain=settings.shop_domain,
            access_token=settings.admin_api_token,
            api_version=settings.api_version,
            http=http,
            timeout=settings.request_timeout,
        )

    async def execute(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Execute a GraphQL request and return its ``data`` member."""
        response = await self._http.post(
            self.endpoint,
            json={"query": query, "variables": variables or {}},
            headers={
                "X-Shopify-Access-Token": self._access_token,
                "Content-Type": "application/json",
            },
        )
        response.raise_for_status()
        body = response.json()

        errors = body.get("errors")
        if errors:
            logger.error("GraphQL errors from %s: %s", self.endpoint, errors)
            raise GraphQLError(errors if isinstance(errors, list) else [{"message": str(errors)}])

        return body.get("data") or {}

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> ShopifyAdminClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
