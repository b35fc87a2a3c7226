"""Shared fixtures for the reroute relay test suite."""

from __future__ import annotations

from typing import Any, Callable
from unittest.mock import AsyncMock

import httpx
import pytest

from relay.config import Settings

BULK_OPERATION_ID = "gid://shopify/BulkOperation/123"
RESULT_URL = "https://storage.example.com/bulk/file.jsonl"
ORDERS_QUERY = "query GetOrdersToRelease { orders { edges { node { id } } } }"


def bulk_operation_node(**overrides: Any) -> dict[str, Any]:
    """A resolved BulkOperation node as the Admin API returns it."""
    node = {
        "id": BULK_OPERATION_ID,
        "status": "COMPLETED",
        "query": ORDERS_QUERY,
        "errorCode": None,
        "createdAt": "2025-01-01T00:00:00Z",
        "completedAt": "2025-01-01T00:05:00Z",
        "objectCount": "2",
        "fileSize": "128",
        "type": "QUERY",
        "url": RESULT_URL,
        "partialDataUrl": None,
    }
    node.update(overrides)
    return node


def make_admin_client(
    node: dict[str, Any] | None = None,
    reroute: dict[str, Any] | None = None,
    reroute_exc: Exception | None = None,
) -> AsyncMock:
    """AsyncMock Admin client answering the bulk operation query and reroute mutation."""
    reroute = reroute if reroute is not None else {"movedFulfillmentOrders": [], "userErrors": []}

    async def execute(query: str, variables: dict | None = None) -> dict:
        if "GetBulkOperation" in query:
            return {"node": node}
        if "fulfillmentOrdersReroute" in query:
            if reroute_exc is not None:
                raise reroute_exc
            return {"fulfillmentOrdersReroute": reroute}
        raise AssertionError(f"unexpected query: {query[:60]}")

    client = AsyncMock()
    client.execute.side_effect = execute
    return client


def reroute_calls(client: AsyncMock) -> list:
    return [c for c in client.execute.await_args_list if "fulfillmentOrdersReroute" in c.args[0]]


def mock_http(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def serve_file(body: str, status_code: int = 200) -> Callable[[httpx.Request], httpx.Response]:
    """Transport handler that serves ``body`` at RESULT_URL and 404s elsewhere."""
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if str(request.url) != RESULT_URL:
            return httpx.Response(404)
        return httpx.Response(status_code, text=body)

    handler.requests = requests  # type: ignore[attr-defined]
    return handler


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        _env_file=None,
        shop_domain="test-shop.myshopify.com",
        admin_api_token="shpat_test",
    )
