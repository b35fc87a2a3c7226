"""Tests for the Shopify Admin GraphQL client."""

from __future__ import annotations

import json

import httpx
import pytest

from conftest import mock_http
from relay.shopify.client import GraphQLError, ShopifyAdminClient


def _admin(handler) -> ShopifyAdminClient:
    return ShopifyAdminClient("test-shop.myshopify.com", "shpat_test", "2025-07", http=mock_http(handler))


class TestShopifyAdminClient:
    @pytest.mark.asyncio
    async def test_posts_query_and_returns_data(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"data": {"node": {"id": "1"}}})

        data = await _admin(handler).execute("query { node(id: $id) { id } }", {"id": "1"})

        assert data == {"node": {"id": "1"}}
        request = seen[0]
        assert str(request.url) == "https://test-shop.myshopify.com/admin/api/2025-07/graphql.json"
        assert request.headers["X-Shopify-Access-Token"] == "shpat_test"
        assert json.loads(request.content)["variables"] == {"id": "1"}

    @pytest.mark.asyncio
    async def test_graphql_errors_raise(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"errors": [{"message": "Throttled"}]})

        with pytest.raises(GraphQLError) as exc_info:
            await _admin(handler).execute("query { shop { id } }")
        assert exc_info.value.errors == [{"message": "Throttled"}]
        assert "Throttled" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_http_error_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"errors": "Invalid API key"})

        with pytest.raises(httpx.HTTPStatusError):
            await _admin(handler).execute("query { shop { id } }")

    def test_from_settings(self, settings):
        client = ShopifyAdminClient.from_settings(settings)
        assert client.endpoint == "https://test-shop.myshopify.com/admin/api/2025-07/graphql.json"
