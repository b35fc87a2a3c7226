"""Tests for BULK_OPERATIONS_FINISH subscription management."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from relay.config import Settings
from relay.errors import ConfigurationError
from relay.webhooks.subscriptions import (
    TOPIC,
    InMemorySubscriptionStore,
    RedisSubscriptionStore,
    WebhookSubscriptionManager,
    build_subscription_store,
)

CALLBACK = "https://relay.example.com/webhooks"


def _node(sub_id: str = "gid://shopify/WebhookSubscription/1", topic: str = TOPIC, url: str = CALLBACK) -> dict:
    return {"id": sub_id, "topic": topic, "endpoint": {"callbackUrl": url}}


def _client(
    by_id: dict | None = None,
    listed: list[dict] | None = None,
    created: dict | None = None,
    updated: dict | None = None,
    user_errors: list[dict] | None = None,
) -> AsyncMock:
    async def execute(query: str, variables: dict | None = None) -> dict:
        if "webhookSubscriptionCreate" in query:
            return {"webhookSubscriptionCreate": {"webhookSubscription": created, "userErrors": user_errors or []}}
        if "webhookSubscriptionUpdate" in query:
            return {"webhookSubscriptionUpdate": {"webhookSubscription": updated, "userErrors": user_errors or []}}
        if "webhookSubscriptions(" in query:
            return {"webhookSubscriptions": {"edges": [{"node": n} for n in listed or []]}}
        if "webhookSubscription(" in query:
            return {"webhookSubscription": by_id}
        raise AssertionError(f"unexpected query: {query[:60]}")

    client = AsyncMock()
    client.execute.side_effect = execute
    return client


def _mutations(client: AsyncMock, name: str) -> list:
    return [c for c in client.execute.await_args_list if name in c.args[0]]


class TestStores:
    def test_in_memory(self):
        store = InMemorySubscriptionStore()
        assert store.get() is None
        store.set("gid://shopify/WebhookSubscription/9")
        assert store.get() == "gid://shopify/WebhookSubscription/9"

    @patch("relay.webhooks.subscriptions.redis")
    def test_redis(self, mock_redis):
        mock_r = MagicMock()
        mock_r.get.return_value = "gid://shopify/WebhookSubscription/5"
        mock_redis.from_url.return_value = mock_r

        store = RedisSubscriptionStore("redis://localhost:6379/0")
        assert store.get() == "gid://shopify/WebhookSubscription/5"
        store.set("gid://shopify/WebhookSubscription/6")
        mock_r.set.assert_called_once_with(RedisSubscriptionStore.KEY, "gid://shopify/WebhookSubscription/6")

    def test_build_store(self):
        assert isinstance(build_subscription_store(Settings(_env_file=None)), InMemorySubscriptionStore)
        with pytest.raises(ConfigurationError):
            build_subscription_store(Settings(_env_file=None, subscription_store="sqlite"))


class TestLookup:
    @pytest.mark.asyncio
    async def test_get_by_id_checks_topic(self):
        manager = WebhookSubscriptionManager(_client(by_id=_node(topic="ORDERS_CREATE")), InMemorySubscriptionStore(), CALLBACK)
        assert await manager.get_by_id("gid://shopify/WebhookSubscription/1") is None

    @pytest.mark.asyncio
    async def test_get_by_id_swallows_errors(self):
        client = AsyncMock()
        client.execute.side_effect = RuntimeError("down")
        manager = WebhookSubscriptionManager(client, InMemorySubscriptionStore(), CALLBACK)
        assert await manager.get_by_id("x") is None

    @pytest.mark.asyncio
    async def test_find_existing_picks_topic(self):
        listed = [_node("a", topic="ORDERS_CREATE"), _node("b"), _node("c")]
        manager = WebhookSubscriptionManager(_client(listed=listed), InMemorySubscriptionStore(), CALLBACK)
        found = await manager.find_existing()
        assert found.id == "b"
        assert found.callback_url == CALLBACK


class TestEnsure:
    @pytest.mark.asyncio
    async def test_tracked_and_current_is_left_alone(self):
        store = InMemorySubscriptionStore("sub-1")
        client = _client(by_id=_node("sub-1"))
        result = await WebhookSubscriptionManager(client, store, CALLBACK).ensure()

        assert result.id == "sub-1"
        assert _mutations(client, "webhookSubscriptionCreate") == []
        assert _mutations(client, "webhookSubscriptionUpdate") == []

    @pytest.mark.asyncio
    async def test_stale_tracked_id_falls_back_to_search(self):
        store = InMemorySubscriptionStore("deleted")
        client = _client(by_id=None, listed=[_node("sub-2")])
        result = await WebhookSubscriptionManager(client, store, CALLBACK).ensure()

        assert result.id == "sub-2"
        assert store.get() == "sub-2"

    @pytest.mark.asyncio
    async def test_url_change_updates(self):
        store = InMemorySubscriptionStore()
        client = _client(listed=[_node("sub-3", url="https://old.example.com/webhooks")], updated=_node("sub-3"))
        result = await WebhookSubscriptionManager(client, store, CALLBACK).ensure()

        assert result.callback_url == CALLBACK
        updates = _mutations(client, "webhookSubscriptionUpdate")
        assert len(updates) == 1
        assert updates[0].args[1] == {
            "id": "sub-3",
            "webhookSubscription": {"callbackUrl": CALLBACK, "format": "JSON"},
        }

    @pytest.mark.asyncio
    async def test_creates_when_none_exist(self):
        store = InMemorySubscriptionStore()
        client = _client(listed=[], created=_node("sub-new"))
        result = await WebhookSubscriptionManager(client, store, CALLBACK).ensure()

        assert result.id == "sub-new"
        assert store.get() == "sub-new"
        creates = _mutations(client, "webhookSubscriptionCreate")
        assert creates[0].args[1]["topic"] == TOPIC

    @pytest.mark.asyncio
    async def test_user_errors_return_none(self):
        store = InMemorySubscriptionStore()
        client = _client(listed=[], user_errors=[{"field": ["callbackUrl"], "message": "Address is invalid"}])
        result = await WebhookSubscriptionManager(client, store, CALLBACK).ensure()

        assert result is None
        assert store.get() is None

    @pytest.mark.asyncio
    async def test_current_without_tracked_id(self):
        client = _client(listed=[_node("sub-4")])
        current = await WebhookSubscriptionManager(client, InMemorySubscriptionStore(), CALLBACK).current()
        assert current.id == "sub-4"
