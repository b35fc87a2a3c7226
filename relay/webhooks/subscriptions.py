"""BULK_OPERATIONS_FINISH webhook subscription management.

Keeps exactly one subscription pointed at this relay. The id of the
subscription we manage is kept in a SubscriptionStore so it survives between
calls; when the tracked id is missing or stale, existing subscriptions are
searched before a new one is created.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

import redis
from pydantic import BaseModel

from relay.config import Settings
from relay.errors import ConfigurationError, UpstreamError
from relay.shopify.client import GraphQLClient
from relay.shopify.queries import (
    CREATE_WEBHOOK_SUBSCRIPTION_MUTATION,
    GET_WEBHOOK_SUBSCRIPTION_QUERY,
    LIST_WEBHOOK_SUBSCRIPTIONS_QUERY,
    UPDATE_WEBHOOK_SUBSCRIPTION_MUTATION,
)

logger = logging.getLogger(__name__)

TOPIC = "BULK_OPERATIONS_FINISH"

_LIST_PAGE_SIZE = 100


class WebhookSubscription(BaseModel):
    id: str
    topic: str
    callback_url: str | None = None

    @classmethod
    def from_node(cls, node: dict[str, Any]) -> WebhookSubscription:
        endpoint = node.get("endpoint") or {}
        return cls(id=node["id"], topic=node.get("topic", ""), callback_url=endpoint.get("callbackUrl"))


# ── Tracked id storage ────────────────────────────────────────────────────


class SubscriptionStore(Protocol):
    def get(self) -> str | None:
        ...

    def set(self, subscription_id: str) -> None:
        ...


class InMemorySubscriptionStore:
    """Process-local store; the id is lost on restart."""

    def __init__(self, subscription_id: str | None = None):
        self._subscription_id = subscription_id

    def get(self) -> str | None:
        return self._subscription_id

    def set(self, subscription_id: str) -> None:
        self._subscription_id = subscription_id


class RedisSubscriptionStore:
    """Redis-backed store shared by every relay instance."""

    KEY = "relay:webhook:subscription_id"

    def __init__(self, redis_url: str):
        self._redis = redis.from_url(redis_url, decode_responses=True)

    def get(self) -> str | None:
        return self._redis.get(self.KEY)

    def set(self, subscription_id: str) -> None:
        self._redis.set(self.KEY, subscription_id)


def build_subscription_store(settings: Settings) -> SubscriptionStore:
    if settings.subscription_store == "memory":
        return InMemorySubscriptionStore()
    if settings.subscription_store == "redis":
        return RedisSubscriptionStore(settings.redis_url)
    raise ConfigurationError(f"Unknown subscription store: {settings.subscription_store!r}")


# ── Manager ───────────────────────────────────────────────────────────────


def _raise_on_user_errors(payload: dict[str, Any], action: str) -> None:
    user_errors = payload.get("userErrors") or []
    if user_errors:
        raise UpstreamError(f"Failed to {action} webhook: {user_errors[0].get('message', 'unknown error')}")


class WebhookSubscriptionManager:
    def __init__(self, client: GraphQLClient, store: SubscriptionStore, callback_url: str):
        self.client = client
        self.store = store
        self.callback_url = callback_url

    async def get_by_id(self, subscription_id: str) -> WebhookSubscription | None:
        """Look up a subscription; None unless it exists and is for our topic."""
        try:
            data = await self.client.execute(GET_WEBHOOK_SUBSCRIPTION_QUERY, {"id": subscription_id})
        except Exception:
            logger.warning("Error getting webhook subscription %s", subscription_id, exc_info=True)
            return None

        node = data.get("webhookSubscription")
        if node and node.get("topic") == TOPIC:
            return WebhookSubscription.from_node(node)
        return None

    async def find_existing(self) -> WebhookSubscription | None:
        try:
            data = await self.client.execute(LIST_WEBHOOK_SUBSCRIPTIONS_QUERY, {"first": _LIST_PAGE_SIZE})
        except Exception:
            logger.warning("Error listing webhook subscriptions", exc_info=True)
            return None

        edges = (data.get("webhookSubscriptions") or {}).get("edges") or []
        for edge in edges:
            node = edge.get("node") or {}
            if node.get("topic") == TOPIC:
                return WebhookSubscription.from_node(node)
        return None

    async def create(self) -> WebhookSubscription:
        data = await self.client.execute(
            CREATE_WEBHOOK_SUBSCRIPTION_MUTATION,
            {
                "topic": TOPIC,
                "webhookSubscription": {"callbackUrl": self.callback_url, "format": "JSON"},
            },
        )
        payload = data.get("webhookSubscriptionCreate") or {}
        _raise_on_user_errors(payload, "create")
        return WebhookSubscription.from_node(payload["webhookSubscription"])

    async def update(self, subscription_id: str) -> WebhookSubscription:
        data = await self.client.execute(
            UPDATE_WEBHOOK_SUBSCRIPTION_MUTATION,
            {
                "id": subscription_id,
                "webhookSubscription": {"callbackUrl": self.callback_url, "format": "JSON"},
            },
        )
        payload = data.get("webhookSubscriptionUpdate") or {}
        _raise_on_user_errors(payload, "update")
        return WebhookSubscription.from_node(payload["webhookSubscription"])

    async def current(self) -> WebhookSubscription | None:
        """The tracked subscription, or any existing one for our topic."""
        tracked_id = self.store.get()
        if tracked_id:
            subscription = await self.get_by_id(tracked_id)
            if subscription:
                return subscription
        return await self.find_existing()

    async def ensure(self) -> WebhookSubscription | None:
        """Make sure a subscription exists and targets ``callback_url``.

        Returns None on failure instead of raising, so callers at startup are
        never blocked by the Admin API.
        """
        logger.info("Ensuring webhook subscription for %s", self.callback_url)
        try:
            subscription = await self.current()
            if subscription is None:
                logger.info("Creating new %s webhook subscription", TOPIC)
                subscription = await self.create()
            elif subscription.callback_url != self.callback_url:
                logger.info(
                    "Updating webhook %s URL from %s to %s",
                    subscription.id,
                    subscription.callback_url,
                    self.callback_url,
                )
                subscription = await self.update(subscription.id)
        except Exception:
            logger.exception("Failed to ensure webhook subscription")
            return None

        self.store.set(subscription.id)
        logger.info(
            "Webhook subscription ensured: id=%s topic=%s url=%s",
            subscription.id,
            subscription.topic,
            subscription.callback_url,
        )
        return subscription
