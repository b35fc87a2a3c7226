"""FastAPI application for the reroute relay.

Run with:
    uvicorn relay.serve:create_app --factory
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from relay.config import WEBHOOK_PATH, Settings, configure_logging, get_settings
from relay.shopify.client import GraphQLClient, ShopifyAdminClient
from relay.webhooks.handlers import router as webhook_router
from relay.webhooks.subscriptions import WebhookSubscriptionManager, build_subscription_store

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    shopify_client: GraphQLClient | None = None,
    http: httpx.AsyncClient | None = None,
) -> FastAPI:
    """Build the app. Clients default to real ones created at startup.

    Without explicit ``settings`` (the uvicorn factory path), settings are
    loaded from the environment and logging is configured.

    With ``webhook_base_url`` set (and not under TESTING), the
    BULK_OPERATIONS_FINISH subscription is ensured on startup.
    """
    if settings is None:
        settings = get_settings()
        configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned_http = http is None
        app.state.http = http or httpx.AsyncClient(timeout=settings.request_timeout)
        app.state.shopify_client = shopify_client or ShopifyAdminClient.from_settings(settings, http=app.state.http)
        app.state.subscription_store = build_subscription_store(settings)

        if settings.webhook_base_url and settings.shop_domain and not os.environ.get("TESTING"):
            manager = WebhookSubscriptionManager(
                app.state.shopify_client, app.state.subscription_store, settings.callback_url
            )
            await manager.ensure()

        try:
            yield
        finally:
            if owned_http:
                await app.state.http.aclose()

    app = FastAPI(title="Bulk Reroute Relay", lifespan=lifespan)
    app.state.settings = settings
    app.include_router(webhook_router)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    logger.info("Webhook routes registered: %s", WEBHOOK_PATH)
    return app

