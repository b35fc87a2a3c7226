"""Operator CLI for the reroute relay.

Usage:
    python -m relay.cli ensure-webhook
    python -m relay.cli show-webhook
    python -m relay.cli process gid://shopify/BulkOperation/123
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

import httpx

from relay.bulk.models import BulkOperationNotification
from relay.bulk.processor import BulkOperationProcessor
from relay.config import Settings, configure_logging, get_settings
from relay.errors import ConfigurationError
from relay.shopify.client import ShopifyAdminClient
from relay.webhooks.subscriptions import WebhookSubscriptionManager, build_subscription_store


def _manager(settings: Settings, client: ShopifyAdminClient) -> WebhookSubscriptionManager:
    if not settings.webhook_base_url:
        raise ConfigurationError("Missing required configuration: RELAY_WEBHOOK_BASE_URL")
    return WebhookSubscriptionManager(client, build_subscription_store(settings), settings.callback_url)


async def cmd_ensure_webhook(settings: Settings) -> int:
    """Create or update the BULK_OPERATIONS_FINISH subscription."""
    async with ShopifyAdminClient.from_settings(settings) as client:
        subscription = await _manager(settings, client).ensure()
    if subscription is None:
        print("ERROR: failed to ensure webhook subscription", file=sys.stderr)
        return 1
    print(subscription.model_dump_json(indent=2))
    return 0


async def cmd_show_webhook(settings: Settings) -> int:
    """Print the tracked (or discovered) subscription."""
    async with ShopifyAdminClient.from_settings(settings) as client:
        subscription = await _manager(settings, client).current()
    if subscription is None:
        print("No BULK_OPERATIONS_FINISH webhook subscription found", file=sys.stderr)
        return 1
    print(subscription.model_dump_json(indent=2))
    return 0


async def cmd_process(settings: Settings, bulk_operation_id: str) -> int:
    """Run one bulk operation through the reroute pipeline."""
    notification = BulkOperationNotification(admin_graphql_api_id=bulk_operation_id)
    async with httpx.AsyncClient(timeout=settings.request_timeout) as http:
        client = ShopifyAdminClient.from_settings(settings, http=http)
        processor = BulkOperationProcessor.from_settings(settings, client, http)
        outcome = await processor.process(notification)
    print(json.dumps(outcome.to_response(), indent=2))
    return 0 if outcome.success else 1


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="relay",
        description="Bulk operation fulfillment reroute relay",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("ensure-webhook", help="Register or update the bulk operation webhook")
    sub.add_parser("show-webhook", help="Show the managed webhook subscription")

    p_process = sub.add_parser("process", help="Process a bulk operation by id")
    p_process.add_argument("bulk_operation_id", help="Bulk operation GID")

    args = parser.parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level)

    try:
        settings.require_admin_api()
        if args.command == "ensure-webhook":
            code = asyncio.run(cmd_ensure_webhook(settings))
        elif args.command == "show-webhook":
            code = asyncio.run(cmd_show_webhook(settings))
        else:
            code = asyncio.run(cmd_process(settings, args.bulk_operation_id))
    except ConfigurationError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(2)

    sys.exit(code)


if __name__ == "__main__":
    main()
