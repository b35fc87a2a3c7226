"""Inbound Shopify webhooks and webhook subscription management."""
