"""Shopify Admin GraphQL access."""
