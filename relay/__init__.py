"""Bulk-operation fulfillment reroute relay.

Receives Shopify ``bulk_operations/finish`` webhooks, downloads the export's
JSONL result and reroutes the fulfillment orders it lists.
"""

__version__ = "0.1.0"
