"""Resolves a bulk operation id to its current state."""

from __future__ import annotations

import logging

import httpx

from relay.bulk.models import BulkOperationRecord
from relay.errors import Failure, Ok, Result, UpstreamError
from relay.shopify.client import GraphQLClient
from relay.shopify.queries import GET_BULK_OPERATION_QUERY

logger = logging.getLogger(__name__)


async def fetch_bulk_operation(client: GraphQLClient, operation_id: str) -> BulkOperationRecord | None:
    """Query the operation by id. Returns None when the node does not exist."""
    data = await client.execute(GET_BULK_OPERATION_QUERY, {"id": operation_id})
    node = data.get("node")
    if not node:
        return None
    return BulkOperationRecord.model_validate(node)


async def resolve_bulk_operation(client: GraphQLClient, operation_id: str) -> Result[BulkOperationRecord]:
    """Like fetch_bulk_operation, but a missing node or a failed call is a Failure."""
    try:
        record = await fetch_bulk_operation(client, operation_id)
    except (UpstreamError, httpx.HTTPError) as e:
        logger.error("Bulk operation lookup failed for %s: %s", operation_id, e)
        return Failure(f"Failed to fetch bulk operation: {e}")

    if record is None:
        return Failure("Bulk operation not found")
    return Ok(record)
