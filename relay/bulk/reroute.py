"""Submits fulfillment orders to ``fulfillmentOrdersReroute`` in one call."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Sequence

from relay.bulk.models import ErrorDetail, WorkItem
from relay.shopify.client import GraphQLClient
from relay.shopify.queries import FULFILLMENT_ORDERS_REROUTE_MUTATION

logger = logging.getLogger(__name__)

NO_RESULT_MESSAGE = "Reroute mutation returned no result"


@dataclass
class SubmissionResult:
    processed: int = 0
    errors: list[ErrorDetail] = field(default_factory=list)
    moved_fulfillment_order_ids: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors


async def submit_reroute(
    client: GraphQLClient,
    items: Sequence[WorkItem],
    included_location_ids: Sequence[str] = (),
    excluded_location_ids: Sequence[str] = (),
) -> SubmissionResult:
    """Reroute all work items with a single batched mutation.

    The mutation is atomic over its input, so any user error fails the whole
    batch and nothing counts as processed, even if some orders were reported
    as moved. Transport failures and a missing result payload become a
    single ErrorDetail.
    """
    if not items:
        raise ValueError("submit_reroute requires at least one work item")

    ids = [item.fulfillment_order_id for item in items]
    variables: dict[str, Any] = {
        "fulfillmentOrderIds": ids,
        "includedLocationIds": list(included_location_ids) or None,
        "excludedLocationIds": list(excluded_location_ids) or None,
    }

    try:
        data = await client.execute(FULFILLMENT_ORDERS_REROUTE_MUTATION, variables)
    except Exception as e:
        logger.exception("Reroute mutation failed for %d fulfillment orders", len(ids))
        return SubmissionResult(errors=[ErrorDetail(message=str(e))])

    payload = data.get("fulfillmentOrdersReroute")
    if not payload:
        logger.error("Reroute mutation returned no result for %d fulfillment orders", len(ids))
        return SubmissionResult(errors=[ErrorDetail(message=NO_RESULT_MESSAGE)])

    moved = [fo["id"] for fo in payload.get("movedFulfillmentOrders") or [] if fo and fo.get("id")]
    user_errors = payload.get("userErrors") or []

    if user_errors:
        logger.error(
            "Reroute rejected with %d user errors (%d reported moved): %s",
            len(user_errors),
            len(moved),
            user_errors,
        )
        return SubmissionResult(
            errors=[
                ErrorDetail(
                    message=err.get("message", ""),
                    field=err.get("field"),
                    fulfillment_order_id=_fulfillment_order_for_field(err.get("field"), ids),
                )
                for err in user_errors
            ],
            moved_fulfillment_order_ids=moved,
        )

    for item in items:
        logger.info("Rerouted fulfillment order %s (order %s)", item.fulfillment_order_id, item.order_id)
    logger.info("Rerouted %d fulfillment orders (%d moved)", len(ids), len(moved))
    return SubmissionResult(processed=len(ids), moved_fulfillment_order_ids=moved)


def _fulfillment_order_for_field(path: Any, ids: Sequence[str]) -> str | None:
    """Map a user error ``field`` path like ["fulfillmentOrderIds", "1"] to its id."""
    if not isinstance(path, list) or len(path) < 2 or path[0] != "fulfillmentOrderIds":
        return None
    try:
        index = int(path[1])
    except (TypeError, ValueError):
        return None
    if 0 <= index < len(ids):
        return ids[index]
    return None
