"""Selects fulfillment orders from parsed bulk operation rows."""

from __future__ import annotations

import logging
import re
from typing import Iterable

from relay.bulk.models import ParsedRecord, WorkItem

logger = logging.getLogger(__name__)

TARGET_TYPENAME = "FulfillmentOrder"

# gid://shopify/Order/12345 -> 12345
_ORDER_ID_PATTERN = re.compile(r"/Order/(\d+)$")


def order_id_from_reference(reference: str) -> int | None:
    match = _ORDER_ID_PATTERN.search(reference)
    return int(match.group(1)) if match else None


def extract_work_items(
    records: Iterable[ParsedRecord], typename: str = TARGET_TYPENAME
) -> list[WorkItem]:
    """Return one WorkItem per ``typename`` row with a usable id.

    Rows of other types and placeholder ``{}`` rows are skipped. A row whose
    ``order_reference`` is present but unparseable is skipped on its own.
    """
    items: list[WorkItem] = []
    for record in records:
        if record.get("__typename") != typename:
            continue
        fulfillment_order_id = record.get("id")
        if not isinstance(fulfillment_order_id, str) or not fulfillment_order_id:
            continue

        order_id = None
        reference = record.get("order_reference")
        if reference:
            order_id = order_id_from_reference(reference) if isinstance(reference, str) else None
            if order_id is None:
                logger.warning(
                    "Skipping fulfillment order %s: unparseable order reference %r",
                    fulfillment_order_id,
                    reference,
                )
                continue

        items.append(WorkItem(fulfillment_order_id=fulfillment_order_id, order_id=order_id))
    return items
