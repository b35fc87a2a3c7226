"""Bulk operation webhook processing.

Steps for one ``bulk_operations/finish`` notification:
1. Resolve the bulk operation by id
2. Skip operations from other query families (not an error)
3. Skip operations that have not completed (the platform notifies again)
4. Download and parse the JSONL result file
5. Extract FulfillmentOrder rows
6. Reroute them with one batched mutation

Every outcome, including unexpected exceptions, is returned as a
ProcessingOutcome; nothing escapes to the caller.
"""

from __future__ import annotations

import logging
from typing import Sequence

import httpx

from relay.bulk.extractor import extract_work_items
from relay.bulk.jsonl import download_jsonl
from relay.bulk.models import BulkOperationNotification, ProcessingOutcome
from relay.bulk.reroute import submit_reroute
from relay.bulk.resolver import resolve_bulk_operation
from relay.config import DEFAULT_QUERY_PREFIX, Settings
from relay.errors import Failure
from relay.shopify.client import GraphQLClient

logger = logging.getLogger(__name__)

SKIPPED_WRONG_QUERY = "Bulk operation skipped - wrong query type"
SKIPPED_NOT_COMPLETED = "Bulk operation not completed yet"


class BulkOperationProcessor:
    """Drives one notification through resolve, gate, download and reroute."""

    def __init__(
        self,
        client: GraphQLClient,
        http: httpx.AsyncClient,
        expected_query_prefix: str = DEFAULT_QUERY_PREFIX,
        included_location_ids: Sequence[str] = (),
        excluded_location_ids: Sequence[str] = (),
    ):
        self.client = client
        self.http = http
        self.expected_query_prefix = expected_query_prefix
        self.included_location_ids = list(included_location_ids)
        self.excluded_location_ids = list(excluded_location_ids)

    @classmethod
    def from_settings(
        cls, settings: Settings, client: GraphQLClient, http: httpx.AsyncClient
    ) -> BulkOperationProcessor:
        return cls(
            client,
            http,
            expected_query_prefix=settings.expected_query_prefix,
            included_location_ids=settings.parsed_included_location_ids,
            excluded_location_ids=settings.parsed_excluded_location_ids,
        )

    async def process(self, notification: BulkOperationNotification) -> ProcessingOutcome:
        operation_id = notification.admin_graphql_api_id
        try:
            return await self._process(operation_id)
        except Exception as e:
            logger.exception("Error processing bulk operation webhook for %s", operation_id)
            return ProcessingOutcome(success=False, bulk_operation_id=operation_id, error=str(e))

    async def _process(self, operation_id: str) -> ProcessingOutcome:
        logger.info("Fetching bulk operation details for %s", operation_id)
        resolved = await resolve_bulk_operation(self.client, operation_id)
        if isinstance(resolved, Failure):
            return _failed(operation_id, resolved.reason)
        operation = resolved.value

        logger.info(
            "Bulk operation %s: status=%s type=%s objectCount=%s",
            operation.id,
            operation.status,
            operation.type,
            operation.object_count,
        )

        if not (operation.query or "").startswith(self.expected_query_prefix):
            logger.info("Skipping bulk operation %s: not a %r query", operation_id, self.expected_query_prefix)
            return ProcessingOutcome(success=True, bulk_operation_id=operation_id, message=SKIPPED_WRONG_QUERY)

        if not operation.is_completed:
            logger.info("Bulk operation %s not completed, status=%s", operation_id, operation.status)
            return ProcessingOutcome(success=True, bulk_operation_id=operation_id, message=SKIPPED_NOT_COMPLETED)

        url = operation.result_url
        if not url:
            return _failed(operation_id, "No download URL available for completed bulk operation")

        logger.info("Downloading JSONL file for %s", operation_id)
        downloaded = await download_jsonl(self.http, url)
        if isinstance(downloaded, Failure):
            return _failed(operation_id, downloaded.reason)
        records = downloaded.value

        items = extract_work_items(records)
        logger.info("Extracted %d fulfillment orders from %d records", len(items), len(records))

        if not items:
            return ProcessingOutcome(
                success=True,
                bulk_operation_id=operation_id,
                records_downloaded=len(records),
                matched=0,
                processed=0,
                message="No fulfillment orders to process",
            )

        result = await submit_reroute(
            self.client,
            items,
            included_location_ids=self.included_location_ids,
            excluded_location_ids=self.excluded_location_ids,
        )
        logger.info(
            "Processed %d out of %d fulfillment orders for %s",
            result.processed,
            len(items),
            operation_id,
        )
        return ProcessingOutcome(
            success=result.success,
            bulk_operation_id=operation_id,
            records_downloaded=len(records),
            matched=len(items),
            processed=result.processed,
            errors=result.errors,
        )


def _failed(operation_id: str, reason: str) -> ProcessingOutcome:
    logger.error("Bulk operation %s failed: %s", operation_id, reason)
    return ProcessingOutcome(success=False, bulk_operation_id=operation_id, error=reason)
