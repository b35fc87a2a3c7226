"""Webhook HTTP handlers — FastAPI routes for bulk operation notifications.

POST /webhooks:
1. Verifies the Shopify signature (when a secret is configured)
2. Checks Admin API configuration before any remote call
3. Validates the payload (400 when the operation id is missing)
4. Processes the bulk operation and returns the outcome
   (200 on success, 500 otherwise)

GET /webhooks is a liveness check.
"""

from __future__ import annotations

import json
import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from relay.bulk.models import BulkOperationNotification
from relay.bulk.processor import BulkOperationProcessor
from relay.config import WEBHOOK_PATH
from relay.errors import ConfigurationError
from relay.webhooks.verification import verify_request

logger = logging.getLogger(__name__)

router = APIRouter(tags=["webhooks"])


def _log_webhook(operation_id: str, status: str) -> None:
    """Audit log for webhook activity."""
    logger.info("WEBHOOK_AUDIT topic=bulk_operations/finish id=%s status=%s", operation_id, status)


@router.get(WEBHOOK_PATH)
async def webhook_liveness():
    return {"success": True, "message": "Webhook endpoint is active"}


@router.post(WEBHOOK_PATH)
async def bulk_operation_webhook(request: Request) -> JSONResponse:
    start = time.time()
    state = request.app.state
    settings = state.settings

    body = await request.body()
    headers = {k.lower(): v for k, v in request.headers.items()}

    if not verify_request(settings.webhook_secret, body, headers):
        _log_webhook("unknown", "signature_failed")
        return JSONResponse({"success": False, "error": "unauthorized"}, status_code=401)

    try:
        settings.require_admin_api()
    except ConfigurationError as e:
        logger.error("Webhook rejected: %s", e)
        _log_webhook("unknown", "config_error")
        return JSONResponse({"success": False, "error": "Server configuration error"}, status_code=500)

    try:
        payload = json.loads(body)
        notification = BulkOperationNotification.model_validate(payload)
    except (json.JSONDecodeError, UnicodeDecodeError, ValidationError) as e:
        logger.error("Invalid webhook payload - missing admin_graphql_api_id: %s", e)
        _log_webhook("unknown", "invalid_payload")
        return JSONResponse({"success": False, "error": "Invalid webhook payload"}, status_code=400)

    processor = BulkOperationProcessor.from_settings(settings, state.shopify_client, state.http)
    outcome = await processor.process(notification)

    elapsed_ms = (time.time() - start) * 1000
    if outcome.success:
        _log_webhook(notification.admin_graphql_api_id, "processed")
        logger.debug("Webhook processed in %.1fms: %s", elapsed_ms, outcome)
        return JSONResponse(outcome.to_response())

    _log_webhook(notification.admin_graphql_api_id, "failed")
    logger.error("Webhook processing failed in %.1fms: %s", elapsed_ms, outcome)
    return JSONResponse(outcome.to_response(), status_code=500)
