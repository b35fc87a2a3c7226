"""Data types for the bulk-operation reroute pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# One decoded JSONL line; no fixed shape.
ParsedRecord = dict[str, Any]


class BulkOperationStatus(str, Enum):
    CREATED = "CREATED"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    CANCELING = "CANCELING"
    CANCELED = "CANCELED"
    FAILED = "FAILED"
    EXPIRED = "EXPIRED"


class BulkOperationNotification(BaseModel):
    """Inbound ``bulk_operations/finish`` webhook body."""

    admin_graphql_api_id: str

    model_config = ConfigDict(extra="ignore")

    @field_validator("admin_graphql_api_id")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("admin_graphql_api_id must not be empty")
        return value


class BulkOperationRecord(BaseModel):
    """A bulk operation as resolved from the Admin API."""

    id: str
    status: str
    query: Optional[str] = None
    url: Optional[str] = None
    partial_data_url: Optional[str] = None
    object_count: Optional[int] = None
    file_size: Optional[int] = None
    error_code: Optional[str] = None
    created_at: Optional[str] = None
    completed_at: Optional[str] = None
    type: Optional[str] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    @field_validator("object_count", "file_size", mode="before")
    @classmethod
    def _count_from_string(cls, value: Any) -> Any:
        # UnsignedInt64 values arrive as strings
        if isinstance(value, str):
            return int(value)
        return value

    @property
    def is_completed(self) -> bool:
        return self.status == BulkOperationStatus.COMPLETED.value

    @property
    def result_url(self) -> str | None:
        """The result file URL, only once the operation has completed."""
        return self.url if self.is_completed else None


@dataclass(frozen=True)
class WorkItem:
    """A fulfillment order to reroute.

    ``order_id`` is informational: it is logged with the reroute but not sent.
    Its parsing decides which rows the extractor keeps.
    """

    fulfillment_order_id: str
    order_id: int | None = None


class ErrorDetail(BaseModel):
    """One reroute failure reported back to the caller."""

    message: str
    field: Optional[list[str]] = None
    fulfillment_order_id: Optional[str] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProcessingOutcome(BaseModel):
    """Result of handling one notification; serialized as the response body."""

    success: bool
    message: Optional[str] = None
    bulk_operation_id: Optional[str] = None
    records_downloaded: Optional[int] = None
    matched: Optional[int] = None
    processed: int = 0
    errors: list[ErrorDetail] = Field(default_factory=list)
    error: Optional[str] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_response(self) -> dict[str, Any]:
        body = self.model_dump(by_alias=True, exclude_none=True)
        if not self.errors:
            body.pop("errors", None)
        return body
