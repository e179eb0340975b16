"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases.
"""

from typing import Any

from pydantic import BaseModel, Field


# --- Ledger ---


class RecordMovementRequest(BaseModel):
    """Request to append one IN or OUT movement to the ledger."""

    item_id: str = Field(..., min_length=1, description="Catalog item ID")
    direction: str = Field(..., description="IN or OUT", examples=["IN", "OUT"])
    quantity: int = Field(..., description="Positive quantity in item units")
    subject_id: str | None = Field(
        default=None,
        description="Owner of a personal pool; omit for facility stock",
    )
    movement_date: str | None = Field(
        default=None,
        description="Movement date in ISO format (defaults to today)",
    )
    note: str = Field(default="", description="Free-text note")
    event_id: str | None = Field(
        default=None,
        description="Client-supplied event ID for idempotent retries",
    )
    enforce_available: bool = Field(
        default=False,
        description="Reject an OUT movement larger than the current balance",
    )


class ZeroBalanceRequest(BaseModel):
    """Request to zero a pool with a compensating OUT entry."""

    item_id: str = Field(..., min_length=1, description="Catalog item ID")
    subject_id: str | None = Field(default=None, description="Personal pool owner")
    movement_date: str | None = Field(
        default=None,
        description="Date of the compensating entry in ISO format (defaults to today)",
    )
    note: str = Field(default="Balance zeroed", description="Reason for the correction")


# --- Catalog ---


class UpsertItemRequest(BaseModel):
    """Request to create or update a catalog item."""

    id: str = Field(..., min_length=1, description="Item ID")
    name: str = Field(..., min_length=1, description="Display name")
    category: str = Field(default="", description="Catalog category")
    unit: str = Field(default="unit", description="Unit of measure")
    minimum_threshold: int = Field(default=0, ge=0, description="Facility reorder point")


class UpsertSubjectRequest(BaseModel):
    """Request to create or update a subject."""

    id: str = Field(..., min_length=1, description="Subject ID")
    display_name: str = Field(..., min_length=1, description="Full name")
    is_active: bool = Field(default=True)


# --- Alerts ---


class CollectAlertsRequest(BaseModel):
    """Request for the unified alert feed.

    Feed records are accepted as raw objects; malformed ones are skipped
    during aggregation instead of failing the whole request.
    """

    as_of: str | None = Field(
        default=None,
        description="Evaluation date in ISO format (defaults to today)",
    )
    include_stock: bool = Field(default=True, description="Include stock alerts")
    expiring: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Expiring entities (documents, licences, medical reports)",
    )
    recurrences: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Annual dates such as birthdays",
    )
    events: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Scheduled events such as appointments",
    )
