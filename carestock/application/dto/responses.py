"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
These are the ONLY contracts between use cases and API layer.
"""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field


class ProviderHealthResponse(BaseModel):
    """Dependency health status."""

    name: str
    available: bool
    latency_ms: float | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: ProviderHealthResponse | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. ITEM_NOT_FOUND)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)


class PaginatedResponse(BaseModel):
    """Base for paginated responses."""

    total: int
    limit: int
    offset: int
    has_more: bool


# --- Ledger ---


class MovementResponse(BaseModel):
    """Ledger movement response DTO."""

    id: str
    movement_date: date
    direction: str
    item_id: str
    subject_id: str | None = None
    quantity: int
    note: str = ""


class RecordMovementResponse(BaseModel):
    """Response for a recorded movement."""

    movement: MovementResponse
    balance: int = Field(..., description="Pool balance after the movement")


class MovementListResponse(PaginatedResponse):
    """Paginated movement history."""

    movements: list[MovementResponse]


class BalanceResponse(BaseModel):
    """Derived balance of one (item, subject) pool."""

    item_id: str
    subject_id: str | None = None
    as_of: date | None = None
    balance: int


class ZeroBalanceResponse(BaseModel):
    """Result of zeroing a pool."""

    item_id: str
    subject_id: str | None = None
    previous_balance: int
    balance: int
    movement: MovementResponse | None = Field(
        default=None,
        description="Compensating entry, absent when nothing needed zeroing",
    )


# --- Catalog ---


class ItemResponse(BaseModel):
    """Catalog item response DTO."""

    id: str
    name: str
    category: str = ""
    unit: str = "unit"
    minimum_threshold: int = 0
    created_at: datetime
    updated_at: datetime


class ItemListResponse(BaseModel):
    items: list[ItemResponse]
    total: int


class SubjectResponse(BaseModel):
    """Subject response DTO."""

    id: str
    display_name: str
    is_active: bool = True


class SubjectListResponse(BaseModel):
    subjects: list[SubjectResponse]
    total: int


# --- Forecasts ---


class ForecastResponse(BaseModel):
    """Depletion forecast of one pool."""

    item_id: str
    item_name: str
    subject_id: str | None = None
    as_of: date
    current_balance: int
    daily_rate: float
    remaining_kind: str = Field(..., description="numeric, unbounded or no_history")
    days_remaining: int | None = None
    days_without_stock: int | None = None
    projected_exhaustion_date: date | None = None
    exhaustion_label: str
    urgency_tier: str


class ForecastListResponse(BaseModel):
    """Forecasts sorted most urgent first."""

    as_of: date
    forecasts: list[ForecastResponse]
    total: int
    tier_counts: dict[str, int] = Field(default_factory=dict)


# --- Alerts ---


class AlertResponse(BaseModel):
    """One alert in the unified feed."""

    id: str
    category: str
    severity: str
    expiry_status: str | None = None
    subject_ref: str | None = None
    title: str
    message: str = ""
    occurs_on: date
    time: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)


class AlertListResponse(BaseModel):
    """Ordered alert feed with per-category counts."""

    as_of: date
    alerts: list[AlertResponse]
    total: int
    counts: dict[str, int] = Field(default_factory=dict)


# --- Reports ---


class InventoryFlowRowResponse(BaseModel):
    """Facility item row of the inventory flow report."""

    item_id: str
    item_name: str
    category: str = ""
    unit: str = "unit"
    current_balance: int
    minimum_threshold: int = 0
    total_in: int
    total_out: int
    recent_out: int
    daily_rate: float
    days_left: int | None = None
    held_by_subjects: int = 0
    status: str


class InventoryFlowResponse(BaseModel):
    """Inventory flow report with summary counters."""

    as_of: date
    rows: list[InventoryFlowRowResponse]
    total_items: int
    low_items: int
    depleted_items: int
    total_recent_out: int


class PersonalHoldingResponse(BaseModel):
    item_id: str
    item_name: str
    unit: str = "unit"
    balance: int


class PersonalInventoryResponse(BaseModel):
    """Items held by one subject."""

    subject_id: str
    display_name: str
    holdings: list[PersonalHoldingResponse]
    total: int


class CategoryConsumptionResponse(BaseModel):
    category: str
    total_out: int
    item_count: int


class ConsumptionReportResponse(BaseModel):
    """OUT volume per category over a trailing window."""

    as_of: date
    window_days: int
    categories: list[CategoryConsumptionResponse]
