"""Alert entity for the unified notification feed."""

from datetime import date
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class AlertCategory(str, Enum):
    """Source category of an alert."""

    LOW_STOCK = "low_stock"
    DEPLETION_FORECAST = "depletion_forecast"
    DOCUMENT_EXPIRY = "document_expiry"
    SCHEDULED_EVENT = "scheduled_event"
    RECURRING_DATE = "recurring_date"


class AlertSeverity(str, Enum):
    """Severity level of an alert."""

    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK: dict[AlertSeverity, int] = {
    AlertSeverity.INFO: 0,
    AlertSeverity.WARNING: 1,
    AlertSeverity.CRITICAL: 2,
}


class ExpiryStatus(str, Enum):
    """Sub-severity of an expiration alert."""

    OVERDUE = "overdue"
    DUE_TODAY = "due_today"
    UPCOMING = "upcoming"


class Alert(BaseModel):
    """
    A notification derived from the ledger or an external feed.

    Pure Pydantic model, not persisted. Recomputed on every
    AlertAggregator.collect_alerts call.
    """

    id: str
    category: AlertCategory
    severity: AlertSeverity = AlertSeverity.WARNING
    expiry_status: ExpiryStatus | None = None
    subject_ref: str | None = None
    title: str
    message: str = ""
    occurs_on: date
    time: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)
