"""Core domain entities."""

from carestock.core.entities.alert import (
    Alert,
    AlertCategory,
    AlertSeverity,
    ExpiryStatus,
)
from carestock.core.entities.catalog import Item, SubjectInfo
from carestock.core.entities.feeds import ExpiringEntity, RecurringDate, ScheduledEvent
from carestock.core.entities.forecast import (
    ConsumptionSample,
    DaysRemaining,
    ForecastResult,
    RemainingKind,
    UrgencyTier,
)
from carestock.core.entities.movement import (
    MovementDirection,
    MovementEvent,
    MovementFilter,
    SubjectScope,
)

__all__ = [
    # Ledger entities
    "MovementEvent",
    "MovementDirection",
    "MovementFilter",
    "SubjectScope",
    # Catalog entities
    "Item",
    "SubjectInfo",
    # Forecast entities
    "ConsumptionSample",
    "DaysRemaining",
    "ForecastResult",
    "RemainingKind",
    "UrgencyTier",
    # Alert entities
    "Alert",
    "AlertCategory",
    "AlertSeverity",
    "ExpiryStatus",
    # Feed records
    "ExpiringEntity",
    "RecurringDate",
    "ScheduledEvent",
]
