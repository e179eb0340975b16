"""Core interfaces (ports) for dependency injection."""

from carestock.core.interfaces.catalog import ICatalog, ISubjectRegistry
from carestock.core.interfaces.feeds import (
    ExpiringRecord,
    IExpiringEntityFeed,
    IRecurrenceFeed,
    IScheduleFeed,
    RecurrenceRecord,
    ScheduleRecord,
)
from carestock.core.interfaces.ledger import ILedger, ILedgerReader
from carestock.core.interfaces.stores import ICatalogStore, IMovementStore

__all__ = [
    # Ledger interfaces
    "ILedger",
    "ILedgerReader",
    # Lookup interfaces
    "ICatalog",
    "ISubjectRegistry",
    # Feed interfaces
    "IExpiringEntityFeed",
    "IRecurrenceFeed",
    "IScheduleFeed",
    "ExpiringRecord",
    "RecurrenceRecord",
    "ScheduleRecord",
    # Storage interfaces
    "IMovementStore",
    "ICatalogStore",
]
