"""Abstract interfaces for external alert sources."""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from typing import Any

from carestock.core.entities.feeds import ExpiringEntity, RecurringDate, ScheduledEvent

# Feeds may hand over raw mappings; the aggregator validates each record
# and skips the malformed ones.
ExpiringRecord = ExpiringEntity | Mapping[str, Any]
RecurrenceRecord = RecurringDate | Mapping[str, Any]
ScheduleRecord = ScheduledEvent | Mapping[str, Any]


class IExpiringEntityFeed(ABC):
    """Source of documents and other entities with an expiration."""

    name: str = "expiring"

    @abstractmethod
    def list_entities(self) -> Iterable[ExpiringRecord]:
        pass


class IRecurrenceFeed(ABC):
    """Source of annual dates (birthdays, anniversaries)."""

    name: str = "recurrence"

    @abstractmethod
    def list_recurrences(self) -> Iterable[RecurrenceRecord]:
        pass


class IScheduleFeed(ABC):
    """Source of point-in-time scheduled events."""

    name: str = "schedule"

    @abstractmethod
    def list_events(self) -> Iterable[ScheduleRecord]:
        pass
