"""Static alert feeds backed by in-memory record lists."""

from collections.abc import Iterable

from carestock.core.interfaces.feeds import (
    ExpiringRecord,
    IExpiringEntityFeed,
    IRecurrenceFeed,
    IScheduleFeed,
    RecurrenceRecord,
    ScheduleRecord,
)


class StaticExpiringFeed(IExpiringEntityFeed):
    """Expiring entities supplied up front, e.g. from a request payload."""

    def __init__(self, records: Iterable[ExpiringRecord] = (), name: str = "expiring") -> None:
        self._records = list(records)
        self.name = name

    def list_entities(self) -> list[ExpiringRecord]:
        return list(self._records)


class StaticRecurrenceFeed(IRecurrenceFeed):
    """Recurring dates supplied up front."""

    def __init__(self, records: Iterable[RecurrenceRecord] = (), name: str = "recurrence") -> None:
        self._records = list(records)
        self.name = name

    def list_recurrences(self) -> list[RecurrenceRecord]:
        return list(self._records)


class StaticScheduleFeed(IScheduleFeed):
    """Scheduled events supplied up front."""

    def __init__(self, records: Iterable[ScheduleRecord] = (), name: str = "schedule") -> None:
        self._records = list(records)
        self.name = name

    def list_events(self) -> list[ScheduleRecord]:
        return list(self._records)
