"""
YAML alert feed file.

One file supplies all three feed kinds:

    expiring:
      - id: doc-1
        label: Prescription
        issue_date: 2024-01-10
        validity_period_days: 180
    recurrences:
      - id: bday-1
        label: Birthday
        month_day: "03-14"
        origin_year: 1940
    events:
      - id: appt-1
        label: Cardiology
        event_date: 2024-06-01
        time: "09:30"

Records are handed to the aggregator as raw mappings, which validates
them one by one.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from carestock.config import get_logger
from carestock.core.entities.feeds import RecurringDate
from carestock.core.exceptions import ValidationError
from carestock.core.interfaces.feeds import (
    ExpiringRecord,
    IExpiringEntityFeed,
    IRecurrenceFeed,
    IScheduleFeed,
    RecurrenceRecord,
    ScheduleRecord,
)

logger = get_logger(__name__)

SECTIONS = ("expiring", "recurrences", "events")


class YamlFeedFile:
    """
    Loads alert feed records from a YAML file.

    The file is read once, on first access. A missing or unreadable file
    yields empty feeds and is logged.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._data: dict[str, list[dict[str, Any]]] | None = None

    def load(self) -> dict[str, list[dict[str, Any]]]:
        if self._data is not None:
            return self._data

        data: dict[str, list[dict[str, Any]]] = {section: [] for section in SECTIONS}
        if not self.path.exists():
            logger.warning("feed_file_not_found", path=str(self.path))
            self._data = data
            return data

        try:
            with open(self.path, encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error("feed_file_load_error", path=str(self.path), error=str(e))
            self._data = data
            return data

        if not isinstance(raw, dict):
            logger.error("feed_file_invalid", path=str(self.path), reason="top level is not a mapping")
            self._data = data
            return data

        for section in SECTIONS:
            records = raw.get(section) or []
            if not isinstance(records, list):
                logger.warning("feed_section_invalid", path=str(self.path), section=section)
                continue
            data[section] = [r for r in records if isinstance(r, dict)]

        data["recurrences"] = [_expand_month_day(r) for r in data["recurrences"]]

        logger.info(
            "feed_file_loaded",
            path=str(self.path),
            **{section: len(data[section]) for section in SECTIONS},
        )
        self._data = data
        return data

    def expiring_feed(self) -> "YamlExpiringFeed":
        return YamlExpiringFeed(self)

    def recurrence_feed(self) -> "YamlRecurrenceFeed":
        return YamlRecurrenceFeed(self)

    def schedule_feed(self) -> "YamlScheduleFeed":
        return YamlScheduleFeed(self)


def _expand_month_day(record: dict[str, Any]) -> dict[str, Any]:
    """Turn a 'MM-DD' month_day into month and day fields."""
    month_day = record.get("month_day")
    if not isinstance(month_day, str) or "month" in record or "day" in record:
        return record
    rest = {k: v for k, v in record.items() if k != "month_day"}
    try:
        recurrence = RecurringDate.from_month_day(month_day, **rest)
    except (TypeError, ValidationError, PydanticValidationError):
        # Left without month and day, the aggregator skips and logs it
        return rest
    return {**rest, "month": recurrence.month, "day": recurrence.day}


class YamlExpiringFeed(IExpiringEntityFeed):
    def __init__(self, source: YamlFeedFile) -> None:
        self._source = source
        self.name = f"yaml:{source.path.name}:expiring"

    def list_entities(self) -> list[ExpiringRecord]:
        return list(self._source.load()["expiring"])


class YamlRecurrenceFeed(IRecurrenceFeed):
    def __init__(self, source: YamlFeedFile) -> None:
        self._source = source
        self.name = f"yaml:{source.path.name}:recurrences"

    def list_recurrences(self) -> list[RecurrenceRecord]:
        return list(self._source.load()["recurrences"])


class YamlScheduleFeed(IScheduleFeed):
    def __init__(self, source: YamlFeedFile) -> None:
        self._source = source
        self.name = f"yaml:{source.path.name}:events"

    def list_events(self) -> list[ScheduleRecord]:
        return list(self._source.load()["events"])
