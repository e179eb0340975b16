"""Records supplied by external alert feeds."""

import re
from datetime import date, timedelta

from pydantic import BaseModel, Field, field_validator, model_validator

from carestock.core.exceptions import ValidationError

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")
_MONTH_DAY_RE = re.compile(r"^(\d{1,2})-(\d{1,2})$")


class ExpiringEntity(BaseModel):
    """
    Entity that stops being valid on a known date.

    The expiration is either fixed (expiration_date) or derived from an
    issuance date plus a validity period.
    """

    id: str
    label: str
    expiration_date: date | None = None
    issue_date: date | None = None
    validity_period_days: int | None = None
    subject_ref: str | None = None

    def resolve_expiration(self, default_validity_days: int | None = None) -> date:
        """Return the effective expiration date.

        Args:
            default_validity_days: Validity applied when the record has an
                issue date but no validity period of its own.

        Raises:
            ValidationError: If no expiration can be derived.
        """
        if self.expiration_date is not None:
            return self.expiration_date
        if self.issue_date is None:
            raise ValidationError(
                "expiration_date",
                f"Expiring entity '{self.id}' has neither an expiration nor an issue date",
            )
        validity = self.validity_period_days
        if validity is None:
            validity = default_validity_days
        if validity is None or validity < 0:
            raise ValidationError(
                "validity_period_days",
                f"Expiring entity '{self.id}' has no usable validity period",
                validity,
            )
        try:
            return self.issue_date + timedelta(days=validity)
        except OverflowError:
            raise ValidationError(
                "validity_period_days",
                f"Expiring entity '{self.id}' expires past the end of the calendar",
                validity,
            ) from None


class RecurringDate(BaseModel):
    """Annual date such as a birthday or an admission anniversary."""

    id: str
    label: str
    month: int = Field(ge=1, le=12)
    day: int = Field(ge=1, le=31)
    subject_ref: str | None = None
    origin_year: int | None = None

    @model_validator(mode="after")
    def check_calendar_day(self) -> "RecurringDate":
        # 2000 is a leap year, so Feb 29 is accepted
        date(2000, self.month, self.day)
        return self

    @classmethod
    def from_month_day(cls, month_day: str, **kwargs: object) -> "RecurringDate":
        """Build from an 'MM-DD' string."""
        match = _MONTH_DAY_RE.match(month_day.strip())
        if not match:
            raise ValidationError("month_day", "Expected MM-DD", month_day)
        return cls(month=int(match.group(1)), day=int(match.group(2)), **kwargs)

    def occurs_on(self, as_of: date) -> bool:
        """Check whether the recurrence falls on as_of.

        Feb 29 recurrences fall on Feb 28 in non-leap years.
        """
        if (self.month, self.day) == (as_of.month, as_of.day):
            return True
        if (self.month, self.day) == (2, 29) and (as_of.month, as_of.day) == (2, 28):
            try:
                date(as_of.year, 2, 29)
            except ValueError:
                return True
        return False

    def years_since_origin(self, as_of: date) -> int | None:
        if self.origin_year is None:
            return None
        return as_of.year - self.origin_year


class ScheduledEvent(BaseModel):
    """Point-in-time event such as a medical appointment."""

    id: str
    label: str
    event_date: date
    time: str = ""
    subject_ref: str | None = None
    location: str | None = None
    is_cancelled: bool = False

    @field_validator("time")
    @classmethod
    def normalize_time(cls, v: str) -> str:
        """Zero-pad to HH:MM so lexicographic order is chronological."""
        v = (v or "").strip()
        if not v:
            return ""
        match = _TIME_RE.match(v)
        if not match:
            raise ValueError(f"Invalid time '{v}', expected HH:MM")
        hours, minutes = int(match.group(1)), int(match.group(2))
        if hours > 23 or minutes > 59:
            raise ValueError(f"Invalid time '{v}', expected HH:MM")
        return f"{hours:02d}:{minutes:02d}"
