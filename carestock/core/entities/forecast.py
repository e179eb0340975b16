"""Consumption and depletion forecast entities."""

from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict, model_validator


class UrgencyTier(str, Enum):
    """Urgency classification of a stock forecast."""

    SAFE = "SAFE"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"
    DEPLETED = "DEPLETED"
    UNKNOWN = "UNKNOWN"

    @property
    def rank(self) -> int:
        """Ordinal urgency, higher is more urgent. UNKNOWN ranks lowest."""
        return _TIER_RANK[self]


_TIER_RANK: dict[UrgencyTier, int] = {
    UrgencyTier.UNKNOWN: 0,
    UrgencyTier.SAFE: 1,
    UrgencyTier.WARNING: 2,
    UrgencyTier.CRITICAL: 3,
    UrgencyTier.DEPLETED: 4,
}


class RemainingKind(str, Enum):
    """Shape of a days-remaining value."""

    NUMERIC = "numeric"
    UNBOUNDED = "unbounded"  # stock on hand, no consumption signal
    NO_HISTORY = "no_history"  # nothing to project from


class DaysRemaining(BaseModel):
    """Days of stock left, with explicit sentinels instead of magic numbers."""

    model_config = ConfigDict(frozen=True)

    kind: RemainingKind
    days: int | None = None

    @model_validator(mode="after")
    def check_days(self) -> "DaysRemaining":
        if self.kind == RemainingKind.NUMERIC and self.days is None:
            raise ValueError("numeric days remaining requires a value")
        if self.kind != RemainingKind.NUMERIC and self.days is not None:
            raise ValueError(f"{self.kind.value} days remaining carries no value")
        return self

    @classmethod
    def numeric(cls, days: int) -> "DaysRemaining":
        return cls(kind=RemainingKind.NUMERIC, days=days)

    @classmethod
    def unbounded(cls) -> "DaysRemaining":
        return cls(kind=RemainingKind.UNBOUNDED)

    @classmethod
    def no_history(cls) -> "DaysRemaining":
        return cls(kind=RemainingKind.NO_HISTORY)

    @property
    def is_numeric(self) -> bool:
        return self.kind == RemainingKind.NUMERIC


class ConsumptionSample(BaseModel):
    """OUT volume over a trailing window ending on window_end (inclusive)."""

    model_config = ConfigDict(frozen=True)

    item_id: str
    subject_id: str | None = None
    window_days: int
    window_start: date
    window_end: date
    total_out: int = 0

    @property
    def daily_rate(self) -> float:
        """Average daily consumption; quiet days count toward the denominator."""
        return self.total_out / self.window_days


class ForecastResult(BaseModel):
    """Projected exhaustion of one (item, subject) stock pool."""

    item_id: str
    subject_id: str | None = None
    as_of: date
    current_balance: int
    daily_rate: float
    days_remaining: DaysRemaining
    days_without_stock: int | None = None
    projected_exhaustion_date: date | None = None
    urgency_tier: UrgencyTier

    @property
    def exhaustion_label(self) -> str:
        """ISO exhaustion date, or a textual sentinel when there is none."""
        if self.projected_exhaustion_date is not None:
            return self.projected_exhaustion_date.isoformat()
        if self.urgency_tier == UrgencyTier.DEPLETED:
            return "depleted"
        if self.days_remaining.kind == RemainingKind.UNBOUNDED:
            return "indeterminate"
        if self.days_remaining.kind == RemainingKind.NUMERIC:
            return "beyond calendar"
        return "no history"
