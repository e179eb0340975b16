"""Consumption velocity over a trailing window."""

from datetime import date, timedelta

from carestock.core.entities.forecast import ConsumptionSample
from carestock.core.entities.movement import MovementDirection, MovementFilter
from carestock.core.exceptions import ValidationError
from carestock.core.interfaces.ledger import ILedgerReader

DEFAULT_WINDOW_DAYS = 30


class ConsumptionEstimator:
    """Average daily OUT volume of a stock pool."""

    def __init__(self, reader: ILedgerReader, window_days: int = DEFAULT_WINDOW_DAYS) -> None:
        self._reader = reader
        self._window_days = window_days

    def sample(
        self,
        item_id: str,
        subject_id: str | None = None,
        *,
        as_of: date,
        window_days: int | None = None,
    ) -> ConsumptionSample:
        """
        Sum OUT quantities dated within [as_of - window_days, as_of].

        Raises:
            ValidationError: If window_days is lower than 1.
        """
        window = self._window_days if window_days is None else window_days
        if isinstance(window, bool) or not isinstance(window, int) or window < 1:
            raise ValidationError("window_days", "Window must be at least one day", window)

        window_start = as_of - timedelta(days=window)
        events = self._reader.query(
            MovementFilter.for_pair(
                item_id,
                subject_id,
                date_from=window_start,
                date_to=as_of,
                direction=MovementDirection.OUT,
            )
        )
        return ConsumptionSample(
            item_id=item_id,
            subject_id=subject_id,
            window_days=window,
            window_start=window_start,
            window_end=as_of,
            total_out=sum(e.quantity for e in events),
        )

    def estimate_daily_rate(
        self,
        item_id: str,
        subject_id: str | None = None,
        *,
        as_of: date,
        window_days: int | None = None,
    ) -> float:
        """Total OUT in the window divided by its length in days."""
        return self.sample(item_id, subject_id, as_of=as_of, window_days=window_days).daily_rate
