"""
Depletion forecasting.

Projects when a stock pool runs out from its balance and recent
consumption velocity, and classifies the result into an urgency tier.
"""

from datetime import date, timedelta

from carestock.config import get_logger
from carestock.config.settings import ForecastSettings
from carestock.core.entities.forecast import DaysRemaining, ForecastResult, UrgencyTier
from carestock.core.entities.movement import MovementDirection, MovementFilter
from carestock.core.interfaces.ledger import ILedgerReader
from carestock.core.services.balance_calculator import BalanceCalculator
from carestock.core.services.consumption_estimator import ConsumptionEstimator

logger = get_logger(__name__)


class DepletionForecaster:
    """
    Forecasts exhaustion of (item, subject) stock pools.

    Rules, first match wins:
        1. No events for the pool: UNKNOWN, no history.
        2. Balance <= 0: DEPLETED.
        3. Positive balance, zero consumption: UNKNOWN, unbounded.
        4. Otherwise days = floor(balance / rate), tiered by thresholds.

    Unknown pools never raise.
    """

    def __init__(
        self,
        reader: ILedgerReader,
        settings: ForecastSettings | None = None,
    ) -> None:
        self._reader = reader
        self._settings = settings or ForecastSettings()
        self._balances = BalanceCalculator(reader)
        self._consumption = ConsumptionEstimator(reader, self._settings.window_days)

    def classify(self, days: int) -> UrgencyTier:
        """Map numeric days remaining to a tier. Boundaries are inclusive."""
        if days <= self._settings.critical_days:
            return UrgencyTier.CRITICAL
        if days <= self._settings.warning_days:
            return UrgencyTier.WARNING
        return UrgencyTier.SAFE

    def forecast(
        self,
        item_id: str,
        subject_id: str | None = None,
        *,
        as_of: date,
    ) -> ForecastResult:
        """
        Forecast one stock pool as of a date.

        Args:
            item_id: Catalog item id.
            subject_id: Personal pool owner, or None for facility stock.
            as_of: Evaluation date. Events after it are ignored.

        Returns:
            ForecastResult with tier, days remaining and exhaustion date.
        """
        history = self._reader.query(MovementFilter.for_pair(item_id, subject_id, date_to=as_of))
        if not history:
            return ForecastResult(
                item_id=item_id,
                subject_id=subject_id,
                as_of=as_of,
                current_balance=0,
                daily_rate=0.0,
                days_remaining=DaysRemaining.no_history(),
                urgency_tier=UrgencyTier.UNKNOWN,
            )

        balance = self._balances.balance_of(item_id, subject_id, as_of)
        sample = self._consumption.sample(item_id, subject_id, as_of=as_of)
        rate = sample.daily_rate

        if balance <= 0:
            result = self._depleted(item_id, subject_id, as_of, balance, sample, history)
        elif sample.total_out == 0:
            result = ForecastResult(
                item_id=item_id,
                subject_id=subject_id,
                as_of=as_of,
                current_balance=balance,
                daily_rate=0.0,
                days_remaining=DaysRemaining.unbounded(),
                urgency_tier=UrgencyTier.UNKNOWN,
            )
        else:
            # floor(balance / rate) in integer arithmetic
            days = (balance * sample.window_days) // sample.total_out
            # No exhaustion date past the end of the calendar
            exhaustion = None
            if days <= (date.max - as_of).days:
                exhaustion = as_of + timedelta(days=days)
            result = ForecastResult(
                item_id=item_id,
                subject_id=subject_id,
                as_of=as_of,
                current_balance=balance,
                daily_rate=rate,
                days_remaining=DaysRemaining.numeric(days),
                projected_exhaustion_date=exhaustion,
                urgency_tier=self.classify(days),
            )

        logger.debug(
            "forecast_computed",
            item_id=item_id,
            subject_id=subject_id,
            balance=result.current_balance,
            tier=result.urgency_tier.value,
        )
        return result

    def _depleted(self, item_id, subject_id, as_of, balance, sample, history) -> ForecastResult:
        """Build a DEPLETED result, estimating how long the pool has been empty."""
        # Latest-dated IN; same-day ties go to the later append
        last_in = None
        for event in history:
            if event.direction == MovementDirection.IN and (
                last_in is None or event.movement_date >= last_in.movement_date
            ):
                last_in = event

        days_without_stock = None
        if last_in is None:
            days_remaining = DaysRemaining.no_history()
        else:
            days_remaining = DaysRemaining.numeric(0)
            if sample.total_out > 0:
                lasted = (last_in.quantity * sample.window_days) // sample.total_out
                elapsed = (as_of - last_in.movement_date).days
                days_without_stock = max(0, elapsed - lasted)

        return ForecastResult(
            item_id=item_id,
            subject_id=subject_id,
            as_of=as_of,
            current_balance=balance,
            daily_rate=sample.daily_rate,
            days_remaining=days_remaining,
            days_without_stock=days_without_stock,
            urgency_tier=UrgencyTier.DEPLETED,
        )

    def forecast_many(
        self,
        pairs: list[tuple[str, str | None]],
        *,
        as_of: date,
    ) -> list[ForecastResult]:
        """Forecast several pools, most urgent first."""
        results = [self.forecast(item_id, subject_id, as_of=as_of) for item_id, subject_id in pairs]
        return sorted(results, key=urgency_sort_key)


def urgency_sort_key(result: ForecastResult) -> tuple:
    """Sort key: higher tier first, then fewer days remaining, then item id."""
    days = result.days_remaining.days if result.days_remaining.is_numeric else float("inf")
    return (-result.urgency_tier.rank, days, result.item_id, result.subject_id or "")
