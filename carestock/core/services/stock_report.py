"""
Stock reporting.

Read-only views over the ledger, catalog and forecasts: facility
inventory flow, personal inventories and consumption by category.
"""

from __future__ import annotations

from datetime import date, timedelta
from enum import Enum

from pydantic import BaseModel

from carestock.config import get_logger
from carestock.config.settings import AlertSettings, ForecastSettings
from carestock.core.entities.forecast import ForecastResult, UrgencyTier
from carestock.core.entities.movement import MovementDirection, MovementFilter, SubjectScope
from carestock.core.exceptions import ValidationError
from carestock.core.interfaces.catalog import ICatalog
from carestock.core.services.balance_calculator import BalanceCalculator
from carestock.core.services.consumption_estimator import ConsumptionEstimator
from carestock.core.services.depletion_forecaster import DepletionForecaster
from carestock.core.services.ledger import LedgerSnapshot

logger = get_logger(__name__)


class StockStatus(str, Enum):
    """Facility stock level relative to the reorder point."""

    OK = "OK"
    LOW = "LOW"
    DEPLETED = "DEPLETED"


class InventoryFlowRow(BaseModel):
    """One facility item in the inventory flow report."""

    item_id: str
    item_name: str
    category: str = ""
    unit: str = "unit"
    current_balance: int
    minimum_threshold: int = 0
    total_in: int
    total_out: int
    recent_out: int
    daily_rate: float
    days_left: int | None = None
    held_by_subjects: int = 0
    status: StockStatus


class PersonalHolding(BaseModel):
    """Positive personal balance of one item held by a subject."""

    item_id: str
    item_name: str
    unit: str = "unit"
    balance: int


class CategoryConsumption(BaseModel):
    """OUT volume of one catalog category over a window."""

    category: str
    total_out: int
    item_count: int


def stock_status(balance: int, minimum_threshold: int) -> StockStatus:
    if balance <= 0:
        return StockStatus.DEPLETED
    if balance <= minimum_threshold:
        return StockStatus.LOW
    return StockStatus.OK


class StockReportService:
    """Builds reports from one ledger snapshot and the catalog."""

    def __init__(
        self,
        snapshot: LedgerSnapshot,
        catalog: ICatalog,
        forecast_settings: ForecastSettings | None = None,
        alert_settings: AlertSettings | None = None,
    ) -> None:
        self._snapshot = snapshot
        self._catalog = catalog
        self._forecast_settings = forecast_settings or ForecastSettings()
        self._alert_settings = alert_settings or AlertSettings()
        self._balances = BalanceCalculator(snapshot)
        self._consumption = ConsumptionEstimator(snapshot, self._forecast_settings.window_days)
        self._forecaster = DepletionForecaster(snapshot, self._forecast_settings)

    def _item_label(self, item_id: str) -> tuple[str, str, str]:
        item = self._catalog.get_item(item_id)
        if item is None:
            return self._alert_settings.unknown_item_label, "", "unit"
        return item.name, item.category, item.unit

    def inventory_flow(self, as_of: date, category: str | None = None) -> list[InventoryFlowRow]:
        """
        Facility stock movement summary per catalog item.

        Rows are sorted by recent consumption, highest first.
        """
        rows: list[InventoryFlowRow] = []
        for item in self._catalog.list_items():
            if category is not None and item.category != category:
                continue

            events = self._snapshot.query(
                MovementFilter.for_pair(item.id, None, date_to=as_of)
            )
            total_in = sum(e.quantity for e in events if e.direction == MovementDirection.IN)
            total_out = sum(e.quantity for e in events if e.direction == MovementDirection.OUT)
            balance = total_in - total_out

            sample = self._consumption.sample(item.id, None, as_of=as_of)
            forecast = self._forecaster.forecast(item.id, None, as_of=as_of)
            days_left = None
            if forecast.urgency_tier == UrgencyTier.DEPLETED:
                days_left = 0
            elif forecast.days_remaining.is_numeric:
                days_left = forecast.days_remaining.days

            rows.append(
                InventoryFlowRow(
                    item_id=item.id,
                    item_name=item.name,
                    category=item.category,
                    unit=item.unit,
                    current_balance=balance,
                    minimum_threshold=item.minimum_threshold,
                    total_in=total_in,
                    total_out=total_out,
                    recent_out=sample.total_out,
                    daily_rate=sample.daily_rate,
                    days_left=days_left,
                    held_by_subjects=self._balances.total_across_subjects(item.id, as_of),
                    status=stock_status(balance, item.minimum_threshold),
                )
            )

        rows.sort(key=lambda r: (-r.recent_out, r.item_name, r.item_id))
        return rows

    def personal_inventory(self, subject_id: str, as_of: date | None = None) -> list[PersonalHolding]:
        """Items with a positive personal balance for one subject."""
        events = self._snapshot.query(
            MovementFilter(subject_scope=SubjectScope.SUBJECT, subject_id=subject_id, date_to=as_of)
        )
        holdings: list[PersonalHolding] = []
        for item_id in dict.fromkeys(e.item_id for e in events):
            balance = self._balances.balance_of(item_id, subject_id, as_of)
            if balance <= 0:
                continue
            name, _, unit = self._item_label(item_id)
            holdings.append(
                PersonalHolding(item_id=item_id, item_name=name, unit=unit, balance=balance)
            )
        holdings.sort(key=lambda h: (h.item_name, h.item_id))
        return holdings

    def subject_forecasts(self, as_of: date, item_id: str | None = None) -> list[ForecastResult]:
        """Forecast every personal pool, most urgent first."""
        pairs = [
            (pair_item, subject_id)
            for pair_item in self._snapshot.item_ids()
            if item_id is None or pair_item == item_id
            for subject_id in self._snapshot.subject_ids(pair_item)
        ]
        return self._forecaster.forecast_many(pairs, as_of=as_of)

    def consumption_by_category(
        self,
        as_of: date,
        window_days: int | None = None,
    ) -> list[CategoryConsumption]:
        """
        Facility and personal OUT volume per category within the window.

        Items missing from the catalog are grouped under the unknown label.
        """
        window = self._forecast_settings.window_days if window_days is None else window_days
        if window < 1:
            raise ValidationError("window_days", "Window must be at least one day", window)

        events = self._snapshot.query(
            MovementFilter(
                date_from=as_of - timedelta(days=window),
                date_to=as_of,
                direction=MovementDirection.OUT,
            )
        )

        totals: dict[str, int] = {}
        items: dict[str, set[str]] = {}
        for event in events:
            item = self._catalog.get_item(event.item_id)
            category = (item.category or "Uncategorized") if item else self._alert_settings.unknown_item_label
            totals[category] = totals.get(category, 0) + event.quantity
            items.setdefault(category, set()).add(event.item_id)

        result = [
            CategoryConsumption(category=name, total_out=total, item_count=len(items[name]))
            for name, total in totals.items()
        ]
        result.sort(key=lambda c: (-c.total_out, c.category))
        logger.debug("category_consumption_computed", categories=len(result), window_days=window)
        return result


__all__ = [
    "CategoryConsumption",
    "InventoryFlowRow",
    "PersonalHolding",
    "StockReportService",
    "StockStatus",
    "stock_status",
]
