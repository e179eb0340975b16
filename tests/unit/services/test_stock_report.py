"""Tests for StockReportService."""

import pytest

from carestock.core.entities import Item, UrgencyTier
from carestock.core.exceptions import ValidationError
from carestock.core.services import (
    DepletionForecaster,
    Ledger,
    StockReportService,
    StockStatus,
    stock_status,
)
from carestock.infrastructure.memory import InMemoryCatalog


@pytest.fixture
def report_ledger(movement) -> Ledger:
    return Ledger([
        movement("IN", 350, item_id="gauze", days_ago=40),
        movement("OUT", 300, item_id="gauze", days_ago=5),
        movement("IN", 5, item_id="gloves", days_ago=10),
        movement("OUT", 5, item_id="gloves", days_ago=2),
        movement("IN", 40, item_id="diapers", days_ago=10),
        movement("OUT", 5, item_id="diapers", days_ago=45),
        movement("IN", 6, item_id="diapers", subject_id="r1", days_ago=10),
        movement("OUT", 2, item_id="diapers", subject_id="r1", days_ago=1),
        movement("IN", 1, item_id="gloves", subject_id="r1", days_ago=10),
        movement("OUT", 1, item_id="gloves", subject_id="r1", days_ago=3),
        movement("OUT", 4, item_id="mystery", days_ago=1),
    ])


@pytest.fixture
def service(report_ledger, sample_items) -> StockReportService:
    return StockReportService(report_ledger.snapshot(), InMemoryCatalog(sample_items))


class TestStockStatus:
    def test_levels(self):
        assert stock_status(0, 10) == StockStatus.DEPLETED
        assert stock_status(10, 10) == StockStatus.LOW
        assert stock_status(11, 10) == StockStatus.OK


class TestInventoryFlow:
    def test_rows_sorted_by_recent_consumption(self, service, as_of):
        rows = service.inventory_flow(as_of)
        assert [r.item_id for r in rows] == ["gauze", "gloves", "diapers"]

    def test_gauze_row(self, service, as_of):
        row = next(r for r in service.inventory_flow(as_of) if r.item_id == "gauze")
        assert row.current_balance == 50
        assert row.total_in == 350
        assert row.total_out == 300
        assert row.recent_out == 300
        assert row.days_left == 5
        assert row.status == StockStatus.LOW

    def test_depleted_and_idle_rows(self, service, as_of):
        rows = {r.item_id: r for r in service.inventory_flow(as_of)}
        assert rows["gloves"].status == StockStatus.DEPLETED
        assert rows["gloves"].days_left == 0
        # old consumption only: no projection
        assert rows["diapers"].recent_out == 0
        assert rows["diapers"].days_left is None
        assert rows["diapers"].current_balance == 35

    def test_category_filter(self, service, as_of):
        rows = service.inventory_flow(as_of, category="Hygiene")
        assert [r.item_id for r in rows] == ["diapers"]

    def test_days_left_matches_forecaster(self, report_ledger, service, as_of):
        forecaster = DepletionForecaster(report_ledger.snapshot())
        for row in service.inventory_flow(as_of):
            result = forecaster.forecast(row.item_id, as_of=as_of)
            if result.urgency_tier == UrgencyTier.DEPLETED:
                assert row.days_left == 0
            elif result.days_remaining.is_numeric:
                assert row.days_left == result.days_remaining.days
            else:
                assert row.days_left is None

    def test_never_stocked_item_has_no_projection(self, report_ledger, as_of):
        catalog = InMemoryCatalog([Item(id="masks", name="Masks", minimum_threshold=5)])
        rows = StockReportService(report_ledger.snapshot(), catalog).inventory_flow(as_of)
        assert rows[0].status == StockStatus.DEPLETED
        assert rows[0].days_left is None

    def test_personal_holdings_counted_separately(self, service, as_of):
        rows = {r.item_id: r for r in service.inventory_flow(as_of)}
        assert rows["diapers"].held_by_subjects == 4
        assert rows["diapers"].current_balance == 35
        assert rows["gloves"].held_by_subjects == 0


class TestPersonalInventory:
    def test_positive_holdings_only(self, service, as_of):
        holdings = service.personal_inventory("r1", as_of)
        assert [(h.item_id, h.balance) for h in holdings] == [("diapers", 4)]
        assert holdings[0].item_name == "Diapers"

    def test_unknown_subject_is_empty(self, service, as_of):
        assert service.personal_inventory("nobody", as_of) == []


class TestSubjectForecasts:
    def test_personal_pools_only(self, service, as_of):
        results = service.subject_forecasts(as_of)
        assert {(r.item_id, r.subject_id) for r in results} == {("diapers", "r1"), ("gloves", "r1")}
        assert results[0].urgency_tier == UrgencyTier.DEPLETED

    def test_item_filter(self, service, as_of):
        results = service.subject_forecasts(as_of, item_id="diapers")
        assert [r.item_id for r in results] == ["diapers"]


class TestConsumptionByCategory:
    def test_totals(self, service, as_of):
        totals = {c.category: (c.total_out, c.item_count) for c in service.consumption_by_category(as_of)}
        assert totals == {
            "Wound care": (300, 1),
            "Protection": (6, 1),
            "Unknown item": (4, 1),
            "Hygiene": (2, 1),
        }

    def test_sorted_by_volume(self, service, as_of):
        categories = [c.category for c in service.consumption_by_category(as_of)]
        assert categories[0] == "Wound care"

    def test_window_must_be_positive(self, service, as_of):
        with pytest.raises(ValidationError):
            service.consumption_by_category(as_of, window_days=0)
