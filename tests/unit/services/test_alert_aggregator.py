"""Tests for AlertAggregator."""

from datetime import date, timedelta

import pytest

from carestock.core.entities import (
    AlertCategory,
    AlertSeverity,
    ExpiringEntity,
    ExpiryStatus,
    Item,
    ScheduledEvent,
)
from carestock.core.interfaces.feeds import IExpiringEntityFeed
from carestock.core.services import AlertAggregator, BUCKET_ORDER, Ledger
from carestock.infrastructure.memory import (
    InMemoryCatalog,
    InMemorySubjectRegistry,
    StaticExpiringFeed,
    StaticRecurrenceFeed,
    StaticScheduleFeed,
)


class BrokenFeed(IExpiringEntityFeed):
    name = "broken"

    def list_entities(self):
        raise RuntimeError("feed offline")


@pytest.fixture
def stock_ledger(movement) -> Ledger:
    """gauze depleted, gloves 2 days left, diapers plenty."""
    return Ledger([
        movement("IN", 10, item_id="gauze", days_ago=20),
        movement("OUT", 10, item_id="gauze", days_ago=2),
        movement("IN", 32, item_id="gloves", days_ago=40),
        movement("OUT", 30, item_id="gloves", days_ago=1),
        movement("IN", 500, item_id="diapers", days_ago=40),
        movement("OUT", 30, item_id="diapers", days_ago=1),
    ])


@pytest.fixture
def aggregator_factory(stock_ledger, sample_items, sample_subjects):
    def _make(**kwargs) -> AlertAggregator:
        kwargs.setdefault("catalog", InMemoryCatalog(sample_items))
        kwargs.setdefault("subjects", InMemorySubjectRegistry(sample_subjects))
        return AlertAggregator(stock_ledger.snapshot(), **kwargs)

    return _make


class TestStockAlerts:
    def test_depleted_and_critical_items(self, aggregator_factory, as_of):
        alerts = aggregator_factory().collect_alerts(as_of)
        by_id = {a.id: a for a in alerts}

        assert by_id["stock_gauze"].category == AlertCategory.LOW_STOCK
        assert by_id["stock_gauze"].severity == AlertSeverity.CRITICAL
        assert by_id["forecast_gloves"].category == AlertCategory.DEPLETION_FORECAST
        assert by_id["forecast_gloves"].details["days_remaining"] == 2
        assert "stock_diapers" not in by_id
        assert "forecast_diapers" not in by_id

    def test_item_at_threshold_does_not_alert(self, stock_ledger, as_of):
        catalog = InMemoryCatalog([Item(id="gloves", name="Gloves", minimum_threshold=2)])
        alerts = AlertAggregator(stock_ledger.snapshot(), catalog=catalog).collect_alerts(as_of)
        assert alerts == []

    def test_without_catalog_no_stock_alerts(self, aggregator_factory, as_of):
        assert aggregator_factory(catalog=None).collect_alerts(as_of) == []


class TestExpiryAlerts:
    def test_derived_expiry_overdue(self, aggregator_factory, as_of):
        feed = StaticExpiringFeed([
            ExpiringEntity(
                id="rx1", label="Prescription", issue_date=as_of - timedelta(days=200), subject_ref="r1"
            )
        ])
        alerts = aggregator_factory(catalog=None, expiring_feeds=[feed]).collect_alerts(as_of)

        assert len(alerts) == 1
        alert = alerts[0]
        assert alert.id == "expiry_rx1"
        assert alert.expiry_status == ExpiryStatus.OVERDUE
        assert alert.severity == AlertSeverity.CRITICAL
        assert alert.details["days_left"] == -20
        assert alert.details["derived"] is True
        assert "20 days ago" in alert.message
        assert alert.title == "Expired: Prescription: Maria"

    def test_status_by_days_left(self, aggregator_factory, as_of):
        feed = StaticExpiringFeed([
            {"id": "today", "label": "A", "expiration_date": as_of},
            {"id": "soon", "label": "B", "expiration_date": as_of + timedelta(days=10)},
            {"id": "edge", "label": "C", "expiration_date": as_of + timedelta(days=30)},
            {"id": "far", "label": "D", "expiration_date": as_of + timedelta(days=31)},
        ])
        alerts = aggregator_factory(catalog=None, expiring_feeds=[feed]).collect_alerts(as_of)
        statuses = {a.id: (a.expiry_status, a.severity) for a in alerts}

        assert statuses == {
            "expiry_today": (ExpiryStatus.DUE_TODAY, AlertSeverity.CRITICAL),
            "expiry_soon": (ExpiryStatus.UPCOMING, AlertSeverity.WARNING),
            "expiry_edge": (ExpiryStatus.UPCOMING, AlertSeverity.WARNING),
        }

    def test_sorted_overdue_first_then_by_date(self, aggregator_factory, as_of):
        feed = StaticExpiringFeed([
            {"id": "b", "label": "B", "expiration_date": as_of + timedelta(days=5)},
            {"id": "a", "label": "A", "expiration_date": as_of + timedelta(days=2)},
            {"id": "c", "label": "C", "expiration_date": as_of - timedelta(days=1)},
        ])
        alerts = aggregator_factory(catalog=None, expiring_feeds=[feed]).collect_alerts(as_of)
        assert [a.id for a in alerts] == ["expiry_c", "expiry_a", "expiry_b"]

    def test_unknown_subject_placeholder(self, aggregator_factory, as_of):
        feed = StaticExpiringFeed([
            {"id": "x", "label": "Permit", "expiration_date": as_of, "subject_ref": "ghost"}
        ])
        alerts = aggregator_factory(catalog=None, expiring_feeds=[feed]).collect_alerts(as_of)
        assert alerts[0].title == "Expires today: Permit: Unknown subject"

    def test_record_without_dates_skipped(self, aggregator_factory, as_of):
        feed = StaticExpiringFeed([
            {"id": "bad", "label": "No dates"},
            {"id": "ok", "label": "Fine", "expiration_date": as_of},
        ])
        alerts = aggregator_factory(catalog=None, expiring_feeds=[feed]).collect_alerts(as_of)
        assert [a.id for a in alerts] == ["expiry_ok"]

    def test_expiry_past_calendar_end_skipped(self, aggregator_factory, as_of):
        feed = StaticExpiringFeed([
            {"id": "huge", "label": "Licence", "issue_date": date(2024, 1, 1), "validity_period_days": 5_000_000},
            {"id": "ok", "label": "Fine", "expiration_date": as_of},
        ])
        alerts = aggregator_factory(catalog=None, expiring_feeds=[feed]).collect_alerts(as_of)
        assert [a.id for a in alerts] == ["expiry_ok"]


class TestRecurrenceAndScheduleAlerts:
    def test_recurrence_today(self, aggregator_factory, as_of):
        feed = StaticRecurrenceFeed([
            {"id": "b1", "label": "Birthday", "month": 6, "day": 30, "subject_ref": "r1", "origin_year": 1940},
            {"id": "b2", "label": "Birthday", "month": 7, "day": 1, "subject_ref": "r2"},
        ])
        alerts = aggregator_factory(catalog=None, recurrence_feeds=[feed]).collect_alerts(as_of)

        assert [a.id for a in alerts] == ["recurrence_b1"]
        assert alerts[0].severity == AlertSeverity.INFO
        assert alerts[0].title == "Birthday: Maria"
        assert "(84 years)" in alerts[0].message

    def test_schedule_today_sorted_by_time(self, aggregator_factory, as_of):
        feed = StaticScheduleFeed([
            ScheduledEvent(id="late", label="Physio", event_date=as_of, time="15:00"),
            ScheduledEvent(id="early", label="Dentist", event_date=as_of, time="9:30"),
            ScheduledEvent(id="untimed", label="Visit", event_date=as_of),
            ScheduledEvent(id="cancelled", label="X-ray", event_date=as_of, is_cancelled=True),
            ScheduledEvent(id="tomorrow", label="Lab", event_date=as_of + timedelta(days=1)),
        ])
        alerts = aggregator_factory(catalog=None, schedule_feeds=[feed]).collect_alerts(as_of)

        assert [a.id for a in alerts] == ["schedule_untimed", "schedule_early", "schedule_late"]
        assert alerts[1].time == "09:30"
        assert alerts[0].time is None


class TestAggregation:
    def _full(self, aggregator_factory, as_of) -> AlertAggregator:
        return aggregator_factory(
            expiring_feeds=[StaticExpiringFeed([{"id": "d", "label": "Doc", "expiration_date": as_of}])],
            recurrence_feeds=[
                StaticRecurrenceFeed([{"id": "b", "label": "Birthday", "month": 6, "day": 30}])
            ],
            schedule_feeds=[
                StaticScheduleFeed([{"id": "e", "label": "Dentist", "event_date": as_of.isoformat()}])
            ],
        )

    def test_bucket_order(self, aggregator_factory, as_of):
        alerts = self._full(aggregator_factory, as_of).collect_alerts(as_of)
        categories = [a.category for a in alerts]

        assert categories == [
            AlertCategory.DOCUMENT_EXPIRY,
            AlertCategory.LOW_STOCK,
            AlertCategory.DEPLETION_FORECAST,
            AlertCategory.RECURRING_DATE,
            AlertCategory.SCHEDULED_EVENT,
        ]
        assert tuple(categories) == BUCKET_ORDER

    def test_idempotent(self, aggregator_factory, as_of):
        aggregator = self._full(aggregator_factory, as_of)
        assert aggregator.collect_alerts(as_of) == aggregator.collect_alerts(as_of)

    def test_failing_feed_is_isolated(self, aggregator_factory, as_of):
        good = StaticExpiringFeed([{"id": "d", "label": "Doc", "expiration_date": as_of}])
        alerts = aggregator_factory(expiring_feeds=[BrokenFeed(), good]).collect_alerts(as_of)
        ids = [a.id for a in alerts]
        assert "expiry_d" in ids
        assert "stock_gauze" in ids

    def test_malformed_records_skipped(self, aggregator_factory, as_of):
        feed = StaticScheduleFeed([
            {"id": "bad", "label": "No date"},
            "not a record",
            {"id": "ok", "label": "Dentist", "event_date": as_of},
        ])
        alerts = aggregator_factory(catalog=None, schedule_feeds=[feed]).collect_alerts(as_of)
        assert [a.id for a in alerts] == ["schedule_ok"]

    def test_empty_sources(self, as_of):
        assert AlertAggregator(Ledger()).collect_alerts(as_of) == []

    def test_as_of_drives_evaluation(self, aggregator_factory):
        feed = StaticScheduleFeed([{"id": "e", "label": "Dentist", "event_date": date(2030, 1, 1)}])
        aggregator = aggregator_factory(catalog=None, schedule_feeds=[feed])
        assert aggregator.collect_alerts(date(2030, 1, 1))[0].occurs_on == date(2030, 1, 1)
        assert aggregator.collect_alerts(date(2030, 1, 2)) == []


class TestAlertIds:
    def test_same_record_id_in_two_feeds(self, aggregator_factory, as_of):
        first = StaticExpiringFeed([{"id": "d1", "label": "Permit", "expiration_date": as_of}], name="request")
        second = StaticExpiringFeed([{"id": "d1", "label": "Licence", "expiration_date": as_of}], name="yaml")
        alerts = aggregator_factory(catalog=None, expiring_feeds=[first, second]).collect_alerts(as_of)

        assert sorted(a.id for a in alerts) == ["expiry_d1", "expiry_yaml_d1"]
        assert {a.id: a.title for a in alerts}["expiry_yaml_d1"] == "Expires today: Licence"

    def test_ids_unique_across_schedule_feeds(self, aggregator_factory, as_of):
        feeds = [
            StaticScheduleFeed([{"id": "e1", "label": "Dentist", "event_date": as_of}], name="a"),
            StaticScheduleFeed([{"id": "e1", "label": "Physio", "event_date": as_of}], name="b"),
            StaticScheduleFeed([{"id": "e1", "label": "Lab", "event_date": as_of}], name="b"),
        ]
        alerts = aggregator_factory(catalog=None, schedule_feeds=feeds).collect_alerts(as_of)
        ids = [a.id for a in alerts]

        assert sorted(ids) == ["schedule_b_e1", "schedule_e1"]
        assert len(ids) == len(set(ids))

    def test_repeated_id_within_feed_keeps_first(self, aggregator_factory, as_of):
        feed = StaticRecurrenceFeed([
            {"id": "b1", "label": "Birthday", "month": 6, "day": 30},
            {"id": "b1", "label": "Anniversary", "month": 6, "day": 30},
        ])
        alerts = aggregator_factory(catalog=None, recurrence_feeds=[feed]).collect_alerts(as_of)
        assert [(a.id, a.title) for a in alerts] == [("recurrence_b1", "Birthday")]

    def test_ids_stable_between_runs(self, aggregator_factory, as_of):
        feeds = [
            StaticExpiringFeed([{"id": "d1", "label": "Permit", "expiration_date": as_of}], name="request"),
            StaticExpiringFeed([{"id": "d1", "label": "Licence", "expiration_date": as_of}], name="yaml"),
        ]
        aggregator = aggregator_factory(catalog=None, expiring_feeds=feeds)
        assert [a.id for a in aggregator.collect_alerts(as_of)] == [a.id for a in aggregator.collect_alerts(as_of)]
