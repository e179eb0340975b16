"""Tests for the append-only ledger and its snapshots."""

from concurrent.futures import ThreadPoolExecutor
from datetime import date

import pytest

from carestock.core.entities import MovementDirection, MovementEvent, MovementFilter
from carestock.core.exceptions import DuplicateMovementError, InvalidMovementError, ValidationError
from carestock.core.services import (
    BalanceCalculator,
    Ledger,
    LedgerSnapshot,
    build_movement,
    validate_movement,
)


class TestLedgerAppend:
    def test_append_assigns_id(self, ledger, movement):
        event_id = ledger.append(movement("IN", 10))
        assert event_id
        assert ledger.snapshot().events[0].id == event_id

    def test_append_keeps_given_id(self, ledger, movement):
        assert ledger.append(movement("IN", 10, event_id="m1")) == "m1"

    def test_duplicate_id_rejected(self, ledger, movement):
        ledger.append(movement("IN", 10, event_id="m1"))
        with pytest.raises(DuplicateMovementError):
            ledger.append(movement("OUT", 2, event_id="m1"))
        assert len(ledger) == 1

    @pytest.mark.parametrize("quantity", [0, -5])
    def test_non_positive_quantity_rejected(self, ledger, movement, quantity):
        with pytest.raises(InvalidMovementError):
            ledger.append(movement("IN", quantity))
        assert len(ledger) == 0

    def test_empty_item_rejected(self, ledger, movement):
        with pytest.raises(InvalidMovementError):
            ledger.append(movement("IN", 1, item_id=""))

    def test_orphan_references_accepted(self, ledger, movement):
        ledger.append(movement("IN", 5, item_id="never-cataloged", subject_id="ghost"))
        assert len(ledger) == 1


class TestLedgerSnapshot:
    def test_snapshot_is_not_affected_by_later_appends(self, ledger, movement):
        ledger.append(movement("IN", 10))
        before = ledger.snapshot()
        ledger.append(movement("OUT", 3))
        assert len(before) == 1
        assert len(ledger.snapshot()) == 2

    def test_snapshot_reused_until_append(self, ledger, movement):
        ledger.append(movement("IN", 10))
        assert ledger.snapshot() is ledger.snapshot()

    def test_query_preserves_append_order(self, ledger, movement):
        ledger.append(movement("IN", 10, days_ago=1, event_id="a"))
        ledger.append(movement("IN", 5, days_ago=3, event_id="b"))
        ids = [e.id for e in ledger.query(MovementFilter(item_id="gauze"))]
        assert ids == ["a", "b"]

    def test_item_and_subject_ids(self, movement):
        snapshot = LedgerSnapshot([
            movement("IN", 1, item_id="gauze"),
            movement("IN", 1, item_id="gloves", subject_id="r1"),
            movement("IN", 1, item_id="gauze", subject_id="r2"),
            movement("IN", 1, item_id="gauze", subject_id="r1"),
        ])
        assert snapshot.item_ids() == ["gauze", "gloves"]
        assert snapshot.subject_ids() == ["r1", "r2"]
        assert snapshot.subject_ids("gauze") == ["r2", "r1"]

    def test_cached_balance_computes_once(self):
        snapshot = LedgerSnapshot()
        calls = []

        def compute():
            calls.append(1)
            return 42

        assert snapshot.cached_balance(("gauze", None, None), compute) == 42
        assert snapshot.cached_balance(("gauze", None, None), compute) == 42
        assert len(calls) == 1


class TestBuildMovement:
    def test_builds_from_strings(self):
        event = build_movement(
            movement_date="2024-06-01", direction="OUT", item_id="gauze", quantity=3
        )
        assert event.movement_date == date(2024, 6, 1)
        assert event.direction == MovementDirection.OUT

    def test_blank_subject_is_facility(self):
        event = build_movement(
            movement_date=date(2024, 6, 1), direction="IN", item_id="gauze", quantity=3, subject_id=""
        )
        assert event.subject_id is None

    def test_unknown_direction(self):
        with pytest.raises(InvalidMovementError):
            build_movement(movement_date="2024-06-01", direction="SIDEWAYS", item_id="gauze", quantity=3)

    def test_bad_date(self):
        with pytest.raises(ValidationError):
            build_movement(movement_date="yesterday", direction="IN", item_id="gauze", quantity=3)

    def test_zero_quantity(self):
        with pytest.raises(InvalidMovementError):
            build_movement(movement_date="2024-06-01", direction="IN", item_id="gauze", quantity=0)


def test_validate_movement_accepts_valid_event():
    validate_movement(
        MovementEvent(
            movement_date=date(2024, 6, 1),
            direction=MovementDirection.IN,
            item_id="gauze",
            quantity=1,
        )
    )


class TestConcurrentAppends:
    def test_no_append_lost(self, ledger, movement):
        def receive(n: int) -> str:
            subject_id = f"r{n % 4}"
            ledger.append(movement("IN", 3, subject_id=subject_id, days_ago=n % 10))
            return ledger.append(movement("OUT", 1, subject_id=subject_id, days_ago=n % 10))

        with ThreadPoolExecutor(max_workers=8) as pool:
            ids = list(pool.map(receive, range(200)))

        assert len(ledger) == 400
        assert len(set(ids)) == 200
        calculator = BalanceCalculator(ledger.snapshot())
        assert [calculator.balance_of("gauze", f"r{s}") for s in range(4)] == [100, 100, 100, 100]
        assert calculator.total_across_subjects("gauze") == 400

    def test_snapshots_taken_during_appends_reconcile(self, ledger, movement):
        def receive(n: int) -> None:
            ledger.append(movement("IN", 1, days_ago=n % 5))

        def observe(_: int) -> tuple[int, int]:
            snapshot = ledger.snapshot()
            return len(snapshot), BalanceCalculator(snapshot).balance_of("gauze")

        with ThreadPoolExecutor(max_workers=8) as pool:
            writes = [pool.submit(receive, n) for n in range(300)]
            reads = [pool.submit(observe, n) for n in range(100)]
            for future in writes:
                future.result()
            observations = [future.result() for future in reads]

        # Every snapshot is internally consistent: one unit per event
        assert all(count == balance for count, balance in observations)
        assert BalanceCalculator(ledger.snapshot()).balance_of("gauze") == 300
