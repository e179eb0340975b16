"""Pytest configuration and shared fixtures."""

from collections.abc import Callable
from datetime import date, timedelta

import pytest

from carestock.core.entities import Item, MovementDirection, MovementEvent, SubjectInfo
from carestock.core.services import Ledger


@pytest.fixture
def as_of() -> date:
    """Fixed evaluation date; nothing in the tests reads the clock."""
    return date(2024, 6, 30)


@pytest.fixture
def movement(as_of: date) -> Callable[..., MovementEvent]:
    """Factory for movement events dated relative to as_of."""

    def _make(
        direction: str,
        quantity: int,
        item_id: str = "gauze",
        subject_id: str | None = None,
        days_ago: int = 0,
        event_id: str | None = None,
    ) -> MovementEvent:
        return MovementEvent(
            id=event_id,
            movement_date=as_of - timedelta(days=days_ago),
            direction=MovementDirection(direction),
            item_id=item_id,
            subject_id=subject_id,
            quantity=quantity,
        )

    return _make


@pytest.fixture
def ledger() -> Ledger:
    return Ledger()


@pytest.fixture
def gauze_ledger(ledger: Ledger, movement) -> Ledger:
    """
    Facility gauze: 350 received 40 days ago, 300 issued over the last
    30 days (10 per day), balance 50.
    """
    ledger.append(movement("IN", 350, days_ago=40))
    for day in range(1, 31):
        ledger.append(movement("OUT", 10, days_ago=day))
    return ledger


@pytest.fixture
def sample_items() -> list[Item]:
    return [
        Item(id="gauze", name="Gauze", category="Wound care", unit="pack", minimum_threshold=100),
        Item(id="gloves", name="Gloves", category="Protection", unit="box", minimum_threshold=10),
        Item(id="diapers", name="Diapers", category="Hygiene", unit="unit", minimum_threshold=20),
    ]


@pytest.fixture
def sample_subjects() -> list[SubjectInfo]:
    return [
        SubjectInfo(id="r1", display_name="Maria Silva"),
        SubjectInfo(id="r2", display_name="Joao Souza", is_active=False),
    ]
