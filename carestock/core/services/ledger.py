"""
Append-only movement ledger.

The ledger is the single source of truth for stock. Balances, forecasts
and alerts are derived from immutable snapshots of it on demand.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from datetime import date
from typing import Any
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError

from carestock.config import get_logger
from carestock.core.entities.movement import (
    MovementDirection,
    MovementEvent,
    MovementFilter,
)
from carestock.core.exceptions import (
    DuplicateMovementError,
    InvalidMovementError,
    ValidationError,
)
from carestock.core.interfaces.ledger import ILedger, ILedgerReader

logger = get_logger(__name__)


def validate_movement(event: MovementEvent) -> None:
    """
    Check append-time invariants of a movement event.

    Raises:
        InvalidMovementError: If quantity is not positive or the direction
            is not IN or OUT.
    """
    if not isinstance(event.direction, MovementDirection):
        raise InvalidMovementError("direction", "Direction must be IN or OUT", event.direction)
    if isinstance(event.quantity, bool) or not isinstance(event.quantity, int):
        raise InvalidMovementError("quantity", "Quantity must be an integer", event.quantity)
    if event.quantity <= 0:
        raise InvalidMovementError("quantity", "Quantity must be positive", event.quantity)
    if not event.item_id:
        raise InvalidMovementError("item_id", "Item id is required", event.item_id)


def build_movement(
    *,
    movement_date: date | str,
    direction: MovementDirection | str,
    item_id: str,
    quantity: int,
    subject_id: str | None = None,
    note: str = "",
    event_id: str | None = None,
) -> MovementEvent:
    """
    Build a validated movement event from raw field values.

    Raises:
        ValidationError: If any field is malformed. Pydantic errors are
            translated so callers only see domain errors.
    """
    if isinstance(direction, str) and direction not in {d.value for d in MovementDirection}:
        raise InvalidMovementError("direction", "Direction must be IN or OUT", direction)

    try:
        event = MovementEvent(
            id=event_id,
            movement_date=movement_date,
            direction=direction,
            item_id=item_id,
            subject_id=subject_id or None,
            quantity=quantity,
            note=note,
        )
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or "movement"
        raise ValidationError(field, first.get("msg", "Invalid value"), first.get("input")) from e

    validate_movement(event)
    return event


class LedgerSnapshot(ILedgerReader):
    """
    Immutable view of the ledger at one point in its history.

    Every derivation within a single query runs against one snapshot, so
    a concurrent append can never be half-observed. Balances are memoised
    per snapshot.
    """

    def __init__(self, events: Iterable[MovementEvent] = ()) -> None:
        self._events: tuple[MovementEvent, ...] = tuple(events)
        self._balance_cache: dict[tuple[str, str | None, date | None], int] = {}
        self._lock = threading.Lock()

    @property
    def events(self) -> tuple[MovementEvent, ...]:
        return self._events

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self):
        return iter(self._events)

    def query(self, movement_filter: MovementFilter) -> list[MovementEvent]:
        return [e for e in self._events if movement_filter.matches(e)]

    def item_ids(self) -> list[str]:
        """Distinct item ids in first-appearance order."""
        return list(dict.fromkeys(e.item_id for e in self._events))

    def subject_ids(self, item_id: str | None = None) -> list[str]:
        """Distinct subject ids, optionally restricted to one item."""
        return list(
            dict.fromkeys(
                e.subject_id
                for e in self._events
                if e.subject_id is not None and (item_id is None or e.item_id == item_id)
            )
        )

    def cached_balance(
        self,
        key: tuple[str, str | None, date | None],
        compute: Any,
    ) -> int:
        """Return the memoised balance for key, computing it once."""
        with self._lock:
            if key in self._balance_cache:
                return self._balance_cache[key]
        value = compute()
        with self._lock:
            self._balance_cache[key] = value
        return value


class Ledger(ILedger):
    """
    In-process append-only ledger.

    Appends are atomic under a lock. The current snapshot is rebuilt
    lazily after each append.
    """

    def __init__(self, events: Iterable[MovementEvent] = ()) -> None:
        self._events: list[MovementEvent] = []
        self._ids: set[str] = set()
        self._lock = threading.Lock()
        self._snapshot: LedgerSnapshot | None = None
        for event in events:
            self.append(event)

    def append(self, event: MovementEvent) -> str:
        """
        Validate and record an event.

        Args:
            event: Movement to record. A missing id is assigned here.

        Returns:
            The event id.

        Raises:
            InvalidMovementError: If the event violates an invariant.
            DuplicateMovementError: If the id is already recorded.
        """
        validate_movement(event)

        with self._lock:
            if event.id is None:
                event = event.model_copy(update={"id": uuid4().hex})
            elif event.id in self._ids:
                raise DuplicateMovementError(event.id)

            self._events.append(event)
            self._ids.add(event.id)
            self._snapshot = None

        logger.debug(
            "movement_appended",
            event_id=event.id,
            item_id=event.item_id,
            subject_id=event.subject_id,
            direction=event.direction.value,
            quantity=event.quantity,
        )
        return event.id

    def query(self, movement_filter: MovementFilter) -> list[MovementEvent]:
        return self.snapshot().query(movement_filter)

    def snapshot(self) -> LedgerSnapshot:
        with self._lock:
            if self._snapshot is None:
                self._snapshot = LedgerSnapshot(self._events)
            return self._snapshot

    def __len__(self) -> int:
        return len(self._events)
