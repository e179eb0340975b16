"""Tests for SQLiteMovementStore."""

import sqlite3
from datetime import date

import aiosqlite
import pytest

from carestock.core.entities import MovementDirection, MovementEvent, MovementFilter, SubjectScope
from carestock.core.exceptions import (
    DatabaseError,
    DuplicateMovementError,
    InsufficientStockError,
    InvalidMovementError,
)
from carestock.infrastructure.storage.sqlite.movement_store import SQLiteMovementStore


def _event(direction: str, quantity: int, day: int = 1, **kwargs) -> MovementEvent:
    return MovementEvent(
        movement_date=date(2024, 6, day),
        direction=MovementDirection(direction),
        item_id=kwargs.pop("item_id", "gauze"),
        quantity=quantity,
        **kwargs,
    )


class TestAppend:
    async def test_append_assigns_id(self, initialized_db):
        store = SQLiteMovementStore()
        saved = await store.append(_event("IN", 10))
        assert saved.id
        assert await store.balance("gauze") == 10

    async def test_duplicate_id(self, initialized_db):
        store = SQLiteMovementStore()
        await store.append(_event("IN", 10, id="m1"))
        with pytest.raises(DuplicateMovementError):
            await store.append(_event("IN", 10, id="m1"))

    async def test_invalid_quantity(self, initialized_db):
        store = SQLiteMovementStore()
        with pytest.raises(InvalidMovementError):
            await store.append(_event("IN", 0))

    async def test_guard_rejects_overdraw(self, initialized_db):
        store = SQLiteMovementStore()
        await store.append(_event("IN", 5, subject_id="r1"))
        with pytest.raises(InsufficientStockError) as exc_info:
            await store.append(_event("OUT", 6, subject_id="r1"), enforce_available=True)
        assert exc_info.value.details["available"] == 5
        assert await store.balance("gauze", "r1") == 5

    async def test_unguarded_overdraw_allowed(self, initialized_db):
        store = SQLiteMovementStore()
        await store.append(_event("OUT", 3))
        assert await store.balance("gauze") == -3

    async def test_locked_database_retried(self, initialized_db, monkeypatch):
        store = SQLiteMovementStore()
        original = store._insert
        calls = []

        async def flaky(event, enforce_available):
            calls.append(1)
            if len(calls) == 1:
                raise sqlite3.OperationalError("database is locked")
            await original(event, enforce_available)

        monkeypatch.setattr(store, "_insert", flaky)
        await store.append(_event("IN", 4))
        assert len(calls) == 2
        assert await store.balance("gauze") == 4

    async def test_persistent_lock_becomes_database_error(self, initialized_db, monkeypatch):
        store = SQLiteMovementStore()

        async def locked(event, enforce_available):
            raise aiosqlite.OperationalError("database is locked")

        monkeypatch.setattr(store, "_insert", locked)
        with pytest.raises(DatabaseError):
            await store.append(_event("IN", 4))


class TestQueries:
    async def test_pools_are_separate(self, initialized_db):
        store = SQLiteMovementStore()
        await store.append(_event("IN", 100))
        await store.append(_event("IN", 5, subject_id="r1"))
        await store.append(_event("OUT", 2, subject_id="r1"))
        assert await store.balance("gauze") == 100
        assert await store.balance("gauze", "r1") == 3
        assert await store.balance("unknown") == 0

    async def test_list_movements_newest_first(self, initialized_db):
        store = SQLiteMovementStore()
        await store.append(_event("IN", 1, day=1, id="a"))
        await store.append(_event("IN", 1, day=3, id="b"))
        await store.append(_event("IN", 1, day=3, id="c"))
        movements = await store.list_movements(MovementFilter(item_id="gauze"))
        assert [m.id for m in movements] == ["c", "b", "a"]

    async def test_list_movements_filters(self, initialized_db):
        store = SQLiteMovementStore()
        await store.append(_event("IN", 10, day=1))
        await store.append(_event("OUT", 2, day=5))
        await store.append(_event("OUT", 1, day=5, subject_id="r1"))
        await store.append(_event("OUT", 1, day=9))

        result = await store.list_movements(
            MovementFilter(
                subject_scope=SubjectScope.FACILITY,
                direction=MovementDirection.OUT,
                date_from=date(2024, 6, 2),
                date_to=date(2024, 6, 8),
            )
        )
        assert [(m.quantity, m.subject_id) for m in result] == [(2, None)]

        personal = await store.list_movements(
            MovementFilter(subject_scope=SubjectScope.SUBJECT, subject_id="r1")
        )
        assert len(personal) == 1

    async def test_list_movements_pagination(self, initialized_db):
        store = SQLiteMovementStore()
        for day in range(1, 6):
            await store.append(_event("IN", day, day=day))
        page = await store.list_movements(MovementFilter(), limit=2, offset=2)
        assert [m.quantity for m in page] == [3, 2]

    async def test_load_events_in_append_order(self, initialized_db):
        store = SQLiteMovementStore()
        await store.append(_event("IN", 1, day=9, id="first"))
        await store.append(_event("IN", 1, day=1, id="second"))
        events = await store.load_events()
        assert [e.id for e in events] == ["first", "second"]
        assert events[0].movement_date == date(2024, 6, 9)


class TestAppendOnlyGuards:
    async def test_update_and_delete_rejected(self, initialized_db):
        store = SQLiteMovementStore()
        await store.append(_event("IN", 10, id="m1"))

        async with aiosqlite.connect(initialized_db) as conn:
            with pytest.raises(sqlite3.IntegrityError):
                await conn.execute("UPDATE movements SET quantity = 1 WHERE id = 'm1'")
            with pytest.raises(sqlite3.IntegrityError):
                await conn.execute("DELETE FROM movements WHERE id = 'm1'")

        assert await store.balance("gauze") == 10
