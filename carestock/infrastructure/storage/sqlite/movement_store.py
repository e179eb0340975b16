"""SQLite implementation of the append-only movement ledger."""

import sqlite3
from datetime import date
from typing import Any
from uuid import uuid4

import aiosqlite
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from carestock.config import get_logger, get_settings
from carestock.core.entities.movement import (
    MovementDirection,
    MovementEvent,
    MovementFilter,
    SubjectScope,
)
from carestock.core.exceptions import (
    DatabaseError,
    DuplicateMovementError,
    InsufficientStockError,
)
from carestock.core.interfaces.stores import IMovementStore
from carestock.core.services.ledger import validate_movement
from carestock.infrastructure.storage.sqlite.connection import (
    get_connection,
    get_snapshot,
    get_transaction,
)

logger = get_logger(__name__)

_BALANCE_SQL = """
    SELECT COALESCE(SUM(CASE direction WHEN 'IN' THEN quantity ELSE -quantity END), 0)
    FROM movements
    WHERE item_id = ? AND subject_id IS ?
"""


def _filter_clause(movement_filter: MovementFilter) -> tuple[str, list[Any]]:
    """Translate a MovementFilter into a WHERE clause and parameters."""
    conditions: list[str] = []
    params: list[Any] = []

    if movement_filter.item_id is not None:
        conditions.append("item_id = ?")
        params.append(movement_filter.item_id)
    if movement_filter.subject_scope == SubjectScope.FACILITY:
        conditions.append("subject_id IS NULL")
    elif movement_filter.subject_scope == SubjectScope.SUBJECT:
        conditions.append("subject_id = ?")
        params.append(movement_filter.subject_id)
    if movement_filter.date_from is not None:
        conditions.append("movement_date >= ?")
        params.append(movement_filter.date_from.isoformat())
    if movement_filter.date_to is not None:
        conditions.append("movement_date <= ?")
        params.append(movement_filter.date_to.isoformat())
    if movement_filter.direction is not None:
        conditions.append("direction = ?")
        params.append(movement_filter.direction.value)

    where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
    return where, params


def _is_locked(exc: BaseException) -> bool:
    """Check for the transient 'database is locked' / 'busy' errors."""
    if not isinstance(exc, sqlite3.OperationalError):
        return False
    message = str(exc).lower()
    return "locked" in message or "busy" in message


class SQLiteMovementStore(IMovementStore):
    """
    SQLite movement ledger.

    Insert-only: the store issues no UPDATE or DELETE, and the schema
    rejects them with triggers. Appends that hit a locked database are
    retried with exponential backoff.
    """

    def _get_retry_decorator(self) -> Any:
        """Get tenacity retry decorator with current settings."""
        settings = get_settings()
        delay = settings.storage.write_retry_delay
        return retry(
            stop=stop_after_attempt(settings.storage.write_retries),
            wait=wait_exponential(multiplier=delay, min=delay, max=delay * 8),
            retry=retry_if_exception(_is_locked),
            before_sleep=self._log_retry,
            reraise=True,
        )

    @staticmethod
    def _log_retry(retry_state: RetryCallState) -> None:
        """Log retry attempts."""
        logger.warning(
            "movement_append_retry",
            attempt=retry_state.attempt_number,
            error=str(retry_state.outcome.exception()) if retry_state.outcome else None,
        )

    async def append(
        self,
        event: MovementEvent,
        enforce_available: bool = False,
    ) -> MovementEvent:
        """
        Validate and persist a movement in its own transaction.

        Args:
            event: Movement to record. A missing id is assigned here.
            enforce_available: Reject an OUT movement that would drive the
                pool balance below zero.

        Raises:
            InvalidMovementError: If the event violates an invariant.
            DuplicateMovementError: If the id is already recorded.
            InsufficientStockError: If the guard is on and stock is short.
            DatabaseError: If the write fails after retries.
        """
        validate_movement(event)
        if event.id is None:
            event = event.model_copy(update={"id": uuid4().hex})

        insert = self._get_retry_decorator()(self._insert)
        try:
            await insert(event, enforce_available)
        except aiosqlite.IntegrityError as e:
            if "movements.id" in str(e):
                raise DuplicateMovementError(event.id) from e
            raise DatabaseError("append_movement", str(e)) from e
        except aiosqlite.OperationalError as e:
            raise DatabaseError("append_movement", str(e)) from e

        logger.info(
            "movement_recorded",
            event_id=event.id,
            item_id=event.item_id,
            subject_id=event.subject_id,
            direction=event.direction.value,
            qty=event.quantity,
        )
        return event

    async def _insert(self, event: MovementEvent, enforce_available: bool) -> None:
        """Guard check and INSERT inside one write transaction."""
        async with get_transaction() as conn:
            if enforce_available and event.direction == MovementDirection.OUT:
                cursor = await conn.execute(_BALANCE_SQL, (event.item_id, event.subject_id))
                row = await cursor.fetchone()
                available = int(row[0])
                if available < event.quantity:
                    raise InsufficientStockError(
                        item_id=event.item_id,
                        requested=event.quantity,
                        available=available,
                        subject_id=event.subject_id,
                    )

            await conn.execute(
                """
                INSERT INTO movements (
                    id, movement_date, direction, item_id,
                    subject_id, quantity, note
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    event.id,
                    event.movement_date.isoformat(),
                    event.direction.value,
                    event.item_id,
                    event.subject_id,
                    event.quantity,
                    event.note,
                ),
            )

    async def list_movements(
        self,
        movement_filter: MovementFilter,
        limit: int = 100,
        offset: int = 0,
    ) -> list[MovementEvent]:
        """List matching movements, ordered by date DESC."""
        where, params = _filter_clause(movement_filter)
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"""
                SELECT * FROM movements
                {where}
                ORDER BY movement_date DESC, seq DESC
                LIMIT ? OFFSET ?
                """,
                (*params, limit, offset),
            )
            rows = await cursor.fetchall()
            return [self._row_to_movement(row) for row in rows]

    async def load_events(self) -> list[MovementEvent]:
        """Load the whole ledger in append order from one read view."""
        async with get_snapshot() as conn:
            cursor = await conn.execute("SELECT * FROM movements ORDER BY seq")
            rows = await cursor.fetchall()
        events = [self._row_to_movement(row) for row in rows]
        logger.debug("ledger_snapshot_loaded", events=len(events))
        return events

    async def balance(
        self,
        item_id: str,
        subject_id: str | None = None,
    ) -> int:
        """Balance of one pool computed in SQL."""
        async with get_connection() as conn:
            cursor = await conn.execute(_BALANCE_SQL, (item_id, subject_id))
            row = await cursor.fetchone()
            return int(row[0])

    @staticmethod
    def _row_to_movement(row: aiosqlite.Row) -> MovementEvent:
        """Convert a database row to a MovementEvent entity."""
        return MovementEvent(
            id=row["id"],
            movement_date=date.fromisoformat(row["movement_date"]),
            direction=MovementDirection(row["direction"]),
            item_id=row["item_id"],
            subject_id=row["subject_id"],
            quantity=int(row["quantity"]),
            note=row["note"] or "",
        )
