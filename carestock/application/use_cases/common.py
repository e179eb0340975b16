"""Shared helpers for use cases."""

from datetime import date

from carestock.application.dto.responses import ForecastResponse, MovementResponse
from carestock.core.entities.forecast import ForecastResult
from carestock.core.entities.movement import MovementEvent
from carestock.core.exceptions import ValidationError
from carestock.core.interfaces.stores import IMovementStore
from carestock.core.services.ledger import LedgerSnapshot


def parse_iso_date(value: str | date | None, field: str) -> date:
    """Parse an optional ISO date, defaulting to today."""
    if value is None or value == "":
        return date.today()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise ValidationError(field, "Expected an ISO date (YYYY-MM-DD)", value) from e


async def load_snapshot(store: IMovementStore) -> LedgerSnapshot:
    """Load one consistent ledger snapshot from the store."""
    return LedgerSnapshot(await store.load_events())


def movement_to_response(event: MovementEvent) -> MovementResponse:
    return MovementResponse(
        id=event.id or "",
        movement_date=event.movement_date,
        direction=event.direction.value,
        item_id=event.item_id,
        subject_id=event.subject_id,
        quantity=event.quantity,
        note=event.note,
    )


def forecast_to_response(result: ForecastResult, item_name: str) -> ForecastResponse:
    return ForecastResponse(
        item_id=result.item_id,
        item_name=item_name,
        subject_id=result.subject_id,
        as_of=result.as_of,
        current_balance=result.current_balance,
        daily_rate=round(result.daily_rate, 4),
        remaining_kind=result.days_remaining.kind.value,
        days_remaining=result.days_remaining.days,
        days_without_stock=result.days_without_stock,
        projected_exhaustion_date=result.projected_exhaustion_date,
        exhaustion_label=result.exhaustion_label,
        urgency_tier=result.urgency_tier.value,
    )
