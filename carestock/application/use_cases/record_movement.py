"""Record Movement Use Case: append one IN or OUT event to the ledger."""

from dataclasses import dataclass

from carestock.application.dto.requests import RecordMovementRequest
from carestock.application.dto.responses import RecordMovementResponse
from carestock.application.use_cases.common import movement_to_response, parse_iso_date
from carestock.config import get_logger
from carestock.core.entities.movement import MovementEvent
from carestock.core.interfaces.stores import IMovementStore
from carestock.core.services.ledger import build_movement

logger = get_logger(__name__)


@dataclass
class RecordMovementResult:
    """Result of recording a movement."""

    movement: MovementEvent
    balance: int


class RecordMovementUseCase:
    """Validate and append a movement, optionally guarding available stock."""

    def __init__(
        self,
        movement_store: IMovementStore | None = None,
    ):
        self._movement_store = movement_store

    async def _get_movement_store(self) -> IMovementStore:
        if self._movement_store is None:
            from carestock.infrastructure.storage.sqlite import get_movement_store

            self._movement_store = await get_movement_store()
        return self._movement_store

    async def execute(self, request: RecordMovementRequest) -> RecordMovementResult:
        """Execute record movement use case."""
        logger.info(
            "record_movement_started",
            item_id=request.item_id,
            subject_id=request.subject_id,
            direction=request.direction,
            quantity=request.quantity,
        )

        event = build_movement(
            movement_date=parse_iso_date(request.movement_date, "movement_date"),
            direction=request.direction.strip().upper(),
            item_id=request.item_id,
            quantity=request.quantity,
            subject_id=request.subject_id,
            note=request.note,
            event_id=request.event_id,
        )

        store = await self._get_movement_store()
        event = await store.append(event, enforce_available=request.enforce_available)
        balance = await store.balance(event.item_id, event.subject_id)

        logger.info(
            "record_movement_complete",
            event_id=event.id,
            balance=balance,
        )
        return RecordMovementResult(movement=event, balance=balance)

    def to_response(self, result: RecordMovementResult) -> RecordMovementResponse:
        """Convert result to API response."""
        return RecordMovementResponse(
            movement=movement_to_response(result.movement),
            balance=result.balance,
        )
