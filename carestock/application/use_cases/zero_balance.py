"""Zero Balance Use Case: compensating OUT entry that empties a pool."""

from dataclasses import dataclass

from carestock.application.dto.requests import ZeroBalanceRequest
from carestock.application.dto.responses import ZeroBalanceResponse
from carestock.application.use_cases.common import movement_to_response, parse_iso_date
from carestock.config import get_logger
from carestock.core.entities.movement import MovementDirection, MovementEvent
from carestock.core.interfaces.stores import IMovementStore
from carestock.core.services.ledger import build_movement

logger = get_logger(__name__)


@dataclass
class ZeroBalanceResult:
    """Result of zeroing a pool."""

    item_id: str
    subject_id: str | None
    previous_balance: int
    balance: int
    movement: MovementEvent | None = None


class ZeroBalanceUseCase:
    """
    Bring a pool's balance to zero without mutating history.

    A positive balance is offset with one OUT event of the same size.
    Zero or negative balances are left untouched.
    """

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

    async def execute(self, request: ZeroBalanceRequest) -> ZeroBalanceResult:
        """Execute zero balance use case."""
        store = await self._get_movement_store()
        previous = await store.balance(request.item_id, request.subject_id)

        if previous <= 0:
            logger.info(
                "zero_balance_skipped",
                item_id=request.item_id,
                subject_id=request.subject_id,
                balance=previous,
            )
            return ZeroBalanceResult(
                item_id=request.item_id,
                subject_id=request.subject_id,
                previous_balance=previous,
                balance=previous,
            )

        event = build_movement(
            movement_date=parse_iso_date(request.movement_date, "movement_date"),
            direction=MovementDirection.OUT,
            item_id=request.item_id,
            quantity=previous,
            subject_id=request.subject_id,
            note=request.note,
        )
        # Guarded so a concurrent OUT cannot push the pool negative
        event = await store.append(event, enforce_available=True)
        balance = await store.balance(request.item_id, request.subject_id)

        logger.info(
            "zero_balance_complete",
            item_id=request.item_id,
            subject_id=request.subject_id,
            offset=previous,
        )
        return ZeroBalanceResult(
            item_id=request.item_id,
            subject_id=request.subject_id,
            previous_balance=previous,
            balance=balance,
            movement=event,
        )

    def to_response(self, result: ZeroBalanceResult) -> ZeroBalanceResponse:
        """Convert result to API response."""
        return ZeroBalanceResponse(
            item_id=result.item_id,
            subject_id=result.subject_id,
            previous_balance=result.previous_balance,
            balance=result.balance,
            movement=movement_to_response(result.movement) if result.movement else None,
        )
