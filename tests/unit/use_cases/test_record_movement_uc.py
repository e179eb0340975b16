"""Tests for RecordMovementUseCase."""

from datetime import date

import pytest

from carestock.application.dto.requests import RecordMovementRequest
from carestock.application.use_cases.record_movement import RecordMovementUseCase
from carestock.core.entities import MovementDirection
from carestock.core.exceptions import InsufficientStockError, InvalidMovementError, ValidationError


@pytest.fixture
def use_case(mock_movement_store):
    async def _append(event, enforce_available=False):
        return event.model_copy(update={"id": event.id or "generated"})

    mock_movement_store.append.side_effect = _append
    return RecordMovementUseCase(movement_store=mock_movement_store)


class TestRecordMovementUseCase:
    async def test_records_and_returns_balance(self, use_case, mock_movement_store):
        mock_movement_store.balance.return_value = 40

        result = await use_case.execute(
            RecordMovementRequest(item_id="gauze", direction="in", quantity=40, movement_date="2024-06-01")
        )

        event = mock_movement_store.append.call_args[0][0]
        assert event.direction == MovementDirection.IN
        assert event.movement_date == date(2024, 6, 1)
        assert result.movement.id == "generated"
        assert result.balance == 40
        mock_movement_store.balance.assert_awaited_once_with("gauze", None)

    async def test_defaults_to_today(self, use_case, mock_movement_store):
        await use_case.execute(RecordMovementRequest(item_id="gauze", direction="OUT", quantity=1))
        event = mock_movement_store.append.call_args[0][0]
        assert event.movement_date == date.today()

    async def test_guard_flag_forwarded(self, use_case, mock_movement_store):
        await use_case.execute(
            RecordMovementRequest(
                item_id="gauze", direction="OUT", quantity=1, subject_id="r1", enforce_available=True
            )
        )
        assert mock_movement_store.append.call_args.kwargs["enforce_available"] is True
        assert mock_movement_store.append.call_args[0][0].subject_id == "r1"

    async def test_invalid_quantity_never_reaches_store(self, use_case, mock_movement_store):
        with pytest.raises(InvalidMovementError):
            await use_case.execute(RecordMovementRequest(item_id="gauze", direction="IN", quantity=0))
        mock_movement_store.append.assert_not_awaited()

    async def test_invalid_direction(self, use_case):
        with pytest.raises(InvalidMovementError):
            await use_case.execute(RecordMovementRequest(item_id="gauze", direction="UP", quantity=1))

    async def test_invalid_date(self, use_case):
        with pytest.raises(ValidationError):
            await use_case.execute(
                RecordMovementRequest(item_id="gauze", direction="IN", quantity=1, movement_date="06/01/2024")
            )

    async def test_store_errors_propagate(self, use_case, mock_movement_store):
        mock_movement_store.append.side_effect = InsufficientStockError("gauze", 5, 2)
        with pytest.raises(InsufficientStockError):
            await use_case.execute(
                RecordMovementRequest(item_id="gauze", direction="OUT", quantity=5, enforce_available=True)
            )

    async def test_to_response(self, use_case):
        result = await use_case.execute(
            RecordMovementRequest(item_id="gauze", direction="IN", quantity=3, event_id="m1")
        )
        response = use_case.to_response(result)
        assert response.movement.id == "m1"
        assert response.movement.direction == "IN"
