"""Ledger endpoints: record movements, history, balances and corrections."""

from fastapi import APIRouter, Depends, Query, status

from carestock.api.dependencies import (
    get_mov_store,
    get_record_movement_use_case,
    get_zero_balance_use_case,
)
from carestock.application.dto.requests import RecordMovementRequest, ZeroBalanceRequest
from carestock.application.dto.responses import (
    BalanceResponse,
    ErrorResponse,
    MovementListResponse,
    RecordMovementResponse,
    ZeroBalanceResponse,
)
from carestock.application.use_cases.common import (
    load_snapshot,
    movement_to_response,
    parse_iso_date,
)
from carestock.application.use_cases.record_movement import RecordMovementUseCase
from carestock.application.use_cases.zero_balance import ZeroBalanceUseCase
from carestock.core.entities.movement import MovementDirection, MovementFilter, SubjectScope
from carestock.core.services.balance_calculator import BalanceCalculator
from carestock.infrastructure.storage.sqlite import SQLiteMovementStore

router = APIRouter(prefix="/api/ledger", tags=["ledger"])


@router.post(
    "/movements",
    response_model=RecordMovementResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def record_movement(
    request: RecordMovementRequest,
    use_case: RecordMovementUseCase = Depends(get_record_movement_use_case),
) -> RecordMovementResponse:
    """Append an IN or OUT movement to the ledger."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.get(
    "/movements",
    response_model=MovementListResponse,
    responses={400: {"model": ErrorResponse}},
)
async def list_movements(
    item_id: str | None = None,
    subject_id: str | None = None,
    scope: SubjectScope | None = Query(
        default=None,
        description="any, facility or subject; inferred from subject_id when omitted",
    ),
    direction: MovementDirection | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    store: SQLiteMovementStore = Depends(get_mov_store),
) -> MovementListResponse:
    """List movements, most recent first."""
    if scope is None:
        scope = SubjectScope.SUBJECT if subject_id else SubjectScope.ANY
    movement_filter = MovementFilter(
        item_id=item_id,
        subject_scope=scope,
        subject_id=subject_id if scope == SubjectScope.SUBJECT else None,
        direction=direction,
        date_from=parse_iso_date(date_from, "date_from") if date_from else None,
        date_to=parse_iso_date(date_to, "date_to") if date_to else None,
    )
    # One extra row tells whether another page exists
    movements = await store.list_movements(movement_filter, limit=limit + 1, offset=offset)
    has_more = len(movements) > limit
    movements = movements[:limit]
    return MovementListResponse(
        movements=[movement_to_response(m) for m in movements],
        total=len(movements),
        limit=limit,
        offset=offset,
        has_more=has_more,
    )


@router.get(
    "/balance/{item_id}",
    response_model=BalanceResponse,
)
async def get_balance(
    item_id: str,
    subject_id: str | None = None,
    as_of: str | None = None,
    store: SQLiteMovementStore = Depends(get_mov_store),
) -> BalanceResponse:
    """
    Derived balance of one pool.

    Without subject_id this is facility stock only. Unknown items have
    balance 0.
    """
    as_of_date = parse_iso_date(as_of, "as_of") if as_of else None
    if as_of_date is None:
        balance = await store.balance(item_id, subject_id)
    else:
        snapshot = await load_snapshot(store)
        balance = BalanceCalculator(snapshot).balance_of(item_id, subject_id, as_of_date)
    return BalanceResponse(
        item_id=item_id,
        subject_id=subject_id,
        as_of=as_of_date,
        balance=balance,
    )


@router.post(
    "/zero",
    response_model=ZeroBalanceResponse,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def zero_balance(
    request: ZeroBalanceRequest,
    use_case: ZeroBalanceUseCase = Depends(get_zero_balance_use_case),
) -> ZeroBalanceResponse:
    """Zero a pool with a compensating OUT entry."""
    result = await use_case.execute(request)
    return use_case.to_response(result)
