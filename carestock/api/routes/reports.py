"""Stock report endpoints."""

from fastapi import APIRouter, Depends, Query

from carestock.api.dependencies import get_stock_report_use_case
from carestock.application.dto.responses import (
    ConsumptionReportResponse,
    ErrorResponse,
    ForecastListResponse,
    InventoryFlowResponse,
    PersonalInventoryResponse,
)
from carestock.application.use_cases.stock_report import StockReportUseCase

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.get("/inventory-flow", response_model=InventoryFlowResponse)
async def inventory_flow(
    as_of: str | None = None,
    category: str | None = None,
    use_case: StockReportUseCase = Depends(get_stock_report_use_case),
) -> InventoryFlowResponse:
    """Facility stock flow per item, highest recent consumption first."""
    return await use_case.inventory_flow(as_of=as_of, category=category)


@router.get(
    "/subjects/{subject_id}/inventory",
    response_model=PersonalInventoryResponse,
    responses={404: {"model": ErrorResponse}},
)
async def personal_inventory(
    subject_id: str,
    as_of: str | None = None,
    use_case: StockReportUseCase = Depends(get_stock_report_use_case),
) -> PersonalInventoryResponse:
    """Items with a positive personal balance for one subject."""
    return await use_case.personal_inventory(subject_id, as_of=as_of)


@router.get(
    "/subject-forecasts",
    response_model=ForecastListResponse,
    responses={400: {"model": ErrorResponse}},
)
async def subject_forecasts(
    as_of: str | None = None,
    item_id: str | None = None,
    use_case: StockReportUseCase = Depends(get_stock_report_use_case),
) -> ForecastListResponse:
    """Depletion forecast of every personal pool, most urgent first."""
    return await use_case.subject_forecasts(as_of=as_of, item_id=item_id)


@router.get("/consumption", response_model=ConsumptionReportResponse)
async def consumption_by_category(
    as_of: str | None = None,
    window_days: int | None = Query(default=None, ge=1),
    use_case: StockReportUseCase = Depends(get_stock_report_use_case),
) -> ConsumptionReportResponse:
    """OUT volume per category over a trailing window."""
    return await use_case.consumption_by_category(as_of=as_of, window_days=window_days)
