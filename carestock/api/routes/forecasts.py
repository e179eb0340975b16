"""Depletion forecast endpoints."""

from fastapi import APIRouter, Depends

from carestock.api.dependencies import get_forecast_stock_use_case
from carestock.application.dto.responses import ErrorResponse, ForecastListResponse
from carestock.application.use_cases.forecast_stock import ForecastStockUseCase

router = APIRouter(prefix="/api/forecasts", tags=["forecasts"])


@router.get(
    "",
    response_model=ForecastListResponse,
    responses={400: {"model": ErrorResponse}},
)
async def list_forecasts(
    subject_id: str | None = None,
    as_of: str | None = None,
    use_case: ForecastStockUseCase = Depends(get_forecast_stock_use_case),
) -> ForecastListResponse:
    """
    Forecast every facility catalog item, or every item held by a subject.

    Sorted most urgent first.
    """
    result = await use_case.execute(subject_id=subject_id, as_of=as_of)
    return use_case.to_response(result)


@router.get(
    "/{item_id}",
    response_model=ForecastListResponse,
    responses={400: {"model": ErrorResponse}},
)
async def forecast_item(
    item_id: str,
    subject_id: str | None = None,
    as_of: str | None = None,
    use_case: ForecastStockUseCase = Depends(get_forecast_stock_use_case),
) -> ForecastListResponse:
    """Forecast one (item, subject) pool. Unknown pools report UNKNOWN."""
    result = await use_case.execute(item_id=item_id, subject_id=subject_id, as_of=as_of)
    return use_case.to_response(result)
