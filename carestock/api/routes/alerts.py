"""Unified alert feed endpoints."""

from fastapi import APIRouter, Depends

from carestock.api.dependencies import get_collect_alerts_use_case
from carestock.application.dto.requests import CollectAlertsRequest
from carestock.application.dto.responses import AlertListResponse, ErrorResponse
from carestock.application.use_cases.collect_alerts import CollectAlertsUseCase

router = APIRouter(prefix="/api/alerts", tags=["alerts"])


@router.get(
    "",
    response_model=AlertListResponse,
    responses={400: {"model": ErrorResponse}},
)
async def get_stock_alerts(
    as_of: str | None = None,
    use_case: CollectAlertsUseCase = Depends(get_collect_alerts_use_case),
) -> AlertListResponse:
    """Stock alerts only (low stock and depletion forecasts)."""
    result = await use_case.execute(CollectAlertsRequest(as_of=as_of))
    return use_case.to_response(result)


@router.post(
    "",
    response_model=AlertListResponse,
    responses={400: {"model": ErrorResponse}},
)
async def collect_alerts(
    request: CollectAlertsRequest,
    use_case: CollectAlertsUseCase = Depends(get_collect_alerts_use_case),
) -> AlertListResponse:
    """
    Full alert feed.

    Stock alerts plus the expirations, recurring dates and scheduled
    events supplied in the body, in fixed category order.
    """
    result = await use_case.execute(request)
    return use_case.to_response(result)
