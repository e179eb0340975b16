"""Stock Report Use Case: inventory flow, personal inventories and forecasts, consumption."""

from datetime import date

from carestock.application.dto.responses import (
    CategoryConsumptionResponse,
    ConsumptionReportResponse,
    ForecastListResponse,
    InventoryFlowResponse,
    InventoryFlowRowResponse,
    PersonalHoldingResponse,
    PersonalInventoryResponse,
)
from carestock.application.use_cases.common import forecast_to_response, load_snapshot, parse_iso_date
from carestock.config import get_logger, get_settings
from carestock.config.settings import Settings
from carestock.core.exceptions import SubjectNotFoundError
from carestock.core.interfaces.stores import ICatalogStore, IMovementStore
from carestock.core.services.stock_report import StockReportService, StockStatus
from carestock.infrastructure.memory import InMemoryCatalog

logger = get_logger(__name__)


class StockReportUseCase:
    """Read-only report views over one ledger snapshot."""

    def __init__(
        self,
        movement_store: IMovementStore | None = None,
        catalog_store: ICatalogStore | None = None,
        settings: Settings | None = None,
    ):
        self._movement_store = movement_store
        self._catalog_store = catalog_store
        self._settings = settings

    async def _get_movement_store(self) -> IMovementStore:
        if self._movement_store is None:
            from carestock.infrastructure.storage.sqlite import get_movement_store

            self._movement_store = await get_movement_store()
        return self._movement_store

    async def _get_catalog_store(self) -> ICatalogStore:
        if self._catalog_store is None:
            from carestock.infrastructure.storage.sqlite import get_catalog_store

            self._catalog_store = await get_catalog_store()
        return self._catalog_store

    async def _service(self) -> StockReportService:
        settings = self._settings or get_settings()
        snapshot = await load_snapshot(await self._get_movement_store())
        catalog_store = await self._get_catalog_store()
        catalog = InMemoryCatalog(await catalog_store.list_items())
        return StockReportService(
            snapshot,
            catalog,
            forecast_settings=settings.forecast,
            alert_settings=settings.alerts,
        )

    async def inventory_flow(
        self,
        as_of: str | date | None = None,
        category: str | None = None,
    ) -> InventoryFlowResponse:
        """Facility inventory flow, highest recent consumption first."""
        as_of_date = parse_iso_date(as_of, "as_of")
        service = await self._service()
        rows = service.inventory_flow(as_of_date, category=category)

        logger.info("inventory_flow_report", as_of=as_of_date.isoformat(), rows=len(rows))
        return InventoryFlowResponse(
            as_of=as_of_date,
            rows=[InventoryFlowRowResponse(**row.model_dump(mode="json")) for row in rows],
            total_items=len(rows),
            low_items=sum(1 for r in rows if r.status == StockStatus.LOW),
            depleted_items=sum(1 for r in rows if r.status == StockStatus.DEPLETED),
            total_recent_out=sum(r.recent_out for r in rows),
        )

    async def personal_inventory(
        self,
        subject_id: str,
        as_of: str | date | None = None,
    ) -> PersonalInventoryResponse:
        """
        Items held by one subject.

        Raises:
            SubjectNotFoundError: If the subject is not registered.
        """
        catalog_store = await self._get_catalog_store()
        subject = await catalog_store.get_subject(subject_id)
        if subject is None:
            raise SubjectNotFoundError(subject_id)

        as_of_date = parse_iso_date(as_of, "as_of") if as_of else None
        service = await self._service()
        holdings = service.personal_inventory(subject_id, as_of=as_of_date)

        return PersonalInventoryResponse(
            subject_id=subject.id,
            display_name=subject.display_name,
            holdings=[PersonalHoldingResponse(**h.model_dump()) for h in holdings],
            total=len(holdings),
        )

    async def subject_forecasts(
        self,
        as_of: str | date | None = None,
        item_id: str | None = None,
    ) -> ForecastListResponse:
        """Forecast every personal pool, most urgent first."""
        settings = self._settings or get_settings()
        as_of_date = parse_iso_date(as_of, "as_of")
        service = await self._service()
        forecasts = service.subject_forecasts(as_of_date, item_id=item_id)

        catalog_store = await self._get_catalog_store()
        item_names = {item.id: item.name for item in await catalog_store.list_items()}
        tier_counts: dict[str, int] = {}
        for f in forecasts:
            tier_counts[f.urgency_tier.value] = tier_counts.get(f.urgency_tier.value, 0) + 1

        logger.info("subject_forecasts_report", as_of=as_of_date.isoformat(), pools=len(forecasts))
        return ForecastListResponse(
            as_of=as_of_date,
            forecasts=[
                forecast_to_response(
                    f, item_names.get(f.item_id, settings.alerts.unknown_item_label)
                )
                for f in forecasts
            ],
            total=len(forecasts),
            tier_counts=tier_counts,
        )

    async def consumption_by_category(
        self,
        as_of: str | date | None = None,
        window_days: int | None = None,
    ) -> ConsumptionReportResponse:
        """OUT volume per category over a trailing window."""
        settings = self._settings or get_settings()
        as_of_date = parse_iso_date(as_of, "as_of")
        window = settings.forecast.window_days if window_days is None else window_days
        service = await self._service()
        categories = service.consumption_by_category(as_of_date, window_days=window)

        return ConsumptionReportResponse(
            as_of=as_of_date,
            window_days=window,
            categories=[CategoryConsumptionResponse(**c.model_dump()) for c in categories],
        )
