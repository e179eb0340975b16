"""Forecast Stock Use Case: depletion forecasts for one or many pools."""

from dataclasses import dataclass, field
from datetime import date

from carestock.application.dto.responses import ForecastListResponse, ForecastResponse
from carestock.application.use_cases.common import (
    forecast_to_response,
    load_snapshot,
    parse_iso_date,
)
from carestock.config import get_logger, get_settings
from carestock.config.settings import Settings
from carestock.core.entities.forecast import ForecastResult
from carestock.core.interfaces.stores import ICatalogStore, IMovementStore
from carestock.core.services.depletion_forecaster import DepletionForecaster

logger = get_logger(__name__)


@dataclass
class ForecastStockResult:
    """Forecasts sorted most urgent first, with item display names."""

    as_of: date
    forecasts: list[ForecastResult] = field(default_factory=list)
    item_names: dict[str, str] = field(default_factory=dict)


class ForecastStockUseCase:
    """
    Forecast stock depletion.

    With an item, forecasts that single pool. Without one, forecasts every
    facility catalog item, or every item a subject has ever held when a
    subject is given.
    """

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

    async def execute(
        self,
        item_id: str | None = None,
        subject_id: str | None = None,
        as_of: str | date | None = None,
    ) -> ForecastStockResult:
        """Execute forecast use case."""
        settings = self._settings or get_settings()
        as_of_date = parse_iso_date(as_of, "as_of")

        movement_store = await self._get_movement_store()
        catalog_store = await self._get_catalog_store()

        snapshot = await load_snapshot(movement_store)
        items = await catalog_store.list_items()
        item_names = {item.id: item.name for item in items}

        if item_id is not None:
            pairs = [(item_id, subject_id)]
        elif subject_id is not None:
            pairs = [
                (pair_item, subject_id)
                for pair_item in snapshot.item_ids()
                if subject_id in snapshot.subject_ids(pair_item)
            ]
        else:
            pairs = [(item.id, None) for item in items]

        forecaster = DepletionForecaster(snapshot, settings.forecast)
        forecasts = forecaster.forecast_many(pairs, as_of=as_of_date)

        logger.info(
            "forecast_stock_complete",
            as_of=as_of_date.isoformat(),
            pools=len(forecasts),
        )
        return ForecastStockResult(as_of=as_of_date, forecasts=forecasts, item_names=item_names)

    def _item_name(self, result: ForecastStockResult, item_id: str) -> str:
        settings = self._settings or get_settings()
        return result.item_names.get(item_id, settings.alerts.unknown_item_label)

    def to_response(self, result: ForecastStockResult) -> ForecastListResponse:
        """Convert result to API response."""
        forecasts: list[ForecastResponse] = [
            forecast_to_response(f, self._item_name(result, f.item_id)) for f in result.forecasts
        ]
        tier_counts: dict[str, int] = {}
        for f in result.forecasts:
            tier_counts[f.urgency_tier.value] = tier_counts.get(f.urgency_tier.value, 0) + 1

        return ForecastListResponse(
            as_of=result.as_of,
            forecasts=forecasts,
            total=len(forecasts),
            tier_counts=tier_counts,
        )
