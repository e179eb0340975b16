"""
Collect Alerts Use Case.

Builds the unified alert feed from one ledger snapshot, the catalog and
the feed records supplied with the request.
"""

from dataclasses import dataclass, field
from datetime import date

from carestock.application.dto.requests import CollectAlertsRequest
from carestock.application.dto.responses import AlertListResponse, AlertResponse
from carestock.application.use_cases.common import load_snapshot, parse_iso_date
from carestock.config import get_logger, get_settings
from carestock.config.settings import Settings
from carestock.core.entities.alert import Alert, AlertCategory
from carestock.core.interfaces.feeds import IExpiringEntityFeed, IRecurrenceFeed, IScheduleFeed
from carestock.core.interfaces.stores import ICatalogStore, IMovementStore
from carestock.core.services.alert_aggregator import AlertAggregator
from carestock.infrastructure.memory import (
    InMemoryCatalog,
    InMemorySubjectRegistry,
    StaticExpiringFeed,
    StaticRecurrenceFeed,
    StaticScheduleFeed,
)

logger = get_logger(__name__)


@dataclass
class CollectAlertsResult:
    """Ordered alerts with per-category counts."""

    as_of: date
    alerts: list[Alert] = field(default_factory=list)
    counts: dict[str, int] = field(default_factory=dict)


class CollectAlertsUseCase:
    """Use case that evaluates every alert source on demand."""

    def __init__(
        self,
        movement_store: IMovementStore | None = None,
        catalog_store: ICatalogStore | None = None,
        settings: Settings | None = None,
        expiring_feeds: list[IExpiringEntityFeed] | None = None,
        recurrence_feeds: list[IRecurrenceFeed] | None = None,
        schedule_feeds: list[IScheduleFeed] | None = None,
    ) -> None:
        self._movement_store = movement_store
        self._catalog_store = catalog_store
        self._settings = settings
        # Configured feeds, consulted alongside the request records
        self._expiring_feeds = expiring_feeds or []
        self._recurrence_feeds = recurrence_feeds or []
        self._schedule_feeds = schedule_feeds or []

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

    async def execute(self, request: CollectAlertsRequest | None = None) -> CollectAlertsResult:
        """
        Collect alerts.

        Args:
            request: Evaluation date and feed records. None means stock
                alerts only, as of today.

        Returns:
            CollectAlertsResult with ordered alerts and counts.
        """
        request = request or CollectAlertsRequest()
        settings = self._settings or get_settings()
        as_of = parse_iso_date(request.as_of, "as_of")

        movement_store = await self._get_movement_store()
        catalog_store = await self._get_catalog_store()

        snapshot = await load_snapshot(movement_store)
        catalog = None
        if request.include_stock:
            catalog = InMemoryCatalog(await catalog_store.list_items())
        subjects = InMemorySubjectRegistry(await catalog_store.list_subjects())

        aggregator = AlertAggregator(
            snapshot,
            catalog=catalog,
            subjects=subjects,
            expiring_feeds=[
                StaticExpiringFeed(request.expiring, name="request.expiring"),
                *self._expiring_feeds,
            ],
            recurrence_feeds=[
                StaticRecurrenceFeed(request.recurrences, name="request.recurrences"),
                *self._recurrence_feeds,
            ],
            schedule_feeds=[
                StaticScheduleFeed(request.events, name="request.events"),
                *self._schedule_feeds,
            ],
            forecast_settings=settings.forecast,
            alert_settings=settings.alerts,
        )
        alerts = aggregator.collect_alerts(as_of)

        counts = {category.value: 0 for category in AlertCategory}
        for alert in alerts:
            counts[alert.category.value] += 1

        logger.info("collect_alerts_complete", as_of=as_of.isoformat(), total=len(alerts))
        return CollectAlertsResult(as_of=as_of, alerts=alerts, counts=counts)

    def to_response(self, result: CollectAlertsResult) -> AlertListResponse:
        """Convert result to API response."""
        return AlertListResponse(
            as_of=result.as_of,
            alerts=[
                AlertResponse(
                    id=a.id,
                    category=a.category.value,
                    severity=a.severity.value,
                    expiry_status=a.expiry_status.value if a.expiry_status else None,
                    subject_ref=a.subject_ref,
                    title=a.title,
                    message=a.message,
                    occurs_on=a.occurs_on,
                    time=a.time,
                    details=a.details,
                )
                for a in result.alerts
            ],
            total=len(result.alerts),
            counts=result.counts,
        )
