"""
Alert Aggregator.

Merges stock, expiration, recurrence and schedule sources into one
ordered notification feed. Evaluated on demand, nothing is persisted.

Ordering is a fixed list of category buckets; alerts are only ever
sorted within their own bucket.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import date
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from carestock.config import get_logger
from carestock.config.settings import AlertSettings, ForecastSettings
from carestock.core.entities.alert import Alert, AlertCategory, AlertSeverity, ExpiryStatus
from carestock.core.entities.feeds import ExpiringEntity, RecurringDate, ScheduledEvent
from carestock.core.entities.forecast import ForecastResult, UrgencyTier
from carestock.core.exceptions import ValidationError
from carestock.core.interfaces.catalog import ICatalog, ISubjectRegistry
from carestock.core.interfaces.feeds import IExpiringEntityFeed, IRecurrenceFeed, IScheduleFeed
from carestock.core.interfaces.ledger import ILedgerReader
from carestock.core.services.balance_calculator import BalanceCalculator
from carestock.core.services.depletion_forecaster import DepletionForecaster

logger = get_logger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)

# Concatenation order of the category buckets
BUCKET_ORDER: tuple[AlertCategory, ...] = (
    AlertCategory.DOCUMENT_EXPIRY,
    AlertCategory.LOW_STOCK,
    AlertCategory.DEPLETION_FORECAST,
    AlertCategory.RECURRING_DATE,
    AlertCategory.SCHEDULED_EVENT,
)

_EXPIRY_STATUS_RANK = {
    ExpiryStatus.OVERDUE: 0,
    ExpiryStatus.DUE_TODAY: 1,
    ExpiryStatus.UPCOMING: 2,
}


def _expiry_key(alert: Alert) -> tuple:
    return (
        _EXPIRY_STATUS_RANK[alert.expiry_status or ExpiryStatus.UPCOMING],
        alert.details.get("expiration_date", alert.occurs_on),
        alert.id,
    )


def _stock_key(alert: Alert) -> tuple:
    days = alert.details.get("days_remaining")
    return (
        -1 if days is None else days,
        alert.details.get("item_name", ""),
        alert.id,
    )


def _recurrence_key(alert: Alert) -> tuple:
    return (alert.title, alert.id)


def _schedule_key(alert: Alert) -> tuple:
    # Zero-padded HH:MM compares chronologically; untimed events first
    return (alert.time or "", alert.id)


_BUCKET_SORT_KEYS: dict[AlertCategory, Callable[[Alert], tuple]] = {
    AlertCategory.DOCUMENT_EXPIRY: _expiry_key,
    AlertCategory.LOW_STOCK: _stock_key,
    AlertCategory.DEPLETION_FORECAST: _stock_key,
    AlertCategory.RECURRING_DATE: _recurrence_key,
    AlertCategory.SCHEDULED_EVENT: _schedule_key,
}


def _feed_name(feed: object) -> str:
    return getattr(feed, "name", type(feed).__name__)


def order_alerts(alerts: Iterable[Alert]) -> list[Alert]:
    """Partition alerts into category buckets and concatenate them in order."""
    buckets: dict[AlertCategory, list[Alert]] = {category: [] for category in BUCKET_ORDER}
    for alert in alerts:
        buckets[alert.category].append(alert)

    ordered: list[Alert] = []
    for category in BUCKET_ORDER:
        ordered.extend(sorted(buckets[category], key=_BUCKET_SORT_KEYS[category]))
    return ordered


class AlertAggregator:
    """
    Layer-pure service that produces the unified alert feed.

    Depends only on core interfaces. A missing catalog skips stock alerts;
    a feed that raises or yields a malformed record is skipped and logged
    while the other sources still contribute.
    """

    def __init__(
        self,
        reader: ILedgerReader,
        catalog: ICatalog | None = None,
        subjects: ISubjectRegistry | None = None,
        expiring_feeds: Sequence[IExpiringEntityFeed] = (),
        recurrence_feeds: Sequence[IRecurrenceFeed] = (),
        schedule_feeds: Sequence[IScheduleFeed] = (),
        forecast_settings: ForecastSettings | None = None,
        alert_settings: AlertSettings | None = None,
    ) -> None:
        self._reader = reader
        self._catalog = catalog
        self._subjects = subjects
        self._expiring_feeds = list(expiring_feeds)
        self._recurrence_feeds = list(recurrence_feeds)
        self._schedule_feeds = list(schedule_feeds)
        self._settings = alert_settings or AlertSettings()
        self._balances = BalanceCalculator(reader)
        self._forecaster = DepletionForecaster(reader, forecast_settings)

    def collect_alerts(self, as_of: date) -> list[Alert]:
        """
        Run every source and return the ordered alert feed.

        Args:
            as_of: Evaluation date. Nothing reads the system clock.

        Returns:
            Alerts ordered by bucket, then within-bucket key.
        """
        alerts: list[Alert] = []
        alerts.extend(self._stock_alerts(as_of))
        alerts.extend(self._expiry_alerts(as_of))
        alerts.extend(self._recurrence_alerts(as_of))
        alerts.extend(self._schedule_alerts(as_of))

        ordered = order_alerts(alerts)
        logger.info("alerts_collected", as_of=as_of.isoformat(), total=len(ordered))
        return ordered

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _subject_label(self, subject_ref: str | None, short: bool = False) -> str | None:
        if subject_ref is None:
            return None
        subject = None
        if self._subjects is not None:
            try:
                subject = self._subjects.get_subject(subject_ref)
            except Exception:
                logger.warning("alert_subject_lookup_failed", subject_ref=subject_ref, exc_info=True)
        if subject is None:
            return self._settings.unknown_subject_label
        return subject.short_name if short else subject.display_name

    def _records(
        self,
        feed: object,
        fetch: Callable[[], Iterable[Any]],
        model: type[RecordT],
    ) -> list[RecordT]:
        """
        Materialise a feed, skipping it entirely if it raises.

        A record id repeated within the same feed keeps its first occurrence.
        """
        feed_name = _feed_name(feed)
        try:
            raw = list(fetch())
        except Exception:
            logger.warning("alert_feed_failed", feed=feed_name, exc_info=True)
            return []

        records: list[RecordT] = []
        for entry in raw:
            if isinstance(entry, model):
                records.append(entry)
                continue
            if not isinstance(entry, Mapping):
                logger.warning("alert_record_skipped", feed=feed_name, reason="not a record")
                continue
            try:
                records.append(model.model_validate(dict(entry)))
            except PydanticValidationError as e:
                logger.warning(
                    "alert_record_skipped",
                    feed=feed_name,
                    record_id=entry.get("id"),
                    reason=str(e.errors()[0].get("msg", "invalid record")),
                )

        unique: list[RecordT] = []
        seen: set[str] = set()
        for record in records:
            if record.id in seen:
                logger.warning(
                    "alert_record_skipped", feed=feed_name, record_id=record.id, reason="duplicate id"
                )
                continue
            seen.add(record.id)
            unique.append(record)
        return unique

    def _claim_id(self, claimed: set[str], prefix: str, feed: object, record_id: str) -> str | None:
        """
        Alert id for a feed record.

        The first feed to use a record id gets the plain id; later feeds
        reusing it are namespaced by feed name. None when even that is taken.
        """
        alert_id = f"{prefix}_{record_id}"
        if alert_id in claimed:
            alert_id = f"{prefix}_{_feed_name(feed)}_{record_id}"
        if alert_id in claimed:
            logger.warning(
                "alert_record_skipped", feed=_feed_name(feed), record_id=record_id, reason="duplicate id"
            )
            return None
        claimed.add(alert_id)
        return alert_id

    # ------------------------------------------------------------------
    # Sources
    # ------------------------------------------------------------------

    def _stock_alerts(self, as_of: date) -> list[Alert]:
        """Facility items below their reorder point that are out or nearly out."""
        if self._catalog is None:
            return []

        try:
            items = self._catalog.list_items()
        except Exception:
            logger.warning("alert_catalog_failed", exc_info=True)
            return []

        alerts: list[Alert] = []
        for item in items:
            try:
                balance = self._balances.balance_of(item.id, None, as_of)
                if balance >= item.minimum_threshold:
                    continue
                result = self._forecaster.forecast(item.id, None, as_of=as_of)
            except Exception:
                logger.warning("alert_stock_item_failed", item_id=item.id, exc_info=True)
                continue

            alert = self._stock_alert(
                item_id=item.id,
                item_name=item.name or self._settings.unknown_item_label,
                unit=item.unit,
                threshold=item.minimum_threshold,
                result=result,
            )
            if alert is not None:
                alerts.append(alert)
        return alerts

    def _stock_alert(
        self,
        item_id: str,
        item_name: str,
        unit: str,
        threshold: int,
        result: ForecastResult,
    ) -> Alert | None:
        details: dict[str, Any] = {
            "item_id": item_id,
            "item_name": item_name,
            "balance": result.current_balance,
            "minimum_threshold": threshold,
            "urgency_tier": result.urgency_tier.value,
            "daily_rate": round(result.daily_rate, 4),
        }

        if result.urgency_tier == UrgencyTier.DEPLETED:
            details["days_remaining"] = None
            details["days_without_stock"] = result.days_without_stock
            message = f"{item_name} is out of stock (minimum {threshold} {unit})"
            if result.days_without_stock:
                message += f", empty for about {result.days_without_stock} days"
            return Alert(
                id=f"stock_{item_id}",
                category=AlertCategory.LOW_STOCK,
                severity=AlertSeverity.CRITICAL,
                title=f"Out of stock: {item_name}",
                message=message,
                occurs_on=result.as_of,
                details=details,
            )

        if result.urgency_tier == UrgencyTier.CRITICAL:
            days = result.days_remaining.days
            details["days_remaining"] = days
            details["projected_exhaustion_date"] = result.projected_exhaustion_date
            return Alert(
                id=f"forecast_{item_id}",
                category=AlertCategory.DEPLETION_FORECAST,
                severity=AlertSeverity.CRITICAL,
                title=f"Running out: {item_name}",
                message=(
                    f"{result.current_balance} {unit} left of {item_name}, "
                    f"about {days} days at current consumption"
                ),
                occurs_on=result.projected_exhaustion_date or result.as_of,
                details=details,
            )

        return None

    def _expiry_alerts(self, as_of: date) -> list[Alert]:
        """Fixed and derived expirations within the horizon, overdue included."""
        alerts: list[Alert] = []
        horizon = self._settings.expiry_horizon_days
        claimed: set[str] = set()

        for feed in self._expiring_feeds:
            for entity in self._records(feed, feed.list_entities, ExpiringEntity):
                try:
                    expires = entity.resolve_expiration(self._settings.default_validity_days)
                except ValidationError as e:
                    logger.warning("alert_record_skipped", record_id=entity.id, reason=e.message)
                    continue

                days_left = (expires - as_of).days
                if days_left > horizon:
                    continue
                alert_id = self._claim_id(claimed, "expiry", feed, entity.id)
                if alert_id is None:
                    continue
                alerts.append(
                    self._expiry_alert(
                        alert_id, entity, expires, days_left, derived=entity.expiration_date is None
                    )
                )
        return alerts

    def _expiry_alert(
        self,
        alert_id: str,
        entity: ExpiringEntity,
        expires: date,
        days_left: int,
        derived: bool,
    ) -> Alert:
        subject = self._subject_label(entity.subject_ref, short=True)
        label = f"{entity.label}: {subject}" if subject else entity.label

        if days_left < 0:
            status = ExpiryStatus.OVERDUE
            severity = AlertSeverity.CRITICAL
            title = f"Expired: {label}"
            message = f"{entity.label} expired {-days_left} days ago"
        elif days_left == 0:
            status = ExpiryStatus.DUE_TODAY
            severity = AlertSeverity.CRITICAL
            title = f"Expires today: {label}"
            message = f"{entity.label} expires today"
        else:
            status = ExpiryStatus.UPCOMING
            severity = AlertSeverity.WARNING
            title = f"Expiring: {label}"
            message = f"{entity.label} expires on {expires.isoformat()} ({days_left} days remaining)"

        return Alert(
            id=alert_id,
            category=AlertCategory.DOCUMENT_EXPIRY,
            severity=severity,
            expiry_status=status,
            subject_ref=entity.subject_ref,
            title=title,
            message=message,
            occurs_on=expires,
            details={
                "expiration_date": expires,
                "days_left": days_left,
                "derived": derived,
            },
        )

    def _recurrence_alerts(self, as_of: date) -> list[Alert]:
        """Annual dates falling on as_of."""
        alerts: list[Alert] = []
        claimed: set[str] = set()
        for feed in self._recurrence_feeds:
            for recurrence in self._records(feed, feed.list_recurrences, RecurringDate):
                if not recurrence.occurs_on(as_of):
                    continue
                alert_id = self._claim_id(claimed, "recurrence", feed, recurrence.id)
                if alert_id is None:
                    continue

                subject = self._subject_label(recurrence.subject_ref, short=True)
                title = f"{recurrence.label}: {subject}" if subject else recurrence.label
                years = recurrence.years_since_origin(as_of)
                message = f"{recurrence.label} today"
                if years is not None and years > 0:
                    message = f"{recurrence.label} today ({years} years)"

                alerts.append(
                    Alert(
                        id=alert_id,
                        category=AlertCategory.RECURRING_DATE,
                        severity=AlertSeverity.INFO,
                        subject_ref=recurrence.subject_ref,
                        title=title,
                        message=message,
                        occurs_on=as_of,
                        details={"years": years},
                    )
                )
        return alerts

    def _schedule_alerts(self, as_of: date) -> list[Alert]:
        """Scheduled events dated exactly as_of, cancelled ones excluded."""
        alerts: list[Alert] = []
        claimed: set[str] = set()
        for feed in self._schedule_feeds:
            for event in self._records(feed, feed.list_events, ScheduledEvent):
                if event.event_date != as_of or event.is_cancelled:
                    continue
                alert_id = self._claim_id(claimed, "schedule", feed, event.id)
                if alert_id is None:
                    continue

                subject = self._subject_label(event.subject_ref, short=True)
                title = f"{event.label}: {subject}" if subject else event.label
                parts = [event.label]
                if event.time:
                    parts.append(f"at {event.time}")
                if event.location:
                    parts.append(f"({event.location})")

                alerts.append(
                    Alert(
                        id=alert_id,
                        category=AlertCategory.SCHEDULED_EVENT,
                        severity=AlertSeverity.INFO,
                        subject_ref=event.subject_ref,
                        title=title,
                        message=" ".join(parts),
                        occurs_on=as_of,
                        time=event.time or None,
                        details={"location": event.location},
                    )
                )
        return alerts
