"""Ledger movement entities."""

from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict, model_validator


class MovementDirection(str, Enum):
    """Direction of a stock movement."""

    IN = "IN"
    OUT = "OUT"


class SubjectScope(str, Enum):
    """Which stock pool a ledger query targets."""

    ANY = "any"  # facility and personal events alike
    FACILITY = "facility"  # events without a subject
    SUBJECT = "subject"  # events of one subject


class MovementEvent(BaseModel):
    """
    Immutable fact recorded in the ledger.

    An absent subject_id means facility-wide stock; a present one means the
    subject's personal allocation. Quantity is validated on append, not on
    construction, so malformed events surface as ledger ValidationErrors.
    """

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    movement_date: date
    direction: MovementDirection
    item_id: str
    subject_id: str | None = None
    quantity: int
    note: str = ""

    @property
    def signed_quantity(self) -> int:
        """Quantity with IN positive and OUT negative."""
        if self.direction == MovementDirection.IN:
            return self.quantity
        return -self.quantity

    @property
    def is_facility(self) -> bool:
        return self.subject_id is None


class MovementFilter(BaseModel):
    """Selection criteria for ledger queries. Date bounds are inclusive."""

    model_config = ConfigDict(frozen=True)

    item_id: str | None = None
    subject_scope: SubjectScope = SubjectScope.ANY
    subject_id: str | None = None
    date_from: date | None = None
    date_to: date | None = None
    direction: MovementDirection | None = None

    @model_validator(mode="after")
    def check_subject_scope(self) -> "MovementFilter":
        if self.subject_scope == SubjectScope.SUBJECT and not self.subject_id:
            raise ValueError("subject_id is required when subject_scope is 'subject'")
        if self.subject_scope != SubjectScope.SUBJECT and self.subject_id:
            raise ValueError("subject_id is only allowed when subject_scope is 'subject'")
        return self

    @classmethod
    def for_pair(
        cls,
        item_id: str,
        subject_id: str | None = None,
        **kwargs: object,
    ) -> "MovementFilter":
        """
        Build the exact (item, subject) filter.

        subject_id=None selects the facility pool only, never all subjects.
        """
        if subject_id is None:
            return cls(item_id=item_id, subject_scope=SubjectScope.FACILITY, **kwargs)
        return cls(
            item_id=item_id,
            subject_scope=SubjectScope.SUBJECT,
            subject_id=subject_id,
            **kwargs,
        )

    def matches(self, event: MovementEvent) -> bool:
        """Check whether an event satisfies every criterion."""
        if self.item_id is not None and event.item_id != self.item_id:
            return False
        if self.subject_scope == SubjectScope.FACILITY and event.subject_id is not None:
            return False
        if self.subject_scope == SubjectScope.SUBJECT and event.subject_id != self.subject_id:
            return False
        if self.date_from is not None and event.movement_date < self.date_from:
            return False
        if self.date_to is not None and event.movement_date > self.date_to:
            return False
        if self.direction is not None and event.direction != self.direction:
            return False
        return True
