"""Catalog and subject registry entities."""

from datetime import datetime

from pydantic import BaseModel, Field


class Item(BaseModel):
    """
    Catalog entry referenced by id from ledger events.

    minimum_threshold is the facility-wide reorder point.
    """

    id: str
    name: str
    category: str = ""
    unit: str = "unit"
    minimum_threshold: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class SubjectInfo(BaseModel):
    """Owner of a personal stock pool, e.g. a resident."""

    id: str
    display_name: str
    is_active: bool = True

    @property
    def short_name(self) -> str:
        """First word of the display name, used in compact alert titles."""
        parts = self.display_name.split()
        return parts[0] if parts else self.display_name
