"""Abstract interfaces for catalog and subject lookups."""

from abc import ABC, abstractmethod

from carestock.core.entities.catalog import Item, SubjectInfo


class ICatalog(ABC):
    """Read-only item catalog."""

    @abstractmethod
    def get_item(self, item_id: str) -> Item | None:
        """Get item by ID, or None for an unknown item."""
        pass

    @abstractmethod
    def list_items(self) -> list[Item]:
        """List every catalog item."""
        pass


class ISubjectRegistry(ABC):
    """Subject lookup used for human-readable messages only."""

    @abstractmethod
    def get_subject(self, subject_id: str) -> SubjectInfo | None:
        """Get subject by ID, or None for an unknown subject."""
        pass
