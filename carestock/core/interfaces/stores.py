"""Abstract interfaces for persistent storage used by the application layer."""

from abc import ABC, abstractmethod

from carestock.core.entities.catalog import Item, SubjectInfo
from carestock.core.entities.movement import MovementEvent, MovementFilter


class IMovementStore(ABC):
    """Interface for append-only movement persistence."""

    @abstractmethod
    async def append(
        self,
        event: MovementEvent,
        enforce_available: bool = False,
    ) -> MovementEvent:
        """Validate and persist an event, returning it with its id.

        With enforce_available, an OUT event that would drive its pool
        below zero is rejected atomically.
        """
        pass

    @abstractmethod
    async def list_movements(
        self,
        movement_filter: MovementFilter,
        limit: int = 100,
        offset: int = 0,
    ) -> list[MovementEvent]:
        """List matching movements, most recent first."""
        pass

    @abstractmethod
    async def load_events(self) -> list[MovementEvent]:
        """Load the full event history in append order, in one read."""
        pass

    @abstractmethod
    async def balance(self, item_id: str, subject_id: str | None = None) -> int:
        """Current balance of one (item, subject) pool."""
        pass


class ICatalogStore(ABC):
    """Interface for item catalog and subject registry persistence."""

    @abstractmethod
    async def upsert_item(self, item: Item) -> Item:
        """Create or update a catalog item."""
        pass

    @abstractmethod
    async def get_item(self, item_id: str) -> Item | None:
        """Get catalog item by ID."""
        pass

    @abstractmethod
    async def list_items(self, category: str | None = None) -> list[Item]:
        """List catalog items ordered by name."""
        pass

    @abstractmethod
    async def upsert_subject(self, subject: SubjectInfo) -> SubjectInfo:
        """Create or update a subject."""
        pass

    @abstractmethod
    async def get_subject(self, subject_id: str) -> SubjectInfo | None:
        """Get subject by ID."""
        pass

    @abstractmethod
    async def list_subjects(self, active_only: bool = False) -> list[SubjectInfo]:
        """List subjects ordered by display name."""
        pass
