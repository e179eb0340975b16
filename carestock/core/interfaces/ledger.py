"""Abstract interfaces for the movement ledger."""

from abc import ABC, abstractmethod

from carestock.core.entities.movement import MovementEvent, MovementFilter


class ILedgerReader(ABC):
    """Read side of the ledger: replayable, filterable event history."""

    @abstractmethod
    def query(self, movement_filter: MovementFilter) -> list[MovementEvent]:
        """Return matching events in append order."""
        pass


class ILedger(ILedgerReader):
    """Append-only movement ledger. No update or delete is exposed."""

    @abstractmethod
    def append(self, event: MovementEvent) -> str:
        """Validate and record an event, returning its id."""
        pass

    @abstractmethod
    def snapshot(self) -> ILedgerReader:
        """Return an immutable view of every event appended so far."""
        pass
