"""Balance derivation over ledger snapshots."""

from datetime import date

from carestock.core.entities.movement import MovementFilter
from carestock.core.interfaces.ledger import ILedgerReader
from carestock.core.services.ledger import LedgerSnapshot


class BalanceCalculator:
    """
    Derives stock balances as a pure fold over ledger events.

    Balance = sum of IN quantities minus sum of OUT quantities over the
    events matching (item_id, subject_id) exactly. subject_id=None is the
    facility pool, never the union of all pools.
    """

    def __init__(self, reader: ILedgerReader) -> None:
        self._reader = reader

    def balance_of(
        self,
        item_id: str,
        subject_id: str | None = None,
        as_of: date | None = None,
    ) -> int:
        """
        Current balance of one stock pool.

        Args:
            item_id: Catalog item id. Unknown items have balance 0.
            subject_id: Owner of a personal pool, or None for facility stock.
            as_of: If given, events dated after it are ignored.

        Returns:
            Signed integer balance; negative when OUT exceeded IN.
        """
        movement_filter = MovementFilter.for_pair(item_id, subject_id, date_to=as_of)

        def compute() -> int:
            return sum(e.signed_quantity for e in self._reader.query(movement_filter))

        if isinstance(self._reader, LedgerSnapshot):
            return self._reader.cached_balance((item_id, subject_id, as_of), compute)
        return compute()

    def total_across_subjects(self, item_id: str, as_of: date | None = None) -> int:
        """Sum of every personal balance of an item. Facility stock excluded."""
        return sum(self.balances_by_subject(item_id, as_of).values())

    def balances_by_subject(self, item_id: str, as_of: date | None = None) -> dict[str, int]:
        """Personal balance of every subject that ever held the item."""
        events = self._reader.query(MovementFilter(item_id=item_id, date_to=as_of))
        result: dict[str, int] = {}
        for event in events:
            if event.subject_id is None:
                continue
            result[event.subject_id] = result.get(event.subject_id, 0) + event.signed_quantity
        return result
