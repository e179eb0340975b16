"""In-memory catalog and subject registry."""

from collections.abc import Iterable

from carestock.core.entities.catalog import Item, SubjectInfo
from carestock.core.interfaces.catalog import ICatalog, ISubjectRegistry


class InMemoryCatalog(ICatalog):
    """Catalog held in a dict, typically loaded once per query."""

    def __init__(self, items: Iterable[Item] = ()) -> None:
        self._items: dict[str, Item] = {item.id: item for item in items}

    def add(self, item: Item) -> None:
        self._items[item.id] = item

    def get_item(self, item_id: str) -> Item | None:
        return self._items.get(item_id)

    def list_items(self) -> list[Item]:
        return sorted(self._items.values(), key=lambda i: (i.name, i.id))


class InMemorySubjectRegistry(ISubjectRegistry):
    """Subject registry held in a dict."""

    def __init__(self, subjects: Iterable[SubjectInfo] = ()) -> None:
        self._subjects: dict[str, SubjectInfo] = {s.id: s for s in subjects}

    def add(self, subject: SubjectInfo) -> None:
        self._subjects[subject.id] = subject

    def get_subject(self, subject_id: str) -> SubjectInfo | None:
        return self._subjects.get(subject_id)
