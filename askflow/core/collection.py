"""Local mirror of the remote saved-query collection."""

import logging
from typing import Callable, Iterable

from askflow.models.saved_query import SavedQuery

logger = logging.getLogger(__name__)


class SavedQueryCollection:
    """Newest-first list of saved queries plus the last fetch error.

    A refresh replaces the whole list; optimistic edits insert or remove
    single records in between refreshes.
    """

    def __init__(self, items: Iterable[SavedQuery] = ()) -> None:
        self._items: list[SavedQuery] = list(items)
        self.error: str | None = None
        self._listeners: list[Callable[[list[SavedQuery]], None]] = []

    def subscribe(self, listener: Callable[[list[SavedQuery]], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        items = self.items
        for listener in list(self._listeners):
            listener(items)

    @property
    def items(self) -> list[SavedQuery]:
        return list(self._items)

    @property
    def ids(self) -> list[str]:
        return [query.id for query in self._items]

    def get(self, query_id: str) -> SavedQuery | None:
        for query in self._items:
            if query.id == query_id:
                return query
        return None

    def __contains__(self, query_id: object) -> bool:
        return any(query.id == query_id for query in self._items)

    def __len__(self) -> int:
        return len(self._items)

    def replace(self, items: Iterable[SavedQuery]) -> None:
        """Replace the whole collection (no merge)."""
        self._items = list(items)
        self._notify()

    def insert_if_absent(self, query: SavedQuery) -> bool:
        """Insert *query* at the front unless a record with its id exists."""
        if query.id in self:
            return False
        self._items.insert(0, query)
        self._notify()
        return True

    def remove(self, query_id: str) -> SavedQuery | None:
        query = self.get(query_id)
        if query is None:
            return None
        self._items = [item for item in self._items if item.id != query_id]
        self._notify()
        return query
