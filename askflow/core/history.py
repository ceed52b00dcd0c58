"""In-memory history of successful AskAI runs."""

from collections import deque

from askflow.models.history import HistoryEntry
from askflow.utils.identifiers import generate_history_id, utc_timestamp

MAX_HISTORY = 10


class RunHistory:
    """Newest-first list of the last MAX_HISTORY runs."""

    def __init__(self, max_entries: int = MAX_HISTORY) -> None:
        self._entries: deque[HistoryEntry] = deque(maxlen=max_entries)

    @property
    def entries(self) -> list[HistoryEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, prompt: str, response: str, model: str) -> HistoryEntry:
        entry = HistoryEntry(
            id=generate_history_id(),
            timestamp=utc_timestamp(),
            prompt=prompt,
            response=response,
            model=model,
        )
        # appendleft on a bounded deque drops the oldest entry from the right
        self._entries.appendleft(entry)
        return entry

    def clear(self) -> None:
        self._entries.clear()
