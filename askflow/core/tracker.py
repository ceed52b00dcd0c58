"""Request tracker for in-flight remote operations.

A flat table of RequestRecords keyed by request id. Loading flags are
derived by scanning the table per kind instead of keeping per-kind
booleans, so concurrent calls of the same kind cannot cross-cancel.
"""

import logging
from contextlib import contextmanager
from typing import Callable, Generator

from askflow.models.request_record import RequestKind, RequestRecord, RequestStatus
from askflow.utils.identifiers import generate_request_id, utc_timestamp

logger = logging.getLogger(__name__)


class RequestTracker:
    """Tracks every outgoing async operation by a unique id."""

    def __init__(self) -> None:
        self._records: dict[str, RequestRecord] = {}
        self._listeners: list[Callable[[], None]] = []

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Register *listener* for start/complete events; returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    @property
    def records(self) -> list[RequestRecord]:
        return list(self._records.values())

    def get(self, request_id: str) -> RequestRecord | None:
        return self._records.get(request_id)

    def start(self, kind: RequestKind) -> str:
        """Open a pending record for a new call of *kind* and return its id."""
        request_id = generate_request_id(kind.value)
        self._records[request_id] = RequestRecord(
            request_id=request_id,
            kind=kind,
            started_at=utc_timestamp(),
        )
        logger.debug("request started: %s", request_id)
        self._notify()
        return request_id

    def complete(self, request_id: str, error: str | None = None) -> None:
        """Close the record identified by *request_id*.

        On success the record is removed, along with earlier failures of the
        same kind it supersedes. On failure the record is kept with *error*.
        Unknown ids are ignored.
        """
        record = self._records.get(request_id)
        if record is None:
            return
        if error is not None:
            self._records[request_id] = record.model_copy(
                update={"status": RequestStatus.failed, "error": error}
            )
            logger.debug("request failed: %s: %s", request_id, error)
        else:
            del self._records[request_id]
            self._drop_failures(record.kind)
            logger.debug("request completed: %s", request_id)
        self._notify()

    def is_pending(self, kind: RequestKind) -> bool:
        """True iff at least one record of *kind* is still pending."""
        return any(
            record.kind == kind and record.status == RequestStatus.pending
            for record in self._records.values()
        )

    def failures(self, kind: RequestKind | None = None) -> list[RequestRecord]:
        return [
            record
            for record in self._records.values()
            if record.status == RequestStatus.failed and (kind is None or record.kind == kind)
        ]

    def clear(self, request_id: str) -> None:
        """Drop a failed record once the caller has dealt with it."""
        record = self._records.get(request_id)
        if record is not None and record.status == RequestStatus.failed:
            del self._records[request_id]
            self._notify()

    def clear_failures(self, kind: RequestKind | None = None) -> None:
        if self._drop_failures(kind):
            self._notify()

    def _drop_failures(self, kind: RequestKind | None) -> int:
        stale = [record.request_id for record in self.failures(kind)]
        for request_id in stale:
            del self._records[request_id]
        return len(stale)

    @contextmanager
    def track(self, kind: RequestKind) -> Generator[str, None, None]:
        """Track the body as one call of *kind*.

        Usage:
            with tracker.track(RequestKind.ask_ai):
                result = await backend.ask_ai(prompt)

        An exception leaving the body, cancellation included, completes the
        record with its message and propagates.
        """
        request_id = self.start(kind)
        try:
            yield request_id
        except BaseException as exc:
            # includes asyncio.CancelledError, so a cancelled task never stays pending
            self.complete(request_id, error=str(exc) or type(exc).__name__)
            raise
        self.complete(request_id)
