"""Optimistic mutations with commit-or-rollback.

Each remote mutation is an explicit two-phase object: apply() makes the
expected local change before the network call, then either commit() runs
with the remote result or rollback() repairs local state after a failure.
The manager runs the phases in order and guarantees a single rollback per
failed call.
"""

import logging
from typing import Any, Protocol

from askflow.core.collection import SavedQueryCollection
from askflow.core.store import FlowStore
from askflow.core.tracker import RequestTracker
from askflow.errors import FlowError
from askflow.models.request_record import RequestKind
from askflow.models.saved_query import SavedQuery, SaveQueryResult
from askflow.sdk.client import Backend
from askflow.utils.identifiers import utc_timestamp

logger = logging.getLogger(__name__)


class OptimisticMutation(Protocol):
    """Protocol implemented by the mutations the manager executes."""

    def apply(self) -> None:
        """Tentative local change, made before the remote call."""
        ...

    async def remote(self) -> Any:
        """The single remote call."""
        ...

    def commit(self, result: Any) -> None:
        """Make the local change final using the remote result."""
        ...

    async def rollback(self, error: FlowError) -> None:
        """Restore a consistent local state after the remote call failed."""
        ...


class _SaveMutation:
    """Save the current prompt/response pair."""

    def __init__(self, manager: "OptimisticMutationManager") -> None:
        self.manager = manager
        self.prompt = ""
        self.response = ""
        self.saved: SavedQuery | None = None

    def apply(self) -> None:
        # snapshot only; nothing becomes visible until the server assigns an id
        state = self.manager.store.state
        self.prompt = state.prompt_text
        self.response = state.response_text

    async def remote(self) -> SaveQueryResult:
        return await self.manager.backend.save_query(self.prompt, self.response)

    def commit(self, result: SaveQueryResult) -> None:
        self.saved = SavedQuery(
            id=result.id,
            prompt=self.prompt,
            response=self.response,
            timestamp=utc_timestamp(),
        )
        self.manager.store.commit_save(self.prompt, result.id)
        self.manager.collection.insert_if_absent(self.saved)
        logger.info("saved query %s", result.id)

    async def rollback(self, error: FlowError) -> None:
        # nothing was applied; the pair simply stays Dirty
        logger.warning("save failed, pair stays unsaved: %s", error)


class _DeleteMutation:
    """Delete one saved query, removing it locally first."""

    def __init__(self, manager: "OptimisticMutationManager", query_id: str) -> None:
        self.manager = manager
        self.query_id = query_id
        self._before: list[SavedQuery] = []
        self._rolled_back = False

    def apply(self) -> None:
        self._before = self.manager.collection.items
        self.manager.collection.remove(self.query_id)

    async def remote(self) -> None:
        await self.manager.backend.delete_query(self.query_id)

    def commit(self, result: None) -> None:
        store = self.manager.store
        if store.state.current_query_id == self.query_id:
            store.clear_saved()
        logger.info("deleted query %s", self.query_id)

    async def rollback(self, error: FlowError) -> None:
        """Re-fetch the remote collection instead of re-inserting locally.

        The server may have changed concurrently, so only a full refresh
        gives the true state. If that refresh fails too, fall back to the
        collection as it was before the delete was applied.
        """
        if self._rolled_back:
            return
        self._rolled_back = True
        logger.warning("delete of %s failed, refreshing saved queries: %s", self.query_id, error)
        try:
            await self.manager.refresh()
        except FlowError as refresh_error:
            logger.warning("refresh after failed delete also failed: %s", refresh_error)
            self.manager.collection.replace(self._before)


class OptimisticMutationManager:
    """Runs save/delete as optimistic mutations and owns the collection refresh."""

    def __init__(
        self,
        store: FlowStore,
        collection: SavedQueryCollection,
        tracker: RequestTracker,
        backend: Backend,
    ) -> None:
        self.store = store
        self.collection = collection
        self.tracker = tracker
        self.backend = backend

    async def execute(self, kind: RequestKind, mutation: OptimisticMutation) -> Any:
        """Apply, call remote, then commit; on FlowError roll back once and re-raise."""
        mutation.apply()
        try:
            with self.tracker.track(kind):
                result = await mutation.remote()
        except FlowError as exc:
            await mutation.rollback(exc)
            raise
        mutation.commit(result)
        return result

    async def save(self) -> SavedQuery:
        """Persist the current prompt/response pair and return the saved record."""
        mutation = _SaveMutation(self)
        await self.execute(RequestKind.save, mutation)
        return mutation.saved

    async def delete(self, query_id: str) -> None:
        await self.execute(RequestKind.delete, _DeleteMutation(self, query_id))

    async def refresh(self) -> list[SavedQuery]:
        """Replace the collection with the remote list.

        Safe to run concurrently with itself or with a rollback: each
        completion replaces the whole list, the last one to resolve wins.
        """
        self.collection.error = None
        try:
            with self.tracker.track(RequestKind.fetch_saved):
                items = await self.backend.list_queries()
        except FlowError as exc:
            self.collection.error = exc.message
            raise
        self.collection.replace(items)
        return items
