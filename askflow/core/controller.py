"""Presentation-facing controller for the flow.

Wires the store, tracker, saved-query collection and optimistic manager
to one backend and exposes the action entry points a UI calls. Actions
never raise remote errors: each failure is recorded on its request record
and as the controller's current error (last one wins) until dismissed.
"""

import logging

from askflow.core.collection import SavedQueryCollection
from askflow.core.history import RunHistory
from askflow.core.optimistic import OptimisticMutationManager
from askflow.core.store import FlowStore
from askflow.core.sync import RenderEngine, SyncAdapter
from askflow.core.tracker import RequestTracker
from askflow.errors import FlowError
from askflow.models.flow_state import FlowState, SavedStatus
from askflow.models.history import HistoryEntry
from askflow.models.request_record import RequestKind
from askflow.models.saved_query import AskAIResult, SavedQuery
from askflow.sdk.client import Backend

logger = logging.getLogger(__name__)

EMPTY_PROMPT_ERROR = "Please enter a question"
NOTHING_TO_SAVE_ERROR = "No data to save"


class FlowController:
    """Single entry point for a flow session.

    Usage:
        controller = FlowController(HttpBackend())
        await controller.fetch_saved_queries()
        controller.store.set_prompt("What is 2+2?")
        await controller.run_flow()
        await controller.save()
    """

    def __init__(
        self,
        backend: Backend,
        store: FlowStore | None = None,
        tracker: RequestTracker | None = None,
        collection: SavedQueryCollection | None = None,
        history: RunHistory | None = None,
    ) -> None:
        self.backend = backend
        self.store = store or FlowStore()
        self.tracker = tracker or RequestTracker()
        self.collection = collection or SavedQueryCollection()
        self.history = history or RunHistory()
        self.mutations = OptimisticMutationManager(
            self.store, self.collection, self.tracker, backend
        )
        self.error: str | None = None
        self._running_flows = 0
        self._adapter: SyncAdapter | None = None

    # --- read access ---

    @property
    def state(self) -> FlowState:
        return self.store.state

    @property
    def saved(self) -> SavedStatus:
        return self.store.state.saved

    @property
    def can_save(self) -> bool:
        """Save is offered for a Dirty pair with no save already in flight."""
        return self.store.invalidator.can_save(self.store.state) and not self.is_pending(
            RequestKind.save
        )

    @property
    def is_running(self) -> bool:
        return self.is_pending(RequestKind.ask_ai) or self.store.state.is_flow_running

    def is_pending(self, kind: RequestKind) -> bool:
        return self.tracker.is_pending(kind)

    @property
    def saved_queries(self) -> list[SavedQuery]:
        return self.collection.items

    @property
    def saved_queries_loading(self) -> bool:
        return self.tracker.is_pending(RequestKind.fetch_saved)

    @property
    def saved_queries_error(self) -> str | None:
        return self.collection.error

    @property
    def history_entries(self) -> list[HistoryEntry]:
        return self.history.entries

    # --- rendering ---

    def attach_renderer(self, engine: RenderEngine) -> SyncAdapter:
        """Keep *engine* in sync with the store until detach_renderer()."""
        self.detach_renderer()
        self._adapter = SyncAdapter(self.store, self.tracker, engine)
        self._adapter.attach()
        return self._adapter

    def detach_renderer(self) -> None:
        if self._adapter is not None:
            self._adapter.detach()
            self._adapter = None

    # --- errors ---

    def _fail(self, message: str) -> None:
        self.error = message

    def clear_error(self) -> None:
        self.error = None

    # --- actions ---

    async def run_flow(self) -> AskAIResult | None:
        """Send the current prompt to the text-generation service.

        Completions are applied in the order they resolve, so with two runs
        in flight the one that finishes last owns the output node.
        """
        prompt = self.store.state.prompt_text
        if not prompt.strip():
            self._fail(EMPTY_PROMPT_ERROR)
            return None

        self._running_flows += 1
        self.store.set_flow_running(True)
        try:
            with self.tracker.track(RequestKind.ask_ai):
                result = await self.backend.ask_ai(prompt)
        except FlowError as exc:
            logger.warning("ask_ai failed: %s", exc)
            self.store.set_response(f"Error: {exc.message or 'Failed to get AI response'}")
            self._fail(exc.message)
            return None
        finally:
            # stays set until the last of several concurrent runs finishes
            self._running_flows -= 1
            self.store.set_flow_running(self._running_flows > 0)

        self.store.apply_ai_response(result.response)
        self.history.add(prompt=prompt, response=result.response, model=result.model)
        return result

    async def save(self) -> SavedQuery | None:
        """Persist the current pair.

        Disabled (no-op) while the pair is already saved or a save is still
        in flight.
        """
        state = self.store.state
        if not state.prompt_text.strip() or not state.response_text.strip():
            self._fail(NOTHING_TO_SAVE_ERROR)
            return None
        if not self.can_save:
            logger.debug("save skipped, pair is already saved or being saved")
            return None
        try:
            return await self.mutations.save()
        except FlowError as exc:
            self._fail(exc.message)
            return None

    async def delete_query(self, query_id: str) -> bool:
        """Delete a saved query; returns False if the delete was rolled back."""
        try:
            await self.mutations.delete(query_id)
        except FlowError as exc:
            self._fail(exc.message)
            return False
        return True

    async def fetch_saved_queries(self) -> list[SavedQuery] | None:
        try:
            return await self.mutations.refresh()
        except FlowError as exc:
            self._fail(exc.message)
            return None

    def load_query(self, query_id: str) -> SavedQuery:
        """Show a saved pair in the flow; raises KeyError if it is not in the collection."""
        query = self.collection.get(query_id)
        if query is None:
            raise KeyError(f"Saved query not loaded: {query_id}")
        self.store.load_query(query)
        return query

    def reset_flow(self) -> None:
        self.store.reset()

    def clear_history(self) -> None:
        self.history.clear()
