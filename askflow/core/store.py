"""Canonical flow store.

Single source of truth for the two-node flow. Every mutation goes through a
named method that builds a complete new FlowState and swaps it in with one
assignment, so no listener can observe prompt_text and the input node's
text disagreeing.
"""

import logging
from typing import Callable, Iterable

from askflow.core.invalidator import SavedStateInvalidator
from askflow.models.flow_state import (
    Edge,
    FlowState,
    Node,
    NodeRole,
    Position,
    SavedStatus,
    initial_state,
)
from askflow.models.saved_query import SavedQuery

logger = logging.getLogger(__name__)

StateListener = Callable[[FlowState], None]


def _replace_node_text(nodes: tuple[Node, ...], role: NodeRole, text: str) -> tuple[Node, ...]:
    return tuple(
        node.model_copy(update={"text": text}) if node.role == role else node
        for node in nodes
    )


class FlowStore:
    """Holds the current FlowState and notifies subscribers on change."""

    def __init__(
        self,
        invalidator: SavedStateInvalidator | None = None,
        state: FlowState | None = None,
    ) -> None:
        self.invalidator = invalidator or SavedStateInvalidator()
        self._state = state or initial_state()
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> FlowState:
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register *listener*; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _commit(self, new_state: FlowState) -> None:
        if new_state == self._state:
            return
        self._state = new_state
        for listener in list(self._listeners):
            listener(new_state)

    # --- text ---

    def _with_prompt(self, state: FlowState, text: str) -> dict:
        return {
            "nodes": _replace_node_text(state.nodes, NodeRole.input, text),
            "prompt_text": text,
            "saved": self.invalidator.on_prompt_edit(state, text),
        }

    def _with_response(self, state: FlowState, text: str) -> dict:
        return {
            "nodes": _replace_node_text(state.nodes, NodeRole.output, text),
            "response_text": text,
        }

    def set_prompt(self, text: str) -> None:
        """Rewrite the input node text and prompt_text together."""
        state = self._state
        self._commit(state.model_copy(update=self._with_prompt(state, text)))

    def set_response(self, text: str) -> None:
        """Rewrite the output node text and response_text; saved status is kept."""
        state = self._state
        self._commit(state.model_copy(update=self._with_response(state, text)))

    def update_node_text(self, node_id: str, text: str) -> None:
        """Edit a node's text by id, routed through the role's mirror field."""
        node = self._state.node(node_id)
        if node.role == NodeRole.input:
            self.set_prompt(text)
        else:
            self.set_response(text)

    def apply_ai_response(self, text: str) -> None:
        """Show a freshly generated response; the pair becomes Dirty."""
        state = self._state
        update = self._with_response(state, text)
        update["saved"] = self.invalidator.on_ai_response(state)
        self._commit(state.model_copy(update=update))

    # --- structure ---

    def set_node_position(self, node_id: str, position: Position) -> None:
        state = self._state
        state.node(node_id)  # raises KeyError for unknown ids
        nodes = tuple(
            node.model_copy(update={"position": position}) if node.id == node_id else node
            for node in state.nodes
        )
        self._commit(state.model_copy(update={"nodes": nodes}))

    def set_edges(self, edges: Iterable[Edge]) -> None:
        self._commit(self._state.model_copy(update={"edges": tuple(edges)}))

    def set_flow_running(self, running: bool) -> None:
        self._commit(self._state.model_copy(update={"is_flow_running": running}))

    def reset(self) -> None:
        """Restore the initial nodes, edge and empty texts in one step."""
        logger.debug("resetting flow")
        self._commit(initial_state())

    # --- saved status ---

    def commit_save(self, saved_prompt: str, query_id: str) -> None:
        """Record a successful save of *saved_prompt* under *query_id*."""
        state = self._state
        self._commit(
            state.model_copy(
                update={
                    "saved": self.invalidator.on_save_committed(state, saved_prompt),
                    "last_saved_prompt_text": saved_prompt,
                    "current_query_id": query_id,
                }
            )
        )

    def clear_saved(self) -> None:
        """Forget the last save, e.g. after its record was deleted."""
        self._commit(
            self._state.model_copy(
                update={
                    "saved": SavedStatus.dirty,
                    "last_saved_prompt_text": "",
                    "current_query_id": None,
                }
            )
        )

    def load_query(self, query: SavedQuery) -> None:
        """Copy a saved pair into the flow.

        Goes through the same prompt rule as typing: the pair is not marked
        Clean by loading it, only by saving it.
        """
        state = self._state
        update = self._with_prompt(state, query.prompt)
        update["nodes"] = _replace_node_text(update["nodes"], NodeRole.output, query.response)
        update["response_text"] = query.response
        update["current_query_id"] = query.id
        self._commit(state.model_copy(update=update))
