"""Sync between the canonical store and a rendering engine.

Two one-way flows with distinct triggers:

* store -> engine: every FlowState change (and every tracker change, since
  the running flag depends on it) re-projects the full node/edge arrays.
* engine -> store: only user gestures (drag, connect) are lifted back, and
  a lift never triggers a projection, so positions cannot ping-pong.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Protocol

from askflow.core.store import FlowStore
from askflow.core.tracker import RequestTracker
from askflow.models.flow_state import Edge, FlowState, Node, NodeRole, Position
from askflow.models.request_record import RequestKind
from askflow.utils.identifiers import generate_edge_id

logger = logging.getLogger(__name__)

NODE_TYPES = {
    NodeRole.input: "inputNode",
    NodeRole.output: "outputNode",
}


@dataclass(frozen=True)
class RenderNodeData:
    label: str
    value: str
    node_type: str
    is_running: bool
    on_change: Callable[[str], None] | None = None


@dataclass(frozen=True)
class RenderNode:
    """A node as the rendering engine sees it."""

    id: str
    type: str
    position: Position
    data: RenderNodeData


class GestureHandler(Protocol):
    """Receives structural edits made by the user inside the engine."""

    def handle_node_drag(self, node_id: str, position: Position) -> None:
        ...

    def handle_connect(self, source: str, target: str) -> Edge | None:
        ...


class RenderEngine(Protocol):
    """Protocol implemented by rendering engines the adapter can drive."""

    def set_nodes(self, nodes: list[RenderNode]) -> None:
        ...

    def set_edges(self, edges: list[Edge]) -> None:
        ...

    def set_gesture_handler(self, handler: GestureHandler | None) -> None:
        ...


@dataclass
class ListRenderEngine:
    """Headless engine that keeps the projected arrays in lists.

    drag() and connect() replay user gestures: the engine updates its own
    copy first, as an interactive engine would, then reports the edit.
    """

    nodes: list[RenderNode] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)
    projections: int = 0
    handler: GestureHandler | None = None

    def set_nodes(self, nodes: list[RenderNode]) -> None:
        self.nodes = list(nodes)
        self.projections += 1

    def set_edges(self, edges: list[Edge]) -> None:
        self.edges = list(edges)

    def set_gesture_handler(self, handler: GestureHandler | None) -> None:
        self.handler = handler

    def node(self, node_id: str) -> RenderNode:
        for node in self.nodes:
            if node.id == node_id:
                return node
        raise KeyError(f"Unknown render node: {node_id}")

    def drag(self, node_id: str, x: float, y: float) -> None:
        position = Position(x=x, y=y)
        self.nodes = [
            RenderNode(id=n.id, type=n.type, position=position, data=n.data) if n.id == node_id else n
            for n in self.nodes
        ]
        if self.handler is not None:
            self.handler.handle_node_drag(node_id, position)

    def connect(self, source: str, target: str) -> Edge | None:
        if self.handler is None:
            return None
        edge = self.handler.handle_connect(source, target)
        if edge is not None and all(e.id != edge.id for e in self.edges):
            self.edges = [*self.edges, edge]
        return edge

    def type_text(self, node_id: str, text: str) -> None:
        """Simulate typing into a node's text field."""
        on_change = self.node(node_id).data.on_change
        if on_change is None:
            raise ValueError(f"Node {node_id} is read-only")
        on_change(text)


class SyncAdapter:
    """Bridges a FlowStore and a RenderEngine."""

    def __init__(self, store: FlowStore, tracker: RequestTracker, engine: RenderEngine) -> None:
        self.store = store
        self.tracker = tracker
        self.engine = engine
        self._lifting = False
        self._unsubscribers: list[Callable[[], None]] = []

    def attach(self) -> None:
        """Start syncing and push an initial projection."""
        if self._unsubscribers:
            return
        self._unsubscribers = [
            self.store.subscribe(self._on_state_change),
            self.tracker.subscribe(self._on_requests_change),
        ]
        self.engine.set_gesture_handler(self)
        self.project(self.store.state)

    def detach(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self.engine.set_gesture_handler(None)

    def _on_state_change(self, state: FlowState) -> None:
        if self._lifting:
            return
        self.project(state)

    def _on_requests_change(self) -> None:
        self.project(self.store.state)

    def _on_input_change(self, text: str) -> None:
        self.store.update_node_text(self.store.state.input_node.id, text)

    def is_running(self, state: FlowState) -> bool:
        return self.tracker.is_pending(RequestKind.ask_ai) or state.is_flow_running

    def render_node(self, node: Node, running: bool) -> RenderNode:
        return RenderNode(
            id=node.id,
            type=NODE_TYPES[node.role],
            position=node.position,
            data=RenderNodeData(
                label=node.label,
                value=node.text,
                node_type=node.role.value,
                is_running=running,
                on_change=self._on_input_change if node.role == NodeRole.input else None,
            ),
        )

    def project(self, state: FlowState) -> None:
        """Push the full node and edge arrays derived from *state*."""
        running = self.is_running(state)
        self.engine.set_nodes([self.render_node(node, running) for node in state.nodes])
        self.engine.set_edges(list(state.edges))

    # --- gestures lifted from the engine ---

    def handle_node_drag(self, node_id: str, position: Position) -> None:
        self._lifting = True
        try:
            self.store.set_node_position(node_id, position)
        finally:
            self._lifting = False

    def handle_connect(self, source: str, target: str) -> Edge | None:
        """Lift a user-drawn connection; an already connected pair is ignored."""
        state = self.store.state
        state.node(source)
        state.node(target)
        if any(e.source == source and e.target == target for e in state.edges):
            logger.debug("ignoring duplicate connection %s -> %s", source, target)
            return None
        edge = Edge(id=generate_edge_id(source, target), source=source, target=target)
        self._lifting = True
        try:
            self.store.set_edges([*state.edges, edge])
        finally:
            self._lifting = False
        return edge
