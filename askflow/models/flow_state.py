"""Canonical flow models.

The flow is fixed to a single Input -> Output pipeline: node "1" holds the
prompt, node "2" holds the response. A FlowState is an immutable snapshot;
the store swaps whole snapshots rather than editing one in place.
"""

from enum import Enum

from pydantic import BaseModel

INPUT_NODE_ID = "1"
OUTPUT_NODE_ID = "2"


class NodeRole(str, Enum):
    """Role of a node in the pipeline."""

    input = "input"
    output = "output"


class SavedStatus(str, Enum):
    """Whether the shown prompt/response pair matches the last persisted one."""

    clean = "clean"
    dirty = "dirty"


class Position(BaseModel):
    model_config = {"frozen": True}

    x: float
    y: float


class Node(BaseModel):
    """One of the two fixed nodes of the flow."""

    model_config = {"frozen": True}

    id: str
    role: NodeRole
    label: str
    position: Position
    text: str = ""


class Edge(BaseModel):
    model_config = {"frozen": True}

    id: str
    source: str
    target: str


class FlowState(BaseModel):
    """Snapshot of the canonical flow.

    prompt_text mirrors the input node's text and response_text mirrors the
    output node's text; every store mutation rewrites both sides at once.
    """

    model_config = {"frozen": True}

    nodes: tuple[Node, ...]
    edges: tuple[Edge, ...]
    prompt_text: str = ""
    response_text: str = ""
    saved: SavedStatus = SavedStatus.dirty
    last_saved_prompt_text: str = ""

    # id of the saved record last saved or loaded into the flow
    current_query_id: str | None = None
    # true while at least one run of the flow is in flight
    is_flow_running: bool = False

    def node(self, node_id: str) -> Node:
        """Get a node by id, raise KeyError if unknown."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        raise KeyError(f"Unknown node: {node_id}")

    def node_for_role(self, role: NodeRole) -> Node:
        for node in self.nodes:
            if node.role == role:
                return node
        raise KeyError(f"No node with role: {role.value}")

    @property
    def input_node(self) -> Node:
        return self.node_for_role(NodeRole.input)

    @property
    def output_node(self) -> Node:
        return self.node_for_role(NodeRole.output)

    @property
    def is_saved(self) -> bool:
        return self.saved == SavedStatus.clean


def initial_nodes() -> tuple[Node, ...]:
    return (
        Node(
            id=INPUT_NODE_ID,
            role=NodeRole.input,
            label="Input Node",
            position=Position(x=100, y=100),
        ),
        Node(
            id=OUTPUT_NODE_ID,
            role=NodeRole.output,
            label="Output Node",
            position=Position(x=400, y=100),
        ),
    )


def initial_edges() -> tuple[Edge, ...]:
    return (Edge(id="e1-2", source=INPUT_NODE_ID, target=OUTPUT_NODE_ID),)


def initial_state() -> FlowState:
    """The state a fresh session (or a reset) starts from."""
    return FlowState(nodes=initial_nodes(), edges=initial_edges())
