"""Core data models for askflow."""

from askflow.models.flow_state import (
    INPUT_NODE_ID,
    OUTPUT_NODE_ID,
    Edge,
    FlowState,
    Node,
    NodeRole,
    Position,
    SavedStatus,
    initial_state,
)
from askflow.models.history import HistoryEntry
from askflow.models.request_record import (
    RequestKind,
    RequestRecord,
    RequestStatus,
)
from askflow.models.saved_query import (
    AskAIRequest,
    AskAIResult,
    DeleteQueryResult,
    SavedQuery,
    SaveQueryRequest,
    SaveQueryResult,
)

__all__ = [
    # Flow
    "INPUT_NODE_ID",
    "OUTPUT_NODE_ID",
    "Edge",
    "FlowState",
    "Node",
    "NodeRole",
    "Position",
    "SavedStatus",
    "initial_state",
    # Requests
    "RequestKind",
    "RequestRecord",
    "RequestStatus",
    # Saved queries and remote payloads
    "AskAIRequest",
    "AskAIResult",
    "DeleteQueryResult",
    "SavedQuery",
    "SaveQueryRequest",
    "SaveQueryResult",
    # History
    "HistoryEntry",
]
