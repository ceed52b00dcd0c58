"""askflow - prompt/response flow with synced state and optimistic persistence."""

from askflow.config import AskflowConfig, configure_logging, create_controller
from askflow.core import (
    FlowController,
    FlowStore,
    ListRenderEngine,
    OptimisticMutationManager,
    RequestTracker,
    SavedQueryCollection,
    SavedStateInvalidator,
    SyncAdapter,
)
from askflow.errors import (
    FlowError,
    InvalidIdError,
    NotFoundError,
    QueryValidationError,
    RateLimitedError,
    RemoteError,
)
from askflow.models import (
    Edge,
    FlowState,
    Node,
    NodeRole,
    Position,
    RequestKind,
    SavedQuery,
    SavedStatus,
)
from askflow.sdk import Backend, HttpBackend

__all__ = [
    # Core
    "FlowController",
    "FlowStore",
    "ListRenderEngine",
    "OptimisticMutationManager",
    "RequestTracker",
    "SavedQueryCollection",
    "SavedStateInvalidator",
    "SyncAdapter",
    # Models
    "Edge",
    "FlowState",
    "Node",
    "NodeRole",
    "Position",
    "RequestKind",
    "SavedQuery",
    "SavedStatus",
    # Errors
    "FlowError",
    "InvalidIdError",
    "NotFoundError",
    "QueryValidationError",
    "RateLimitedError",
    "RemoteError",
    # Client / config
    "AskflowConfig",
    "Backend",
    "HttpBackend",
    "configure_logging",
    "create_controller",
]
