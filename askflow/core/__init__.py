"""State-synchronization and request-lifecycle engine."""

from askflow.core.collection import SavedQueryCollection
from askflow.core.controller import FlowController
from askflow.core.history import RunHistory
from askflow.core.invalidator import SavedStateInvalidator
from askflow.core.optimistic import OptimisticMutation, OptimisticMutationManager
from askflow.core.store import FlowStore
from askflow.core.sync import ListRenderEngine, RenderEngine, RenderNode, SyncAdapter
from askflow.core.tracker import RequestTracker

__all__ = [
    "FlowController",
    "FlowStore",
    "ListRenderEngine",
    "OptimisticMutation",
    "OptimisticMutationManager",
    "RenderEngine",
    "RenderNode",
    "RequestTracker",
    "RunHistory",
    "SavedQueryCollection",
    "SavedStateInvalidator",
    "SyncAdapter",
]
