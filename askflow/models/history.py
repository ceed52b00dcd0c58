"""Run history entry model."""

from pydantic import BaseModel


class HistoryEntry(BaseModel):
    """Record of one successful AskAI run, kept in memory only."""

    model_config = {"frozen": True, "protected_namespaces": ()}

    id: str
    timestamp: str
    prompt: str
    response: str
    model: str
