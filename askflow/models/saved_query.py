"""Saved prompt/response records and remote call payloads."""

from pydantic import BaseModel


class SavedQuery(BaseModel):
    """A persisted prompt/response pair."""

    model_config = {"frozen": True}

    id: str
    prompt: str
    response: str
    timestamp: str  # ISO8601 UTC


class SaveQueryRequest(BaseModel):
    """Request body for saving a prompt/response pair."""

    prompt: str
    response: str
    timestamp: str | None = None  # client-side hint, server stamps its own


class SaveQueryResult(BaseModel):
    id: str
    message: str = "Data saved successfully"


class AskAIRequest(BaseModel):
    prompt: str


class AskAIResult(BaseModel):
    """Text-generation result for a single prompt."""

    # protected_namespaces() removes field naming protections from Pydantic ("model_")
    model_config = {"protected_namespaces": ()}

    response: str
    model: str


class DeleteQueryResult(BaseModel):
    id: str
    message: str = "Query deleted successfully"
