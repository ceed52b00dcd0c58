"""Request lifecycle models for in-flight remote operations."""

from enum import Enum

from pydantic import BaseModel


class RequestKind(str, Enum):
    """Category of an async operation, used for aggregate loading flags."""

    ask_ai = "ask_ai"
    save = "save"
    fetch_saved = "fetch_saved"
    delete = "delete"


class RequestStatus(str, Enum):
    pending = "pending"
    failed = "failed"


class RequestRecord(BaseModel):
    """One outgoing remote call.

    Records are keyed by request_id, never by kind. A successful completion
    removes the record; a failed one keeps it with the error message.
    """

    model_config = {"frozen": True}

    request_id: str
    kind: RequestKind
    status: RequestStatus = RequestStatus.pending
    error: str | None = None
    started_at: str
