"""Backend client for the four remote operations.

The core only depends on the Backend protocol. HttpBackend implements it
against the askflow server and maps HTTP failures onto the error taxonomy
in askflow.errors, so callers never see raw httpx exceptions.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx
from pydantic import BaseModel, ValidationError

from askflow.errors import (
    FlowError,
    InvalidIdError,
    NotFoundError,
    QueryValidationError,
    RateLimitedError,
    RemoteError,
)
from askflow.models.saved_query import AskAIResult, SavedQuery, SaveQueryResult
from askflow.utils.identifiers import is_valid_query_id

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "An unexpected error occurred"


class Backend(Protocol):
    """Remote operations consumed by the core."""

    async def ask_ai(self, prompt: str) -> AskAIResult:
        ...

    async def save_query(self, prompt: str, response: str) -> SaveQueryResult:
        ...

    async def list_queries(self) -> list[SavedQuery]:
        """Saved queries, newest first, at most 100."""
        ...

    async def delete_query(self, query_id: str) -> None:
        ...


def _error_message(response: httpx.Response) -> str:
    """Pull a human readable message out of an error response body."""
    try:
        data = response.json()
    except ValueError:
        return DEFAULT_ERROR_MESSAGE
    if isinstance(data, dict):
        for key in ("detail", "message", "error"):
            value = data.get(key)
            if isinstance(value, str) and value:
                return value
    return DEFAULT_ERROR_MESSAGE


def _parse(model: type[BaseModel], data: Any) -> Any:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise RemoteError(f"Unexpected response payload for {model.__name__}") from e


class HttpBackend:
    """Talk to the askflow server over HTTP.

    Usage:
        backend = HttpBackend("http://localhost:5000/api")
        result = await backend.ask_ai("What is 2+2?")
    """

    def __init__(
        self,
        base_url: str = "http://localhost:5000/api",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            base_url: Base URL of the askflow API (including the /api prefix)
            timeout: HTTP request timeout in seconds
            transport: Optional httpx transport, e.g. httpx.MockTransport in tests
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        status_errors: dict[int, type[FlowError]] | None = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.request(method, url, json=json, params=params)
        except httpx.RequestError as e:
            raise RemoteError(f"Failed to connect to server at {self.base_url}: {e}") from e

        if response.is_error:
            message = _error_message(response)
            error_cls = (status_errors or {}).get(response.status_code)
            if error_cls is None:
                error_cls = RateLimitedError if response.status_code == 429 else RemoteError
            logger.warning("%s %s failed with %s: %s", method, path, response.status_code, message)
            raise error_cls(message, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise RemoteError(f"Invalid JSON from {path}", status_code=response.status_code) from e

    async def ask_ai(self, prompt: str) -> AskAIResult:
        data = await self._request("POST", "/ask-ai", json={"prompt": prompt})
        return _parse(AskAIResult, data)

    async def save_query(self, prompt: str, response: str) -> SaveQueryResult:
        if not prompt.strip() or not response.strip():
            raise QueryValidationError("Prompt and response are required", status_code=400)
        data = await self._request(
            "POST",
            "/save",
            json={"prompt": prompt, "response": response},
            status_errors={400: QueryValidationError, 422: QueryValidationError},
        )
        return _parse(SaveQueryResult, data)

    async def list_queries(self) -> list[SavedQuery]:
        data = await self._request("GET", "/queries")
        if not isinstance(data, list):
            raise RemoteError("Expected a list of saved queries")
        return [_parse(SavedQuery, item) for item in data]

    async def delete_query(self, query_id: str) -> None:
        if not is_valid_query_id(query_id):
            raise InvalidIdError(f"Invalid query id: {query_id}", status_code=400)
        await self._request(
            "DELETE",
            f"/queries/{query_id}",
            status_errors={400: InvalidIdError, 404: NotFoundError},
        )
