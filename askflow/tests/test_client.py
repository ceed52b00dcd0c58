"""Tests for HttpBackend using httpx.MockTransport."""

import asyncio
import json

import httpx
import pytest

from askflow.errors import (
    InvalidIdError,
    NotFoundError,
    QueryValidationError,
    RateLimitedError,
    RemoteError,
)
from askflow.sdk.client import HttpBackend

QUERY_ID = "0123456789abcdef0123456789abcdef"


def _backend(handler) -> HttpBackend:
    return HttpBackend("http://test/api", transport=httpx.MockTransport(handler))


class TestSuccessfulCalls:
    def test_ask_ai_posts_prompt(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"response": "4", "model": "test-model"})

        result = asyncio.run(_backend(handler).ask_ai("What is 2+2?"))

        assert (result.response, result.model) == ("4", "test-model")
        assert seen == {
            "method": "POST",
            "url": "http://test/api/ask-ai",
            "body": {"prompt": "What is 2+2?"},
        }

    def test_save_returns_id(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/save"
            return httpx.Response(200, json={"id": QUERY_ID, "message": "Data saved successfully"})

        result = asyncio.run(_backend(handler).save_query("p", "r"))
        assert result.id == QUERY_ID

    def test_list_queries_parses_records(self):
        payload = [
            {"id": QUERY_ID, "prompt": "p", "response": "r", "timestamp": "2024-01-01T00:00:00+00:00"}
        ]

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "GET"
            return httpx.Response(200, json=payload)

        [query] = asyncio.run(_backend(handler).list_queries())
        assert (query.id, query.prompt, query.response) == (QUERY_ID, "p", "r")

    def test_delete_hits_query_url(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append((request.method, request.url.path))
            return httpx.Response(200, json={"id": QUERY_ID, "message": "Query deleted successfully"})

        asyncio.run(_backend(handler).delete_query(QUERY_ID))
        assert seen == [("DELETE", f"/api/queries/{QUERY_ID}")]


class TestErrorMapping:
    """HTTP failures surface as the matching FlowError subclass."""

    def test_rate_limit(self):
        def handler(request):
            return httpx.Response(429, json={"detail": "Rate limit exceeded"})

        with pytest.raises(RateLimitedError) as exc_info:
            asyncio.run(_backend(handler).ask_ai("hi"))
        assert exc_info.value.message == "Rate limit exceeded"
        assert exc_info.value.status_code == 429

    def test_server_error_uses_body_message(self):
        def handler(request):
            return httpx.Response(500, json={"error": "boom"})

        with pytest.raises(RemoteError, match="boom"):
            asyncio.run(_backend(handler).ask_ai("hi"))

    def test_unreadable_error_body_gets_default_message(self):
        def handler(request):
            return httpx.Response(502, text="<html>bad gateway</html>")

        with pytest.raises(RemoteError) as exc_info:
            asyncio.run(_backend(handler).list_queries())
        assert exc_info.value.message == "An unexpected error occurred"

    def test_save_validation_error(self):
        def handler(request):
            return httpx.Response(400, json={"detail": "Prompt and response are required"})

        with pytest.raises(QueryValidationError):
            asyncio.run(_backend(handler).save_query("p", "r"))

    def test_delete_not_found(self):
        def handler(request):
            return httpx.Response(404, json={"detail": "Query not found"})

        with pytest.raises(NotFoundError):
            asyncio.run(_backend(handler).delete_query(QUERY_ID))

    def test_delete_invalid_id_from_server(self):
        def handler(request):
            return httpx.Response(400, json={"detail": "Invalid query ID"})

        with pytest.raises(InvalidIdError):
            asyncio.run(_backend(handler).delete_query(QUERY_ID))

    def test_connection_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(RemoteError, match="Failed to connect"):
            asyncio.run(_backend(handler).ask_ai("hi"))

    def test_unexpected_payload(self):
        def handler(request):
            return httpx.Response(200, json={"unexpected": True})

        with pytest.raises(RemoteError):
            asyncio.run(_backend(handler).ask_ai("hi"))

    def test_list_requires_array(self):
        def handler(request):
            return httpx.Response(200, json={"queries": []})

        with pytest.raises(RemoteError):
            asyncio.run(_backend(handler).list_queries())


class TestLocalChecks:
    """Requests that are rejected before touching the network."""

    def _unreachable(self, request):
        raise AssertionError("no request expected")

    def test_blank_save_rejected_locally(self):
        with pytest.raises(QueryValidationError):
            asyncio.run(_backend(self._unreachable).save_query("p", "  "))

    def test_malformed_id_rejected_locally(self):
        with pytest.raises(InvalidIdError):
            asyncio.run(_backend(self._unreachable).delete_query("not-an-id"))
