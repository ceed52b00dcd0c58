"""Shared fixtures: an in-process backend whose calls can be held and failed."""

import asyncio
from typing import Any

import pytest

from askflow.core.controller import FlowController
from askflow.errors import FlowError, NotFoundError, QueryValidationError
from askflow.models.saved_query import AskAIResult, SavedQuery, SaveQueryResult
from askflow.utils.identifiers import generate_query_id, utc_timestamp


class FakeBackend:
    """Backend double holding the "server side" collection in a list.

    hold(op) makes later calls of op wait on a future the test resolves, so
    completion order can differ from issue order. fail_next(op, error)
    makes the next call of op raise before touching server state.
    """

    def __init__(self) -> None:
        self.queries: list[SavedQuery] = []
        self.calls: list[tuple[str, Any]] = []
        self.answers: dict[str, str] = {}
        self.next_ids: list[str] = []
        self.pending: dict[str, list[asyncio.Future]] = {}
        self._held: set[str] = set()
        self._failures: dict[str, list[FlowError]] = {}

    def hold(self, op: str) -> None:
        self._held.add(op)

    def fail_next(self, op: str, error: FlowError) -> None:
        self._failures.setdefault(op, []).append(error)

    def add_query(self, prompt: str, response: str, query_id: str | None = None) -> SavedQuery:
        query = SavedQuery(
            id=query_id or generate_query_id(),
            prompt=prompt,
            response=response,
            timestamp=utc_timestamp(),
        )
        self.queries.insert(0, query)
        return query

    @staticmethod
    async def settle() -> None:
        """Let scheduled tasks run up to their next suspension point."""
        for _ in range(5):
            await asyncio.sleep(0)

    async def _enter(self, op: str, arg: Any) -> Any:
        self.calls.append((op, arg))
        if op in self._held:
            future = asyncio.get_running_loop().create_future()
            self.pending.setdefault(op, []).append(future)
            return await future
        failures = self._failures.get(op)
        if failures:
            raise failures.pop(0)
        return None

    async def ask_ai(self, prompt: str) -> AskAIResult:
        held = await self._enter("ask_ai", prompt)
        if held is not None:
            return held
        return AskAIResult(response=self.answers.get(prompt, f"answer: {prompt}"), model="fake-model")

    async def save_query(self, prompt: str, response: str) -> SaveQueryResult:
        held = await self._enter("save_query", (prompt, response))
        if held is not None:
            return held
        if not prompt or not response:
            raise QueryValidationError("Prompt and response are required", status_code=400)
        query_id = self.next_ids.pop(0) if self.next_ids else None
        query = self.add_query(prompt, response, query_id)
        return SaveQueryResult(id=query.id)

    async def list_queries(self) -> list[SavedQuery]:
        held = await self._enter("list_queries", None)
        if held is not None:
            return held
        return list(self.queries[:100])

    async def delete_query(self, query_id: str) -> None:
        await self._enter("delete_query", query_id)
        if all(query.id != query_id for query in self.queries):
            raise NotFoundError(f"Query not found: {query_id}", status_code=404)
        self.queries = [query for query in self.queries if query.id != query_id]


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def controller(backend: FakeBackend) -> FlowController:
    return FlowController(backend)
