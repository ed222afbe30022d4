"""Pytest configuration and shared fixtures."""
import asyncio
from typing import Any

import httpx
import pytest

from dataverse.backend import AnswerResponse, BackendClient, QueryExecutionResult
from dataverse.chat import AssistantExchange, MessageStore
from dataverse.config import STREAM_INTERVAL
from dataverse.streaming import ManualScheduler, RevealEngine, StreamSessionRegistry


class FakeBackend(BackendClient):
    """In-memory backend returning canned answers.

    Either response may be an exception instance, which is raised instead.
    An optional gate (asyncio.Event) holds each call until it is set.
    """

    def __init__(
        self,
        answer: AnswerResponse | Exception | None = None,
        result: QueryExecutionResult | Exception | None = None,
    ):
        self.answer = answer if answer is not None else AnswerResponse(md_summary="Here you go")
        self.result = result if result is not None else QueryExecutionResult()
        self.questions: list[str] = []
        self.queries: list[str] = []
        self.gate: asyncio.Event | None = None
        self.closed = False

    async def _wait(self) -> None:
        if self.gate is not None:
            await self.gate.wait()

    async def generate_answer(self, question: str) -> AnswerResponse:
        self.questions.append(question)
        await self._wait()
        if isinstance(self.answer, Exception):
            raise self.answer
        return self.answer

    async def execute_query(self, sql: str) -> QueryExecutionResult:
        self.queries.append(sql)
        await self._wait()
        if isinstance(self.result, Exception):
            raise self.result
        return self.result

    async def close(self) -> None:
        self.closed = True


async def drive(scheduler: ManualScheduler, awaitable: Any, max_steps: int = 10_000) -> Any:
    """Run an awaitable to completion while ticking a virtual clock."""
    task = asyncio.ensure_future(awaitable)
    for _ in range(max_steps):
        if task.done():
            return task.result()
        await asyncio.sleep(0)
        scheduler.advance(STREAM_INTERVAL)
    task.cancel()
    raise AssertionError("awaitable did not finish")


@pytest.fixture
def scheduler():
    """Virtual clock for reveal ticks."""
    return ManualScheduler()


@pytest.fixture
def registry(scheduler):
    return StreamSessionRegistry(scheduler)


@pytest.fixture
def store():
    return MessageStore()


@pytest.fixture
def engine(store, registry):
    return RevealEngine(store, registry)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def exchange(store, backend, engine):
    return AssistantExchange(store, backend, engine)


@pytest.fixture
def mock_transport_factory():
    """Build an httpx.MockTransport from a route table.

    Routes map a path to either a JSON-able body (returned with status 200)
    or an httpx.Response.
    """
    def _factory(routes: dict[str, Any], requests: list[httpx.Request] | None = None):
        def handler(request: httpx.Request) -> httpx.Response:
            if requests is not None:
                requests.append(request)
            reply = routes.get(request.url.path)
            if reply is None:
                return httpx.Response(404, json={"detail": "Not Found"})
            if isinstance(reply, httpx.Response):
                return reply
            return httpx.Response(200, json=reply)

        return httpx.MockTransport(handler)

    return _factory
