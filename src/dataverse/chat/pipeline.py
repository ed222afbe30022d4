"""Assistant exchange pipeline.

Sequences one question end to end: ask the backend, reveal the answer,
execute the generated query, reveal the result table. Hides the ordering
rules and the failure policy from the UI, which only submits questions
and watches the message store.
"""

import asyncio
from collections.abc import Callable
from enum import Enum

import httpx
from pydantic import ValidationError

from ..backend import BackendClient, BackendError
from ..config import (
    CONTENT_CHUNK_SIZE,
    DETAIL_CHUNK_SIZE,
    RESULT_CHUNK_SIZE,
    TITLE_MAX_LENGTH,
)
from ..streaming import (
    Channel,
    RevealEngine,
    chunk_by_whitespace,
    chunk_preserving_newlines,
)
from .formatting import QUERY_FAILED_TEXT, build_result_section
from .models import Message, Role, welcome_message
from .store import MessageStore

DebugCallback = Callable[[str, str, str], None]

# Failures absorbed at the two network suspension points
_BACKEND_FAILURES = (BackendError, httpx.HTTPError, ValidationError)


class ExchangePhase(str, Enum):
    """Where the current exchange is."""

    IDLE = "idle"
    AWAITING_ANSWER = "awaiting_answer"
    REVEALING_ANSWER = "revealing_answer"
    EXECUTING_QUERY = "executing_query"
    REVEALING_RESULT = "revealing_result"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"


def normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n")


class AssistantExchange:
    """Runs question/answer exchanges against a message store.

    The ``responding`` flag is True exactly while a backend call is
    outstanding; it is False during both reveal phases.

    Usage:
        exchange = AssistantExchange(store, backend, engine)
        message = await exchange.submit("How many users signed up last week?")
    """

    def __init__(
        self,
        store: MessageStore,
        backend: BackendClient,
        engine: RevealEngine,
        on_responding_change: Callable[[bool], None] | None = None,
        on_select: Callable[[str | None], None] | None = None,
        on_phase_change: Callable[["ExchangePhase"], None] | None = None,
        debug_callback: DebugCallback | None = None,
    ) -> None:
        self._store = store
        self._backend = backend
        self._engine = engine
        self._on_responding_change = on_responding_change
        self._on_select = on_select
        self._on_phase_change = on_phase_change
        self._debug_callback = debug_callback
        self._responding = False
        self._phase = ExchangePhase.IDLE
        self._selected_message_id: str | None = None

    @property
    def store(self) -> MessageStore:
        return self._store

    @property
    def engine(self) -> RevealEngine:
        return self._engine

    @property
    def responding(self) -> bool:
        return self._responding

    @property
    def phase(self) -> ExchangePhase:
        return self._phase

    @property
    def selected_message_id(self) -> str | None:
        return self._selected_message_id

    def _log(self, level: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, "Exchange", message)

    def _set_responding(self, value: bool) -> None:
        if self._responding == value:
            return
        self._responding = value
        if self._on_responding_change:
            self._on_responding_change(value)

    def _set_phase(self, phase: ExchangePhase) -> None:
        self._phase = phase
        self._log("debug", f"Phase: {phase.value}")
        if self._on_phase_change:
            self._on_phase_change(phase)

    def select(self, message_id: str | None) -> None:
        """Select a message for the details panel (None clears it)."""
        self._selected_message_id = message_id
        if self._on_select:
            self._on_select(message_id)

    async def submit(self, draft: str) -> Message | None:
        """Run one exchange for a drafted question.

        Blank drafts and submissions while a backend call is outstanding are
        ignored.

        Returns:
            The assistant message, or None if nothing was revealed

        Raises:
            asyncio.CancelledError: If a reveal was cancelled before finishing
        """
        question = draft.strip()
        if not question or self._responding:
            return None

        self._store.create_message(
            Message(role=Role.USER, content=question, title=question[:TITLE_MAX_LENGTH])
        )
        self._set_phase(ExchangePhase.AWAITING_ANSWER)
        self._set_responding(True)
        self._log("info", f"Asking: '{question[:50]}'")

        try:
            answer = await self._backend.generate_answer(question)
        except _BACKEND_FAILURES as e:
            self._log("error", f"Failed to fetch assistant response: {e}")
            self._set_responding(False)
            self._set_phase(ExchangePhase.FAILED)
            return None

        self._set_responding(False)

        summary = normalize_newlines(answer.md_summary)
        sql = normalize_newlines(answer.sql)

        assistant = Message(role=Role.ASSISTANT, detail="" if sql else None)
        content_chunks = chunk_by_whitespace(summary, CONTENT_CHUNK_SIZE)
        detail_chunks = chunk_preserving_newlines(sql, DETAIL_CHUNK_SIZE) if sql else []

        self._store.create_message(assistant)
        if answer.has_query:
            self.select(assistant.id)

        self._set_phase(ExchangePhase.REVEALING_ANSWER)
        await self._await_reveal(self._engine.reveal(assistant.id, content_chunks, detail_chunks))

        if answer.sql:
            await self._execute_query(assistant.id, answer.sql)

        self._set_phase(ExchangePhase.DONE)
        return self._store.get(assistant.id)

    async def _execute_query(self, message_id: str, sql: str) -> None:
        self._store.set_field(message_id, Channel.RESULT, "")
        self._set_phase(ExchangePhase.EXECUTING_QUERY)
        self._set_responding(True)

        try:
            result = await self._backend.execute_query(sql)
        except _BACKEND_FAILURES as e:
            self._log("error", f"Failed to execute query: {e}")
            self._store.set_field(message_id, Channel.RESULT, QUERY_FAILED_TEXT)
            self._set_responding(False)
            return

        self._set_responding(False)
        self._log("info", f"Query returned {len(result.data)} row(s)")

        section = build_result_section(result)
        result_chunks = chunk_preserving_newlines(section, RESULT_CHUNK_SIZE)

        self._set_phase(ExchangePhase.REVEALING_RESULT)
        await self._await_reveal(self._engine.reveal(message_id, result_chunks=result_chunks))

    async def _await_reveal(self, completion: asyncio.Future) -> None:
        try:
            await completion
        except asyncio.CancelledError:
            self._log("warning", "Reveal cancelled before it finished")
            # reset() has already moved us back to IDLE
            if self._phase in (ExchangePhase.REVEALING_ANSWER, ExchangePhase.REVEALING_RESULT):
                self._set_phase(ExchangePhase.CANCELLED)
            raise

    def reset(self) -> None:
        """Start a new chat: stop all reveals and restore the welcome message."""
        self._engine.cancel_all()
        self._store.reset([welcome_message()])
        self.select(None)
        self._set_responding(False)
        self._set_phase(ExchangePhase.IDLE)

    def close(self) -> None:
        """Tear down: no timer may fire after this."""
        cancelled = self._engine.cancel_all()
        if cancelled:
            self._log("debug", f"Cancelled {cancelled} reveal(s) on close")
