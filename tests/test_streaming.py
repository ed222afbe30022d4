"""Unit tests for the scheduler, session registry and reveal engine."""
import asyncio

import pytest

from dataverse.chat import Message, MessageStore, Role
from dataverse.streaming import (
    AsyncioScheduler,
    Channel,
    ManualScheduler,
    RevealCursor,
    RevealEngine,
    StreamSessionRegistry,
)


class TestManualScheduler:
    """Tests for the virtual clock."""

    def test_advance_runs_due_callbacks_in_order(self):
        """Test that callbacks run in time order as the clock moves."""
        scheduler = ManualScheduler()
        calls = []
        scheduler.call_later(0.2, lambda: calls.append("late"))
        scheduler.call_later(0.1, lambda: calls.append("early"))

        assert scheduler.advance(0.15) == 1
        assert calls == ["early"]
        assert scheduler.pending == 1

        scheduler.advance(0.1)
        assert calls == ["early", "late"]
        assert scheduler.now == pytest.approx(0.25)

    def test_cancelled_callback_never_runs(self):
        """Test that a cancelled timer is skipped and not counted."""
        scheduler = ManualScheduler()
        calls = []
        handle = scheduler.call_later(0.1, lambda: calls.append(1))
        handle.cancel()

        assert scheduler.pending == 0
        assert scheduler.run_all() == 0
        assert calls == []

    def test_run_all_limit(self):
        """Test that a self-perpetuating timer hits the safety limit."""
        scheduler = ManualScheduler()

        def again():
            scheduler.call_later(1.0, again)

        scheduler.call_later(1.0, again)
        with pytest.raises(RuntimeError):
            scheduler.run_all(max_callbacks=5)

    def test_run_all_limit_keeps_pending_callback(self):
        """Test that hitting the limit leaves the next callback scheduled."""
        scheduler = ManualScheduler()
        calls = []
        for i in range(3):
            scheduler.call_later(1.0, lambda i=i: calls.append(i))

        with pytest.raises(RuntimeError):
            scheduler.run_all(max_callbacks=2)

        assert calls == [0, 1]
        assert scheduler.pending == 1
        assert scheduler.run_all() == 1
        assert calls == [0, 1, 2]


class TestStreamSessionRegistry:
    """Tests for StreamSessionRegistry."""

    @pytest.mark.asyncio
    async def test_first_tick_runs_immediately(self, registry, scheduler):
        """Test that start ticks synchronously and completes when done."""
        ticks = []

        session = registry.start("m1", lambda: ticks.append(1) or False)

        assert ticks == [1]
        assert session.completion.done()
        assert "m1" not in registry
        assert scheduler.pending == 0

    @pytest.mark.asyncio
    async def test_ticks_until_on_tick_returns_false(self, registry, scheduler):
        """Test that later ticks are spaced by the interval."""
        remaining = [3]

        def on_tick() -> bool:
            remaining[0] -= 1
            return remaining[0] > 0

        session = registry.start("m1", on_tick)
        assert registry.is_active("m1")
        assert scheduler.pending == 1

        scheduler.advance(registry.interval)
        assert not session.done
        scheduler.advance(registry.interval)

        assert session.done
        assert session.ticks == 3
        assert len(registry) == 0
        await session.completion

    @pytest.mark.asyncio
    async def test_start_replaces_existing_session(self, registry, scheduler):
        """Test that a second start cancels the first session's timer."""
        first_ticks = []
        first = registry.start("m1", lambda: first_ticks.append(1) or True)
        second = registry.start("m1", lambda: True)

        assert first.completion.cancelled()
        assert registry.active_ids() == ["m1"]
        assert scheduler.pending == 1

        scheduler.advance(registry.interval * 3)
        assert first_ticks == [1]
        assert not second.done
        registry.cancel_all()

    @pytest.mark.asyncio
    async def test_cancel_unknown_id_is_noop(self, registry):
        """Test that cancelling an unknown message does nothing."""
        assert registry.cancel("missing") is False

    @pytest.mark.asyncio
    async def test_cancel_all_leaves_no_pending_timers(self, registry, scheduler):
        """Test that teardown cancels every timer and completion."""
        sessions = [registry.start(f"m{i}", lambda: True) for i in range(3)]
        assert scheduler.pending == 3

        assert registry.cancel_all() == 3

        assert scheduler.pending == 0
        assert len(registry) == 0
        assert all(session.completion.cancelled() for session in sessions)
        assert scheduler.run_all() == 0

    @pytest.mark.asyncio
    async def test_tick_exception_fails_completion(self, registry, scheduler):
        """Test that an error in a tick ends the session with that error."""
        def broken() -> bool:
            raise KeyError("gone")

        session = registry.start("m1", broken)

        assert "m1" not in registry
        with pytest.raises(KeyError):
            await session.completion

    @pytest.mark.asyncio
    async def test_asyncio_scheduler_runs_on_loop(self):
        """Test the event-loop scheduler end to end."""
        scheduler = AsyncioScheduler()
        registry = StreamSessionRegistry(scheduler, interval=0.001)
        remaining = [2]

        def on_tick() -> bool:
            remaining[0] -= 1
            return remaining[0] > 0

        session = registry.start("m1", on_tick)
        await asyncio.wait_for(session.completion, timeout=1.0)

        assert session.ticks == 2
        assert scheduler.pending == 0


class TestRevealCursor:
    """Tests for the pure reveal step."""

    def test_channels_advance_independently(self):
        """Test that a short channel finishes while others continue."""
        cursor = RevealCursor(content=("a", "b", "c"), detail=("x",))

        fragments, cursor = cursor.advance()
        assert fragments == [(Channel.CONTENT, "a"), (Channel.DETAIL, "x")]

        fragments, cursor = cursor.advance()
        assert fragments == [(Channel.CONTENT, "b")]
        assert cursor.remaining(Channel.CONTENT) == 1
        assert cursor.remaining(Channel.DETAIL) == 0

        fragments, cursor = cursor.advance()
        assert fragments == [(Channel.CONTENT, "c")]
        assert cursor.exhausted

    def test_advance_does_not_mutate(self):
        """Test that advancing returns a new cursor."""
        cursor = RevealCursor(result=("r",))
        _, after = cursor.advance()

        assert cursor.result_index == 0
        assert after.result_index == 1

    def test_empty_cursor_is_exhausted(self):
        assert RevealCursor().exhausted


def _assistant(store: MessageStore, **fields) -> Message:
    return store.create_message(Message(role=Role.ASSISTANT, **fields))


class TestRevealEngine:
    """Tests for RevealEngine."""

    @pytest.mark.asyncio
    async def test_all_empty_completes_without_scheduling(self, store, engine, scheduler):
        """Test that nothing is scheduled when there is nothing to reveal."""
        message = _assistant(store)

        completion = engine.reveal(message.id)

        assert completion.done()
        assert scheduler.pending == 0
        assert len(engine.registry) == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "content,detail,result",
        [
            (["Here ", "you ", "go"], ["SELECT 1"], []),
            (["a"], [], ["\n\n### Query Results\n", "| a |"]),
            ([], ["SELECT\n", "*\n", "FROM t"], ["x"]),
        ],
    )
    async def test_fields_end_as_prefix_plus_joined_chunks(
        self, store, engine, scheduler, content, detail, result
    ):
        """Test reassembly regardless of relative channel lengths."""
        message = _assistant(store, content="pre:", detail="", result="")

        completion = engine.reveal(message.id, content, detail, result)
        scheduler.run_all()
        await completion

        revealed = store.get(message.id)
        assert revealed.content == "pre:" + "".join(content)
        assert revealed.detail == "".join(detail)
        assert revealed.result == "".join(result)
        assert scheduler.pending == 0

    @pytest.mark.asyncio
    async def test_one_fragment_per_channel_per_tick(self, store, registry, scheduler):
        """Test that each tick appends once per unfinished channel and scrolls."""
        scrolls = []
        engine = RevealEngine(store, registry, on_scroll=lambda: scrolls.append(1))
        message = _assistant(store)

        engine.reveal(message.id, ["a", "b", "c"], ["x"])
        assert store.get(message.id).content == "a"
        assert store.get(message.id).detail == "x"

        scheduler.advance(registry.interval)
        assert store.get(message.id).content == "ab"
        assert len(scrolls) == 2

    @pytest.mark.asyncio
    async def test_reentrant_reveal_discards_remainder(self, store, engine, scheduler):
        """Test that the last caller wins and the first never completes."""
        message = _assistant(store)

        first = engine.reveal(message.id, ["one ", "two ", "three"])
        assert store.get(message.id).content == "one "

        second = engine.reveal(message.id, ["A", "B"])
        scheduler.run_all()
        await second

        assert first.cancelled()
        assert store.get(message.id).content == "one AB"

    @pytest.mark.asyncio
    async def test_cancel_all_stops_reveals(self, store, engine, scheduler):
        """Test that teardown leaves partial text and no timers."""
        first = _assistant(store)
        second = _assistant(store)
        completions = [
            engine.reveal(first.id, ["a", "b", "c"]),
            engine.reveal(second.id, ["x", "y"]),
        ]

        assert engine.cancel_all() == 2
        scheduler.run_all()

        assert scheduler.pending == 0
        assert all(c.cancelled() for c in completions)
        assert store.get(first.id).content == "a"
        assert store.get(second.id).content == "x"

    @pytest.mark.asyncio
    async def test_missing_message_fails_completion(self, engine):
        """Test that revealing into an unknown message surfaces KeyError."""
        completion = engine.reveal("missing", ["a"])

        with pytest.raises(KeyError):
            await completion
