"""Reveal engine.

Hides how pre-chunked text is played back into a message over time.
The step function (``RevealCursor.advance``) is pure; the only side
effects are the store appends and the scroll notification made from
``RevealEngine``'s tick.
"""

import asyncio
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from enum import Enum
from typing import Protocol

from .registry import DebugCallback, StreamSessionRegistry


class Channel(str, Enum):
    """Message fields that receive revealed fragments."""

    CONTENT = "content"
    DETAIL = "detail"
    RESULT = "result"


class FragmentSink(Protocol):
    """Anything that can receive revealed fragments (the message store)."""

    def append_to_field(self, message_id: str, field: Channel, fragment: str) -> None:
        ...


@dataclass(frozen=True)
class RevealCursor:
    """Chunk sequences for the three channels plus a position in each."""

    content: tuple[str, ...] = ()
    detail: tuple[str, ...] = ()
    result: tuple[str, ...] = ()
    content_index: int = 0
    detail_index: int = 0
    result_index: int = 0

    def _position(self, channel: Channel) -> tuple[tuple[str, ...], int]:
        return getattr(self, channel.value), getattr(self, f"{channel.value}_index")

    def remaining(self, channel: Channel) -> int:
        chunks, index = self._position(channel)
        return len(chunks) - index

    @property
    def exhausted(self) -> bool:
        return all(self.remaining(channel) <= 0 for channel in Channel)

    def advance(self) -> tuple[list[tuple[Channel, str]], "RevealCursor"]:
        """Take the next fragment from every channel that has one left.

        Returns:
            The fragments for this tick, in channel order, and the next cursor
        """
        fragments: list[tuple[Channel, str]] = []
        positions: dict[str, int] = {}
        for channel in Channel:
            chunks, index = self._position(channel)
            if index < len(chunks):
                fragments.append((channel, chunks[index]))
                positions[f"{channel.value}_index"] = index + 1
        return fragments, replace(self, **positions)


class RevealEngine:
    """Appends chunk sequences to a message one fragment per channel per tick.

    Usage:
        engine = RevealEngine(store, StreamSessionRegistry())
        await engine.reveal(message_id, content_chunks, detail_chunks)
    """

    def __init__(
        self,
        store: FragmentSink,
        registry: StreamSessionRegistry,
        on_scroll: Callable[[], None] | None = None,
        debug_callback: DebugCallback | None = None,
    ) -> None:
        self._store = store
        self._registry = registry
        self._on_scroll = on_scroll
        self._debug_callback = debug_callback

    @property
    def registry(self) -> StreamSessionRegistry:
        return self._registry

    def reveal(
        self,
        message_id: str,
        content_chunks: Sequence[str] = (),
        detail_chunks: Sequence[str] = (),
        result_chunks: Sequence[str] = (),
    ) -> asyncio.Future:
        """Start revealing chunks into a message.

        Any unfinished reveal for the same message is cancelled first and its
        remaining fragments are dropped.

        Returns:
            Future that resolves when every channel is exhausted, or is
            cancelled if the reveal is cancelled or replaced first
        """
        cursor = RevealCursor(
            content=tuple(content_chunks),
            detail=tuple(detail_chunks),
            result=tuple(result_chunks),
        )

        if cursor.exhausted:
            done = asyncio.get_running_loop().create_future()
            done.set_result(None)
            return done

        if self._debug_callback:
            self._debug_callback(
                "debug",
                "Reveal",
                f"Revealing {message_id}: "
                f"{len(cursor.content)}/{len(cursor.detail)}/{len(cursor.result)} fragments",
            )

        def tick() -> bool:
            nonlocal cursor
            fragments, cursor = cursor.advance()
            for channel, fragment in fragments:
                self._store.append_to_field(message_id, channel, fragment)
            if self._on_scroll is not None:
                self._on_scroll()
            return not cursor.exhausted

        session = self._registry.start(message_id, tick)
        return session.completion

    def cancel(self, message_id: str) -> bool:
        """Stop revealing into a message, dropping what is left."""
        return self._registry.cancel(message_id)

    def cancel_all(self) -> int:
        """Stop every reveal in progress."""
        return self._registry.cancel_all()
