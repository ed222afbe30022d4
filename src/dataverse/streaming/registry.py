"""Registry of active reveal sessions.

Hides the bookkeeping that guarantees at most one tick loop per message.
The discipline is "start replaces, cancel removes": starting a session for
a message that already has one cancels the old timer first, and cancelling
an unknown message is a no-op.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field

from ..config import STREAM_INTERVAL
from .scheduler import AsyncioScheduler, Scheduler, TimerHandle

DebugCallback = Callable[[str, str, str], None]


@dataclass(eq=False)
class StreamSession:
    """A live tick loop bound to one message.

    ``on_tick`` returns True while there is more to reveal. ``completion``
    resolves once it returns False and is cancelled if the session is
    cancelled first.
    """

    message_id: str
    on_tick: Callable[[], bool]
    completion: asyncio.Future
    handle: TimerHandle | None = None
    ticks: int = field(default=0)

    @property
    def done(self) -> bool:
        return self.completion.done()


class StreamSessionRegistry:
    """Maps message ids to their active reveal session."""

    def __init__(
        self,
        scheduler: Scheduler | None = None,
        interval: float = STREAM_INTERVAL,
        debug_callback: DebugCallback | None = None,
    ) -> None:
        self._scheduler = scheduler or AsyncioScheduler()
        self._interval = interval
        self._debug_callback = debug_callback
        self._sessions: dict[str, StreamSession] = {}

    def _debug(self, message: str) -> None:
        if self._debug_callback:
            self._debug_callback("debug", "Stream", message)

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    @property
    def interval(self) -> float:
        return self._interval

    def start(self, message_id: str, on_tick: Callable[[], bool]) -> StreamSession:
        """Start a tick loop for a message, replacing any existing one.

        The first tick runs immediately; later ticks run ``interval`` seconds
        apart for as long as ``on_tick`` returns True.

        Must be called with a running event loop.
        """
        self.cancel(message_id)

        loop = asyncio.get_running_loop()
        session = StreamSession(
            message_id=message_id,
            on_tick=on_tick,
            completion=loop.create_future(),
        )
        self._sessions[message_id] = session
        self._debug(f"Session started for {message_id}")
        self._tick(session)
        return session

    def _is_current(self, session: StreamSession) -> bool:
        return self._sessions.get(session.message_id) is session

    def _tick(self, session: StreamSession) -> None:
        session.handle = None
        if not self._is_current(session):
            return

        try:
            has_more = session.on_tick()
        except Exception as e:
            self._sessions.pop(session.message_id, None)
            if not session.completion.done():
                session.completion.set_exception(e)
            if self._debug_callback:
                self._debug_callback("error", "Stream", f"Tick failed for {session.message_id}: {e}")
            return

        session.ticks += 1

        # The tick may have replaced or cancelled this session
        if not self._is_current(session):
            return

        if has_more:
            session.handle = self._scheduler.call_later(
                self._interval, lambda: self._tick(session)
            )
            return

        del self._sessions[session.message_id]
        if not session.completion.done():
            session.completion.set_result(None)
        self._debug(f"Session finished for {session.message_id} after {session.ticks} tick(s)")

    def cancel(self, message_id: str) -> bool:
        """Cancel the session for a message.

        Returns:
            True if a session was cancelled, False if none was active
        """
        session = self._sessions.pop(message_id, None)
        if session is None:
            return False

        if session.handle is not None:
            session.handle.cancel()
            session.handle = None
        if not session.completion.done():
            session.completion.cancel()
        self._debug(f"Session cancelled for {message_id}")
        return True

    def cancel_all(self) -> int:
        """Cancel every active session.

        Returns:
            Number of sessions cancelled
        """
        return sum(1 for message_id in list(self._sessions) if self.cancel(message_id))

    def is_active(self, message_id: str) -> bool:
        return message_id in self._sessions

    def active_ids(self) -> list[str]:
        return list(self._sessions)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, message_id: object) -> bool:
        return message_id in self._sessions
