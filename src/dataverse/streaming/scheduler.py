"""Timer scheduling for reveal ticks.

Hides where time comes from. The registry only ever asks for "call this
later" and gets back something it can cancel, so the same code runs on
the asyncio event loop in the application and on a virtual clock in tests.
"""

import asyncio
import heapq
import itertools
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Protocol


class TimerHandle(Protocol):
    """Handle for a scheduled callback."""

    def cancel(self) -> None:
        """Prevent the callback from running. Safe to call more than once."""
        ...


class Scheduler(ABC):
    """Abstract source of delayed callbacks."""

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Schedule ``callback`` to run once after ``delay`` seconds."""

    @property
    @abstractmethod
    def pending(self) -> int:
        """Number of scheduled callbacks that have neither run nor been cancelled."""


class AsyncioScheduler(Scheduler):
    """Scheduler backed by the running asyncio event loop."""

    def __init__(self) -> None:
        self._handles: set[asyncio.TimerHandle] = set()

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        loop = asyncio.get_running_loop()
        handle: asyncio.TimerHandle | None = None

        def _run() -> None:
            self._handles.discard(handle)
            callback()

        handle = loop.call_later(delay, _run)
        self._handles.add(handle)
        return _AsyncioTimer(handle, self._handles)

    @property
    def pending(self) -> int:
        return sum(1 for handle in self._handles if not handle.cancelled())


class _AsyncioTimer:
    """Wraps an asyncio handle so cancelling also forgets it."""

    def __init__(self, handle: asyncio.TimerHandle, owner: set[asyncio.TimerHandle]) -> None:
        self._handle = handle
        self._owner = owner

    def cancel(self) -> None:
        self._handle.cancel()
        self._owner.discard(self._handle)


class ManualTimer:
    """A callback registered on a ManualScheduler."""

    def __init__(self, when: float, callback: Callable[[], None]) -> None:
        self.when = when
        self.callback = callback
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler(Scheduler):
    """Virtual clock that only moves when told to.

    Usage:
        scheduler = ManualScheduler()
        registry = StreamSessionRegistry(scheduler)
        ...
        scheduler.advance(0.05)  # runs every callback due within 50ms
        scheduler.run_all()      # runs until nothing is scheduled
    """

    def __init__(self) -> None:
        self._now = 0.0
        self._queue: list[tuple[float, int, ManualTimer]] = []
        self._counter = itertools.count()

    @property
    def now(self) -> float:
        """Current virtual time in seconds."""
        return self._now

    @property
    def pending(self) -> int:
        return sum(1 for _, _, timer in self._queue if not timer.cancelled())

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        timer = ManualTimer(self._now + max(delay, 0.0), callback)
        heapq.heappush(self._queue, (timer.when, next(self._counter), timer))
        return timer

    def advance(self, seconds: float) -> int:
        """Move the clock forward, running callbacks that fall due.

        Callbacks scheduled while advancing run too if they are due before
        the new time.

        Returns:
            Number of callbacks run
        """
        target = self._now + seconds
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            when, _, timer = heapq.heappop(self._queue)
            if timer.cancelled():
                continue
            self._now = when
            timer.callback()
            ran += 1
        self._now = target
        return ran

    def run_all(self, max_callbacks: int = 100_000) -> int:
        """Run callbacks in time order until none are left.

        Args:
            max_callbacks: Safety limit against self-perpetuating timers

        Returns:
            Number of callbacks run

        Raises:
            RuntimeError: If the limit is reached with callbacks still pending
        """
        ran = 0
        while self._queue:
            if self._queue[0][2].cancelled():
                heapq.heappop(self._queue)
                continue
            if ran >= max_callbacks:
                raise RuntimeError(f"Scheduler still busy after {max_callbacks} callbacks")
            when, _, timer = heapq.heappop(self._queue)
            self._now = max(self._now, when)
            timer.callback()
            ran += 1
        return ran
