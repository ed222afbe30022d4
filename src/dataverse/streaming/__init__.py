"""Streaming reveal module.

Module structure (each module hides a design decision):
- chunker.py: How finished text is cut into fragments
- scheduler.py: Where tick timing comes from (event loop or virtual clock)
- registry.py: One live session per message, cancellation
- engine.py: Playing fragments back into a message
"""

from .chunker import chunk_by_whitespace, chunk_preserving_newlines
from .engine import Channel, RevealCursor, RevealEngine
from .registry import StreamSession, StreamSessionRegistry
from .scheduler import AsyncioScheduler, ManualScheduler, Scheduler

__all__ = [
    "AsyncioScheduler",
    "Channel",
    "ManualScheduler",
    "RevealCursor",
    "RevealEngine",
    "Scheduler",
    "StreamSession",
    "StreamSessionRegistry",
    "chunk_by_whitespace",
    "chunk_preserving_newlines",
]
