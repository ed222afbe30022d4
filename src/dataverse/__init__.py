"""
DataVerse: a terminal client for a natural-language-to-SQL assistant.

Answers, generated SQL and query results are revealed progressively.
The package follows Parnas's information hiding principles,
where each module hides a specific design decision.
"""

__version__ = "0.1.0"

from .backend import (
    AnswerResponse,
    BackendClient,
    BackendError,
    QueryExecutionResult,
    create_backend_client,
)
from .chat import AssistantExchange, ExchangePhase, Message, MessageStore
from .streaming import (
    RevealEngine,
    StreamSessionRegistry,
    chunk_by_whitespace,
    chunk_preserving_newlines,
)

__all__ = [
    "AnswerResponse",
    "AssistantExchange",
    "BackendClient",
    "BackendError",
    "ExchangePhase",
    "Message",
    "MessageStore",
    "QueryExecutionResult",
    "RevealEngine",
    "StreamSessionRegistry",
    "chunk_by_whitespace",
    "chunk_preserving_newlines",
    "create_backend_client",
]
