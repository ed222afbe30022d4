from abc import ABC, abstractmethod
from typing import Any

from .models import AnswerResponse, QueryExecutionResult


class BackendError(Exception):
    """Base class for failures talking to the assistant backend."""


class BackendRequestError(BackendError):
    """The request could not be sent or the backend answered with an error status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class BackendResponseError(BackendError):
    """The backend answered but the body could not be understood."""


class BackendClient(ABC):
    """Abstract base class for assistant backends.

    This module hides the design decision of how questions reach the
    backend and how queries get executed. Implementations must handle:
    - Transport setup and session cookies
    - Request/response format conversion
    - Mapping transport failures onto BackendError

    Supports async context manager protocol for proper resource cleanup:
        async with client:
            answer = await client.generate_answer("How many users?")
        # Automatically cleaned up
    """

    @abstractmethod
    async def generate_answer(self, question: str) -> AnswerResponse:
        """Ask the backend to answer a natural-language question.

        Args:
            question: The user's question

        Returns:
            AnswerResponse with narrative summary and (optionally) SQL

        Raises:
            BackendError: If the request fails or the response is invalid
        """
        pass

    @abstractmethod
    async def execute_query(self, sql: str) -> QueryExecutionResult:
        """Execute a generated query.

        Args:
            sql: Query text as returned by generate_answer

        Returns:
            QueryExecutionResult with rows and optional row count

        Raises:
            BackendError: If the request fails or the response is invalid
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections or resources."""
        pass

    async def __aenter__(self) -> "BackendClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit with automatic cleanup.

        Note: Suppresses "Event loop is closed" errors during cleanup.
        This is a known harmless race condition in httpx/anyio cleanup:
        https://github.com/encode/httpx/issues/914
        """
        try:
            await self.close()
        except RuntimeError as e:
            if "Event loop is closed" not in str(e):
                raise
