from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from ..config import DEFAULT_CHAT_PATH, DEFAULT_EXECUTE_PATH, DEFAULT_TIMEOUT
from .base import BackendClient, BackendRequestError, BackendResponseError
from .models import AnswerResponse, QueryExecutionResult


class HttpBackendClient(BackendClient):
    """Backend client speaking JSON over HTTP.

    Hidden design decisions:
    - Endpoint paths and request body shapes
    - Session cookies (kept by the underlying httpx client)
    - Mapping httpx and pydantic failures onto BackendError
    """

    def __init__(
        self,
        base_url: str,
        chat_path: str = DEFAULT_CHAT_PATH,
        execute_path: str = DEFAULT_EXECUTE_PATH,
        timeout: float = DEFAULT_TIMEOUT,
        **client_kwargs: Any
    ):
        """Initialize the HTTP client.

        Args:
            base_url: Backend root URL (e.g. http://localhost:8000)
            chat_path: Path of the "generate answer" endpoint
            execute_path: Path of the "execute query" endpoint
            timeout: Request timeout in seconds
            **client_kwargs: Additional kwargs for httpx.AsyncClient
                (cookies, headers, transport, ...)
        """
        self._base_url = base_url
        self._chat_path = chat_path
        self._execute_path = execute_path
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            **client_kwargs
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def generate_answer(self, question: str) -> AnswerResponse:
        payload = await self._post(self._chat_path, {"question": question})
        return self._parse(AnswerResponse, payload, self._chat_path)

    async def execute_query(self, sql: str) -> QueryExecutionResult:
        payload = await self._post(self._execute_path, {"sql": sql})
        return self._parse(QueryExecutionResult, payload, self._execute_path)

    async def _post(self, path: str, body: dict[str, Any]) -> Any:
        try:
            response = await self._client.post(path, json=body)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise BackendRequestError(
                f"POST {path} failed with status {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise BackendRequestError(f"POST {path} failed: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise BackendResponseError(f"POST {path} returned invalid JSON") from e

    @staticmethod
    def _parse(model: type[BaseModel], payload: Any, path: str) -> Any:
        if not isinstance(payload, dict):
            raise BackendResponseError(
                f"POST {path} returned {type(payload).__name__}, expected an object"
            )
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            raise BackendResponseError(f"POST {path} returned an unexpected body: {e}") from e

    async def close(self) -> None:
        await self._client.aclose()
