from .base import BackendClient, BackendError, BackendRequestError, BackendResponseError
from .factory import create_backend_client
from .http_client import HttpBackendClient
from .models import AnswerResponse, QueryExecutionResult

__all__ = [
    "AnswerResponse",
    "BackendClient",
    "BackendError",
    "BackendRequestError",
    "BackendResponseError",
    "HttpBackendClient",
    "QueryExecutionResult",
    "create_backend_client",
]
