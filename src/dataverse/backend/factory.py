from typing import Any

from .base import BackendClient
from .http_client import HttpBackendClient


def create_backend_client(kind: str = "http", **config: Any) -> BackendClient:
    """Create a backend client instance.

    This factory function hides the instantiation logic for different
    backend transports.

    Args:
        kind: Client type (currently only 'http')
        **config: Client-specific configuration
            For HTTP:
                - base_url: str (required)
                - chat_path: str (default: '/chat')
                - execute_path: str (default: '/execute-query')
                - timeout: float (default: 60.0)

    Returns:
        Initialized backend client

    Raises:
        ValueError: If client type is not supported
        TypeError: If required configuration is missing

    Examples:
        >>> client = create_backend_client(
        ...     "http",
        ...     base_url="http://localhost:8000"
        ... )
    """
    kind_lower = kind.lower()

    if kind_lower == "http":
        if "base_url" not in config:
            raise TypeError("HTTP backend requires 'base_url' in config")
        return HttpBackendClient(**config)

    raise ValueError(
        f"Unsupported backend: {kind}. "
        f"Supported backends: 'http'"
    )
