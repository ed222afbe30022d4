"""Provider factory functions for CLI.

Centralizes creation of the backend client from environment variables.
Hides configuration details from command implementations.
"""

import os

from rich.console import Console

from ..backend import BackendClient, create_backend_client
from ..config import (
    DEFAULT_API_URL,
    DEFAULT_CHAT_PATH,
    DEFAULT_EXECUTE_PATH,
    DEFAULT_TIMEOUT,
)

# Default console for output
_console = Console()


def get_backend(
    base_url: str | None = None,
    console: Console | None = None,
) -> BackendClient:
    """Create the backend client from environment variables.

    Args:
        base_url: Override for DATAVERSE_API_URL
        console: Optional Rich console for output

    Returns:
        HTTP backend client instance

    Raises:
        SystemExit: If DATAVERSE_TIMEOUT is not a number

    Environment variables:
        DATAVERSE_API_URL: Backend root URL (default: http://localhost:8000)
        DATAVERSE_CHAT_PATH: "Generate answer" path (default: /chat)
        DATAVERSE_EXECUTE_PATH: "Execute query" path (default: /execute-query)
        DATAVERSE_TIMEOUT: Request timeout in seconds (default: 60)
    """
    import typer

    con = console or _console
    raw_timeout = os.getenv("DATAVERSE_TIMEOUT", str(DEFAULT_TIMEOUT))
    try:
        timeout = float(raw_timeout)
    except ValueError:
        con.print(f"[red]Error: DATAVERSE_TIMEOUT must be a number, got {raw_timeout!r}[/red]")
        raise typer.Exit(code=1) from None

    return create_backend_client(
        "http",
        base_url=base_url or os.getenv("DATAVERSE_API_URL", DEFAULT_API_URL),
        chat_path=os.getenv("DATAVERSE_CHAT_PATH", DEFAULT_CHAT_PATH),
        execute_path=os.getenv("DATAVERSE_EXECUTE_PATH", DEFAULT_EXECUTE_PATH),
        timeout=timeout,
    )
