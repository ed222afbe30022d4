"""Main CLI application using Typer."""
import asyncio

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax

from ..backend import BackendClient
from ..chat import AssistantExchange, Message, MessageStore, StoreEvent, welcome_message
from ..config import STREAM_INTERVAL
from ..streaming import Channel, RevealEngine, StreamSessionRegistry
from .providers import get_backend

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="dataverse",
    help="Ask questions about your data and watch the answer, SQL and results stream in",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()

LEVEL_STYLES = {
    "debug": "dim",
    "info": "cyan",
    "warning": "yellow",
    "error": "red",
}


def _print_debug(level: str, component: str, message: str) -> None:
    style = LEVEL_STYLES.get(level, "white")
    console.print(f"[{style}]{level.upper():<5} {escape(f'[{component}]')} {escape(message)}[/]", highlight=False)


def _build_exchange(
    backend: BackendClient,
    store: MessageStore,
    interval: float,
    verbose: bool,
) -> AssistantExchange:
    debug_callback = _print_debug if verbose else None
    registry = StreamSessionRegistry(interval=interval, debug_callback=debug_callback)
    engine = RevealEngine(store, registry, debug_callback=debug_callback)
    return AssistantExchange(store, backend, engine, debug_callback=debug_callback)


def _print_message(message: Message) -> None:
    """Print the parts of an answer that were not streamed to the terminal."""
    if message.detail:
        console.print(Panel(Syntax(message.detail, "sql", word_wrap=True), title="SQL", border_style="cyan"))
    if message.result:
        console.print(Markdown(message.result))


def _stream_content(event: StoreEvent) -> None:
    """Echo narrative fragments as they are revealed."""
    if event.kind == "appended" and event.field == Channel.CONTENT and event.fragment:
        console.print(event.fragment, end="", markup=False, highlight=False)


@app.command()
def ask(
    question: str = typer.Argument(..., help="Question to ask"),
    api_url: str | None = typer.Option(
        None,
        "--api-url",
        "-u",
        help="Backend root URL (default: $DATAVERSE_API_URL)"
    ),
    instant: bool = typer.Option(
        False,
        "--instant",
        "-i",
        help="Skip the reveal delay and print everything at once"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Print debug output from the pipeline"
    ),
):
    """Ask a single question and print the answer, query and results."""
    async def _ask() -> None:
        backend = get_backend(api_url, console)
        store = MessageStore()
        exchange = _build_exchange(backend, store, 0.0 if instant else STREAM_INTERVAL, verbose)
        unsubscribe = store.subscribe(_stream_content)

        try:
            message = await exchange.submit(question)
            console.print()
            if message is None:
                console.print("[red]Error: Failed to fetch assistant response[/red]")
                raise typer.Exit(code=1)
            _print_message(message)
        finally:
            unsubscribe()
            exchange.close()
            await backend.close()

    asyncio.run(_ask())


@app.command()
def chat(
    api_url: str | None = typer.Option(
        None,
        "--api-url",
        "-u",
        help="Backend root URL (default: $DATAVERSE_API_URL)"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Print debug output from the pipeline"
    ),
):
    """Interactive chat in the terminal without the full-screen UI."""
    async def _chat() -> None:
        backend = get_backend(api_url, console)
        store = MessageStore([welcome_message()])
        exchange = _build_exchange(backend, store, STREAM_INTERVAL, verbose)
        unsubscribe = store.subscribe(_stream_content)

        console.print("[bold cyan]DataVerse Chat[/bold cyan]")
        console.print(Markdown(store.messages[0].content))
        console.print("[dim]Type 'exit', 'quit', or 'q' to leave, 'new' for a new chat[/dim]\n")

        try:
            while True:
                try:
                    user_input = console.input("[bold yellow]You:[/bold yellow] ")
                except (KeyboardInterrupt, EOFError):
                    console.print("\n[dim]Goodbye![/dim]")
                    break

                if not user_input.strip():
                    continue

                command = user_input.strip().lower()
                if command in ("exit", "quit", "q"):
                    console.print("[dim]Goodbye![/dim]")
                    break
                if command == "new":
                    exchange.reset()
                    console.print("[dim]Started a new chat.[/dim]\n")
                    continue

                console.print("[bold green]Assistant:[/bold green] ", end="")
                message = await exchange.submit(user_input)
                console.print()
                if message is None:
                    console.print("[red]Failed to fetch assistant response.[/red]\n")
                    continue
                _print_message(message)
                console.print()
        finally:
            unsubscribe()
            exchange.close()
            await backend.close()

    asyncio.run(_chat())


@app.command(name="tui")
def tui_command(
    api_url: str | None = typer.Option(
        None,
        "--api-url",
        "-u",
        help="Backend root URL (default: $DATAVERSE_API_URL)"
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Show log panel with level: debug (all), info, warning, or error"
    ),
):
    """Launch interactive TUI chat interface."""
    async def _tui() -> None:
        from ..ui import run_dataverse_tui

        backend = get_backend(api_url, console)
        await run_dataverse_tui(backend=backend, log_level=log_level)
        console.print("\n[dim]Goodbye![/dim]")

    try:
        asyncio.run(_tui())
    except KeyboardInterrupt:
        pass


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
