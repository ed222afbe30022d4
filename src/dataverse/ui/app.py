"""Main Textual TUI application.

Orchestrates the UI components and hands user questions to the
assistant exchange pipeline. The widgets never mutate messages
themselves; they redraw from message store events.
"""

import asyncio
import contextlib

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Footer, Header

from ..backend import BackendClient
from ..chat import AssistantExchange, MessageStore, StoreEvent, welcome_message
from ..config import STREAM_INTERVAL, LogLevel
from ..streaming import RevealEngine, Scheduler, StreamSessionRegistry
from .styles import APP_CSS
from .themes import DARK_THEME_NAME, DATAVERSE_DARK, DATAVERSE_LIGHT, other_theme
from .widgets import (
    ChatHistoryWidget,
    ChatInputBar,
    DebugPanel,
    MessageView,
    ResponsePanel,
    TypingIndicator,
)


class DataverseApp(App):
    """Textual TUI for DataVerse Chat."""

    CSS = APP_CSS
    TITLE = "DataVerse Chat"

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit"),
        Binding("ctrl+n", "new_chat", "New Chat"),
        Binding("ctrl+g", "toggle_details", "Details"),
        Binding("ctrl+t", "toggle_theme", "Theme"),
        Binding("ctrl+d", "toggle_debug", "Log"),
        Binding("ctrl+r", "copy_last_response", "Copy Response"),
        Binding("escape", "close_details", "Close Details"),
    ]

    def __init__(
        self,
        backend: BackendClient,
        log_level: str | None = None,
        scheduler: Scheduler | None = None,
        interval: float = STREAM_INTERVAL,
    ) -> None:
        super().__init__()
        self._backend = backend
        self._log_level = log_level
        self._store = MessageStore([welcome_message()])
        self._scheduler = scheduler
        self._interval = interval
        self._stream_registry: StreamSessionRegistry | None = None
        self._exchange: AssistantExchange | None = None
        self._unsubscribe = None

    @property
    def store(self) -> MessageStore:
        return self._store

    @property
    def exchange(self) -> AssistantExchange | None:
        return self._exchange

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)

        yield ChatHistoryWidget(id="chat-history")

        with Vertical(id="right-panel"):
            yield ResponsePanel(id="response-panel")
            yield DebugPanel(id="debug-panel")

        with Vertical(id="bottom-bar"):
            yield TypingIndicator(id="typing")
            yield ChatInputBar(id="chat-input-bar")

        yield Footer()

    def on_mount(self) -> None:
        """Called when app is mounted."""
        self.register_theme(DATAVERSE_DARK)
        self.register_theme(DATAVERSE_LIGHT)
        self.theme = DARK_THEME_NAME

        log_panel = self.query_one("#debug-panel", DebugPanel)
        if self._log_level is not None:
            log_panel.log_level = LogLevel.from_string(self._log_level)
            log_panel.show()
            log_panel.log_message(LogLevel.INFO, "TUI", f"Log panel enabled with level: {self._log_level.upper()}")

        chat = self.query_one("#chat-history", ChatHistoryWidget)
        self._stream_registry = StreamSessionRegistry(
            self._scheduler,
            interval=self._interval,
            debug_callback=log_panel.debug_callback,
        )
        engine = RevealEngine(
            self._store,
            self._stream_registry,
            on_scroll=lambda: chat.scroll_end(animate=False),
            debug_callback=log_panel.debug_callback,
        )
        self._exchange = AssistantExchange(
            self._store,
            self._backend,
            engine,
            on_responding_change=self._on_responding_change,
            on_select=self._on_select,
            debug_callback=log_panel.debug_callback,
        )
        self._unsubscribe = self._store.subscribe(self._on_store_event)

        chat.load(self._store.messages)
        self._show_details(self._log_level is not None)
        self.query_one("#chat-input-bar", ChatInputBar).focus_input()

    def on_unmount(self) -> None:
        """Stop every reveal so no timer fires after the UI is gone."""
        if self._exchange is not None:
            self._exchange.close()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_store_event(self, event: StoreEvent) -> None:
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        panel = self.query_one("#response-panel", ResponsePanel)

        if event.kind == "reset":
            chat.load(self._store.messages)
            panel.show_message(None)
            return

        if event.message is None:
            return

        if event.kind == "created":
            chat.add_message(event.message)
        else:
            chat.update_message(event.message)
            if panel.message_id == event.message.id:
                panel.show_message(event.message)

    def _on_responding_change(self, responding: bool) -> None:
        self.query_one("#typing", TypingIndicator).set_active(responding)
        self.query_one("#chat-input-bar", ChatInputBar).set_enabled(not responding)

    def _on_select(self, message_id: str | None) -> None:
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        panel = self.query_one("#response-panel", ResponsePanel)
        chat.set_selected(message_id)
        panel.show_message(self._store.find(message_id) if message_id else None)
        if message_id is not None:
            self._show_details(True)

    def _show_details(self, visible: bool) -> None:
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        right_panel = self.query_one("#right-panel", Vertical)
        right_panel.display = visible
        if visible:
            chat.remove_class("-maximized")
        else:
            chat.add_class("-maximized")

    def on_chat_input_bar_submitted(self, event: ChatInputBar.Submitted) -> None:
        """Handle user input submission."""
        if event.value:
            self._run_exchange(event.value)

    def on_message_view_selected(self, event: MessageView.Selected) -> None:
        if self._exchange is not None:
            self._exchange.select(event.message_id)

    @work(group="exchange")
    async def _run_exchange(self, question: str) -> None:
        """Run one exchange as a background async worker."""
        if self._exchange is None:
            return

        log_panel = self.query_one("#debug-panel", DebugPanel)
        try:
            await self._exchange.submit(question)
        except asyncio.CancelledError:
            log_panel.log_message(LogLevel.WARNING, "TUI", "Exchange cancelled")
        except Exception as e:
            log_panel.log_message(LogLevel.ERROR, "TUI", f"Exception: {e}")
            self.notify(f"Error: {str(e)[:50]}", severity="error", timeout=5)

    def action_new_chat(self) -> None:
        """Start over with only the welcome message."""
        self.workers.cancel_group(self, "exchange")
        if self._exchange is not None:
            self._exchange.reset()
        self._show_details(False)
        self.notify("New chat", timeout=2)

    def action_toggle_details(self) -> None:
        right_panel = self.query_one("#right-panel", Vertical)
        self._show_details(not right_panel.display)

    def action_close_details(self) -> None:
        if self._exchange is not None:
            self._exchange.select(None)
        self._show_details(False)

    def action_toggle_theme(self) -> None:
        self.theme = other_theme(self.theme)

    def action_toggle_debug(self) -> None:
        """Toggle the log panel visibility."""
        log_panel = self.query_one("#debug-panel", DebugPanel)
        if not log_panel.toggle():
            self.notify("Log panel hidden", timeout=2)
            return
        self._show_details(True)
        self.notify("Log panel shown", timeout=2)

    def action_copy_last_response(self) -> None:
        """Copy last assistant response to clipboard."""
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        response = chat.get_last_response()
        if response:
            self.copy_to_clipboard(response)
            self.notify("Response copied")
        else:
            self.notify("No response to copy", severity="warning")


async def run_dataverse_tui(
    backend: BackendClient,
    log_level: str | None = None,
) -> None:
    """Run the Textual TUI.

    Args:
        backend: Backend client for answers and query execution
        log_level: Log level for panel (debug/info/warning/error), None to hide
    """
    app = DataverseApp(backend=backend, log_level=log_level)
    try:
        await app.run_async()
    except (KeyboardInterrupt, asyncio.CancelledError):
        pass
    finally:
        with contextlib.suppress(RuntimeError):
            await backend.close()
