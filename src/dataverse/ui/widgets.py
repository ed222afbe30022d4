"""Custom Textual widgets for the TUI.

Hides widget implementation details:
- Input history management
- Chat message rendering and live updates while a reply is revealed
- Response details panel
- Log rendering and level filtering
"""

from datetime import datetime

from rich.markdown import Markdown
from rich.syntax import Syntax
from rich.text import Text
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.events import Click
from textual.message import Message
from textual.widgets import Button, RichLog, Static, TextArea

from ..chat import Message as ChatMessage
from ..chat import Role
from ..config import LOG_TIMESTAMP_FORMAT, LogLevel


def _markdown(text: str | None) -> Markdown | Text:
    if not text:
        return Text("")
    return Markdown(text)


class MessageView(Vertical):
    """One message in the thread. Assistant messages can be selected."""

    class Selected(Message):
        """Posted when an assistant message is clicked."""

        def __init__(self, message_id: str) -> None:
            super().__init__()
            self.message_id = message_id

    def __init__(self, message: ChatMessage, *args, **kwargs) -> None:
        role_class = "user-message" if message.role == Role.USER else "assistant-message"
        super().__init__(*args, classes=f"chat-message {role_class}", **kwargs)
        self._message = message
        self._header = Static(self._header_text(), classes="message-header")
        self._content = Static(classes="message-content")
        self._query_hint = Static(classes="message-query-hint")
        self._result = Static(classes="message-result")
        self.refresh_from(message)

    @property
    def message(self) -> ChatMessage:
        return self._message

    def _header_text(self) -> str:
        timestamp = self._message.created_at.strftime("%H:%M:%S")
        if self._message.role == Role.USER:
            return f"You [{timestamp}] >"
        title = f" - {self._message.title}" if self._message.title else ""
        return f"< Assistant [{timestamp}]{title}"

    def compose(self):
        yield self._header
        yield self._content
        yield self._query_hint
        yield self._result

    def refresh_from(self, message: ChatMessage) -> None:
        """Redraw from the message's current fields."""
        self._message = message
        if message.role == Role.USER:
            self._content.update(Text(message.content))
        else:
            self._content.update(_markdown(message.content))

        if message.detail is not None:
            self._query_hint.update("SQL generated - click to view details")
            self._query_hint.display = True
        else:
            self._query_hint.display = False

        self._result.update(_markdown(message.result))
        self._result.display = bool(message.result)

    def on_click(self, event: Click) -> None:
        event.stop()
        if self._message.role == Role.ASSISTANT:
            self.post_message(self.Selected(self._message.id))


class ChatHistoryWidget(VerticalScroll):
    """Scrollable chat thread that mirrors the message store."""

    BORDER_TITLE = "Chat"
    BORDER_SUBTITLE = "Conversation history"
    ALLOW_MAXIMIZE = True

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._views: dict[str, MessageView] = {}
        self._selected_id: str | None = None

    def _update_subtitle(self) -> None:
        self.border_subtitle = f"{len(self._views)} messages"

    def load(self, messages: list[ChatMessage]) -> None:
        """Replace the thread with ``messages``."""
        self.remove_children()
        self._views.clear()
        self._selected_id = None
        for message in messages:
            self.add_message(message)

    def add_message(self, message: ChatMessage) -> None:
        view = MessageView(message)
        self._views[message.id] = view
        self.mount(view)
        self._update_subtitle()
        self.scroll_end(animate=False)

    def update_message(self, message: ChatMessage) -> None:
        view = self._views.get(message.id)
        if view is not None:
            view.refresh_from(message)

    def set_selected(self, message_id: str | None) -> None:
        if self._selected_id in self._views:
            self._views[self._selected_id].remove_class("-selected")
        self._selected_id = message_id
        if message_id in self._views:
            self._views[message_id].add_class("-selected")

    def get_last_response(self) -> str | None:
        """Get the last assistant response."""
        for view in reversed(list(self._views.values())):
            if view.message.role == Role.ASSISTANT:
                return view.message.content
        return None


class ResponsePanel(VerticalScroll):
    """Details for the selected reply: metadata, generated query, results."""

    BORDER_TITLE = "Response details"
    BORDER_SUBTITLE = "Insights for the selected reply"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._message_id: str | None = None
        self._placeholder = Static(
            "Select a reply in the thread to see its full context here.",
            classes="panel-placeholder",
        )
        self._meta = Static(classes="panel-meta")
        self._query_title = Static("Query", classes="panel-section-title")
        self._query = Static(classes="panel-query")
        self._result = Static(classes="message-result")

    @property
    def message_id(self) -> str | None:
        return self._message_id

    def compose(self):
        yield self._placeholder
        yield self._meta
        yield self._query_title
        yield self._query
        yield self._result

    def on_mount(self) -> None:
        self.show_message(None)

    def show_message(self, message: ChatMessage | None) -> None:
        """Show a message's details, or the placeholder for None."""
        self._message_id = message.id if message else None
        has_message = message is not None
        self._placeholder.display = not has_message
        for widget in (self._meta, self._query_title, self._query, self._result):
            widget.display = has_message
        if message is None:
            return

        meta = [message.role.value, message.created_at.strftime("%b %d, %Y %H:%M")]
        if message.tokens:
            meta.append(f"{message.tokens} tokens")
        self._meta.update("  ·  ".join(meta))

        has_query = message.detail is not None
        self._query_title.display = has_query
        self._query.display = has_query
        if has_query:
            self._query.update(Syntax(message.detail or "", "sql", word_wrap=True))

        self._result.update(_markdown(message.content + (message.result or "")))


class TypingIndicator(Static):
    """Shows that a backend call is outstanding."""

    def set_active(self, active: bool) -> None:
        self.update("Assistant is thinking..." if active else "")


class ChatInputBar(Horizontal):
    """Chat input bar with TextArea and Send button."""

    class Submitted(Message):
        """Message sent when user submits input."""

        def __init__(self, value: str) -> None:
            super().__init__()
            self.value = value

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._history: list[str] = []
        self._history_index: int = -1
        self._enabled = True

    def compose(self):
        text_area = TextArea(id="chat-input", show_line_numbers=False)
        text_area.cursor_blink = False
        yield text_area
        yield Button("Send", id="send-btn", variant="primary").with_tooltip(
            "Send message (Ctrl+J)"
        )

    def on_mount(self) -> None:
        text_area = self.query_one("#chat-input", TextArea)
        text_area.focus()
        text_area.highlight_cursor_line = False

    def set_enabled(self, enabled: bool) -> None:
        """Enable or disable sending (the draft is kept either way)."""
        self._enabled = enabled
        self.query_one("#send-btn", Button).disabled = not enabled

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send-btn":
            self._submit()

    def on_key(self, event) -> None:
        """Handle keyboard shortcuts.

        Note: ctrl+enter cannot work in terminals (terminal doesn't pass
        ctrl/shift modifiers with Enter). Use ctrl+j as the submit shortcut.
        """
        if event.key == "ctrl+j":
            self._submit()
            event.prevent_default()
            event.stop()
        elif event.key == "up" and self._is_cursor_at_start():
            self._navigate_history(-1)
            event.prevent_default()
            event.stop()
        elif event.key == "down" and self._is_cursor_at_end():
            self._navigate_history(1)
            event.prevent_default()
            event.stop()

    def _is_cursor_at_start(self) -> bool:
        text_area = self.query_one("#chat-input", TextArea)
        return text_area.cursor_location == (0, 0)

    def _is_cursor_at_end(self) -> bool:
        text_area = self.query_one("#chat-input", TextArea)
        lines = text_area.text.split("\n")
        return text_area.cursor_location == (len(lines) - 1, len(lines[-1]))

    def _navigate_history(self, direction: int) -> None:
        if not self._history:
            return
        text_area = self.query_one("#chat-input", TextArea)
        if direction < 0:
            if self._history_index == -1:
                self._history_index = len(self._history) - 1
            elif self._history_index > 0:
                self._history_index -= 1
        else:
            if self._history_index < len(self._history) - 1:
                self._history_index += 1
            else:
                self._history_index = -1
                text_area.text = ""
                return
        text_area.text = self._history[self._history_index]

    def _submit(self) -> None:
        if not self._enabled:
            return
        text_area = self.query_one("#chat-input", TextArea)
        value = text_area.text.strip()
        if value:
            if not self._history or self._history[-1] != value:
                self._history.append(value)
            self._history_index = -1
            text_area.text = ""
            self.post_message(self.Submitted(value))

    def focus_input(self) -> None:
        """Focus the text input."""
        self.query_one("#chat-input", TextArea).focus()


class DebugPanel(RichLog):
    """Log panel for real-time tracing with level filtering.

    Hidden by default, shown with --log-level or toggled with Ctrl+D.
    """

    BORDER_TITLE = "Log"
    BORDER_SUBTITLE = "Trace log"

    LEVEL_COLORS = {
        LogLevel.DEBUG: "dim white",
        LogLevel.INFO: "cyan",
        LogLevel.WARNING: "yellow",
        LogLevel.ERROR: "red",
    }

    COMPONENT_COLORS = {
        "TUI": "cyan",
        "Exchange": "green",
        "Stream": "yellow",
        "Reveal": "magenta",
        "Backend": "blue",
    }

    def __init__(self, *args, log_level: int = LogLevel.DEBUG, **kwargs) -> None:
        super().__init__(
            *args,
            markup=True,
            highlight=False,
            auto_scroll=True,
            wrap=False,
            **kwargs
        )
        self._log_level = log_level

    @property
    def log_level(self) -> int:
        return self._log_level

    @log_level.setter
    def log_level(self, level: int) -> None:
        self._log_level = level
        self._update_subtitle()

    def _update_subtitle(self) -> None:
        if self.display:
            self.border_subtitle = f"Level: {LogLevel.name(self._log_level)}"
        else:
            self.border_subtitle = "Hidden"

    def log_message(self, level: int, component: str, message: str) -> None:
        """Add a log entry if it meets the current level threshold."""
        if level < self._log_level:
            return

        timestamp = datetime.now().strftime(LOG_TIMESTAMP_FORMAT)
        level_color = self.LEVEL_COLORS.get(level, "white")
        comp_color = self.COMPONENT_COLORS.get(component, "white")
        line = Text.assemble(
            (timestamp, "dim"),
            " ",
            (f"{LogLevel.name(level):<5}", level_color),
            " ",
            (f"[{component}]", comp_color),
            " ",
            message,
        )
        self.write(line)

    def debug_callback(self, level: str, component: str, message: str) -> None:
        """Adapter for the ``debug_callback(level, component, message)`` hooks."""
        self.log_message(LogLevel.from_string(level), component, message)

    def show(self) -> None:
        self.display = True
        self._update_subtitle()

    def hide(self) -> None:
        self.display = False
        self.border_subtitle = "Hidden"

    def toggle(self) -> bool:
        """Toggle visibility. Returns new state."""
        if self.display:
            self.hide()
            return False
        self.show()
        return True
