"""Terminal UI module for dataverse.

Provides a Textual-based TUI for the assistant.

Module structure (each module hides a design decision):
- widgets.py: Custom widgets (thread, details panel, input, log)
- styles.py: CSS styling (layout decisions)
- themes.py: Color palettes, dark and light
- app.py: Application orchestration (user interaction flow)
"""

from .app import DataverseApp, run_dataverse_tui
from .widgets import (
    ChatHistoryWidget,
    ChatInputBar,
    DebugPanel,
    MessageView,
    ResponsePanel,
    TypingIndicator,
)

__all__ = [
    "ChatHistoryWidget",
    "ChatInputBar",
    "DataverseApp",
    "DebugPanel",
    "MessageView",
    "ResponsePanel",
    "TypingIndicator",
    "run_dataverse_tui",
]
