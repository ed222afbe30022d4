"""Theme definitions for the TUI.

This module hides the design decisions about:
- Color palettes and visual appearance
- Dark/light mode configuration

Both themes use a slate/sky palette. The app toggles between them.
"""

from textual.theme import Theme

DARK_THEME_NAME = "dataverse-dark"
LIGHT_THEME_NAME = "dataverse-light"

DATAVERSE_DARK = Theme(
    name=DARK_THEME_NAME,
    primary="#0ea5e9",      # Sky 500 - main accent
    secondary="#6366f1",    # Indigo 500 - assistant accent
    accent="#38bdf8",       # Sky 400 - selection highlight
    foreground="#f1f5f9",   # Slate 100
    background="#020617",   # Slate 950
    success="#34d399",      # Emerald 400 - user messages
    warning="#fbbf24",      # Amber 400
    error="#f87171",        # Red 400
    surface="#0f172a",      # Slate 900
    panel="#111827",        # Gray 900
    dark=True,
    variables={
        "border": "#334155",
        "border-blurred": "#1e293b",
        "text-muted": "#94a3b8",
        "scrollbar": "#1e293b",
        "scrollbar-hover": "#334155",
        "scrollbar-active": "#0ea5e9",
        "footer-key-foreground": "#38bdf8",
        "input-selection-background": "#0ea5e9 30%",
    },
)

DATAVERSE_LIGHT = Theme(
    name=LIGHT_THEME_NAME,
    primary="#0284c7",      # Sky 600
    secondary="#4f46e5",    # Indigo 600
    accent="#0369a1",       # Sky 700
    foreground="#0f172a",   # Slate 900
    background="#f8fafc",   # Slate 50
    success="#059669",      # Emerald 600
    warning="#d97706",      # Amber 600
    error="#dc2626",        # Red 600
    surface="#ffffff",
    panel="#f1f5f9",        # Slate 100
    dark=False,
    variables={
        "border": "#cbd5e1",
        "border-blurred": "#e2e8f0",
        "text-muted": "#64748b",
        "scrollbar": "#e2e8f0",
        "scrollbar-hover": "#cbd5e1",
        "scrollbar-active": "#0284c7",
        "footer-key-foreground": "#0284c7",
        "input-selection-background": "#0284c7 25%",
    },
)


def other_theme(name: str) -> str:
    """Name of the theme the toggle switches to from ``name``."""
    return LIGHT_THEME_NAME if name == DARK_THEME_NAME else DARK_THEME_NAME
