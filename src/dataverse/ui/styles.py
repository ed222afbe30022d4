"""CSS styles for the TUI.

Hides layout and styling decisions from the application logic.
Uses Textual CSS features: nesting, pseudo-classes, variables.
"""

APP_CSS = """
/* ============================================
   Main Screen Layout - thread left, details right
   ============================================ */
Screen {
    layout: grid;
    grid-size: 2 2;
    grid-columns: 3fr 2fr;
    grid-rows: 1fr auto;
    background: $background;
}

/* Details panel closed: thread spans both columns */
#chat-history.-maximized {
    column-span: 2;
}

/* ============================================
   Chat Thread
   ============================================ */
#chat-history {
    height: 100%;
    background: $panel;
    border: round $primary 60%;
    border-title-color: $primary;
    border-title-style: bold;
    border-title-align: left;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    scrollbar-gutter: stable;

    &:focus-within {
        border: round $primary;
    }
}

/* ============================================
   Right Column - details + log
   ============================================ */
#right-panel {
    height: 100%;
    background: transparent;
    padding: 0;
}

#response-panel {
    height: 1fr;
    background: $panel;
    border: round $secondary 60%;
    border-title-color: $secondary;
    border-title-style: bold;
    border-title-align: left;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    scrollbar-gutter: stable;

    &:focus-within {
        border: round $secondary;
    }
}

.panel-meta {
    color: $text-muted;
    height: auto;
    margin-bottom: 1;
}

.panel-section-title {
    color: $accent;
    text-style: bold;
    height: auto;
}

.panel-query {
    background: $surface;
    border: round $border;
    height: auto;
    padding: 0 1;
    margin-bottom: 1;
}

.panel-placeholder {
    color: $text-muted;
    text-align: center;
    height: auto;
    margin-top: 2;
}

#debug-panel {
    display: none;
    height: auto;
    min-height: 6;
    max-height: 14;
    background: $panel;
    border: round $warning 60%;
    border-title-color: $warning;
    border-title-style: bold;
    border-title-align: left;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    overflow-y: scroll;
    overflow-x: auto;
    margin-top: 1;
}

/* ============================================
   Bottom Bar - typing indicator + input
   ============================================ */
#bottom-bar {
    column-span: 2;
    height: auto;
    padding: 0 1 1 1;
    background: $panel;
    border-top: solid $border;
}

TypingIndicator {
    height: 1;
    padding: 0 2;
    color: $text-muted;
    text-style: italic;
}

ChatInputBar {
    height: 5;
    border: round $primary 60%;
    background: $panel;

    &:focus-within {
        border: round $primary;
    }
}

#chat-input {
    width: 1fr;
    height: 100%;
    border: none;
    padding: 0 1;
    background: transparent;
}

#send-btn {
    width: 10;
    height: 100%;
    margin: 0 0 0 1;
    min-width: 8;
    border: tall $primary;
    background: $primary;
    color: $background;
    text-style: bold;

    &:disabled {
        opacity: 60%;
    }
}

/* ============================================
   Chat Messages
   ============================================ */
.chat-message {
    width: 100%;
    height: auto;
    margin: 0 0 1 0;
    padding: 1 2;
    background: transparent;
}

.user-message {
    border-right: tall $success;
    background: $success 8%;

    & .message-header {
        color: $success;
        text-style: bold;
        text-align: right;
    }
}

.assistant-message {
    border-left: tall $secondary;
    background: $secondary 8%;

    & .message-header {
        color: $secondary;
        text-style: bold;
    }

    &:hover {
        background: $secondary 12%;
    }

    &.-selected {
        border-left: thick $accent;
        background: $accent 10%;
    }
}

.message-header {
    height: auto;
}

.message-content,
.message-result {
    height: auto;
}

.message-query-hint {
    height: auto;
    color: $text-muted;
    text-style: italic;
}

/* ============================================
   Header / Footer
   ============================================ */
Header {
    background: $panel;
    color: $foreground;
    dock: top;
    height: 1;
}

Footer {
    background: $panel;
    height: auto;
}
"""
