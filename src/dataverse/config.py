"""Configuration constants.

Centralizes magic numbers and configuration values shared by the
streaming core, the chat pipeline and the UI.
"""


class LogLevel:
    """Log level constants with numeric values for comparison.

    Standard logging hierarchy: DEBUG < INFO < WARNING < ERROR
    Lower numeric value = more verbose (shows more messages).
    """

    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40

    _names = {
        DEBUG: "DEBUG",
        INFO: "INFO",
        WARNING: "WARNING",
        ERROR: "ERROR",
    }

    _from_string = {
        "debug": DEBUG,
        "info": INFO,
        "warning": WARNING,
        "error": ERROR,
    }

    @classmethod
    def name(cls, level: int) -> str:
        """Get the name for a log level."""
        return cls._names.get(level, "UNKNOWN")

    @classmethod
    def from_string(cls, level_str: str) -> int:
        """Convert string to log level. Returns DEBUG if invalid."""
        return cls._from_string.get(level_str.lower(), cls.DEBUG)


# Reveal configuration
STREAM_INTERVAL = 0.05  # Seconds between reveal ticks
CONTENT_CHUNK_SIZE = 10  # Characters per narrative fragment
DETAIL_CHUNK_SIZE = 10  # Characters per generated-query fragment
RESULT_CHUNK_SIZE = 60  # Characters per query-result fragment

# Chat configuration
TITLE_MAX_LENGTH = 60  # Characters of the question kept as message title

# Backend configuration
DEFAULT_API_URL = "http://localhost:8000"
DEFAULT_CHAT_PATH = "/chat"
DEFAULT_EXECUTE_PATH = "/execute-query"
DEFAULT_TIMEOUT = 60.0  # Seconds

# Log panel configuration
LOG_TIMESTAMP_FORMAT = "%H:%M:%S"
