"""Data models for the chat thread.

Hides the internal representation of chat messages.
"""

from datetime import datetime
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field


class Role(str, Enum):
    """Who authored a message."""

    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """A message in the conversation.

    ``content``, ``detail`` and ``result`` grow by appending while a reply
    is being revealed. ``detail`` holds the generated query and is None
    when no query was generated.
    """

    id: str = Field(default_factory=lambda: uuid4().hex, frozen=True)
    role: Role
    content: str = Field(default="", description="Narrative text (markdown)")
    detail: str | None = Field(default=None, description="Generated query text")
    result: str | None = Field(default=None, description="Query result section (markdown)")
    created_at: datetime = Field(default_factory=datetime.now)
    title: str | None = None
    tokens: int | None = None

    @property
    def has_query(self) -> bool:
        return bool(self.detail and self.detail.strip())


WELCOME_TITLE = "Welcome to DataVerse Chat"
WELCOME_CONTENT = (
    "Hi there! Ask me anything about your data pipelines.\n\n"
    "I can help you explore datasets, generate SQL, or summarize experiments."
)


def welcome_message() -> Message:
    """Create the greeting shown at the top of a fresh conversation."""
    return Message(
        role=Role.ASSISTANT,
        content=WELCOME_CONTENT,
        title=WELCOME_TITLE,
        tokens=386,
    )
