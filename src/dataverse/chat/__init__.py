"""Chat thread module.

Module structure:
- models.py: Message representation
- store.py: Ordered message store with append-only updates
- formatting.py: Query results as markdown
- pipeline.py: Question -> answer -> query -> result sequencing
"""

from .formatting import build_markdown_table, build_result_section
from .models import Message, Role, welcome_message
from .pipeline import AssistantExchange, ExchangePhase
from .store import MessageStore, StoreEvent

__all__ = [
    "AssistantExchange",
    "ExchangePhase",
    "Message",
    "MessageStore",
    "Role",
    "StoreEvent",
    "build_markdown_table",
    "build_result_section",
    "welcome_message",
]
