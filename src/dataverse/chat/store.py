"""Ordered message store.

The store is the one place messages are mutated. The reveal engine
appends to it; the UI subscribes to it and redraws whatever changed.
"""

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass

from ..streaming import Channel
from .models import Message


@dataclass(frozen=True)
class StoreEvent:
    """Notification sent to subscribers after every mutation.

    ``kind`` is one of "created", "appended", "set" or "reset".
    """

    kind: str
    message: Message | None = None
    field: Channel | None = None
    fragment: str | None = None


StoreListener = Callable[[StoreEvent], None]


class MessageStore:
    """Ordered list of messages with append-only field updates."""

    def __init__(self, messages: Iterable[Message] = ()) -> None:
        self._messages: list[Message] = []
        self._index: dict[str, Message] = {}
        self._listeners: list[StoreListener] = []
        for message in messages:
            self._add(message)

    def _add(self, message: Message) -> None:
        if message.id in self._index:
            raise ValueError(f"Duplicate message id: {message.id}")
        self._messages.append(message)
        self._index[message.id] = message

    def _notify(self, event: StoreEvent) -> None:
        for listener in list(self._listeners):
            listener(event)

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register a listener. Returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def messages(self) -> list[Message]:
        """Snapshot of the messages in order."""
        return list(self._messages)

    def get(self, message_id: str) -> Message:
        """Get a message by id.

        Raises:
            KeyError: If no message has this id
        """
        try:
            return self._index[message_id]
        except KeyError:
            raise KeyError(f"Unknown message id: {message_id}") from None

    def find(self, message_id: str) -> Message | None:
        return self._index.get(message_id)

    def last(self) -> Message | None:
        return self._messages[-1] if self._messages else None

    def create_message(self, message: Message) -> Message:
        """Append a new message to the end of the thread."""
        self._add(message)
        self._notify(StoreEvent("created", message=message))
        return message

    def append_to_field(self, message_id: str, field: Channel | str, fragment: str) -> None:
        """Append a fragment to one of a message's growing fields.

        A field that does not exist yet (None) starts from the empty string.
        """
        channel = _channel(field)
        message = self.get(message_id)
        current = getattr(message, channel.value) or ""
        setattr(message, channel.value, current + fragment)
        self._notify(StoreEvent("appended", message=message, field=channel, fragment=fragment))

    def set_field(self, message_id: str, field: Channel | str, value: str | None) -> None:
        """Replace a field outright (reset before a reveal, failure text)."""
        channel = _channel(field)
        message = self.get(message_id)
        setattr(message, channel.value, value)
        self._notify(StoreEvent("set", message=message, field=channel))

    def reset(self, messages: Iterable[Message] = ()) -> None:
        """Replace the whole thread (new chat)."""
        self._messages = []
        self._index = {}
        for message in messages:
            self._add(message)
        self._notify(StoreEvent("reset"))

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(list(self._messages))

    def __contains__(self, message_id: object) -> bool:
        return message_id in self._index


def _channel(field: Channel | str) -> Channel:
    try:
        return Channel(field)
    except ValueError:
        raise ValueError(
            f"Unknown message field: {field!r}. "
            f"Supported fields: {', '.join(c.value for c in Channel)}"
        ) from None
