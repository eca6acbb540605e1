"""Append-only transcript of rendered chat messages."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
import logging

LOGGER = logging.getLogger(__name__)


class MessageRole(str, Enum):
    """Who a transcript entry is attributed to."""

    USER = "user"
    ASSISTANT = "assistant"
    ERROR = "error"


@dataclass(frozen=True)
class Message:
    """A single transcript entry. Immutable once appended."""

    role: MessageRole
    text: str
    sequence: int


TranscriptObserver = Callable[[Message, bool], None]


class TranscriptStore:
    """Ordered sequence of messages shown in the conversation.

    Observers are called synchronously, in append order, with the new message
    and a flag that is True only on the append that dropped the welcome entry.
    """

    def __init__(self, has_welcome: bool = True) -> None:
        self._messages: list[Message] = []
        self._observers: list[TranscriptObserver] = []
        self._next_sequence = 1
        self._has_welcome = has_welcome

    @property
    def has_welcome(self) -> bool:
        """Return True while the welcome entry is still displayed."""
        return self._has_welcome

    @property
    def messages(self) -> tuple[Message, ...]:
        """Return an immutable snapshot of all messages."""
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def subscribe(self, observer: TranscriptObserver) -> None:
        """Register a rendering observer."""
        if observer not in self._observers:
            self._observers.append(observer)

    def unsubscribe(self, observer: TranscriptObserver) -> None:
        """Remove a previously registered observer."""
        try:
            self._observers.remove(observer)
        except ValueError:
            pass

    def append(self, role: MessageRole, text: str) -> Message:
        """Append a message, assigning the next sequence number, and notify observers."""
        message = Message(role=MessageRole(role), text=text, sequence=self._next_sequence)
        self._next_sequence += 1
        self._messages.append(message)

        welcome_removed = self._has_welcome
        self._has_welcome = False

        LOGGER.debug(
            "transcript.append",
            extra={
                "event": "transcript.append",
                "role": message.role.value,
                "sequence": message.sequence,
                "welcome_removed": welcome_removed,
            },
        )
        for observer in list(self._observers):
            observer(message, welcome_removed)
        return message

    def last(self, role: MessageRole | None = None) -> Message | None:
        """Return the newest message, optionally restricted to one role."""
        for message in reversed(self._messages):
            if role is None or message.role == role:
                return message
        return None

    def clear(self) -> None:
        """Drop all real messages. The welcome entry is never restored."""
        self._messages.clear()
