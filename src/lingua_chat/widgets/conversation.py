"""Scrollable transcript view bound to a TranscriptStore."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any

from textual.app import ComposeResult
from textual.containers import VerticalScroll
from textual.widgets import Static

from ..transcript import Message, MessageRole, TranscriptStore
from .message import MessageBubble


class ConversationView(VerticalScroll):
    """Host one bubble per transcript entry plus a one-time welcome entry.

    A pending assistant bubble shows the partial reply while it streams. It
    is removed as soon as the final assistant or error entry is appended.
    """

    def __init__(
        self,
        welcome_text: str = "",
        show_timestamps: bool = True,
        clock: Callable[[], datetime] = datetime.now,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.welcome_text = welcome_text
        self.show_timestamps = show_timestamps
        self._clock = clock
        self._welcome: Static | None = None
        self._pending: MessageBubble | None = None
        self.bubbles: list[MessageBubble] = []
        self._transcript: TranscriptStore | None = None

    def compose(self) -> ComposeResult:
        if self._transcript is not None and not self._transcript.has_welcome:
            return
        if self.welcome_text:
            self._welcome = Static(
                self.welcome_text, classes="welcome-message", markup=False
            )
            yield self._welcome

    def attach_transcript(self, transcript: TranscriptStore) -> None:
        """Render ``transcript`` appends from now on."""
        if self._transcript is not None:
            self._transcript.unsubscribe(self.handle_transcript_append)
        self._transcript = transcript
        transcript.subscribe(self.handle_transcript_append)
        if not transcript.has_welcome:
            self.remove_welcome()

    def _timestamp(self) -> str:
        if not self.show_timestamps:
            return ""
        return self._clock().strftime("%H:%M")

    def remove_welcome(self) -> None:
        """Remove the welcome entry. Subsequent calls do nothing."""
        welcome = self._welcome
        self._welcome = None
        if welcome is not None:
            welcome.remove()

    @property
    def has_welcome(self) -> bool:
        return self._welcome is not None

    def handle_transcript_append(self, message: Message, welcome_removed: bool) -> None:
        """Mount a bubble for ``message`` and scroll to it."""
        if welcome_removed:
            self.remove_welcome()
        if message.role in (MessageRole.ASSISTANT, MessageRole.ERROR):
            self.discard_pending_reply()
        bubble = MessageBubble(
            content=message.text,
            role=message.role.value,
            timestamp=self._timestamp(),
        )
        bubble.add_class(f"message-{message.role.value}")
        self.bubbles.append(bubble)
        self.mount(bubble)
        self.call_after_refresh(self.scroll_end, animate=False)

    def show_pending_reply(self, text: str) -> None:
        """Show or update the partial streamed reply."""
        if self._pending is None:
            self._pending = MessageBubble(
                content=text, role="assistant", timestamp=self._timestamp()
            )
            self._pending.add_class("message-pending")
            self.mount(self._pending)
        else:
            self._pending.set_content(text)
        self.call_after_refresh(self.scroll_end, animate=False)

    def discard_pending_reply(self) -> None:
        pending = self._pending
        self._pending = None
        if pending is not None:
            pending.remove()

    def clear_messages(self) -> None:
        """Remove every rendered bubble. The welcome entry is not restored."""
        self.discard_pending_reply()
        for bubble in self.bubbles:
            bubble.remove()
        self.bubbles.clear()
