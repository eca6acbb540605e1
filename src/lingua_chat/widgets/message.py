"""Message bubble widget for transcript rendering."""

from __future__ import annotations

from typing import Any

from rich.markdown import Markdown
from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import Static

_ROLE_PREFIXES = {
    "user": "You",
    "assistant": "Assistant",
    "error": "⚠️ Error",
}


class MessageBubble(Vertical):
    """Render a single transcript entry with a role header and body."""

    DEFAULT_CSS = """
    MessageBubble {
        height: auto;
    }
    MessageBubble > #header-block {
        padding: 0;
        text-style: bold;
    }
    MessageBubble > #content-block {
        height: auto;
    }
    """

    def __init__(
        self,
        content: str,
        role: str,
        timestamp: str = "",
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)  # type: ignore[arg-type]
        self.message_content = content
        self.role = role
        self.timestamp = timestamp
        self.add_class(f"role-{role}")
        self._content_widget: Static | None = None

    @property
    def role_prefix(self) -> str:
        """Return a human-friendly role label."""
        return _ROLE_PREFIXES.get(self.role, self.role.capitalize())

    def _compose_header(self) -> str:
        if self.timestamp:
            return f"{self.role_prefix}  {self.timestamp}"
        return self.role_prefix

    def _render_body(self) -> Markdown | Text:
        text = self.message_content.rstrip()
        # Only model output is Markdown; user and error text render verbatim.
        if self.role == "assistant" and text:
            return Markdown(text)
        return Text(text)

    def compose(self) -> ComposeResult:
        """Compose the header and content blocks."""
        self._content_widget = Static(self._render_body(), id="content-block")
        yield Static(self._compose_header(), id="header-block")
        yield self._content_widget

    def set_content(self, content: str) -> None:
        """Replace the body text and rerender."""
        self.message_content = content
        if self._content_widget is not None:
            self._content_widget.update(self._render_body())
