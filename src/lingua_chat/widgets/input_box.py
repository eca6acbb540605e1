"""Input region: multi-line draft, send button, and prompt template row."""

from __future__ import annotations

from typing import Any

from textual import events
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.message import Message
from textual.widgets import Button, Static, TextArea

from ..input_controller import offset_to_location, placeholder_cursor_offset

NEWLINE_KEYS = frozenset({"shift+enter", "ctrl+j"})


class DraftArea(TextArea):
    """Text area where Enter submits and Shift+Enter inserts a line break."""

    class Submitted(Message):
        """Posted when Enter is pressed without Shift."""

    async def _on_key(self, event: events.Key) -> None:
        if event.key == "enter":
            event.stop()
            event.prevent_default()
            self.post_message(self.Submitted())
        elif event.key in NEWLINE_KEYS:
            event.stop()
            event.prevent_default()
            self.insert("\n")


class InputBox(Vertical):
    """Owns the draft and the busy state of the input controls."""

    DEFAULT_CSS = """
    InputBox {
        height: auto;
    }
    InputBox #input_row {
        height: auto;
    }
    InputBox #message_input {
        width: 1fr;
        height: 5;
    }
    InputBox #send_button {
        margin-left: 1;
        min-width: 10;
    }
    InputBox #template_row {
        height: auto;
        margin-top: 1;
    }
    InputBox #prompt_template {
        width: 1fr;
        color: $text-muted;
        padding: 0 1;
    }
    """

    class SubmitRequested(Message):
        """Posted when the user asks to send the current draft."""

    def __init__(self, template_text: str = "", **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.template_text = template_text
        self.busy = False

    def compose(self) -> ComposeResult:
        with Horizontal(id="input_row"):
            yield DraftArea(id="message_input", soft_wrap=True)
            yield Button("Send", id="send_button", variant="success")
        with Horizontal(id="template_row"):
            yield Static(self.template_text, id="prompt_template", markup=False)
            yield Button("Use template", id="use_template", variant="default")

    @property
    def text_area(self) -> DraftArea:
        return self.query_one("#message_input", DraftArea)

    def get_draft(self) -> str:
        """Return the draft trimmed of surrounding whitespace."""
        return self.text_area.text.strip()

    def set_draft(self, text: str, cursor_hint: bool = True) -> None:
        """Replace the draft; put the cursor right after the first ``[`` when present."""
        area = self.text_area
        area.text = text
        offset = placeholder_cursor_offset(text) if cursor_hint else None
        area.cursor_location = offset_to_location(
            text, len(text) if offset is None else offset
        )
        area.focus()

    def clear_draft(self) -> None:
        self.text_area.text = ""

    def set_busy(self, busy: bool) -> None:
        """Disable the controls while busy; re-enable and refocus afterwards."""
        self.busy = busy
        self.text_area.disabled = busy
        self.query_one("#send_button", Button).disabled = busy
        self.query_one("#use_template", Button).disabled = busy
        if not busy:
            self.text_area.focus()

    def use_template(self) -> None:
        """Copy the template text into the draft, ready to overwrite its placeholder."""
        if self.busy:
            return
        self.set_draft(self.template_text, cursor_hint=True)

    def on_draft_area_submitted(self, event: DraftArea.Submitted) -> None:
        event.stop()
        self.post_message(self.SubmitRequested())

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send_button":
            event.stop()
            self.post_message(self.SubmitRequested())
        elif event.button.id == "use_template":
            event.stop()
            self.use_template()
