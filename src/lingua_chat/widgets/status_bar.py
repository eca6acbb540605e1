"""Status bar widget for credential, model, and transcript telemetry."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.widgets import Label, Static


class StatusBar(Static):
    """Render compact runtime status information.

    Segments (left to right):
        🔑 key set  |  Model: Qwen/Qwen2.5-72B-Instruct  |  Messages: 4  |  IDLE
    """

    DEFAULT_CSS = """
    StatusBar {
        layout: horizontal;
        height: auto;
    }
    StatusBar Label {
        margin-right: 1;
    }
    """

    def compose(self) -> ComposeResult:
        yield Label("🔒 no key", id="status_credential")
        yield Label("|")
        yield Label("Model: —", id="status_model", markup=False)
        yield Label("|")
        yield Label("Messages: 0", id="status_messages")
        yield Label("|")
        yield Label("IDLE", id="status_phase")

    def set_status(
        self,
        *,
        credential_configured: bool,
        model: str,
        message_count: int,
        phase: str,
    ) -> None:
        """Update all status segment labels."""
        credential = "🔑 key set" if credential_configured else "🔒 no key"
        self.query_one("#status_credential", Label).update(credential)
        self.query_one("#status_model", Label).update(f"Model: {model}")
        self.query_one("#status_messages", Label).update(f"Messages: {message_count}")
        self.query_one("#status_phase", Label).update(phase)
