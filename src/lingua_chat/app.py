"""Main Textual application for the translation chat widget."""

from __future__ import annotations

from collections.abc import Mapping
import logging
from pathlib import Path
import sys
from typing import Any

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.widgets import Footer, Header

from .config import InferenceSettings, load_config
from .inference import InferenceClient
from .logging_utils import configure_logging
from .session import ChatSession, SubmitOutcome
from .state import SessionPhase
from .transcript import Message, MessageRole, TranscriptStore
from .widgets.activity_bar import ActivityBar
from .widgets.conversation import ConversationView
from .widgets.input_box import InputBox
from .widgets.status_bar import StatusBar

LOGGER = logging.getLogger(__name__)


class LinguaChatApp(App[None]):
    """Single-pane chat widget that streams translations from a hosted model."""

    CSS = """
    Screen {
        layout: vertical;
        background: $background;
    }

    #app-root {
        layout: vertical;
        width: 100%;
        height: 1fr;
    }

    #conversation {
        height: 1fr;
        padding: 1;
    }

    .welcome-message {
        color: $text-muted;
        padding: 1 2;
        border: dashed $panel;
    }

    #input_box {
        height: auto;
        padding: 0 1 1 1;
        border-top: solid $panel;
        background: $surface;
    }

    #status_bar {
        height: auto;
        padding: 0 1;
        border-top: solid $panel;
        background: $surface;
    }

    #activity_bar {
        border-top: dashed $panel;
        background: $surface;
    }

    MessageBubble {
        width: 85%;
        margin: 1 0;
        padding: 1 2;
        border: round $panel;
    }

    .message-user {
        background: $primary;
    }

    .message-assistant {
        background: $surface;
    }

    .message-error {
        border: round $error;
        color: $error;
    }

    .message-pending {
        border: dashed $panel;
    }
    """

    ACTION_DESCRIPTIONS: dict[str, str] = {
        "send_message": "Send",
        "use_template": "Template",
        "clear_transcript": "Clear",
        "copy_last_message": "Copy Last",
        "quit": "Quit",
    }

    BINDINGS = [
        Binding("ctrl+s", "send_message", "Send", id="send_message"),
        Binding("ctrl+t", "use_template", "Template", id="use_template"),
        Binding("ctrl+n", "clear_transcript", "Clear", id="clear_transcript"),
        Binding("ctrl+o", "copy_last_message", "Copy Last", id="copy_last_message"),
        Binding("ctrl+q", "quit", "Quit", id="quit"),
    ]

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        environ: Mapping[str, str] | None = None,
        client: InferenceClient | None = None,
    ) -> None:
        self.config = load_config(config_path)
        configure_logging(self.config["logging"])
        LOGGER.info(
            "app.python",
            extra={
                "event": "app.python",
                "executable": sys.executable,
                "version": sys.version.split()[0],
            },
        )
        super().__init__()
        self.window_title = str(self.config["app"]["title"])

        ui_cfg = self.config["ui"]
        self.transcript = TranscriptStore(has_welcome=True)
        self.conversation = ConversationView(
            welcome_text=str(ui_cfg["welcome_text"]),
            show_timestamps=bool(ui_cfg["show_timestamps"]),
            id="conversation",
        )
        self.input_box = InputBox(
            template_text=str(ui_cfg["template_text"]), id="input_box"
        )
        self.activity = ActivityBar(
            shortcut_hints="enter send · shift+enter newline", id="activity_bar"
        )
        self.status_bar = StatusBar(id="status_bar")

        self.settings = InferenceSettings.from_config(self.config, environ)
        self.session = ChatSession(
            settings=self.settings,
            transcript=self.transcript,
            controller=self.input_box,
            client=client,
            stream_chunk_size=int(ui_cfg["stream_chunk_size"]),
            on_reply_progress=self.conversation.show_pending_reply,
            on_phase_change=self._on_phase_change,
        )
        self.conversation.attach_transcript(self.transcript)
        self.transcript.subscribe(self._on_transcript_append)

    @classmethod
    def _keymap_from_config(cls, config: dict[str, dict[str, Any]]) -> dict[str, str]:
        keybinds = config.get("keybinds", {})
        keymap: dict[str, str] = {}
        for action_name in cls.ACTION_DESCRIPTIONS:
            binding_key = keybinds.get(action_name)
            if isinstance(binding_key, str) and binding_key.strip():
                keymap[action_name] = binding_key.strip()
        return keymap

    def compose(self) -> ComposeResult:
        yield Header(name=self.window_title)
        with Container(id="app-root"):
            yield self.conversation
            yield self.input_box
            yield self.status_bar
            yield self.activity
        yield Footer()

    def on_mount(self) -> None:
        self.set_keymap(self._keymap_from_config(self.config))
        self.title = self.window_title
        self.sub_title = f"Model: {self.settings.model}"
        self._update_status_bar()
        self.input_box.text_area.focus()
        if not self.session.credential_configured:
            self.notify(
                f"No API key configured. Set {self.settings.api_key_env} "
                "or inference.api_key in config.toml.",
                severity="warning",
            )

    def _update_status_bar(self) -> None:
        if not self.status_bar.is_mounted:
            return
        self.status_bar.set_status(
            credential_configured=self.session.credential_configured,
            model=self.settings.model,
            message_count=len(self.transcript),
            phase=self.session.phase.value,
        )

    def _on_phase_change(self, phase: SessionPhase) -> None:
        busy = phase == SessionPhase.SENDING
        self.activity.set_busy(busy)
        self.sub_title = "Waiting for response..." if busy else "Ready"
        self._update_status_bar()

    def _on_transcript_append(self, message: Message, welcome_removed: bool) -> None:
        self._update_status_bar()

    async def on_input_box_submit_requested(
        self, _message: InputBox.SubmitRequested
    ) -> None:
        await self.send_user_message()

    async def send_user_message(self) -> SubmitOutcome:
        """Hand the current draft to the chat session."""
        outcome = await self.session.submit()
        if outcome == SubmitOutcome.REJECTED_BUSY:
            self.sub_title = "Busy. Wait for the current reply to finish."
        elif outcome == SubmitOutcome.IGNORED_EMPTY:
            self.sub_title = "Cannot send an empty message."
        elif outcome == SubmitOutcome.MISSING_CREDENTIAL:
            self.sub_title = "API key missing"
        elif outcome == SubmitOutcome.FAILED:
            self.sub_title = "Request failed"
        return outcome

    async def action_send_message(self) -> None:
        """Action invoked by keybinding for sending a message."""
        await self.send_user_message()

    def action_use_template(self) -> None:
        """Load the prompt template into the draft."""
        self.input_box.use_template()

    def action_clear_transcript(self) -> None:
        """Clear all messages while idle. The welcome entry stays gone."""
        if not self.session.clear_transcript():
            self.sub_title = "Clear is available only when idle."
            return
        self.conversation.clear_messages()
        self._update_status_bar()
        self.sub_title = "Transcript cleared."

    def action_copy_last_message(self) -> None:
        """Copy the latest assistant reply to the clipboard."""
        message = self.transcript.last(MessageRole.ASSISTANT)
        if message is None or not message.text.strip():
            self.sub_title = "No assistant message available to copy."
            return
        self.copy_to_clipboard(message.text)
        self.sub_title = "Copied latest assistant message."

    async def action_quit(self) -> None:
        """Exit the app."""
        self.exit()
