"""Chat session orchestrator: input → inference stream → transcript."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
import logging

from .config import InferenceSettings
from .exceptions import FailureKind, LinguaChatError
from .inference import (
    HuggingFaceInferenceClient,
    InferenceClient,
    failure_reason,
    map_exception,
)
from .input_controller import InputController
from .state import SessionPhase, StateManager
from .stream_handler import StreamFolder
from .transcript import MessageRole, TranscriptStore

LOGGER = logging.getLogger(__name__)

_ERROR_MESSAGES: dict[FailureKind, str] = {
    FailureKind.CONFIGURATION: (
        "API key not found! Set {env} or inference.api_key in config.toml."
    ),
    FailureKind.AUTHENTICATION: "Invalid API key. Please check your configuration.",
    FailureKind.SERVICE_UNAVAILABLE: "Model is loading. Please wait a moment.",
    FailureKind.TRANSPORT: "Failed to get AI response: {reason}",
}


class SubmitOutcome(str, Enum):
    """What a call to :meth:`ChatSession.submit` did."""

    IGNORED_EMPTY = "ignored_empty"
    REJECTED_BUSY = "rejected_busy"
    MISSING_CREDENTIAL = "missing_credential"
    COMPLETED = "completed"
    FAILED = "failed"


def describe_failure(kind: FailureKind, reason: str = "", env: str = "") -> str:
    """Return the user-facing text for a failure of ``kind``."""
    return _ERROR_MESSAGES[kind].format(reason=reason, env=env)


class ChatSession:
    """Coordinate the input controller, inference client and transcript.

    Holds the single session state of a running widget: the transcript and
    the IDLE/SENDING phase. Only one request can be in flight at a time.
    """

    def __init__(
        self,
        settings: InferenceSettings,
        transcript: TranscriptStore,
        controller: InputController,
        client: InferenceClient | None = None,
        *,
        stream_chunk_size: int = 1,
        on_reply_progress: Callable[[str], None] | None = None,
        on_phase_change: Callable[[SessionPhase], None] | None = None,
    ) -> None:
        self.settings = settings
        self.transcript = transcript
        self.controller = controller
        self.state = StateManager()
        self.stream_chunk_size = max(1, stream_chunk_size)
        self.on_reply_progress = on_reply_progress
        self.on_phase_change = on_phase_change

        self.credential_configured = settings.has_credential
        if not self.credential_configured:
            self.client: InferenceClient | None = None
            LOGGER.warning(
                "session.credential.missing",
                extra={
                    "event": "session.credential.missing",
                    "api_key_env": settings.api_key_env,
                },
            )
        elif client is not None:
            self.client = client
        else:
            self.client = HuggingFaceInferenceClient(settings)

    @property
    def phase(self) -> SessionPhase:
        return self.state.phase

    @property
    def busy(self) -> bool:
        return self.state.busy

    def _set_phase(self, new_phase: SessionPhase) -> None:
        previous = self.state.phase
        self.state.transition_to(new_phase)
        self._log_transition(previous, new_phase)

    def _log_transition(self, previous: SessionPhase, new_phase: SessionPhase) -> None:
        LOGGER.info(
            "session.state.transition",
            extra={
                "event": "session.state.transition",
                "from_state": previous.value,
                "to_state": new_phase.value,
            },
        )
        if self.on_phase_change is not None:
            self.on_phase_change(new_phase)

    async def submit(self) -> SubmitOutcome:
        """Send the current draft and append the reply (or an error) to the transcript."""
        if not self.state.can_submit():
            LOGGER.debug(
                "session.submit.rejected",
                extra={"event": "session.submit.rejected", "reason": "busy"},
            )
            return SubmitOutcome.REJECTED_BUSY

        user_text = self.controller.get_draft()
        if not user_text:
            return SubmitOutcome.IGNORED_EMPTY

        if not self.credential_configured or self.client is None:
            self.transcript.append(
                MessageRole.ERROR,
                describe_failure(
                    FailureKind.CONFIGURATION, env=self.settings.api_key_env
                ),
            )
            return SubmitOutcome.MISSING_CREDENTIAL

        if not self.state.transition_if(SessionPhase.IDLE, SessionPhase.SENDING):
            return SubmitOutcome.REJECTED_BUSY
        self._log_transition(SessionPhase.IDLE, SessionPhase.SENDING)

        self.transcript.append(MessageRole.USER, user_text)
        self.controller.clear_draft()
        self.controller.set_busy(True)
        folder = StreamFolder(
            on_progress=self.on_reply_progress,
            chunk_size=self.stream_chunk_size,
        )
        try:
            async for fragment in self.client.stream_completion(user_text):
                folder.feed(fragment)
        except Exception as exc:  # noqa: BLE001 - every failure becomes a transcript entry.
            self._append_failure(exc)
            return SubmitOutcome.FAILED
        else:
            self.transcript.append(MessageRole.ASSISTANT, folder.result())
            LOGGER.info(
                "session.submit.complete",
                extra={
                    "event": "session.submit.complete",
                    "fragments": folder.fragment_count,
                    "reply_chars": len(folder.text),
                },
            )
            return SubmitOutcome.COMPLETED
        finally:
            self._set_phase(SessionPhase.IDLE)
            self.controller.set_busy(False)

    def _append_failure(self, exc: Exception) -> None:
        error = exc if isinstance(exc, LinguaChatError) else map_exception(exc)
        kind = getattr(error, "kind", FailureKind.TRANSPORT)
        reason = getattr(error, "reason", "") or failure_reason(error)
        LOGGER.warning(
            "session.submit.failed",
            extra={
                "event": "session.submit.failed",
                "kind": kind.value,
                "reason": reason,
            },
        )
        self.transcript.append(
            MessageRole.ERROR,
            describe_failure(kind, reason=reason, env=self.settings.api_key_env),
        )

    def clear_transcript(self) -> bool:
        """Drop all messages when idle. Returns False while a request is in flight."""
        if self.state.busy:
            return False
        self.transcript.clear()
        return True
