"""Session phase state machine with check-and-set transitions."""

from __future__ import annotations

from enum import Enum


class SessionPhase(str, Enum):
    """Lifecycle of a single submission."""

    IDLE = "IDLE"
    SENDING = "SENDING"


class StateManager:
    """Track the session phase.

    All transitions happen on the event loop thread with no await between
    the check and the set, so ``transition_if`` is atomic.
    """

    def __init__(self) -> None:
        self._phase = SessionPhase.IDLE

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    @property
    def busy(self) -> bool:
        """True iff a request is in flight."""
        return self._phase == SessionPhase.SENDING

    def transition_to(self, new_phase: SessionPhase) -> SessionPhase:
        """Transition unconditionally and return the new phase."""
        self._phase = new_phase
        return self._phase

    def transition_if(self, expected: SessionPhase, new_phase: SessionPhase) -> bool:
        """Transition only when the current phase matches ``expected``."""
        if self._phase != expected:
            return False
        self._phase = new_phase
        return True

    def can_submit(self) -> bool:
        """Return True when a new submission may start."""
        return self._phase == SessionPhase.IDLE
