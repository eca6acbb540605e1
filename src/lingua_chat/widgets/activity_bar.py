"""Busy indicator shown while a reply is being generated."""

from __future__ import annotations

from typing import Any

from textual.app import ComposeResult
from textual.timer import Timer
from textual.widgets import Label, Static

_SPINNER_FRAMES: tuple[str, ...] = ("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏")


class ActivityBar(Static):
    """Animated loading indicator plus static shortcut hints."""

    DEFAULT_CSS = """
    ActivityBar {
        layout: horizontal;
        height: 1;
        padding: 0 1;
    }
    ActivityBar #activity_left {
        width: 1fr;
    }
    ActivityBar #activity_right {
        width: auto;
        text-align: right;
        color: $text-muted;
    }
    """

    def __init__(self, shortcut_hints: str = "", **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._shortcut_hints = shortcut_hints
        self._timer: Timer | None = None
        self._frame_index = 0
        self._label = "Translating..."
        self._left: Label | None = None
        self.busy = False

    def compose(self) -> ComposeResult:
        yield Label("", id="activity_left")
        yield Label(self._shortcut_hints, id="activity_right", markup=False)

    def on_mount(self) -> None:
        self._left = self.query_one("#activity_left", Label)
        if self.busy:
            self._render_frame()

    def set_busy(self, busy: bool, label: str = "Translating...") -> None:
        """Start or stop the spinner."""
        if busy == self.busy:
            return
        self.busy = busy
        if busy:
            self._label = label
            self._frame_index = 0
            self._render_frame()
            self._timer = self.set_interval(0.1, self._advance_frame)
            return
        if self._timer is not None:
            self._timer.stop()
            self._timer = None
        if self._left is not None:
            self._left.update("")

    def _advance_frame(self) -> None:
        if not self.busy:
            return
        self._frame_index = (self._frame_index + 1) % len(_SPINNER_FRAMES)
        self._render_frame()

    def _render_frame(self) -> None:
        if self._left is None:
            return
        self._left.update(f"{_SPINNER_FRAMES[self._frame_index]} {self._label}")
