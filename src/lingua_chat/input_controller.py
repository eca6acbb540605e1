"""Draft/busy contract shared by the Textual input box and headless callers."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

PLACEHOLDER_MARKER = "["


def placeholder_cursor_offset(text: str) -> int | None:
    """Return the offset just after the first ``[``, or None when there is none."""
    index = text.find(PLACEHOLDER_MARKER)
    if index == -1:
        return None
    return index + len(PLACEHOLDER_MARKER)


def offset_to_location(text: str, offset: int) -> tuple[int, int]:
    """Convert a flat character offset into a ``(row, column)`` pair."""
    offset = max(0, min(offset, len(text)))
    row = text.count("\n", 0, offset)
    line_start = text.rfind("\n", 0, offset) + 1
    return row, offset - line_start


@runtime_checkable
class InputController(Protocol):
    """What the chat session needs from whatever owns the draft text."""

    def get_draft(self) -> str: ...

    def set_draft(self, text: str, cursor_hint: bool = True) -> None: ...

    def clear_draft(self) -> None: ...

    def set_busy(self, busy: bool) -> None: ...


class DraftBuffer:
    """In-memory input controller used when no widget is attached."""

    def __init__(self, text: str = "") -> None:
        self.text = text
        self.cursor = len(text)
        self.busy = False
        self.focused = True

    def get_draft(self) -> str:
        """Return the draft trimmed of surrounding whitespace."""
        return self.text.strip()

    def set_draft(self, text: str, cursor_hint: bool = True) -> None:
        """Replace the draft and place the cursor after the placeholder marker."""
        self.text = text
        offset = placeholder_cursor_offset(text) if cursor_hint else None
        self.cursor = len(text) if offset is None else offset
        self.focused = True

    def clear_draft(self) -> None:
        self.text = ""
        self.cursor = 0

    def set_busy(self, busy: bool) -> None:
        """Disable input while busy; give focus back when released."""
        self.busy = busy
        self.focused = not busy
