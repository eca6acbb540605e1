"""Fold streamed fragments into reply text with batched progress updates."""

from __future__ import annotations

from collections.abc import Callable
import time

from .inference import fold_fragments

EMPTY_RESPONSE_PLACEHOLDER = "No response generated."

ProgressCallback = Callable[[str], None]


class StreamFolder:
    """Accumulate fragments in arrival order.

    ``on_progress`` receives the full text folded so far. It is called at
    most once per ``chunk_size`` fragments, and no more often than
    ``min_update_interval_seconds`` unless forced. This keeps the live
    preview from re-rendering on every token.
    """

    def __init__(
        self,
        on_progress: ProgressCallback | None = None,
        chunk_size: int = 1,
        min_update_interval_seconds: float = 0.05,
    ) -> None:
        self._on_progress = on_progress
        self._chunk_size = max(1, chunk_size)
        self._min_update_interval_seconds = max(0.0, min_update_interval_seconds)
        self._parts: list[str] = []
        self._pending = 0
        self._last_update_ts = 0.0
        self.fragment_count = 0

    @property
    def text(self) -> str:
        """Return everything folded so far."""
        return fold_fragments(self._parts)

    def _notify(self, *, force: bool = False) -> None:
        if self._on_progress is None:
            return
        now = time.monotonic()
        if (
            not force
            and self._min_update_interval_seconds > 0
            and now - self._last_update_ts < self._min_update_interval_seconds
        ):
            return
        self._last_update_ts = now
        self._pending = 0
        self._on_progress(self.text)

    def feed(self, fragment: str) -> None:
        """Fold one fragment."""
        if not fragment:
            return
        self._parts.append(fragment)
        self.fragment_count += 1
        self._pending += 1
        if self._pending >= self._chunk_size:
            self._notify()

    def flush(self) -> None:
        """Push any fragments not yet reported to the progress callback."""
        if self._pending:
            self._notify(force=True)

    def result(self) -> str:
        """Return the final reply text, or the placeholder if nothing arrived."""
        self.flush()
        return self.text or EMPTY_RESPONSE_PLACEHOLDER
