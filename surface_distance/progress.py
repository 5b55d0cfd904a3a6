"""Terminal progress line for long voxel walks (no external deps)."""

from __future__ import annotations

import sys
import time
from dataclasses import dataclass
from typing import Callable, TextIO


def _format_seconds(seconds: float) -> str:
    m, s = divmod(int(max(0.0, float(seconds))), 60)
    return f"{m:02d}:{s:02d}"


@dataclass(slots=True)
class ProgressPrinter:
    """Single-line progress printer.

    - Writes to stderr by default; plain lines only when not attached to a TTY.
    - Redraws in place with carriage returns, at most every ``min_interval_s``.
    """

    enabled: bool | None = None
    stream: TextIO = sys.stderr
    min_interval_s: float = 0.25

    _last_render: str = ""
    _last_update_t: float = 0.0
    _label: str = ""
    _stage_start_t: float = 0.0

    def __post_init__(self) -> None:
        if self.enabled is None:
            try:
                self.enabled = bool(self.stream.isatty())
            except (AttributeError, ValueError):
                self.enabled = False

    def log(self, message: str) -> None:
        """Print a normal line, clearing any progress line first."""
        if self.enabled and self._last_render:
            self.stream.write("\r" + (" " * len(self._last_render)) + "\r")
            self._last_render = ""
        print(message, file=self.stream)
        self.stream.flush()

    def update(self, *, label: str, current: int, total: int) -> None:
        if not self.enabled or total <= 0:
            return

        now = time.monotonic()
        if label != self._label:
            self._label = label
            self._stage_start_t = now
        elif current < total and (now - self._last_update_t) < float(self.min_interval_s):
            return

        current_i = max(0, min(int(current), int(total)))
        percent = int(round(100.0 * current_i / float(total)))
        elapsed = now - self._stage_start_t
        eta = _format_seconds(elapsed / current_i * (total - current_i)) if current_i else "--:--"

        text = f"{label}: {percent:3d}% ({current_i}/{total} voxels) ETA {eta}"
        pad = max(0, len(self._last_render) - len(text))
        self.stream.write("\r" + text + " " * pad)
        self.stream.flush()
        self._last_render = text
        self._last_update_t = now

    def callback(self, prefix: str = "") -> Callable[[str, int, int], None]:
        """Adapter for the ``progress(stage, current, total)`` hooks of the distance functions."""

        def _progress(stage: str, current: int, total: int) -> None:
            self.update(label=f"{prefix}{stage}", current=current, total=total)

        return _progress

    def finish(self) -> None:
        """End the current progress line with a newline."""
        if not self.enabled or not self._last_render:
            return
        self.stream.write("\n")
        self.stream.flush()
        self._last_render = ""
