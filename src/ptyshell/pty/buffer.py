"""Rolling scrollback buffer for session output."""

from __future__ import annotations

from collections import deque


class RollingBuffer:
    """Bounded transcript of everything a session emitted.

    Output arrives in arbitrary chunks, so the last line stays *open* until
    a newline closes it: ``append_text("ab")`` then ``append_text("c\\n")``
    yields the single line ``"abc"``.  Carriage returns are dropped.

    At most ``max_lines`` lines are kept; older ones fall off the front.
    Only touched from the event loop thread.
    """

    def __init__(self, max_lines: int = 50_000) -> None:
        self._lines: deque[str] = deque(maxlen=max_lines)
        self._open = False  # True while the last line has no newline yet

    def append_text(self, text: str) -> None:
        """Append a chunk of output, continuing the open line if any."""
        if not text:
            return
        parts = text.replace("\r", "").split("\n")
        for i, part in enumerate(parts):
            if i == 0 and self._open and self._lines:
                self._lines[-1] += part
            elif i == len(parts) - 1 and part == "":
                # Chunk ended with a newline; no line is left open.
                continue
            else:
                self._lines.append(part)
        self._open = parts[-1] != ""

    def read_all(self) -> str:
        """All buffered content; a closed last line keeps its newline."""
        text = "\n".join(self._lines)
        if self._lines and not self._open:
            text += "\n"
        return text

    @property
    def line_count(self) -> int:
        return len(self._lines)

    def clear(self) -> None:
        self._lines.clear()
        self._open = False
