"""Wire protocol — decouples the shell session from presentation.

Events flow one way, from the session to the UI.  The UI subscribes to the
wire and renders events.  This lets the Textual TUI and the plain line
console share the same session code.
"""

from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass, field
from typing import Any


class EventType(enum.Enum):
    OUTPUT = "output"
    MODE = "mode"
    STATUS = "status"
    ERROR = "error"
    PUMP_END = "pump_end"
    SESSION_END = "session_end"


@dataclass
class WireEvent:
    """An event on the wire."""

    type: EventType
    data: dict[str, Any] = field(default_factory=dict)


class Wire:
    """Async message bus: session -> UI subscribers.

    Single-producer, multi-consumer broadcast.  ``send()`` must be called
    from the event loop thread; ordering per subscriber is preserved.
    """

    def __init__(self) -> None:
        self._subscribers: list[asyncio.Queue[WireEvent | None]] = []
        self._closed: bool = False

    def send(self, event: WireEvent) -> None:
        """Send an event to all subscribers.

        Silently drops events after ``close()`` has been called.
        """
        if self._closed:
            return
        for q in self._subscribers:
            q.put_nowait(event)

    def send_output(self, text: str) -> None:
        self.send(WireEvent(type=EventType.OUTPUT, data={"text": text}))

    def send_status(self, message: str) -> None:
        self.send(WireEvent(type=EventType.STATUS, data={"message": message}))

    def send_error(self, error: str) -> None:
        self.send(WireEvent(type=EventType.ERROR, data={"error": error}))

    def send_mode(self, mode: str) -> None:
        self.send(WireEvent(type=EventType.MODE, data={"mode": mode}))

    def send_pump_end(
        self,
        session_id: str,
        reason: str,
        exit_code: int | None,
    ) -> None:
        """Notify subscribers that the shell's output stream ended."""
        self.send(
            WireEvent(
                type=EventType.PUMP_END,
                data={
                    "session_id": session_id,
                    "reason": reason,
                    "exit_code": exit_code,
                },
            )
        )

    def subscribe(self) -> asyncio.Queue[WireEvent | None]:
        """Subscribe to events. Returns a queue to read from."""
        q: asyncio.Queue[WireEvent | None] = asyncio.Queue()
        self._subscribers.append(q)
        return q

    def unsubscribe(self, q: asyncio.Queue) -> None:
        """Unsubscribe from events."""
        if q in self._subscribers:
            self._subscribers.remove(q)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Signal all subscribers that the wire is closing."""
        if self._closed:
            return
        self.send(WireEvent(type=EventType.SESSION_END))
        self._closed = True
        for q in self._subscribers:
            q.put_nowait(None)
