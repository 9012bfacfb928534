"""Bridge between ShellSession callbacks and the Wire event bus.

The session knows nothing about the UI; it reports through plain
callbacks.  The factories here turn those callbacks into WireEvents so
any presentation layer can consume them through a subscription:

- OUTPUT fires for every text chunk the session emits (pump or built-in)
- PUMP_END fires when the shell's output stream ends on its own
- MODE fires when the routing mode changes
- STATUS carries one-line notices such as the started shell's pid
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from ptyshell.session.wire import Wire

if TYPE_CHECKING:
    from ptyshell.pty.session import ShellSession


def make_on_output(wire: Wire) -> Callable[[str], None]:
    """Create an on_output callback that emits OUTPUT events."""

    def on_output(text: str) -> None:
        wire.send_output(text)

    return on_output


def make_on_pump_end(wire: Wire) -> Callable[[ShellSession, str, int | None], None]:
    """Create an on_pump_end callback that emits PUMP_END events."""

    def on_pump_end(session: ShellSession, reason: str, exit_code: int | None) -> None:
        wire.send_pump_end(session.id, reason, exit_code)

    return on_pump_end


def attach(session: ShellSession, wire: Wire) -> None:
    """Route all of *session*'s callbacks onto *wire*."""
    session.on_output = make_on_output(wire)
    session.set_on_pump_end(make_on_pump_end(wire))


def toggle_mode(session: ShellSession, wire: Wire) -> None:
    session.toggle_mode()
    wire.send_mode(session.mode.value)


def announce_start(session: ShellSession, wire: Wire) -> None:
    """Report the freshly started shell on *wire*."""
    wire.send_status(f"{session.command} started (pid {session.pid}, {session.mode.value} mode)")
