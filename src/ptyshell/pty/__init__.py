"""PTY-backed shell sessions.

A session owns a pseudo-terminal with a real shell on the other side, an
output pump that forwards what the shell prints, and the built-in
dispatcher that handles lines locally in intercept mode.
"""

from ptyshell.pty.buffer import RollingBuffer
from ptyshell.pty.session import (
    SessionMode,
    SessionStartupError,
    SessionState,
    ShellSession,
    StreamTerminationError,
)
from ptyshell.pty.spawn import PtyStream, spawn

__all__ = [
    "PtyStream",
    "RollingBuffer",
    "SessionMode",
    "SessionStartupError",
    "SessionState",
    "ShellSession",
    "StreamTerminationError",
    "spawn",
]
