"""Spawning primitive — start a command attached to a new pseudo-terminal."""

from __future__ import annotations

import fcntl
import logging
import os
import pty
import shlex
import struct
import subprocess
import termios
from collections.abc import Sequence

logger = logging.getLogger(__name__)


class PtyStream:
    """Duplex byte channel over a PTY master file descriptor.

    Reads and writes may come from different threads; ``close()`` is
    idempotent and makes any later read or write raise ``OSError``.
    """

    def __init__(self, fd: int) -> None:
        self._fd = fd
        self._closed = False

    def fileno(self) -> int:
        return self._fd

    @property
    def closed(self) -> bool:
        return self._closed

    def read(self, size: int = 4096) -> bytes:
        """Block until output is available; ``b""`` means end of stream."""
        if self._closed:
            raise OSError("read from closed PTY stream")
        return os.read(self._fd, size)

    def write(self, data: bytes) -> None:
        if self._closed:
            raise OSError("write to closed PTY stream")
        view = memoryview(data)
        while view:
            written = os.write(self._fd, view)
            view = view[written:]

    def set_size(self, cols: int, rows: int) -> None:
        """Set the terminal window size seen by the child."""
        fcntl.ioctl(self._fd, termios.TIOCSWINSZ, struct.pack("HHHH", rows, cols, 0, 0))

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            os.close(self._fd)
        except OSError as e:
            logger.debug("Error closing PTY fd %d: %s", self._fd, e)


def spawn(
    command: str,
    working_directory: str,
    environment: Sequence[str],
) -> tuple[PtyStream, subprocess.Popen]:
    """Run *command* on the slave side of a new PTY.

    *environment* is a sequence of ``KEY=VALUE`` strings and replaces the
    child's environment entirely.  The child gets its own session (and
    process group) so teardown can signal the whole tree.

    Raises:
        OSError: The PTY cannot be allocated or the command cannot run.
    """
    argv = shlex.split(command)
    if not argv:
        raise FileNotFoundError(f"empty shell command: {command!r}")

    env = dict(entry.split("=", 1) for entry in environment if "=" in entry)

    master_fd, slave_fd = pty.openpty()
    try:
        # Popen rather than os.fork: forking inside a running event loop
        # can deadlock on some platforms.
        proc = subprocess.Popen(
            argv,
            stdin=slave_fd,
            stdout=slave_fd,
            stderr=slave_fd,
            start_new_session=True,
            env=env,
            cwd=working_directory,
        )
    except OSError:
        os.close(master_fd)
        raise
    finally:
        # Parent always closes slave fd
        os.close(slave_fd)

    logger.debug("Spawned %s pid=%d in %s", argv, proc.pid, working_directory)
    return PtyStream(master_fd), proc
