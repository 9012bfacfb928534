"""Shell session — routes submitted lines to built-ins or a PTY-backed shell."""

from __future__ import annotations

import asyncio
import codecs
import enum
import logging
import os
import signal
import subprocess
import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Callable

from ptyshell.command.builtin import CLEAR_SCREEN, EXIT_COMMAND, create_registry
from ptyshell.command.registry import CommandRegistry
from ptyshell.pty.buffer import RollingBuffer
from ptyshell.pty.spawn import PtyStream, spawn
from ptyshell.shell.environment import DEFAULT_SHELL, Environment

logger = logging.getLogger(__name__)

READ_SIZE = 4096

Spawner = Callable[[str, str, Sequence[str]], tuple[PtyStream, subprocess.Popen]]


class SessionState(enum.Enum):
    """Lifecycle states for a shell session."""

    STARTING = "starting"
    RUNNING = "running"
    TERMINATING = "terminating"
    CLOSED = "closed"


class SessionMode(enum.StrEnum):
    """How submitted lines are routed."""

    INTERCEPT = "intercept"  # Built-in dispatcher
    PASSTHROUGH = "passthrough"  # Written to the child shell


class SessionStartupError(RuntimeError):
    """The PTY could not be opened or the shell could not be started."""


class StreamTerminationError(RuntimeError):
    """The PTY stream failed while the session was running."""


async def _wait_for_exit(proc: subprocess.Popen, timeout: float) -> int | None:
    """Poll *proc* until it exits.  Returns the exit code or None on timeout."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while True:
        ret = proc.poll()
        if ret is not None:
            return ret
        if loop.time() >= deadline:
            return None
        await asyncio.sleep(0.05)


@dataclass
class ShellSession:
    """One interactive terminal session.

    Owns an ``Environment``, the built-in dispatcher bound to it, a PTY
    stream and the child shell's process handle.  Two activities run while
    the session is ``RUNNING``:

    - the output pump, a background task that reads the PTY and forwards
      decoded text to ``on_output`` until end-of-stream or a read error;
    - the intake path, ``submit()``, which handles one line at a time.

    The pump only reads the stream and intake only writes it.  Both emit
    on the event loop thread, so output chunks never interleave.
    """

    environment: Environment
    command: str = DEFAULT_SHELL
    mode: SessionMode = SessionMode.INTERCEPT
    banner: str = ""
    exit_grace: float = 1.0
    spawner: Spawner = spawn
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    transcript: RollingBuffer = field(default_factory=RollingBuffer)
    on_output: Callable[[str], None] | None = None

    # Internal state
    registry: CommandRegistry = field(init=False)
    _stream: PtyStream | None = field(default=None, init=False)
    _proc: subprocess.Popen | None = field(default=None, init=False)
    _reader_task: asyncio.Task | None = field(default=None, init=False)
    _state: SessionState = field(default=SessionState.STARTING, init=False)
    _pumping: bool = field(default=False, init=False)
    _on_pump_end: Callable[[ShellSession, str, int | None], None] | None = field(
        default=None, init=False
    )

    def __post_init__(self) -> None:
        self.registry = create_registry(self.environment)

    def set_on_pump_end(
        self, callback: Callable[[ShellSession, str, int | None], None]
    ) -> None:
        """Set a callback for when the output pump stops on its own.

        The callback receives (session, reason, exit_code).  It is NOT
        called when the pump stops because of ``close()``.
        """
        self._on_pump_end = callback

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Spawn the shell on a new PTY and start the output pump.

        Raises:
            SessionStartupError: The PTY or the shell could not be started,
                or the shell command line could not be parsed.
                The session is ``CLOSED`` afterwards; there is no retry.
        """
        if self._state is not SessionState.STARTING:
            raise RuntimeError(f"Session {self.id} already started")

        try:
            self._stream, self._proc = self.spawner(
                self.command, self.environment.cwd, self.environment.spawn_env()
            )
        except (OSError, ValueError) as e:
            self._state = SessionState.CLOSED
            logger.error("Session %s failed to start %s: %s", self.id, self.command, e)
            raise SessionStartupError(f"cannot start {self.command}: {e}") from e

        self._state = SessionState.RUNNING
        self._pumping = True
        self._reader_task = asyncio.create_task(self._read_loop())

        logger.info(
            "Session %s started: pid=%d cmd=%s mode=%s",
            self.id,
            self._proc.pid,
            self.command,
            self.mode.value,
        )

        if self.banner:
            self._emit(self.banner)
        if self.mode is SessionMode.INTERCEPT:
            self._emit(self.environment.prompt())

    async def _read_loop(self) -> None:
        """Continuously read output from the PTY stream."""
        assert self._stream is not None
        stream = self._stream
        loop = asyncio.get_running_loop()
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        reason = "end of stream"
        try:
            while self._state is SessionState.RUNNING:
                try:
                    data = await loop.run_in_executor(None, stream.read, READ_SIZE)
                except OSError as e:
                    reason = f"read error: {e}"
                    break

                if not data:
                    break

                text = decoder.decode(data)
                if text and self._state is SessionState.RUNNING:
                    self._emit(text)
        finally:
            self._pumping = False
            # Only report if the pump stopped on its own
            if self._state is SessionState.RUNNING:
                exit_code = self._proc.poll() if self._proc else None
                logger.info("Session %s output ended (%s, code=%s)", self.id, reason, exit_code)
                if self._on_pump_end:
                    try:
                        self._on_pump_end(self, reason, exit_code)
                    except Exception:
                        logger.exception("Error in on_pump_end callback for session %s", self.id)

    async def close(self) -> None:
        """End the session and release the PTY and process exactly once.

        Safe to call repeatedly and when ``start()`` never succeeded.  The
        child gets ``exit_grace`` seconds to leave on its own before its
        process group is killed; the event loop keeps running meanwhile.
        """
        if self._state in (SessionState.TERMINATING, SessionState.CLOSED):
            return

        # Pump loop exits at its next iteration once it sees this.
        self._state = SessionState.TERMINATING
        stream, self._stream = self._stream, None
        proc, self._proc = self._proc, None

        if stream is not None and not stream.closed:
            try:
                stream.write(f"{EXIT_COMMAND}\n".encode())
            except OSError as e:
                logger.debug("Session %s exit request failed: %s", self.id, e)

        if proc is not None:
            if await _wait_for_exit(proc, self.exit_grace) is None:
                self._kill(proc)
                # Reap to avoid zombies
                if await _wait_for_exit(proc, 2.0) is None:
                    logger.warning("Session %s child %d did not exit", self.id, proc.pid)

        if stream is not None:
            stream.close()

        if self._reader_task is not None and not self._reader_task.done():
            try:
                await asyncio.wait_for(self._reader_task, timeout=1.0)
            except asyncio.TimeoutError:
                logger.debug("Session %s pump did not stop in time", self.id)
            except Exception as e:
                logger.debug("Session %s pump ended with error: %s", self.id, e)
        self._state = SessionState.CLOSED
        logger.info("Session %s closed", self.id)

    def _kill(self, proc: subprocess.Popen) -> None:
        try:
            os.killpg(os.getpgid(proc.pid), signal.SIGKILL)
            logger.info("Killed session %s (pid=%d)", self.id, proc.pid)
        except ProcessLookupError:
            logger.debug("Process group already gone: %d", proc.pid)
        except OSError as e:
            logger.warning("Error killing session %s: %s", self.id, e)

    def __del__(self) -> None:
        """Ensure cleanup on garbage collection."""
        if self._state not in (SessionState.RUNNING, SessionState.STARTING):
            return
        self._state = SessionState.CLOSED
        if self._proc is not None and self._proc.poll() is None:
            self._kill(self._proc)
        if self._stream is not None:
            self._stream.close()

    # ------------------------------------------------------------------
    # Intake
    # ------------------------------------------------------------------

    async def submit(self, line: str) -> None:
        """Handle one submitted line.

        ``exit`` ends the session.  In ``INTERCEPT`` mode the line runs
        through the built-in dispatcher and the output is followed by a
        fresh prompt; in ``PASSTHROUGH`` mode it is written to the shell.

        Raises:
            RuntimeError: The session is not running.
            StreamTerminationError: Passthrough write failed.  The session
                stays running and ``INTERCEPT`` mode still works.
        """
        if self._state is not SessionState.RUNNING:
            raise RuntimeError(f"Session {self.id} is not running")

        line = line.strip()
        if line == EXIT_COMMAND:
            await self.close()
            return

        if self.mode is SessionMode.INTERCEPT:
            self.run_builtin(line)
        else:
            self.write_line(line)

    def run_builtin(self, line: str) -> str:
        """Dispatch *line* to the built-ins and emit output plus prompt."""
        output = self.registry.execute(line)
        self.environment.sync_pwd()
        if output:
            self._emit(output)
        self._emit(self.environment.prompt())
        return output

    def write_line(self, line: str) -> None:
        """Write *line* and a newline to the shell's input."""
        if self._stream is None or self._stream.closed:
            raise StreamTerminationError(f"Session {self.id} has no PTY stream")
        try:
            self._stream.write(f"{line}\n".encode())
        except OSError as e:
            logger.warning("Session %s write failed: %s", self.id, e)
            raise StreamTerminationError(f"write to shell failed: {e}") from e

    def set_mode(self, mode: SessionMode) -> None:
        """Switch routing; entering ``INTERCEPT`` prints a prompt."""
        if mode is self.mode:
            return
        self.mode = mode
        logger.info("Session %s mode: %s", self.id, mode.value)
        if mode is SessionMode.INTERCEPT and self._state is SessionState.RUNNING:
            self._emit(self.environment.prompt())

    def toggle_mode(self) -> SessionMode:
        if self.mode is SessionMode.INTERCEPT:
            self.set_mode(SessionMode.PASSTHROUGH)
        else:
            self.set_mode(SessionMode.INTERCEPT)
        return self.mode

    def resize(self, cols: int, rows: int) -> None:
        """Propagate a terminal size change to the child (best effort)."""
        if self._stream is None or self._stream.closed or cols <= 0 or rows <= 0:
            return
        try:
            self._stream.set_size(cols, rows)
        except OSError as e:
            logger.debug("Session %s resize failed: %s", self.id, e)

    def _emit(self, text: str) -> None:
        if CLEAR_SCREEN in text:
            self.transcript.clear()
            self.transcript.append_text(text.rsplit(CLEAR_SCREEN, 1)[1])
        else:
            self.transcript.append_text(text)
        if self.on_output is not None:
            self.on_output(text)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def alive(self) -> bool:
        return self._state is SessionState.RUNNING

    @property
    def pumping(self) -> bool:
        """True while the output pump is still reading the PTY."""
        return self._pumping

    @property
    def pid(self) -> int | None:
        return self._proc.pid if self._proc is not None else None
