"""Main Textual application for the ptyshell TUI."""

from __future__ import annotations

import logging
import os

from rich.markup import escape
from rich.text import Text
from textual import events, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header, Input, RichLog, Static

from ptyshell.command.builtin import CLEAR_SCREEN, EXIT_COMMAND
from ptyshell.pty.session import (
    SessionMode,
    SessionStartupError,
    ShellSession,
    StreamTerminationError,
)
from ptyshell.session.wire import EventType, Wire, WireEvent
from ptyshell.tui.bridge import announce_start, attach, toggle_mode

logger = logging.getLogger(__name__)

ABOUT_TEXT = (
    "ptyshell: a lightweight terminal with built-in commands.\n\n"
    "Built-ins run in-process with no external binaries; "
    "passthrough mode talks to a real shell over a PTY."
)


class TUILogHandler(logging.Handler):
    """Logging handler that captures the last log message for the status bar.

    Instead of writing to stderr (which corrupts the Textual display),
    this handler stores the most recent log record and triggers a
    status bar refresh on the app.
    """

    def __init__(self, app: ShellApp) -> None:
        super().__init__()
        self._app = app
        self.last_message: str = ""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.last_message = self.format(record)
            self._app.call_later(self._app._update_status)
        except Exception:
            self.handleError(record)


class ShellApp(App):
    """Scrolling console plus an input line, driven by one ShellSession."""

    TITLE = "ptyshell"
    CSS = """
    #console {
        height: 1fr;
        border: solid $primary;
        padding: 0 1;
    }

    #partial-line {
        height: auto;
        padding: 0 1;
    }

    #command-input {
        dock: bottom;
        margin-bottom: 2;
    }

    #status-bar {
        dock: bottom;
        height: 1;
        margin-bottom: 1;
        background: $surface;
        color: $text-muted;
        padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("ctrl+t", "toggle_mode", "Mode"),
        Binding("ctrl+l", "clear_console", "Clear"),
        Binding("f1", "help", "Help"),
        Binding("f2", "about", "About"),
        Binding("ctrl+s", "save_transcript", "Save"),
        Binding("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, session: ShellSession, wire: Wire) -> None:
        super().__init__()
        self.session = session
        self.wire = wire
        self._partial = ""
        self._log_handler: TUILogHandler | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        yield RichLog(id="console", wrap=True, markup=False, highlight=False)
        yield Static(id="partial-line")
        yield Input(id="command-input", placeholder="Type a command, 'help' or 'exit'")
        yield Static(id="status-bar")
        yield Footer()

    def on_mount(self) -> None:
        self.title = f"ptyshell - {self.session.environment.session_name}"
        self._install_log_handler()
        attach(self.session, self.wire)
        self._listen_wire()
        self._start_session()
        self.query_one("#command-input", Input).focus()

    def _install_log_handler(self) -> None:
        root = logging.getLogger()
        for handler in root.handlers[:]:
            root.removeHandler(handler)
        self._log_handler = TUILogHandler(self)
        self._log_handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        root.addHandler(self._log_handler)

    # --- Status bar ---

    def _update_status(self) -> None:
        try:
            status = self.query_one("#status-bar", Static)
        except Exception:
            return
        pid = self.session.pid
        parts = [
            f"Mode: {self.session.mode.value}",
            f"State: {self.session.state.value}",
            f"PID: {pid if pid is not None else '-'}",
            f"Lines: {self.session.transcript.line_count}",
        ]
        if self._log_handler and self._log_handler.last_message:
            last_log = self._log_handler.last_message
            if len(last_log) > 80:
                last_log = last_log[:77] + "..."
            parts.append(f"[dim]{escape(last_log)}[/dim]")
        status.update(" | ".join(parts))

    # --- Console helpers ---

    def _console(self) -> RichLog:
        return self.query_one("#console", RichLog)

    def _write_output(self, text: str) -> None:
        """Append session output, honouring the clear-screen sequence."""
        if CLEAR_SCREEN in text:
            self._console().clear()
            self._partial = ""
            text = text.rsplit(CLEAR_SCREEN, 1)[1]
        self._feed(text)

    def _feed(self, text: str) -> None:
        """Write complete lines to the log; keep the open line separately."""
        console = self._console()
        lines = (self._partial + text).replace("\r", "").split("\n")
        for line in lines[:-1]:
            console.write(Text.from_ansi(line))
        self._partial = lines[-1]
        self.query_one("#partial-line", Static).update(Text.from_ansi(self._partial))

    def _notice(self, markup: str) -> None:
        self._console().write(Text.from_markup(markup))

    # --- Session ---

    @work(exclusive=False)
    async def _start_session(self) -> None:
        try:
            await self.session.start()
        except SessionStartupError as e:
            logger.error("Session startup failed: %s", e)
            self.wire.send_error(str(e))
            self.query_one("#command-input", Input).disabled = True
        else:
            announce_start(self.session, self.wire)
        self._update_status()
        self.session.resize(*self._console_size())

    def _console_size(self) -> tuple[int, int]:
        size = self._console().size
        return size.width, size.height

    async def on_input_submitted(self, event: Input.Submitted) -> None:
        line = event.value.strip()
        event.input.value = ""
        if not line:
            return

        if self.session.mode is SessionMode.INTERCEPT or line == EXIT_COMMAND:
            # The child's tty echoes passthrough input itself.
            self._feed(line + "\n")

        try:
            await self.session.submit(line)
        except StreamTerminationError as e:
            self.wire.send_error(f"{e} (ctrl+t switches to built-ins)")
        except RuntimeError as e:
            self.wire.send_error(str(e))

        if not self.session.alive:
            self.wire.close()
            self.exit()
        self._update_status()

    def on_resize(self, event: events.Resize) -> None:
        if self.session.alive:
            self.session.resize(*self._console_size())

    # --- Wire event loop ---

    @work(exclusive=True)
    async def _listen_wire(self) -> None:
        queue = self.wire.subscribe()
        try:
            while True:
                event = await queue.get()
                if event is None:
                    break
                self._handle_event(event)
        finally:
            self.wire.unsubscribe(queue)

    def _handle_event(self, event: WireEvent) -> None:
        handlers = {
            EventType.OUTPUT: self._on_output,
            EventType.MODE: self._on_mode,
            EventType.PUMP_END: self._on_pump_end,
            EventType.ERROR: self._on_error,
            EventType.STATUS: self._on_status,
            EventType.SESSION_END: self._on_session_end,
        }
        handler = handlers.get(event.type)
        if handler:
            handler(event.data)

    def _on_output(self, data: dict) -> None:
        self._write_output(data.get("text", ""))

    def _on_mode(self, data: dict) -> None:
        mode = data.get("mode", "?")
        self.notify(f"Mode: {mode}", timeout=2)
        self._update_status()

    def _on_pump_end(self, data: dict) -> None:
        exit_code = data.get("exit_code")
        code_str = str(exit_code) if exit_code is not None else "?"
        reason = data.get("reason", "")
        self._notice(
            f"[bold yellow]shell output ended: {escape(reason)} (code={code_str})[/bold yellow]"
        )
        self._update_status()

    def _on_error(self, data: dict) -> None:
        error = data.get("error", "Unknown error")
        self._notice(f"[bold red]ERROR: {escape(error)}[/bold red]")

    def _on_status(self, data: dict) -> None:
        message = data.get("message", "")
        if message:
            self._notice(f"[dim]{escape(message)}[/dim]")
        self._update_status()

    def _on_session_end(self, data: dict) -> None:
        self._notice("[bold green]--- Session closed ---[/bold green]")

    # --- Actions (menu) ---

    def action_toggle_mode(self) -> None:
        toggle_mode(self.session, self.wire)

    def action_clear_console(self) -> None:
        self._console().clear()
        self._partial = ""
        self._feed("")
        if self.session.alive and self.session.mode is SessionMode.INTERCEPT:
            self._feed(self.session.environment.prompt())

    def action_help(self) -> None:
        if not self.session.alive:
            return
        self._feed("help\n")
        self.session.run_builtin("help")

    def action_about(self) -> None:
        self.notify(ABOUT_TEXT, title="About ptyshell", timeout=10)

    def action_save_transcript(self) -> None:
        """Write the scrollback to a log file in the working directory."""
        path = os.path.join(self.session.environment.cwd, f"ptyshell-{self.session.id}.log")
        try:
            with open(path, "w", encoding="utf-8") as f:
                f.write(self.session.transcript.read_all())
        except OSError as e:
            logger.warning("Cannot save transcript to %s: %s", path, e)
            self.notify(f"Save failed: {e}", severity="error")
            return
        self.notify(f"Transcript saved to {path}", timeout=4)

    async def action_quit(self) -> None:
        await self.session.close()
        self.wire.close()
        self.exit()

    async def on_unmount(self) -> None:
        await self.session.close()
        if self._log_handler is not None:
            logging.getLogger().removeHandler(self._log_handler)
