"""CLI entry point for ptyshell."""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from typing import TYPE_CHECKING

import typer
from pydantic import ValidationError

from ptyshell.config import SessionConfig, ShellConfig

if TYPE_CHECKING:
    from ptyshell.pty.session import ShellSession
    from ptyshell.shell.environment import Environment

app = typer.Typer(
    name="ptyshell",
    help="Interactive terminal with built-in commands and a PTY-backed shell.",
    no_args_is_help=True,
)

BANNER = (
    "╔════════════════════════════════════╗\n"
    "║        Welcome to ptyshell         ║\n"
    "╚════════════════════════════════════╝\n"
    "Type 'help' for available commands\n\n"
)


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _load_config(config_file: str | None, mode: str | None) -> ShellConfig:
    try:
        config = ShellConfig.load(config_file)
        if mode:
            config.session = SessionConfig.model_validate(
                {**config.session.model_dump(), "mode": mode.lower()}
            )
    except (ValidationError, ValueError) as e:
        typer.echo(f"Error: invalid configuration: {e}", err=True)
        raise typer.Exit(2)
    return config


def build_environment(config: ShellConfig) -> Environment:
    """Seed an environment from *config*, creating the home directory."""
    from ptyshell.shell.environment import Environment

    settings = config.session
    home = settings.home_path()
    os.makedirs(home, exist_ok=True)
    return Environment(
        home=home,
        user=settings.user,
        shell=settings.shell,
        term=settings.term,
        path=settings.path,
        session_name=settings.name,
    )


def build_session(config: ShellConfig) -> ShellSession:
    """Create an unstarted session from *config*."""
    from ptyshell.pty.buffer import RollingBuffer
    from ptyshell.pty.session import SessionMode, ShellSession

    settings = config.session
    return ShellSession(
        environment=build_environment(config),
        command=settings.shell,
        mode=SessionMode(settings.mode),
        banner=BANNER if settings.banner else "",
        exit_grace=settings.exit_grace,
        transcript=RollingBuffer(max_lines=settings.scrollback),
    )


@app.command()
def tui(
    mode: str | None = typer.Option(
        None, "--mode", "-m", help="Initial mode: intercept or passthrough."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug logging."
    ),
    config_file: str | None = typer.Option(
        None, "--config", "-c", help="Config file path."
    ),
) -> None:
    """Open the interactive terminal UI."""
    # No setup_logging() here: a stderr StreamHandler corrupts the
    # Textual display.  The app installs its own handler on mount.
    logging.getLogger().setLevel(logging.DEBUG if verbose else logging.INFO)
    for h in logging.getLogger().handlers[:]:
        logging.getLogger().removeHandler(h)

    config = _load_config(config_file, mode)

    from ptyshell.session.wire import Wire
    from ptyshell.tui.app import ShellApp

    wire = Wire()
    session = build_session(config)
    ShellApp(session=session, wire=wire).run()


@app.command()
def run(
    mode: str | None = typer.Option(
        None, "--mode", "-m", help="Initial mode: intercept or passthrough."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug logging."
    ),
    config_file: str | None = typer.Option(
        None, "--config", "-c", help="Config file path."
    ),
) -> None:
    """Run a plain line-mode console on stdin/stdout."""
    setup_logging(verbose)
    config = _load_config(config_file, mode)

    from ptyshell.pty.session import SessionStartupError

    try:
        asyncio.run(_run_console(config))
    except SessionStartupError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


async def _run_console(config: ShellConfig) -> None:
    """Pump session output to stdout and stdin lines into the session."""
    from ptyshell.pty.session import StreamTerminationError
    from ptyshell.session.wire import EventType, Wire
    from ptyshell.tui.bridge import attach, toggle_mode

    wire = Wire()
    session = build_session(config)
    attach(session, wire)

    # --- Wire consumer (async background task) ---
    async def _consume_wire() -> None:
        queue = wire.subscribe()
        while True:
            event = await queue.get()
            if event is None:
                break

            d = event.data
            if event.type == EventType.OUTPUT:
                sys.stdout.write(d.get("text", ""))
                sys.stdout.flush()

            elif event.type == EventType.MODE:
                print(f"\n[mode: {d.get('mode', '?')}]", flush=True)

            elif event.type == EventType.PUMP_END:
                code = d.get("exit_code")
                code_str = str(code) if code is not None else "?"
                print(f"\n[shell output ended: {d.get('reason', '')} (code={code_str})]", flush=True)

            elif event.type == EventType.ERROR:
                print(f"\nERROR: {d.get('error', 'Unknown error')}", flush=True)

        wire.unsubscribe(queue)

    consumer_task = asyncio.create_task(_consume_wire())
    loop = asyncio.get_running_loop()

    try:
        await session.start()
        while session.alive:
            line = await loop.run_in_executor(None, sys.stdin.readline)
            if not line:
                break
            line = line.strip()
            if line == ":mode":
                toggle_mode(session, wire)
                continue
            try:
                await session.submit(line)
            except StreamTerminationError as e:
                wire.send_error(f"{e} (use :mode to switch to built-ins)")
    finally:
        await session.close()
        wire.close()
        await consumer_task


@app.command(name="exec")
def exec_line(
    line: list[str] = typer.Argument(help="Built-in command line to run."),
    config_file: str | None = typer.Option(
        None, "--config", "-c", help="Config file path."
    ),
) -> None:
    """Run one built-in command line in the current directory and print the output."""
    from ptyshell.command.builtin import create_registry
    from ptyshell.shell.tokenizer import CommandInvocation

    config = _load_config(config_file, None)
    environment = build_environment(config)
    environment.set_cwd(os.getcwd())
    result = create_registry(environment).dispatch(
        CommandInvocation(name=line[0], args=line[1:])
    )
    sys.stdout.write(result.output)
    if result.is_error:
        raise typer.Exit(1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
