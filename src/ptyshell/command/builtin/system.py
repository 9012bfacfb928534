"""System built-ins: clear, help, env, export, date, whoami, uname."""

from __future__ import annotations

import platform
from datetime import datetime
from typing import TYPE_CHECKING, ClassVar

from ptyshell.command.base import BaseCommand, CommandOk, CommandResult
from ptyshell.shell.environment import DEFAULT_USER, Environment

if TYPE_CHECKING:
    from ptyshell.command.registry import CommandRegistry

CLEAR_SCREEN = "\x1b[2J\x1b[H"
EXIT_COMMAND = "exit"


class ClearCommand(BaseCommand):
    name: ClassVar[str] = "clear"
    usage: ClassVar[str] = "clear"
    summary: ClassVar[str] = "Clear screen"

    def run(self, env: Environment, args: list[str]) -> CommandResult:
        return CommandOk(output=CLEAR_SCREEN)


class HelpCommand(BaseCommand):
    """List every registered built-in with its usage line."""

    name: ClassVar[str] = "help"
    usage: ClassVar[str] = "help"
    summary: ClassVar[str] = "Show this help"

    def __init__(self, registry: CommandRegistry) -> None:
        self._registry = registry

    def run(self, env: Environment, args: list[str]) -> CommandResult:
        entries = [(c.usage, c.summary) for c in self._registry.commands()]
        entries.append((EXIT_COMMAND, "Exit shell"))
        width = max(len(usage) for usage, _ in entries)
        lines = ["Built-in commands:"]
        lines.extend(f"  {usage.ljust(width)} - {summary}" for usage, summary in entries)
        return CommandOk(output="\n".join(lines) + "\n")


def _format_env(env: Environment) -> str:
    return "".join(f"{key}={value}\n" for key, value in env.snapshot().items())


class EnvCommand(BaseCommand):
    name: ClassVar[str] = "env"
    usage: ClassVar[str] = "env"
    summary: ClassVar[str] = "Show environment variables"

    def run(self, env: Environment, args: list[str]) -> CommandResult:
        return CommandOk(output=_format_env(env))


class ExportCommand(BaseCommand):
    """Set ``KEY=VALUE`` pairs; arguments without ``=`` are ignored."""

    name: ClassVar[str] = "export"
    usage: ClassVar[str] = "export KEY=VAL"
    summary: ClassVar[str] = "Set environment variable"

    def run(self, env: Environment, args: list[str]) -> CommandResult:
        if not args:
            return CommandOk(output=_format_env(env))
        for arg in args:
            key, sep, value = arg.partition("=")
            if sep:
                env.set(key, value)
        return CommandOk()


class DateCommand(BaseCommand):
    name: ClassVar[str] = "date"
    usage: ClassVar[str] = "date"
    summary: ClassVar[str] = "Show current date/time"

    def run(self, env: Environment, args: list[str]) -> CommandResult:
        now = datetime.now().astimezone()
        return CommandOk(output=now.strftime("%a %b %d %H:%M:%S %Z %Y") + "\n")


class WhoamiCommand(BaseCommand):
    name: ClassVar[str] = "whoami"
    usage: ClassVar[str] = "whoami"
    summary: ClassVar[str] = "Show current user"

    def run(self, env: Environment, args: list[str]) -> CommandResult:
        return CommandOk(output=f"{env.get('USER') or DEFAULT_USER}\n")


class UnameCommand(BaseCommand):
    """Platform name; ``-a`` adds release, device and machine ABI."""

    name: ClassVar[str] = "uname"
    usage: ClassVar[str] = "uname [-a]"
    summary: ClassVar[str] = "Show system information"

    def run(self, env: Environment, args: list[str]) -> CommandResult:
        system = platform.system() or "unknown"
        if "-a" not in args:
            return CommandOk(output=f"{system}\n")
        parts = [
            system,
            platform.release() or "unknown",
            platform.node() or "unknown",
            platform.machine() or "unknown",
        ]
        return CommandOk(output=" ".join(parts) + "\n")
