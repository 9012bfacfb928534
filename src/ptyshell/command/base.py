"""Base command classes for the built-in dispatcher."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from ptyshell.shell.environment import Environment


class CommandError(Exception):
    """A built-in failed; the message is shown as ``<name>: <message>``."""


class UsageError(CommandError):
    """Required arguments are missing."""


class NotFoundError(CommandError):
    """A path named on the command line does not exist."""


@dataclass
class CommandResult:
    """Base result from a built-in command."""

    output: str = ""
    is_error: bool = False


@dataclass
class CommandOk(CommandResult):
    """Successful command result."""

    is_error: bool = False


@dataclass
class CommandFailed(CommandResult):
    """Command result carrying one or more error lines."""

    is_error: bool = True


class BaseCommand(ABC):
    """Base class for all built-in commands.

    A command reads and optionally mutates the ``Environment`` and the
    filesystem; it never spawns a process.  Failures are either raised as
    ``CommandError`` (the dispatcher renders them) or, for commands that
    keep going after a bad argument, collected with ``error_line()``.

    Usage:
        class Hello(BaseCommand):
            name = "hello"
            usage = "hello"
            summary = "Say hello"

            def run(self, env: Environment, args: list[str]) -> CommandResult:
                return CommandOk(output="hello\\n")
    """

    name: ClassVar[str]
    usage: ClassVar[str]
    summary: ClassVar[str]

    @abstractmethod
    def run(self, env: Environment, args: list[str]) -> CommandResult:
        """Execute the command against *env*."""
        ...

    def error_line(self, message: str) -> str:
        return f"{self.name}: {message}\n"


def split_flags(args: list[str]) -> tuple[set[str], list[str]]:
    """Separate short flags from operands.

    ``-la`` yields ``{"l", "a"}``.  A lone ``-`` is an operand.
    """
    flags: set[str] = set()
    operands: list[str] = []
    for arg in args:
        if arg.startswith("-") and len(arg) > 1:
            flags.update(arg[1:])
        else:
            operands.append(arg)
    return flags, operands
