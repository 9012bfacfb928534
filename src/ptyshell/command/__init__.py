"""Built-in command system — base classes, registry and dispatcher."""

from ptyshell.command.base import (
    BaseCommand,
    CommandError,
    CommandFailed,
    CommandOk,
    CommandResult,
    NotFoundError,
    UsageError,
)
from ptyshell.command.registry import CommandRegistry

__all__ = [
    "BaseCommand",
    "CommandError",
    "CommandFailed",
    "CommandOk",
    "CommandRegistry",
    "CommandResult",
    "NotFoundError",
    "UsageError",
]
