"""Built-in commands run in-process against the session environment."""

from __future__ import annotations

from ptyshell.command.builtin.files import (
    CatCommand,
    CpCommand,
    MkdirCommand,
    MvCommand,
    RmCommand,
    TouchCommand,
)
from ptyshell.command.builtin.navigation import CdCommand, FindCommand, LsCommand, PwdCommand
from ptyshell.command.builtin.system import (
    CLEAR_SCREEN,
    EXIT_COMMAND,
    ClearCommand,
    DateCommand,
    EnvCommand,
    ExportCommand,
    HelpCommand,
    UnameCommand,
    WhoamiCommand,
)
from ptyshell.command.builtin.text import (
    EchoCommand,
    GrepCommand,
    HeadCommand,
    TailCommand,
    WcCommand,
)
from ptyshell.command.registry import CommandRegistry
from ptyshell.shell.environment import Environment


def create_registry(environment: Environment) -> CommandRegistry:
    """Build the dispatcher with every built-in registered."""
    registry = CommandRegistry(environment)
    registry.register_many(
        [
            CdCommand(),
            PwdCommand(),
            LsCommand(),
            CatCommand(),
            EchoCommand(),
            MkdirCommand(),
            RmCommand(),
            TouchCommand(),
            CpCommand(),
            MvCommand(),
            FindCommand(),
            GrepCommand(),
            HeadCommand(),
            TailCommand(),
            WcCommand(),
            EnvCommand(),
            ExportCommand(),
            DateCommand(),
            WhoamiCommand(),
            UnameCommand(),
            ClearCommand(),
            HelpCommand(registry),
        ]
    )
    return registry


__all__ = [
    "CLEAR_SCREEN",
    "EXIT_COMMAND",
    "CatCommand",
    "CdCommand",
    "ClearCommand",
    "CpCommand",
    "DateCommand",
    "EchoCommand",
    "EnvCommand",
    "ExportCommand",
    "FindCommand",
    "GrepCommand",
    "HeadCommand",
    "HelpCommand",
    "LsCommand",
    "MkdirCommand",
    "MvCommand",
    "PwdCommand",
    "RmCommand",
    "TailCommand",
    "TouchCommand",
    "UnameCommand",
    "WcCommand",
    "WhoamiCommand",
    "create_registry",
]
