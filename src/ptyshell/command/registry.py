"""Command registry — the built-in dispatch table."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ptyshell.command.base import BaseCommand, CommandError, CommandFailed, CommandResult
from ptyshell.shell.tokenizer import CommandInvocation

if TYPE_CHECKING:
    from ptyshell.shell.environment import Environment

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Flat name -> command table bound to one session's ``Environment``.

    ``execute()`` is the dispatcher: it never raises for a failing command,
    every failure comes back as a ``"<name>: <message>\\n"`` line.
    """

    def __init__(self, environment: Environment) -> None:
        self.environment = environment
        self._commands: dict[str, BaseCommand] = {}

    def register(self, command: BaseCommand) -> None:
        """Register a command instance."""
        if command.name in self._commands:
            logger.warning("Command %s already registered, overwriting", command.name)
        self._commands[command.name] = command

    def register_many(self, commands: list[BaseCommand]) -> None:
        """Register multiple commands."""
        for command in commands:
            self.register(command)

    def get(self, name: str) -> BaseCommand | None:
        return self._commands.get(name)

    def names(self) -> list[str]:
        """All registered command names, in registration order."""
        return list(self._commands.keys())

    def commands(self) -> list[BaseCommand]:
        return list(self._commands.values())

    def dispatch(self, invocation: CommandInvocation) -> CommandResult:
        """Run one tokenized command line."""
        command = self._commands.get(invocation.name)
        if command is None:
            return CommandFailed(output=f"{invocation.name}: command not found\n")

        try:
            return command.run(self.environment, invocation.args)
        except CommandError as e:
            return CommandFailed(output=command.error_line(str(e)))
        except OSError as e:
            logger.debug("Command %s I/O error: %s", invocation.name, e)
            return CommandFailed(output=command.error_line(_describe_os_error(e)))
        except Exception as e:
            logger.error("Command %s execution error: %s", invocation.name, e, exc_info=True)
            return CommandFailed(output=command.error_line(str(e) or type(e).__name__))

    def execute(self, line: str) -> str:
        """Tokenize and run *line*, returning the text to display."""
        invocation = CommandInvocation.parse(line)
        if invocation is None:
            return ""
        result = self.dispatch(invocation)
        if result.is_error:
            logger.debug("Command %r failed: %s", line, result.output.rstrip("\n"))
        return result.output

    def __len__(self) -> int:
        return len(self._commands)

    def __contains__(self, name: str) -> bool:
        return name in self._commands


def _describe_os_error(e: OSError) -> str:
    message = e.strerror or str(e)
    if e.filename:
        return f"{e.filename}: {message}"
    return message
