"""Text built-ins: echo, grep, head, tail, wc."""

from __future__ import annotations

import os
from abc import abstractmethod
from typing import ClassVar

from ptyshell.command.base import (
    BaseCommand,
    CommandFailed,
    CommandOk,
    CommandResult,
    NotFoundError,
    UsageError,
)
from ptyshell.shell.environment import Environment

DEFAULT_LINE_COUNT = 10


def _read_lines(path: str) -> list[str]:
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        return f.read().splitlines()


def _join_lines(lines: list[str]) -> str:
    return "".join(f"{line}\n" for line in lines)


class EchoCommand(BaseCommand):
    name: ClassVar[str] = "echo"
    usage: ClassVar[str] = "echo <text>"
    summary: ClassVar[str] = "Display text"

    def run(self, env: Environment, args: list[str]) -> CommandResult:
        return CommandOk(output=" ".join(args) + "\n")


class GrepCommand(BaseCommand):
    """Print lines containing a literal substring; no regular expressions."""

    name: ClassVar[str] = "grep"
    usage: ClassVar[str] = "grep <pattern> <file...>"
    summary: ClassVar[str] = "Search in files"

    def run(self, env: Environment, args: list[str]) -> CommandResult:
        if len(args) < 2:
            raise UsageError("missing pattern or file")
        pattern, paths = args[0], args[1:]

        matches: list[str] = []
        for path in paths:
            full = env.resolve(path)
            if not os.path.isfile(full):
                continue
            matches.extend(line for line in _read_lines(full) if pattern in line)
        return CommandOk(output=_join_lines(matches))


class _LineSliceCommand(BaseCommand):
    """Shared ``[-n COUNT] <file>`` parsing for head and tail."""

    def run(self, env: Environment, args: list[str]) -> CommandResult:
        count = DEFAULT_LINE_COUNT
        if args and args[0] == "-n":
            if len(args) > 1:
                try:
                    count = int(args[1])
                except ValueError:
                    count = DEFAULT_LINE_COUNT
            args = args[2:]

        if not args:
            raise UsageError("missing file operand")
        full = env.resolve(args[0])
        if not os.path.isfile(full):
            raise NotFoundError(f"cannot open '{args[0]}'")
        return CommandOk(output=_join_lines(self.select(_read_lines(full), max(count, 0))))

    @abstractmethod
    def select(self, lines: list[str], count: int) -> list[str]:
        """Pick the lines to print from *lines*."""
        ...


class HeadCommand(_LineSliceCommand):
    name: ClassVar[str] = "head"
    usage: ClassVar[str] = "head [-n N] <file>"
    summary: ClassVar[str] = "Show first lines of file"

    def select(self, lines: list[str], count: int) -> list[str]:
        return lines[:count]


class TailCommand(_LineSliceCommand):
    name: ClassVar[str] = "tail"
    usage: ClassVar[str] = "tail [-n N] <file>"
    summary: ClassVar[str] = "Show last lines of file"

    def select(self, lines: list[str], count: int) -> list[str]:
        return lines[-count:] if count else []


class WcCommand(BaseCommand):
    """``<lines> <words> <bytes> <name>`` for each file operand."""

    name: ClassVar[str] = "wc"
    usage: ClassVar[str] = "wc <file...>"
    summary: ClassVar[str] = "Count lines, words, bytes"

    def run(self, env: Environment, args: list[str]) -> CommandResult:
        if not args:
            raise UsageError("missing file operand")

        out: list[str] = []
        failed = False
        for path in args:
            full = env.resolve(path)
            if not os.path.isfile(full):
                out.append(self.error_line(f"{path}: No such file or directory"))
                failed = True
                continue
            with open(full, "rb") as f:
                data = f.read()
            text = data.decode("utf-8", errors="replace")
            out.append(f"{len(text.splitlines())} {len(text.split())} {len(data)} {path}\n")

        output = "".join(out)
        return CommandFailed(output=output) if failed else CommandOk(output=output)
