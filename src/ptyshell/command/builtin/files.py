"""File built-ins: cat, mkdir, rm, touch, cp, mv.

Commands that take several operands keep going after a bad one: the error
line is collected and the remaining operands are still processed.
"""

from __future__ import annotations

import os
import shutil
from typing import ClassVar

from ptyshell.command.base import (
    BaseCommand,
    CommandError,
    CommandFailed,
    CommandOk,
    CommandResult,
    NotFoundError,
    UsageError,
    split_flags,
)
from ptyshell.shell.environment import Environment


class CatCommand(BaseCommand):
    name: ClassVar[str] = "cat"
    usage: ClassVar[str] = "cat <file...>"
    summary: ClassVar[str] = "Display file contents"

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
            with open(full, "r", encoding="utf-8", errors="replace") as f:
                out.append(f.read())

        output = "".join(out)
        return CommandFailed(output=output) if failed else CommandOk(output=output)


class MkdirCommand(BaseCommand):
    name: ClassVar[str] = "mkdir"
    usage: ClassVar[str] = "mkdir [-p] <dir...>"
    summary: ClassVar[str] = "Create directory"

    def run(self, env: Environment, args: list[str]) -> CommandResult:
        flags, paths = split_flags(args)
        if not paths:
            raise UsageError("missing operand")
        parents = "p" in flags

        errors: list[str] = []
        for path in paths:
            full = env.resolve(path)
            try:
                if parents:
                    os.makedirs(full, exist_ok=True)
                else:
                    os.mkdir(full)
            except OSError as e:
                reason = e.strerror or str(e)
                errors.append(self.error_line(f"cannot create directory '{path}': {reason}"))

        if errors:
            return CommandFailed(output="".join(errors))
        return CommandOk()


class RmCommand(BaseCommand):
    """Remove files; ``-r`` allows directories, ``-f`` ignores missing paths."""

    name: ClassVar[str] = "rm"
    usage: ClassVar[str] = "rm [-rf] <path...>"
    summary: ClassVar[str] = "Remove files/directories"

    def run(self, env: Environment, args: list[str]) -> CommandResult:
        flags, paths = split_flags(args)
        if not paths:
            if "f" in flags:
                return CommandOk()
            raise UsageError("missing operand")
        recursive = "r" in flags or "R" in flags
        force = "f" in flags

        errors: list[str] = []
        for path in paths:
            full = env.resolve(path)
            if not os.path.lexists(full):
                if not force:
                    errors.append(self.error_line(f"cannot remove '{path}': No such file or directory"))
                continue
            if os.path.isdir(full) and not os.path.islink(full):
                if not recursive:
                    errors.append(self.error_line(f"cannot remove '{path}': Is a directory"))
                    continue
                shutil.rmtree(full)
            else:
                os.remove(full)

        if errors:
            return CommandFailed(output="".join(errors))
        return CommandOk()


class TouchCommand(BaseCommand):
    name: ClassVar[str] = "touch"
    usage: ClassVar[str] = "touch <file...>"
    summary: ClassVar[str] = "Create empty file or update timestamp"

    def run(self, env: Environment, args: list[str]) -> CommandResult:
        if not args:
            raise UsageError("missing file operand")

        errors: list[str] = []
        for path in args:
            full = env.resolve(path)
            try:
                if os.path.exists(full):
                    os.utime(full, None)
                else:
                    with open(full, "a"):
                        pass
            except OSError as e:
                reason = e.strerror or str(e)
                errors.append(self.error_line(f"cannot touch '{path}': {reason}"))

        if errors:
            return CommandFailed(output="".join(errors))
        return CommandOk()


def _source_and_target(env: Environment, args: list[str]) -> tuple[str, str]:
    """Resolve ``<src> <dst>``; a directory target keeps the source name."""
    if len(args) < 2:
        raise UsageError("missing file operand")
    src = env.resolve(args[0])
    dst = env.resolve(args[1])
    if not os.path.lexists(src):
        raise NotFoundError(f"cannot stat '{args[0]}': No such file or directory")
    if os.path.isdir(dst):
        dst = os.path.join(dst, os.path.basename(src.rstrip("/")))
    return src, dst


class CpCommand(BaseCommand):
    name: ClassVar[str] = "cp"
    usage: ClassVar[str] = "cp <src> <dst>"
    summary: ClassVar[str] = "Copy files"

    def run(self, env: Environment, args: list[str]) -> CommandResult:
        src, dst = _source_and_target(env, args)
        if os.path.isdir(src):
            raise CommandError(f"omitting directory '{args[0]}'")
        shutil.copyfile(src, dst)
        return CommandOk()


class MvCommand(BaseCommand):
    name: ClassVar[str] = "mv"
    usage: ClassVar[str] = "mv <src> <dst>"
    summary: ClassVar[str] = "Move/rename files"

    def run(self, env: Environment, args: list[str]) -> CommandResult:
        src, dst = _source_and_target(env, args)
        shutil.move(src, dst)
        return CommandOk()
