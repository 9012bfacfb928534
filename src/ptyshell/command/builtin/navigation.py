"""Navigation built-ins: cd, pwd, ls, find."""

from __future__ import annotations

import os
import stat
import time
from typing import ClassVar

from ptyshell.command.base import (
    BaseCommand,
    CommandFailed,
    CommandOk,
    CommandResult,
    NotFoundError,
    split_flags,
)
from ptyshell.shell.environment import Environment


class CdCommand(BaseCommand):
    """Change the working directory; ``~`` expands to ``HOME``."""

    name: ClassVar[str] = "cd"
    usage: ClassVar[str] = "cd [dir]"
    summary: ClassVar[str] = "Change directory"

    def run(self, env: Environment, args: list[str]) -> CommandResult:
        home = env.get("HOME") or "/"
        if not args or args[0] == "~":
            target = home
        elif args[0].startswith("~/"):
            target = home.rstrip("/") + args[0][1:]
        else:
            target = args[0]

        path = env.resolve(target)
        if not os.path.isdir(path):
            raise NotFoundError(f"{target}: No such directory")
        if not env.set_cwd(path):
            raise NotFoundError(f"{target}: No such directory")
        return CommandOk()


class PwdCommand(BaseCommand):
    name: ClassVar[str] = "pwd"
    usage: ClassVar[str] = "pwd"
    summary: ClassVar[str] = "Print working directory"

    def run(self, env: Environment, args: list[str]) -> CommandResult:
        return CommandOk(output=f"{env.cwd}\n")


class LsCommand(BaseCommand):
    """List directory contents, sorted by name.

    ``-a`` includes dotfiles, ``-l`` switches to a synthetic long listing.
    A file operand prints just its name.
    """

    name: ClassVar[str] = "ls"
    usage: ClassVar[str] = "ls [-la] [path...]"
    summary: ClassVar[str] = "List directory contents"

    def run(self, env: Environment, args: list[str]) -> CommandResult:
        flags, paths = split_flags(args)
        show_hidden = "a" in flags
        long_format = "l" in flags
        if not paths:
            paths = [env.cwd]

        out: list[str] = []
        failed = False
        for path in paths:
            full = env.resolve(path)
            if not os.path.exists(full):
                out.append(self.error_line(f"cannot access '{path}': No such file or directory"))
                failed = True
                continue

            if not os.path.isdir(full):
                out.append(f"{os.path.basename(full.rstrip('/'))}\n")
                continue

            names = sorted(
                name for name in os.listdir(full) if show_hidden or not name.startswith(".")
            )
            if long_format:
                out.extend(_long_entry(os.path.join(full, name), name) for name in names)
            elif names:
                labels = [
                    name + "/" if os.path.isdir(os.path.join(full, name)) else name
                    for name in names
                ]
                out.append("  ".join(labels) + "\n")

        output = "".join(out)
        return CommandFailed(output=output) if failed else CommandOk(output=output)


def _long_entry(path: str, name: str) -> str:
    """One ``ls -l`` line: permissions, fixed owner, size, mtime, name."""
    st = os.lstat(path)
    is_dir = stat.S_ISDIR(st.st_mode)
    rwx = (
        ("r" if os.access(path, os.R_OK) else "-")
        + ("w" if os.access(path, os.W_OK) else "-")
        + ("x" if os.access(path, os.X_OK) else "-")
    )
    perms = ("d" if is_dir else "-") + rwx * 3
    size = "4096" if is_dir else str(st.st_size)
    mtime = time.strftime("%b %d %H:%M", time.localtime(st.st_mtime))
    return f"{perms} 1 root root {size:>8} {mtime} {name}\n"


class FindCommand(BaseCommand):
    """Print every path under a start directory, top-down, one per line."""

    name: ClassVar[str] = "find"
    usage: ClassVar[str] = "find [path]"
    summary: ClassVar[str] = "Find files"

    def run(self, env: Environment, args: list[str]) -> CommandResult:
        start = args[0] if args else env.cwd
        root = os.path.normpath(env.resolve(start))
        if not os.path.lexists(root):
            raise NotFoundError(f"'{start}': No such file or directory")

        lines = [f"{path}\n" for path in _walk(root)]
        return CommandOk(output="".join(lines))


def _walk(path: str):
    yield path
    if os.path.isdir(path) and not os.path.islink(path):
        try:
            names = sorted(os.listdir(path))
        except PermissionError:
            return
        for name in names:
            yield from _walk(os.path.join(path, name))
