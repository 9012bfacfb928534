"""Environment model — working directory, variables and the prompt.

One ``Environment`` belongs to one session.  Built-in commands receive it
by reference and are the only code that mutates it, always from the
session's intake path, so no locking is needed.

Invariant: ``vars["PWD"] == cwd`` after every mutation made through
``set_cwd()`` or ``set("PWD", ...)``.
"""

from __future__ import annotations

import logging
import os

logger = logging.getLogger(__name__)

DEFAULT_USER = "android"
DEFAULT_SHELL = "/system/bin/sh"
DEFAULT_TERM = "xterm-256color"
DEFAULT_PATH = "/system/bin:/system/xbin"
DEFAULT_SESSION_NAME = "ptyshell"

# Variables handed to the spawned child, in this order.
SPAWN_KEYS = ("HOME", "PATH", "TERM", "USER")


class Environment:
    """Current directory plus a mapping of environment variables."""

    def __init__(
        self,
        home: str,
        user: str = DEFAULT_USER,
        shell: str = DEFAULT_SHELL,
        term: str = DEFAULT_TERM,
        path: str = DEFAULT_PATH,
        session_name: str = DEFAULT_SESSION_NAME,
    ) -> None:
        home = os.path.abspath(home)
        self.session_name = session_name
        self._cwd = os.path.realpath(home)
        self._vars: dict[str, str] = {
            "HOME": home,
            "USER": user,
            "SHELL": shell,
            "TERM": term,
            "PATH": path,
            "PWD": self._cwd,
        }

    @property
    def cwd(self) -> str:
        return self._cwd

    def get(self, key: str) -> str | None:
        return self._vars.get(key)

    def set(self, key: str, value: str) -> None:
        """Insert or overwrite *key*.

        Setting ``PWD`` moves the working directory instead; if *value*
        cannot be resolved both ``cwd`` and ``PWD`` stay as they were.
        """
        if key == "PWD":
            self.set_cwd(value)
            return
        self._vars[key] = value

    def set_cwd(self, path: str) -> bool:
        """Move to the canonical form of *path*.

        Returns False (leaving ``cwd`` untouched) when the path cannot be
        resolved.  Callers are expected to have checked that it exists.
        """
        try:
            resolved = os.path.realpath(self.resolve(path), strict=True)
        except OSError as e:
            logger.debug("Cannot resolve %s: %s", path, e)
            return False
        self._cwd = resolved
        self._vars["PWD"] = resolved
        return True

    def sync_pwd(self) -> None:
        """Copy ``cwd`` into ``PWD``."""
        self._vars["PWD"] = self._cwd

    def snapshot(self) -> dict[str, str]:
        """Return a copy of all variables, for display."""
        return dict(self._vars)

    def resolve(self, path: str) -> str:
        """Absolute paths are returned as-is; relative ones join ``cwd``."""
        if os.path.isabs(path):
            return path
        return os.path.join(self._cwd, path)

    def display_path(self) -> str:
        """``cwd`` with a leading ``HOME`` replaced by ``~``."""
        home = self._vars.get("HOME")
        if not home or home == "/":
            return self._cwd
        home = home.rstrip("/")
        for candidate in (home, os.path.realpath(home)):
            if self._cwd == candidate:
                return "~"
            if self._cwd.startswith(candidate + "/"):
                return "~" + self._cwd[len(candidate):]
        return self._cwd

    def prompt(self) -> str:
        user = self._vars.get("USER") or DEFAULT_USER
        return f"{user}@{self.session_name}:{self.display_path()}$ "

    def spawn_env(self) -> list[str]:
        """``KEY=VALUE`` entries for the child shell process."""
        defaults = {
            "HOME": self._cwd,
            "PATH": DEFAULT_PATH,
            "TERM": DEFAULT_TERM,
            "USER": DEFAULT_USER,
        }
        return [f"{key}={self._vars.get(key) or defaults[key]}" for key in SPAWN_KEYS]

    def __len__(self) -> int:
        return len(self._vars)
