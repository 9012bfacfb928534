"""Configuration — Pydantic models for ptyshell settings."""

from __future__ import annotations

import json
import os
from typing import Any, Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from ptyshell.shell.environment import (
    DEFAULT_PATH,
    DEFAULT_SESSION_NAME,
    DEFAULT_SHELL,
    DEFAULT_TERM,
    DEFAULT_USER,
)

# Tried in order when no shell is configured.
_SHELL_CANDIDATES = (DEFAULT_SHELL, "/bin/sh")


def _default_shell() -> str:
    for candidate in _SHELL_CANDIDATES:
        if os.access(candidate, os.X_OK):
            return candidate
    return _SHELL_CANDIDATES[-1]


class SessionConfig(BaseModel):
    """Shell session configuration.

    ``user``, ``term`` and ``path`` seed the environment model and are
    handed to the spawned shell; ``mode`` picks the initial routing.
    """

    shell: str = Field(default_factory=_default_shell, description="Shell command to spawn")
    home: str = Field(
        default="~/.ptyshell/home",
        description="Home directory; the session starts here (created if missing)",
    )
    name: str = Field(default=DEFAULT_SESSION_NAME, description="Host part of the prompt")
    user: str = Field(default=DEFAULT_USER)
    term: str = Field(default=DEFAULT_TERM)
    path: str = Field(default=DEFAULT_PATH)
    mode: Literal["intercept", "passthrough"] = Field(
        default="intercept",
        description="'intercept' runs built-ins, 'passthrough' writes lines to the shell",
    )
    banner: bool = Field(default=True, description="Print the welcome banner on start")
    exit_grace: float = Field(
        default=1.0,
        ge=0.0,
        description="Seconds to wait for the shell to exit before it is killed",
    )
    scrollback: int = Field(default=50_000, gt=0, description="Lines kept in the transcript")

    def home_path(self) -> str:
        return os.path.abspath(os.path.expanduser(self.home))


class ShellConfig(BaseModel):
    """Top-level ptyshell configuration."""

    session: SessionConfig = Field(default_factory=SessionConfig)

    @classmethod
    def load(cls, config_path: str | None = None) -> ShellConfig:
        """Load config from file, env vars, or defaults.

        Priority: env vars > config file > defaults.

        Env vars:
            PTYSHELL_SHELL  - Shell command to spawn
            PTYSHELL_HOME   - Home directory
            PTYSHELL_NAME   - Session name shown in the prompt
            PTYSHELL_USER   - USER for the prompt and the child shell
            PTYSHELL_PATH   - PATH handed to the child shell
            PTYSHELL_MODE   - Initial mode (intercept/passthrough)
        """
        load_dotenv()

        config_data: dict[str, Any] = {}

        if config_path and os.path.exists(config_path):
            with open(config_path) as f:
                config_data = json.load(f)

        session = config_data.get("session", {})

        for key in ("shell", "home", "name", "user", "path"):
            value = os.environ.get(f"PTYSHELL_{key.upper()}")
            if value:
                session[key] = value

        env_mode = os.environ.get("PTYSHELL_MODE")
        if env_mode:
            session["mode"] = env_mode.lower()

        if session:
            config_data["session"] = session

        return cls.model_validate(config_data)
