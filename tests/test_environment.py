"""Tests for ptyshell.shell.environment.Environment."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from ptyshell.shell.environment import DEFAULT_PATH, DEFAULT_USER, Environment


@pytest.fixture
def home(tmp_path: Path) -> str:
    path = tmp_path / "home"
    path.mkdir()
    return os.path.realpath(path)


class TestEnvironmentDefaults:
    def test_starts_in_home(self, home: str) -> None:
        env = Environment(home=home)
        assert env.cwd == home
        assert env.get("PWD") == home
        assert env.get("HOME") == home

    def test_seed_variables(self, home: str) -> None:
        env = Environment(home=home, user="alice", shell="/bin/sh")
        snap = env.snapshot()
        assert snap["USER"] == "alice"
        assert snap["SHELL"] == "/bin/sh"
        assert snap["PATH"] == DEFAULT_PATH
        assert len(env) == len(snap)

    def test_snapshot_is_a_copy(self, home: str) -> None:
        env = Environment(home=home)
        snap = env.snapshot()
        snap["USER"] = "mallory"
        assert env.get("USER") == DEFAULT_USER

    def test_missing_key(self, home: str) -> None:
        assert Environment(home=home).get("NOPE") is None


class TestEnvironmentCwd:
    def test_set_cwd_relative(self, home: str) -> None:
        os.mkdir(os.path.join(home, "sub"))
        env = Environment(home=home)
        assert env.set_cwd("sub") is True
        assert env.cwd == os.path.join(home, "sub")
        assert env.get("PWD") == env.cwd

    def test_set_cwd_canonicalises(self, home: str) -> None:
        os.mkdir(os.path.join(home, "sub"))
        env = Environment(home=home)
        env.set_cwd("sub/../sub/.")
        assert env.cwd == os.path.join(home, "sub")

    def test_set_cwd_missing_leaves_state(self, home: str) -> None:
        env = Environment(home=home)
        assert env.set_cwd("does-not-exist") is False
        assert env.cwd == home
        assert env.get("PWD") == home

    def test_set_pwd_moves_cwd(self, home: str) -> None:
        os.mkdir(os.path.join(home, "sub"))
        env = Environment(home=home)
        env.set("PWD", os.path.join(home, "sub"))
        assert env.cwd == os.path.join(home, "sub")
        assert env.get("PWD") == env.cwd

    def test_set_pwd_invalid_keeps_both(self, home: str) -> None:
        env = Environment(home=home)
        env.set("PWD", "/definitely/not/here")
        assert env.cwd == home
        assert env.get("PWD") == home

    def test_sync_pwd(self, home: str) -> None:
        env = Environment(home=home)
        env.set("OTHER", "1")
        env.sync_pwd()
        assert env.get("PWD") == env.cwd

    def test_resolve(self, home: str) -> None:
        env = Environment(home=home)
        assert env.resolve("/etc") == "/etc"
        assert env.resolve("a/b") == os.path.join(home, "a/b")


class TestEnvironmentPrompt:
    def test_prompt_at_home(self, home: str) -> None:
        env = Environment(home=home, user="u", session_name="box")
        assert env.prompt() == "u@box:~$ "

    def test_prompt_below_home(self, home: str) -> None:
        os.makedirs(os.path.join(home, "a", "b"))
        env = Environment(home=home, user="u", session_name="box")
        env.set_cwd("a/b")
        assert env.prompt() == "u@box:~/a/b$ "

    def test_prompt_outside_home(self, home: str) -> None:
        env = Environment(home=home, user="u", session_name="box")
        env.set_cwd("/")
        assert env.prompt() == "u@box:/$ "

    def test_sibling_with_home_prefix_not_abbreviated(self, home: str) -> None:
        sibling = home + "2"
        os.mkdir(sibling)
        env = Environment(home=home, user="u", session_name="box")
        env.set_cwd(sibling)
        assert env.display_path() == sibling

    def test_prompt_follows_user_variable(self, home: str) -> None:
        env = Environment(home=home, user="u", session_name="box")
        env.set("USER", "root")
        assert env.prompt().startswith("root@box:")


class TestSpawnEnv:
    def test_keys_and_order(self, home: str) -> None:
        env = Environment(home=home, user="u", term="vt100", path="/bin")
        assert env.spawn_env() == [
            f"HOME={home}",
            "PATH=/bin",
            "TERM=vt100",
            "USER=u",
        ]

    def test_reflects_exports(self, home: str) -> None:
        env = Environment(home=home)
        env.set("PATH", "/opt/bin")
        assert "PATH=/opt/bin" in env.spawn_env()

    def test_empty_values_fall_back(self, home: str) -> None:
        env = Environment(home=home)
        env.set("PATH", "")
        env.set("USER", "")
        entries = env.spawn_env()
        assert f"PATH={DEFAULT_PATH}" in entries
        assert f"USER={DEFAULT_USER}" in entries
