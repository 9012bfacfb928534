"""Tests for ptyshell.command.registry and ptyshell.command.base."""

from __future__ import annotations

import logging
from typing import ClassVar

import pytest

from ptyshell.command.base import (
    BaseCommand,
    CommandOk,
    CommandResult,
    UsageError,
    split_flags,
)
from ptyshell.command.builtin import create_registry
from ptyshell.command.registry import CommandRegistry
from ptyshell.shell.environment import Environment
from ptyshell.shell.tokenizer import CommandInvocation


class ArgsCommand(BaseCommand):
    name: ClassVar[str] = "args"
    usage: ClassVar[str] = "args [x...]"
    summary: ClassVar[str] = "Echo arguments as a list"

    def run(self, env: Environment, args: list[str]) -> CommandResult:
        return CommandOk(output=f"{args!r}\n")


class NeedsArgCommand(BaseCommand):
    name: ClassVar[str] = "needs"
    usage: ClassVar[str] = "needs <x>"
    summary: ClassVar[str] = "Fails without an argument"

    def run(self, env: Environment, args: list[str]) -> CommandResult:
        if not args:
            raise UsageError("missing operand")
        return CommandOk()


class OpenCommand(BaseCommand):
    name: ClassVar[str] = "open"
    usage: ClassVar[str] = "open <file>"
    summary: ClassVar[str] = "Open a file"

    def run(self, env: Environment, args: list[str]) -> CommandResult:
        open(env.resolve(args[0])).close()
        return CommandOk()


class BrokenCommand(BaseCommand):
    name: ClassVar[str] = "broken"
    usage: ClassVar[str] = "broken"
    summary: ClassVar[str] = "Always crashes"

    def run(self, env: Environment, args: list[str]) -> CommandResult:
        raise ValueError("boom")


@pytest.fixture
def registry(tmp_path) -> CommandRegistry:
    reg = CommandRegistry(Environment(home=str(tmp_path)))
    reg.register_many([ArgsCommand(), NeedsArgCommand(), OpenCommand(), BrokenCommand()])
    return reg


class TestSplitFlags:
    def test_combined_flags(self) -> None:
        assert split_flags(["-la", "dir"]) == ({"l", "a"}, ["dir"])

    def test_separate_flags(self) -> None:
        assert split_flags(["-r", "-f", "x", "y"]) == ({"r", "f"}, ["x", "y"])

    def test_lone_dash_is_operand(self) -> None:
        assert split_flags(["-"]) == (set(), ["-"])


class TestRegistry:
    def test_register_and_lookup(self, registry: CommandRegistry) -> None:
        assert "args" in registry
        assert len(registry) == 4
        assert registry.names() == ["args", "needs", "open", "broken"]
        assert isinstance(registry.get("args"), ArgsCommand)
        assert registry.get("nope") is None

    def test_register_overwrites(self, registry: CommandRegistry) -> None:
        replacement = ArgsCommand()
        registry.register(replacement)
        assert registry.get("args") is replacement
        assert len(registry) == 4

    def test_execute_tokenizes(self, registry: CommandRegistry) -> None:
        assert registry.execute("args 'a b' c") == "['a b', 'c']\n"

    def test_blank_line_is_noop(self, registry: CommandRegistry) -> None:
        assert registry.execute("   ") == ""

    def test_unknown_command(self, registry: CommandRegistry) -> None:
        assert registry.execute("zzz") == "zzz: command not found\n"

    def test_unknown_command_result_is_error(self, registry: CommandRegistry) -> None:
        result = registry.dispatch(CommandInvocation(name="zzz"))
        assert result.is_error

    def test_command_error_rendered(self, registry: CommandRegistry) -> None:
        result = registry.dispatch(CommandInvocation(name="needs"))
        assert result.is_error
        assert result.output == "needs: missing operand\n"

    def test_os_error_rendered(self, registry: CommandRegistry) -> None:
        out = registry.execute("open ghost")
        assert out.startswith("open: ")
        assert out.endswith("ghost: No such file or directory\n")

    def test_unexpected_error_logged(
        self, registry: CommandRegistry, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.ERROR, logger="ptyshell.command.registry"):
            out = registry.execute("broken")
        assert out == "broken: boom\n"
        assert any("broken" in r.getMessage() for r in caplog.records)


class TestCreateRegistry:
    def test_all_builtins_registered(self, tmp_path) -> None:
        registry = create_registry(Environment(home=str(tmp_path)))
        assert registry.names() == [
            "cd", "pwd", "ls", "cat", "echo", "mkdir", "rm", "touch", "cp", "mv",
            "find", "grep", "head", "tail", "wc", "env", "export", "date",
            "whoami", "uname", "clear", "help",
        ]

    def test_registries_do_not_share_environment(self, tmp_path) -> None:
        a = create_registry(Environment(home=str(tmp_path)))
        b = create_registry(Environment(home=str(tmp_path)))
        a.execute("export ONLY_A=1")
        assert "ONLY_A=1" in a.execute("env")
        assert "ONLY_A=1" not in b.execute("env")
