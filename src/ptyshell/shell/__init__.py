"""Shell state — command-line tokenizer and the per-session environment."""

from ptyshell.shell.environment import Environment
from ptyshell.shell.tokenizer import CommandInvocation, tokenize

__all__ = [
    "CommandInvocation",
    "Environment",
    "tokenize",
]
