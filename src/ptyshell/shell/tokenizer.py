"""Command-line tokenizer — split a line into argument tokens.

Quoting follows the simple POSIX-like rule used by the built-ins: a single
or double quote opens a region that runs until the same quote character
appears again.  Everything inside the region, whitespace included, is taken
literally and the quote characters are dropped.

Known limitation: there is no backslash escaping, so a quote character can
only appear inside a region opened by the *other* quote character.  An
unterminated quote is not an error: the partial region is simply kept as
part of the current token.
"""

from __future__ import annotations

from dataclasses import dataclass, field

QUOTE_CHARS = ("'", '"')


def tokenize(line: str) -> list[str]:
    """Split *line* on whitespace outside quotes.

    Empty or whitespace-only input yields an empty list, and so does a
    quoted empty string: ``''`` never becomes a token of its own.
    """
    tokens: list[str] = []
    current: list[str] = []
    quote: str | None = None

    for ch in line:
        if quote is not None:
            if ch == quote:
                quote = None
            else:
                current.append(ch)
        elif ch in QUOTE_CHARS:
            quote = ch
        elif ch.isspace():
            if current:
                tokens.append("".join(current))
                current = []
        else:
            current.append(ch)

    if current:
        tokens.append("".join(current))
    return tokens


@dataclass
class CommandInvocation:
    """A tokenized command line: the command name and its arguments."""

    name: str
    args: list[str] = field(default_factory=list)

    @classmethod
    def parse(cls, line: str) -> CommandInvocation | None:
        """Tokenize *line*; returns None when there is nothing to run."""
        tokens = tokenize(line)
        if not tokens:
            return None
        return cls(name=tokens[0], args=tokens[1:])
