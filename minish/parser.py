"""Turning an input line into a pipeline of commands."""

from __future__ import annotations

from dataclasses import dataclass, field

from minish.env import Environment
from minish.tokens import RedirFlag, Token, expand_tokens, split_command

_QUOTES = ("'", '"')
_WHITESPACE = {" ", "\t", "\n", "\v", "\f", "\r"}


@dataclass
class Command:
    """One command of a pipeline.

    ``piped`` is true when another command follows it; ``standalone`` is
    true when it is the only command on the line.
    """

    tokens: list[Token] = field(default_factory=list)
    piped: bool = False
    standalone: bool = False

    def name(self) -> str:
        """The command word, or an empty string for an empty command."""
        return self.tokens[0].cmd if self.tokens else ""

    def arguments(self) -> list[str]:
        """Words after the name, up to the first redirection."""
        result: list[str] = []
        for token in self.tokens[1:]:
            if token.redir_flag != RedirFlag.NONE:
                break
            result.append(token.cmd)
        return result


def _segments(line: str) -> list[str]:
    """Split ``line`` on pipes that are not inside quotes."""
    segments: list[str] = []
    quoted = False
    start = 0
    for pos, char in enumerate(line):
        if char in _QUOTES:
            quoted = not quoted
        elif char == "|" and not quoted:
            segments.append(line[start:pos])
            start = pos + 1
    segments.append(line[start:])
    return segments


def parse(line: str, env: Environment, exit_status: int = 0) -> list[Command]:
    """Parse ``line`` into commands, expanding words with ``env``."""
    segments = _segments(line)
    single = len(segments) == 1
    last = len(segments) - 1
    return [
        Command(
            tokens=expand_tokens(split_command(segment, " "), env, exit_status),
            piped=index != last,
            standalone=single,
        )
        for index, segment in enumerate(segments)
    ]


def is_blank(line: str) -> bool:
    """Tell whether ``line`` holds only whitespace."""
    return all(char in _WHITESPACE for char in line)


def strip_quotes(line: str) -> tuple[str, str | None]:
    """Remove quote characters that open or close a quoted part.

    Returns the text and the quote left open at the end, if any.
    """
    open_quote: str | None = None
    kept: list[str] = []
    for char in line:
        if char in _QUOTES and open_quote in (None, char):
            open_quote = None if open_quote else char
        else:
            kept.append(char)
    return "".join(kept), open_quote