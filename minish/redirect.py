"""Finding, checking and opening the redirections of a command."""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field
from typing import BinaryIO, Callable, Optional

from minish.env import strncmp
from minish.errors import ErrorCode, ShellError
from minish.parser import Command
from minish.tokens import RedirFlag, Token, unexpected_token

ReadLine = Callable[[str], Optional[str]]

_INPUT = ("<", "<<")
_OUTPUT = (">", ">>")
_FILE_MODE = 0o744


def check_syntax(command: Command) -> None:
    """Raise a syntax error for the first malformed redirection word."""
    for index, token in enumerate(command.tokens):
        if token.redir_flag == RedirFlag.INVALID:
            raise ShellError(
                ErrorCode.UNEXPECTED_TOKEN,
                command.tokens,
                index,
                token=unexpected_token(token.cmd),
            )


def read_heredoc(delimiter: str, read_line: ReadLine) -> str:
    """Read lines with the prompt ``> `` until one matches ``delimiter``.

    Only the first five characters take part in the match. End of input
    also ends the document.
    """
    lines = []
    while True:
        line = read_line("> ")
        if line is None or strncmp(line, delimiter, 5) == 0:
            break
        lines.append(line + "\n")
    return "".join(lines)


@dataclass
class Redirections:
    """The last input and the last output redirection of a command."""

    tokens: list[Token] = field(default_factory=list)
    input_op: str | None = None
    input_target: str | None = None
    input_index: int = 0
    output_op: str | None = None
    output_target: str | None = None
    output_index: int = 0

    @property
    def redirects_output(self) -> bool:
        """True when standard output goes to a file."""
        return self.output_op is not None

    def open_input(self, read_line: ReadLine) -> BinaryIO | None:
        """Open what standard input should read from, or None."""
        if self.input_op == "<":
            try:
                return open(self.input_target, "rb")
            except OSError as exc:
                raise ShellError(
                    ErrorCode.NO_SUCH_FILE, self.tokens, self.input_index
                ) from exc
        if self.input_op == "<<":
            text = read_heredoc(self.input_target, read_line)
            document = tempfile.TemporaryFile()
            document.write(text.encode())
            document.seek(0)
            return document
        return None

    def open_output(self) -> BinaryIO | None:
        """Open the file standard output should write to, or None."""
        if self.output_op is None:
            return None
        fd = _open_target(
            self.output_target, _output_flags(self.output_op),
            self.tokens, self.output_index,
        )
        return os.fdopen(fd, "wb")


def _output_flags(op: str) -> int:
    mode = os.O_APPEND if op == ">>" else os.O_TRUNC
    return os.O_WRONLY | os.O_CREAT | mode


def _open_target(path: str, flags: int, tokens: list[Token], index: int) -> int:
    try:
        return os.open(path, flags, _FILE_MODE)
    except OSError as exc:
        raise ShellError(ErrorCode.NO_SUCH_FILE, tokens, index) from exc


def collect_redirections(command: Command) -> Redirections:
    """Find the redirections of ``command`` and check their files.

    Output files are created (and truncated for ``>``) as they are met,
    and files read with ``<`` must already exist.
    """
    tokens = command.tokens
    found = Redirections(tokens=tokens)
    for index, token in enumerate(tokens):
        if token.redir_flag == RedirFlag.NONE:
            continue
        op = token.cmd
        if op not in _INPUT and op not in _OUTPUT:
            continue
        if index + 1 >= len(tokens):
            raise ShellError(ErrorCode.UNEXPECTED_NEWLINE, tokens)
        following = tokens[index + 1]
        if following.redir_flag == RedirFlag.VALID:
            raise ShellError(ErrorCode.UNEXPECTED_TOKEN, tokens, index + 1)
        target = following.cmd
        if op in _INPUT:
            found.input_op = op
            found.input_target = target
            found.input_index = index + 1
            if op == "<":
                fd = _open_target(
                    target, os.O_WRONLY | os.O_APPEND, tokens, index + 1
                )
                os.close(fd)
        else:
            found.output_op = op
            found.output_target = target
            found.output_index = index + 1
            fd = _open_target(target, _output_flags(op), tokens, index + 1)
            os.close(fd)
    return found