"""Shell errors and the messages they print."""

from __future__ import annotations

import enum
from typing import Sequence

from minish.env import is_valid_export, is_valid_key
from minish.tokens import RedirFlag, Token

_PREFIX = "minishell: "


class ErrorCode(enum.IntEnum):
    """Kinds of error a command can end with."""

    COMMAND_NOT_FOUND = 1
    TOO_MANY_ARGUMENTS = 2
    NO_SUCH_FILE = 3
    NUMERIC_ARGUMENT_REQUIRED = 4
    EXPORT_IDENTIFIER = 5
    UNSET_IDENTIFIER = 6
    UNEXPECTED_TOKEN = 7
    UNEXPECTED_NEWLINE = 8


_EXIT_STATUS = {
    ErrorCode.COMMAND_NOT_FOUND: 127,
    ErrorCode.TOO_MANY_ARGUMENTS: 1,
    ErrorCode.NO_SUCH_FILE: 1,
    ErrorCode.NUMERIC_ARGUMENT_REQUIRED: 255,
    ErrorCode.EXPORT_IDENTIFIER: 1,
    ErrorCode.UNSET_IDENTIFIER: 1,
    ErrorCode.UNEXPECTED_TOKEN: 258,
    ErrorCode.UNEXPECTED_NEWLINE: 258,
}


def _plain_arguments(tokens: Sequence[Token]) -> list[str]:
    """Arguments after the command name, up to the first redirection."""
    arguments: list[str] = []
    for token in tokens[1:]:
        if token.redir_flag != RedirFlag.NONE:
            break
        arguments.append(token.cmd)
    return arguments


class ShellError(Exception):
    """An error raised while running one command.

    ``tokens`` are the words of the failing command, ``index`` points at
    the word the error is about and ``token`` is an explicit offending
    token for syntax errors.
    """

    def __init__(
        self,
        code: ErrorCode | int,
        tokens: Sequence[Token] = (),
        index: int = 0,
        token: str | None = None,
    ) -> None:
        self.code = ErrorCode(code)
        self.tokens = list(tokens)
        self.index = index
        self.token = token
        lines = self.messages()
        super().__init__(lines[0] if lines else self.code.name)

    def _word(self, index: int) -> str | None:
        if 0 <= index < len(self.tokens):
            return self.tokens[index].cmd
        return None

    def _identifier_errors(self, valid) -> list[str]:
        name = self._word(0)
        return [
            f"{_PREFIX}{name}: `{argument}': not a valid identifier"
            for argument in _plain_arguments(self.tokens)
            if not valid(argument)
        ]

    def messages(self) -> list[str]:
        """The lines written to standard error, without line endings."""
        code = self.code
        if code is ErrorCode.EXPORT_IDENTIFIER:
            return self._identifier_errors(is_valid_export)
        if code is ErrorCode.UNSET_IDENTIFIER:
            return self._identifier_errors(is_valid_key)
        if code is ErrorCode.UNEXPECTED_TOKEN and self.token is not None:
            return [f"{_PREFIX}syntax error near unexpected token `{self.token}'"]

        subject_index = 0 if code in (
            ErrorCode.COMMAND_NOT_FOUND,
            ErrorCode.TOO_MANY_ARGUMENTS,
            ErrorCode.NUMERIC_ARGUMENT_REQUIRED,
        ) else self.index
        subject = self._word(subject_index)
        if subject is None:
            return []

        if code is ErrorCode.COMMAND_NOT_FOUND:
            return [f"{_PREFIX}{subject}: command not found"]
        if code is ErrorCode.TOO_MANY_ARGUMENTS:
            return [f"{_PREFIX}{subject}: too many arguments"]
        if code is ErrorCode.NO_SUCH_FILE:
            return [f"{_PREFIX}{subject}: No such file or directory"]
        if code is ErrorCode.NUMERIC_ARGUMENT_REQUIRED:
            argument = self._word(self.index) or ""
            return [f"{_PREFIX}{subject}: {argument}: numeric argument required"]
        if code is ErrorCode.UNEXPECTED_TOKEN:
            return [f"{_PREFIX}syntax error near unexpected token `{subject}'"]
        return [f"{_PREFIX}syntax error near unexpected token `newline'"]

    def exit_status(self) -> int:
        """The exit status the shell takes after this error."""
        return _EXIT_STATUS[self.code]