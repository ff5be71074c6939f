"""Commands the shell runs itself instead of starting a program."""

from __future__ import annotations

import os
from typing import TextIO

from minish.env import Environment, InvalidIdentifier
from minish.errors import ErrorCode, ShellError
from minish.parser import Command
from minish.tokens import RedirFlag

_LONG_MIN = -(2**63)
_LONG_MAX = 2**63 - 1
_WHITESPACE = " \t\n\v\f\r"
_DIGITS = "0123456789"

BUILTINS = frozenset({"pwd", "cd", "exit", "env", "export", "echo", "unset"})


class ShellExit(Exception):
    """Raised when the shell itself must terminate with ``code``.

    When the exit follows an error, the ``ShellError`` describing it is
    attached as ``__cause__`` so that its message can be printed.
    """

    def __init__(self, code: int) -> None:
        super().__init__(code)
        self.code = code


def parse_long(text: str) -> int:
    """Read a signed 64-bit integer the way ``atoi`` does.

    Leading whitespace and one sign are accepted; reading stops at the
    first non-digit. A value outside the 64-bit range raises ValueError.
    """
    rest = text.lstrip(_WHITESPACE)
    sign = 1
    if rest[:1] in ("+", "-"):
        if rest[0] == "-":
            sign = -1
        rest = rest[1:]
    digits = []
    for char in rest:
        if char not in _DIGITS:
            break
        digits.append(char)
    result = sign * int("".join(digits) or "0")
    if not _LONG_MIN <= result <= _LONG_MAX:
        raise ValueError(f"{text!r} is out of range")
    return result


def is_n_option(text: str) -> bool:
    """Tell whether ``text`` is an ``echo`` option like ``-n`` or ``-nnn``."""
    if not text.startswith("-n"):
        return False
    return all(char == "n" for char in text[2:])


def echo(command: Command, out: TextIO) -> None:
    """Write the arguments separated by spaces, with a newline unless ``-n``."""
    tokens = command.tokens
    index = 1
    while index < len(tokens) and is_n_option(tokens[index].cmd):
        index += 1
    newline = index == 1
    words = []
    for token in tokens[index:]:
        if token.redir_flag != RedirFlag.NONE:
            break
        words.append(token.cmd)
    out.write(" ".join(words) + ("\n" if newline else ""))


def _go_home(home: str) -> None:
    if not home:
        return
    try:
        os.chdir(home)
    except OSError:
        pass


def cd(command: Command, env: Environment) -> None:
    """Change the working directory; ``~`` stands for ``HOME``."""
    tokens = command.tokens
    home = env.get("HOME")
    if len(tokens) < 2 or tokens[1].redir_flag == RedirFlag.VALID:
        _go_home(home)
        return
    target = tokens[1].cmd
    if not target:
        return
    if target.startswith("~"):
        if target[1:2] == "/":
            target = home + target[1:]
            tokens[1].cmd = target
        elif target == "~":
            _go_home(home)
            return
    try:
        os.chdir(target)
    except OSError as exc:
        raise ShellError(ErrorCode.NO_SUCH_FILE, tokens, 1) from exc


def pwd(out: TextIO) -> None:
    """Write the current working directory."""
    out.write(os.getcwd() + "\n")


def env_builtin(env: Environment, out: TextIO) -> None:
    """Write every entry that carries a value, one per line."""
    for entry in env.printable():
        out.write(entry + "\n")


def _declaration(entry: str) -> str:
    if "=" not in entry:
        return entry
    key, value = entry.split("=", 1)
    return f'{key}="{value}"'


def export(command: Command, env: Environment, out: TextIO) -> None:
    """Set variables; with no arguments, list them all in sorted order.

    Valid arguments are applied even when others are rejected; the
    rejection is then raised as one ``ShellError``.
    """
    failed = False
    for argument in command.arguments():
        try:
            env.export(argument)
        except InvalidIdentifier:
            failed = True
    tokens = command.tokens
    if len(tokens) < 2 or tokens[1].redir_flag == RedirFlag.VALID:
        for entry in env.sorted_entries():
            out.write(f"declare -x {_declaration(entry)}\n")
    if failed:
        raise ShellError(ErrorCode.EXPORT_IDENTIFIER, tokens)


def unset(command: Command, env: Environment) -> None:
    """Remove variables; invalid names are reported after the others go."""
    failed = False
    for argument in command.arguments():
        try:
            env.unset(argument)
        except InvalidIdentifier:
            failed = True
    if failed:
        raise ShellError(ErrorCode.UNSET_IDENTIFIER, command.tokens)


def _is_numeric(text: str) -> bool:
    if text.startswith("-"):
        text = text[1:]
    return all(char in _DIGITS for char in text)


def exit_builtin(command: Command, out: TextIO) -> None:
    """Leave the shell when the command stands alone on its line.

    Inside a pipeline only the arguments are checked and nothing exits.
    """
    tokens = command.tokens
    if command.standalone:
        out.write("exit\n")
    if len(tokens) < 2:
        if command.standalone:
            raise ShellExit(0)
        return
    argument = tokens[1].cmd
    if not _is_numeric(argument):
        error = ShellError(ErrorCode.NUMERIC_ARGUMENT_REQUIRED, tokens, 1)
        if command.standalone:
            raise ShellExit(255) from error
        raise error
    if len(tokens) > 2:
        raise ShellError(ErrorCode.TOO_MANY_ARGUMENTS, tokens)
    if not command.standalone:
        return
    try:
        value = parse_long(argument)
    except ValueError:
        error = ShellError(ErrorCode.NUMERIC_ARGUMENT_REQUIRED, tokens, 1)
        raise ShellExit(255) from error
    raise ShellExit(value % 256)


def is_builtin(name: str) -> bool:
    """Tell whether ``name`` is run by the shell itself."""
    return name in BUILTINS