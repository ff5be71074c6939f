"""Splitting a command line into words and expanding quotes and variables."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterable

from minish.env import Environment

_REDIR_CHARS = ("<", ">")
_REDIRECTIONS = ("<<", ">>", "<", ">")
_DOUBLE_REDIRECTIONS = ("<<", ">>")
_QUOTES = ("'", '"')


class RedirFlag(enum.IntEnum):
    """How a word that begins with a redirection character was judged."""

    INVALID = -1
    NONE = 0
    VALID = 1


@dataclass
class Token:
    """One word of a command after expansion."""

    cmd: str
    redir_flag: RedirFlag = RedirFlag.NONE


def _is_name_char(char: str) -> bool:
    return (char.isascii() and char.isalnum()) or char == "_"


def _word_length(text: str, start: int, sep: str) -> int:
    """Length of the word that begins at ``start``."""
    if text[start] in _REDIR_CHARS:
        end = start
        while end < len(text) and text[end] in _REDIR_CHARS:
            end += 1
        return end - start
    quote: str | None = None
    length = 0
    for char in text[start:]:
        if char == '"' and quote in (None, '"'):
            quote = None if quote else '"'
        elif char == "'" and quote in (None, "'"):
            quote = None if quote else "'"
        if length and quote is None and (char == sep or char in _REDIR_CHARS):
            break
        length += 1
    return length


def split_command(text: str, sep: str = " ") -> list[str]:
    """Split a command into words.

    Separators inside quotes do not split, and a run of ``<``/``>``
    characters outside quotes always forms a word of its own.
    """
    words: list[str] = []
    cursor = 0
    while cursor < len(text):
        if text[cursor] == sep:
            cursor += 1
            continue
        length = _word_length(text, cursor, sep)
        words.append(text[cursor:cursor + length])
        cursor += length
    return words


def unclosed_quote(text: str, quote: str) -> bool:
    """Tell whether the quote that opens ``text`` has a closing partner.

    Returns True when the quote is closed later in ``text``.
    """
    return quote in text[1:]


def env_key_size(text: str) -> int:
    """Length of the variable name that follows the ``$`` opening ``text``.

    A digit right after ``$`` is a name of its own, one character long.
    """
    rest = text[1:]
    first = rest[:1]
    if first.isascii() and first.isdigit():
        return 1
    size = 0
    for char in rest:
        if not _is_name_char(char):
            break
        size += 1
    return size


def _expand_dollar(
    text: str, pos: int, env: Environment, exit_status: int
) -> tuple[str, int]:
    """Expand the ``$`` at ``pos``; return the text and the characters used after it."""
    following = text[pos + 1:pos + 2]
    if following == "?":
        return str(exit_status), 1
    if following in ("", '"'):
        return "$", 0
    size = env_key_size(text[pos:])
    return env.get(text[pos + 1:pos + 1 + size]), size


def _expand_variables(text: str, env: Environment, exit_status: int) -> str:
    parts: list[str] = []
    pos = 0
    while pos < len(text):
        if text[pos] == "$":
            value, used = _expand_dollar(text, pos, env, exit_status)
            parts.append(value)
            pos += used + 1
        else:
            parts.append(text[pos])
            pos += 1
    return "".join(parts)


def expand_word(word: str, env: Environment, exit_status: int = 0) -> str:
    """Remove closed quotes and expand ``$NAME`` and ``$?`` in one word.

    Single quotes keep their content literally; double quotes still
    expand variables. A quote that is never closed is kept as it is.
    """
    parts: list[str] = []
    pos = 0
    while pos < len(word):
        char = word[pos]
        if char in _QUOTES and unclosed_quote(word[pos:], char):
            end = word.index(char, pos + 1)
            inner = word[pos + 1:end]
            if char == "'":
                parts.append(inner)
            else:
                parts.append(_expand_variables(inner, env, exit_status))
            pos = end + 1
        elif char == "$":
            value, used = _expand_dollar(word, pos, env, exit_status)
            parts.append(value)
            pos += used + 1
        else:
            parts.append(char)
            pos += 1
    return "".join(parts)


def is_redirection(text: str) -> bool:
    """Tell whether ``text`` is one of ``<``, ``<<``, ``>`` or ``>>``."""
    return any(candidate[:len(text)] == text for candidate in _REDIRECTIONS)


def unexpected_token(redir: str) -> str | None:
    """The part of a malformed redirection word that a syntax error names."""
    if redir[:2] in _DOUBLE_REDIRECTIONS:
        rest = redir[2:]
    elif redir[:1] in _REDIR_CHARS:
        rest = redir[1:]
    else:
        return None
    if rest[:2] in _DOUBLE_REDIRECTIONS:
        return rest[:2]
    if rest[:1] in _REDIR_CHARS:
        return rest[:1]
    return None


def _redir_flag(word: str) -> RedirFlag:
    if word[:1] not in _REDIR_CHARS:
        return RedirFlag.NONE
    return RedirFlag.VALID if is_redirection(word) else RedirFlag.INVALID


def expand_tokens(
    words: Iterable[str], env: Environment, exit_status: int = 0
) -> list[Token]:
    """Turn raw words into tokens, judging redirections before expansion."""
    return [
        Token(expand_word(word, env, exit_status), _redir_flag(word))
        for word in words
    ]