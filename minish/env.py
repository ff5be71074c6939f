"""Environment variables stored as ``KEY=value`` entries, in order."""

from __future__ import annotations

from typing import Iterable, Iterator


class InvalidIdentifier(ValueError):
    """Raised when a name cannot be used as an environment variable key."""

    def __init__(self, key: str) -> None:
        super().__init__(f"`{key}': not a valid identifier")
        self.key = key


def strncmp(a: str, b: str, n: int) -> int:
    """Compare at most ``n`` characters of two strings, like C's strncmp."""
    limit = min(len(a), len(b), n)
    for ca, cb in zip(a[:limit], b[:limit]):
        if ca != cb:
            return ord(ca) - ord(cb)
    if limit < len(a) and limit < n:
        return ord(a[limit])
    if limit < len(b) and limit < n:
        return -ord(b[limit])
    return 0


def split_fields(text: str, sep: str) -> list[str]:
    """Split ``text`` on ``sep``, dropping empty fields."""
    return [field for field in text.split(sep) if field]


def _is_word_char(char: str) -> bool:
    return (char.isascii() and char.isalnum()) or char == "_"


def is_valid_key(key: str) -> bool:
    """Tell whether ``key`` is a valid variable name."""
    if not key:
        return False
    if key[0].isascii() and key[0].isdigit():
        return False
    return all(_is_word_char(char) for char in key)


def is_valid_export(line: str) -> bool:
    """Tell whether an ``export`` argument names a valid key."""
    fields = split_fields(line, "=")
    if not fields:
        return False
    return is_valid_key(fields[0])


def has_equal(line: str) -> bool:
    """Tell whether ``line`` contains an ``=`` sign."""
    return "=" in line


class Environment:
    """An ordered list of ``KEY=value`` (or bare ``KEY``) entries."""

    def __init__(self, entries: Iterable[str] = ()) -> None:
        self._entries = list(entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def find(self, key: str) -> int | None:
        """Return the index of the entry ``key=...``, or None."""
        for index, entry in enumerate(self._entries):
            if entry.startswith(key) and entry[len(key):len(key) + 1] == "=":
                return index
        return None

    def get(self, key: str) -> str:
        """Return the value of ``key``, or an empty string if unset."""
        index = self.find(key)
        if index is None:
            return ""
        return self._entries[index][len(key) + 1:]

    def printable(self) -> list[str]:
        """Entries that carry a value, as ``env`` prints them."""
        return [entry for entry in self._entries if has_equal(entry)]

    def sorted_entries(self) -> list[str]:
        """All entries in ascending order, leaving the environment as it is."""
        return sorted(self._entries)

    def _entry_for_key_of(self, line: str) -> int | None:
        key = line.split("=", 1)[0]
        for index, entry in enumerate(self._entries):
            if entry.startswith(key):
                return index
        return None

    def export(self, assignment: str) -> None:
        """Apply one ``export`` argument: ``KEY`` or ``KEY=value``.

        An existing entry that begins with the key is replaced when a value
        is given and left alone otherwise; a new entry is appended.
        """
        if not is_valid_export(assignment):
            raise InvalidIdentifier(assignment)
        index = self._entry_for_key_of(assignment)
        if index is None:
            self._entries.append(assignment)
        elif has_equal(assignment):
            self._entries[index] = assignment

    def unset(self, key: str) -> None:
        """Remove the entry ``key=...`` if there is one."""
        if not is_valid_key(key):
            raise InvalidIdentifier(key)
        index = self.find(key)
        if index is not None:
            del self._entries[index]

    def as_list(self) -> list[str]:
        """A copy of the entries in their current order."""
        return list(self._entries)