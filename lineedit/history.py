"""A command history list with readline-style numbering, navigation and files."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator

__all__ = ["HistoryEntry", "History", "truncate_file", "UNLIMITED"]

# The size limit used when the history is not stifled.
UNLIMITED = 2**31 - 1

_ESCAPE = re.compile(r"\\(.)", re.DOTALL)


def _default_history_file() -> Path:
    """The history file used when no path is given."""
    return Path.home() / ".history"


def _resolve(path: str | os.PathLike[str] | None) -> Path:
    return _default_history_file() if path is None else Path(path)


def _encode(line: str) -> str:
    return line.replace("\\", "\\\\").replace("\n", "\\n")


def _decode(text: str) -> str:
    return _ESCAPE.sub(lambda m: "\n" if m.group(1) == "n" else m.group(1), text)


@dataclass
class HistoryEntry:
    """One remembered line and the application data attached to it."""

    line: str
    data: Any = None


class History:
    """An ordered list of lines, oldest first.

    ``base`` is the number of the oldest entry, ``offset`` the position used by
    :meth:`current`, :meth:`previous` and :meth:`next`.  ``cursor`` is the index
    of the entry the searches start from and leave behind; it points at the
    newest entry after each :meth:`add`.
    """

    def __init__(self) -> None:
        self._entries: list[HistoryEntry] = []
        self.base = 1
        self.offset = 0
        self.max_entries = UNLIMITED
        self.cursor: int | None = None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(self._entries)

    @property
    def length(self) -> int:
        """The number of entries."""
        return len(self._entries)

    # -- editing -----------------------------------------------------------

    def add(self, line: str) -> None:
        """Append ``line``; the oldest entry goes when the list is full."""
        self._entries.append(HistoryEntry(line))
        if len(self._entries) > self.max_entries:
            del self._entries[: len(self._entries) - self.max_entries]
            self.base += 1
        else:
            self.offset += 1
        self.cursor = len(self._entries) - 1 if self._entries else None

    def get(self, num: int) -> HistoryEntry | None:
        """The entry numbered ``num`` counting from ``base``, or None."""
        index = num - self.base
        if num < self.base or index >= len(self._entries):
            return None
        return self._entries[index]

    def remove(self, index: int) -> HistoryEntry:
        """Take out and return the entry at ``index`` (0 is the oldest)."""
        if not 0 <= index < len(self._entries):
            raise IndexError(f"no history entry at {index}")
        entry = self._entries.pop(index)
        if self.cursor is not None:
            if index < self.cursor:
                self.cursor -= 1
            if not self._entries:
                self.cursor = None
            elif self.cursor >= len(self._entries):
                self.cursor = len(self._entries) - 1
        return entry

    def replace(self, index: int, line: str, data: Any) -> HistoryEntry:
        """Replace the entry at ``index`` and return the one it held before."""
        if not 0 <= index < len(self._entries):
            raise IndexError(f"no history entry at {index}")
        old = self._entries[index]
        self._entries[index] = HistoryEntry(line, data)
        return old

    def clear(self) -> None:
        """Delete every entry."""
        self._entries.clear()
        self.offset = 0
        self.cursor = None

    # -- size limit ----------------------------------------------------------

    def stifle(self, limit: int) -> None:
        """Keep at most ``limit`` entries, dropping the oldest."""
        if limit < 0:
            raise ValueError("history limit cannot be negative")
        self.max_entries = limit
        if len(self._entries) > limit:
            self.base = len(self._entries) - limit
        while len(self._entries) > limit:
            self.remove(0)

    def unstifle(self) -> int:
        """Lift the size limit and return the one that was in force."""
        previous = self.max_entries
        self.max_entries = UNLIMITED
        return previous

    def is_stifled(self) -> bool:
        """Whether a size limit is in force."""
        return self.max_entries != UNLIMITED

    # -- navigation ----------------------------------------------------------

    def set_pos(self, pos: int) -> bool:
        """Move ``offset`` to ``pos``; False when it is out of range."""
        if pos >= len(self._entries) or pos < 0:
            return False
        self.offset = pos
        return True

    def current(self) -> HistoryEntry | None:
        """The entry at ``offset``, or None past the end."""
        if 0 <= self.offset < len(self._entries):
            return self._entries[self.offset]
        return None

    def previous(self) -> HistoryEntry | None:
        """Step back to the older entry and return it."""
        if self.offset == 0 or not self._entries:
            return None
        self.offset -= 1
        return self.current()

    def next(self) -> HistoryEntry | None:
        """Step forward to the newer entry and return it."""
        if self.offset >= len(self._entries) or not self._entries:
            return None
        self.offset += 1
        return self.current()

    # -- searching -----------------------------------------------------------

    def _walk(self, start: int, direction: int) -> Iterator[int]:
        step = -1 if direction < 0 else 1
        index = start
        while 0 <= index < len(self._entries):
            yield index
            index += step

    def search(self, text: str, direction: int) -> int | None:
        """Find ``text`` from the cursor on, towards older entries if
        ``direction`` is negative, else towards newer ones.

        Leaves the cursor on the matching entry and returns where in its line
        the match begins; returns None and keeps the cursor when nothing matches.
        """
        if self.cursor is None:
            return None
        for index in self._walk(self.cursor, direction):
            found = self._entries[index].line.find(text)
            if found >= 0:
                self.cursor = index
                return found
        return None

    def search_prefix(self, text: str, direction: int) -> bool:
        """Move the cursor to the first entry starting with ``text``."""
        if self.cursor is None:
            return False
        for index in self._walk(self.cursor, direction):
            if self._entries[index].line.startswith(text):
                self.cursor = index
                return True
        return False

    def search_pos(self, text: str, direction: int, pos: int) -> int | None:
        """Find ``text`` starting at entry ``abs(pos)``.

        The search goes towards older entries when ``pos`` is not positive and
        towards newer ones otherwise; ``direction`` is accepted for
        compatibility and does not steer it.  Returns the index of the entry
        found, or None.
        """
        start = abs(pos)
        step = 1 if pos > 0 else -1
        if not self.set_pos(start):
            return None
        for index in self._walk(start, step):
            if text in self._entries[index].line:
                return index
        return None

    # -- summaries -----------------------------------------------------------

    def total_bytes(self) -> int:
        """How many bytes the lines take, encoded as UTF-8."""
        return sum(len(entry.line.encode("utf-8")) for entry in self._entries)

    def entries(self) -> list[HistoryEntry]:
        """All entries, oldest first."""
        return list(self._entries)

    # -- files ----------------------------------------------------------------

    def read(self, path: str | os.PathLike[str] | None = None) -> None:
        """Add the lines stored in a history file."""
        text = _resolve(path).read_text(encoding="utf-8")
        lines = text.split("\n")
        if lines and lines[-1] == "":
            lines.pop()
        for line in lines:
            self.add(_decode(line))

    def write(self, path: str | os.PathLike[str] | None = None) -> None:
        """Store every entry in a history file, replacing its contents."""
        with _resolve(path).open("w", encoding="utf-8", newline="\n") as out:
            for entry in self._entries:
                out.write(_encode(entry.line) + "\n")

    def append_to(self, count: int, path: str | os.PathLike[str] | None = None) -> None:
        """Append the newest ``count`` entries to a history file."""
        if count < 0:
            raise ValueError("count cannot be negative")
        chosen = self._entries[len(self._entries) - count:] if count else []
        with _resolve(path).open("a", encoding="utf-8", newline="\n") as out:
            for entry in chosen:
                out.write(_encode(entry.line) + "\n")


def truncate_file(path: str | os.PathLike[str] | None, nlines: int) -> None:
    """Cut a history file down to its last ``nlines`` lines.

    A file that already holds no more lines than that is left alone.
    """
    if nlines < 1:
        raise ValueError("nlines must be at least 1")
    target = _resolve(path)
    data = target.read_bytes()
    lines = data.splitlines(keepends=True)
    if len(lines) <= nlines:
        return
    target.write_bytes(b"".join(lines[-nlines:]))