"""Cursor movement and character output on a terminal, with a shadow display."""

from __future__ import annotations

import re
from typing import Iterable, TextIO

from .capabilities import Capabilities, TermFlag, tgoto

__all__ = ["Screen", "FILL_CHAR", "EMPTY_CELL"]

# Placeholder for the extra columns a wide character covers.
FILL_CHAR = "\uffff"
# Marks the end of the written part of a display line.
EMPTY_CELL = "\0"

_PADDING = re.compile(r"^\d+(?:\.\d)?\*?")


class Screen:
    """Writes to a terminal and keeps track of where its cursor is."""

    def __init__(self, caps: Capabilities, out: TextIO) -> None:
        self.caps = caps
        self.out = out
        self.row = 0
        self.column = 0
        self.lines = 0
        self.columns = 0
        self.display: list[list[str]] = []
        self._rebuffer()

    # -- buffers -----------------------------------------------------------

    def _rebuffer(self) -> None:
        self.columns = self.caps.value("co")
        self.lines = self.caps.value("li")
        self.display = [
            [EMPTY_CELL] * (self.columns + 1) for _ in range(self.lines)
        ]

    @property
    def flags(self) -> TermFlag:
        return self.caps.flags

    # -- raw output --------------------------------------------------------

    def _tputs(self, cap: str | None) -> None:
        """Send a capability string, dropping any leading padding spec."""
        if cap:
            self.out.write(_PADDING.sub("", cap, count=1))

    def putc(self, ch: str) -> int:
        """Write one character; fill and NUL cells write nothing."""
        if ch in (FILL_CHAR, EMPTY_CELL, ""):
            return 0
        return self.out.write(ch)

    def flush(self) -> None:
        """Flush the output stream."""
        self.out.flush()

    # -- cursor movement ---------------------------------------------------

    def move_to_line(self, where: int) -> None:
        """Move the cursor to line ``where`` (the first line is 0)."""
        if where == self.row:
            return
        if where >= self.lines:
            return
        delta = where - self.row
        if delta > 0:
            for _ in range(delta):
                self.putc("\n")
            self.column = 0
        else:
            caps = self.caps
            if caps.has("UP") and (-delta > 1 or not caps.has("up")):
                self._tputs(tgoto(caps.string("UP"), -delta, -delta))
            elif caps.has("up"):
                for _ in range(-delta):
                    self._tputs(caps.string("up"))
        self.row = where

    def move_to_char(self, where: int) -> None:
        """Move the cursor to column ``where`` on the current line."""
        caps = self.caps
        while True:
            if where == self.column:
                return
            if where > self.columns:
                return
            if where == 0:
                self.putc("\r")
                self.column = 0
                return
            delta = where - self.column
            can_tab = bool(self.flags & TermFlag.CAN_TAB)
            if (delta < -4 or delta > 4) and caps.has("ch"):
                self._tputs(tgoto(caps.string("ch"), where, where))
            elif delta > 0:
                if delta > 4 and caps.has("RI"):
                    self._tputs(tgoto(caps.string("RI"), delta, delta))
                else:
                    tab_stop = where & ~0x7
                    if (
                        can_tab
                        and (self.column & 0o370) != tab_stop
                        and self.display[self.row][where & 0o370] != FILL_CHAR
                    ):
                        for _ in range(self.column & 0o370, tab_stop, 8):
                            self.putc("\t")
                        self.column = tab_stop
                    # Rewriting what is already there is usually cheapest.
                    self.overwrite(self.display[self.row][self.column:where])
            else:
                if -delta > 4 and caps.has("LE"):
                    self._tputs(tgoto(caps.string("LE"), -delta, -delta))
                else:
                    if can_tab:
                        restart = -delta > (where >> 3) + (where & 0o7)
                    else:
                        restart = -delta > where
                    if restart:
                        self.putc("\r")
                        self.column = 0
                        continue
                    for _ in range(-delta):
                        self.putc("\b")
            self.column = where
            return

    # -- writing -----------------------------------------------------------

    def overwrite(self, text: Iterable[str]) -> None:
        """Write characters over what is on screen, wrapping at the margin."""
        cells = list(text)
        if not cells or len(cells) > self.columns:
            return
        for ch in cells:
            self.putc(ch)
            self.column += 1
        if self.column < self.columns:
            return
        flags = self.flags
        if flags & TermFlag.HAS_AUTO_MARGINS:
            self.column = 0
            if self.row + 1 < self.lines:
                self.row += 1
            if flags & TermFlag.HAS_MAGIC_MARGINS:
                # Force the wrap so the terminal leaves its "magic" state.
                line = self.display[self.row]
                ch = line[self.column]
                if ch != EMPTY_CELL:
                    self.overwrite([ch])
                    while line[self.column] == FILL_CHAR:
                        self.column += 1
                else:
                    self.putc(" ")
                    self.column = 1
        else:
            self.column = self.columns - 1

    def delete_chars(self, num: int) -> None:
        """Delete ``num`` characters at the cursor."""
        caps = self.caps
        if num <= 0 or not self.flags & TermFlag.CAN_DELETE:
            return
        if num > self.columns:
            return
        if caps.has("DC") and (num > 1 or not caps.has("dc")):
            self._tputs(tgoto(caps.string("DC"), num, num))
            return
        if caps.has("dm"):
            self._tputs(caps.string("dm"))
        if caps.has("dc"):
            for _ in range(num):
                self._tputs(caps.string("dc"))
        if caps.has("ed"):
            self._tputs(caps.string("ed"))

    def insert_write(self, text: Iterable[str]) -> None:
        """Insert characters at the cursor, pushing the rest of the line right."""
        caps = self.caps
        cells = list(text)
        num = len(cells)
        if num <= 0 or not self.flags & TermFlag.CAN_INSERT:
            return
        if num > self.columns:
            return
        if caps.has("IC") and (num > 1 or not caps.has("ic")):
            self._tputs(tgoto(caps.string("IC"), num, num))
            self.overwrite(cells)
            return
        if caps.has("im") and caps.has("ei"):
            self._tputs(caps.string("im"))
            self.column += num
            for ch in cells:
                self.putc(ch)
            if caps.has("ip"):
                self._tputs(caps.string("ip"))
            self._tputs(caps.string("ei"))
            return
        for ch in cells:
            if caps.has("ic"):
                self._tputs(caps.string("ic"))
            self.putc(ch)
            self.column += 1
            if caps.has("ip"):
                self._tputs(caps.string("ip"))

    def clear_eol(self, num: int) -> None:
        """Clear to the end of the line; ``num`` characters need clearing."""
        if self.flags & TermFlag.CAN_CEOL and self.caps.has("ce"):
            self._tputs(self.caps.string("ce"))
            return
        for _ in range(num):
            self.putc(" ")
        self.column += num

    def clear_screen(self) -> None:
        """Clear the whole screen and home the cursor."""
        caps = self.caps
        if caps.has("cl"):
            self._tputs(caps.string("cl"))
        elif caps.has("ho") and caps.has("cd"):
            self._tputs(caps.string("ho"))
            self._tputs(caps.string("cd"))
        else:
            self.putc("\r")
            self.putc("\n")

    def beep(self) -> None:
        """Ring the bell the way the terminal wants."""
        if self.caps.has("bl"):
            self._tputs(self.caps.string("bl"))
        else:
            self.putc("\007")

    # -- size --------------------------------------------------------------

    def change_size(self, lines: int, columns: int) -> None:
        """Resize the display; the cursor position is kept."""
        row, column = self.row, self.column
        self.caps.settc("co", str(80 if columns < 2 else columns))
        self.caps.settc("li", str(24 if lines < 1 else lines))
        self._rebuffer()
        self.clear_display()
        self.row, self.column = row, column

    def clear_display(self) -> None:
        """Empty the display buffer so a new prompt starts fresh."""
        self.row = 0
        self.column = 0
        for line in self.display:
            line[0] = EMPTY_CELL