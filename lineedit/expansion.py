"""Csh-style history expansion: ``!!``, ``!n``, ``!prefix``, ``!?text?``,
word designators and modifiers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from .history import History
from .tokens import arg_extract, substitute

__all__ = ["HistoryExpansionError", "ExpansionResult", "HistoryExpander"]

_SPACE = " \t\n\v\f\r"
_DIGITS = "0123456789"
_DESIGNATORS = "^*$-0123456789"


class HistoryExpansionError(ValueError):
    """A history reference could not be expanded."""


@dataclass(frozen=True)
class ExpansionResult:
    """The expanded line and what happened to it.

    ``status`` is 0 when the line was left alone, 1 when it was expanded and
    2 when it should only be printed, not run.
    """

    text: str
    status: int

    @property
    def changed(self) -> bool:
        """Whether expansion took place."""
        return self.status > 0

    @property
    def print_only(self) -> bool:
        """Whether the ``:p`` modifier asked for the line to be shown only."""
        return self.status == 2


class HistoryExpander:
    """Expands history references in a line against a :class:`History`."""

    def __init__(self, history: History) -> None:
        self.history = history
        self.expansion_char = "!"
        self.subst_char = "^"
        self.no_expand_chars = " \t\n=("
        self.inhibit: Optional[Callable[[str, int], bool]] = None
        self.last_search_pattern: Optional[str] = None
        self.last_search_match: Optional[str] = None
        self._from: Optional[str] = None
        self._to: Optional[str] = None

    # -- events ---------------------------------------------------------------

    def _newest(self) -> str:
        entries = self.history.entries()
        if not entries:
            raise HistoryExpansionError("No previous command")
        return entries[-1].line

    def get_event(self, command: str, index: int = 0, qchar: str = "") -> tuple[str, int]:
        """Resolve the event reference starting at ``command[index]``.

        Returns the line it refers to and the index just past the reference.
        ``qchar`` is a quote character that also ends a prefix reference.
        """
        size = len(command)
        idx = index
        if idx >= size or command[idx] != self.expansion_char:
            raise HistoryExpansionError("Not a history reference")
        idx += 1
        nxt = command[idx] if idx < size else ""

        if nxt == self.expansion_char or nxt == "":
            line = self._newest()
            return line, idx + 1 if nxt else idx

        negative = False
        if nxt == "-":
            negative = True
            idx += 1

        if idx < size and command[idx] in _DIGITS:
            num = 0
            while idx < size and command[idx] in _DIGITS:
                num = num * 10 + int(command[idx])
                idx += 1
            if negative:
                num = self.history.length - num + self.history.base
            entry = self.history.get(num)
            if entry is None:
                raise HistoryExpansionError(f"{num}: Event not found")
            return entry.line, idx

        sub = False
        if idx < size and command[idx] == "?":
            sub = True
            idx += 1
        begin = idx
        while idx < size:
            ch = command[idx]
            if ch == "\n":
                break
            if sub and ch == "?":
                break
            if not sub and (ch in ":  \t" or (qchar and ch == qchar)):
                break
            idx += 1
        length = idx - begin
        if sub and idx < size and command[idx] == "?":
            idx += 1
        if sub and length == 0 and self.last_search_pattern:
            pattern = self.last_search_pattern
        elif length == 0:
            raise HistoryExpansionError("Empty event specifier")
        else:
            pattern = command[begin:begin + length]

        saved = self.history.cursor
        if saved is None:
            raise HistoryExpansionError(f"{pattern}: Event not found")

        if sub:
            self.last_search_pattern = pattern
            found = self.history.search(pattern, -1) is not None
        else:
            found = self.history.search_prefix(pattern, -1)

        if not found:
            entries = self.history.entries()
            self.history.cursor = len(entries) - 1 if entries else None
            raise HistoryExpansionError(f"{pattern}: Event not found")

        if sub and length:
            self.last_search_match = pattern

        line = self.history.entries()[self.history.cursor].line
        self.history.cursor = saved
        return line, idx

    # -- one reference ---------------------------------------------------------

    def _expand_command(self, s: str, offs: int, cmdlen: int) -> tuple[str, int]:
        size = len(s)
        nxt = s[offs + 1] if offs + 1 < size else ""
        before: Optional[str] = None
        event: Optional[str] = None

        if nxt == "" or nxt in ":^*$":
            # "!:" is short for "!!:"; "!^", "!*" and "!$" for "!!:^" and so on.
            event, _ = self.get_event(self.expansion_char * 2 + "0", 0, "")
            idx = 1 if nxt == ":" else 0
            has_mods = True
        elif nxt == "#":
            before = s[:offs]
            idx = 1
            has_mods = offs + idx < size and s[offs + idx] == ":"
        else:
            qchar = '"' if offs > 0 and s[offs - 1] == '"' else ""
            event, idx = self.get_event(s[offs:], 0, qchar)
            has_mods = offs + idx < size and s[offs + idx] == ":"

        source = before if before is not None else event
        assert source is not None
        if not has_mods:
            return source, 1

        pos = offs + idx + 1
        ch = s[pos] if pos < size else ""
        if ch == "%":
            tmp = self.last_search_match or ""
        elif ch == "" or ch in _DESIGNATORS:
            start = end = -1
            if ch == "^":
                start = end = 1
                pos += 1
            elif ch == "$":
                pos += 1
            elif ch == "*":
                start = 1
                pos += 1
            elif ch == "-" or ch in _DIGITS:
                start = 0
                while pos < size and s[pos] in _DIGITS:
                    start = start * 10 + int(s[pos])
                    pos += 1
                if pos < size and s[pos] == "-":
                    following = s[pos + 1] if pos + 1 < size else ""
                    if following and following in _DIGITS:
                        pos += 1
                        end = 0
                        while pos < size and s[pos] in _DIGITS:
                            end = end * 10 + int(s[pos])
                            pos += 1
                    elif following == "$":
                        pos += 2
                        end = -1
                    else:
                        pos += 1
                        end = -2
                elif pos < size and s[pos] == "*":
                    end = -1
                    pos += 1
                else:
                    end = start
            try:
                tmp = arg_extract(start, end, source)
            except ValueError:
                raise HistoryExpansionError(
                    f"{s[offs + idx:]}: Bad word specifier"
                ) from None
        else:
            tmp = source

        if pos >= size or pos - offs >= cmdlen:
            return tmp, 1

        print_only = False
        global_sub = False
        while pos < size:
            ch = s[pos]
            if ch == "h":
                cut = tmp.rfind("/")
                if cut >= 0:
                    tmp = tmp[:cut]
            elif ch == "t":
                cut = tmp.rfind("/")
                if cut >= 0:
                    tmp = tmp[cut + 1:]
            elif ch == "r":
                cut = tmp.rfind(".")
                if cut >= 0:
                    tmp = tmp[:cut]
            elif ch == "e":
                cut = tmp.rfind(".")
                if cut >= 0:
                    tmp = tmp[cut + 1:]
            elif ch == "p":
                print_only = True
            elif ch == "g":
                global_sub = True
            elif ch == "s" or (
                ch == "&" and self._from is not None and self._to is not None
            ):
                pos = self._parse_substitution(s, pos)
                tmp = substitute(tmp, self._from or "", self._to or "", global_sub)
                global_sub = False
                # The closing delimiter is looked at as a modifier next.
                continue
            pos += 1
        return tmp, 2 if print_only else 1

    def _parse_substitution(self, s: str, pos: int) -> int:
        """Read ``s/from/to/`` at ``pos``; return the index of the closing delimiter."""
        size = len(s)
        pos += 1
        if pos >= size:
            raise HistoryExpansionError("Missing substitution delimiter")
        delim = s[pos]
        pos += 1
        if pos >= size:
            raise HistoryExpansionError("Missing substitution pattern")

        what: list[str] = []
        while pos < size and s[pos] != delim:
            if s[pos] == "\\" and pos + 1 < size and s[pos + 1] == delim:
                pos += 1
            what.append(s[pos])
            pos += 1
        if not what or pos >= size:
            self._from = None
            raise HistoryExpansionError("Bad substitution pattern")
        pos += 1
        if pos >= size:
            self._from = None
            raise HistoryExpansionError("Missing substitution replacement")
        self._from = "".join(what)

        replacement: list[str] = []
        while pos < size and s[pos] != delim:
            if s[pos] == "&":
                replacement.append(self._from)
                pos += 1
                continue
            if s[pos] == "\\" and pos + 1 < size and s[pos + 1] in (delim, "&"):
                pos += 1
            replacement.append(s[pos])
            pos += 1
        if pos >= size:
            self._to = None
            raise HistoryExpansionError("Unterminated substitution")
        self._to = "".join(replacement)
        return pos

    # -- whole lines -------------------------------------------------------------

    def _expandable(self, s: str, j: int) -> bool:
        if s[j] != self.expansion_char:
            return False
        if j + 1 >= len(s) or s[j + 1] in self.no_expand_chars:
            return False
        return self.inhibit is None or not self.inhibit(s, j)

    def expand(self, text: str) -> ExpansionResult:
        """Expand every history reference in ``text``.

        Raises HistoryExpansionError when a reference cannot be resolved.
        A line marked print-only with ``:p`` is added to the history.
        """
        char = self.expansion_char
        if not char:
            return ExpansionResult(text, 0)

        s = text
        if s.startswith(self.subst_char):
            # "^old^new^" means "!!:s^old^new^".
            s = char * 2 + ":s" + s

        pieces: list[str] = []
        status = 0
        i = 0
        while i < len(s):
            start = j = i
            qchar = ""
            first_pass = True
            while True:
                while j < len(s):
                    if s[j] == "\\" and j + 1 < len(s) and s[j + 1] == char:
                        s = s[:j] + s[j + 1:]
                        j += 1
                        continue
                    if not first_pass and (s[j] in _SPACE or (qchar and s[j] == qchar)):
                        break
                    if self._expandable(s, j):
                        break
                    j += 1
                if j < len(s) and first_pass:
                    i = j
                    qchar = '"' if j > 0 and s[j - 1] == '"' else ""
                    j += 1
                    if j < len(s) and s[j] == char:
                        j += 1
                    first_pass = False
                    continue
                break

            pieces.append(s[start:i])
            if i >= len(s) or s[i] != char:
                pieces.append(s[i:j])
                status = 0 if start == 0 else 1
                break
            piece, status = self._expand_command(s, i, j - i)
            pieces.append(piece)
            i = j

        output = "".join(pieces)
        if status == 2:
            self.history.add(output)
        return ExpansionResult(output, status)