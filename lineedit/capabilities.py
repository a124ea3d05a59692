"""Terminal capability tables, capability flags and arrow-key bindings."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Iterator

__all__ = [
    "TermFlag",
    "CapabilityError",
    "Capabilities",
    "ArrowBinding",
    "ArrowKeys",
    "tgoto",
    "count_parameters",
    "STRING_CAPABILITIES",
    "VALUE_CAPABILITIES",
]


class TermFlag(enum.IntFlag):
    """What the terminal is able to do."""

    NONE = 0
    CAN_INSERT = 0x001
    CAN_DELETE = 0x002
    CAN_CEOL = 0x004
    CAN_TAB = 0x008
    CAN_ME = 0x010
    CAN_UP = 0x020
    HAS_META = 0x040
    HAS_AUTO_MARGINS = 0x080
    HAS_MAGIC_MARGINS = 0x100


class CapabilityError(ValueError):
    """An unknown capability or a value it cannot take."""


# Ordered as the terminal description lists them: name -> long name.
STRING_CAPABILITIES: dict[str, str] = {
    "al": "add new blank line",
    "bl": "audible bell",
    "cd": "clear to bottom",
    "ce": "clear to end of line",
    "ch": "cursor to horiz pos",
    "cl": "clear screen",
    "dc": "delete a character",
    "dl": "delete a line",
    "dm": "start delete mode",
    "ed": "end delete mode",
    "ei": "end insert mode",
    "fs": "cursor from status line",
    "ho": "home cursor",
    "ic": "insert character",
    "im": "start insert mode",
    "ip": "insert padding",
    "kd": "sends cursor down",
    "kl": "sends cursor left",
    "kr": "sends cursor right",
    "ku": "sends cursor up",
    "md": "begin bold",
    "me": "end attributes",
    "nd": "non destructive space",
    "se": "end standout",
    "so": "begin standout",
    "ts": "cursor to status line",
    "up": "cursor up one",
    "us": "begin underline",
    "ue": "end underline",
    "vb": "visible bell",
    "DC": "delete multiple chars",
    "DO": "cursor down multiple",
    "IC": "insert multiple chars",
    "LE": "cursor left multiple",
    "RI": "cursor right multiple",
    "UP": "cursor up multiple",
    "kh": "send cursor home",
    "@7": "send cursor end",
    "kD": "send cursor delete",
}

VALUE_CAPABILITIES: dict[str, str] = {
    "am": "has automatic margins",
    "pt": "has physical tabs",
    "li": "Number of lines",
    "co": "Number of columns",
    "km": "Has meta key",
    "xt": "Tab chars destructive",
    "xn": "newline ignored at right margin",
    "MT": "Has meta key",
}

_BOOLEANS = frozenset({"pt", "km", "am", "xn"})
_NAME_LIMIT = 7  # capability names and values are cut to this many characters


def _parse_long(text: str) -> int:
    """Parse an integer the way strtol does, requiring the whole text be used."""
    if text == "":
        return 0
    match = re.fullmatch(r"[ \t\n\v\f\r]*([+-]?\d+)", text)
    if match is None:
        raise CapabilityError(f"Bad value `{text}'.")
    return int(match.group(1))


def _visual(text: str) -> str:
    """Render control characters in caret notation."""
    parts = []
    for ch in text:
        code = ord(ch)
        if code < 0x20:
            parts.append("^" + chr(code + 0x40))
        elif code == 0x7F:
            parts.append("^?")
        else:
            parts.append(ch)
    return "".join(parts)


class Capabilities:
    """String and numeric capabilities of one terminal, with derived flags."""

    def __init__(
        self,
        strings: dict[str, str | None] | None = None,
        values: dict[str, int] | None = None,
        name: str = "dumb",
        tabs: bool = True,
    ) -> None:
        self.name = name
        self.tabs = tabs
        self._strings: dict[str, str | None] = dict.fromkeys(STRING_CAPABILITIES)
        self._values: dict[str, int] = dict.fromkeys(VALUE_CAPABILITIES, 0)
        for key, text in (strings or {}).items():
            if key not in self._strings:
                raise CapabilityError(f"Bad capability `{key}'.")
            self._strings[key] = text or None
        for key, number in (values or {}).items():
            if key not in self._values:
                raise CapabilityError(f"Bad capability `{key}'.")
            self._values[key] = int(number)
        if self._values["co"] < 2:
            self._values["co"] = 80
        if self._values["li"] < 1:
            self._values["li"] = 24
        self.flags = TermFlag.NONE
        self.update_flags()

    @classmethod
    def dumb(cls) -> "Capabilities":
        """Settings used when no description of the terminal is available."""
        return cls(values={"co": 80, "pt": 0, "km": 0, "li": 0, "xt": 0}, name="dumb")

    def string(self, name: str) -> str | None:
        """The string capability called ``name``, or None when it is unset."""
        if name not in self._strings:
            raise CapabilityError(f"Bad capability `{name}'.")
        return self._strings[name]

    def has(self, name: str) -> bool:
        """Whether the string capability ``name`` is set and non-empty."""
        return bool(self.string(name))

    def value(self, name: str) -> int:
        """The numeric or boolean capability called ``name``."""
        if name not in self._values:
            raise CapabilityError(f"Bad capability `{name}'.")
        return self._values[name]

    def update_flags(self) -> TermFlag:
        """Recompute the capability flags from the current tables."""
        has, val = self.has, self.value
        flags = TermFlag.NONE
        if self.tabs and val("pt") and not val("xt"):
            flags |= TermFlag.CAN_TAB
        if val("km") or val("MT"):
            flags |= TermFlag.HAS_META
        if has("ce"):
            flags |= TermFlag.CAN_CEOL
        if has("dc") or has("DC"):
            flags |= TermFlag.CAN_DELETE
        if has("im") or has("ic") or has("IC"):
            flags |= TermFlag.CAN_INSERT
        if has("up") or has("UP"):
            flags |= TermFlag.CAN_UP
        if val("am"):
            flags |= TermFlag.HAS_AUTO_MARGINS
        if val("xn"):
            flags |= TermFlag.HAS_MAGIC_MARGINS
        me = self._strings["me"]
        if me and self._strings["ue"] and me == self._strings["ue"]:
            flags |= TermFlag.CAN_ME
        if me and self._strings["se"] and me == self._strings["se"]:
            flags |= TermFlag.CAN_ME
        self.flags = flags
        return flags

    def settc(self, what: str, how: str) -> bool:
        """Set a capability from text; True when the screen size changed."""
        what = what[:_NAME_LIMIT]
        how = how[:_NAME_LIMIT]
        if what in self._strings:
            self._strings[what] = how or None
            self.update_flags()
            return False
        if what not in self._values:
            raise CapabilityError(f"Bad capability `{what}'.")
        if what in _BOOLEANS:
            if how == "yes":
                self._values[what] = 1
            elif how == "no":
                self._values[what] = 0
            else:
                raise CapabilityError(f"Bad value `{how}'.")
            self.update_flags()
            return False
        self._values[what] = _parse_long(how)
        return what in ("co", "li")

    def gettc(self, what: str) -> str | int | None:
        """Read a capability: strings as text, booleans as yes/no, else numbers."""
        if what in self._strings:
            return self._strings[what]
        if what not in self._values:
            raise CapabilityError(f"Bad capability `{what}'.")
        if what in _BOOLEANS:
            return "yes" if self._values[what] else "no"
        return self._values[what]

    def describe(self) -> str:
        """A readable report of the terminal's characteristics."""
        flags = self.flags
        lines = [
            "\n\tYour terminal has the\n",
            "\tfollowing characteristics:\n\n",
            f"\tIt has {self._values['co']} columns and {self._values['li']} lines\n",
            f"\tIt has {'a' if flags & TermFlag.HAS_META else 'no'} meta key\n",
            f"\tIt can{' ' if flags & TermFlag.CAN_TAB else 'not '}use tabs\n",
        ]
        auto = bool(flags & TermFlag.HAS_AUTO_MARGINS)
        lines.append(f"\tIt {'has' if auto else 'does not have'} automatic margins\n")
        if auto:
            magic = bool(flags & TermFlag.HAS_MAGIC_MARGINS)
            lines.append(f"\tIt {'has' if magic else 'does not have'} magic margins\n")
        for key, long_name in STRING_CAPABILITIES.items():
            text = self._strings[key]
            shown = _visual(text) if text else "(empty)"
            lines.append(f"\t{long_name:>25} ({key}) == {shown}\n")
        lines.append("\n")
        return "".join(lines)


@dataclass
class ArrowBinding:
    """A named function key, the capability that sends it and its command."""

    name: str
    key: str
    command: str | None


_DEFAULT_ARROWS = (
    ("down", "kd", "ed-next-history"),
    ("up", "ku", "ed-prev-history"),
    ("left", "kl", "ed-prev-char"),
    ("right", "kr", "ed-next-char"),
    ("home", "kh", "ed-move-to-beg"),
    ("end", "@7", "ed-move-to-end"),
    ("delete", "kD", "ed-delete-next-char"),
)


class ArrowKeys:
    """The symbolic function-key bindings."""

    def __init__(self) -> None:
        self._keys = {
            name: ArrowBinding(name, key, command) for name, key, command in _DEFAULT_ARROWS
        }

    def __iter__(self) -> Iterator[ArrowBinding]:
        return iter(self._keys.values())

    def __len__(self) -> int:
        return len(self._keys)

    def __getitem__(self, name: str) -> ArrowBinding:
        try:
            return self._keys[name]
        except KeyError:
            raise CapabilityError(f"Unknown arrow key `{name}'.") from None

    def set(self, name: str, command: str) -> None:
        """Bind the named key to ``command``."""
        self[name].command = command

    def clear(self, name: str) -> None:
        """Leave the named key unbound."""
        self[name].command = None

    def listing(self, name: str = "") -> list[ArrowBinding]:
        """Bound keys matching ``name``, or all bound keys when it is empty."""
        return [
            binding
            for binding in self._keys.values()
            if (not name or binding.name == name) and binding.command is not None
        ]


def tgoto(cap: str, col: int, row: int) -> str:
    """Expand the parameters of a termcap string; the row is consumed first."""
    args = [row, col]
    position = 0
    out: list[str] = []

    def current() -> int:
        if position >= len(args):
            raise CapabilityError(f"Too many parameters in `{cap}'.")
        return args[position]

    chars = iter(cap)
    for ch in chars:
        if ch != "%":
            out.append(ch)
            continue
        code = next(chars, None)
        if code is None:
            raise CapabilityError(f"Truncated escape in `{cap}'.")
        if code == "%":
            out.append("%")
        elif code in "d23.+":
            number = current()
            if code == "d":
                out.append(str(number))
            elif code == "2":
                out.append(f"{number:02d}")
            elif code == "3":
                out.append(f"{number:03d}")
            elif code == ".":
                out.append(chr(number))
            else:
                offset = next(chars, None)
                if offset is None:
                    raise CapabilityError(f"Truncated escape in `{cap}'.")
                out.append(chr(number + ord(offset)))
            position += 1
        elif code == ">":
            limit, add = next(chars, None), next(chars, None)
            if limit is None or add is None:
                raise CapabilityError(f"Truncated escape in `{cap}'.")
            if current() > ord(limit):
                args[position] += ord(add)
        elif code == "r":
            args.reverse()
        elif code == "i":
            args = [value + 1 for value in args]
        elif code == "n":
            args = [value ^ 0o140 for value in args]
        elif code == "B":
            number = current()
            args[position] = 16 * (number // 10) + number % 10
        elif code == "D":
            number = current()
            args[position] = number - 2 * (number % 16)
        else:
            raise CapabilityError(f"Unknown escape `%{code}' in `{cap}'.")
    return "".join(out)


def count_parameters(cap: str) -> int:
    """How many values the termcap string ``cap`` needs."""
    needed = 0
    chars = iter(cap)
    for ch in chars:
        if ch == "%" and next(chars, "") in ("d", "2", "3", ".", "+"):
            needed += 1
    return needed