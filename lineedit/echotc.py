"""The ``echotc`` command: print a terminal capability, expanding parameters."""

from __future__ import annotations

import re

from .capabilities import STRING_CAPABILITIES, CapabilityError, TermFlag, tgoto
from .screen import Screen

__all__ = ["EchoError", "echotc"]

_NUMBER = re.compile(r"[ \t\n\v\f\r]*([+-]?\d+)")
_PARAMETER_CODES = frozenset("d23.+")
_PLAIN_CODES = frozenset("%>irnBD")


class EchoError(ValueError):
    """The capability is unknown or the arguments do not fit it."""


def _yes_no(flag: object) -> str:
    return "yes" if flag else "no"


def _present(args: list[str], index: int) -> bool:
    """Whether a non-empty argument stands at ``index``."""
    return index < len(args) and args[index] != ""


def _parse_count(text: str, what: str) -> int:
    """Parse a non-negative whole number, rejecting trailing text."""
    match = _NUMBER.fullmatch(text)
    if match is None or int(match.group(1)) < 0:
        raise EchoError(f"echotc: Bad value `{text}' for {what}.")
    return int(match.group(1))


def _scan(cap: str) -> tuple[int, list[str]]:
    """Count the values ``cap`` needs and collect the unknown escapes in it."""
    needed = 0
    unknown: list[str] = []
    chars = iter(cap)
    for ch in chars:
        if ch != "%":
            continue
        code = next(chars, "")
        if code in _PARAMETER_CODES:
            needed += 1
        elif code not in _PLAIN_CODES:
            unknown.append(code)
    return needed, unknown


def _expand(cap: str, col: int, row: int) -> str:
    try:
        return tgoto(cap, col, row)
    except CapabilityError as exc:
        raise EchoError(f"echotc: {exc}") from exc


def echotc(screen: Screen, args: list[str]) -> list[str]:
    """Write the capability named in ``args`` to the screen's output.

    ``args`` holds an optional ``-v`` or ``-s`` flag, the capability name and
    the values it needs.  Returns the warnings collected in verbose mode.
    Raises EchoError when the capability or its arguments are wrong.
    """
    args = list(args)
    if not args:
        raise EchoError("echotc: Missing capability name.")
    verbose = False
    if args[0].startswith("-"):
        option = args[0][1:2]
        verbose = option == "v"
        args = args[1:]
    if not _present(args, 0):
        return []

    caps = screen.caps
    out = screen.out
    name = args[0]
    flags = caps.flags
    reports = {
        "tabs": lambda: _yes_no(flags & TermFlag.CAN_TAB),
        "meta": lambda: _yes_no(caps.value("km")),
        "xn": lambda: _yes_no(flags & TermFlag.HAS_MAGIC_MARGINS),
        "am": lambda: _yes_no(flags & TermFlag.HAS_AUTO_MARGINS),
        "baud": lambda: str(int(getattr(screen, "speed", 0))),
        "rows": lambda: str(caps.value("li")),
        "lines": lambda: str(caps.value("li")),
        "cols": lambda: str(caps.value("co")),
    }
    if name in reports:
        out.write(reports[name]() + "\n")
        return []

    cap = caps.string(name) if name in STRING_CAPABILITIES else None
    if not cap:
        raise EchoError(f"echotc: Termcap parameter `{name}' not found.")

    needed, unknown = _scan(cap)
    warnings: list[str] = []
    if verbose:
        warnings.extend(
            f"echotc: Warning: unknown termcap % `{code}'." for code in unknown
        )

    if needed == 0:
        if _present(args, 1):
            raise EchoError(f"echotc: Warning: Extra argument `{args[1]}'.")
        screen._tputs(cap)
        return warnings

    if needed == 1:
        if not _present(args, 1):
            raise EchoError("echotc: Warning: Missing argument.")
        rows = _parse_count(args[1], "rows")
        if _present(args, 2):
            raise EchoError(f"echotc: Warning: Extra argument `{args[2]}'.")
        screen._tputs(_expand(cap, 0, rows))
        return warnings

    if needed > 2 and verbose:
        warnings.append(
            f"echotc: Warning: Too many required arguments ({needed})."
        )
    if not _present(args, 1):
        raise EchoError("echotc: Warning: Missing argument.")
    cols = _parse_count(args[1], "cols")
    if not _present(args, 2):
        raise EchoError("echotc: Warning: Missing argument.")
    rows = _parse_count(args[2], "rows")
    if _present(args, 3):
        raise EchoError(f"echotc: Warning: Extra argument `{args[3]}'.")
    screen._tputs(_expand(cap, cols, rows))
    return warnings