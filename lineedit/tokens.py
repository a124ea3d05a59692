"""Shell-like word splitting, word selection, substitution and completion lists."""

from __future__ import annotations

from typing import Callable, Union

__all__ = ["tokenize", "arg_extract", "substitute", "completion_matches"]

_SPACE = " \t\n\v\f\r"
_BREAKS = "()<>;&|$"
_QUOTES = "'`\""

WordIndex = Union[int, str]


def tokenize(text: str) -> list[str]:
    """Split ``text`` into words roughly the way a shell would.

    Quotes and backslash escapes are kept in the words.  The characters
    ``()<>;&|$`` end a word and are themselves dropped.
    """
    tokens: list[str] = []
    delim = ""
    pos = 0
    size = len(text)
    while pos < size:
        while pos < size and text[pos] in _SPACE:
            pos += 1
        start = pos
        while pos < size:
            ch = text[pos]
            if ch == "\\":
                if pos + 1 < size:
                    pos += 1
            elif delim and ch == delim:
                delim = ""
            elif not delim and (ch in _SPACE or ch in _BREAKS):
                break
            elif not delim and ch in _QUOTES:
                delim = ch
            pos += 1
        tokens.append(text[start:pos])
        if pos < size:
            pos += 1
    return tokens


def arg_extract(start: WordIndex, end: WordIndex, text: str) -> str:
    """Return words ``start`` to ``end`` of ``text`` joined by single spaces.

    ``"$"`` stands for the last word.  A negative ``end`` counts back from the
    end (-1 is the last word); a negative ``start`` means the same as ``end``.
    Raises ValueError when the range does not fit the words.
    """
    words = tokenize(text)
    if not words:
        raise ValueError("Bad word specifier: no words")
    last = len(words) - 1
    if start == "$":
        start = last
    if end == "$":
        end = last
    if not isinstance(start, int) or not isinstance(end, int):
        raise ValueError("Bad word specifier")
    if end < 0:
        end = last + end + 1
    if start < 0:
        start = end
    if start < 0 or end < 0 or start > last or end > last or start > end:
        raise ValueError("Bad word specifier")
    return " ".join(words[start:end + 1])


def substitute(text: str, what: str, with_: str, globally: bool) -> str:
    """Replace the first occurrence of ``what`` in ``text``, or all of them.

    An empty ``what`` leaves the text unchanged.
    """
    if not what:
        return text
    return text.replace(what, with_) if globally else text.replace(what, with_, 1)


def completion_matches(
    text: str, generator: Callable[[str, int], "str | None"]
) -> list[str] | None:
    """Collect the completions ``generator`` offers for ``text``.

    The generator is called with ``text`` and the number of matches found so
    far until it returns None.  The result starts with the longest common
    prefix of the matches, followed by the matches; with one match it holds
    that match twice.  Returns None when there is no match.
    """
    matches: list[str] = []
    while (match := generator(text, len(matches))) is not None:
        matches.append(match)
    if not matches:
        return None
    if len(matches) == 1:
        return [matches[0], matches[0]]
    matches.sort()
    shortest = min(
        _common_length(first, second) for first, second in zip(matches, matches[1:])
    )
    if shortest == 0 and text:
        head = text
    else:
        head = matches[0][:shortest]
    return [head, *matches]


def _common_length(first: str, second: str) -> int:
    length = 0
    for a, b in zip(first, second):
        if a != b:
            break
        length += 1
    return length