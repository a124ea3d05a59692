# lineedit

Pieces for building an interactive line editor in pure Python, with no
dependencies outside the standard library.

## Modules

- **`lineedit.capabilities`**
  - `Capabilities`: the termcap string capabilities (`cl`, `ce`, `up`, `DC`,
    `IC`, ...) and numeric/boolean ones (`co`, `li`, `am`, `xn`, `pt`, `km`,
    ...) of one terminal. `Capabilities.dumb()` gives an 80-column terminal
    with no capability strings. `string()`, `has()` and `value()` read
    entries; `settc(what, how)` sets one from text (booleans take `yes` or
    `no`) and returns True when `co` or `li` changed; `gettc(what)` reads
    one back; `describe()` returns a readable report.
  - `TermFlag`: the flags derived from the tables by `update_flags()`
    (can insert, delete, clear to end of line, tab, move up; has meta key,
    automatic margins, magic margins).
  - `ArrowKeys` / `ArrowBinding`: the named keys `up`, `down`, `left`,
    `right`, `home`, `end` and `delete` with the command each is bound to;
    `set()`, `clear()` and `listing()`.
  - `tgoto(cap, col, row)` expands termcap `%` parameters;
    `count_parameters(cap)` says how many values a string needs.
  - `CapabilityError` is raised for unknown capabilities and bad values.
- **`lineedit.screen`**: `Screen(caps, out)` writes to a text stream and
  keeps the cursor position and a shadow copy of the display. It chooses
  the escape sequences to use for `move_to_line`, `move_to_char`,
  `overwrite`, `insert_write`, `delete_chars`, `clear_eol`, `clear_screen`
  and `beep`, handles automatic and magic margins when writing past the
  right edge, and resizes with `change_size(lines, columns)`.
- **`lineedit.echotc`**: `echotc(screen, args)` writes a capability with its
  parameters filled in. `tabs`, `meta`, `xn`, `am`, `baud`, `rows`, `lines`
  and `cols` print a report instead. An optional leading `-v` collects
  warnings, which are returned as a list; problems raise `EchoError`.
- **`lineedit.history`**: `History` keeps lines oldest first as
  `HistoryEntry` objects. It supports `add`, `get` (numbered from `base`),
  `remove`, `replace`, `clear`, size limits (`stifle`, `unstifle`,
  `is_stifled`), navigation (`set_pos`, `current`, `previous`, `next`),
  searching (`search`, `search_prefix`, `search_pos`), `total_bytes` and
  `entries`. `read`, `write` and `append_to` use one line per entry, with
  backslashes and newlines escaped; the default file is `~/.history`.
  `truncate_file(path, nlines)` keeps only the last lines of a file.
- **`lineedit.tokens`**: `tokenize` splits a line into shell-like words,
  `arg_extract(start, end, text)` picks a range of them (`"$"` is the last
  word), `substitute` replaces the first or every occurrence, and
  `completion_matches(text, generator)` gathers completions headed by their
  common prefix.
- **`lineedit.expansion`**: `HistoryExpander(history).expand(line)` handles
  `!!`, `!n`, `!-n`, `!prefix`, `!?text?`, `!#`, `^old^new^`, word
  designators (`:0`, `:n`, `:n-m`, `^`, `$`, `*`, `%`) and the modifiers
  `h`, `t`, `r`, `e`, `p`, `g`, `s/old/new/` and `&`. It returns an
  `ExpansionResult` whose `status` is 0 (unchanged), 1 (expanded) or 2
  (print only; the line is also added to the history). Unresolvable
  references raise `HistoryExpansionError`.

## Example

```python
from lineedit.history import History
from lineedit.expansion import HistoryExpander

history = History()
history.add("ls -l /tmp/notes.txt")

expander = HistoryExpander(history)
result = expander.expand("cat !$")
print(result.text)    # cat /tmp/notes.txt
print(result.status)  # 1
```

```python
import io
from lineedit.capabilities import Capabilities
from lineedit.screen import Screen

out = io.StringIO()
screen = Screen(Capabilities.dumb(), out)
screen.overwrite("hello")
screen.move_to_char(0)
screen.flush()
print(repr(out.getvalue()))  # 'hello\r'
```

## What it does not do

The package does not read keys or edit a line interactively, does not look
terminals up in a termcap or terminfo database (capabilities are given to
`Capabilities` directly), does not redraw an edited line, handle signals or
show completion lists. It provides no command-line program.

## Installation and tests

```
pip install .
pip install .[test]
pytest
```