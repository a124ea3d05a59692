import pytest

from lineedit.history import UNLIMITED, History, HistoryEntry, truncate_file


def make(*lines):
    history = History()
    for line in lines:
        history.add(line)
    return history


def test_add_and_get_numbered_from_base():
    history = make("ls", "cd /tmp", "make")
    assert history.base == 1
    assert history.get(1).line == "ls"
    assert history.get(3).line == "make"
    assert history.get(0) is None
    assert history.get(4) is None


def test_entries_oldest_first():
    history = make("a", "b", "c")
    assert [entry.line for entry in history.entries()] == ["a", "b", "c"]
    assert len(history) == 3
    assert history.length == 3


def test_remove_returns_entry_and_shrinks():
    history = make("a", "b", "c")
    removed = history.remove(1)
    assert removed.line == "b"
    assert [entry.line for entry in history] == ["a", "c"]
    with pytest.raises(IndexError):
        history.remove(5)


def test_replace_returns_old_entry():
    history = make("a", "b")
    old = history.replace(0, "z", {"k": 1})
    assert old == HistoryEntry("a", None)
    assert history.entries()[0] == HistoryEntry("z", {"k": 1})
    with pytest.raises(IndexError):
        history.replace(2, "x", None)


def test_clear_empties_everything():
    history = make("a", "b")
    history.clear()
    assert history.entries() == []
    assert history.offset == 0
    assert history.current() is None


def test_stifle_drops_oldest():
    history = make("1", "2", "3", "4", "5")
    history.stifle(3)
    assert [entry.line for entry in history] == ["3", "4", "5"]
    assert history.is_stifled()
    assert history.base == 5 - 3


def test_stifled_add_keeps_limit_and_moves_base():
    history = make("1", "2")
    history.stifle(2)
    base = history.base
    history.add("3")
    assert [entry.line for entry in history] == ["2", "3"]
    assert history.base == base + 1


def test_unstifle_returns_previous_limit():
    history = make("a")
    history.stifle(7)
    assert history.unstifle() == 7
    assert not history.is_stifled()
    assert history.max_entries == UNLIMITED


def test_stifle_rejects_negative():
    with pytest.raises(ValueError):
        History().stifle(-1)


def test_set_pos_bounds():
    history = make("a", "b")
    assert history.set_pos(1)
    assert history.current().line == "b"
    assert not history.set_pos(2)
    assert not history.set_pos(-1)
    assert history.offset == 1


def test_previous_and_next_walk():
    history = make("a", "b", "c")
    assert history.offset == len(history)
    assert history.previous().line == "c"
    assert history.previous().line == "b"
    assert history.next().line == "c"
    assert history.next() is None
    assert history.next() is None


def test_previous_at_start_is_none():
    history = make("a")
    history.set_pos(0)
    assert history.previous() is None


def test_search_older_moves_cursor():
    history = make("git status", "make all", "ls")
    assert history.search("make", -1) == 0
    assert history.entries()[history.cursor].line == "make all"
    assert history.search("status", -1) == 4
    assert history.cursor == 0


def test_search_miss_keeps_cursor():
    history = make("a", "b")
    before = history.cursor
    assert history.search("zzz", -1) is None
    assert history.cursor == before


def test_search_prefix():
    history = make("vim x", "ls", "vim y")
    history.cursor = 1
    assert history.search_prefix("vim", -1)
    assert history.entries()[history.cursor].line == "vim x"
    assert not history.search_prefix("nothing", 1)


def test_search_pos_directions():
    history = make("foo", "bar", "foo again")
    assert history.search_pos("foo", 0, 1) == 2
    assert history.search_pos("foo", 0, -1) == 0
    assert history.search_pos("qux", 0, 1) is None
    assert history.search_pos("foo", 0, 9) is None


def test_total_bytes_is_sum_of_lines():
    lines = ["abc", "héllo", ""]
    history = make(*lines)
    assert history.total_bytes() == sum(len(line.encode("utf-8")) for line in lines)


def test_write_read_round_trip(tmp_path):
    path = tmp_path / "hist"
    lines = ["plain", "with\nnewline", "back\\slash"]
    make(*lines).write(path)
    loaded = History()
    loaded.read(path)
    assert [entry.line for entry in loaded] == lines


def test_append_to_adds_newest(tmp_path):
    path = tmp_path / "hist"
    make("one").write(path)
    make("a", "b", "c").append_to(2, path)
    loaded = History()
    loaded.read(path)
    assert [entry.line for entry in loaded] == ["one", "b", "c"]


def test_read_missing_file_raises(tmp_path):
    with pytest.raises(OSError):
        History().read(tmp_path / "missing")


def test_truncate_keeps_last_lines(tmp_path):
    path = tmp_path / "hist"
    path.write_bytes(b"a\nb\nc\nd\n")
    truncate_file(path, 2)
    assert path.read_bytes() == b"c\nd\n"


def test_truncate_without_final_newline(tmp_path):
    path = tmp_path / "hist"
    path.write_bytes(b"a\nb\nc")
    truncate_file(path, 1)
    assert path.read_bytes() == b"c"


def test_truncate_short_file_unchanged(tmp_path):
    path = tmp_path / "hist"
    path.write_bytes(b"a\nb\n")
    truncate_file(path, 5)
    assert path.read_bytes() == b"a\nb\n"


def test_truncate_rejects_zero(tmp_path):
    path = tmp_path / "hist"
    path.write_bytes(b"a\n")
    with pytest.raises(ValueError):
        truncate_file(path, 0)