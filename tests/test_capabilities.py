import pytest

from lineedit.capabilities import (
    ArrowKeys,
    Capabilities,
    CapabilityError,
    TermFlag,
    count_parameters,
    tgoto,
)


def test_dumb_sizes_and_flags():
    caps = Capabilities.dumb()
    assert caps.value("co") == 80
    assert caps.value("li") == 24
    assert caps.flags == TermFlag.NONE
    assert all(caps.string(name) is None for name in ("cl", "ce", "up"))


def test_unknown_capability_raises():
    caps = Capabilities.dumb()
    with pytest.raises(CapabilityError):
        caps.string("zz")
    with pytest.raises(CapabilityError):
        caps.value("zz")
    with pytest.raises(CapabilityError):
        caps.settc("zz", "1")
    with pytest.raises(CapabilityError):
        caps.gettc("zz")


def test_settc_string_updates_flags():
    caps = Capabilities.dumb()
    assert caps.settc("ce", "\x1b[K") is False
    assert caps.has("ce")
    assert TermFlag.CAN_CEOL in caps.flags
    caps.settc("ce", "")
    assert not caps.has("ce")
    assert TermFlag.CAN_CEOL not in caps.flags


def test_flags_from_constructor():
    caps = Capabilities(
        strings={"DC": "x", "IC": "y", "UP": "z", "me": "m", "ue": "m"},
        values={"am": 1, "xn": 1, "pt": 1, "km": 1},
    )
    expected = (
        TermFlag.CAN_DELETE | TermFlag.CAN_INSERT | TermFlag.CAN_UP | TermFlag.CAN_ME
        | TermFlag.HAS_AUTO_MARGINS | TermFlag.HAS_MAGIC_MARGINS | TermFlag.CAN_TAB
        | TermFlag.HAS_META
    )
    assert caps.flags == expected


def test_tabs_need_tty_and_nondestructive():
    caps = Capabilities(values={"pt": 1, "xt": 1})
    assert TermFlag.CAN_TAB not in caps.flags
    caps = Capabilities(values={"pt": 1}, tabs=False)
    assert TermFlag.CAN_TAB not in caps.flags


def test_boolean_settc_and_gettc():
    caps = Capabilities.dumb()
    caps.settc("am", "yes")
    assert caps.gettc("am") == "yes"
    assert TermFlag.HAS_AUTO_MARGINS in caps.flags
    caps.settc("am", "no")
    assert caps.gettc("am") == "no"
    with pytest.raises(CapabilityError):
        caps.settc("am", "maybe")


def test_numeric_settc():
    caps = Capabilities.dumb()
    assert caps.settc("co", "132") is True
    assert caps.gettc("co") == 132
    assert caps.settc("xt", "1") is False
    assert caps.gettc("xt") == 1
    with pytest.raises(CapabilityError):
        caps.settc("li", "12x")


def test_gettc_string_round_trip():
    caps = Capabilities.dumb()
    caps.settc("cl", "abc")
    assert caps.gettc("cl") == "abc"


def test_describe_mentions_size_and_empty():
    caps = Capabilities.dumb()
    text = caps.describe()
    assert "It has 80 columns and 24 lines" in text
    assert "(cl) == (empty)" in text
    caps.settc("ce", "\x1b[K")
    assert "(ce) == ^[[K" in caps.describe()


def test_arrow_defaults_and_listing():
    arrows = ArrowKeys()
    names = [binding.name for binding in arrows.listing()]
    assert names == ["down", "up", "left", "right", "home", "end", "delete"]
    assert arrows["up"].command == "ed-prev-history"
    assert arrows["end"].key == "@7"


def test_arrow_set_and_clear():
    arrows = ArrowKeys()
    arrows.set("left", "ed-move-to-beg")
    assert [b.command for b in arrows.listing("left")] == ["ed-move-to-beg"]
    arrows.clear("left")
    assert arrows.listing("left") == []
    assert len(arrows.listing()) == len(arrows) - 1
    with pytest.raises(CapabilityError):
        arrows.set("nowhere", "x")
    with pytest.raises(CapabilityError):
        arrows.clear("nowhere")


def test_tgoto_uses_row_first():
    assert tgoto("%d,%d", 3, 8) == "8,3"
    assert tgoto("%r%d,%d", 3, 8) == "3,8"
    assert tgoto("%%", 1, 1) == "%"


def test_tgoto_increment():
    assert tgoto("\x1b[%i%d;%dH", 9, 4) == "\x1b[5;10H"


def test_tgoto_errors():
    with pytest.raises(CapabilityError):
        tgoto("%d%d%d", 1, 2)
    with pytest.raises(CapabilityError):
        tgoto("%q", 1, 2)


def test_count_parameters():
    assert count_parameters("\x1b[%i%d;%dH") == 2
    assert count_parameters("\x1b[K") == 0
    assert count_parameters("%%%r") == 0