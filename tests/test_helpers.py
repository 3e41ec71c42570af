import datetime
import os

import pytest

from fuzzterm.util.helpers import (
    Slab,
    as_uint16,
    compare_versions,
    constrain,
    dur_within,
    graphemes,
    is_tty,
    make_slab,
    once,
    repeat_to_fill,
    run_once,
    runes_width,
    string_width,
    to_kebab_case,
    truncate,
)

MAX_INT32 = 2**31 - 1
MIN_INT32 = -(2**31)
MAX_UINT16 = 65535
MIN_INT16 = -32768


def test_constrain():
    assert constrain(-3, -1, 3) == -1
    assert constrain(2, -1, 3) == 2
    assert constrain(5, -1, 3) == 3
    assert constrain(0, MIN_INT32, MAX_INT32) == 0


def test_as_uint16():
    assert as_uint16(5) == 5
    assert as_uint16(-10) == 0
    assert as_uint16(MAX_UINT16) == MAX_UINT16
    assert as_uint16(MIN_INT32) == 0
    assert as_uint16(MIN_INT16) == 0
    assert as_uint16(MAX_UINT16 + 1) == MAX_UINT16


def test_dur_within():
    second = datetime.timedelta(seconds=1)
    assert dur_within(5, 1, 8) == 5
    assert dur_within(datetime.timedelta(0), second, 3 * second) == second
    assert dur_within(10 * second, datetime.timedelta(0), second) == second


def test_once():
    o = once(False)
    assert o() is False
    assert o() is True
    assert o() is True

    o = once(True)
    assert o() is True
    assert o() is False
    assert o() is False


def test_run_once():
    calls = []
    fn = run_once(lambda: calls.append(1))
    fn()
    fn()
    fn()
    assert calls == [1]


@pytest.mark.parametrize(
    "limit, width, overflow",
    [(100, 5, -1), (3, 4, 3), (0, 1, 0)],
)
def test_runes_width_hello(limit, width, overflow):
    assert runes_width("hello", 0, 0, limit) == (width, overflow)


@pytest.mark.parametrize("text, width", [("▶", 1), ("▶️", 2)])
def test_runes_width_emoji(text, width):
    assert runes_width(list(text), 0, 0, 100)[0] == width


def test_runes_width_tab():
    assert runes_width("a\tb", 0, 4, 100) == (5, -1)


def test_truncate():
    truncated, width = truncate("가나다라마", 7)
    assert truncated == "가나다"
    assert width == 6


def test_repeat_to_fill():
    assert repeat_to_fill("abcde", 10, 50) == "abcde" * 5
    assert repeat_to_fill("abcde", 10, 42) == "abcde" * 4 + "abcde"[:2]


def test_string_width():
    assert string_width("─") == 1


def test_string_width_counts_newlines():
    assert string_width("ab\ncd\r") == string_width("abcd") + 2


def test_graphemes_combine_marks():
    assert list(graphemes("e\u0301x")) == ["e\u0301", "x"]


@pytest.mark.parametrize(
    "a, b, expected",
    [
        ("2", "1", 1),
        ("2", "2", 0),
        ("2", "10", -1),
        ("2.1", "2.2", -1),
        ("2.1", "2.1.1", -1),
        ("1.2.3", "1.2.2", 1),
        ("1.2.3", "1.2.3", 0),
        ("1.2.3", "1.2.3.0", 0),
        ("1.2.3", "1.2.4", -1),
        ("1.0.0", "1", 0),
        ("1.0.0", "1.0", 0),
        ("1.0.0", "1.0.0", 0),
        ("1.0", "1.0.0", 0),
        ("1", "1.0.0", 0),
        ("1.0.0", "1.0.0.1", -1),
        ("1.0.0.1.0", "1.0.0.1", 0),
        ("", "3.4.5", -1),
    ],
)
def test_compare_versions(a, b, expected):
    assert compare_versions(a, b) == expected


def test_to_kebab_case():
    assert to_kebab_case("CtrlAltKey") == "ctrl-alt-key"
    assert to_kebab_case("Rune") == "rune"


def test_make_slab():
    slab = make_slab(3, 5)
    assert slab == Slab([0, 0, 0], [0] * 5)


def test_is_tty_on_pipe():
    read_fd, write_fd = os.pipe()
    try:
        assert is_tty(read_fd) is False
    finally:
        os.close(read_fd)
        os.close(write_fd)