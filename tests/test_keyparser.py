import pytest

from fuzzterm.tui.events import Event, EventType as E, alt_key, ctrl_alt_key, key
from fuzzterm.tui.keyparser import KeyReader


def parse(data, **kwargs):
    reader = KeyReader(**kwargs)
    reader.feed(data)
    return reader.get_char()


@pytest.mark.parametrize(
    "data, expected",
    [
        (b"\x03", E.CTRL_C),
        (b"\x07", E.CTRL_G),
        (b"\x11", E.CTRL_Q),
        (b"\x01", E.CTRL_A),
        (b"\t", E.TAB),
        (b"\r", E.CTRL_M),
        (b"\x7f", E.BACKSPACE),
        (b"\x00", E.CTRL_SPACE),
        (b"\x1c", E.CTRL_BACK_SLASH),
        (b"\x1d", E.CTRL_RIGHT_BRACKET),
        (b"\x1e", E.CTRL_CARET),
        (b"\x1f", E.CTRL_SLASH),
        (b"\x1b", E.ESC),
        (b"\x1b\x1b", E.ESC),
        (b"\x1b\x7f", E.ALT_BACKSPACE),
    ],
)
def test_single_bytes(data, expected):
    assert parse(data) == Event(expected)


@pytest.mark.parametrize(
    "data, expected",
    [
        (b"\x1b[A", E.UP),
        (b"\x1b[B", E.DOWN),
        (b"\x1b[C", E.RIGHT),
        (b"\x1bOD", E.LEFT),
        (b"\x1b\x1b[A", E.ALT_UP),
        (b"\x1b\x1b[D", E.ALT_LEFT),
        (b"\x1b[Z", E.SHIFT_TAB),
        (b"\x1b[H", E.HOME),
        (b"\x1b[F", E.END),
        (b"\x1bOP", E.F1),
        (b"\x1bOS", E.F4),
        (b"\x1b[2~", E.INSERT),
        (b"\x1b[3~", E.DELETE),
        (b"\x1b[4~", E.END),
        (b"\x1b[5~", E.PAGE_UP),
        (b"\x1b[6~", E.PAGE_DOWN),
        (b"\x1b[7~", E.HOME),
        (b"\x1b[1~", E.HOME),
        (b"\x1b[15~", E.F5),
        (b"\x1b[17~", E.F6),
        (b"\x1b[19~", E.F8),
        (b"\x1b[20~", E.F9),
        (b"\x1b[24~", E.F12),
        (b"\x1b[3;5~", E.CTRL_DELETE),
        (b"\x1b[3;2~", E.SHIFT_DELETE),
        (b"\x1b[1;2D", E.SHIFT_LEFT),
        (b"\x1b[1;2A", E.SHIFT_UP),
        (b"\x1b[1;3B", E.ALT_DOWN),
        (b"\x1b[1;4C", E.ALT_SHIFT_RIGHT),
        (b"\x1b[1;10D", E.ALT_SHIFT_LEFT),
    ],
)
def test_escape_sequences(data, expected):
    reader = KeyReader()
    reader.feed(data)
    assert reader.get_char() == Event(expected)
    assert len(reader) == 0


def test_alt_and_ctrl_alt_keys():
    assert parse(b"\x1bx") == alt_key("x")
    assert parse(b"\x1b\x01") == ctrl_alt_key("a")
    assert parse(b"\x1b\x1a") == ctrl_alt_key("z")
    assert parse("\x1b한".encode()) == alt_key("한")


def test_runes_and_invalid_utf8():
    reader = KeyReader()
    reader.feed("a한".encode())
    assert reader.get_char() == key("a")
    assert reader.get_char() == key("한")
    assert parse(b"\xff") == Event(E.ESC)


def test_consecutive_events_share_buffer():
    reader = KeyReader()
    reader.feed(b"\x1b[Ab\x03")
    assert [reader.get_char() for _ in range(3)] == [Event(E.UP), key("b"), Event(E.CTRL_C)]


def test_bracketed_paste_markers_are_dropped():
    reader = KeyReader()
    reader.feed(b"\x1b[200~hi\x1b[201~")
    assert reader.get_char() == key("h")
    assert reader.get_char() == key("i")


def test_cursor_report_is_skipped():
    reader = KeyReader()
    reader.feed(b"\x1b[12;3Ra")
    assert reader.get_char() == Event(E.INVALID)
    assert reader.get_char() == key("a")


def test_empty_input_without_source_is_fatal():
    assert KeyReader().get_char() == Event(E.FATAL)


def test_failing_source_is_fatal():
    def source():
        raise OSError("gone")

    assert KeyReader(source).get_char() == Event(E.FATAL)


def test_source_supplies_input():
    chunks = [b"q"]
    reader = KeyReader(lambda: chunks.pop())
    assert reader.get_char() == key("q")


def test_second_chance_completes_sequence():
    chunks = [b"B"]
    reader = KeyReader(lambda: chunks.pop())
    reader.feed(b"\x1b[")
    assert reader.get_char() == Event(E.DOWN)


def test_mouse_ignored_when_disabled():
    assert parse(b"\x1b[<0;5;3M").type is E.INVALID


def test_mouse_click():
    event = parse(b"\x1b[<0;5;3M", mouse=True)
    assert event.type is E.MOUSE
    me = event.mouse_event
    assert (me.left, me.down, me.double, me.mod, me.s) == (True, True, False, False, 0)
    assert event.comparable().mouse_event is None


def test_mouse_yoffset_shifts_row():
    plain = parse(b"\x1b[<0;5;3M", mouse=True).mouse_event
    shifted = parse(b"\x1b[<0;5;3M", mouse=True, yoffset=1).mouse_event
    assert plain.y - shifted.y == 1
    assert plain.x == shifted.x


def test_mouse_scroll_directions():
    up = parse(b"\x1b[<64;1;1M", mouse=True).mouse_event
    down = parse(b"\x1b[<65;1;1M", mouse=True).mouse_event
    assert up.s == 1
    assert down.s == -1
    assert up.left is False


def test_mouse_release_and_modifier():
    event = parse(b"\x1b[<4;2;2m", mouse=True)
    assert event.mouse_event.down is False
    assert event.mouse_event.mod is True


def test_double_click():
    times = iter([0.0, 0.05, 0.1, 0.2])
    reader = KeyReader(mouse=True, clock=lambda: next(times))
    reader.feed(b"\x1b[<0;5;3M\x1b[<0;5;3m\x1b[<0;5;3M\x1b[<0;5;3m")
    events = [reader.get_char().mouse_event for _ in range(4)]
    assert [e.double for e in events] == [False, False, False, True]


def test_slow_clicks_are_not_double():
    times = iter([0.0, 0.1, 5.0, 5.1])
    reader = KeyReader(mouse=True, clock=lambda: next(times))
    reader.feed(b"\x1b[<0;5;3M\x1b[<0;5;3m\x1b[<0;5;3M\x1b[<0;5;3m")
    events = [reader.get_char().mouse_event for _ in range(4)]
    assert not any(e.double for e in events)


def test_right_click_is_not_left():
    event = parse(b"\x1b[<2;5;3M", mouse=True)
    assert event.mouse_event.left is False
    assert event.mouse_event.down is True