import io
import os

import pytest

from fuzzterm.tui.attrs import Attr
from fuzzterm.tui.borders import BorderShape, FillReturn, make_border_style
from fuzzterm.tui.colors import COL_DEFAULT, COL_UNDEFINED, hex_to_color, no_color_theme
from fuzzterm.tui.events import EventType
from fuzzterm.tui.light import (
    LF,
    LightRenderer,
    attr_codes,
    cleanse,
    color_codes,
    wrap_line,
)


@pytest.fixture
def out():
    return io.StringIO()


@pytest.fixture
def renderer(out):
    return LightRenderer(None, no_color_theme(), ttyout=out)


@pytest.fixture
def pipe():
    rfd, wfd = os.pipe()
    yield rfd, wfd
    for fd in (rfd, wfd):
        try:
            os.close(fd)
        except OSError:
            pass


def test_attr_codes():
    assert attr_codes(Attr.BOLD | Attr.UNDERLINE) == ["1", "4"]
    assert attr_codes(Attr.CLEAR | Attr.BOLD) == []
    assert attr_codes(Attr.REGULAR) == []


def test_color_codes_defaults_and_undefined_are_empty():
    assert color_codes(COL_DEFAULT, COL_DEFAULT) == []
    assert color_codes(COL_UNDEFINED, COL_UNDEFINED) == []


def test_color_codes_values():
    assert color_codes(hex_to_color("#ff0000"), COL_DEFAULT) == ["38;2;255;0;0"]
    assert color_codes(9, COL_DEFAULT) == ["91"]
    assert len(color_codes(1, 2)) == 2
    assert color_codes(200, COL_DEFAULT) == ["38;5;200"]


def test_cleanse():
    assert cleanse("a\x1bb\x1b") == "ab"


def test_wrap_line_splits_and_keeps_text():
    pieces = wrap_line("abcdef", 0, 4, 8)
    assert "".join(p.text for p in pieces) == "abcdef"
    assert all(p.display_width <= 4 for p in pieces)
    assert len(pieces) == 2


def test_wrap_line_expands_tab():
    pieces = wrap_line("\tx", 0, 80, 4)
    assert pieces[0].text == " " * 4 + "x"


def test_pass_through_is_flushed(renderer, out):
    renderer.pass_through("hi")
    renderer.refresh_windows([])
    assert "\x1b7hi\x1b8" in out.getvalue()
    assert renderer.pending_output == ""


def test_new_window_draws_sharp_border(renderer, out):
    window = renderer.new_window(0, 0, 10, 3, False, make_border_style(BorderShape.SHARP, True))
    assert "┌" in renderer.pending_output
    renderer.refresh_windows([])
    assert renderer.pending_output == ""
    assert window.enclose(0, 0)
    assert not window.enclose(3, 0)
    text = out.getvalue()
    for corner in "┌┐└┘":
        assert corner in text


def test_print_replaces_newline_and_escape(renderer):
    window = renderer.new_window(0, 0, 20, 2, False, make_border_style(BorderShape.NONE, True))
    window.print("a\nb\x1bc")
    output = renderer.pending_output
    assert LF in output
    assert "bc" in output


def test_enclose(renderer):
    window = renderer.new_window(2, 3, 4, 5, False, make_border_style(BorderShape.NONE, True))
    assert window.enclose(2, 3)
    assert window.enclose(6, 6)
    assert not window.enclose(7, 3)
    assert not window.enclose(2, 7)


def test_fill_results(renderer):
    style = make_border_style(BorderShape.NONE, True)
    window = renderer.new_window(0, 0, 10, 2, False, style)
    assert window.fill("abc") is FillReturn.CONTINUE
    window.move(0, 0)
    assert window.fill("abcdefghi") is FillReturn.NEXT_LINE
    assert window.posy == 1
    other = renderer.new_window(0, 0, 10, 2, False, style)
    assert other.fill("a\nb\nc") is FillReturn.SUSPEND


def test_erase_maybe_is_false(renderer):
    window = renderer.new_window(0, 0, 5, 2, False, make_border_style(BorderShape.NONE, True))
    assert window.erase_maybe() is False


def test_close_clears_and_marks_closed(renderer, out):
    renderer.close()
    assert renderer.closed.get() is True
    assert "\x1b[J" in out.getvalue()


def test_get_char_reads_rune(pipe, out):
    rfd, wfd = pipe
    r = LightRenderer(rfd, no_color_theme(), ttyout=out)
    os.write(wfd, b"a")
    event = r.get_char()
    assert event.type is EventType.RUNE
    assert event.char == "a"


def test_get_char_reads_arrow(pipe, out):
    rfd, wfd = pipe
    r = LightRenderer(rfd, no_color_theme(), ttyout=out)
    os.write(wfd, b"\x1b[A")
    assert r.get_char().type is EventType.UP


def test_get_char_fatal_on_eof_closes(pipe, out):
    rfd, wfd = pipe
    os.close(wfd)
    r = LightRenderer(rfd, no_color_theme(), ttyout=out)
    assert r.get_char().type is EventType.FATAL
    assert r.closed.get() is True


def test_renderer_flags(renderer):
    assert renderer.need_scrollbar_redraw() is False
    assert renderer.should_emit_resize_event() is False
    assert renderer.top() == 0