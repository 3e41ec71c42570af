import pytest

from fuzzterm.tui.borders import (
    DEFAULT_BORDER_SHAPE,
    BorderShape,
    BorderStyle,
    FillReturn,
    TermSize,
    make_border_style,
    make_transparent_border,
    rune_width,
)


@pytest.mark.parametrize("shape", list(BorderShape))
def test_ascii_style_ignores_shape(shape):
    style = make_border_style(shape, False)
    assert style == BorderStyle(shape, "-", "-", "|", "|", "+", "+", "+", "+")


def test_sharp_unicode_style():
    style = make_border_style(BorderShape.SHARP, True)
    assert (style.top, style.left, style.top_left, style.bottom_right) == ("─", "│", "┌", "┘")


def test_other_shapes_fall_back_to_rounded():
    rounded = make_border_style(BorderShape.ROUNDED, True)
    horizontal = make_border_style(BorderShape.HORIZONTAL, True)
    assert horizontal.shape is BorderShape.HORIZONTAL
    assert horizontal.top_left == rounded.top_left == "╭"
    assert horizontal.bottom_right == "╯"


@pytest.mark.parametrize("shape", [BorderShape.SHARP, BorderShape.BOLD, BorderShape.DOUBLE])
def test_box_styles_have_single_width_edges(shape):
    style = make_border_style(shape, True)
    assert rune_width(style.top) == rune_width(style.left) == rune_width("─")


def test_transparent_border():
    style = make_transparent_border()
    assert style.shape is BorderShape.ROUNDED
    assert {style.top, style.bottom, style.left, style.right,
            style.top_left, style.top_right, style.bottom_left, style.bottom_right} == {" "}


def test_rune_width_box_drawing():
    assert rune_width("─") == 1


def test_shape_sides():
    assert not BorderShape.NONE.has_left()
    assert BorderShape.ROUNDED.has_left() and BorderShape.ROUNDED.has_right()
    assert BorderShape.LEFT.has_left() and not BorderShape.LEFT.has_right()
    assert BorderShape.HORIZONTAL.has_top() and not BorderShape.HORIZONTAL.has_left()
    assert not BorderShape.VERTICAL.has_top()
    assert not BorderShape.BOTTOM.has_top()


def test_default_border_shape_is_rounded():
    style = make_border_style(DEFAULT_BORDER_SHAPE, True)
    assert style.shape is BorderShape.ROUNDED
    assert style.top_left == "╭"
    assert DEFAULT_BORDER_SHAPE.has_top()


def test_term_size_pixel_defaults():
    size = TermSize(24, 80)
    assert (size.px_width, size.px_height) == (0, 0)
    assert (size.lines, size.columns) == (24, 80)


def test_fill_return_order():
    assert FillReturn(0) is FillReturn.CONTINUE
    assert FillReturn(1) is FillReturn.NEXT_LINE
    assert FillReturn(2) is FillReturn.SUSPEND
    assert FillReturn.CONTINUE < FillReturn.NEXT_LINE < FillReturn.SUSPEND