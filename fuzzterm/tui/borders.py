"""Border shapes and styles, terminal size and fill results."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from fuzzterm.util.helpers import string_width


class BorderShape(enum.IntEnum):
    """Shape of a window border."""

    UNDEFINED = 0
    NONE = enum.auto()
    ROUNDED = enum.auto()
    SHARP = enum.auto()
    BOLD = enum.auto()
    BLOCK = enum.auto()
    THIN_BLOCK = enum.auto()
    DOUBLE = enum.auto()
    HORIZONTAL = enum.auto()
    VERTICAL = enum.auto()
    TOP = enum.auto()
    BOTTOM = enum.auto()
    LEFT = enum.auto()
    RIGHT = enum.auto()

    def has_left(self) -> bool:
        """Tell whether the border has a left side."""
        return self not in _NO_LEFT

    def has_right(self) -> bool:
        """Tell whether the border has a right side."""
        return self not in _NO_RIGHT

    def has_top(self) -> bool:
        """Tell whether the border has a top side."""
        return self not in _NO_TOP


_NO_LEFT = frozenset(
    {BorderShape.NONE, BorderShape.RIGHT, BorderShape.TOP, BorderShape.BOTTOM, BorderShape.HORIZONTAL}
)
_NO_RIGHT = frozenset(
    {BorderShape.NONE, BorderShape.LEFT, BorderShape.TOP, BorderShape.BOTTOM, BorderShape.HORIZONTAL}
)
_NO_TOP = frozenset(
    {BorderShape.NONE, BorderShape.LEFT, BorderShape.RIGHT, BorderShape.BOTTOM, BorderShape.VERTICAL}
)

DEFAULT_BORDER_SHAPE = BorderShape.ROUNDED


@dataclass(frozen=True)
class BorderStyle:
    """The shape of a border and the characters that draw it."""

    shape: BorderShape
    top: str
    bottom: str
    left: str
    right: str
    top_left: str
    top_right: str
    bottom_left: str
    bottom_right: str


_UNICODE_CHARS = {
    BorderShape.SHARP: "──││┌┐└┘",
    BorderShape.BOLD: "━━┃┃┏┓┗┛",
    BorderShape.BLOCK: "▀▄▌▐▛▜▙▟",
    BorderShape.THIN_BLOCK: "▔▁▏▕🭽🭾🭼🭿",
    BorderShape.DOUBLE: "══║║╔╗╚╝",
}
_ROUNDED_CHARS = "──││╭╮╰╯"
_ASCII_CHARS = "--||++++"


def make_border_style(shape: BorderShape, unicode: bool) -> BorderStyle:
    """Return the border style for ``shape``, with box-drawing characters if ``unicode``."""
    if not unicode:
        chars = _ASCII_CHARS
    else:
        chars = _UNICODE_CHARS.get(shape, _ROUNDED_CHARS)
    return BorderStyle(shape, *chars)


def make_transparent_border() -> BorderStyle:
    """Return a rounded border drawn with spaces."""
    return BorderStyle(BorderShape.ROUNDED, *(" " * 8))


def rune_width(char: str) -> int:
    """Return the display width of one character."""
    return string_width(char) - char.count("\n") - char.count("\r")


@dataclass(frozen=True)
class TermSize:
    """Size of the terminal in cells and pixels."""

    lines: int
    columns: int
    px_width: int = 0
    px_height: int = 0


class FillReturn(enum.IntEnum):
    """Outcome of filling text into a window."""

    CONTINUE = 0
    NEXT_LINE = 1
    SUSPEND = 2