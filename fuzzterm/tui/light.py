"""Renderer that draws inline in the terminal with plain escape sequences."""

from __future__ import annotations

import os
import subprocess
import sys
from dataclasses import dataclass
from typing import Callable

from fuzzterm.tui.attrs import Attr
from fuzzterm.tui.borders import BorderShape, BorderStyle, FillReturn, TermSize, rune_width
from fuzzterm.tui.colors import (
    COL_BLACK,
    COL_DEFAULT,
    COL_WHITE,
    ColorPair,
    ColorTheme,
    Palette,
    color_components,
    dark256,
    default16,
    init_palette,
    init_theme,
    is_24,
)
from fuzzterm.tui.events import Event
from fuzzterm.tui.keyparser import KeyReader
from fuzzterm.tui.terminal import DEFAULT_ESC_DELAY, TtyReader, atoi, open_tty_out
from fuzzterm.util.atomicbool import AtomicBool
from fuzzterm.util.helpers import graphemes, string_width

CR = "\x1b[2m␍"
LF = "\x1b[2m␊"

_AROUND = frozenset(
    {
        BorderShape.ROUNDED,
        BorderShape.SHARP,
        BorderShape.BOLD,
        BorderShape.BLOCK,
        BorderShape.THIN_BLOCK,
        BorderShape.DOUBLE,
    }
)

_ATTR_CODES = (
    (Attr.BOLD, "1"),
    (Attr.DIM, "2"),
    (Attr.ITALIC, "3"),
    (Attr.UNDERLINE, "4"),
    (Attr.BLINK, "5"),
    (Attr.REVERSE, "7"),
    (Attr.STRIKE_THROUGH, "9"),
)


@dataclass(frozen=True)
class WrappedLine:
    """A piece of a wrapped line and its display width."""

    text: str
    display_width: int


def wrap_line(text: str, prefix_length: int, max_width: int, tabstop: int) -> list[WrappedLine]:
    """Split ``text`` into pieces that fit ``max_width`` columns after ``prefix_length``.

    Tabs are expanded to spaces.
    """
    lines: list[WrappedLine] = []
    width = 0
    line = ""
    for cluster in graphemes(text):
        piece = cluster
        if cluster == "\t":
            w = tabstop - (prefix_length + width) % tabstop
            piece = " " * w
        elif cluster[0] == "\r":
            w = 1
        else:
            w = string_width(cluster)
        width += w
        if prefix_length + width <= max_width:
            line += piece
        else:
            lines.append(WrappedLine(line, width - w))
            line = piece
            prefix_length = 0
            width = w
    lines.append(WrappedLine(line, width))
    return lines


def attr_codes(attr: Attr) -> list[str]:
    """Return the SGR parameters for the attributes in ``attr``."""
    if attr & Attr.CLEAR:
        return []
    return [code for flag, code in _ATTR_CODES if attr & flag]


def color_codes(fg: int, bg: int) -> list[str]:
    """Return the SGR parameters that select foreground ``fg`` and background ``bg``."""
    codes: list[str] = []
    for color, offset in ((fg, 0), (bg, 10)):
        if color == COL_DEFAULT:
            continue
        if is_24(color):
            r, g, b = color_components(color)
            codes.append(f"{38 + offset};2;{r};{g};{b}")
        elif COL_BLACK <= color <= COL_WHITE:
            codes.append(str(color + 30 + offset))
        elif COL_WHITE < color < 16:
            codes.append(str(color + 90 + offset - 8))
        elif 16 <= color < 256:
            codes.append(f"{38 + offset};5;{color}")
    return codes


def cleanse(text: str) -> str:
    """Remove escape characters from ``text``."""
    return text.replace("\x1b", "")


def _identity(height: int) -> int:
    return height


class LightRenderer:
    """Draws below the cursor (or on the alternate screen) without a curses library."""

    def __init__(
        self,
        ttyin,
        theme: ColorTheme,
        force_black: bool = False,
        mouse: bool = False,
        tabstop: int = 8,
        clear_on_exit: bool = True,
        fullscreen: bool = False,
        max_height_func: Callable[[int], int] | None = None,
        *,
        ttyout=None,
    ) -> None:
        self._owns_ttyout = False
        if ttyout is None:
            try:
                ttyout = open_tty_out()
                self._owns_ttyout = True
            except OSError:
                ttyout = sys.stderr
        self._ttyout = ttyout
        self.closed = AtomicBool(False)
        self.theme = theme
        self.force_black = force_black
        self.clear_on_exit = clear_on_exit
        self.fullscreen = fullscreen
        self.tabstop = tabstop
        self.up_one_line = False
        self.width = 0
        self.height = 0
        self._max_height_func = max_height_func or _identity
        self._tty = TtyReader(ttyin, DEFAULT_ESC_DELAY)
        self._keys = KeyReader(self._read_input, mouse=mouse)
        self._queued: list[str] = []
        self._y = 0
        self._x = 0
        self._palette: Palette | None = None

    # -- state shared with the key reader --------------------------------

    @property
    def mouse(self) -> bool:
        """Whether mouse reports are enabled and decoded."""
        return self._keys.mouse

    @mouse.setter
    def mouse(self, value: bool) -> None:
        self._keys.mouse = value

    @property
    def yoffset(self) -> int:
        """Row of the screen where drawing starts."""
        return self._keys.yoffset

    @yoffset.setter
    def yoffset(self, value: int) -> None:
        self._keys.yoffset = value

    @property
    def palette(self) -> Palette:
        """Colour pairs derived from the theme."""
        if self._palette is None:
            self._palette = init_palette(self.theme)
        return self._palette

    @property
    def pending_output(self) -> str:
        """Output queued but not yet written."""
        return "".join(self._queued)

    # -- low-level output --------------------------------------------------

    def pass_through(self, text: str) -> None:
        """Queue ``text`` unfiltered, saving and restoring the cursor around it."""
        self._queued.append("\x1b7" + text + "\x1b8")

    def _stderr(self, text: str) -> None:
        self._stderr_internal(text, True, "")

    def _stderr_internal(self, text: str, allow_nlcr: bool, reset_code: str) -> None:
        out: list[str] = []
        for char in text:
            nlcr = char in "\n\r"
            if not (ord(char) >= 32 or char == "\x1b" or nlcr):
                continue
            if nlcr and not allow_nlcr:
                out.append((CR if char == "\r" else LF) + reset_code)
            elif char != "\ufffd":
                out.append(char)
        self._queued.append("".join(out))

    def _csi(self, code: str) -> str:
        full = "\x1b[" + code
        self._stderr(full)
        return full

    def _write_out(self, text: str) -> None:
        try:
            self._ttyout.write(text)
        except TypeError:
            self._ttyout.write(text.encode("utf-8"))
        flush = getattr(self._ttyout, "flush", None)
        if flush is not None:
            flush()

    def _flush(self) -> None:
        if self._queued:
            text = "".join(self._queued)
            self._queued.clear()
            if text:
                self._write_out("\x1b[?7l\x1b[?25l" + text + "\x1b[?25h\x1b[?7h")

    # -- terminal setup ----------------------------------------------------

    def _default_theme(self) -> ColorTheme:
        if "256" in os.environ.get("TERM", ""):
            return dark256()
        try:
            colors = subprocess.run(
                ["tput", "colors"], capture_output=True, check=True
            ).stdout.decode(errors="replace")
        except (OSError, subprocess.CalledProcessError):
            return default16()
        if atoi(colors.strip(), 16) > 16:
            return dark256()
        return default16()

    def _update_terminal_size(self) -> None:
        self.width, self.height = self._tty.terminal_size(self._max_height_func)

    def _find_offset(self) -> tuple[int, int]:
        def write(text: str) -> None:
            self._stderr(text)
            self._flush()

        return self._tty.find_offset(write)

    def _setup_terminal(self) -> None:
        try:
            self._tty.make_raw()
        except OSError:
            pass

    def _restore_terminal(self) -> None:
        self._tty.restore()

    def _make_space(self) -> None:
        self._stderr("\n")
        self._csi("G")

    def _move(self, y: int, x: int) -> None:
        if self._y < y:
            self._csi(f"{y - self._y}B")
        elif self._y > y:
            self._csi(f"{self._y - y}A")
        self._stderr("\r")
        if x > 0:
            self._csi(f"{x}C")
        self._y = y
        self._x = x

    def _origin(self) -> None:
        self._move(0, 0)

    def _smcup(self) -> None:
        self._csi("?1049h")

    def _rmcup(self) -> None:
        self._csi("?1049l")

    def _enable_mouse(self) -> None:
        if self.mouse:
            self._csi("?1000h")
            self._csi("?1002h")
            self._csi("?1006h")

    def _disable_mouse(self) -> None:
        if self.mouse:
            self._csi("?1000l")
            self._csi("?1002l")
            self._csi("?1006l")

    def init(self) -> None:
        """Switch the terminal to raw mode and make room for drawing.

        Raises ``OSError`` if the terminal cannot be set up.
        """
        self._tty.esc_delay = atoi(os.environ.get("ESCDELAY", ""), DEFAULT_ESC_DELAY)
        self._tty.make_raw()
        self._update_terminal_size()
        self._palette = init_theme(self.theme, self._default_theme(), self.force_black)

        if self.fullscreen:
            self._smcup()
        else:
            # With --no-clear the lower part of the screen is left alone
            if self.clear_on_exit:
                self._csi("J")
            y, x = self._find_offset()
            self.mouse = self.mouse and y >= 0
            if x > 0 and self.clear_on_exit:
                self.up_one_line = True
                self._make_space()
            for _ in range(1, self.max_y()):
                self._make_space()

        self._enable_mouse()
        self._csi(f"{self.max_y() - 1}A")
        self._csi("G")
        self._csi("K")
        if not self.clear_on_exit and not self.fullscreen:
            self._csi("s")
        if not self.fullscreen and self.mouse:
            self.yoffset, _ = self._find_offset()

    def resize(self, max_height_func: Callable[[int], int]) -> None:
        """Replace the function that limits the usable height."""
        self._max_height_func = max_height_func

    def pause(self, clear: bool) -> None:
        """Give the terminal back temporarily, e.g. to run another program."""
        self._disable_mouse()
        self._restore_terminal()
        if clear:
            if self.fullscreen:
                self._rmcup()
            else:
                self._smcup()
                self._csi("H")
            self._flush()

    def resume(self, clear: bool, sigcont: bool) -> None:
        """Take the terminal back after :meth:`pause`."""
        self._setup_terminal()
        if clear:
            if self.fullscreen:
                self._smcup()
            else:
                self._rmcup()
            self._enable_mouse()
            self._flush()
        elif sigcont and not self.fullscreen and self.mouse:
            # The offset found at start is likely stale after CTRL-Z
            self._disable_mouse()
            self.mouse = False

    def clear(self) -> None:
        """Erase the drawing area."""
        if self.fullscreen:
            self._csi("H")
        self._origin()
        self._csi("J")
        self._flush()

    def need_scrollbar_redraw(self) -> bool:
        """Tell whether scrollbars must be redrawn on every refresh."""
        return False

    def should_emit_resize_event(self) -> bool:
        """Tell whether the renderer reports resizes itself."""
        return False

    def refresh_windows(self, windows) -> None:
        """Write out everything the windows have drawn."""
        self._flush()

    def refresh(self) -> None:
        """Query the terminal size again."""
        self._update_terminal_size()

    def close(self) -> None:
        """Clean up the drawing area and restore the terminal."""
        if self.clear_on_exit:
            if self.fullscreen:
                self._rmcup()
            else:
                self._origin()
                if self.up_one_line:
                    self._csi("A")
                self._csi("J")
        elif not self.fullscreen:
            self._csi("u")
        self._disable_mouse()
        self._flush()
        if self._owns_ttyout:
            self._ttyout.close()
        self._restore_terminal()
        self.closed.set(True)

    # -- input -------------------------------------------------------------

    def _read_input(self) -> bytes:
        try:
            return self._tty.get_bytes(b"", False)
        except OSError:
            self.close()
            raise

    def get_char(self) -> Event:
        """Wait for and return the next input event."""
        if self._tty.pending:
            self._keys.feed(bytes(self._tty.pending))
            self._tty.pending.clear()
        return self._keys.get_char()

    # -- geometry ----------------------------------------------------------

    def top(self) -> int:
        """Return the screen row where drawing starts."""
        return self.yoffset

    def max_x(self) -> int:
        """Return the usable width."""
        return self.width

    def max_y(self) -> int:
        """Return the usable height."""
        if self.height == 0:
            self._update_terminal_size()
        return self.height

    def size(self) -> TermSize:
        """Return the terminal size in cells and pixels."""
        return self._tty.winsize()

    def new_window(
        self,
        top: int,
        left: int,
        width: int,
        height: int,
        preview: bool,
        border_style: BorderStyle,
    ) -> LightWindow:
        """Create a window and draw its border."""
        return LightWindow(self, top, left, width, height, preview, border_style)


class LightWindow:
    """A rectangular area drawn by a :class:`LightRenderer`."""

    def __init__(
        self,
        renderer: LightRenderer,
        top: int,
        left: int,
        width: int,
        height: int,
        preview: bool,
        border: BorderStyle,
    ) -> None:
        self.renderer = renderer
        self.colored = renderer.theme.colored
        self.preview = preview
        self.border = border
        self.top = top
        self.left = left
        self.width = width
        self.height = height
        self.posx = 0
        self.posy = 0
        self.tabstop = renderer.tabstop
        theme = renderer.theme
        if preview:
            self.fg = theme.preview_fg.color
            self.bg = theme.preview_bg.color
        else:
            self.fg = theme.fg.color
            self.bg = theme.bg.color
        if self.bg != COL_DEFAULT and border.shape != BorderShape.NONE:
            self.erase()
        self._draw_border(False)

    # -- borders -----------------------------------------------------------

    def _border_color(self) -> ColorPair:
        palette = self.renderer.palette
        return palette.preview_border if self.preview else palette.border

    def draw_border(self) -> None:
        """Draw the whole border."""
        self._draw_border(False)

    def draw_hborder(self) -> None:
        """Draw only the horizontal parts of the border."""
        self._draw_border(True)

    def _draw_border(self, only_horizontal: bool) -> None:
        shape = self.border.shape
        if shape in _AROUND:
            self._draw_border_around(only_horizontal)
        elif shape == BorderShape.HORIZONTAL:
            self._draw_border_horizontal(True, True)
        elif shape == BorderShape.TOP:
            self._draw_border_horizontal(True, False)
        elif shape == BorderShape.BOTTOM:
            self._draw_border_horizontal(False, True)
        elif only_horizontal:
            return
        elif shape == BorderShape.VERTICAL:
            self._draw_border_vertical(True, True)
        elif shape == BorderShape.LEFT:
            self._draw_border_vertical(True, False)
        elif shape == BorderShape.RIGHT:
            self._draw_border_vertical(False, True)

    def _draw_border_horizontal(self, top: bool, bottom: bool) -> None:
        color = self._border_color()
        hw = rune_width(self.border.top)
        if top:
            self.move(0, 0)
            self.cprint(color, self.border.top * (self.width // hw))
        if bottom:
            self.move(self.height - 1, 0)
            self.cprint(color, self.border.bottom * (self.width // hw))

    def _draw_border_vertical(self, left: bool, right: bool) -> None:
        vw = rune_width(self.border.left)
        color = self._border_color()
        for y in range(self.height):
            if left:
                self.move(y, 0)
                self.cprint(color, self.border.left)
                self.cprint(color, " ")
            if right:
                self.move(y, self.width - vw - 1)
                self.cprint(color, " ")
                self.cprint(color, self.border.right)

    def _edge(self, corner_left: str, fill: str, corner_right: str) -> str:
        hw = rune_width(fill)
        span = self.width - rune_width(corner_left) - rune_width(corner_right)
        rem = max(span, 0) % hw
        return corner_left + fill * (span // hw if span > 0 else 0) + " " * rem + corner_right

    def _draw_border_around(self, only_horizontal: bool) -> None:
        b = self.border
        color = self._border_color()
        self.move(0, 0)
        self.cprint(color, self._edge(b.top_left, b.top, b.top_right))
        if not only_horizontal:
            vw = rune_width(b.left)
            for y in range(1, self.height - 1):
                self.move(y, 0)
                self.cprint(color, b.left)
                self.cprint(color, " ")
                self.move(y, self.width - vw - 1)
                self.cprint(color, " ")
                self.cprint(color, b.right)
        self.move(self.height - 1, 0)
        self.cprint(color, self._edge(b.bottom_left, b.bottom, b.bottom_right))

    # -- geometry ----------------------------------------------------------

    def refresh(self) -> None:
        """Nothing to do; output is written by the renderer."""

    def close(self) -> None:
        """Nothing to release."""

    def enclose(self, y: int, x: int) -> bool:
        """Tell whether screen cell (``y``, ``x``) lies inside the window."""
        return self.left <= x < self.left + self.width and self.top <= y < self.top + self.height

    def move(self, y: int, x: int) -> None:
        """Move the cursor to (``y``, ``x``) relative to the window."""
        self.posx = x
        self.posy = y
        self.renderer._move(self.top + y, self.left + x)

    def move_and_clear(self, y: int, x: int) -> None:
        """Move the cursor and blank the rest of the window's row."""
        self.move(y, x)
        self.print(" " * (self.width - x))
        self.move(y, x)

    # -- printing ----------------------------------------------------------

    def _csi_color(self, fg: int, bg: int, attr: Attr) -> tuple[bool, str]:
        codes = attr_codes(Attr(attr)) + color_codes(fg, bg)
        code = self.renderer._csi(";" + ";".join(codes) + "m")
        return bool(codes), code

    def print(self, text: str) -> None:
        """Print ``text`` in the default colours."""
        self._cprint2(COL_DEFAULT, self.bg, Attr.REGULAR, text)

    def cprint(self, pair: ColorPair, text: str) -> None:
        """Print ``text`` in the colours of ``pair``."""
        _, code = self._csi_color(pair.fg, pair.bg, pair.attr)
        self.renderer._stderr_internal(cleanse(text), False, code)
        self.renderer._csi("0m")

    def _cprint2(self, fg: int, bg: int, attr: Attr, text: str) -> None:
        has_colors, code = self._csi_color(fg, bg, attr)
        self.renderer._stderr_internal(cleanse(text), False, code)
        if has_colors:
            self.renderer._csi("0m")

    def _fill(self, text: str, reset_code: str) -> FillReturn:
        all_lines = text.split("\n")
        for i, line in enumerate(all_lines):
            pieces = wrap_line(line, self.posx, self.width, self.tabstop)
            for j, piece in enumerate(pieces):
                self.renderer._stderr_internal(piece.text, False, reset_code)
                self.posx += piece.display_width
                if j < len(pieces) - 1 or i < len(all_lines) - 1:
                    if self.posy + 1 >= self.height:
                        return FillReturn.SUSPEND
                    self.move_and_clear(self.posy, self.posx)
                    self.move(self.posy + 1, 0)
                    self.renderer._stderr(reset_code)
        if self.posx + 1 >= self.width:
            if self.posy + 1 >= self.height:
                return FillReturn.SUSPEND
            self.move(self.posy + 1, 0)
            self.renderer._stderr(reset_code)
            return FillReturn.NEXT_LINE
        return FillReturn.CONTINUE

    def _set_bg(self) -> str:
        if self.bg != COL_DEFAULT:
            _, code = self._csi_color(COL_DEFAULT, self.bg, Attr.REGULAR)
            return code
        # Clears the dim attribute left after a CR marker
        return "\x1b[m"

    def link_begin(self, uri: str, params: str) -> None:
        """Start a hyperlink to ``uri``."""
        self.renderer._queued.append("\x1b]8;" + params + ";" + uri + "\x1b\\")

    def link_end(self) -> None:
        """End the current hyperlink."""
        self.renderer._queued.append("\x1b]8;;\x1b\\")

    def fill(self, text: str) -> FillReturn:
        """Write ``text`` from the cursor on, wrapping at the window's edge."""
        self.move(self.posy, self.posx)
        return self._fill(text, self._set_bg())

    def cfill(self, fg: int, bg: int, attr: Attr, text: str) -> FillReturn:
        """Like :meth:`fill` with the given colours; defaults mean the window's."""
        self.move(self.posy, self.posx)
        if fg == COL_DEFAULT:
            fg = self.fg
        if bg == COL_DEFAULT:
            bg = self.bg
        has_colors, reset_code = self._csi_color(fg, bg, attr)
        if has_colors:
            try:
                return self._fill(text, reset_code)
            finally:
                self.renderer._csi("0m")
        return self._fill(text, self._set_bg())

    def finish_fill(self) -> None:
        """Blank everything after the cursor to the bottom of the window."""
        if self.posy < self.height:
            self.move_and_clear(self.posy, self.posx)
        for y in range(self.posy + 1, self.height):
            self.move_and_clear(y, 0)

    def erase(self) -> None:
        """Redraw the border and blank the inside."""
        self.draw_border()
        self.move(0, 0)
        self.finish_fill()
        self.move(0, 0)

    def erase_maybe(self) -> bool:
        """Report that erasing is left to the caller."""
        return False