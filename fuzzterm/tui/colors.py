"""Colours, colour pairs, themes and the palette derived from a theme."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace

from fuzzterm.tui.attrs import Attr

COL_UNDEFINED = -2
COL_DEFAULT = -1

COL_BLACK = 0
COL_RED = 1
COL_GREEN = 2
COL_YELLOW = 3
COL_BLUE = 4
COL_MAGENTA = 5
COL_CYAN = 6
COL_WHITE = 7

_RGB_FLAG = 1 << 24


def is_24(color: int) -> bool:
    """Tell whether ``color`` is a 24-bit RGB colour."""
    return color > 0 and (color & _RGB_FLAG) > 0


def color_components(color: int) -> tuple[int, int, int]:
    """Return the red, green and blue parts of a 24-bit colour."""
    return (color >> 16) & 0xFF, (color >> 8) & 0xFF, color & 0xFF


def hex_to_color(rrggbb: str) -> int:
    """Turn ``#rrggbb`` into a 24-bit colour value."""
    r = int(rrggbb[1:3], 16)
    g = int(rrggbb[3:5], 16)
    b = int(rrggbb[5:7], 16)
    return _RGB_FLAG + (r << 16) + (g << 8) + b


@dataclass(frozen=True)
class ColorAttr:
    """A colour with display attributes, either of which may be undefined."""

    color: int = COL_UNDEFINED
    attr: Attr = Attr.UNDEFINED


def new_color_attr() -> ColorAttr:
    """Return a colour attribute with nothing defined."""
    return ColorAttr(COL_UNDEFINED, Attr.UNDEFINED)


@dataclass(frozen=True)
class ColorPair:
    """Foreground and background colours with display attributes."""

    fg: int
    bg: int
    attr: Attr = Attr.UNDEFINED

    def has_bg(self) -> bool:
        """Tell whether the pair paints a visible background."""
        reversed_ = bool(self.attr & Attr.REVERSE)
        if reversed_:
            return self.fg != COL_DEFAULT
        return self.bg != COL_DEFAULT

    def _merge(self, other: ColorPair, except_color: int) -> ColorPair:
        fg = other.fg if other.fg != except_color else self.fg
        bg = other.bg if other.bg != except_color else self.bg
        return ColorPair(fg, bg, Attr(self.attr).merge(Attr(other.attr)))

    def with_attr(self, attr: Attr) -> ColorPair:
        """Return a copy with ``attr`` added."""
        return replace(self, attr=Attr(self.attr).merge(Attr(attr)))

    def merge_attr(self, other: ColorPair) -> ColorPair:
        """Return a copy with the attributes of ``other`` added."""
        return self.with_attr(other.attr)

    def merge(self, other: ColorPair) -> ColorPair:
        """Overlay ``other``, keeping colours it leaves undefined."""
        return self._merge(other, COL_UNDEFINED)

    def merge_non_default(self, other: ColorPair) -> ColorPair:
        """Overlay ``other``, keeping colours it leaves at the default."""
        return self._merge(other, COL_DEFAULT)


@dataclass
class ColorTheme:
    """The colour of every element of the interface."""

    colored: bool = False
    input: ColorAttr = field(default_factory=new_color_attr)
    disabled: ColorAttr = field(default_factory=new_color_attr)
    fg: ColorAttr = field(default_factory=new_color_attr)
    bg: ColorAttr = field(default_factory=new_color_attr)
    selected_fg: ColorAttr = field(default_factory=new_color_attr)
    selected_bg: ColorAttr = field(default_factory=new_color_attr)
    selected_match: ColorAttr = field(default_factory=new_color_attr)
    preview_fg: ColorAttr = field(default_factory=new_color_attr)
    preview_bg: ColorAttr = field(default_factory=new_color_attr)
    dark_bg: ColorAttr = field(default_factory=new_color_attr)
    gutter: ColorAttr = field(default_factory=new_color_attr)
    prompt: ColorAttr = field(default_factory=new_color_attr)
    match: ColorAttr = field(default_factory=new_color_attr)
    current: ColorAttr = field(default_factory=new_color_attr)
    current_match: ColorAttr = field(default_factory=new_color_attr)
    spinner: ColorAttr = field(default_factory=new_color_attr)
    info: ColorAttr = field(default_factory=new_color_attr)
    cursor: ColorAttr = field(default_factory=new_color_attr)
    marker: ColorAttr = field(default_factory=new_color_attr)
    header: ColorAttr = field(default_factory=new_color_attr)
    separator: ColorAttr = field(default_factory=new_color_attr)
    scrollbar: ColorAttr = field(default_factory=new_color_attr)
    border: ColorAttr = field(default_factory=new_color_attr)
    preview_border: ColorAttr = field(default_factory=new_color_attr)
    preview_scrollbar: ColorAttr = field(default_factory=new_color_attr)
    border_label: ColorAttr = field(default_factory=new_color_attr)
    preview_label: ColorAttr = field(default_factory=new_color_attr)


@dataclass(frozen=True)
class Palette:
    """The colour pairs used for drawing, derived from a theme."""

    prompt: ColorPair
    normal: ColorPair
    input: ColorPair
    disabled: ColorPair
    match: ColorPair
    cursor: ColorPair
    cursor_empty: ColorPair
    marker: ColorPair
    selected: ColorPair
    selected_match: ColorPair
    current: ColorPair
    current_match: ColorPair
    current_cursor: ColorPair
    current_cursor_empty: ColorPair
    current_marker: ColorPair
    current_selected_empty: ColorPair
    spinner: ColorPair
    info: ColorPair
    header: ColorPair
    separator: ColorPair
    scrollbar: ColorPair
    border: ColorPair
    preview: ColorPair
    preview_border: ColorPair
    border_label: ColorPair
    preview_label: ColorPair
    preview_scrollbar: ColorPair
    preview_spinner: ColorPair


def _theme(colored: bool, base: ColorAttr, **overrides: ColorAttr) -> ColorTheme:
    values = {f.name: base for f in fields(ColorTheme) if f.name != "colored"}
    values.update(overrides)
    return ColorTheme(colored=colored, **values)


def _c(color: int, attr: Attr = Attr.UNDEFINED) -> ColorAttr:
    return ColorAttr(color, attr)


_UNDEF = _c(COL_UNDEFINED)
_DEFAULT = _c(COL_DEFAULT)


def empty_theme() -> ColorTheme:
    """Return a coloured theme with nothing defined."""
    return _theme(True, _UNDEF)


def no_color_theme() -> ColorTheme:
    """Return a theme that uses only default colours and attributes."""
    return _theme(
        False,
        _DEFAULT,
        match=_c(COL_DEFAULT, Attr.UNDERLINE),
        current=_c(COL_DEFAULT, Attr.REVERSE),
        current_match=_c(COL_DEFAULT, Attr.REVERSE | Attr.UNDERLINE),
    )


def default16() -> ColorTheme:
    """Return the base theme for 16-colour terminals."""
    return _theme(
        True,
        _UNDEF,
        input=_DEFAULT,
        fg=_DEFAULT,
        bg=_DEFAULT,
        dark_bg=_c(COL_BLACK),
        prompt=_c(COL_BLUE),
        match=_c(COL_GREEN),
        current=_c(COL_YELLOW),
        current_match=_c(COL_GREEN),
        spinner=_c(COL_GREEN),
        info=_c(COL_WHITE),
        cursor=_c(COL_RED),
        marker=_c(COL_MAGENTA),
        header=_c(COL_CYAN),
        border=_c(COL_BLACK),
        border_label=_c(COL_WHITE),
    )


def dark256() -> ColorTheme:
    """Return the base theme for 256-colour terminals with a dark background."""
    return _theme(
        True,
        _UNDEF,
        input=_DEFAULT,
        fg=_DEFAULT,
        bg=_DEFAULT,
        dark_bg=_c(236),
        prompt=_c(110),
        match=_c(108),
        current=_c(254),
        current_match=_c(151),
        spinner=_c(148),
        info=_c(144),
        cursor=_c(161),
        marker=_c(168),
        header=_c(109),
        border=_c(59),
        border_label=_c(145),
    )


def light256() -> ColorTheme:
    """Return the base theme for 256-colour terminals with a light background."""
    return _theme(
        True,
        _UNDEF,
        input=_DEFAULT,
        fg=_DEFAULT,
        bg=_DEFAULT,
        dark_bg=_c(251),
        prompt=_c(25),
        match=_c(66),
        current=_c(237),
        current_match=_c(23),
        spinner=_c(65),
        info=_c(101),
        cursor=_c(161),
        marker=_c(168),
        header=_c(31),
        border=_c(145),
        border_label=_c(59),
    )


def _overlay(base: ColorAttr, top: ColorAttr) -> ColorAttr:
    color = top.color if top.color != COL_UNDEFINED else base.color
    attr = top.attr if top.attr != Attr.UNDEFINED else base.attr
    return ColorAttr(color, attr)


def init_theme(theme: ColorTheme, base_theme: ColorTheme, force_black: bool) -> Palette:
    """Fill the undefined parts of ``theme`` from ``base_theme`` and derive the palette.

    ``theme`` is updated in place.
    """
    if force_black:
        theme.bg = ColorAttr(COL_BLACK, Attr.UNDEFINED)

    for name in (
        "input", "fg", "bg", "dark_bg", "prompt", "match", "current",
        "current_match", "spinner", "info", "cursor", "marker", "header",
        "border", "border_label",
    ):
        setattr(theme, name, _overlay(getattr(base_theme, name), getattr(theme, name)))

    # These colours are not defined in the base themes
    theme.selected_fg = _overlay(theme.fg, theme.selected_fg)
    theme.selected_bg = _overlay(theme.bg, theme.selected_bg)
    theme.selected_match = _overlay(theme.match, theme.selected_match)
    theme.disabled = _overlay(theme.input, theme.disabled)
    theme.gutter = _overlay(theme.dark_bg, theme.gutter)
    theme.preview_fg = _overlay(theme.fg, theme.preview_fg)
    theme.preview_bg = _overlay(theme.bg, theme.preview_bg)
    theme.preview_label = _overlay(theme.border_label, theme.preview_label)
    theme.preview_border = _overlay(theme.border, theme.preview_border)
    theme.separator = _overlay(theme.border, theme.separator)
    theme.scrollbar = _overlay(theme.border, theme.scrollbar)
    theme.preview_scrollbar = _overlay(theme.preview_border, theme.preview_scrollbar)

    return init_palette(theme)


def _pair(fg: ColorAttr, bg: ColorAttr) -> ColorPair:
    bg_color = bg.color
    if fg.color == COL_DEFAULT and fg.attr & Attr.REVERSE:
        bg_color = COL_DEFAULT
    return ColorPair(fg.color, bg_color, fg.attr)


def init_palette(theme: ColorTheme) -> Palette:
    """Derive the drawing colour pairs from a complete theme."""
    blank = ColorAttr(theme.fg.color, Attr.REGULAR)
    if theme.selected_bg.color != theme.bg.color:
        marker = _pair(theme.marker, theme.selected_bg)
    else:
        marker = _pair(theme.marker, theme.gutter)
    return Palette(
        prompt=_pair(theme.prompt, theme.bg),
        normal=_pair(theme.fg, theme.bg),
        selected=_pair(theme.selected_fg, theme.selected_bg),
        input=_pair(theme.input, theme.bg),
        disabled=_pair(theme.disabled, theme.bg),
        match=_pair(theme.match, theme.bg),
        selected_match=_pair(theme.selected_match, theme.selected_bg),
        cursor=_pair(theme.cursor, theme.gutter),
        cursor_empty=_pair(blank, theme.gutter),
        marker=marker,
        current=_pair(theme.current, theme.dark_bg),
        current_match=_pair(theme.current_match, theme.dark_bg),
        current_cursor=_pair(theme.cursor, theme.dark_bg),
        current_cursor_empty=_pair(blank, theme.dark_bg),
        current_marker=_pair(theme.marker, theme.dark_bg),
        current_selected_empty=_pair(blank, theme.dark_bg),
        spinner=_pair(theme.spinner, theme.bg),
        info=_pair(theme.info, theme.bg),
        header=_pair(theme.header, theme.bg),
        separator=_pair(theme.separator, theme.bg),
        scrollbar=_pair(theme.scrollbar, theme.bg),
        border=_pair(theme.border, theme.bg),
        border_label=_pair(theme.border_label, theme.bg),
        preview_label=_pair(theme.preview_label, theme.preview_bg),
        preview=_pair(theme.preview_fg, theme.preview_bg),
        preview_border=_pair(theme.preview_border, theme.preview_bg),
        preview_scrollbar=_pair(theme.preview_scrollbar, theme.preview_bg),
        preview_spinner=_pair(theme.spinner, theme.preview_bg),
    )