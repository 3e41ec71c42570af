"""Input events produced by the renderers."""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace

DOUBLE_CLICK_DURATION = 0.5
"""Seconds within which two clicks make a double click."""


class EventType(enum.IntEnum):
    """Kinds of user action and program events.

    ``CTRL_A`` to ``CTRL_Z`` have the values of their control bytes.
    """

    RUNE = 0

    CTRL_A = enum.auto()
    CTRL_B = enum.auto()
    CTRL_C = enum.auto()
    CTRL_D = enum.auto()
    CTRL_E = enum.auto()
    CTRL_F = enum.auto()
    CTRL_G = enum.auto()
    CTRL_H = enum.auto()
    TAB = enum.auto()
    CTRL_J = enum.auto()
    CTRL_K = enum.auto()
    CTRL_L = enum.auto()
    CTRL_M = enum.auto()
    CTRL_N = enum.auto()
    CTRL_O = enum.auto()
    CTRL_P = enum.auto()
    CTRL_Q = enum.auto()
    CTRL_R = enum.auto()
    CTRL_S = enum.auto()
    CTRL_T = enum.auto()
    CTRL_U = enum.auto()
    CTRL_V = enum.auto()
    CTRL_W = enum.auto()
    CTRL_X = enum.auto()
    CTRL_Y = enum.auto()
    CTRL_Z = enum.auto()
    ESC = enum.auto()
    CTRL_SPACE = enum.auto()
    CTRL_DELETE = enum.auto()

    CTRL_BACK_SLASH = enum.auto()
    CTRL_RIGHT_BRACKET = enum.auto()
    CTRL_CARET = enum.auto()
    CTRL_SLASH = enum.auto()

    SHIFT_TAB = enum.auto()
    BACKSPACE = enum.auto()

    DELETE = enum.auto()
    PAGE_UP = enum.auto()
    PAGE_DOWN = enum.auto()

    UP = enum.auto()
    DOWN = enum.auto()
    LEFT = enum.auto()
    RIGHT = enum.auto()
    HOME = enum.auto()
    END = enum.auto()
    INSERT = enum.auto()

    SHIFT_UP = enum.auto()
    SHIFT_DOWN = enum.auto()
    SHIFT_LEFT = enum.auto()
    SHIFT_RIGHT = enum.auto()
    SHIFT_DELETE = enum.auto()

    F1 = enum.auto()
    F2 = enum.auto()
    F3 = enum.auto()
    F4 = enum.auto()
    F5 = enum.auto()
    F6 = enum.auto()
    F7 = enum.auto()
    F8 = enum.auto()
    F9 = enum.auto()
    F10 = enum.auto()
    F11 = enum.auto()
    F12 = enum.auto()

    ALT_BACKSPACE = enum.auto()

    ALT_UP = enum.auto()
    ALT_DOWN = enum.auto()
    ALT_LEFT = enum.auto()
    ALT_RIGHT = enum.auto()

    ALT_SHIFT_UP = enum.auto()
    ALT_SHIFT_DOWN = enum.auto()
    ALT_SHIFT_LEFT = enum.auto()
    ALT_SHIFT_RIGHT = enum.auto()

    ALT = enum.auto()
    CTRL_ALT = enum.auto()

    INVALID = enum.auto()
    FATAL = enum.auto()

    MOUSE = enum.auto()
    DOUBLE_CLICK = enum.auto()
    LEFT_CLICK = enum.auto()
    RIGHT_CLICK = enum.auto()
    S_LEFT_CLICK = enum.auto()
    S_RIGHT_CLICK = enum.auto()
    SCROLL_UP = enum.auto()
    SCROLL_DOWN = enum.auto()
    S_SCROLL_UP = enum.auto()
    S_SCROLL_DOWN = enum.auto()
    PREVIEW_SCROLL_UP = enum.auto()
    PREVIEW_SCROLL_DOWN = enum.auto()

    RESIZE = enum.auto()
    CHANGE = enum.auto()
    BACKWARD_EOF = enum.auto()
    START = enum.auto()
    LOAD = enum.auto()
    FOCUS = enum.auto()
    ONE = enum.auto()
    ZERO = enum.auto()
    RESULT = enum.auto()
    JUMP = enum.auto()
    JUMP_CANCEL = enum.auto()
    CLICK_HEADER = enum.auto()

    def as_event(self) -> Event:
        """Return an event of this type with no character."""
        return Event(self)


@dataclass(frozen=True)
class MouseEvent:
    """Position and state of a mouse action; ``s`` is the scroll direction."""

    y: int
    x: int
    s: int
    left: bool
    down: bool
    double: bool
    mod: bool


_SPECIAL_NAMES = {
    EventType.CTRL_BACK_SLASH: "ctrl-\\",
    EventType.CTRL_RIGHT_BRACKET: "ctrl-]",
    EventType.CTRL_CARET: "ctrl-^",
    EventType.CTRL_SLASH: "ctrl-/",
}


@dataclass(frozen=True)
class Event:
    """One input event; ``char`` is empty when the type carries no character."""

    type: EventType
    char: str = ""
    mouse_event: MouseEvent | None = None

    def comparable(self) -> Event:
        """Return the event without its mouse details."""
        return replace(self, mouse_event=None)

    def key_name(self) -> str:
        """Return the key's name as used in key bindings, or '' for non-keys."""
        if self.type >= EventType.INVALID:
            return ""
        if self.type is EventType.RUNE:
            return self.char
        if self.type is EventType.ALT:
            return "alt-" + self.char
        if self.type is EventType.CTRL_ALT:
            return "ctrl-alt-" + self.char
        special = _SPECIAL_NAMES.get(self.type)
        if special is not None:
            return special
        return self.type.name.lower().replace("_", "-")


def key(char: str) -> Event:
    """Return the event for typing ``char``."""
    return Event(EventType.RUNE, char)


def alt_key(char: str) -> Event:
    """Return the event for ``char`` typed with Alt."""
    return Event(EventType.ALT, char)


def ctrl_alt_key(char: str) -> Event:
    """Return the event for ``char`` typed with Ctrl and Alt."""
    return Event(EventType.CTRL_ALT, char)