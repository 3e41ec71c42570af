"""Decoding of terminal input bytes into key and mouse events."""

from __future__ import annotations

import re
import time
from typing import Callable

from fuzzterm.tui.events import (
    DOUBLE_CLICK_DURATION,
    Event,
    EventType as E,
    MouseEvent,
    alt_key,
    ctrl_alt_key,
)
from fuzzterm.tui.terminal import atoi

_ESC = 27
_CTRL_Z = 26
_OFFSET_BEGIN = re.compile(rb"\x1b\[[0-9]+;[0-9]+R")

_SINGLE_BYTES = {
    0: E.CTRL_SPACE,
    28: E.CTRL_BACK_SLASH,
    29: E.CTRL_RIGHT_BRACKET,
    30: E.CTRL_CARET,
    31: E.CTRL_SLASH,
    127: E.BACKSPACE,
}

_ARROWS = {
    ord("A"): (E.UP, E.ALT_UP),
    ord("B"): (E.DOWN, E.ALT_DOWN),
    ord("C"): (E.RIGHT, E.ALT_RIGHT),
    ord("D"): (E.LEFT, E.ALT_LEFT),
}

_MODIFIED_ARROWS = {
    ord("A"): (E.SHIFT_UP, E.ALT_UP, E.ALT_SHIFT_UP),
    ord("B"): (E.SHIFT_DOWN, E.ALT_DOWN, E.ALT_SHIFT_DOWN),
    ord("C"): (E.SHIFT_RIGHT, E.ALT_RIGHT, E.ALT_SHIFT_RIGHT),
    ord("D"): (E.SHIFT_LEFT, E.ALT_LEFT, E.ALT_SHIFT_LEFT),
}

_CSI_FINAL = {
    ord("Z"): E.SHIFT_TAB,
    ord("H"): E.HOME,
    ord("F"): E.END,
    ord("P"): E.F1,
    ord("Q"): E.F2,
    ord("R"): E.F3,
    ord("S"): E.F4,
}

_CSI_DIGIT = {
    ord("4"): E.END,
    ord("5"): E.PAGE_UP,
    ord("6"): E.PAGE_DOWN,
    ord("7"): E.HOME,
    ord("8"): E.END,
}

_F9_TO_F12 = {ord("0"): E.F9, ord("1"): E.F10, ord("3"): E.F11, ord("4"): E.F12}

_F1_TO_F8 = {
    ord("1"): E.F1,
    ord("2"): E.F2,
    ord("3"): E.F3,
    ord("4"): E.F4,
    ord("5"): E.F5,
    ord("7"): E.F6,
    ord("8"): E.F7,
    ord("9"): E.F8,
}


def _decode(data: bytearray, start: int) -> tuple[str | None, int]:
    """Decode one UTF-8 character; None for invalid input, with its byte size."""
    lead = data[start]
    if lead < 0x80:
        return chr(lead), 1
    if 0xC2 <= lead <= 0xDF:
        size = 2
    elif 0xE0 <= lead <= 0xEF:
        size = 3
    elif 0xF0 <= lead <= 0xF4:
        size = 4
    else:
        return None, 1
    try:
        char = bytes(data[start : start + size]).decode("utf-8")
    except UnicodeDecodeError:
        return None, 1
    if char == "\ufffd":
        return None, size
    return char, size


class KeyReader:
    """Turns raw terminal input into :class:`Event` values.

    Bytes come from :meth:`feed`, or from ``source`` (a callable returning
    more bytes, blocking if needed) when the buffer runs dry. Mouse reports
    are decoded only while ``mouse`` is true; ``yoffset`` is subtracted from
    their row.
    """

    def __init__(
        self,
        source: Callable[[], bytes] | None = None,
        *,
        mouse: bool = False,
        yoffset: int = 0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._source = source
        self._buf = bytearray()
        self.mouse = mouse
        self.yoffset = yoffset
        self._clock = clock
        self._prev_down_time = float("-inf")
        self._clicks: list[tuple[int, int]] = []

    def __len__(self) -> int:
        return len(self._buf)

    def feed(self, data: bytes) -> None:
        """Append ``data`` to the input buffer."""
        self._buf.extend(data)

    def _refill(self) -> bool:
        if self._source is None:
            return False
        try:
            data = self._source()
        except OSError:
            self._buf.clear()
            return False
        self._buf.extend(data)
        return True

    def get_char(self) -> Event:
        """Return the next event, or a FATAL event when no input can be had."""
        if not self._buf and not self._refill():
            return Event(E.FATAL)
        if not self._buf:
            return Event(E.FATAL)

        first = self._buf[0]
        if first == _ESC:
            event, size = self._esc_sequence()
            if event.type is E.INVALID and self._source is not None:
                # Second chance: the rest of the sequence may not have arrived yet
                if not self._refill():
                    return Event(E.FATAL)
                event, size = self._esc_sequence()
            del self._buf[:size]
            return event

        single = _SINGLE_BYTES.get(first)
        if single is not None:
            del self._buf[:1]
            return Event(single)
        if first <= _CTRL_Z:
            del self._buf[:1]
            return Event(E(first))

        char, size = _decode(self._buf, 0)
        if char is None:
            del self._buf[:1]
            return Event(E.ESC)
        del self._buf[:size]
        return Event(E.RUNE, char)

    def _esc_sequence(self) -> tuple[Event, int]:
        buf = self._buf
        if len(buf) < 2:
            return Event(E.ESC), 1

        match = _OFFSET_BEGIN.match(buf)
        if match:
            return Event(E.INVALID), match.end()

        if 1 <= buf[1] <= _CTRL_Z:
            return ctrl_alt_key(chr(buf[1] + ord("a") - 1)), 2

        alt = False
        if len(buf) > 2 and buf[1] == _ESC:
            del buf[0]
            alt = True

        second = buf[1]
        if second == _ESC:
            return Event(E.ESC), 2
        if second == 127:
            return Event(E.ALT_BACKSPACE), 2
        if second in b"[O":
            if len(buf) < 3:
                return Event(E.INVALID), 2
            result = self._csi(alt)
            if result is not None:
                return result

        char, size = _decode(buf, 1)
        return alt_key(char if char is not None else "\ufffd"), 1 + size

    def _csi(self, alt: bool) -> tuple[Event, int] | None:
        buf = self._buf
        third = buf[2]
        arrow = _ARROWS.get(third)
        if arrow is not None:
            return Event(arrow[1] if alt else arrow[0]), 3
        final = _CSI_FINAL.get(third)
        if final is not None:
            return Event(final), 3
        if third == ord("<"):
            return self._mouse_sequence()
        if not ord("1") <= third <= ord("8"):
            return None

        if len(buf) < 4:
            return Event(E.INVALID), 3
        size = 4
        fourth = buf[3]
        if third == ord("2"):
            if fourth == ord("~"):
                return Event(E.INSERT), size
            if len(buf) > 4 and buf[4] == ord("~"):
                size = 5
                fkey = _F9_TO_F12.get(fourth)
                if fkey is not None:
                    return Event(fkey), size
            # Bracketed paste mode: \e[200~ ... \e[201~
            if len(buf) > 5 and fourth == ord("0") and buf[4] in b"01" and buf[5] == ord("~"):
                del buf[:6]
                return self.get_char(), 0
            return Event(E.INVALID), size
        if third == ord("3"):
            if fourth == ord("~"):
                return Event(E.DELETE), size
            if len(buf) == 6 and buf[5] == ord("~"):
                size = 6
                if buf[4] == ord("5"):
                    return Event(E.CTRL_DELETE), size
                if buf[4] == ord("2"):
                    return Event(E.SHIFT_DELETE), size
            return Event(E.INVALID), size
        digit = _CSI_DIGIT.get(third)
        if digit is not None:
            return Event(digit), size

        # third is '1'
        if fourth == ord("~"):
            return Event(E.HOME), size
        if fourth in b"12345789":
            if len(buf) == 5 and buf[4] == ord("~"):
                return Event(_F1_TO_F8[fourth]), 5
            return Event(E.INVALID), size
        if fourth == ord(";"):
            if len(buf) < 6:
                return Event(E.INVALID), size
            size = 6
            modifier = buf[4]
            if modifier in b"12345":
                #                   Kitty      iTerm2     WezTerm
                # SHIFT-ARROW       "\e[1;2D"
                # ALT-SHIFT-ARROW   "\e[1;4D"  "\e[1;10D" "\e[1;4D"
                # CTRL-SHIFT-ARROW  "\e[1;6D"             N/A
                # CMD-SHIFT-ARROW   "\e[1;10D" N/A        N/A ("\e[1;2D")
                mod_alt = modifier == ord("3")
                char = buf[5]
                alt_shift = False
                if modifier == ord("1") and buf[5] == ord("0"):
                    alt_shift = True
                    if len(buf) < 7:
                        return Event(E.INVALID), size
                    size = 7
                    char = buf[6]
                elif modifier == ord("4"):
                    alt_shift = True
                keys = _MODIFIED_ARROWS.get(char)
                if keys is not None:
                    shifted, with_alt, with_alt_shift = keys
                    if mod_alt:
                        return Event(with_alt), size
                    if alt_shift:
                        return Event(with_alt_shift), size
                    return Event(shifted), size
        return None

    def _mouse_sequence(self) -> tuple[Event, int]:
        # "\e[<0;0;0M"
        size = 3
        buf = self._buf
        if len(buf) < 9 or not self.mouse:
            return Event(E.INVALID), size

        rest = bytes(buf[size:])
        ends = [i for i in (rest.find(b"m"), rest.find(b"M")) if i >= 0]
        if not ends:
            return Event(E.INVALID), size
        end = min(ends)

        elems = rest[:end].decode("latin-1").split(";", 2)
        if len(elems) != 3:
            return Event(E.INVALID), size

        t = atoi(elems[0], -1)
        x = atoi(elems[1], -1) - 1
        y = atoi(elems[2], -1) - 1 - self.yoffset
        if t < 0 or x < 0:
            return Event(E.INVALID), size
        size += end + 1

        down = rest[end] == ord("M")

        scroll = 0
        if t >= 64:
            t -= 64
            scroll = -1 if t & 0b1 == 1 else 1

        left = t & 0b11 == 0
        mod = t & 0b1100 > 0
        drag = t & 0b100000 > 0

        if scroll != 0:
            return Event(E.MOUSE, "", MouseEvent(y, x, scroll, False, False, False, mod)), size

        double = False
        if down and not drag:
            now = self._clock()
            if not left:  # Right double click is not allowed
                self._clicks = []
            elif now - self._prev_down_time < DOUBLE_CLICK_DURATION:
                self._clicks.append((x, y))
            else:
                self._clicks = [(x, y)]
            self._prev_down_time = now
        else:
            clicks = self._clicks
            if (
                len(clicks) > 1
                and clicks[-2] == clicks[-1]
                and self._clock() - self._prev_down_time < DOUBLE_CLICK_DURATION
            ):
                double = True
                self._clicks = []
        return Event(E.MOUSE, "", MouseEvent(y, x, 0, left, down, double, mod)), size