"""Small numeric, text-width and version helpers."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator, TypeVar

import regex
import wcwidth

T = TypeVar("T")

_GRAPHEME = regex.compile(r"\X")
_INTEGER = re.compile(r"[+-]?[0-9]+")
MAX_UINT16 = 0xFFFF


@dataclass
class Slab:
    """Preallocated scratch arrays of 16- and 32-bit integers."""

    i16: list[int] = field(default_factory=list)
    i32: list[int] = field(default_factory=list)


def make_slab(size16: int, size32: int) -> Slab:
    """Return a slab with zeroed arrays of the given sizes."""
    return Slab([0] * size16, [0] * size32)


def graphemes(text: str) -> Iterator[str]:
    """Yield the extended grapheme clusters of ``text``."""
    for match in _GRAPHEME.finditer(text):
        yield match.group()


def _cluster_width(cluster: str) -> int:
    first = cluster[0]
    rest = cluster[1:]
    if "\ufe0f" in rest:
        return 2
    if "\ufe0e" in rest:
        return 1
    if "\U0001f1e6" <= first <= "\U0001f1ff":
        return 2 if len(cluster) > 1 else 1
    return max(wcwidth.wcwidth(first), 0)


def _display_width(text: str) -> int:
    return sum(_cluster_width(g) for g in graphemes(text))


def string_width(text: str) -> int:
    """Return the display width of ``text``; each CR and LF takes one column."""
    return _display_width(text) + text.count("\n") + text.count("\r")


def runes_width(text: str | Iterable[str], prefix_width: int, tabstop: int, limit: int) -> tuple[int, int]:
    """Return the width of ``text`` and the index of the first character over ``limit``.

    The index is -1 when the whole text fits.
    """
    if not isinstance(text, str):
        text = "".join(text)
    width = 0
    idx = 0
    for cluster in graphemes(text):
        if cluster == "\t":
            w = tabstop - (prefix_width + width) % tabstop
        else:
            w = string_width(cluster)
        width += w
        if width > limit:
            return width, idx
        idx += len(cluster)
    return width, -1


def truncate(text: str, limit: int) -> tuple[str, int]:
    """Cut ``text`` to at most ``limit`` columns; return it with its width."""
    parts: list[str] = []
    width = 0
    for cluster in graphemes(text):
        w = string_width(cluster)
        if width + w > limit:
            break
        width += w
        parts.append(cluster)
    return "".join(parts), width


def constrain(val: T, low: T, high: T) -> T:
    """Limit ``val`` to the range from ``low`` to ``high``."""
    if val < low:
        return low
    if val > high:
        return high
    return val


def as_uint16(val: int) -> int:
    """Clamp ``val`` into the unsigned 16-bit range."""
    return constrain(val, 0, MAX_UINT16)


def dur_within(val: T, low: T, high: T) -> T:
    """Limit a duration to the range from ``low`` to ``high``."""
    return constrain(val, low, high)


def is_tty(file) -> bool:
    """Tell whether ``file`` (a file object or descriptor) is a terminal."""
    try:
        if isinstance(file, int):
            return os.isatty(file)
        return file.isatty()
    except (OSError, ValueError, AttributeError):
        return False


def once(next_response: bool) -> Callable[[], bool]:
    """Return a function that answers ``next_response`` once, then its opposite."""
    state = next_response

    def answer() -> bool:
        nonlocal state
        previous = state
        state = not next_response
        return previous

    return answer


def run_once(fn: Callable[[], None]) -> Callable[[], None]:
    """Return a function that calls ``fn`` on its first call only."""
    first = once(True)

    def wrapper() -> None:
        if first():
            fn()

    return wrapper


def repeat_to_fill(text: str, length: int, limit: int) -> str:
    """Repeat ``text`` (of display width ``length``) to fill ``limit`` columns."""
    times, rest = divmod(limit, length)
    output = text * times
    if rest > 0:
        for char in text:
            rest -= _display_width(char)
            if rest < 0:
                break
            output += char
            if rest == 0:
                break
    return output


def to_kebab_case(text: str) -> str:
    """Convert CamelCase to kebab-case."""
    name = "".join(
        f"-{char}" if i > 0 and "A" <= char <= "Z" else char
        for i, char in enumerate(text)
    )
    return name.lower()


def _version_part(part: str) -> int:
    return int(part) if _INTEGER.fullmatch(part) else 0


def compare_versions(v1: str, v2: str) -> int:
    """Compare dotted version strings; return -1, 0 or 1."""
    parts1 = v1.split(".")
    parts2 = v2.split(".")
    for i in range(max(len(parts1), len(parts2))):
        p1 = _version_part(parts1[i]) if i < len(parts1) else 0
        p2 = _version_part(parts2[i]) if i < len(parts2) else 0
        if p1 > p2:
            return 1
        if p1 < p2:
            return -1
    return 0