"""Item text stored compactly as ASCII bytes or as a Unicode string."""

from __future__ import annotations

from fuzzterm.util.helpers import as_uint16, runes_width

_NOT_SPACE = frozenset("\x1c\x1d\x1e\x1f")


def _is_space(char: str) -> bool:
    return char.isspace() and char not in _NOT_SPACE


class Chars:
    """The characters of one item, kept as bytes while they are all ASCII.

    ``index`` carries the position of the item in its list.
    """

    __slots__ = ("_text", "_in_bytes", "_trim_length", "index")

    def __init__(self, text: str, in_bytes: bool = False, index: int = 0) -> None:
        self._text = text
        self._in_bytes = in_bytes
        self._trim_length: int | None = None
        self.index = index

    def is_bytes(self) -> bool:
        """Tell whether the text is held as single-byte characters."""
        return self._in_bytes

    def bytes(self) -> bytes:
        """Return the text as bytes (UTF-8 when not held as bytes)."""
        if self._in_bytes:
            return self._text.encode("latin-1")
        return self._text.encode("utf-8")

    def __len__(self) -> int:
        return len(self._text)

    def __getitem__(self, key):
        return self._text[key]

    def __str__(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return f"Chars({self._text!r}, in_bytes={self._in_bytes}, index={self.index})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Chars):
            return NotImplemented
        return self._text == other._text and self._in_bytes == other._in_bytes

    def __hash__(self) -> int:
        return hash((self._text, self._in_bytes))

    def num_lines(self, at_most: int) -> tuple[int, bool]:
        """Count lines, stopping at ``at_most``; the flag tells whether it stopped."""
        lines = 1
        start = 0
        while (found := self._text.find("\n", start)) >= 0:
            lines += 1
            if lines > at_most:
                return at_most, True
            start = found + 1
        return lines, False

    def trim_length(self) -> int:
        """Return the length without leading and trailing whitespace."""
        if self._trim_length is None:
            trailing = self.trailing_whitespaces()
            if trailing == len(self._text):
                self._trim_length = 0
            else:
                leading = self.leading_whitespaces()
                self._trim_length = as_uint16(len(self._text) - trailing - leading)
        return self._trim_length

    def leading_whitespaces(self) -> int:
        """Return the number of whitespace characters at the start."""
        count = 0
        for char in self._text:
            if not _is_space(char):
                break
            count += 1
        return count

    def trailing_whitespaces(self) -> int:
        """Return the number of whitespace characters at the end."""
        count = 0
        for char in reversed(self._text):
            if not _is_space(char):
                break
            count += 1
        return count

    def trim_trailing_whitespaces(self) -> None:
        """Drop whitespace at the end of the text."""
        trailing = self.trailing_whitespaces()
        if trailing:
            self._text = self._text[: len(self._text) - trailing]

    def to_string(self) -> str:
        """Return the text as a string."""
        return self._text

    def to_runes(self) -> list[str]:
        """Return the text as a list of characters."""
        return list(self._text)

    def prepend(self, prefix: str) -> None:
        """Put ``prefix`` in front of the text."""
        self._text = prefix + self._text
        if self._in_bytes and not prefix.isascii():
            self._in_bytes = False
        self._trim_length = None

    def lines(
        self,
        multi_line: bool,
        max_lines: int,
        wrap_cols: int,
        wrap_sign_width: int,
        tabstop: int,
    ) -> tuple[list[str], bool]:
        """Split the text into display lines, wrapping at ``wrap_cols`` if non-zero.

        Returns the lines and whether ``max_lines`` cut the text short.
        Lines keep their trailing newline.
        """
        text = self._text
        overflow = False
        if not multi_line:
            lines = [text]
        else:
            lines = []
            start = 0
            while (found := text.find("\n", start)) >= 0:
                lines.append(text[start : found + 1])
                start = found + 1
                if len(lines) >= max_lines:
                    break
            if len(lines) >= max_lines:
                overflow = True
            else:
                lines.append(text[start:])

        if wrap_cols == 0:
            return lines, overflow

        wrapped: list[str] = []
        for line in lines:
            newline = line.endswith("\n")
            if newline:
                line = line[:-1]
            while True:
                cols = wrap_cols - (wrap_sign_width if wrapped else 0)
                _, overflow_idx = runes_width(line, 0, tabstop, cols)
                if overflow_idx >= 0:
                    overflow_idx = max(overflow_idx, 1)
                    if len(wrapped) >= max_lines:
                        return wrapped, True
                    wrapped.append(line[:overflow_idx])
                    line = line[overflow_idx:]
                    continue
                if newline:
                    line += "\n"
                if len(wrapped) >= max_lines:
                    return wrapped, True
                wrapped.append(line)
                break
        return wrapped, False


def to_chars(data: bytes | str) -> Chars:
    """Make a :class:`Chars` from UTF-8 bytes, keeping pure ASCII as bytes."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    if data.isascii():
        return Chars(data.decode("ascii"), in_bytes=True)
    return runes_to_chars(data.decode("utf-8", errors="replace"))


def runes_to_chars(runes) -> Chars:
    """Make a :class:`Chars` held as characters from a string or characters."""
    if not isinstance(runes, str):
        runes = "".join(runes)
    return Chars(runes, in_bytes=False)