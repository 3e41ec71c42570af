"""Terminal device access: opening the tty, raw mode, byte input and size."""

from __future__ import annotations

import os
import re
import struct
import time
from typing import Callable

try:
    import fcntl
    import termios
    import tty
except ImportError:  # not available on Windows
    fcntl = None
    termios = None
    tty = None

from fuzzterm.tui.borders import TermSize
from fuzzterm.util.executor import read, set_nonblock

DEFAULT_WIDTH = 80
DEFAULT_HEIGHT = 24
DEFAULT_ESC_DELAY = 100
ESC_POLL_INTERVAL = 5
OFFSET_POLL_TRIES = 10
MAX_INPUT_BUFFER = 1024 * 1024

CONSOLE_DEVICE = "/dev/tty"

_ESC = 27
_OFFSET = re.compile(rb"(.*)\x1b\[([0-9]+);([0-9]+)R")
_INTEGER = re.compile(r"[+-]?[0-9]+")
_DEV_PREFIXES = ("/dev/pts/", "/dev/")

_tty_cache: str | None = None


def atoi(text: str, default: int) -> int:
    """Parse a decimal integer, returning ``default`` if ``text`` is not one."""
    if _INTEGER.fullmatch(text):
        return int(text)
    return default


def get_env_int(name: str, default: int) -> int:
    """Return the integer value of environment variable ``name`` or ``default``."""
    value = os.environ.get(name, "")
    if not value:
        return default
    return atoi(value, default)


def ttyname() -> str:
    """Return the path of the terminal device behind standard error, or ''."""
    global _tty_cache
    if _tty_cache is not None:
        return _tty_cache
    try:
        rdev = os.fstat(2).st_rdev
    except OSError:
        return ""
    for prefix in _DEV_PREFIXES:
        try:
            entries = sorted(os.scandir(prefix), key=lambda e: e.name)
        except OSError:
            continue
        for entry in entries:
            try:
                stat = entry.stat(follow_symlinks=False)
            except OSError:
                continue
            if stat.st_rdev == rdev:
                _tty_cache = prefix + entry.name
                return _tty_cache
    return ""


def _open_tty(mode: str):
    try:
        return open(CONSOLE_DEVICE, mode, buffering=0)
    except OSError:
        name = ttyname()
        if name:
            try:
                return open(name, mode, buffering=0)
            except OSError:
                pass
        raise OSError(f"failed to open {CONSOLE_DEVICE}") from None


def open_tty_in():
    """Open the terminal device for reading user input."""
    return _open_tty("rb")


def open_tty_out():
    """Open the terminal device for writing."""
    return _open_tty("wb")


def _fileno(file) -> int:
    return file if isinstance(file, int) else file.fileno()


class TtyReader:
    """Reads raw bytes from a terminal and manages its raw mode.

    ``pending`` collects input that arrived while waiting for a cursor
    position report.
    """

    def __init__(self, ttyin, esc_delay: int | None = None) -> None:
        self.ttyin = ttyin
        if esc_delay is None:
            esc_delay = atoi(os.environ.get("ESCDELAY", ""), DEFAULT_ESC_DELAY)
        self.esc_delay = esc_delay
        self.pending = bytearray()
        self._orig_state = None

    @property
    def fd(self) -> int:
        """The file descriptor read from."""
        return _fileno(self.ttyin)

    def _esc_retries(self) -> int:
        return self.esc_delay // ESC_POLL_INTERVAL

    def getch(self, nonblock: bool) -> int | None:
        """Read one byte; return None when nothing could be read."""
        try:
            set_nonblock(self.fd, nonblock)
            data = read(self.fd, 1)
        except OSError:
            return None
        if not data:
            return None
        return data[0]

    def get_bytes(self, buffer: bytes = b"", nonblock: bool = False) -> bytes:
        """Read what is available, appended to ``buffer``.

        After an escape byte (or in non-blocking mode) the read waits up to
        the escape delay for the rest of a sequence. Raises ``OSError`` when
        a blocking read fails or the input grows too large.
        """
        out = bytearray(buffer)
        c = self.getch(nonblock)
        if c is None and not nonblock:
            raise OSError(f"failed to read {CONSOLE_DEVICE}")

        retries = self._esc_retries() if (c == _ESC or nonblock) else 0
        if c is not None:
            out.append(c)

        previous = c
        while True:
            c = self.getch(True)
            if c is None:
                if retries > 0:
                    retries -= 1
                    time.sleep(ESC_POLL_INTERVAL / 1000)
                    continue
                break
            if c == _ESC and previous != c:
                retries = self._esc_retries()
            else:
                retries = 0
            out.append(c)
            previous = c
            if len(out) > MAX_INPUT_BUFFER:
                raise OSError(f"input buffer overflow ({len(out)})")
        return bytes(out)

    def find_offset(self, write: Callable[[str], object]) -> tuple[int, int]:
        """Ask the terminal for the cursor position; return (row, column).

        ``write`` must send its argument to the terminal at once. Returns
        (-1, -1) if the terminal does not answer.
        """
        write("\x1b[6n")
        data = b""
        for tries in range(OFFSET_POLL_TRIES):
            try:
                data = self.get_bytes(data, tries > 0)
            except OSError:
                return -1, -1
            match = _OFFSET.search(data)
            if match:
                self.pending.extend(match.group(1))
                row = atoi(match.group(2).decode("ascii"), 0) - 1
                col = atoi(match.group(3).decode("ascii"), 0) - 1
                return row, col
        return -1, -1

    def terminal_size(self, max_height_func: Callable[[int], int]) -> tuple[int, int]:
        """Return (width, height), the height passed through ``max_height_func``.

        Falls back to $COLUMNS and $LINES when the size cannot be queried.
        """
        try:
            size = os.get_terminal_size(self.fd)
        except (OSError, ValueError):
            width = get_env_int("COLUMNS", DEFAULT_WIDTH)
            height = get_env_int("LINES", DEFAULT_HEIGHT)
            return width, max_height_func(height)
        return size.columns, max_height_func(size.lines)

    def winsize(self) -> TermSize:
        """Return the window size in cells and pixels, or zeros if unknown."""
        if fcntl is None or termios is None:
            return TermSize(0, 0)
        try:
            packed = fcntl.ioctl(self.fd, termios.TIOCGWINSZ, b"\0" * 8)
        except OSError:
            return TermSize(0, 0)
        rows, cols, xpixel, ypixel = struct.unpack("HHHH", packed)
        return TermSize(rows, cols, xpixel, ypixel)

    def make_raw(self) -> None:
        """Put the terminal into raw mode, remembering the first original state."""
        if termios is None or tty is None:
            raise OSError("raw mode is not supported on this platform")
        try:
            state = termios.tcgetattr(self.fd)
            tty.setraw(self.fd)
        except termios.error as err:
            raise OSError(*err.args) from err
        if self._orig_state is None:
            self._orig_state = state

    def restore(self) -> None:
        """Restore the terminal state saved by :meth:`make_raw`."""
        if termios is None or self._orig_state is None:
            return
        try:
            termios.tcsetattr(self.fd, termios.TCSANOW, self._orig_state)
        except termios.error:
            pass