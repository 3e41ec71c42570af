"""Running commands through the user's shell, and low-level descriptor helpers."""

from __future__ import annotations

import enum
import ntpath
import os
import re
import shutil
import signal
import subprocess
import sys
from collections.abc import Iterable, Mapping

_CMD_SPECIAL = re.compile(r'[&|<>()^%!"]')


def is_windows() -> bool:
    """Tell whether the program runs on Windows."""
    return os.name == "nt"


class ShellType(enum.Enum):
    """Kind of shell, which decides how arguments are quoted."""

    UNKNOWN = enum.auto()
    CMD = enum.auto()
    POWERSHELL = enum.auto()


def escape_arg(text: str) -> str:
    """Quote ``text`` for the Windows command interpreter."""
    out = ['"']
    slashes = 0
    for char in text:
        if char == "\\":
            slashes += 1
        elif char == '"':
            out.append("\\" * slashes)
            out.append("\\")
            slashes = 0
        else:
            slashes = 0
        out.append(char)
    out.append("\\" * slashes)
    out.append('"')
    return _CMD_SPECIAL.sub(lambda m: "^" + m.group(), "".join(out))


def _env_mapping(environ: Mapping[str, str] | Iterable[str] | None) -> dict[str, str] | None:
    if environ is None:
        return None
    if isinstance(environ, Mapping):
        return dict(environ)
    result = {}
    for entry in environ:
        key, _, value = entry.partition("=")
        result[key] = value
    return result


class Executor:
    """Runs commands through a shell chosen from ``with_shell`` or ``$SHELL``."""

    def __init__(self, with_shell: str = "", *, windows: bool | None = None) -> None:
        self.windows = is_windows() if windows is None else windows
        shell = os.environ.get("SHELL", "")
        args = with_shell.split()
        self.shell_type = ShellType.UNKNOWN
        if self.windows:
            if args:
                shell = args[0]
            elif not shell:
                shell = "cmd"
            basename = ntpath.basename(shell)
            if args:
                args = args[1:]
            elif basename.startswith("cmd"):
                self.shell_type = ShellType.CMD
                args = ["/s/c"]
            elif basename.startswith(("pwsh", "powershell")):
                self.shell_type = ShellType.POWERSHELL
                args = ["-NoProfile", "-Command"]
            else:
                args = ["-c"]
        elif args:
            shell, args = args[0], args[1:]
        else:
            shell = shell or "sh"
            args = ["-c"]
        self.shell = shell
        self.args = args
        self._fish = not self.windows and shell.split("/")[-1] == "fish"
        self._shell_path: str | None = None

    def _resolved_shell(self) -> str:
        if self._shell_path is None:
            shell = self.shell
            if "/" in shell:
                try:
                    out = subprocess.run(
                        ["cygpath", "-w", shell], capture_output=True, check=True
                    ).stdout
                    shell = out.decode().strip("\n")
                except (OSError, subprocess.CalledProcessError):
                    pass
            self._shell_path = shell
        return self._shell_path

    def command_args(self, command: str) -> list[str]:
        """Return the argument vector that runs ``command`` in the shell."""
        return [self.shell, *self.args, command]

    def exec_command(self, command: str, setpgid: bool = False, **kwargs) -> subprocess.Popen:
        """Start ``command`` in the shell; extra arguments go to ``Popen``.

        With ``setpgid`` the child gets its own process group (not on Windows).
        """
        if self.windows:
            shell = self._resolved_shell()
            if self.shell_type is ShellType.CMD:
                cmdline = f'{" ".join(self.args)} "{command}"'
                return subprocess.Popen(cmdline, executable=shell, **kwargs)
            return subprocess.Popen([shell, *self.args, command], **kwargs)
        if setpgid:
            kwargs.setdefault("preexec_fn", os.setpgrp)
        return subprocess.Popen(self.command_args(command), **kwargs)

    def quote_entry(self, entry: str) -> str:
        """Quote ``entry`` so the shell passes it as one literal word."""
        if self.windows:
            if self.shell_type is ShellType.CMD:
                return escape_arg(entry)
            if self.shell_type is ShellType.POWERSHELL:
                escaped = entry.replace('"', '\\"')
                return "'" + escaped.replace("'", "''") + "'"
            return "'" + entry.replace("'", "'\\''") + "'"
        if self._fish:
            return "'" + entry.replace("\\", "\\\\").replace("'", "\\'") + "'"
        return "'" + entry.replace("'", "'\\''") + "'"

    def become(self, stdin, environ, command: str) -> None:
        """Replace the current process with ``command`` run by the shell."""
        env = _env_mapping(environ)
        if self.windows:
            try:
                proc = self.exec_command(command, False, stdin=stdin, env=env)
            except OSError as err:
                print(f"fuzzterm (become): {err}", file=sys.stderr)
                sys.exit(127)
            sys.exit(proc.wait())

        shell_path = shutil.which(self.shell)
        if shell_path is None:
            print(
                f'fuzzterm (become): exec: "{self.shell}": executable file not found in $PATH',
                file=sys.stderr,
            )
            sys.exit(127)
        set_stdin(stdin)
        os.execve(shell_path, [shell_path, *self.args, command], env if env is not None else os.environ)


def kill_command(proc: subprocess.Popen) -> None:
    """Kill the process started for a command, with its process group on POSIX."""
    if is_windows():
        proc.kill()
    else:
        os.killpg(proc.pid, signal.SIGKILL)


def _fileno(file) -> int:
    return file if isinstance(file, int) else file.fileno()


def set_nonblock(file, nonblock: bool) -> None:
    """Switch non-blocking mode of a file or descriptor (no effect on Windows)."""
    if not is_windows():
        os.set_blocking(_fileno(file), not nonblock)


def read(fd, size: int = 1) -> bytes:
    """Read up to ``size`` bytes from a descriptor."""
    return os.read(_fileno(fd), size)


def set_stdin(file) -> None:
    """Make ``file`` the process's standard input (no effect on Windows)."""
    if not is_windows():
        os.dup2(_fileno(file), 0)