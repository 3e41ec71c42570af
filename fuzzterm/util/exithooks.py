"""Functions to run on program termination, in reverse order of registration."""

from __future__ import annotations

import threading
from typing import Callable

_exit_funcs: list[Callable[[], None]] = []


def _call_once(fn: Callable[[], None]) -> Callable[[], None]:
    lock = threading.Lock()
    done = False

    def wrapper() -> None:
        nonlocal done
        with lock:
            if done:
                return
            done = True
        fn()

    return wrapper


def at_exit(fn: Callable[[], None]) -> None:
    """Register ``fn`` to be called by :func:`run_at_exit_funcs`."""
    if fn is None:
        raise ValueError("at_exit called with None")
    _exit_funcs.append(_call_once(fn))


def run_at_exit_funcs() -> None:
    """Run every registered function, newest first, then forget them all."""
    global _exit_funcs
    funcs = _exit_funcs
    for fn in reversed(funcs):
        fn()
    _exit_funcs = []