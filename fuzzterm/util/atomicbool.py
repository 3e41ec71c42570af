"""A boolean value with synchronised access."""

from __future__ import annotations

import threading


class AtomicBool:
    """Boolean guarded by a lock."""

    def __init__(self, initial_state: bool = False) -> None:
        self._state = bool(initial_state)
        self._lock = threading.Lock()

    def get(self) -> bool:
        """Return the current value."""
        with self._lock:
            return self._state

    def set(self, new_state: bool) -> bool:
        """Store ``new_state`` and return it."""
        new_state = bool(new_state)
        with self._lock:
            self._state = new_state
        return new_state

    def __bool__(self) -> bool:
        return self.get()

    def __repr__(self) -> str:
        return f"AtomicBool({self.get()!r})"