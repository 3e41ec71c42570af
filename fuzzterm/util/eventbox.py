"""Coordination of events between threads."""

from __future__ import annotations

import threading
from typing import Any, Callable, Hashable


class EventBox:
    """A set of pending events, each with a value, that threads can wait on."""

    def __init__(self) -> None:
        self._events: dict[Hashable, Any] = {}
        self._cond = threading.Condition(threading.Lock())
        self._ignore: set[Hashable] = set()

    def wait(self, callback: Callable[[dict[Hashable, Any]], None]) -> None:
        """Block until some event is set, then call ``callback`` with the events.

        The callback runs with the box locked and may clear the dictionary.
        """
        with self._cond:
            if not self._events:
                self._cond.wait()
            callback(self._events)

    def set(self, event: Hashable, value: Any) -> None:
        """Set ``event`` with ``value`` and wake waiters unless it is ignored."""
        with self._cond:
            self._events[event] = value
            if event not in self._ignore:
                self._cond.notify_all()

    def peek(self, event: Hashable) -> bool:
        """Tell whether ``event`` is currently set."""
        with self._cond:
            return event in self._events

    def watch(self, *events: Hashable) -> None:
        """Remove ``events`` from the ignore list."""
        with self._cond:
            self._ignore.difference_update(events)

    def unwatch(self, *events: Hashable) -> None:
        """Add ``events`` to the ignore list."""
        with self._cond:
            self._ignore.update(events)

    def wait_for(self, event: Hashable) -> None:
        """Block until ``event`` has been set."""
        found = False

        def check(events: dict[Hashable, Any]) -> None:
            nonlocal found
            found = event in events

        while not found:
            self.wait(check)