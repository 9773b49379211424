"""Quiet-period timer: only the last trigger within the delay fires."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any

SEARCH_DEBOUNCE_SECONDS = 0.4


class Debouncer:
    """Holds at most one pending timer; each trigger cancels and restarts it."""

    def __init__(
        self,
        delay: float,
        callback: Callable[..., Any],
        timer_factory: Callable[..., Any] = threading.Timer,
    ) -> None:
        """Initialise the debouncer.

        Args:
            delay: Quiet period in seconds.
            callback: Called with the arguments of the last trigger once the
                quiet period elapses.
            timer_factory: ``threading.Timer``-compatible constructor.
        """
        self._delay = delay
        self._callback = callback
        self._timer_factory = timer_factory
        self._timer: Any = None
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def trigger(self, *args: Any) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            timer = self._timer_factory(self._delay, self._fire, args=(self._generation, args))
            timer.daemon = True
            self._timer = timer
        timer.start()

    def cancel(self) -> None:
        with self._lock:
            self._generation += 1
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def _fire(self, generation: int, args: tuple[Any, ...]) -> None:
        # A timer cancelled after it started running must not fire.
        with self._lock:
            if generation != self._generation:
                return
            self._timer = None
        self._callback(*args)
