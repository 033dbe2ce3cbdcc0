"""Single-threaded virtual-time event queue for phase timers."""

from __future__ import annotations

import heapq
import itertools
from collections.abc import Callable

TimerCallback = Callable[[], None]


class TimerHandle:
    """A repeating timer registered with a Scheduler."""

    def __init__(self, interval: float, callback: TimerCallback) -> None:
        self.interval = interval
        self.callback = callback
        self.active = True

    def cancel(self) -> None:
        """Stop the timer; a cancelled timer never fires again."""
        self.active = False


class Scheduler:
    """Deliver interval timer callbacks in chronological order.

    Time only moves through ``advance``; callbacks run one at a time on the
    caller's thread, so they never overlap with each other or with user
    actions.
    """

    def __init__(self) -> None:
        self.now: float = 0.0
        self._queue: list[tuple[float, int, TimerHandle]] = []
        self._sequence = itertools.count()

    def call_every(self, interval: float, callback: TimerCallback) -> TimerHandle:
        """Run ``callback`` every ``interval`` units, starting one interval from now."""
        if interval <= 0:
            raise ValueError("Timer interval must be positive.")
        handle = TimerHandle(interval, callback)
        heapq.heappush(self._queue, (self.now + interval, next(self._sequence), handle))
        return handle

    def advance(self, units: float) -> None:
        """Move time forward, firing every callback that falls due on the way."""
        target = self.now + units
        while self._queue and self._queue[0][0] <= target:
            due, _, handle = heapq.heappop(self._queue)
            if not handle.active:
                continue
            self.now = due
            handle.callback()
            if handle.active:
                heapq.heappush(self._queue, (due + handle.interval, next(self._sequence), handle))
        self.now = target

    def pending(self) -> int:
        """Number of live timers."""
        return sum(1 for _, _, handle in self._queue if handle.active)
