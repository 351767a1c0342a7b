"""Cancelable delayed-task schedulers.

The detector never sleeps or creates timers itself; it asks a ``Scheduler``
to run a callback later. ``TimerScheduler`` uses real timer threads,
``ManualScheduler`` keeps a virtual clock that only moves when told to.
"""

from __future__ import annotations

import heapq
import itertools
import threading
from typing import Callable, List, Protocol, Tuple


class ScheduledTask(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledTask: ...


class _TimerTask:
    def __init__(self, timer: threading.Timer) -> None:
        self._timer = timer

    def cancel(self) -> None:
        self._timer.cancel()


class TimerScheduler:
    """Run callbacks on daemon ``threading.Timer`` threads."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> _TimerTask:
        timer = threading.Timer(max(0.0, float(delay)), callback)
        timer.daemon = True
        timer.start()
        return _TimerTask(timer)


class ManualTask:
    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Deterministic scheduler driven by :meth:`advance`."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = float(start)
        self._queue: List[Tuple[float, int, ManualTask]] = []
        self._counter = itertools.count()

    @property
    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualTask:
        task = ManualTask(self._now + max(0.0, float(delay)), callback)
        heapq.heappush(self._queue, (task.due, next(self._counter), task))
        return task

    def pending(self) -> int:
        return sum(1 for _, _, task in self._queue if not task.cancelled)

    def advance(self, seconds: float) -> int:
        """Move the clock forward, running every task that falls due.

        Tasks scheduled by callbacks run in the same call when their due time
        is within the new horizon. Returns the number of callbacks run.
        """

        horizon = self._now + max(0.0, float(seconds))
        ran = 0
        while self._queue and self._queue[0][0] <= horizon:
            due, _, task = heapq.heappop(self._queue)
            self._now = max(self._now, due)
            if task.cancelled:
                continue
            task.callback()
            ran += 1
        self._now = horizon
        return ran

    def run_pending(self) -> int:
        """Run tasks that are due now without moving the clock."""
        return self.advance(0.0)


__all__ = ["ManualScheduler", "ManualTask", "ScheduledTask", "Scheduler", "TimerScheduler"]
