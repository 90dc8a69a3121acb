from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional
import logging
import math

log = logging.getLogger(__name__)

# due-time slack; wall-clock floats near 1.7e9 are only ~2.4e-7 apart
_EPS = 1e-6


@dataclass
class PeriodicTask:
    """A task due at `origin + k * interval` for k = 1, 2, ..."""

    name: str
    interval: float  # seconds
    callback: Callable[[int], None]
    origin: float
    fired: int = 0
    coalesce: bool = False

    @property
    def next_due(self) -> float:
        return self.origin + (self.fired + 1) * self.interval

    def due_count(self, now: float) -> int:
        return max(0, int(math.floor((now + _EPS - self.origin) / self.interval)) - self.fired)


class Scheduler:
    """Cooperative timer table read against an external clock.

    Nothing runs on its own: the owner calls `advance()` and every task whose
    due time has passed fires, oldest first. Callbacks receive the number of
    intervals they settle: always 1, unless the task was started with
    `coalesce=True`, in which case all missed intervals arrive in one call.
    With `max_catch_up` set, intervals older than that many seconds are
    dropped rather than delivered. Callbacks may start or cancel tasks.
    """

    def __init__(self, clock: Callable[[], float], *, max_catch_up: Optional[float] = None) -> None:
        self.clock = clock
        self.max_catch_up = max_catch_up
        self.skipped = 0
        self._tasks: Dict[str, PeriodicTask] = {}
        self._firing_at: Optional[float] = None

    def _now(self) -> float:
        # inside a callback, "now" is the due time being delivered
        return self._firing_at if self._firing_at is not None else float(self.clock())

    def start(self, name: str, interval: float, callback: Callable[[int], None], *, coalesce: bool = False) -> bool:
        """Register a task; starting one that already runs is a no-op."""
        if name in self._tasks:
            return False
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._tasks[name] = PeriodicTask(
            name=name, interval=float(interval), callback=callback, origin=self._now(), coalesce=coalesce
        )
        return True

    def cancel(self, name: str) -> bool:
        return self._tasks.pop(name, None) is not None

    def cancel_all(self) -> None:
        self._tasks.clear()

    def running(self, name: str) -> bool:
        return name in self._tasks

    def names(self) -> List[str]:
        return sorted(self._tasks)

    def _drop_stale(self, now: float) -> None:
        if self.max_catch_up is None:
            return
        for t in self._tasks.values():
            keep_from = int(math.floor((now - self.max_catch_up - t.origin) / t.interval))
            if keep_from > t.fired:
                self.skipped += keep_from - t.fired
                log.warning("timer %s: dropped %d interval(s) older than %ss", t.name, keep_from - t.fired, self.max_catch_up)
                t.fired = keep_from

    def advance(self, now: Optional[float] = None) -> int:
        """Deliver everything due up to `now` (default: the clock); returns the callback count."""
        now = float(self.clock()) if now is None else float(now)
        self._drop_stale(now)
        calls = 0
        try:
            while True:
                due = [t for t in self._tasks.values() if t.due_count(now) > 0]
                if not due:
                    break
                task = min(due, key=lambda t: (t.next_due, t.name))
                count = task.due_count(now) if task.coalesce else 1
                task.fired += count
                self._firing_at = task.origin + task.fired * task.interval
                task.callback(count)
                calls += 1
        finally:
            self._firing_at = None
        return calls
