"""
Cancellable timer scheduling for the memory budget subsystem.

The monitor tick, the periodic cleanup sweep and the emergency re-check
are all timer callbacks on a single event loop. They are scheduled
through the Scheduler interface so production code runs on asyncio while
tests drive a virtual clock deterministically.
"""

import asyncio
import heapq
import itertools
import logging
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


class TimerHandle:
    """A cancellable reference to a scheduled callback."""

    def __init__(self, cancel_func: Optional[Callback] = None):
        self._cancel_func = cancel_func
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        if self._cancel_func is not None:
            self._cancel_func()


class RepeatingHandle(TimerHandle):
    """Handle for a callback re-armed after every run."""

    def __init__(self):
        super().__init__(self._cancel_current)
        self.current: Optional[TimerHandle] = None

    def _cancel_current(self) -> None:
        if self.current is not None:
            self.current.cancel()


class Scheduler(ABC):
    """
    Abstract base class for timer schedulers.

    Subclasses provide a monotonic clock in seconds and one-shot delayed
    callbacks; periodic callbacks are built on top of those.
    """

    @abstractmethod
    def now(self) -> float:
        """Current monotonic time in seconds."""
        pass

    @abstractmethod
    def call_later(self, delay: float, callback: Callback) -> TimerHandle:
        """Run ``callback`` once after ``delay`` seconds."""
        pass

    def call_every(self, interval: float, callback: Callback) -> RepeatingHandle:
        """
        Run ``callback`` every ``interval`` seconds until cancelled.

        The next run is armed before the callback executes, so a failing
        callback does not stop the schedule.
        """
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")

        handle = RepeatingHandle()

        def fire() -> None:
            if handle.cancelled:
                return
            handle.current = self.call_later(interval, fire)
            callback()

        handle.current = self.call_later(interval, fire)
        return handle


class AsyncioScheduler(Scheduler):
    """Scheduler backed by an asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.loop = loop or asyncio.get_running_loop()

    def now(self) -> float:
        return self.loop.time()

    def call_later(self, delay: float, callback: Callback) -> TimerHandle:
        timer = self.loop.call_later(max(0.0, delay), callback)
        return TimerHandle(timer.cancel)


class ManualScheduler(Scheduler):
    """
    Scheduler on a virtual clock that only moves when advanced.

    Callbacks due at the same instant run in the order they were scheduled.
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._sequence = itertools.count()
        self._queue: List[Tuple[float, int, Callback, TimerHandle]] = []

    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callback) -> TimerHandle:
        handle = TimerHandle()
        due = self._now + max(0.0, delay)
        heapq.heappush(self._queue, (due, next(self._sequence), callback, handle))
        return handle

    @property
    def pending_count(self) -> int:
        return sum(1 for _, _, _, handle in self._queue if not handle.cancelled)

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward, running every callback that falls due.

        Returns:
            Number of callbacks executed
        """
        target = self._now + seconds
        executed = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, callback, handle = heapq.heappop(self._queue)
            self._now = due
            if handle.cancelled:
                continue
            callback()
            executed += 1
        self._now = target
        return executed
