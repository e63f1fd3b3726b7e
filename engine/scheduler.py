"""Timer scheduling for the round engine.

The round engine never reads a wall clock. It asks an injected Scheduler
for one-shot and repeating timers and cancels them on phase changes.

- VirtualScheduler: deterministic virtual time, advanced explicitly
- AsyncioScheduler: real time on an asyncio event loop

Both are single-threaded: callbacks run one at a time on the caller's
thread (VirtualScheduler) or the event loop thread (AsyncioScheduler).
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from abc import ABC, abstractmethod
from typing import Callable, Optional

TimerCallback = Callable[[], None]


class TimerHandle(ABC):
    """A scheduled timer that can be cancelled."""

    @abstractmethod
    def cancel(self) -> None:
        """Stop the timer. Safe to call more than once."""
        pass

    @property
    @abstractmethod
    def active(self) -> bool:
        """True while the timer may still fire."""
        pass


class Scheduler(ABC):
    """Source of timers for the round engine."""

    @abstractmethod
    def call_later(self, delay_ms: int, callback: TimerCallback) -> TimerHandle:
        """Run callback once after delay_ms milliseconds."""
        pass

    @abstractmethod
    def call_repeating(self, interval_ms: int, callback: TimerCallback) -> TimerHandle:
        """Run callback every interval_ms milliseconds until cancelled.

        The first call happens one interval from now.
        """
        pass


# =============================================================================
# Virtual time
# =============================================================================


class _VirtualTimer(TimerHandle):
    def __init__(self, due_ms: int, interval_ms: Optional[int], callback: TimerCallback):
        self.due_ms = due_ms
        self.interval_ms = interval_ms
        self.callback = callback
        self._active = True

    def cancel(self) -> None:
        self._active = False

    @property
    def active(self) -> bool:
        return self._active


class VirtualScheduler(Scheduler):
    """Scheduler driven by explicit calls to advance().

    Timers fire in due-time order; timers due at the same instant fire
    in the order they were scheduled.

    Usage:
        scheduler = VirtualScheduler()
        engine = RoundEngine(scheduler)
        engine.start()
        scheduler.advance(10_000)  # ten virtual seconds
    """

    def __init__(self):
        self._now_ms = 0
        self._queue: list[tuple[int, int, _VirtualTimer]] = []
        self._seq = itertools.count()

    @property
    def now_ms(self) -> int:
        """Current virtual time in milliseconds."""
        return self._now_ms

    def call_later(self, delay_ms: int, callback: TimerCallback) -> TimerHandle:
        if delay_ms < 0:
            raise ValueError(f"Delay must be non-negative, got {delay_ms}")
        timer = _VirtualTimer(self._now_ms + delay_ms, None, callback)
        self._push(timer)
        return timer

    def call_repeating(self, interval_ms: int, callback: TimerCallback) -> TimerHandle:
        if interval_ms <= 0:
            raise ValueError(f"Interval must be positive, got {interval_ms}")
        timer = _VirtualTimer(self._now_ms + interval_ms, interval_ms, callback)
        self._push(timer)
        return timer

    def _push(self, timer: _VirtualTimer) -> None:
        heapq.heappush(self._queue, (timer.due_ms, next(self._seq), timer))

    def advance(self, ms: int) -> int:
        """Move virtual time forward, firing every timer that comes due.

        Args:
            ms: Milliseconds to advance.

        Returns:
            Number of callbacks fired.
        """
        if ms < 0:
            raise ValueError(f"Cannot advance by a negative amount: {ms}")

        target = self._now_ms + ms
        fired = 0

        while self._queue and self._queue[0][0] <= target:
            due_ms, _, timer = heapq.heappop(self._queue)
            if not timer.active:
                continue

            self._now_ms = due_ms
            if timer.interval_ms is None:
                timer.cancel()
            fired += 1
            try:
                timer.callback()
            finally:
                # A repeating timer may have been cancelled by its own callback
                if timer.interval_ms is not None and timer.active:
                    timer.due_ms = due_ms + timer.interval_ms
                    self._push(timer)

        self._now_ms = target
        return fired

    def pending_count(self) -> int:
        """Number of timers that may still fire."""
        return sum(1 for _, _, timer in self._queue if timer.active)

    def next_due_ms(self) -> Optional[int]:
        """Virtual time of the next active timer, or None if idle."""
        due = [due_ms for due_ms, _, timer in self._queue if timer.active]
        return min(due) if due else None


# =============================================================================
# Real time
# =============================================================================


class _AsyncioTimer(TimerHandle):
    def __init__(self):
        self._handle: Optional[asyncio.TimerHandle] = None
        self._active = True

    def cancel(self) -> None:
        self._active = False
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    @property
    def active(self) -> bool:
        return self._active


class AsyncioScheduler(Scheduler):
    """Scheduler backed by an asyncio event loop.

    Must be used from the loop's thread. If no loop is given, the running
    loop is looked up when the first timer is scheduled.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay_ms: int, callback: TimerCallback) -> TimerHandle:
        timer = _AsyncioTimer()

        def fire() -> None:
            if not timer.active:
                return
            timer.cancel()
            callback()

        timer._handle = self.loop.call_later(delay_ms / 1000.0, fire)
        return timer

    def call_repeating(self, interval_ms: int, callback: TimerCallback) -> TimerHandle:
        if interval_ms <= 0:
            raise ValueError(f"Interval must be positive, got {interval_ms}")
        timer = _AsyncioTimer()
        loop = self.loop
        interval = interval_ms / 1000.0
        next_due = loop.time() + interval

        def fire() -> None:
            nonlocal next_due
            if not timer.active:
                return
            try:
                callback()
            finally:
                if timer.active:
                    # Schedule from the ideal due time so ticks do not drift
                    next_due += interval
                    timer._handle = loop.call_at(next_due, fire)

        timer._handle = loop.call_at(next_due, fire)
        return timer
