"""
Scheduler Module - Timers and debouncing
========================================

This module provides the timing primitives used by the chat pipeline:
- A scheduler interface with cancellable delayed calls
- A thread-backed scheduler for the running application
- A manual (virtual clock) scheduler for deterministic tests
- A debouncer built on top of either scheduler
"""

import heapq
import itertools
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional, Set, Tuple

from .logging import get_logger

logger = get_logger("scheduler")


class TimerHandle:
    """
    Handle for a delayed call returned by ``Scheduler.call_later``.

    Cancelling is idempotent; a cancelled call never runs.
    """

    def __init__(self, when: float):
        self.when = when
        self._cancelled = False
        self._timer: Optional[threading.Timer] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True
        if self._timer is not None:
            self._timer.cancel()


class Scheduler(ABC):
    """
    Source of time and delayed calls.

    The pipeline never reads the wall clock or starts timers directly;
    it goes through a scheduler so tests can drive time by hand.
    """

    @abstractmethod
    def now(self) -> float:
        """Current time in seconds (monotonic)."""
        pass

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[..., Any], *args) -> TimerHandle:
        """
        Run ``callback(*args)`` after ``delay`` seconds.

        Args:
            delay: Delay in seconds
            callback: Function to call
            *args: Positional arguments for the callback

        Returns:
            Handle that can cancel the call
        """
        pass

    @abstractmethod
    def shutdown(self) -> None:
        """Cancel every pending call and refuse new ones."""
        pass


class ThreadingScheduler(Scheduler):
    """
    Scheduler backed by ``threading.Timer``.

    Callbacks run on the timer's own daemon thread. Exceptions raised by a
    callback are logged and do not affect other timers.
    """

    def __init__(self):
        self._timers: Set[TimerHandle] = set()
        self._lock = threading.Lock()
        self._closed = False

    def now(self) -> float:
        return time.monotonic()

    def call_later(self, delay: float, callback: Callable[..., Any], *args) -> TimerHandle:
        handle = TimerHandle(self.now() + delay)

        with self._lock:
            if self._closed:
                logger.debug("Scheduler is shut down, dropping delayed call")
                handle.cancel()
                return handle

            timer = threading.Timer(delay, self._run, args=(handle, callback, args))
            timer.daemon = True
            handle._timer = timer
            self._timers.add(handle)

        timer.start()
        return handle

    def _run(self, handle: TimerHandle, callback: Callable[..., Any], args: Tuple) -> None:
        with self._lock:
            self._timers.discard(handle)

        if handle.cancelled:
            return

        try:
            callback(*args)
        except Exception as e:
            logger.error(f"Scheduled callback failed: {e}", exc_info=True)

    def shutdown(self) -> None:
        with self._lock:
            self._closed = True
            pending = list(self._timers)
            self._timers.clear()

        for handle in pending:
            handle.cancel()

        if pending:
            logger.info(f"Cancelled {len(pending)} pending timer(s)")


class ManualScheduler(Scheduler):
    """
    Scheduler with a virtual clock.

    Nothing happens until ``advance`` is called; due callbacks then run
    synchronously on the caller's thread, in due-time order.

    Example:
        scheduler = ManualScheduler()
        scheduler.call_later(0.5, print, "fired")
        scheduler.advance(0.5)  # prints "fired"
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._queue: List[Tuple[float, int, TimerHandle, Callable[..., Any], Tuple]] = []
        self._counter = itertools.count()
        self._closed = False

    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[..., Any], *args) -> TimerHandle:
        handle = TimerHandle(self._now + delay)
        if self._closed:
            handle.cancel()
            return handle
        heapq.heappush(self._queue, (handle.when, next(self._counter), handle, callback, args))
        return handle

    def advance(self, seconds: float) -> None:
        """
        Move the clock forward, running every call that falls due.

        Args:
            seconds: How far to move the clock
        """
        target = self._now + seconds

        while self._queue and self._queue[0][0] <= target:
            when, _, handle, callback, args = heapq.heappop(self._queue)
            self._now = when
            if not handle.cancelled:
                callback(*args)

        self._now = target

    @property
    def pending(self) -> int:
        """Number of calls still waiting to run."""
        return sum(1 for entry in self._queue if not entry[2].cancelled)

    def shutdown(self) -> None:
        self._closed = True
        for entry in self._queue:
            entry[2].cancel()
        self._queue.clear()


class Debouncer:
    """
    Delays a callback until submissions stop for ``delay`` seconds.

    Each submission cancels the pending call and schedules a new one with
    the latest value, so a burst of submissions produces exactly one call
    carrying the last value.
    """

    def __init__(self, scheduler: Scheduler, delay: float, callback: Callable[[Any], None]):
        """
        Args:
            scheduler: Scheduler that owns the timers
            delay: Quiet period in seconds
            callback: Called with the last submitted value
        """
        self.scheduler = scheduler
        self.delay = delay
        self._callback = callback
        self._pending: Optional[TimerHandle] = None
        self._generation = 0
        self._lock = threading.Lock()

    def submit(self, value: Any) -> None:
        with self._lock:
            if self._pending is not None:
                self._pending.cancel()
            self._generation += 1
            self._pending = self.scheduler.call_later(
                self.delay, self._fire, self._generation, value
            )

    def _fire(self, generation: int, value: Any) -> None:
        with self._lock:
            # a newer submission won the race against this timer
            if generation != self._generation:
                return
            self._pending = None

        self._callback(value)

    def cancel(self) -> None:
        """Drop the pending call, if any."""
        with self._lock:
            if self._pending is not None:
                self._pending.cancel()
                self._pending = None
            self._generation += 1
