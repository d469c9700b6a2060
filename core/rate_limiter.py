"""
Rate Limiter Module - Submission throttling
===========================================

This module provides the throttle that guards the chat input against
duplicate rapid submissions: a submission arriving within the minimum
interval of the previously accepted one is dropped.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .logging import get_logger

logger = get_logger("rate_limiter")


@dataclass
class RateLimitResult:
    """
    Result of a throttle check.

    Attributes:
        allowed (bool): Whether the submission is accepted
        retry_after (float): Seconds until a submission would be accepted
    """
    allowed: bool
    retry_after: float = 0.0


class Throttle:
    """
    Throttle-first limiter.

    The first submission is always accepted and opens a window of
    ``min_interval_seconds``; submissions inside that window are rejected
    without extending it.

    Example:
        throttle = Throttle(min_interval_seconds=0.5)

        if throttle.check_and_record().allowed:
            handle(message)
    """

    def __init__(
        self,
        min_interval_seconds: float = 0.5,
        clock: Optional[Callable[[], float]] = None
    ):
        """
        Args:
            min_interval_seconds: Minimum seconds between accepted submissions
            clock: Time source in seconds, ``time.monotonic`` by default
        """
        self.min_interval_seconds = min_interval_seconds
        self._clock = clock or time.monotonic
        self._last_accepted: Optional[float] = None
        self._lock = threading.Lock()

    def check(self) -> RateLimitResult:
        """Check whether a submission would be accepted, without recording it."""
        with self._lock:
            return self._check(self._clock())

    def check_and_record(self) -> RateLimitResult:
        """Check a submission and, if accepted, start a new window."""
        with self._lock:
            now = self._clock()
            result = self._check(now)
            if result.allowed:
                self._last_accepted = now
            else:
                logger.debug(f"Submission throttled, retry after {result.retry_after:.3f}s")
            return result

    def _check(self, now: float) -> RateLimitResult:
        if self._last_accepted is None:
            return RateLimitResult(allowed=True)

        elapsed = now - self._last_accepted
        if elapsed >= self.min_interval_seconds:
            return RateLimitResult(allowed=True)

        return RateLimitResult(allowed=False, retry_after=self.min_interval_seconds - elapsed)

    def reset(self) -> None:
        with self._lock:
            self._last_accepted = None
