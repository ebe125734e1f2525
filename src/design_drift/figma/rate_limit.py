"""Tracking of the server-reported rate-limit quota.

Figma reports the remaining quota and its reset time on responses:

    X-RateLimit-Remaining: 12
    X-RateLimit-Reset: 1735689600   (epoch seconds)

The tracker keeps the most recent values. Before sending, the executor asks
it whether the quota is low enough to voluntarily wait for the reset instead
of running into a 429.

Example usage:
    tracker = RateLimitTracker()
    tracker.update(response.headers)

    await tracker.wait_if_needed(threshold=5)
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from multidict import CIMultiDict

logger = logging.getLogger(__name__)

REMAINING_HEADER = "X-RateLimit-Remaining"
RESET_HEADER = "X-RateLimit-Reset"

# Assumed window when the server reports a quota without a reset time
DEFAULT_RESET_WINDOW = 60.0


@dataclass(frozen=True, slots=True)
class RateLimitInfo:
    """Snapshot of the rate-limit quota.

    Attributes:
        remaining: Requests left in the current window
        reset_at: Epoch seconds at which the window resets
    """

    remaining: int
    reset_at: float

    def seconds_until_reset(self, now: float | None = None) -> float:
        """Time left until the window resets, never negative."""
        if now is None:
            now = time.time()
        return max(self.reset_at - now, 0.0)


class RateLimitTracker:
    """Holds the last-seen rate-limit state for one client.

    Args:
        clock: Source of epoch seconds, defaults to time.time
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._info: RateLimitInfo | None = None

    @property
    def info(self) -> RateLimitInfo | None:
        """The latest snapshot, or None if no response reported one."""
        return self._info

    def update(self, headers: CIMultiDict[str]) -> None:
        """Record rate-limit headers from a completed response.

        Responses without X-RateLimit-Remaining leave the state untouched.
        A reset time that is not a finite number is treated as missing.
        """
        raw_remaining = headers.get(REMAINING_HEADER)
        if raw_remaining is None:
            return

        try:
            remaining = int(raw_remaining.strip())
        except ValueError:
            logger.debug("Ignoring malformed %s: %r", REMAINING_HEADER, raw_remaining)
            return

        raw_reset = headers.get(RESET_HEADER)
        reset_at: float | None = None
        if raw_reset is not None:
            try:
                reset_at = float(raw_reset.strip())
            except ValueError:
                reset_at = None
            if reset_at is None or not math.isfinite(reset_at):
                logger.debug("Ignoring malformed %s: %r", RESET_HEADER, raw_reset)
                reset_at = None
        if reset_at is None:
            reset_at = self._clock() + DEFAULT_RESET_WINDOW

        self._info = RateLimitInfo(remaining=remaining, reset_at=reset_at)

    def time_until_allowed(self, threshold: int) -> float:
        """Seconds to wait before sending, given a proactive threshold.

        Returns 0.0 when throttling is disabled (threshold <= 0), when no
        quota has been reported, when the quota is above the threshold, or
        when the reset time has already passed.
        """
        info = self._info
        if threshold <= 0 or info is None or info.remaining > threshold:
            return 0.0
        return info.seconds_until_reset(self._clock())

    async def wait_if_needed(
        self,
        threshold: int,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> float:
        """Suspend until the window resets if the quota is nearly exhausted.

        Returns:
            Time waited in seconds
        """
        delay = self.time_until_allowed(threshold)
        if delay <= 0:
            return 0.0

        logger.info(
            "Rate limit nearly exhausted (%d remaining, threshold %d); "
            "waiting %.2fs for reset",
            self._info.remaining if self._info else 0,
            threshold,
            delay,
        )
        await sleep(delay)
        return delay
