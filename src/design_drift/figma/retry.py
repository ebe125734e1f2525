"""Retry decisions and backoff delays for Figma API calls.

The policy holds no per-call state. Given the retry number and the error that
caused it, it decides whether to retry and how long to wait:

    transient (5xx, timeout, network):  min(initial * 2**(n-1), cap) + jitter
    429 without Retry-After:            min(initial * 2**n, cap) + jitter
    429 with Retry-After:               max(retry_after, 0) + jitter

where n is the 1-indexed retry number and jitter is drawn from
[0, max_jitter) so that clients sharing a quota do not retry in lockstep.
"""

from __future__ import annotations

import email.utils
import math
import random
import time
from typing import TYPE_CHECKING

from design_drift.figma.errors import (
    FigmaAPIError,
    FigmaConnectionError,
    FigmaRateLimitError,
    FigmaTimeoutError,
)

if TYPE_CHECKING:
    from design_drift.figma.config import FigmaClientConfig


def parse_retry_after(value: str | None, now: float | None = None) -> float | None:
    """Parse a Retry-After header value.

    Accepts delta-seconds ("5", "1.5") or an HTTP date
    ("Wed, 21 Oct 2015 07:28:00 GMT").

    Args:
        value: Raw header value
        now: Current epoch time in seconds, defaults to time.time()

    Returns:
        Seconds to wait (never negative), or None if absent, unparseable
        or not a finite number
    """
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None

    try:
        seconds = float(value)
    except ValueError:
        seconds = None
    if seconds is not None:
        # "inf" and "nan" parse as floats but are not valid delays
        return max(seconds, 0.0) if math.isfinite(seconds) else None

    try:
        retry_at = email.utils.parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if retry_at is None:
        return None

    if now is None:
        now = time.time()
    return max(retry_at.timestamp() - now, 0.0)


def is_retryable_status(status_code: int) -> bool:
    """Check if an HTTP status code should trigger a retry."""
    return status_code == 429 or 500 <= status_code < 600


class RetryPolicy:
    """Backoff calculation for the request executor.

    Args:
        config: Client configuration supplying delays and retry limits
        rng: Random source for jitter. Pass a seeded random.Random for
             reproducible delays.
    """

    def __init__(
        self, config: FigmaClientConfig, rng: random.Random | None = None
    ) -> None:
        self.config = config
        self._rng = rng or random.Random()

    @property
    def max_retries(self) -> int:
        return self.config.max_retries

    def is_retryable(self, error: Exception) -> bool:
        """Whether the error is a transient failure worth retrying."""
        if isinstance(error, (FigmaTimeoutError, FigmaConnectionError)):
            return True
        if isinstance(error, FigmaAPIError) and error.status_code is not None:
            return is_retryable_status(error.status_code)
        return False

    def should_retry(self, error: Exception, attempt: int) -> bool:
        """Whether retry number `attempt` (1-indexed) should be made."""
        return attempt <= self.config.max_retries and self.is_retryable(error)

    def jitter(self) -> float:
        """Random jitter in seconds, in [0, max_jitter)."""
        return self._rng.random() * self.config.max_jitter

    def backoff(self, attempt: int, *, rate_limited: bool = False) -> float:
        """Capped exponential backoff without jitter.

        Rate-limited retries run one power of two ahead of the transient
        schedule.
        """
        exponent = attempt if rate_limited else attempt - 1
        delay = self.config.initial_retry_delay * (2**exponent)
        return min(delay, self.config.max_retry_delay)

    def calculate_delay(self, attempt: int, error: Exception) -> float:
        """Calculate the wait before retry number `attempt`.

        Args:
            attempt: 1-indexed retry number
            error: The failure that triggered the retry

        Returns:
            Delay in seconds, jitter included
        """
        if isinstance(error, FigmaRateLimitError):
            if error.retry_after is not None:
                return max(error.retry_after, 0.0) + self.jitter()
            return self.backoff(attempt, rate_limited=True) + self.jitter()

        return self.backoff(attempt) + self.jitter()
