"""Tests for rate-limit header tracking and proactive throttling."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from multidict import CIMultiDict

from design_drift.figma.rate_limit import (
    DEFAULT_RESET_WINDOW,
    RateLimitInfo,
    RateLimitTracker,
)


class TestRateLimitInfo:
    """Tests for RateLimitInfo."""

    def test_seconds_until_reset(self) -> None:
        info = RateLimitInfo(remaining=3, reset_at=1_010.0)

        assert info.seconds_until_reset(1_000.0) == 10.0

    def test_seconds_until_reset_never_negative(self) -> None:
        info = RateLimitInfo(remaining=3, reset_at=1_000.0)

        assert info.seconds_until_reset(1_050.0) == 0.0


class TestRateLimitTrackerUpdate:
    """Tests for RateLimitTracker.update."""

    def test_initial_state(self, fake_clock) -> None:
        assert RateLimitTracker(clock=fake_clock).info is None

    def test_update_records_headers(self, fake_clock) -> None:
        tracker = RateLimitTracker(clock=fake_clock)

        tracker.update(
            CIMultiDict({"X-RateLimit-Remaining": "5", "X-RateLimit-Reset": "1030"})
        )

        assert tracker.info == RateLimitInfo(remaining=5, reset_at=1_030.0)

    def test_header_names_case_insensitive(self, fake_clock) -> None:
        tracker = RateLimitTracker(clock=fake_clock)

        tracker.update(
            CIMultiDict({"x-ratelimit-remaining": "2", "x-ratelimit-reset": "1005"})
        )

        assert tracker.info is not None
        assert tracker.info.remaining == 2

    def test_missing_reset_defaults_to_window(self, fake_clock) -> None:
        tracker = RateLimitTracker(clock=fake_clock)

        tracker.update(CIMultiDict({"X-RateLimit-Remaining": "10"}))

        assert tracker.info is not None
        assert tracker.info.reset_at == fake_clock.now + DEFAULT_RESET_WINDOW

    def test_response_without_headers_keeps_state(self, fake_clock) -> None:
        tracker = RateLimitTracker(clock=fake_clock)
        tracker.update(
            CIMultiDict({"X-RateLimit-Remaining": "4", "X-RateLimit-Reset": "1100"})
        )

        tracker.update(CIMultiDict({"Content-Type": "application/json"}))

        assert tracker.info == RateLimitInfo(remaining=4, reset_at=1_100.0)

    def test_malformed_remaining_ignored(self, fake_clock) -> None:
        tracker = RateLimitTracker(clock=fake_clock)

        tracker.update(CIMultiDict({"X-RateLimit-Remaining": "lots"}))

        assert tracker.info is None

    def test_malformed_reset_uses_default_window(self, fake_clock) -> None:
        tracker = RateLimitTracker(clock=fake_clock)

        tracker.update(
            CIMultiDict({"X-RateLimit-Remaining": "1", "X-RateLimit-Reset": "soon"})
        )

        assert tracker.info is not None
        assert tracker.info.reset_at == fake_clock.now + DEFAULT_RESET_WINDOW

    @pytest.mark.parametrize("reset", ["inf", "-inf", "nan", "Infinity"])
    def test_non_finite_reset_uses_default_window(self, fake_clock, reset) -> None:
        tracker = RateLimitTracker(clock=fake_clock)

        tracker.update(
            CIMultiDict({"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": reset})
        )

        assert tracker.info is not None
        assert tracker.info.reset_at == fake_clock.now + DEFAULT_RESET_WINDOW
        assert tracker.time_until_allowed(5) == DEFAULT_RESET_WINDOW


class TestTimeUntilAllowed:
    """Tests for the proactive throttling decision."""

    def test_disabled_with_zero_threshold(self, fake_clock) -> None:
        tracker = RateLimitTracker(clock=fake_clock)
        tracker.update(
            CIMultiDict({"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "1030"})
        )

        assert tracker.time_until_allowed(0) == 0.0

    def test_no_info_means_no_wait(self, fake_clock) -> None:
        assert RateLimitTracker(clock=fake_clock).time_until_allowed(5) == 0.0

    def test_above_threshold_no_wait(self, fake_clock) -> None:
        tracker = RateLimitTracker(clock=fake_clock)
        tracker.update(
            CIMultiDict({"X-RateLimit-Remaining": "6", "X-RateLimit-Reset": "1030"})
        )

        assert tracker.time_until_allowed(5) == 0.0

    def test_at_threshold_waits_for_reset(self, fake_clock) -> None:
        tracker = RateLimitTracker(clock=fake_clock)
        tracker.update(
            CIMultiDict({"X-RateLimit-Remaining": "5", "X-RateLimit-Reset": "1030"})
        )

        assert tracker.time_until_allowed(5) == 30.0

    def test_reset_in_past_no_wait(self, fake_clock) -> None:
        tracker = RateLimitTracker(clock=fake_clock)
        tracker.update(
            CIMultiDict({"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "990"})
        )

        assert tracker.time_until_allowed(5) == 0.0


@pytest.mark.asyncio
class TestWaitIfNeeded:
    """Tests for RateLimitTracker.wait_if_needed."""

    async def test_sleeps_until_reset(self, fake_clock) -> None:
        tracker = RateLimitTracker(clock=fake_clock)
        tracker.update(
            CIMultiDict({"X-RateLimit-Remaining": "1", "X-RateLimit-Reset": "1012.5"})
        )
        sleep = AsyncMock()

        waited = await tracker.wait_if_needed(2, sleep)

        assert waited == 12.5
        sleep.assert_awaited_once_with(12.5)

    async def test_no_sleep_when_not_needed(self, fake_clock) -> None:
        tracker = RateLimitTracker(clock=fake_clock)
        tracker.update(
            CIMultiDict({"X-RateLimit-Remaining": "50", "X-RateLimit-Reset": "1030"})
        )
        sleep = AsyncMock()

        waited = await tracker.wait_if_needed(2, sleep)

        assert waited == 0.0
        sleep.assert_not_awaited()
