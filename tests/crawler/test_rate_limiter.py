"""Tests for the crawler rate limiter."""

from __future__ import annotations

import pytest

from veronica.crawler.rate_limiter import RateLimiter


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class TestRateLimiter:
    def test_first_call_does_not_wait(self):
        clock = FakeClock()
        RateLimiter(calls_per_second=1.0, clock=clock, sleep=clock.sleep).acquire()
        assert clock.sleeps == []

    def test_back_to_back_calls_are_spaced(self):
        clock = FakeClock()
        limiter = RateLimiter(calls_per_second=2.0, clock=clock, sleep=clock.sleep)

        limiter.acquire()
        clock.now += 0.1
        limiter.acquire()

        assert clock.sleeps == [pytest.approx(0.4)]

    def test_no_wait_after_interval_elapsed(self):
        clock = FakeClock()
        limiter = RateLimiter(calls_per_second=1.0, clock=clock, sleep=clock.sleep)

        limiter.acquire()
        clock.now += 5.0
        limiter.acquire()

        assert clock.sleeps == []

    @pytest.mark.parametrize("rate", [0, -1.0])
    def test_invalid_rate(self, rate):
        with pytest.raises(ValueError):
            RateLimiter(calls_per_second=rate)
