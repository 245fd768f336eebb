"""Tests for the fixed-window rate limiter."""

import asyncio

import pytest

from docs_qa.rate_limit import RateLimiter, get_rate_limiter, reset_rate_limiter


@pytest.mark.asyncio
async def test_allows_max_requests_then_waits_for_window(fake_clock) -> None:
    limiter = RateLimiter(15, clock=fake_clock, sleep=fake_clock.sleep)

    for _ in range(15):
        await limiter.acquire()
    assert fake_clock.sleeps == []

    fake_clock.advance(10)
    await limiter.acquire()

    # 60s window, 10s elapsed, plus the 1s buffer
    assert fake_clock.sleeps == [pytest.approx(51.0)]
    assert limiter.usage().count == 1


@pytest.mark.asyncio
async def test_window_resets_after_it_expires(fake_clock) -> None:
    limiter = RateLimiter(2, clock=fake_clock, sleep=fake_clock.sleep)

    await limiter.acquire()
    await limiter.acquire()
    fake_clock.advance(61)
    await limiter.acquire()

    assert fake_clock.sleeps == []
    assert limiter.usage().count == 1


@pytest.mark.asyncio
async def test_concurrent_callers_never_overshoot(fake_clock) -> None:
    limiter = RateLimiter(3, clock=fake_clock, sleep=fake_clock.sleep)

    await asyncio.gather(*(limiter.acquire() for _ in range(7)))

    # 3 free, then two full waits for the next windows
    assert len(fake_clock.sleeps) == 2
    assert limiter.usage().count == 1


def test_usage_reports_expired_window_as_empty(fake_clock) -> None:
    limiter = RateLimiter(5, clock=fake_clock, sleep=fake_clock.sleep)
    limiter._count = 4

    assert limiter.usage().describe() == "4/5 requests this minute"
    fake_clock.advance(120)
    assert limiter.usage().count == 0


def test_limit_comes_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("DOCS_QA_MAX_REQUESTS_PER_MINUTE", "7")

    assert RateLimiter().max_requests == 7


def test_rejects_non_positive_limits() -> None:
    with pytest.raises(ValueError):
        RateLimiter(0)
    with pytest.raises(ValueError):
        RateLimiter(5, window_seconds=0)


def test_process_wide_limiter_is_shared() -> None:
    first = get_rate_limiter()

    assert get_rate_limiter() is first
    reset_rate_limiter()
    assert get_rate_limiter() is not first
