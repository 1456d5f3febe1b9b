from datetime import datetime, timedelta

import pytest

from plantscan.shared.core.rate_limiter import MAX_SCANS_PER_DAY, DailyRateLimiter

KEY = "scan_rate_limit"


@pytest.fixture
def limiter(store, clock):
    return DailyRateLimiter(store, now=clock)


@pytest.mark.asyncio
async def test_fresh_device_is_allowed_full_budget(limiter):
    status = await limiter.can_proceed()

    assert status.allowed
    assert status.remaining == MAX_SCANS_PER_DAY == 10
    assert status.used == 0


@pytest.mark.asyncio
async def test_can_proceed_never_writes(limiter, store):
    await limiter.can_proceed()

    assert await store.get(KEY) is None


@pytest.mark.asyncio
async def test_yesterdays_full_window_resets(limiter, store):
    await store.set(KEY, {"date": "2025-03-13", "count": 10})

    status = await limiter.can_proceed()

    assert status.allowed
    assert status.remaining == 10


@pytest.mark.asyncio
async def test_increment_rolls_window_over_to_today(limiter, store):
    await store.set(KEY, {"date": "2025-03-13", "count": 10})

    result = await limiter.increment()

    assert result.success
    assert result.remaining == 9
    assert await store.get(KEY) == {"date": "2025-03-14", "count": 1}


@pytest.mark.asyncio
async def test_saturation_refuses_without_writing(limiter, store):
    results = [await limiter.increment() for _ in range(10)]

    assert [r.remaining for r in results] == list(range(9, -1, -1))
    assert all(r.success for r in results)

    refused = await limiter.increment()

    assert not refused.success
    assert refused.remaining == 0
    assert await store.get(KEY) == {"date": "2025-03-14", "count": 10}

    status = await limiter.can_proceed()
    assert not status.allowed
    assert status.remaining == 0


@pytest.mark.asyncio
async def test_window_reopens_after_midnight(limiter, clock):
    for _ in range(10):
        await limiter.increment()

    clock.advance(hours=15)

    assert (await limiter.can_proceed()).allowed
    assert (await limiter.increment()).remaining == 9


@pytest.mark.asyncio
async def test_reset_time_counts_down_to_midnight(limiter):
    assert limiter.time_until_reset() == timedelta(hours=14, minutes=30)
    assert limiter.get_reset_time() == "14h 30m"


@pytest.mark.asyncio
async def test_usage_info_percentage(limiter):
    for _ in range(3):
        await limiter.increment()

    usage = await limiter.get_usage_info()

    assert usage.used == 3
    assert usage.remaining == 7
    assert usage.percentage == 30
    assert usage.to_dict()["percentage"] == 30


@pytest.mark.asyncio
async def test_malformed_window_reads_as_empty(limiter, store):
    await store.set(KEY, {"date": "2025-03-14", "count": "lots"})

    status = await limiter.can_proceed()

    assert status.allowed
    assert status.used == 0


@pytest.mark.asyncio
async def test_storage_failure_fails_open(failing_store, clock):
    limiter = DailyRateLimiter(failing_store, now=clock)
    failing_store.failing = True

    status = await limiter.can_proceed()
    result = await limiter.increment()

    assert status.allowed and status.remaining == 10
    assert result.success and result.remaining == 10


@pytest.mark.asyncio
async def test_reset_forgets_window(limiter, store):
    await limiter.increment()

    await limiter.reset()

    assert await store.get(KEY) is None


def test_limit_must_be_positive(store):
    with pytest.raises(ValueError):
        DailyRateLimiter(store, limit=0)


def test_today_key_uses_local_calendar_date(store):
    limiter = DailyRateLimiter(store, now=lambda: datetime(2024, 12, 31, 23, 59))

    assert limiter.today_key() == "2024-12-31"
    assert limiter.get_reset_time() == "0h 1m"
