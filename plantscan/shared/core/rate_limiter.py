"""
Daily scan rate limiting for PlantScan.
Provides a fixed calendar-day window stored through the key-value store.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional

from plantscan.shared.config.cache import StorageKey
from plantscan.shared.infrastructure.storage import KeyValueStore
from plantscan.shared.utils.formatters import format_countdown

logger = logging.getLogger(__name__)

MAX_SCANS_PER_DAY = 10


@dataclass
class RateLimitWindow:
    """Stored window document: local calendar date and operations used."""
    date: Optional[str] = None
    count: int = 0

    @classmethod
    def from_stored(cls, value: Any) -> "RateLimitWindow":
        """Parse a stored document; anything malformed reads as an empty window."""
        if not isinstance(value, dict):
            return cls()

        count = value.get("count", 0)
        date = value.get("date")
        if not isinstance(count, int) or count < 0 or not isinstance(date, (str, type(None))):
            logger.warning(f"Ignoring malformed rate limit window: {value}")
            return cls()
        return cls(date=date, count=count)

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date, "count": self.count}


class RateLimitStatus:
    """Result of a read-only rate limit check."""

    def __init__(
        self,
        allowed: bool,
        remaining: int,
        used: int,
        limit: int,
        reset_time: str
    ):
        self.allowed = allowed
        self.remaining = remaining
        self.used = used
        self.limit = limit
        self.reset_time = reset_time

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary."""
        return {
            "allowed": self.allowed,
            "remaining": self.remaining,
            "used": self.used,
            "limit": self.limit,
            "reset_time": self.reset_time
        }


class UsageInfo(RateLimitStatus):
    """Rate limit status plus percentage used, for display."""

    @property
    def percentage(self) -> int:
        return round(self.used / self.limit * 100) if self.limit else 0

    def to_dict(self) -> Dict[str, Any]:
        return {**super().to_dict(), "percentage": self.percentage}


class IncrementResult:
    """Result of consuming one operation from today's window."""

    def __init__(self, success: bool, remaining: int, used: int, limit: int):
        self.success = success
        self.remaining = remaining
        self.used = used
        self.limit = limit

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary."""
        return {
            "success": self.success,
            "remaining": self.remaining,
            "used": self.used,
            "limit": self.limit
        }


class DailyRateLimiter:
    """
    Fixed-window (calendar day) limiter with a single global daily budget.

    The window resets lazily: a stored window dated another day reads as
    count 0, and the first increment of the new day overwrites it. The
    read-then-write in increment() is not atomic, so concurrent callers
    can both pass the check and over-count by one each.

    Every storage error fails open so a broken store never blocks scanning.
    """

    def __init__(
        self,
        store: KeyValueStore,
        limit: int = MAX_SCANS_PER_DAY,
        key: str = StorageKey.SCAN_RATE_LIMIT.value,
        now: Callable[[], datetime] = datetime.now
    ):
        if limit <= 0:
            raise ValueError("Rate limit must be positive")

        self.store = store
        self.limit = limit
        self.key = key
        self.now = now

    def today_key(self) -> str:
        """Today's local date as YYYY-MM-DD."""
        return self.now().strftime("%Y-%m-%d")

    def time_until_reset(self) -> timedelta:
        """Time left until local midnight."""
        current = self.now()
        tomorrow = (current + timedelta(days=1)).replace(
            hour=0, minute=0, second=0, microsecond=0
        )
        return tomorrow - current

    def get_reset_time(self) -> str:
        """Countdown to local midnight, e.g. '5h 12m'."""
        return format_countdown(self.time_until_reset())

    async def _get_window(self) -> RateLimitWindow:
        return RateLimitWindow.from_stored(await self.store.get(self.key))

    def _open_status(self) -> RateLimitStatus:
        return RateLimitStatus(
            allowed=True,
            remaining=self.limit,
            used=0,
            limit=self.limit,
            reset_time=self.get_reset_time()
        )

    async def can_proceed(self) -> RateLimitStatus:
        """
        Check whether another operation is allowed today. Never writes.

        Returns:
            RateLimitStatus: allowed flag, remaining, used, limit and reset countdown
        """
        try:
            window = await self._get_window()

            if window.date != self.today_key():
                return self._open_status()

            remaining = self.limit - window.count
            return RateLimitStatus(
                allowed=remaining > 0,
                remaining=max(0, remaining),
                used=window.count,
                limit=self.limit,
                reset_time=self.get_reset_time()
            )

        except Exception as e:
            logger.error(f"Rate limit check failed: {e}")
            # Default to allowing request on error
            return self._open_status()

    async def increment(self) -> IncrementResult:
        """
        Consume one operation from today's window.

        Rolls the window over to today when the stored date differs. At the
        limit nothing is written and success is False.

        Returns:
            IncrementResult: success flag, remaining, used, limit
        """
        try:
            today = self.today_key()
            window = await self._get_window()

            if window.date != today:
                window = RateLimitWindow(date=today, count=0)

            if window.count >= self.limit:
                logger.warning(f"Daily limit reached: {window.count}/{self.limit}")
                return IncrementResult(
                    success=False,
                    remaining=0,
                    used=window.count,
                    limit=self.limit
                )

            window = RateLimitWindow(date=today, count=window.count + 1)
            await self.store.set(self.key, window.to_dict())

            return IncrementResult(
                success=True,
                remaining=self.limit - window.count,
                used=window.count,
                limit=self.limit
            )

        except Exception as e:
            logger.error(f"Failed to increment rate limit: {e}")
            return IncrementResult(
                success=True,
                remaining=self.limit,
                used=0,
                limit=self.limit
            )

    async def get_usage_info(self) -> UsageInfo:
        """Current status with percentage used, for display."""
        status = await self.can_proceed()
        return UsageInfo(
            allowed=status.allowed,
            remaining=status.remaining,
            used=status.used,
            limit=status.limit,
            reset_time=status.reset_time
        )

    async def reset(self):
        """Forget today's window."""
        try:
            await self.store.remove(self.key)
            logger.info("Daily rate limit reset")
        except Exception as e:
            logger.error(f"Failed to reset rate limit: {e}")
