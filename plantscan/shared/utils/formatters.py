# 📄 File: plantscan/shared/utils/formatters.py

# 🧭 Purpose (Layman Explanation):
# Small formatting tools that turn raw numbers into friendly text, like "2.5 KB"
# for cache size or "5h 12m" until the daily scan limit resets.

# 🧪 Purpose (Technical Summary):
# Presentation helpers for byte sizes, countdowns and relative ages used by
# the cache store diagnostics and the daily rate limiter.

# 🔗 Dependencies:
# - datetime: Time deltas
# - math: Logarithmic unit selection

# 🔄 Connected Modules / Calls From:
# Used by: CacheManager.get_cache_size, CacheMetadata, DailyRateLimiter

from datetime import timedelta
from typing import Union


def format_file_size(size_bytes: int, precision: int = 2) -> str:
    """
    Format a byte count with 1024-based units.

    Trailing zeros are dropped, so 1536 bytes is "1.5 KB" and 2048 is "2 KB".

    Args:
        size_bytes: Size in bytes
        precision: Maximum decimal places

    Returns:
        Formatted size string
    """
    if size_bytes <= 0:
        return "0 B"

    units = ['B', 'KB', 'MB', 'GB']
    unit_index = 0
    size = float(size_bytes)
    while size >= 1024 and unit_index < len(units) - 1:
        size /= 1024
        unit_index += 1
    size_in_unit = round(size, precision)

    if size_in_unit == int(size_in_unit):
        return f"{int(size_in_unit)} {units[unit_index]}"
    return f"{size_in_unit:g} {units[unit_index]}"


def format_countdown(delta: timedelta) -> str:
    """Format a remaining duration as hours and minutes, e.g. '5h 12m'."""
    total_seconds = max(0, int(delta.total_seconds()))
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    return f"{hours}h {minutes}m"


def format_relative_hours(age_hours: Union[int, float]) -> str:
    """
    Format a cache age as relative time (e.g., '3 hours ago').

    Args:
        age_hours: Age in hours

    Returns:
        Relative time string
    """
    total_seconds = abs(age_hours) * 3600

    units = [
        (86400, "day"),
        (3600, "hour"),
        (60, "minute"),
    ]

    for seconds_in_unit, unit_name in units:
        if total_seconds >= seconds_in_unit:
            count = int(total_seconds // seconds_in_unit)
            unit_str = unit_name if count == 1 else f"{unit_name}s"
            return f"{count} {unit_str} ago"

    return "just now"
