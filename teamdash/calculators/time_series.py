"""
Daily and weekly time-series helpers

Every daily series is pre-seeded with exactly ``days`` zero-valued buckets,
oldest to newest, ending at ``today``. Records are then counted into the
bucket for their day; records outside the seeded window are dropped.
"""

from collections.abc import Callable
from datetime import date, datetime, timedelta
from typing import Any

from teamdash.utils.datetime_utils import day_key, week_key

__all__ = ["seed_daily", "increment", "to_series", "week_key"]


def seed_daily(days: int, today: date | datetime, make_bucket: Callable[[], Any] = int) -> dict[str, Any]:
    """
    Create one empty bucket per day in the trailing window.

    Args:
        days: Window length; the result has exactly this many keys
        today: Last day of the window (inclusive)
        make_bucket: Factory for the zero value (int, or a dict factory)

    Returns:
        Ordered mapping of "YYYY-MM-DD" -> bucket, oldest first

    Example:
        >>> list(seed_daily(3, date(2026, 3, 10)))
        ['2026-03-08', '2026-03-09', '2026-03-10']
    """
    last_day = today.date() if isinstance(today, datetime) else today
    return {day_key(last_day - timedelta(days=offset)): make_bucket() for offset in range(days - 1, -1, -1)}


def increment(series: dict[str, Any], when: datetime | None, field: str | None = None) -> None:
    """
    Count one record into its day bucket.

    Records with no timestamp, or whose day is not in the series, are ignored.
    """
    if when is None:
        return
    key = day_key(when)
    if key not in series:
        return
    if field is None:
        series[key] += 1
    else:
        series[key][field] += 1


def to_series(series: dict[str, Any], value_name: str | None = None) -> list[dict[str, Any]]:
    """
    Flatten a seeded series into a list sorted by date.

    Dict buckets are merged into each entry; scalar buckets are stored under
    ``value_name``.
    """
    result = []
    for key in sorted(series):
        bucket = series[key]
        if isinstance(bucket, dict):
            result.append({"date": key, **bucket})
        else:
            result.append({"date": key, value_name or "count": bucket})
    return result
