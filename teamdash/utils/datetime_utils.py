#!/usr/bin/env python3
"""
Datetime Utility Functions

Timestamp parsing and day/week bucketing shared by the source transformers
and the calculators.

Handles common patterns:
- ISO timestamps with a 'Z' suffix (GitLab, Firebase)
- Jira timestamps with a compact '+0000' offset
- Date-only strings from query parameters
- Daily and weekly bucket keys
"""

import math
import re
from datetime import UTC, date, datetime

_COMPACT_OFFSET = re.compile(r"([+-]\d{2})(\d{2})$")


def parse_timestamp(timestamp_str: str | None) -> datetime | None:
    """
    Parse an API timestamp into a timezone-aware datetime.

    Naive values are taken as UTC.

    Args:
        timestamp_str: ISO timestamp, or None

    Returns:
        datetime in the timestamp's offset, or None if input is empty

    Raises:
        ValueError: If the timestamp cannot be parsed

    Examples:
        >>> parse_timestamp("2026-02-10T10:00:00Z")
        datetime.datetime(2026, 2, 10, 10, 0, tzinfo=datetime.timezone.utc)

        >>> parse_timestamp("2026-02-10T10:00:00.000+0000").tzinfo is not None
        True
    """
    if not timestamp_str:
        return None

    if not isinstance(timestamp_str, str):
        raise ValueError(f"Timestamp must be a string, got {type(timestamp_str)}")

    normalized = timestamp_str.strip().replace("Z", "+00:00")
    normalized = _COMPACT_OFFSET.sub(r"\1:\2", normalized)
    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError as e:
        raise ValueError(f"Invalid timestamp format: {timestamp_str}") from e

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def safe_parse_timestamp(timestamp_str: str | None) -> datetime | None:
    """Like parse_timestamp, but returns None for malformed input."""
    try:
        return parse_timestamp(timestamp_str)
    except ValueError:
        return None


def to_iso_z(dt: datetime) -> str:
    """Format a datetime as UTC ISO-8601 with a 'Z' suffix."""
    return dt.astimezone(UTC).isoformat().replace("+00:00", "Z")


def day_key(value: datetime | date) -> str:
    """Bucket key for daily series (YYYY-MM-DD)."""
    if isinstance(value, datetime):
        value = value.astimezone(UTC).date()
    return value.isoformat()


def week_key(value: datetime) -> str:
    """
    Bucket key for weekly series.

    Weeks are counted from January 1st of the UTC year, not ISO weeks, and
    the value is converted to UTC first so it lands in the same bucket as
    its day_key.

    Examples:
        >>> week_key(datetime(2026, 1, 1, tzinfo=UTC))
        '2026-W01'
        >>> week_key(datetime(2026, 1, 8, tzinfo=UTC))
        '2026-W02'
    """
    value = value.astimezone(UTC)
    day_of_year = value.timetuple().tm_yday
    return f"{value.year}-W{math.ceil(day_of_year / 7):02d}"


def days_between(start: datetime, end: datetime) -> float:
    """Fractional days from start to end."""
    return (end - start).total_seconds() / 86400
