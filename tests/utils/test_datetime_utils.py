#!/usr/bin/env python3
"""
Tests for datetime utility functions

Covers timestamp parsing across the sources' formats and the daily/weekly
bucket keys used by the calculators.
"""

from datetime import UTC, date, datetime, timedelta, timezone

import pytest

from teamdash.utils.datetime_utils import (
    day_key,
    days_between,
    parse_timestamp,
    safe_parse_timestamp,
    to_iso_z,
    week_key,
)


class TestParseTimestamp:
    """Tests for parse_timestamp function."""

    def test_parse_z_suffix(self):
        """Test GitLab-style timestamps with a Z suffix."""
        result = parse_timestamp("2026-02-10T10:00:00Z")

        assert result == datetime(2026, 2, 10, 10, 0, tzinfo=UTC)

    def test_parse_jira_compact_offset(self):
        """Test Jira timestamps with milliseconds and a +0000 offset."""
        result = parse_timestamp("2026-02-10T10:00:00.000+0000")

        assert result == datetime(2026, 2, 10, 10, 0, tzinfo=UTC)

    def test_parse_negative_offset(self):
        result = parse_timestamp("2026-02-10T10:00:00.000-0500")

        assert result.utcoffset() == timedelta(hours=-5)
        assert result.astimezone(UTC).hour == 15

    def test_date_only_is_midnight_utc(self):
        """Test query-parameter dates without a time."""
        assert parse_timestamp("2026-01-31") == datetime(2026, 1, 31, tzinfo=UTC)

    def test_empty_values_return_none(self):
        assert parse_timestamp(None) is None
        assert parse_timestamp("") is None

    def test_invalid_string_raises(self):
        with pytest.raises(ValueError, match="Invalid timestamp format"):
            parse_timestamp("not-a-date")

    def test_non_string_raises(self):
        with pytest.raises(ValueError, match="must be a string"):
            parse_timestamp(12345)


class TestSafeParseTimestamp:
    def test_returns_none_for_garbage(self):
        assert safe_parse_timestamp("garbage") is None

    def test_parses_valid_values(self):
        assert safe_parse_timestamp("2026-02-10T10:00:00Z").day == 10


class TestKeys:
    """Tests for bucket keys."""

    def test_day_key_converts_to_utc_first(self):
        late_evening = datetime(2026, 3, 9, 23, 30, tzinfo=timezone(timedelta(hours=-2)))

        assert day_key(late_evening) == "2026-03-10"

    def test_day_key_accepts_dates(self):
        assert day_key(date(2026, 3, 9)) == "2026-03-09"

    @pytest.mark.parametrize(
        "day, expected",
        [
            (datetime(2026, 1, 1, tzinfo=UTC), "2026-W01"),
            (datetime(2026, 1, 7, tzinfo=UTC), "2026-W01"),
            (datetime(2026, 1, 8, tzinfo=UTC), "2026-W02"),
            (datetime(2026, 12, 31, tzinfo=UTC), "2026-W53"),
        ],
    )
    def test_week_key_counts_from_january_first(self, day, expected):
        assert week_key(day) == expected

    def test_week_key_converts_to_utc_first(self):
        just_after_midnight = datetime(2026, 1, 1, 0, 30, tzinfo=timezone(timedelta(hours=1)))

        assert day_key(just_after_midnight) == "2025-12-31"
        assert week_key(just_after_midnight) == "2025-W53"


class TestFormatting:
    def test_to_iso_z(self):
        value = datetime(2026, 3, 10, 14, 0, tzinfo=timezone(timedelta(hours=2)))

        assert to_iso_z(value) == "2026-03-10T12:00:00Z"

    def test_days_between_is_fractional(self):
        start = datetime(2026, 3, 1, tzinfo=UTC)

        assert days_between(start, start + timedelta(hours=36)) == 1.5
