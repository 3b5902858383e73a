"""
Display labels and the requested date window.

    >>> filter_label("mobile")
    'Mobile Projects'
    >>> date_range_label(datetime(2026, 1, 1, tzinfo=UTC), datetime(2026, 3, 31, tzinfo=UTC), explicit=True)
    'Last 3 Months'
"""

import math
from datetime import UTC, datetime, timedelta

from teamdash.domain.constants import FILTER_LABELS, metrics_config
from teamdash.domain.snapshot import DateRange
from teamdash.utils.datetime_utils import days_between, parse_timestamp

DEFAULT_LABEL = "Last 30 Days"

# (max day span, label), checked in order
RANGE_LABELS = (
    (35, "Last 30 Days"),
    (100, "Last 3 Months"),
    (190, "Last 6 Months"),
    (370, "Last Year"),
)
OPEN_ENDED_LABEL = "All Time"


def filter_label(filter: str) -> str:
    return FILTER_LABELS.get(filter, FILTER_LABELS["all"])


def date_range_label(start: datetime, end: datetime, explicit: bool) -> str:
    """
    Human label for a window, by its span in days rounded up.

    Without an explicit window the label is always the default trailing one.
    """
    if not explicit:
        return DEFAULT_LABEL

    span = math.ceil(days_between(start, end))
    for max_days, label in RANGE_LABELS:
        if span <= max_days:
            return label
    return OPEN_ENDED_LABEL


def resolve_date_range(start_date: str | None, end_date: str | None, now: datetime | None = None) -> DateRange:
    """
    Build the request window from optional query parameters.

    A missing start defaults to DEFAULT_WINDOW_DAYS before ``now`` and a
    missing end to ``now``. The window only counts as explicit when both
    bounds were supplied.

    Raises:
        ValueError: If a supplied bound is not an ISO date/timestamp
    """
    now = now or datetime.now(UTC)
    start = parse_timestamp(start_date) or now - timedelta(days=metrics_config.DEFAULT_WINDOW_DAYS)
    end = parse_timestamp(end_date) or now
    explicit = bool(start_date and end_date)
    return DateRange(start=start, end=end, label=date_range_label(start, end, explicit), explicit=explicit)
