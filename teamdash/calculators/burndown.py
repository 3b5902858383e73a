"""
Sprint burndown calculations

The burndown is an ideal line plus one observed point: ``actual_remaining``
is set only on the day index corresponding to today. Other days are left
empty rather than inferred.
"""

import math
from datetime import datetime

from teamdash.domain.constants import metrics_config
from teamdash.domain.snapshot import BurndownPoint
from teamdash.domain.work_items import Sprint

SECONDS_PER_DAY = 86400


def sprint_days(sprint: Sprint, now: datetime) -> tuple[int | None, int | None]:
    """
    Sprint length and days remaining, both rounded up to whole days.

    Returns:
        (total_days, days_remaining); (None, None) when the sprint has no dates.
        total_days is at least 1 and days_remaining is never negative.
    """
    if sprint.start_date is None or sprint.end_date is None:
        return None, None

    total_days = math.ceil((sprint.end_date - sprint.start_date).total_seconds() / SECONDS_PER_DAY)
    days_remaining = math.ceil((sprint.end_date - now).total_seconds() / SECONDS_PER_DAY)
    return max(1, total_days), max(0, days_remaining)


def build_burndown(
    total_points: float,
    remaining_points: float,
    total_days: int | None,
    days_remaining: int | None,
) -> list[BurndownPoint]:
    """
    Ideal burndown for days 0..min(total_days, 14) plus today's actual value.

    Args:
        total_points: Sprint scope in story points
        remaining_points: Points not yet completed
        total_days: Sprint length in days (None when the sprint has no dates)
        days_remaining: Days left in the sprint

    Returns:
        One point per day; empty when the sprint has no dates
    """
    if total_days is None or days_remaining is None:
        return []

    total_days = max(1, total_days)
    today_index = total_days - days_remaining
    points = []
    for day in range(min(total_days, metrics_config.BURNDOWN_MAX_DAYS) + 1):
        ideal = max(0.0, total_points * (1 - day / total_days))
        points.append(
            BurndownPoint(
                day=day,
                ideal_remaining=ideal,
                actual_remaining=remaining_points if day == today_index else None,
            )
        )
    return points
