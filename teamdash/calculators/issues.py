#!/usr/bin/env python3
"""
Issue Metric Calculation Functions

Pure functions over Jira Issue records: completion, story point totals,
groupings, velocity and cycle time. No I/O.

Story points for an issue without an estimate fall back to a context
specific value: SPRINT_POINT_FALLBACK (1) for the current-sprint panel and
INDIVIDUAL_POINT_FALLBACK (0) everywhere else.
"""

from collections import defaultdict
from datetime import date, datetime
from typing import Any

from teamdash.calculators.time_series import increment, seed_daily, to_series, week_key
from teamdash.domain.constants import metrics_config
from teamdash.domain.snapshot import SprintMetrics
from teamdash.domain.work_items import Issue
from teamdash.utils.datetime_utils import days_between
from teamdash.utils.statistics import round_half_up


def story_points(issue: Issue, fallback: float) -> float:
    """Issue estimate, or ``fallback`` when the estimate is missing or not numeric."""
    if issue.story_points is None:
        return fallback
    return issue.story_points


def is_completed(issue: Issue) -> bool:
    return issue.is_completed


def summarize(issues: list[Issue], fallback: float) -> SprintMetrics:
    """
    Issue and point totals.

    Completed points are a subset of total points, so remaining points are
    never negative for non-negative estimates.
    """
    metrics = SprintMetrics()
    for issue in issues:
        points = story_points(issue, fallback)
        metrics.total_issues += 1
        metrics.total_story_points += points
        if is_completed(issue):
            metrics.completed_issues += 1
            metrics.completed_story_points += points
    return metrics


def summarize_sprint(issues: list[Issue]) -> SprintMetrics:
    """Totals for the current-sprint panel (missing estimate counts 1)."""
    return summarize(issues, metrics_config.SPRINT_POINT_FALLBACK)


def summarize_date_range(issues: list[Issue]) -> SprintMetrics:
    """Totals for the date-range velocity rollup (missing estimate counts 0)."""
    return summarize(issues, metrics_config.INDIVIDUAL_POINT_FALLBACK)


def group_by_assignee(issues: list[Issue]) -> dict[str, dict[str, float]]:
    """Issue count and points per assignee display name; no assignee goes to "Unassigned"."""
    groups: dict[str, dict[str, float]] = {}
    for issue in issues:
        assignee = issue.assignee_name or metrics_config.UNASSIGNED_LABEL
        bucket = groups.setdefault(assignee, {"count": 0, "storyPoints": 0})
        bucket["count"] += 1
        bucket["storyPoints"] += story_points(issue, metrics_config.INDIVIDUAL_POINT_FALLBACK)
    return groups


def group_by_status(issues: list[Issue]) -> dict[str, int]:
    groups: dict[str, int] = defaultdict(int)
    for issue in issues:
        groups[issue.status_name] += 1
    return dict(groups)


def group_by_priority(issues: list[Issue]) -> dict[str, int]:
    groups: dict[str, int] = defaultdict(int)
    for issue in issues:
        groups[issue.priority or metrics_config.NO_PRIORITY_LABEL] += 1
    return dict(groups)


def velocity_trend(issues: list[Issue]) -> list[dict[str, Any]]:
    """
    Completed story points per week of last update.

    Only completed issues count; weeks are sorted ascending.

    Returns:
        [{"week": "2026-W05", "points": 13}, ...]
    """
    weekly: dict[str, float] = defaultdict(float)
    for issue in issues:
        if not is_completed(issue) or issue.updated is None:
            continue
        weekly[week_key(issue.updated)] += story_points(issue, metrics_config.INDIVIDUAL_POINT_FALLBACK)
    return [{"week": week, "points": weekly[week]} for week in sorted(weekly)]


def average_cycle_time(issues: list[Issue]) -> int:
    """
    Mean created -> last-updated time of completed issues, in whole days.

    Issues without both timestamps are skipped; 0 when nothing qualifies.
    """
    durations = [
        days_between(issue.created, issue.updated)
        for issue in issues
        if is_completed(issue) and issue.created is not None and issue.updated is not None
    ]
    if not durations:
        return 0
    return round_half_up(sum(durations) / len(durations))


def daily_progress(issues: list[Issue], days: int, today: date | datetime) -> list[dict[str, Any]]:
    """
    Issues created and completed per day over the trailing window.

    An issue counts as completed on the day of its last update.
    """
    series = seed_daily(days, today, lambda: {"completed": 0, "created": 0})
    for issue in issues:
        increment(series, issue.created, "created")
        if is_completed(issue):
            increment(series, issue.updated, "completed")
    return to_series(series)


def team_performance(issues: list[Issue]) -> dict[str, Any]:
    """Team rollup over a JQL search result."""
    totals = summarize_date_range(issues)
    return {
        "totalIssues": totals.total_issues,
        "completedIssues": totals.completed_issues,
        "totalStoryPoints": totals.total_story_points,
        "issuesByAssignee": group_by_assignee(issues),
        "issuesByStatus": group_by_status(issues),
        "velocityTrend": velocity_trend(issues),
    }


def individual_performance(issues: list[Issue], days: int, today: date | datetime) -> dict[str, Any]:
    """Single-assignee rollup over a JQL search result."""
    totals = summarize_date_range(issues)
    return {
        "totalTickets": totals.total_issues,
        "completedTickets": totals.completed_issues,
        "totalStoryPoints": totals.total_story_points,
        "averageCycleTime": average_cycle_time(issues),
        "ticketsByPriority": group_by_priority(issues),
        "dailyProgress": daily_progress(issues, days, today),
    }
