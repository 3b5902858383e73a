"""
Merge request metric calculations

Pure functions over MergeRequest / Commit records.
"""

from collections.abc import Iterable
from datetime import date, datetime
from typing import Any

from teamdash.calculators.time_series import increment, seed_daily, to_series
from teamdash.domain.source_control import Commit, GitLabProject, MergeRequest, ProjectRollup


def author_key(mr: MergeRequest) -> str | None:
    """Author login, falling back to display name."""
    return mr.author_username or mr.author_name


def group_by_author(mrs: Iterable[MergeRequest]) -> dict[str, dict[str, int]]:
    """
    Merge request and merged counts per author.

    Merge requests with no author information are skipped.
    """
    groups: dict[str, dict[str, int]] = {}
    for mr in mrs:
        author = author_key(mr)
        if not author:
            continue
        bucket = groups.setdefault(author, {"count": 0, "merged": 0})
        bucket["count"] += 1
        if mr.is_merged:
            bucket["merged"] += 1
    return groups


def daily_activity(mrs: Iterable[MergeRequest], days: int, today: date | datetime) -> list[dict[str, Any]]:
    """
    Created, merged and closed-unmerged merge requests per day.

    A merge request counts as "closed" only when it was not merged.
    """
    series = seed_daily(days, today, lambda: {"created": 0, "merged": 0, "closed": 0})
    for mr in mrs:
        increment(series, mr.created_at, "created")
        if mr.merged_at is not None:
            increment(series, mr.merged_at, "merged")
        elif mr.closed_at is not None:
            increment(series, mr.closed_at, "closed")
    return to_series(series)


def pull_request_metrics(mrs: list[MergeRequest], days: int, today: date | datetime) -> dict[str, Any]:
    """
    Merge request rollup for the trailing window.

    Returns:
        {"totalPRs", "openPRs", "mergedPRs", "closedPRs", "prsByAuthor", "dailyPRActivity"}
    """
    return {
        "totalPRs": len(mrs),
        "openPRs": sum(1 for mr in mrs if mr.is_open),
        "mergedPRs": sum(1 for mr in mrs if mr.is_merged),
        "closedPRs": sum(1 for mr in mrs if mr.state == "closed"),
        "prsByAuthor": group_by_author(mrs),
        "dailyPRActivity": daily_activity(mrs, days, today),
    }


def project_rollup(
    project_id: str,
    display: str,
    category: str,
    project: GitLabProject,
    mrs: list[MergeRequest],
    commits: list[Commit],
) -> ProjectRollup:
    """Per-project totals for the overview's source-control panel."""
    return ProjectRollup(
        project_id=project_id,
        name=project.name,
        display=display,
        category=category,
        total_mrs=len(mrs),
        merged_mrs=sum(1 for mr in mrs if mr.is_merged),
        open_mrs=sum(1 for mr in mrs if mr.is_open),
        total_commits=len(commits),
        last_activity=project.last_activity_at,
    )
