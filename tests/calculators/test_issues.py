#!/usr/bin/env python3
"""
Tests for issue metric calculations

Covers the two story point fallbacks (sprint panel vs. everything else),
completion counting, groupings, velocity and cycle time.
"""

from datetime import UTC, date, datetime

import pytest

from teamdash.calculators.issues import (
    average_cycle_time,
    daily_progress,
    group_by_assignee,
    group_by_priority,
    group_by_status,
    individual_performance,
    story_points,
    summarize_date_range,
    summarize_sprint,
    team_performance,
    velocity_trend,
)


class TestStoryPoints:
    def test_missing_estimate_uses_fallback(self, make_issue):
        assert story_points(make_issue(story_points=None), 1) == 1

    def test_explicit_zero_is_kept(self, make_issue):
        assert story_points(make_issue(story_points=0), 1) == 0


class TestSummaries:
    """Tests for sprint panel and date-range totals"""

    @pytest.fixture
    def issues(self, make_issue):
        return [
            make_issue("MOB-1", "done", 3),
            make_issue("MOB-2", "indeterminate", 5),
            make_issue("MOB-3", "done", None),
            make_issue("MOB-4", "new", None),
        ]

    def test_sprint_panel_counts_unestimated_as_one(self, issues):
        metrics = summarize_sprint(issues)

        assert metrics.total_issues == 4
        assert metrics.completed_issues == 2
        assert metrics.total_story_points == 10
        assert metrics.completed_story_points == 4
        assert metrics.remaining_story_points == 6

    def test_date_range_counts_unestimated_as_zero(self, issues):
        metrics = summarize_date_range(issues)

        assert metrics.total_story_points == 8
        assert metrics.completed_story_points == 3

    def test_completed_never_exceeds_total(self, issues):
        for metrics in (summarize_sprint(issues), summarize_date_range(issues)):
            assert metrics.completed_story_points <= metrics.total_story_points
            assert metrics.completed_issues <= metrics.total_issues

    def test_empty_sprint(self):
        metrics = summarize_sprint([])

        assert metrics.total_issues == 0
        assert metrics.remaining_story_points == 0


class TestGroupings:
    def test_group_by_assignee_with_unassigned(self, make_issue):
        issues = [
            make_issue("A-1", story_points=2),
            make_issue("A-2", story_points=3),
            make_issue("A-3", story_points=None, assignee_name=None, assignee_email=None),
        ]

        groups = group_by_assignee(issues)

        assert groups["Alice Smith"] == {"count": 2, "storyPoints": 5}
        assert groups["Unassigned"] == {"count": 1, "storyPoints": 0}

    def test_group_by_status(self, make_issue):
        issues = [make_issue("A-1", "done"), make_issue("A-2", "done"), make_issue("A-3", "new")]

        assert group_by_status(issues) == {"Done": 2, "To Do": 1}

    def test_group_by_priority_without_priority(self, make_issue):
        issues = [make_issue("A-1", priority="High"), make_issue("A-2", priority=None)]

        assert group_by_priority(issues) == {"High": 1, "None": 1}


class TestVelocityAndCycleTime:
    def test_velocity_counts_completed_issues_by_week(self, make_issue):
        issues = [
            make_issue("A-1", "done", 3, updated=datetime(2026, 1, 9, tzinfo=UTC)),
            make_issue("A-2", "done", 2, updated=datetime(2026, 1, 2, tzinfo=UTC)),
            make_issue("A-3", "done", 5, updated=datetime(2026, 1, 10, tzinfo=UTC)),
            make_issue("A-4", "new", 8, updated=datetime(2026, 1, 10, tzinfo=UTC)),
        ]

        assert velocity_trend(issues) == [{"week": "2026-W01", "points": 2}, {"week": "2026-W02", "points": 8}]

    def test_average_cycle_time_rounds_to_days(self, make_issue):
        issues = [
            make_issue("A-1", "done", created=datetime(2026, 3, 1, tzinfo=UTC), updated=datetime(2026, 3, 3, tzinfo=UTC)),
            make_issue("A-2", "done", created=datetime(2026, 3, 1, tzinfo=UTC), updated=datetime(2026, 3, 2, tzinfo=UTC)),
            make_issue("A-3", "new", created=datetime(2026, 1, 1, tzinfo=UTC), updated=datetime(2026, 3, 1, tzinfo=UTC)),
        ]

        assert average_cycle_time(issues) == 2

    def test_average_cycle_time_without_completed_issues(self, make_issue):
        assert average_cycle_time([make_issue("A-1", "new")]) == 0


class TestRollups:
    def test_daily_progress_has_one_entry_per_day(self, make_issue):
        issues = [
            make_issue(
                "A-1",
                "done",
                created=datetime(2026, 3, 8, 9, tzinfo=UTC),
                updated=datetime(2026, 3, 10, 9, tzinfo=UTC),
            )
        ]

        series = daily_progress(issues, 3, date(2026, 3, 10))

        assert series == [
            {"date": "2026-03-08", "completed": 0, "created": 1},
            {"date": "2026-03-09", "completed": 0, "created": 0},
            {"date": "2026-03-10", "completed": 1, "created": 0},
        ]

    def test_team_performance_keys(self, make_issue):
        result = team_performance([make_issue("A-1", "done", 3)])

        assert result["totalIssues"] == 1
        assert result["completedIssues"] == 1
        assert result["totalStoryPoints"] == 3
        assert set(result) == {
            "totalIssues",
            "completedIssues",
            "totalStoryPoints",
            "issuesByAssignee",
            "issuesByStatus",
            "velocityTrend",
        }

    def test_individual_performance_series_length(self, make_issue, now):
        result = individual_performance([make_issue("A-1", story_points=None)], 30, now)

        assert result["totalTickets"] == 1
        assert result["totalStoryPoints"] == 0
        assert len(result["dailyProgress"]) == 30
