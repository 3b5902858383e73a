"""
Tests for the dashboard snapshot models
"""

from datetime import UTC, datetime

from teamdash.domain.snapshot import (
    BurndownPoint,
    DashboardSnapshot,
    DateRange,
    SourceError,
    SprintMetrics,
    SprintPanel,
    SprintSelectionState,
)


def _date_range():
    return DateRange(
        start=datetime(2026, 2, 8, 12, tzinfo=UTC),
        end=datetime(2026, 3, 10, 12, tzinfo=UTC),
        label="Last 30 Days",
    )


class TestSprintMetrics:
    def test_remaining_points(self):
        metrics = SprintMetrics(total_issues=3, completed_issues=1, total_story_points=8, completed_story_points=3)

        assert metrics.remaining_story_points == 5

    def test_add_accumulates(self):
        total = SprintMetrics()
        total.add(SprintMetrics(2, 1, 5, 3))
        total.add(SprintMetrics(1, 1, 2, 2))

        assert total.to_dict() == {
            "totalIssues": 3,
            "completedIssues": 2,
            "totalStoryPoints": 7,
            "completedStoryPoints": 5,
            "remainingStoryPoints": 2,
        }


class TestSprintPanel:
    """Tests for the current-sprint panel"""

    def test_progress_rounds_half_up(self, make_sprint):
        metrics = SprintMetrics(total_issues=2, completed_issues=1, total_story_points=8, completed_story_points=1)

        panel = SprintPanel(sprint=make_sprint(), metrics=metrics, days_remaining=6)

        assert panel.progress_percentage == 13

    def test_progress_zero_without_points(self, make_sprint):
        panel = SprintPanel(sprint=make_sprint(), metrics=SprintMetrics(), days_remaining=6)

        assert panel.progress_percentage == 0

    def test_to_dict_shape(self, make_sprint):
        panel = SprintPanel(
            sprint=make_sprint(id="7", name="Sprint 7"),
            metrics=SprintMetrics(4, 2, 10, 5),
            days_remaining=6,
            burndown=[BurndownPoint(day=0, ideal_remaining=10), BurndownPoint(day=8, ideal_remaining=4.3, actual_remaining=5)],
        )

        data = panel.to_dict()

        assert data["totalIssues"] == 4
        assert data["currentSprint"]["daysRemaining"] == 6
        assert data["currentSprint"]["progressPercentage"] == 50
        assert data["burndownChart"][0] == {"day": 0, "idealRemaining": 10, "actualRemaining": None}
        assert data["burndownChart"][1]["actualRemaining"] == 5


class TestDashboardSnapshot:
    """Tests for DashboardSnapshot.to_dict"""

    def test_empty_snapshot_reports_no_sprint(self):
        snapshot = DashboardSnapshot(
            filter="web",
            filter_label="Web Projects",
            date_range=_date_range(),
            selection_state=SprintSelectionState.NO_SPRINTS_AVAILABLE,
            message="No active or future sprints found",
        )

        data = snapshot.to_dict()

        assert data["jira"] == {"totalIssues": 0, "error": "No active or future sprints available"}
        assert data["availableSprints"] == []
        assert data["selectedSprint"] is None
        assert data["sprintSelection"] == "NoSprintsAvailable"
        assert data["gitlab"] is None
        assert data["firebase"] is None
        assert data["developers"] == []
        assert data["dateRange"]["label"] == "Last 30 Days"

    def test_errors_are_serialized_in_order(self):
        snapshot = DashboardSnapshot(
            filter="all",
            filter_label="All Projects",
            date_range=_date_range(),
            selection_state=SprintSelectionState.AUTO_ACTIVE,
            errors=[SourceError("gitlab:123", "HTTP 404"), SourceError("jira:board:42", "timeout")],
        )

        assert snapshot.to_dict()["errors"] == [
            {"source": "gitlab:123", "message": "HTTP 404"},
            {"source": "jira:board:42", "message": "timeout"},
        ]

    def test_selection_state_values(self):
        assert SprintSelectionState.EXPLICIT_SELECTION.value == "ExplicitSelection"
        assert SprintSelectionState.AUTO_FUTURE.value == "AutoFuture"
