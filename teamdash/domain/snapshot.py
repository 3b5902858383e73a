"""
Dashboard snapshot domain models - the aggregate returned per request

    - SourceError: one isolated source failure
    - DateRange: requested window with its display label
    - SprintMetrics: issue/point totals (sprint panel or date-range velocity)
    - BurndownPoint / SprintPanel: the current-sprint panel
    - DashboardSnapshot: everything the overview endpoint returns
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from teamdash.utils.statistics import round_half_up

from .developer import Developer
from .mobile import MobileHealth
from .quality import CodeQualityMetrics
from .source_control import SourceControlSummary
from .work_items import Sprint

NO_SPRINTS_MESSAGE = "No active or future sprints found"
NO_DEVELOPER_ACTIVITY_MESSAGE = "No developer activity found for {filter_label} in {date_label}"


class SprintSelectionState(str, Enum):
    """How the current sprint was chosen."""

    NO_SPRINTS_AVAILABLE = "NoSprintsAvailable"
    EXPLICIT_SELECTION = "ExplicitSelection"
    AUTO_ACTIVE = "AutoActive"
    AUTO_FUTURE = "AutoFuture"


@dataclass(frozen=True)
class SourceError:
    """A failed source fetch, reported next to the null field it left behind."""

    source: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"source": self.source, "message": self.message}


@dataclass(frozen=True)
class DateRange:
    """
    Requested time window.

    Attributes:
        start / end: Window bounds (timezone-aware)
        label: "Last 30 Days", "Last 3 Months", ...
        explicit: True when the caller supplied both bounds
    """

    start: datetime
    end: datetime
    label: str
    explicit: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat(), "label": self.label}


@dataclass
class SprintMetrics:
    """
    Issue and story point totals.

    Invariant: completed_story_points <= total_story_points, so
    remaining_story_points is never negative.
    """

    total_issues: int = 0
    completed_issues: int = 0
    total_story_points: float = 0
    completed_story_points: float = 0

    @property
    def remaining_story_points(self) -> float:
        return self.total_story_points - self.completed_story_points

    def add(self, other: "SprintMetrics") -> None:
        self.total_issues += other.total_issues
        self.completed_issues += other.completed_issues
        self.total_story_points += other.total_story_points
        self.completed_story_points += other.completed_story_points

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalIssues": self.total_issues,
            "completedIssues": self.completed_issues,
            "totalStoryPoints": self.total_story_points,
            "completedStoryPoints": self.completed_story_points,
            "remainingStoryPoints": self.remaining_story_points,
        }


@dataclass(frozen=True)
class BurndownPoint:
    """
    One burndown day.

    ``actual_remaining`` is sparse: only the day matching "today" carries a
    value, every other day is None.
    """

    day: int
    ideal_remaining: float
    actual_remaining: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"day": self.day, "idealRemaining": self.ideal_remaining, "actualRemaining": self.actual_remaining}


@dataclass
class SprintPanel:
    """The current-sprint panel: totals, progress and burndown for the selected sprint."""

    sprint: Sprint
    metrics: SprintMetrics
    days_remaining: int | None
    burndown: list[BurndownPoint] = field(default_factory=list)

    @property
    def progress_percentage(self) -> int:
        if self.metrics.total_story_points <= 0:
            return 0
        return round_half_up(self.metrics.completed_story_points / self.metrics.total_story_points * 100)

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.metrics.to_dict(),
            "currentSprint": {
                "id": self.sprint.id,
                "name": self.sprint.name,
                "boardName": self.sprint.board_name,
                "state": self.sprint.state,
                "category": self.sprint.category,
                "daysRemaining": self.days_remaining,
                "progressPercentage": self.progress_percentage,
            },
            "burndownChart": [point.to_dict() for point in self.burndown],
        }


@dataclass
class DashboardSnapshot:
    """
    Root aggregate for one overview request.

    A pure function of (filter, date range, selected sprint id) given the
    external state at fetch time. Fields left None by a failed source are
    explained by an entry in ``errors``.
    """

    filter: str
    filter_label: str
    date_range: DateRange
    selection_state: SprintSelectionState
    gitlab: SourceControlSummary | None = None
    firebase: MobileHealth | None = None
    sprint_panel: SprintPanel | None = None
    jira_date_range: SprintMetrics = field(default_factory=SprintMetrics)
    developers: list[Developer] = field(default_factory=list)
    available_sprints: list[Sprint] = field(default_factory=list)
    selected_sprint: Sprint | None = None
    sonarqube: CodeQualityMetrics | None = None
    message: str = ""
    errors: list[SourceError] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        if self.sprint_panel is not None:
            jira: dict[str, Any] = self.sprint_panel.to_dict()
        else:
            jira = {"totalIssues": 0, "error": "No active or future sprints available"}

        return {
            "gitlab": self.gitlab.to_dict() if self.gitlab else None,
            "firebase": self.firebase.to_dict() if self.firebase else None,
            "jira": jira,
            "jiraDateRange": self.jira_date_range.to_dict(),
            "developers": [developer.to_dict() for developer in self.developers],
            "availableSprints": [sprint.to_dict() for sprint in self.available_sprints],
            "selectedSprint": self.selected_sprint.to_dict() if self.selected_sprint else None,
            "sprintSelection": self.selection_state.value,
            "filter": self.filter,
            "filterLabel": self.filter_label,
            "dateRange": self.date_range.to_dict(),
            "sonarqube": self.sonarqube.to_dict() if self.sonarqube else None,
            "message": self.message,
            "errors": [error.to_dict() for error in self.errors],
        }
