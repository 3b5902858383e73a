"""
Issue tracker domain models - Issues and Sprints

Records fetched from Jira, immutable once built:
    - Issue: one ticket with status category, estimate and assignee
    - Sprint: one board sprint, tagged with its board and category
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any

from .constants import metrics_config

SPRINT_STATES = ("active", "future", "closed")


@dataclass(frozen=True)
class Issue:
    """
    A Jira issue.

    Attributes:
        id: Jira issue id
        key: Issue key (e.g., "MOB-123")
        summary: Issue title
        status_name: Workflow status (e.g., "In Review")
        status_category: Status category key ("new", "indeterminate", "done")
        story_points: Estimate, or None when the field is missing or not numeric
        assignee_name: Assignee display name, None when unassigned
        assignee_email: Assignee email address, if visible
        created: Creation timestamp
        updated: Last update timestamp
        priority: Priority name, None when not set

    Example:
        issue = Issue(id="10001", key="MOB-1", summary="Login", status_name="Done",
                      status_category="done", story_points=None)
        issue.is_completed  # True
    """

    id: str
    key: str
    summary: str
    status_name: str
    status_category: str
    story_points: float | None = None
    assignee_name: str | None = None
    assignee_email: str | None = None
    created: datetime | None = None
    updated: datetime | None = None
    priority: str | None = None

    @property
    def is_completed(self) -> bool:
        """An issue is completed iff its status category key is "done"."""
        return self.status_category == metrics_config.DONE_STATUS_CATEGORY


@dataclass(frozen=True)
class Sprint:
    """
    A Jira sprint tagged with the board it was fetched from.

    Attributes:
        id: Sprint id (string, so it compares directly with query parameters)
        name: Sprint name
        state: "active", "future" or "closed"
        start_date: Sprint start, None for unscheduled future sprints
        end_date: Sprint end, None for unscheduled future sprints
        board_id: Configured board the sprint was fetched for
        board_name: Configured board display name
        category: Board category from configuration ("mobile", "web", ...)
        origin_board_id: Board the sprint was created on, as reported by Jira
    """

    id: str
    name: str
    state: str
    start_date: datetime | None = None
    end_date: datetime | None = None
    board_id: str | None = None
    board_name: str | None = None
    category: str = "unknown"
    origin_board_id: str | None = None

    @property
    def display_name(self) -> str:
        """Composite label shown in the sprint dropdown."""
        return f"{self.board_name}: {self.name}"

    @property
    def is_open(self) -> bool:
        """Active and future sprints are selectable; closed ones only feed velocity."""
        return self.state in ("active", "future")

    def with_board(self, board_id: str, board_name: str, category: str) -> "Sprint":
        return replace(self, board_id=board_id, board_name=board_name, category=category)

    def intersects(self, window_start: datetime, window_end: datetime) -> bool:
        """
        Check whether the sprint's date range overlaps the window.

        Sprints without dates are kept, since there is nothing to exclude them on.
        """
        if self.start_date is None or self.end_date is None:
            return True
        return not (self.start_date > window_end or self.end_date < window_start)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "state": self.state,
            "startDate": self.start_date.isoformat() if self.start_date else None,
            "endDate": self.end_date.isoformat() if self.end_date else None,
            "boardId": self.board_id,
            "boardName": self.board_name,
            "displayName": self.display_name,
            "category": self.category,
        }
