"""
Cross-source dashboard aggregation

Builds the DashboardSnapshot for one (filter, date range, sprint) request:

    1. Boards and projects matching the filter
    2. Sprints for every board, concurrently with GitLab, mobile health and
       code quality
    3. Sprint de-duplication, ordering and selection
    4. Date-range velocity and per-developer rollups from every sprint in
       the window plus the GitLab activity already fetched; these are
       filled even when no sprint is open
    5. Current-sprint panel (totals and burndown)

Only missing board/project configuration is fatal. Every other failure
leaves its field empty and adds an entry to ``snapshot.errors``.

Usage:
    aggregator = DashboardAggregator(context)
    snapshot = await aggregator.build_overview("mobile", sprint_id="412")
    return snapshot.to_dict()
"""

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from teamdash.aggregator.envelope import collect_errors, gather_settled
from teamdash.aggregator.labels import filter_label, resolve_date_range
from teamdash.aggregator.sprints import (
    fetch_board_sprints,
    merge_sprints,
    open_sprints,
    select_sprint,
    sort_sprints,
    sprints_in_window,
)
from teamdash.calculators.burndown import build_burndown, sprint_days
from teamdash.calculators.developers import DeveloperRollup
from teamdash.calculators.issues import summarize_date_range, summarize_sprint
from teamdash.calculators.merge_requests import project_rollup
from teamdash.core.logging_config import get_logger
from teamdash.core.request_metrics import track_request
from teamdash.domain.mobile import MobileHealth
from teamdash.domain.snapshot import (
    NO_DEVELOPER_ACTIVITY_MESSAGE,
    NO_SPRINTS_MESSAGE,
    DashboardSnapshot,
    DateRange,
    SourceError,
    SprintMetrics,
    SprintPanel,
)
from teamdash.domain.source_control import Commit, MergeRequest, ProjectRollup, SourceControlSummary
from teamdash.domain.work_items import Issue, Sprint
from teamdash.errors import ConfigurationError, SourceFetchError
from teamdash.secure_config import BoardDefinition, ProjectDefinition
from teamdash.utils.datetime_utils import to_iso_z

if TYPE_CHECKING:
    from teamdash.context import AppContext

logger = get_logger(__name__)

CONFIG_MISSING_ERROR = "Configuration not loaded"
CONFIG_MISSING_MESSAGE = "Please create config.json from config.example.json and configure your projects and boards"


@dataclass
class ProjectActivity:
    """GitLab records fetched for one project, reused by the developer rollup."""

    rollup: ProjectRollup
    merge_requests: list[MergeRequest] = field(default_factory=list)
    commits: list[Commit] = field(default_factory=list)


@dataclass
class SourceControlResult:
    summary: SourceControlSummary
    activity: dict[str, ProjectActivity] = field(default_factory=dict)
    errors: list[SourceError] = field(default_factory=list)


class DashboardAggregator:
    """Overview aggregation over an AppContext."""

    def __init__(self, context: "AppContext"):
        self.context = context

    async def build_overview(
        self,
        filter: str = "all",
        start_date: str | None = None,
        end_date: str | None = None,
        sprint_id: str | None = None,
    ) -> DashboardSnapshot:
        """
        Aggregate every source for the overview.

        Args:
            filter: "all", "mobile" or "web"
            start_date / end_date: Optional ISO bounds (default: trailing 30 days)
            sprint_id: Sprint to show in the sprint panel, if open

        Raises:
            ConfigurationError: If no boards or no projects are configured
            ValueError: If a date bound cannot be parsed
        """
        definitions = self.context.definitions
        if not definitions.is_loaded:
            raise ConfigurationError(CONFIG_MISSING_MESSAGE)

        now = self.context.clock()
        date_range = resolve_date_range(start_date, end_date, now)
        boards = definitions.matching_boards(filter)
        projects = definitions.matching_projects(filter)
        logger.info(
            f"Overview request: filter={filter}, {len(boards)} boards, {len(projects)} projects, {date_range.label}",
            extra={"filter": filter, "sprint_id": sprint_id},
        )

        with track_request("overview"):
            outcomes = await gather_settled(
                {
                    "jira": self._sprints(boards),
                    "gitlab": self._source_control(filter, projects, date_range),
                    "firebase": self._mobile_health(filter),
                    "sonarqube": self.context.code_quality.get_code_quality(filter),
                }
            )

            errors: list[SourceError] = collect_errors(outcomes.values())
            sprints: list[Sprint] = []
            if outcomes["jira"].ok:
                sprints, board_errors = outcomes["jira"].value
                errors.extend(board_errors)

            source_control: SourceControlResult | None = outcomes["gitlab"].value
            if source_control is not None:
                errors.extend(source_control.errors)

            sprints = sort_sprints(merge_sprints(sprints))
            available = open_sprints(sprints)
            selected, selection_state = select_sprint(available, sprint_id)
            window_sprints = sprints_in_window(sprints, date_range.start, date_range.end, date_range.explicit)

            issues_by_sprint, issue_errors = await self._sprint_issues(selected, window_sprints)
            errors.extend(issue_errors)

            jira_date_range = SprintMetrics()
            for sprint in window_sprints:
                jira_date_range.add(summarize_date_range(issues_by_sprint.get(sprint.id, [])))

            firebase: MobileHealth | None = outcomes["firebase"].value
            snapshot = DashboardSnapshot(
                filter=filter,
                filter_label=filter_label(filter),
                date_range=date_range,
                selection_state=selection_state,
                gitlab=source_control.summary if source_control else None,
                firebase=firebase,
                jira_date_range=jira_date_range,
                available_sprints=available,
                selected_sprint=selected,
                sonarqube=outcomes["sonarqube"].value,
                errors=errors,
            )

            rollup = DeveloperRollup()
            for sprint in window_sprints:
                rollup.add_issues(issues_by_sprint.get(sprint.id, []))
            if source_control is not None:
                for activity in source_control.activity.values():
                    rollup.add_merge_requests(activity.merge_requests)
                    rollup.add_commits(activity.commits)
            snapshot.developers = rollup.developers()

            if selected is None:
                snapshot.message = NO_SPRINTS_MESSAGE
                return snapshot

            total_days, days_remaining = sprint_days(selected, now)
            metrics = summarize_sprint(issues_by_sprint.get(selected.id, []))
            snapshot.sprint_panel = SprintPanel(
                sprint=selected,
                metrics=metrics,
                days_remaining=days_remaining,
                burndown=build_burndown(
                    metrics.total_story_points, metrics.remaining_story_points, total_days, days_remaining
                ),
            )

            snapshot.message = overview_message(snapshot, selected, days_remaining)
            if not snapshot.developers:
                snapshot.message += ". " + NO_DEVELOPER_ACTIVITY_MESSAGE.format(
                    filter_label=snapshot.filter_label, date_label=date_range.label
                )
            return snapshot

    async def _sprints(self, boards: list[BoardDefinition]) -> tuple[list[Sprint], list[SourceError]]:
        if self.context.jira is None:
            raise SourceFetchError("jira", "Jira is not configured")
        return await fetch_board_sprints(self.context.jira, boards)

    async def _project_activity(self, project: ProjectDefinition, since: str, until: str | None) -> ProjectActivity:
        gitlab = self.context.gitlab
        metadata, merge_requests, commits = await asyncio.gather(
            gitlab.get_project(project.id),
            gitlab.list_merge_requests(project.id, updated_after=since, updated_before=until),
            gitlab.list_commits(project.id, since=since, until=until),
        )
        return ProjectActivity(
            rollup=project_rollup(project.id, project.display, project.category, metadata, merge_requests, commits),
            merge_requests=merge_requests,
            commits=commits,
        )

    async def _source_control(
        self, filter: str, projects: list[ProjectDefinition], date_range: DateRange
    ) -> SourceControlResult:
        """Per-project GitLab activity; a failing project is reported as "gitlab:{id}"."""
        if self.context.gitlab is None:
            raise SourceFetchError("gitlab", "GitLab is not configured")

        since = to_iso_z(date_range.start)
        until = to_iso_z(date_range.end) if date_range.explicit else None
        outcomes = await gather_settled(
            {f"gitlab:{project.id}": self._project_activity(project, since, until) for project in projects}
        )

        summary = SourceControlSummary(filter=filter, since=since)
        activity: dict[str, ProjectActivity] = {}
        for project in projects:
            outcome = outcomes[f"gitlab:{project.id}"]
            if outcome.ok:
                activity[project.id] = outcome.value
                summary.projects[project.id] = outcome.value.rollup
        return SourceControlResult(summary=summary, activity=activity, errors=collect_errors(outcomes.values()))

    async def _mobile_health(self, filter: str) -> MobileHealth | None:
        if filter == "web":
            return None
        return await self.context.firebase.get_app_health(filter)

    async def _sprint_issues(
        self, selected: Sprint | None, window_sprints: list[Sprint]
    ) -> tuple[dict[str, list[Issue]], list[SourceError]]:
        """Issues of the selected sprint and every sprint in the window, each fetched once."""
        if self.context.jira is None:
            return {}, []

        sprint_ids = [sprint.id for sprint in window_sprints]
        if selected is not None and selected.id not in sprint_ids:
            sprint_ids.insert(0, selected.id)
        if not sprint_ids:
            return {}, []

        jira = self.context.jira
        outcomes = await gather_settled(
            {f"jira:sprint:{sprint_id}": jira.get_sprint_issues(sprint_id) for sprint_id in sprint_ids}
        )
        issues = {
            sprint_id: outcomes[f"jira:sprint:{sprint_id}"].value
            for sprint_id in sprint_ids
            if outcomes[f"jira:sprint:{sprint_id}"].ok
        }
        return issues, collect_errors(outcomes.values())


def overview_message(snapshot: DashboardSnapshot, sprint: Sprint, days_remaining: int | None) -> str:
    """
    Status line shown above the dashboard.

    Example:
        'Mobile Projects: Sprint "Sprint 14" on Mobile Board - 6 days remaining [GitLab activity: Last 30 Days]'
    """
    remaining = f"{days_remaining} days remaining" if days_remaining is not None else "no sprint dates set"
    live_firebase = " (Firebase: Live Data)" if snapshot.firebase is not None and not snapshot.firebase.is_demo else ""
    return (
        f'{snapshot.filter_label}: Sprint "{sprint.name}" on {sprint.board_name} - '
        f"{remaining}{live_firebase} [GitLab activity: {snapshot.date_range.label}]"
    )
