"""
Team and individual performance views.

Each view fans out one call per service and reports every failed or
unconfigured service as ``{"service": ..., "error": ...}`` next to a null
field, the same partial-failure contract as the overview.
"""

import asyncio
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from teamdash.aggregator.envelope import FetchOutcome, gather_settled
from teamdash.calculators.merge_requests import pull_request_metrics
from teamdash.core.logging_config import get_logger
from teamdash.core.request_metrics import track_request
from teamdash.domain.source_control import MergeRequest
from teamdash.errors import SourceFetchError
from teamdash.utils.datetime_utils import to_iso_z

if TYPE_CHECKING:
    from teamdash.context import AppContext

logger = get_logger(__name__)


def service_errors(outcomes: dict[str, FetchOutcome[Any]]) -> list[dict[str, str]]:
    """Failed services as ``{"service", "error"}`` entries, in fan-out order."""
    errors = []
    for name, outcome in outcomes.items():
        source_error = outcome.to_source_error()
        if source_error is not None:
            errors.append({"service": name, "error": source_error.message})
    return errors


def _not_configured(service: str) -> SourceFetchError:
    return SourceFetchError(service, f"{service} is not configured")


class TeamAggregator:
    """
    Team-wide and per-person rollups over an AppContext.

    Example:
        aggregator = TeamAggregator(context)
        team = await aggregator.team_overview(["alice@example.com", "bob@example.com"], days=14)
        team["errors"]  # [{"service": "snyk", "error": "snyk is not configured"}]
    """

    def __init__(self, context: "AppContext"):
        self.context = context

    async def team_overview(self, team_members: list[str], days: int = 30) -> dict[str, Any]:
        """
        Jira team performance, GitLab merge request metrics, code quality,
        vulnerability summary and chat activity for a team.
        """
        now = self.context.clock()
        with track_request("team"):
            outcomes = await gather_settled(
                {
                    "jira": self._jira_team(team_members, days, now),
                    "gitlab": self._merge_request_metrics(days, now),
                    "sonarqube": self._code_quality(),
                    "snyk": self._vulnerabilities(),
                    "slack": self._slack_team(team_members, days, now),
                }
            )

        result: dict[str, Any] = {name: outcome.value for name, outcome in outcomes.items()}
        result["errors"] = service_errors(outcomes)
        return result

    async def individual(self, user_id: str, days: int = 30) -> dict[str, Any]:
        """Jira individual performance, GitLab merge request metrics and chat presence for one person."""
        now = self.context.clock()
        with track_request("individual"):
            outcomes = await gather_settled(
                {
                    "jira": self._jira_individual(user_id, days, now),
                    "gitlab": self._merge_request_metrics(days, now),
                    "slack": self._slack_presence(user_id),
                }
            )

        return {
            "userId": user_id,
            **{name: outcome.value for name, outcome in outcomes.items()},
            "errors": service_errors(outcomes),
        }

    async def _jira_team(self, team_members: list[str], days: int, now: datetime) -> dict[str, Any]:
        if self.context.jira is None:
            raise _not_configured("jira")
        return await self.context.jira.get_team_performance(team_members, days, now)

    async def _jira_individual(self, user_id: str, days: int, now: datetime) -> dict[str, Any]:
        if self.context.jira is None:
            raise _not_configured("jira")
        return await self.context.jira.get_individual_performance(user_id, days, now)

    async def _merge_request_metrics(self, days: int, now: datetime) -> dict[str, Any]:
        """Merge request rollup across every configured project; any project failure fails the service."""
        gitlab = self.context.gitlab
        if gitlab is None:
            raise _not_configured("gitlab")

        since = to_iso_z(now - timedelta(days=days))
        per_project = await asyncio.gather(
            *(
                gitlab.list_merge_requests(project_id, updated_after=since)
                for project_id in self.context.definitions.projects
            )
        )
        merge_requests: list[MergeRequest] = [mr for mrs in per_project for mr in mrs]
        return pull_request_metrics(merge_requests, days, now)

    async def _code_quality(self) -> dict[str, Any]:
        if self.context.sonarqube is None:
            raise _not_configured("sonarqube")
        metrics = await self.context.sonarqube.get_code_quality("all")
        return metrics.to_dict()

    async def _vulnerabilities(self) -> dict[str, Any]:
        if self.context.snyk is None:
            raise _not_configured("snyk")
        summary = await self.context.snyk.get_organization_summary()
        return summary.to_dict()

    async def _slack_team(self, team_members: list[str], days: int, now: datetime) -> dict[str, Any]:
        if self.context.slack is None:
            raise _not_configured("slack")
        return await self.context.slack.get_team_activity(team_members, days, now)

    async def _slack_presence(self, user_id: str) -> dict[str, Any]:
        if self.context.slack is None:
            raise _not_configured("slack")
        return await self.context.slack.get_user_presence(user_id)
