"""
Tests for the team and individual views
"""

import pytest

from teamdash.aggregator.team import TeamAggregator
from teamdash.domain.quality import CodeQualityMetrics
from teamdash.domain.security import OrganizationSummary, VulnerabilityCounts
from teamdash.domain.source_control import MergeRequest
from teamdash.errors import SourceFetchError


def _mr(id, state, username):
    return MergeRequest(id=id, iid=None, title="t", state=state, author_username=username)


@pytest.fixture
def context(fake_context):
    async def list_merge_requests(project_id, updated_after=None):
        return [_mr(f"{project_id}-1", "merged", "alice"), _mr(f"{project_id}-2", "opened", "bob")]

    fake_context.jira.get_team_performance.return_value = {"totalIssues": 12, "completedIssues": 8}
    fake_context.jira.get_individual_performance.return_value = {"totalTickets": 4}
    fake_context.gitlab.list_merge_requests.side_effect = list_merge_requests
    fake_context.sonarqube.get_code_quality.return_value = CodeQualityMetrics(
        coverage=81.2, bugs=2, vulnerabilities=1, is_live=True
    )
    fake_context.snyk.get_organization_summary.return_value = OrganizationSummary(
        total_projects=12, sampled_projects=5, vulnerabilities=VulnerabilityCounts(high=1, total=1)
    )
    fake_context.slack.get_team_activity.return_value = {"totalTeamMessages": 40}
    fake_context.slack.get_user_presence.return_value = {"presence": "active"}
    return fake_context


class TestTeamOverview:
    """Tests for TeamAggregator.team_overview"""

    @pytest.mark.asyncio
    async def test_all_services(self, context, now):
        result = await TeamAggregator(context).team_overview(["alice", "bob"], days=14)

        assert result["jira"] == {"totalIssues": 12, "completedIssues": 8}
        assert result["gitlab"]["totalPRs"] == 6
        assert result["gitlab"]["mergedPRs"] == 3
        assert result["gitlab"]["prsByAuthor"]["alice"] == {"count": 3, "merged": 3}
        assert len(result["gitlab"]["dailyPRActivity"]) == 14
        assert result["sonarqube"]["coverage"] == 81.2
        assert result["snyk"]["vulnerabilities"]["high"] == 1
        assert result["slack"] == {"totalTeamMessages": 40}
        assert result["errors"] == []
        context.jira.get_team_performance.assert_awaited_once_with(["alice", "bob"], 14, now)

    @pytest.mark.asyncio
    async def test_merge_requests_since_window_start(self, context):
        await TeamAggregator(context).team_overview([], days=30)

        since = {call.kwargs["updated_after"] for call in context.gitlab.list_merge_requests.call_args_list}
        assert since == {"2026-02-08T12:00:00Z"}
        assert context.gitlab.list_merge_requests.await_count == 3

    @pytest.mark.asyncio
    async def test_failed_and_unconfigured_services(self, context):
        context.slack.get_team_activity.side_effect = SourceFetchError("slack", "conversations.list failed: invalid_auth")
        context.snyk = None

        result = await TeamAggregator(context).team_overview(["alice"])

        assert result["slack"] is None
        assert result["snyk"] is None
        assert result["jira"] is not None
        assert result["errors"] == [
            {"service": "snyk", "error": "snyk is not configured"},
            {"service": "slack", "error": "conversations.list failed: invalid_auth"},
        ]

    @pytest.mark.asyncio
    async def test_one_failing_project_fails_gitlab(self, context):
        async def list_merge_requests(project_id, updated_after=None):
            if project_id == "789":
                raise SourceFetchError("gitlab", "HTTP 403", 403)
            return []

        context.gitlab.list_merge_requests.side_effect = list_merge_requests

        result = await TeamAggregator(context).team_overview(["alice"])

        assert result["gitlab"] is None
        assert result["errors"] == [{"service": "gitlab", "error": "HTTP 403"}]


class TestIndividual:
    @pytest.mark.asyncio
    async def test_individual(self, context, now):
        result = await TeamAggregator(context).individual("alice", days=7)

        assert result["userId"] == "alice"
        assert result["jira"] == {"totalTickets": 4}
        assert result["slack"] == {"presence": "active"}
        assert result["gitlab"]["totalPRs"] == 6
        assert result["errors"] == []
        context.jira.get_individual_performance.assert_awaited_once_with("alice", 7, now)

    @pytest.mark.asyncio
    async def test_unconfigured_jira(self, context):
        context.jira = None

        result = await TeamAggregator(context).individual("alice")

        assert result["jira"] is None
        assert result["errors"] == [{"service": "jira", "error": "jira is not configured"}]
