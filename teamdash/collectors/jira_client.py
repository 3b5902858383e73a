"""
Jira Cloud REST Client

Agile (boards, sprints, sprint issues) and platform (JQL search) endpoints,
authenticated with Basic email:token.

Usage:
    client = JiraClient(config.get_jira_config(), http, cache)
    sprints = await client.list_sprints("42", "active,future")
    issues = await client.get_sprint_issues(sprints[0].id)

API Documentation:
    https://developer.atlassian.com/cloud/jira/software/rest/
    https://developer.atlassian.com/cloud/jira/platform/rest/v3/
"""

import base64
from datetime import UTC, datetime, timedelta
from typing import Any

from teamdash.calculators.issues import individual_performance, team_performance
from teamdash.collectors.base import SourceClient
from teamdash.collectors.transformers import IssueTransformer, SprintTransformer
from teamdash.core.cache import cache_key
from teamdash.core.logging_config import get_logger
from teamdash.domain.constants import api_config, cache_ttl
from teamdash.domain.work_items import Issue, Sprint
from teamdash.secure_config import JiraConfig

logger = get_logger(__name__)

SPRINT_ISSUE_FIELDS = ("summary", "status", "assignee")
SEARCH_FIELDS = ("summary", "status", "assignee", "created", "updated", "priority")


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def team_jql(team_members: list[str], start: datetime, end: datetime) -> str:
    """
    Issues assigned to any team member and updated within [start, end].

    Example:
        >>> team_jql(["alice"], datetime(2026, 1, 1), datetime(2026, 1, 31))
        'assignee in ("alice") AND updated >= "2026-01-01" AND updated <= "2026-01-31"'
    """
    members = ",".join(_quote(member) for member in team_members)
    return (
        f"assignee in ({members}) "
        f'AND updated >= "{start.date().isoformat()}" AND updated <= "{end.date().isoformat()}"'
    )


def individual_jql(user_id: str, start: datetime) -> str:
    """Issues assigned to one user and updated since start."""
    return f'assignee = {_quote(user_id)} AND updated >= "{start.date().isoformat()}"'


class JiraClient(SourceClient):
    """Async Jira client; every call reads through the shared cache."""

    source_name = "jira"

    def __init__(self, config: JiraConfig, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.config = config
        self.base_url = config.host

    def _auth_header(self) -> dict[str, str]:
        credentials = f"{self.config.email}:{self.config.token}"
        encoded = base64.b64encode(credentials.encode()).decode()
        return {"Authorization": f"Basic {encoded}"}

    def _fields(self, names: tuple[str, ...]) -> str:
        return ",".join((*names, self.config.story_points_field))

    async def list_boards(self) -> list[dict[str, Any]]:
        """
        Boards visible to the token (first page).

        REST Endpoint: GET /rest/agile/1.0/board

        Returns:
            [{"id": "42", "name": "Mobile Board", "type": "scrum", "location": "Mobile"}, ...]
        """
        url = f"{self.base_url}/rest/agile/1.0/board"
        payload = await self._cached(
            cache_key("jira", "boards"),
            cache_ttl.JIRA_SPRINTS_SECONDS,
            lambda: self._get(url, maxResults=api_config.BOARD_PAGE_SIZE),
        )
        return [
            {
                "id": str(board.get("id")),
                "name": board.get("name"),
                "type": board.get("type"),
                "location": (board.get("location") or {}).get("name"),
            }
            for board in payload.get("values") or []
        ]

    async def list_sprints(self, board_id: str, state: str, max_results: int | None = None) -> list[Sprint]:
        """
        Sprints of one board in the given state(s).

        REST Endpoint: GET /rest/agile/1.0/board/{boardId}/sprint?state=...

        Args:
            board_id: Jira board id
            state: "active,future", "closed", ...
            max_results: Page size; defaults to 100 for closed sprints, 50 otherwise

        Returns:
            Sprints as returned by Jira (not yet tagged with board information)
        """
        if max_results is None:
            max_results = (
                api_config.CLOSED_SPRINT_PAGE_SIZE if state == "closed" else api_config.ACTIVE_SPRINT_PAGE_SIZE
            )

        url = f"{self.base_url}/rest/agile/1.0/board/{board_id}/sprint"
        payload = await self._cached(
            cache_key("jira", "sprints", board_id, state, max_results),
            cache_ttl.JIRA_SPRINTS_SECONDS,
            lambda: self._get(url, state=state, maxResults=max_results),
        )
        sprints = SprintTransformer.from_list_response(payload)
        logger.debug(f"Board {board_id}: {len(sprints)} {state} sprints", extra={"board_id": board_id})
        return sprints

    async def get_sprint_issues(self, sprint_id: str) -> list[Issue]:
        """
        Issues in a sprint (first 100).

        REST Endpoint: GET /rest/agile/1.0/sprint/{sprintId}/issue
        """
        url = f"{self.base_url}/rest/agile/1.0/sprint/{sprint_id}/issue"
        fields = self._fields(SPRINT_ISSUE_FIELDS)
        payload = await self._cached(
            cache_key("jira", "sprint_issues", sprint_id, fields),
            cache_ttl.JIRA_ISSUES_SECONDS,
            lambda: self._get(url, fields=fields, maxResults=api_config.SPRINT_ISSUE_PAGE_SIZE),
        )
        return IssueTransformer.from_search_response(payload, self.config.story_points_field)

    async def search_issues(
        self,
        jql: str,
        fields: tuple[str, ...] = SEARCH_FIELDS,
        max_results: int = api_config.SEARCH_PAGE_SIZE,
        ttl_seconds: float = cache_ttl.JIRA_PERFORMANCE_SECONDS,
    ) -> list[Issue]:
        """
        Run a JQL search (first page).

        REST Endpoint: GET /rest/api/3/search/jql
        """
        url = f"{self.base_url}/rest/api/3/search/jql"
        field_list = self._fields(fields)
        payload = await self._cached(
            cache_key("jira", "search", jql, field_list, max_results),
            ttl_seconds,
            lambda: self._get(url, jql=jql, fields=field_list, maxResults=max_results),
        )
        return IssueTransformer.from_search_response(payload, self.config.story_points_field)

    async def get_team_performance(
        self, team_members: list[str], days: int = 30, now: datetime | None = None
    ) -> dict[str, Any]:
        """Team rollup for issues updated in the trailing window."""
        now = now or datetime.now(UTC)
        issues = await self.search_issues(team_jql(team_members, now - timedelta(days=days), now))
        return team_performance(issues)

    async def get_individual_performance(
        self, user_id: str, days: int = 30, now: datetime | None = None
    ) -> dict[str, Any]:
        """Individual rollup for one assignee over the trailing window."""
        now = now or datetime.now(UTC)
        issues = await self.search_issues(individual_jql(user_id, now - timedelta(days=days)))
        return individual_performance(issues, days, now)
