"""
Per-developer contribution rollup

Accumulates Jira tickets and GitLab activity per resolved identity. Records
are merged in the order they are added, and the first source to produce an
identity sets its display name.
"""

from collections.abc import Iterable

from teamdash.calculators.identity import (
    resolve_commit_author,
    resolve_issue_assignee,
    resolve_merge_request_author,
)
from teamdash.calculators.issues import story_points
from teamdash.domain.constants import metrics_config
from teamdash.domain.developer import Developer
from teamdash.domain.source_control import Commit, MergeRequest
from teamdash.domain.work_items import Issue


class DeveloperRollup:
    """
    Mutable accumulator keyed by identity.

    Example:
        rollup = DeveloperRollup()
        rollup.add_issues(sprint_issues)
        rollup.add_merge_requests(mrs)
        rollup.add_commits(commits)
        developers = rollup.developers()
    """

    def __init__(self):
        self._by_identity: dict[str, Developer] = {}

    def _get(self, identity: str, name: str) -> Developer:
        developer = self._by_identity.get(identity)
        if developer is None:
            developer = Developer(identity=identity, name=name)
            self._by_identity[identity] = developer
        return developer

    def add_issues(self, issues: Iterable[Issue]) -> None:
        """Count tickets, completed tickets and points (missing estimate counts 0)."""
        for issue in issues:
            resolved = resolve_issue_assignee(issue)
            if resolved is None:
                continue
            developer = self._get(*resolved)
            developer.jira_tickets += 1
            developer.jira_points += story_points(issue, metrics_config.INDIVIDUAL_POINT_FALLBACK)
            if issue.is_completed:
                developer.completed_tickets += 1

    def add_merge_requests(self, mrs: Iterable[MergeRequest]) -> None:
        for mr in mrs:
            resolved = resolve_merge_request_author(mr)
            if resolved is None:
                continue
            developer = self._get(*resolved)
            developer.total_prs += 1
            if mr.is_merged:
                developer.merged_prs += 1

    def add_commits(self, commits: Iterable[Commit]) -> None:
        for commit in commits:
            resolved = resolve_commit_author(commit)
            if resolved is None:
                continue
            self._get(*resolved).total_commits += 1

    def developers(self) -> list[Developer]:
        """Developers with at least one merge request or ticket, most contributions first (ties in first-seen order)."""
        active = [developer for developer in self._by_identity.values() if developer.is_active]
        return sorted(active, key=lambda developer: developer.total_contributions, reverse=True)
