"""
Developer domain model - per-person contribution rollup

A Developer accumulates Jira tickets and GitLab activity under one resolved
identity key. Identity matching across sources is heuristic (see
teamdash.calculators.identity), so two records for the same person can
occur when their Jira email and GitLab login differ.
"""

from dataclasses import dataclass
from typing import Any

from teamdash.utils.statistics import safe_ratio


@dataclass
class Developer:
    """
    Contribution counters for one resolved identity.

    Attributes:
        identity: Resolved identity key (login, email local part or display name)
        name: Display name from the first source that produced the identity
        jira_tickets: Issues assigned in sprints overlapping the window
        completed_tickets: Of those, issues in the "done" status category
        jira_points: Story points of assigned issues (no estimate counts 0)
        total_prs: Merge requests authored in the window
        merged_prs: Of those, merged merge requests
        total_commits: Commits attributed to the identity

    Example:
        dev = Developer(identity="asmith", name="Alice Smith", total_prs=4, merged_prs=3, total_commits=10)
        dev.pr_merge_rate  # 0.75
        dev.pr_density     # 0.4
    """

    identity: str
    name: str
    jira_tickets: int = 0
    completed_tickets: int = 0
    jira_points: float = 0
    total_prs: int = 0
    merged_prs: int = 0
    total_commits: int = 0

    @property
    def pr_density(self) -> float:
        """Merge requests per commit, 0 when there are no commits."""
        return safe_ratio(self.total_prs, self.total_commits, 2)

    @property
    def pr_merge_rate(self) -> float:
        """Share of authored merge requests that were merged, 0 when there are none."""
        return safe_ratio(self.merged_prs, self.total_prs)

    @property
    def total_contributions(self) -> int:
        return self.total_prs + self.total_commits + self.jira_tickets

    @property
    def is_active(self) -> bool:
        """Only developers with merge requests or tickets appear in the output."""
        return self.total_prs > 0 or self.jira_tickets > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "gitlabUsername": self.identity,
            "totalPRs": self.total_prs,
            "mergedPRs": self.merged_prs,
            "totalCommits": self.total_commits,
            "jiraTickets": self.jira_tickets,
            "completedTickets": self.completed_tickets,
            "jiraPoints": self.jira_points,
            "prDensity": self.pr_density,
            "prMergeRate": self.pr_merge_rate,
            "totalContributions": self.total_contributions,
        }
