"""
Source control domain models - Merge requests, commits and project rollups

    - MergeRequest / Commit: raw GitLab records
    - GitLabProject: project metadata
    - ProjectRollup: per-project totals for the requested window
    - SourceControlSummary: aggregate totals across the filtered projects
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class MergeRequest:
    """
    A GitLab merge request.

    Attributes:
        id: Global merge request id
        iid: Project-scoped merge request number
        title: Merge request title
        state: "opened", "merged", "closed" or "locked"
        author_username: Author login
        author_name: Author display name
        created_at / updated_at / merged_at / closed_at: Lifecycle timestamps
    """

    id: str
    iid: int | None
    title: str
    state: str
    author_username: str | None = None
    author_name: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    merged_at: datetime | None = None
    closed_at: datetime | None = None

    @property
    def is_merged(self) -> bool:
        return self.state == "merged"

    @property
    def is_open(self) -> bool:
        return self.state == "opened"


@dataclass(frozen=True)
class Commit:
    """A GitLab commit (author identity as recorded by git)."""

    id: str
    author_name: str | None = None
    author_email: str | None = None
    created_at: datetime | None = None
    title: str | None = None


@dataclass(frozen=True)
class GitLabProject:
    """GitLab project metadata."""

    id: str
    name: str
    last_activity_at: str | None = None
    web_url: str | None = None


@dataclass
class ProjectRollup:
    """
    Merge request and commit totals for one configured project.

    Example:
        rollup = ProjectRollup(project_id="123", name="ios-app", display="iOS App",
                               category="mobile", total_mrs=10, merged_mrs=7,
                               open_mrs=2, total_commits=54)
    """

    project_id: str
    name: str
    display: str
    category: str
    total_mrs: int = 0
    merged_mrs: int = 0
    open_mrs: int = 0
    total_commits: int = 0
    last_activity: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "display": self.display,
            "category": self.category,
            "totalMRs": self.total_mrs,
            "mergedMRs": self.merged_mrs,
            "openMRs": self.open_mrs,
            "totalCommits": self.total_commits,
            "lastActivity": self.last_activity,
        }


@dataclass
class SourceControlSummary:
    """
    Source control totals across every project matching a filter.

    ``open_mrs`` is total minus merged, so it also counts closed-unmerged
    merge requests; the per-project rollups carry the strict "opened" count.
    """

    filter: str
    since: str
    projects: dict[str, ProjectRollup] = field(default_factory=dict)

    @property
    def total_mrs(self) -> int:
        return sum(p.total_mrs for p in self.projects.values())

    @property
    def merged_mrs(self) -> int:
        return sum(p.merged_mrs for p in self.projects.values())

    @property
    def total_commits(self) -> int:
        return sum(p.total_commits for p in self.projects.values())

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalMRs": self.total_mrs,
            "mergedMRs": self.merged_mrs,
            "openMRs": self.total_mrs - self.merged_mrs,
            "commits": {"total": self.total_commits},
            "projects": {project_id: rollup.to_dict() for project_id, rollup in self.projects.items()},
            "filter": self.filter,
            "since": self.since,
        }
