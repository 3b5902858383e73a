"""
Cross-source identity resolution

Best-effort mapping of Jira assignees, GitLab merge request authors and git
commit authors onto one identity key. Precedence is login, then the local
part of an email address, then the display name. Keys are plain strings and
are not guaranteed unique: the same person can resolve to two keys when
their email local part and GitLab login differ.
"""

from teamdash.domain.source_control import Commit, MergeRequest
from teamdash.domain.work_items import Issue


def email_local_part(email: str | None) -> str | None:
    """Part before '@', or None when the value is not an email address."""
    if not email or "@" not in email:
        return None
    local = email.split("@", 1)[0]
    return local or None


def resolve_issue_assignee(issue: Issue) -> tuple[str, str] | None:
    """
    (identity, display name) for an issue's assignee.

    Unassigned issues, and assignees without a display name, resolve to None.
    """
    if not issue.assignee_name:
        return None
    identity = email_local_part(issue.assignee_email) or issue.assignee_name
    return identity, issue.assignee_name


def resolve_merge_request_author(mr: MergeRequest) -> tuple[str, str] | None:
    """(login, display name) for a merge request author; None without a login."""
    if not mr.author_username:
        return None
    return mr.author_username, mr.author_name or mr.author_username


def resolve_commit_author(commit: Commit) -> tuple[str, str] | None:
    """(identity, display name) for a commit; email local part first, else author name."""
    if not commit.author_name:
        return None
    identity = email_local_part(commit.author_email) or commit.author_name
    return identity, commit.author_name
