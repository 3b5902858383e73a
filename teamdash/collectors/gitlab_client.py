"""
GitLab REST Client

Merge requests, commits and project metadata from the GitLab v4 API,
authenticated with a Bearer personal access token.

API Documentation:
    https://docs.gitlab.com/ee/api/rest/
"""

from typing import Any
from urllib.parse import quote

from teamdash.collectors.base import SourceClient
from teamdash.collectors.transformers import GitLabTransformer
from teamdash.core.cache import cache_key
from teamdash.domain.constants import api_config, cache_ttl
from teamdash.domain.source_control import Commit, GitLabProject, MergeRequest
from teamdash.secure_config import GitLabConfig


class GitLabClient(SourceClient):
    """
    Async GitLab client.

    Project ids may be numeric ids or "group/project" paths; both are URL
    encoded into the path.
    """

    source_name = "gitlab"

    def __init__(self, config: GitLabConfig, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.config = config
        self.api_url = f"{config.url}/api/v4"

    def _auth_header(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.config.token}"}

    def _project_url(self, project_id: str, resource: str = "") -> str:
        encoded = quote(str(project_id), safe="")
        return f"{self.api_url}/projects/{encoded}{resource}"

    async def get_project(self, project_id: str) -> GitLabProject:
        """
        Project metadata.

        REST Endpoint: GET /projects/{id}
        """
        url = self._project_url(project_id)
        payload = await self._cached(
            cache_key("gitlab", "project", project_id),
            cache_ttl.GITLAB_SECONDS,
            lambda: self._get(url),
        )
        return GitLabTransformer.project(payload)

    async def list_merge_requests(
        self,
        project_id: str,
        state: str = "all",
        updated_after: str | None = None,
        updated_before: str | None = None,
    ) -> list[MergeRequest]:
        """
        Merge requests updated in the window (first page of 100).

        REST Endpoint: GET /projects/{id}/merge_requests

        Args:
            project_id: GitLab project id or path
            state: "all", "opened", "merged" or "closed"
            updated_after / updated_before: ISO-8601 window bounds
        """
        url = self._project_url(project_id, "/merge_requests")
        payload = await self._cached(
            cache_key("gitlab", "merge_requests", project_id, state, updated_after, updated_before),
            cache_ttl.GITLAB_SECONDS,
            lambda: self._get(
                url,
                state=state,
                updated_after=updated_after,
                updated_before=updated_before,
                per_page=api_config.GITLAB_PAGE_SIZE,
            ),
        )
        return [GitLabTransformer.merge_request(raw) for raw in payload or []]

    async def list_commits(self, project_id: str, since: str | None = None, until: str | None = None) -> list[Commit]:
        """
        Default-branch commits in the window (first page of 100).

        REST Endpoint: GET /projects/{id}/repository/commits
        """
        url = self._project_url(project_id, "/repository/commits")
        payload = await self._cached(
            cache_key("gitlab", "commits", project_id, since, until),
            cache_ttl.GITLAB_SECONDS,
            lambda: self._get(url, since=since, until=until, per_page=api_config.GITLAB_PAGE_SIZE),
        )
        return [GitLabTransformer.commit(raw) for raw in payload or []]
