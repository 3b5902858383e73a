"""
Snyk REST Client

Organization projects and per-project aggregated issues from the Snyk v1
API (``Authorization: token ...``).
"""

from typing import Any

from teamdash.collectors.base import SourceClient
from teamdash.collectors.transformers import SnykTransformer
from teamdash.core.cache import cache_key
from teamdash.core.logging_config import get_logger
from teamdash.domain.constants import api_config, cache_ttl
from teamdash.domain.security import SEVERITIES, OrganizationSummary, ScannerProject, VulnerabilityCounts
from teamdash.errors import SourceFetchError
from teamdash.secure_config import SnykConfig
from teamdash.utils.error_handling import log_and_continue

logger = get_logger(__name__)

ISSUE_TYPES = ("vuln", "license")


class SnykClient(SourceClient):
    """Async Snyk client."""

    source_name = "snyk"

    def __init__(self, config: SnykConfig, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.config = config
        self.base_url = config.base_url.rstrip("/")

    def _auth_header(self) -> dict[str, str]:
        return {"Authorization": f"token {self.config.token}"}

    async def get_organization_projects(self, org_id: str) -> list[ScannerProject]:
        """
        Projects monitored in an organization.

        REST Endpoint: GET /org/{orgId}/projects
        """
        url = f"{self.base_url}/org/{org_id}/projects"
        payload = await self._cached(
            cache_key("snyk", "org", org_id, "projects"),
            cache_ttl.SNYK_PROJECTS_SECONDS,
            lambda: self._get(url),
        )
        return [SnykTransformer.project(raw) for raw in payload.get("projects") or []]

    async def get_project_vulnerabilities(self, org_id: str, project_id: str) -> VulnerabilityCounts:
        """
        Severity counts of high/medium/low vulnerability and license issues.

        REST Endpoint: POST /org/{orgId}/project/{projectId}/aggregated-issues
        """
        url = f"{self.base_url}/org/{org_id}/project/{project_id}/aggregated-issues"
        body = {"filters": {"severities": list(SEVERITIES), "types": list(ISSUE_TYPES)}}
        payload = await self._cached(
            cache_key("snyk", "vulnerabilities", org_id, project_id),
            cache_ttl.SNYK_VULNERABILITIES_SECONDS,
            lambda: self._request("POST", url, json=body, headers={"Content-Type": "application/json"}),
        )
        findings = [SnykTransformer.finding(raw) for raw in payload.get("issues") or []]
        return VulnerabilityCounts.from_findings(findings)

    async def get_organization_summary(self, org_id: str | None = None) -> OrganizationSummary:
        """
        Org-wide rollup from a sample of projects.

        Only the first SAMPLE_SIZE projects are queried for issues, one at a
        time; a project that fails is logged and skipped.
        """
        org_id = org_id or self.config.org_id
        payload = await self._cached(
            cache_key("snyk", "org", org_id, "summary"),
            cache_ttl.SNYK_SUMMARY_SECONDS,
            lambda: self._summarize(org_id),
        )
        return OrganizationSummary.from_dict(payload)

    async def _summarize(self, org_id: str) -> dict[str, Any]:
        projects = await self.get_organization_projects(org_id)
        sample = projects[: api_config.SAMPLE_SIZE]

        totals = VulnerabilityCounts()
        for project in sample:
            try:
                totals.add(await self.get_project_vulnerabilities(org_id, project.id))
            except SourceFetchError as e:
                log_and_continue(logger, e, {"org_id": org_id, "project_id": project.id}, "Snyk project scan")

        project_types: dict[str, int] = {}
        for project in projects:
            project_type = project.type or "unknown"
            project_types[project_type] = project_types.get(project_type, 0) + 1

        return OrganizationSummary(
            total_projects=len(projects),
            sampled_projects=len(sample),
            vulnerabilities=totals,
            project_types=project_types,
        ).to_dict()
