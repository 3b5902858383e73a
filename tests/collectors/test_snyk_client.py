"""
Tests for SnykClient organization summaries
"""

import json

import httpx
import pytest

from teamdash.collectors.snyk_client import SnykClient
from teamdash.core.cache import TTLCache
from teamdash.secure_config import SnykConfig

ORG_ID = "0f3c8a52-7d1e-4b6a-9c2f-5e8d1a7b3c90"


def _finding(severity, fixable=False):
    return {"id": f"SNYK-{severity}", "issueData": {"severity": severity}, "fixInfo": {"isFixable": fixable}}


@pytest.fixture
def make_snyk(mock_http, no_sleep):
    config = SnykConfig(token="snyk-0123456789", org_id=ORG_ID)

    def _make(handler):
        return SnykClient(config, mock_http(handler), TTLCache(), sleep=no_sleep)

    return _make


class TestSnykClient:
    @pytest.mark.asyncio
    async def test_project_vulnerabilities_posts_filters(self, make_snyk):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json={"issues": [_finding("high", True), _finding("low")]})

        counts = await make_snyk(handler).get_project_vulnerabilities(ORG_ID, "p1")

        assert requests[0].method == "POST"
        assert requests[0].headers["Authorization"] == "token snyk-0123456789"
        assert json.loads(requests[0].content)["filters"]["severities"] == ["high", "medium", "low"]
        assert counts.to_dict() == {"high": 1, "medium": 0, "low": 1, "total": 2, "fixable": 1}

    @pytest.mark.asyncio
    async def test_summary_samples_first_five_projects(self, make_snyk):
        projects = [{"id": f"p{n}", "name": f"project-{n}", "type": "npm" if n % 2 else "maven"} for n in range(7)]
        scanned = []

        def handler(request):
            if request.url.path.endswith("/projects"):
                return httpx.Response(200, json={"projects": projects})
            scanned.append(request.url.path.split("/")[-2])
            return httpx.Response(200, json={"issues": [_finding("medium")]})

        summary = await make_snyk(handler).get_organization_summary()

        assert summary.total_projects == 7
        assert summary.sampled_projects == 5
        assert scanned == ["p0", "p1", "p2", "p3", "p4"]
        assert summary.vulnerabilities.medium == 5
        assert summary.project_types == {"maven": 4, "npm": 3}

    @pytest.mark.asyncio
    async def test_failing_project_is_skipped(self, make_snyk):
        projects = [{"id": "p0", "name": "a"}, {"id": "p1", "name": "b"}]

        def handler(request):
            if request.url.path.endswith("/projects"):
                return httpx.Response(200, json={"projects": projects})
            if "/project/p0/" in request.url.path:
                return httpx.Response(404)
            return httpx.Response(200, json={"issues": [_finding("high")]})

        summary = await make_snyk(handler).get_organization_summary()

        assert summary.vulnerabilities.high == 1
        assert summary.project_types == {"unknown": 2}
