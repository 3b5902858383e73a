"""
Code Quality Providers

Two interchangeable sources of CodeQualityMetrics behind the
CodeQualityProvider protocol:

    - StaticCodeQualityProvider: fixed per-filter figures (the default)
    - SonarQubeClient: live measures from a SonarQube server

API Documentation:
    https://next.sonarqube.com/sonarqube/web_api/api/measures
"""

from datetime import UTC, datetime, timedelta
from typing import Any, Protocol

from teamdash.collectors.base import SourceClient
from teamdash.collectors.transformers import SonarQubeTransformer
from teamdash.core.cache import cache_key
from teamdash.domain.constants import cache_ttl
from teamdash.domain.quality import CodeQualityMetrics
from teamdash.errors import SourceFetchError
from teamdash.secure_config import SonarQubeConfig

MEASURE_KEYS = (
    "bugs",
    "vulnerabilities",
    "code_smells",
    "coverage",
    "duplicated_lines_density",
    "ncloc",
    "sqale_rating",
    "reliability_rating",
    "security_rating",
    "sqale_index",
)
HISTORY_KEYS = ("bugs", "vulnerabilities", "code_smells", "coverage")


class CodeQualityProvider(Protocol):
    """Anything that can report code quality for a project filter."""

    async def get_code_quality(self, filter: str) -> CodeQualityMetrics: ...


class StaticCodeQualityProvider:
    """
    Fixed code quality figures per filter.

    Unknown filters get the "all" figures.
    """

    METRICS = {
        "mobile": CodeQualityMetrics(coverage=82.3, bugs=1, vulnerabilities=0, maintainability_rating="A"),
        "web": CodeQualityMetrics(coverage=74.8, bugs=3, vulnerabilities=2, maintainability_rating="B"),
        "all": CodeQualityMetrics(coverage=78.5, bugs=2, vulnerabilities=1, maintainability_rating="B"),
    }

    async def get_code_quality(self, filter: str) -> CodeQualityMetrics:
        return self.METRICS.get(filter, self.METRICS["all"])


class SonarQubeClient(SourceClient):
    """
    Async SonarQube client (Bearer token).

    As a CodeQualityProvider it reports the configured SONARQUBE_PROJECT for
    every filter.
    """

    source_name = "sonarqube"

    def __init__(self, config: SonarQubeConfig, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.config = config

    def _auth_header(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.config.token}"}

    async def get_project_metrics(self, project_key: str) -> CodeQualityMetrics:
        """
        Current measures for one project.

        REST Endpoint: GET /api/measures/component
        """
        url = f"{self.config.url}/api/measures/component"
        payload = await self._cached(
            cache_key("sonarqube", "project", project_key),
            cache_ttl.SONARQUBE_SECONDS,
            lambda: self._get(url, component=project_key, metricKeys=",".join(MEASURE_KEYS)),
        )
        return SonarQubeTransformer.from_measures(payload)

    async def get_project_history(
        self, project_key: str, days: int = 30, now: datetime | None = None
    ) -> dict[str, list[dict[str, Any]]]:
        """
        Measure history since ``days`` ago.

        REST Endpoint: GET /api/measures/search_history

        Returns:
            {"coverage": [{"date": "...", "value": 81.2}, ...], "bugs": [...], ...}
        """
        now = now or datetime.now(UTC)
        from_date = (now - timedelta(days=days)).date().isoformat()
        url = f"{self.config.url}/api/measures/search_history"
        payload = await self._cached(
            cache_key("sonarqube", "history", project_key, days, from_date),
            cache_ttl.SONARQUBE_SECONDS,
            lambda: self._get(url, component=project_key, metrics=",".join(HISTORY_KEYS), **{"from": from_date}),
        )
        return SonarQubeTransformer.history(payload)

    async def get_code_quality(self, filter: str) -> CodeQualityMetrics:
        if not self.config.project_key:
            raise SourceFetchError(self.source_name, "SONARQUBE_PROJECT is not configured")
        return await self.get_project_metrics(self.config.project_key)
