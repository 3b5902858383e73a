"""
Application context

Everything a request needs, built once at startup and injected into the
aggregators (and stored on ``app.state`` by the API layer): configuration,
board/project definitions, the shared cache and HTTP client, one client per
configured source, the code quality provider and the clock.

A source whose credentials are missing or invalid gets ``None`` instead of a
client; the aggregators report it as an isolated source error. Firebase is
the exception: it always has a client, in demo mode when unconfigured.

Usage:
    context = build_context()
    await context.startup()
    aggregator = DashboardAggregator(context)
    ...
    await context.shutdown()
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from teamdash.async_http_client import AsyncSecureHTTPClient
from teamdash.collectors.firebase_client import FirebaseClient
from teamdash.collectors.gitlab_client import GitLabClient
from teamdash.collectors.jira_client import JiraClient
from teamdash.collectors.slack_client import SlackClient
from teamdash.collectors.snyk_client import SnykClient
from teamdash.collectors.sonarqube_client import CodeQualityProvider, SonarQubeClient, StaticCodeQualityProvider
from teamdash.core.cache import TTLCache
from teamdash.core.logging_config import get_logger
from teamdash.errors import ConfigurationError
from teamdash.secure_config import DashboardDefinitions, SecureConfig, get_config, load_definitions

logger = get_logger(__name__)


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class AppContext:
    """
    Shared, request-independent state.

    Attributes:
        config: Credential/config manager
        definitions: Boards and projects from config.json
        cache: Response cache shared by every client
        http: Shared HTTP client (opened in startup())
        jira / gitlab / sonarqube / snyk / slack: Source clients, None when unconfigured
        firebase: Mobile health client (demo mode when unconfigured)
        code_quality: Provider for the overview's code quality panel
        clock: Current time, injectable for tests
    """

    config: SecureConfig
    definitions: DashboardDefinitions
    cache: TTLCache
    http: AsyncSecureHTTPClient
    firebase: FirebaseClient
    jira: JiraClient | None = None
    gitlab: GitLabClient | None = None
    sonarqube: SonarQubeClient | None = None
    snyk: SnykClient | None = None
    slack: SlackClient | None = None
    code_quality: CodeQualityProvider = field(default_factory=StaticCodeQualityProvider)
    clock: Callable[[], datetime] = utc_now

    async def startup(self) -> None:
        self.http.open()
        logger.info(
            "Dashboard context ready",
            extra={
                "projects": len(self.definitions.projects),
                "boards": len(self.definitions.boards),
                "sources": self.service_status(),
            },
        )

    async def shutdown(self) -> None:
        await self.http.aclose()

    def service_status(self) -> dict[str, str]:
        """Human-readable configuration status per source (no external calls)."""
        return {
            "firebase": "demo data" if self.firebase.is_demo else "configured",
            "gitlab": "configured" if self.gitlab else "not configured",
            "jira": "configured" if self.jira else "not configured",
            "sonarqube": "configured" if self.sonarqube else "not configured",
            "snyk": "configured" if self.snyk else "not configured",
            "slack": "configured" if self.slack else "not configured",
            "config": "loaded" if self.definitions.is_loaded else "missing",
        }


def _optional(factory: Callable[[], object], service: str) -> object | None:
    try:
        return factory()
    except ConfigurationError as e:
        logger.warning(f"{service} not configured: {e}", extra={"service": service})
        return None


def build_context(
    config: SecureConfig | None = None,
    definitions: DashboardDefinitions | None = None,
    http: AsyncSecureHTTPClient | None = None,
    cache: TTLCache | None = None,
) -> AppContext:
    """
    Build the application context from the environment and config.json.

    Args:
        config: Config manager (defaults to the global one)
        definitions: Board/project definitions (defaults to load_definitions())
        http: HTTP client (defaults to a new AsyncSecureHTTPClient)
        cache: Cache (defaults to a new TTLCache)
    """
    config = config or get_config()
    definitions = definitions if definitions is not None else load_definitions()
    http = http or AsyncSecureHTTPClient()
    cache = cache or TTLCache()

    jira_config = _optional(config.get_jira_config, "jira")
    gitlab_config = _optional(config.get_gitlab_config, "gitlab")
    firebase_config = _optional(config.get_firebase_config, "firebase")
    sonarqube_config = _optional(config.get_sonarqube_config, "sonarqube")
    snyk_config = _optional(config.get_snyk_config, "snyk")
    slack_config = _optional(config.get_slack_config, "slack")

    sonarqube = SonarQubeClient(sonarqube_config, http, cache) if sonarqube_config else None

    return AppContext(
        config=config,
        definitions=definitions,
        cache=cache,
        http=http,
        firebase=FirebaseClient(firebase_config, http, cache),
        jira=JiraClient(jira_config, http, cache) if jira_config else None,
        gitlab=GitLabClient(gitlab_config, http, cache) if gitlab_config else None,
        sonarqube=sonarqube,
        snyk=SnykClient(snyk_config, http, cache) if snyk_config else None,
        slack=SlackClient(slack_config, http, cache) if slack_config else None,
        code_quality=StaticCodeQualityProvider(),
    )
