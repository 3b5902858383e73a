"""
Secure Configuration Management

Centralized, validated configuration for the dashboard service. Credentials
come from the environment (a local ``.env`` is loaded with python-dotenv);
board and project definitions come from ``config.json``.

Usage:
    from teamdash.secure_config import get_config

    config = get_config()
    jira_config = config.get_jira_config()
    print(jira_config.host)

Security Features:
    - Fail-fast validation of every credential set
    - Placeholder detection (e.g., "your_token_here")
    - HTTPS enforcement for URLs
    - No default credentials

Raises:
    ConfigurationError: If configuration is missing or invalid
"""

import json
import os
import re
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from teamdash.core.logging_config import get_logger
from teamdash.errors import ConfigurationError
from teamdash.utils.error_handling import log_and_return_default

logger = get_logger(__name__)

PLACEHOLDERS = ("your_token", "your_api", "your-", "example", "placeholder", "xxx", "replace_me", "changeme")
EMAIL_PATTERN = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
DEFAULT_CONFIG_PATH = "config.json"


def _require_https(env_name: str, url: str) -> None:
    if not url:
        raise ConfigurationError(f"{env_name} is required")
    if not url.startswith("https://"):
        raise ConfigurationError(f"{env_name} must use HTTPS: {url}")


def _require_token(env_name: str, token: str, min_length: int = 8) -> None:
    if not token:
        raise ConfigurationError(f"{env_name} is required")

    if len(token) < min_length:
        raise ConfigurationError(f"{env_name} appears invalid (too short: {len(token)} chars, expected >={min_length})")

    if any(placeholder in token.lower() for placeholder in PLACEHOLDERS):
        raise ConfigurationError(f"{env_name} contains a placeholder value - please set a real token")


@dataclass
class JiraConfig:
    """
    Validated Jira Cloud configuration.

    ``story_points_field`` is the custom field holding estimates; Jira Cloud
    uses customfield_10016 unless the site was migrated.
    """

    host: str
    email: str
    token: str
    story_points_field: str = "customfield_10016"

    def __post_init__(self):
        self.host = self.host.rstrip("/")
        self._validate()

    def _validate(self):
        _require_https("JIRA_HOST", self.host)

        if not self.email:
            raise ConfigurationError("JIRA_EMAIL is required")
        if not re.match(EMAIL_PATTERN, self.email):
            raise ConfigurationError(f"JIRA_EMAIL must be a valid email address: {self.email}")

        _require_token("JIRA_TOKEN", self.token)

        if not re.match(r"^customfield_\d+$", self.story_points_field):
            raise ConfigurationError(f"JIRA_STORY_POINTS_FIELD must look like customfield_NNNNN: {self.story_points_field}")


@dataclass
class GitLabConfig:
    """Validated GitLab configuration (self-hosted or gitlab.com)."""

    url: str
    token: str

    def __post_init__(self):
        self.url = self.url.rstrip("/")
        self._validate()

    def _validate(self):
        _require_https("GITLAB_URL", self.url)
        _require_token("GITLAB_TOKEN", self.token)


@dataclass
class FirebaseConfig:
    """
    Validated mobile analytics configuration.

    ``metrics_url`` points at a service that exposes the Crashlytics,
    Performance and Analytics summaries as JSON. When it is not configured the
    Firebase client serves demo data instead.
    """

    metrics_url: str
    token: str
    app_id: str | None = None

    def __post_init__(self):
        self.metrics_url = self.metrics_url.rstrip("/")
        self._validate()

    def _validate(self):
        _require_https("FIREBASE_METRICS_URL", self.metrics_url)
        _require_token("FIREBASE_TOKEN", self.token)


@dataclass
class SonarQubeConfig:
    """Validated SonarQube configuration."""

    url: str
    token: str
    project_key: str | None = None

    def __post_init__(self):
        self.url = self.url.rstrip("/")
        self._validate()

    def _validate(self):
        _require_https("SONARQUBE_URL", self.url)
        _require_token("SONARQUBE_TOKEN", self.token)

        if self.project_key and not re.match(r"^[a-zA-Z0-9_\-.:]+$", self.project_key):
            raise ConfigurationError(f"SONARQUBE_PROJECT contains invalid characters: {self.project_key}")


@dataclass
class SnykConfig:
    """
    Validated Snyk configuration.

    Snyk org ids are UUIDs.
    """

    token: str
    org_id: str
    base_url: str = "https://snyk.io/api/v1"

    def __post_init__(self):
        self._validate()

    def _validate(self):
        _require_token("SNYK_TOKEN", self.token)

        if not self.org_id:
            raise ConfigurationError("SNYK_ORG_ID is required")

        uuid_pattern = r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$"
        if not re.match(uuid_pattern, self.org_id.lower()):
            raise ConfigurationError("SNYK_ORG_ID must be a valid UUID format")

        _require_https("SNYK_BASE_URL", self.base_url)


@dataclass
class SlackConfig:
    """Validated Slack Web API configuration."""

    token: str
    base_url: str = "https://slack.com/api"

    def __post_init__(self):
        self._validate()

    def _validate(self):
        _require_token("SLACK_TOKEN", self.token)

        if not self.token.startswith(("xoxb-", "xoxp-")):
            raise ConfigurationError("SLACK_TOKEN must be a bot (xoxb-) or user (xoxp-) token")


@dataclass
class ServerConfig:
    """HTTP server settings."""

    host: str = "0.0.0.0"
    port: int = 5001
    cors_origins: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ProjectDefinition:
    """A GitLab project configured for the dashboard."""

    id: str
    display: str
    category: str


@dataclass(frozen=True)
class BoardDefinition:
    """A Jira board configured for the dashboard."""

    id: str
    name: str
    category: str


@dataclass
class DashboardDefinitions:
    """
    Projects and boards the dashboard aggregates, keyed by id.

    Both mappings keep the order of the configuration file, which is the
    order projects are accumulated in.

    Example config.json:
        {
          "projects": {"123": {"display": "iOS App", "category": "mobile"}},
          "boards":   {"42":  {"name": "Mobile Board", "category": "mobile"}}
        }
    """

    projects: dict[str, ProjectDefinition] = field(default_factory=dict)
    boards: dict[str, BoardDefinition] = field(default_factory=dict)

    @property
    def is_loaded(self) -> bool:
        return bool(self.projects) and bool(self.boards)

    def matching_projects(self, filter: str) -> list[ProjectDefinition]:
        """Projects in the filter's category ("all" matches every project)."""
        return [p for p in self.projects.values() if filter == "all" or p.category == filter]

    def matching_boards(self, filter: str) -> list[BoardDefinition]:
        """Boards in the filter's category ("all" matches every board)."""
        return [b for b in self.boards.values() if filter == "all" or b.category == filter]

    @classmethod
    def from_dict(cls, data: dict) -> "DashboardDefinitions":
        projects = {
            str(project_id): ProjectDefinition(
                id=str(project_id),
                display=entry.get("display") or str(project_id),
                category=entry.get("category") or "unknown",
            )
            for project_id, entry in (data.get("projects") or {}).items()
        }
        boards = {
            str(board_id): BoardDefinition(
                id=str(board_id),
                name=entry.get("name") or str(board_id),
                category=entry.get("category") or "unknown",
            )
            for board_id, entry in (data.get("boards") or {}).items()
        }
        return cls(projects=projects, boards=boards)


def load_definitions(path: str | Path | None = None) -> DashboardDefinitions:
    """
    Load board and project definitions from a JSON file.

    A missing or malformed file yields empty definitions (logged); requests
    that need them then fail with a ConfigurationError.

    Args:
        path: Config file path, defaults to $DASHBOARD_CONFIG_PATH or ./config.json
    """
    config_path = Path(path or os.getenv("DASHBOARD_CONFIG_PATH") or DEFAULT_CONFIG_PATH)

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        return log_and_return_default(
            logger,
            e,
            context={"path": str(config_path)},
            default_value=DashboardDefinitions(),
            operation="Dashboard config loading",
        )

    if not isinstance(data, dict):
        logger.warning("Dashboard config is not a JSON object, ignoring", extra={"path": str(config_path)})
        return DashboardDefinitions()

    definitions = DashboardDefinitions.from_dict(data)
    logger.info(
        f"Loaded {len(definitions.projects)} projects and {len(definitions.boards)} boards from {config_path}",
        extra={"path": str(config_path)},
    )
    return definitions


class SecureConfig:
    """
    Centralized secure configuration manager.

    Loads the environment once; each get_*_config() call validates the
    current values and raises ConfigurationError when they are unusable.
    """

    SERVICES = ("jira", "gitlab", "firebase", "sonarqube", "snyk", "slack")

    def __init__(self, load_env: bool = True):
        if load_env:
            load_dotenv()

    def get_jira_config(self) -> JiraConfig:
        """
        Get validated Jira configuration.

        Raises:
            ConfigurationError: If configuration is missing or invalid
        """
        return JiraConfig(
            host=os.getenv("JIRA_HOST") or "",
            email=os.getenv("JIRA_EMAIL") or "",
            token=os.getenv("JIRA_TOKEN") or "",
            story_points_field=os.getenv("JIRA_STORY_POINTS_FIELD") or "customfield_10016",
        )

    def get_gitlab_config(self) -> GitLabConfig:
        return GitLabConfig(url=os.getenv("GITLAB_URL") or "", token=os.getenv("GITLAB_TOKEN") or "")

    def get_firebase_config(self) -> FirebaseConfig:
        return FirebaseConfig(
            metrics_url=os.getenv("FIREBASE_METRICS_URL") or "",
            token=os.getenv("FIREBASE_TOKEN") or "",
            app_id=os.getenv("FIREBASE_APP_ID"),
        )

    def get_sonarqube_config(self) -> SonarQubeConfig:
        return SonarQubeConfig(
            url=os.getenv("SONARQUBE_URL") or "",
            token=os.getenv("SONARQUBE_TOKEN") or "",
            project_key=os.getenv("SONARQUBE_PROJECT"),
        )

    def get_snyk_config(self) -> SnykConfig:
        return SnykConfig(
            token=os.getenv("SNYK_TOKEN") or "",
            org_id=os.getenv("SNYK_ORG_ID") or "",
            base_url=os.getenv("SNYK_BASE_URL", "https://snyk.io/api/v1"),
        )

    def get_slack_config(self) -> SlackConfig:
        return SlackConfig(token=os.getenv("SLACK_TOKEN") or "")

    def get_server_config(self) -> ServerConfig:
        """
        Get HTTP server settings.

        Raises:
            ConfigurationError: If PORT is not a valid port number
        """
        port_value = os.getenv("PORT", "5001")
        try:
            port = int(port_value)
        except ValueError as e:
            raise ConfigurationError(f"PORT must be an integer: {port_value}") from e
        if not 0 < port < 65536:
            raise ConfigurationError(f"PORT out of range: {port}")

        origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]
        return ServerConfig(host=os.getenv("HOST", "0.0.0.0"), port=port, cors_origins=origins)

    def is_configured(self, service: str) -> bool:
        """
        Check whether a service has usable configuration, without raising.

        Args:
            service: One of SERVICES
        """
        if service not in self.SERVICES:
            raise ValueError(f"Unknown service: {service}")

        try:
            getattr(self, f"get_{service}_config")()
        except ConfigurationError:
            return False
        return True


_config_instance: SecureConfig | None = None


def get_config() -> SecureConfig:
    """
    Get the global configuration instance (singleton pattern).

    Returns:
        SecureConfig: The configuration manager
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = SecureConfig()
    return _config_instance
