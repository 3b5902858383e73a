#!/usr/bin/env python3
"""
Application Constants

Centralized constants for cache lifetimes, external API limits and metric
calculations. Immutable dataclass instances, shared across clients,
calculators and the aggregator.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class CacheTTLConfig:
    """
    Cache lifetimes per source, in seconds.

    Highly dynamic data (chat presence) lives for minutes, issue and
    source-control rollups for tens of minutes to an hour, org-wide
    vulnerability summaries for an hour.

    Example:
        >>> cache_ttl.SLACK_PRESENCE_SECONDS
        300
    """

    SLACK_PRESENCE_SECONDS: int = 300
    SLACK_ACTIVITY_SECONDS: int = 1800
    GITLAB_SECONDS: int = 1800
    JIRA_SPRINTS_SECONDS: int = 600
    JIRA_ISSUES_SECONDS: int = 1800
    JIRA_PERFORMANCE_SECONDS: int = 3600
    SONARQUBE_SECONDS: int = 3600
    SNYK_PROJECTS_SECONDS: int = 3600
    SNYK_VULNERABILITIES_SECONDS: int = 1800
    SNYK_SUMMARY_SECONDS: int = 3600
    FIREBASE_SECONDS: int = 900


@dataclass(frozen=True)
class APIConfig:
    """
    External API call limits.

    Attributes:
        ACTIVE_SPRINT_PAGE_SIZE: Max active/future sprints fetched per board
        CLOSED_SPRINT_PAGE_SIZE: Max closed sprints fetched per board
        SPRINT_ISSUE_PAGE_SIZE: Max issues fetched per sprint
        SEARCH_PAGE_SIZE: Max issues returned by a JQL search
        GITLAB_PAGE_SIZE: per_page for GitLab list endpoints
        SAMPLE_SIZE: Snyk projects / Slack channels sampled to stay under rate limits
        MAX_RETRIES: Attempts for retryable responses (429, 5xx, network)
        MAX_BACKOFF_SECONDS: Upper bound on any single retry wait
    """

    ACTIVE_SPRINT_PAGE_SIZE: int = 50
    CLOSED_SPRINT_PAGE_SIZE: int = 100
    SPRINT_ISSUE_PAGE_SIZE: int = 100
    SEARCH_PAGE_SIZE: int = 1000
    BOARD_PAGE_SIZE: int = 100
    GITLAB_PAGE_SIZE: int = 100
    SLACK_HISTORY_LIMIT: int = 1000
    SAMPLE_SIZE: int = 5
    MAX_RETRIES: int = 3
    MAX_BACKOFF_SECONDS: int = 30
    DEFAULT_TIMEOUT_SECONDS: int = 30


@dataclass(frozen=True)
class MetricsConfig:
    """
    Metric calculation constants.

    Attributes:
        SPRINT_POINT_FALLBACK: Points for an issue with no estimate in the sprint panel
        INDIVIDUAL_POINT_FALLBACK: Points for an issue with no estimate in date-range,
            team and individual rollups. Differs from the sprint panel value; both are
            kept until product decides which one is intended.
        DEFAULT_WINDOW_DAYS: Trailing window used when no dates are requested
        BURNDOWN_MAX_DAYS: Last day index plotted on the burndown chart
    """

    SPRINT_POINT_FALLBACK: float = 1
    INDIVIDUAL_POINT_FALLBACK: float = 0
    DONE_STATUS_CATEGORY: str = "done"
    UNASSIGNED_LABEL: str = "Unassigned"
    NO_PRIORITY_LABEL: str = "None"
    DEFAULT_WINDOW_DAYS: int = 30
    BURNDOWN_MAX_DAYS: int = 14
    TOP_ACTIVE_USERS: int = 10


@dataclass(frozen=True)
class HealthScoreConfig:
    """
    Mobile app health score factors.

    Score starts at 100 and is multiplied by crash-free rate, then penalised
    for slow app start and weak 7-day retention.
    """

    BASE_SCORE: float = 100.0
    SLOW_START_SECONDS: float = 2.0
    SLOW_START_FACTOR: float = 0.97
    LOW_RETENTION_DAY7: float = 60.0
    LOW_RETENTION_FACTOR: float = 0.98
    # Recommendation thresholds
    RECOMMEND_CRASH_FREE_RATE: float = 99.5
    RECOMMEND_START_SECONDS: float = 1.8
    RECOMMEND_RETENTION_DAY7: float = 65.0
    RECOMMEND_MAX_CRASHES: int = 3


cache_ttl = CacheTTLConfig()
api_config = APIConfig()
metrics_config = MetricsConfig()
health_score_config = HealthScoreConfig()

FILTER_LABELS = {
    "mobile": "Mobile Projects",
    "web": "Web Projects",
    "all": "All Projects",
}

VALID_FILTERS = tuple(FILTER_LABELS)
