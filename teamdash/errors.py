"""
Exception hierarchy for the dashboard aggregation service.

    DashboardError
    ├── ConfigurationError  - core configuration missing/invalid (fatal for a request)
    └── SourceFetchError    - one external source failed (isolated, never fatal)

Zero sprints or zero activity is not an error: the aggregator reports it as a
200 response with an explanatory ``message``.
"""


class DashboardError(Exception):
    """Base exception for all dashboard errors."""


class ConfigurationError(DashboardError):
    """Raised when configuration is missing or invalid."""


class SourceFetchError(DashboardError):
    """
    Raised when a call to an external source fails.

    Attributes:
        source: Source name (e.g., "jira", "gitlab:123")
        message: Human-readable failure description
        status_code: HTTP status code, if the failure came from a response
    """

    def __init__(self, source: str, message: str, status_code: int | None = None):
        super().__init__(f"{source}: {message}")
        self.source = source
        self.message = message
        self.status_code = status_code
