"""
Pytest configuration and shared fixtures

Provides domain record factories, board/project definitions and a fake
application context whose source clients are mocks.
"""

from datetime import UTC, datetime
from unittest.mock import MagicMock

import httpx
import pytest

from teamdash.async_http_client import AsyncSecureHTTPClient
from teamdash.collectors.firebase_client import FirebaseClient
from teamdash.collectors.gitlab_client import GitLabClient
from teamdash.collectors.jira_client import JiraClient
from teamdash.collectors.slack_client import SlackClient
from teamdash.collectors.snyk_client import SnykClient
from teamdash.collectors.sonarqube_client import SonarQubeClient, StaticCodeQualityProvider
from teamdash.context import AppContext
from teamdash.core.cache import TTLCache
from teamdash.domain.work_items import Issue, Sprint
from teamdash.secure_config import DashboardDefinitions, SecureConfig

NOW = datetime(2026, 3, 10, 12, 0, 0, tzinfo=UTC)


# ===== Time =====


@pytest.fixture
def now():
    """Fixed 'current time' used by every aggregation test"""
    return NOW


# ===== Domain Model Fixtures =====


@pytest.fixture
def make_issue():
    """Factory for Issue records"""

    def _make(
        key="MOB-1",
        status_category="new",
        story_points=None,
        assignee_name="Alice Smith",
        assignee_email="alice@example.com",
        created=None,
        updated=None,
        priority="Medium",
    ):
        return Issue(
            id=key.split("-")[-1],
            key=key,
            summary=f"Issue {key}",
            status_name="Done" if status_category == "done" else "To Do",
            status_category=status_category,
            story_points=story_points,
            assignee_name=assignee_name,
            assignee_email=assignee_email,
            created=created,
            updated=updated,
            priority=priority,
        )

    return _make


@pytest.fixture
def make_sprint():
    """Factory for Sprint records tagged with a board"""

    def _make(
        id="1",
        name="Sprint 1",
        state="active",
        start=datetime(2026, 3, 2, tzinfo=UTC),
        end=datetime(2026, 3, 16, tzinfo=UTC),
        board_id="42",
        board_name="Mobile Board",
        category="mobile",
    ):
        return Sprint(
            id=id,
            name=name,
            state=state,
            start_date=start,
            end_date=end,
            board_id=board_id,
            board_name=board_name,
            category=category,
        )

    return _make


@pytest.fixture
def definitions():
    """Two mobile projects, one web project, one mobile and one web board"""
    return DashboardDefinitions.from_dict(
        {
            "projects": {
                "123": {"display": "iOS App", "category": "mobile"},
                "456": {"display": "Android App", "category": "mobile"},
                "789": {"display": "Customer Portal", "category": "web"},
            },
            "boards": {
                "42": {"name": "Mobile Board", "category": "mobile"},
                "57": {"name": "Web Board", "category": "web"},
            },
        }
    )


# ===== HTTP Fixtures =====


@pytest.fixture
def mock_http():
    """
    Build an opened AsyncSecureHTTPClient over httpx.MockTransport.

    Usage:
        http = mock_http(lambda request: httpx.Response(200, json={...}))
    """

    def _make(handler):
        return AsyncSecureHTTPClient(transport=httpx.MockTransport(handler)).open()

    return _make


@pytest.fixture
def no_sleep():
    """Retry sleep replacement that records waits instead of sleeping"""
    waits = []

    async def _sleep(seconds):
        waits.append(seconds)

    _sleep.waits = waits
    return _sleep


# ===== Application Context =====


@pytest.fixture
def fake_context(definitions, now):
    """
    AppContext with mocked source clients.

    Every async client method is an AsyncMock; tests set return values or
    side effects on the ones they exercise.
    """
    firebase = MagicMock(spec=FirebaseClient)
    firebase.is_demo = True

    return AppContext(
        config=SecureConfig(load_env=False),
        definitions=definitions,
        cache=TTLCache(),
        http=AsyncSecureHTTPClient(),
        firebase=firebase,
        jira=MagicMock(spec=JiraClient),
        gitlab=MagicMock(spec=GitLabClient),
        sonarqube=MagicMock(spec=SonarQubeClient),
        snyk=MagicMock(spec=SnykClient),
        slack=MagicMock(spec=SlackClient),
        code_quality=StaticCodeQualityProvider(),
        clock=lambda: now,
    )
