"""
Firebase Mobile Health Client

Crashlytics, Performance Monitoring and Analytics summaries for the mobile
apps, combined into a MobileHealth snapshot with a health score.

Without FIREBASE_METRICS_URL / FIREBASE_TOKEN the client never fails for
missing credentials: it serves fixed demo payloads, and every record built
from them carries ``is_demo=True``.
"""

from typing import Any

from teamdash.aggregator.envelope import gather_settled
from teamdash.calculators.health import health_score, recommendations
from teamdash.collectors.base import SourceClient
from teamdash.collectors.transformers import FirebaseTransformer
from teamdash.core.cache import cache_key
from teamdash.core.logging_config import get_logger
from teamdash.domain.constants import cache_ttl
from teamdash.domain.mobile import AnalyticsSample, CrashReport, MobileHealth, PerformanceSample
from teamdash.errors import SourceFetchError
from teamdash.secure_config import FirebaseConfig

logger = get_logger(__name__)

DEMO_CRASHLYTICS: dict[str, Any] = {
    "crashFreeRate": 99.2,
    "totalCrashes": 12,
    "newCrashes": 3,
    "affectedUsers": 45,
    "topCrashes": [
        {"error": "Network timeout on job search", "occurrences": 8},
        {"error": "Authentication token refresh", "occurrences": 4},
        {"error": "Profile loading issue", "occurrences": 2},
    ],
}

DEMO_PERFORMANCE: dict[str, Any] = {
    "appStartTime": {"average": 2.3, "p95": 4.1, "trend": "improving"},
    "networkLatency": {"average": 245, "p95": 890, "trend": "stable"},
    "screenRenderTime": {"average": 156, "p95": 320, "trend": "stable"},
    "apiResponseTime": {"average": 180, "p95": 450, "trend": "improving"},
}

DEMO_ANALYTICS: dict[str, Any] = {
    "activeUsers": {"daily": 1247, "monthly": 4532, "trend": "up"},
    "sessionMetrics": {"averageSessionDuration": 8.5, "sessionsPerUser": 12.3, "bounceRate": 15.2},
    "engagementMetrics": {"screenViews": 45231, "jobApplications": 1234, "profileUpdates": 567},
    "retention": {"day1": 78, "day7": 45, "day30": 23},
}

DEMO_SOURCE = "Firebase (demo data)"
LIVE_SOURCE = "Firebase"


class FirebaseClient(SourceClient):
    """
    Mobile health client with a demo-data fallback.

    Example:
        client = FirebaseClient(None, http, cache)     # unconfigured
        health = await client.get_app_health("mobile")
        health.is_demo  # True
    """

    source_name = "firebase"

    def __init__(self, config: FirebaseConfig | None, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.config = config

    @property
    def is_demo(self) -> bool:
        return self.config is None

    def _auth_header(self) -> dict[str, str]:
        if self.config is None:
            return {}
        return {"Authorization": f"Bearer {self.config.token}"}

    async def _fetch(self, resource: str, filter: str, demo: dict[str, Any]) -> dict[str, Any]:
        if self.config is None:
            logger.debug(f"Firebase not configured, using demo {resource} data")
            return demo

        url = f"{self.config.metrics_url}/{resource}"
        return await self._cached(
            cache_key("firebase", resource, self.config.app_id, filter),
            cache_ttl.FIREBASE_SECONDS,
            lambda: self._get(url, filter=filter, appId=self.config.app_id),
        )

    async def get_crash_summary(self, filter: str = "all") -> CrashReport:
        payload = await self._fetch("crashlytics", filter, DEMO_CRASHLYTICS)
        return FirebaseTransformer.crash_report(payload, self.is_demo)

    async def get_performance(self, filter: str = "all") -> PerformanceSample:
        payload = await self._fetch("performance", filter, DEMO_PERFORMANCE)
        return FirebaseTransformer.performance(payload, self.is_demo)

    async def get_analytics(self, filter: str = "all") -> AnalyticsSample:
        payload = await self._fetch("analytics", filter, DEMO_ANALYTICS)
        return FirebaseTransformer.analytics(payload, self.is_demo)

    async def get_app_health(self, filter: str = "all") -> MobileHealth:
        """
        Combined mobile health for the filter.

        A failing component is logged and left out of the score; the call
        fails only when all three components fail.

        Raises:
            SourceFetchError: If no component could be fetched
        """
        outcomes = await gather_settled(
            {
                "firebase.crashlytics": self.get_crash_summary(filter),
                "firebase.performance": self.get_performance(filter),
                "firebase.analytics": self.get_analytics(filter),
            }
        )
        crash = outcomes["firebase.crashlytics"].value
        performance = outcomes["firebase.performance"].value
        analytics = outcomes["firebase.analytics"].value

        if crash is None and performance is None and analytics is None:
            raise SourceFetchError(self.source_name, "no mobile health data available")

        score = health_score(crash, performance, analytics)
        logger.info(f"Mobile health score for {filter}: {score}", extra={"filter": filter, "is_demo": self.is_demo})

        return MobileHealth(
            score=score,
            crashlytics=crash,
            performance=performance,
            analytics=analytics,
            recommendations=tuple(recommendations(crash, performance, analytics)),
            is_demo=self.is_demo,
            source=DEMO_SOURCE if self.is_demo else LIVE_SOURCE,
        )
