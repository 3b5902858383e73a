"""
Mobile app health domain models - Crashlytics, Performance, Analytics

    - CrashReport: crash-free rate and top crashes
    - PerformanceSample: app start / network / render timings
    - AnalyticsSample: active users, sessions, retention
    - MobileHealth: the three combined with a health score

Every model carries ``is_demo``: synthetic data returned when the mobile
analytics backend is not configured is always labeled as such.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class TimingMetric:
    """Average / p95 timing with a qualitative trend."""

    average: float
    p95: float | None = None
    trend: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"average": self.average, "p95": self.p95, "trend": self.trend}


@dataclass(frozen=True)
class CrashReport:
    """
    Crashlytics summary.

    Attributes:
        crash_free_rate: Percentage of sessions without a crash (0-100)
        total_crashes: Crash events in the period
        new_crashes: Crash clusters first seen in the period
        affected_users: Distinct users that crashed
        top_crashes: [{"error": str, "occurrences": int}, ...]
    """

    crash_free_rate: float
    total_crashes: int
    new_crashes: int
    affected_users: int = 0
    top_crashes: tuple[dict[str, Any], ...] = ()
    trend: str | None = None
    is_demo: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "crashFreeRate": self.crash_free_rate,
            "totalCrashes": self.total_crashes,
            "newCrashes": self.new_crashes,
            "affectedUsers": self.affected_users,
            "topCrashes": list(self.top_crashes),
            "trend": self.trend,
            "isDemo": self.is_demo,
        }


@dataclass(frozen=True)
class PerformanceSample:
    """Firebase Performance Monitoring timings (seconds for app start, ms otherwise)."""

    app_start_time: TimingMetric
    network_latency: TimingMetric | None = None
    screen_render_time: TimingMetric | None = None
    api_response_time: TimingMetric | None = None
    is_demo: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "appStartTime": self.app_start_time.to_dict(),
            "networkLatency": self.network_latency.to_dict() if self.network_latency else None,
            "screenRenderTime": self.screen_render_time.to_dict() if self.screen_render_time else None,
            "apiResponseTime": self.api_response_time.to_dict() if self.api_response_time else None,
            "isDemo": self.is_demo,
        }


@dataclass(frozen=True)
class AnalyticsSample:
    """
    Engagement snapshot.

    Attributes:
        daily_active_users / monthly_active_users: Active user counts
        retention_day1 / retention_day7 / retention_day30: Retention percentages
        session_metrics: averageSessionDuration, sessionsPerUser, bounceRate
        engagement_metrics: free-form event counters (screenViews, ...)
    """

    daily_active_users: int
    monthly_active_users: int
    retention_day1: float
    retention_day7: float
    retention_day30: float
    active_users_trend: str | None = None
    session_metrics: dict[str, float] = field(default_factory=dict)
    engagement_metrics: dict[str, int] = field(default_factory=dict)
    is_demo: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "activeUsers": {
                "daily": self.daily_active_users,
                "monthly": self.monthly_active_users,
                "trend": self.active_users_trend,
            },
            "sessionMetrics": dict(self.session_metrics),
            "engagementMetrics": dict(self.engagement_metrics),
            "retention": {
                "day1": self.retention_day1,
                "day7": self.retention_day7,
                "day30": self.retention_day30,
            },
            "isDemo": self.is_demo,
        }


@dataclass(frozen=True)
class MobileHealth:
    """
    Combined mobile health snapshot.

    Attributes:
        score: 0-100 health score (see calculators.health.health_score)
        crashlytics / performance / analytics: Component samples, None if unavailable
        recommendations: Human-readable follow-ups
        is_demo: True when any component is synthetic
        source: Where the data came from
    """

    score: int
    crashlytics: CrashReport | None
    performance: PerformanceSample | None
    analytics: AnalyticsSample | None
    recommendations: tuple[str, ...] = ()
    is_demo: bool = False
    source: str = "Firebase"

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "crashlytics": self.crashlytics.to_dict() if self.crashlytics else None,
            "performance": self.performance.to_dict() if self.performance else None,
            "analytics": self.analytics.to_dict() if self.analytics else None,
            "recommendations": list(self.recommendations),
            "source": self.source,
            "isDemo": self.is_demo,
            "isLiveData": not self.is_demo,
        }
