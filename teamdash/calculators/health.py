"""
Mobile app health score and recommendations

    score = 100
          x crashFreeRate / 100      (when crash data is present)
          x 0.97                     (when average app start > 2.0s)
          x 0.98                     (when day-7 retention < 60%)
    rounded to the nearest integer
"""

from teamdash.domain.constants import health_score_config as cfg
from teamdash.domain.mobile import AnalyticsSample, CrashReport, PerformanceSample
from teamdash.utils.statistics import round_half_up

CRASH_RECOMMENDATION = "Investigate top crash clusters to raise the crash-free rate above 99.5%"
STARTUP_RECOMMENDATION = "Optimize app startup performance"
ONBOARDING_RECOMMENDATION = "Improve the onboarding experience to lift 7-day retention"
STABILITY_RECOMMENDATION = "Focus on stability improvements for recurring crashes"
HEALTHY_RECOMMENDATION = "App health is excellent - maintain quality standards"


def health_score(
    crash: CrashReport | None,
    performance: PerformanceSample | None,
    analytics: AnalyticsSample | None,
) -> int:
    """Combine the available samples into a 0-100 score; missing samples apply no factor."""
    score = cfg.BASE_SCORE

    if crash is not None:
        score *= crash.crash_free_rate / 100

    if performance is not None and performance.app_start_time.average > cfg.SLOW_START_SECONDS:
        score *= cfg.SLOW_START_FACTOR

    if analytics is not None and analytics.retention_day7 < cfg.LOW_RETENTION_DAY7:
        score *= cfg.LOW_RETENTION_FACTOR

    return round_half_up(score)


def recommendations(
    crash: CrashReport | None,
    performance: PerformanceSample | None,
    analytics: AnalyticsSample | None,
) -> list[str]:
    """Follow-ups for the thresholds the app misses; a single all-clear when none are missed."""
    result = []

    if crash is not None and crash.crash_free_rate < cfg.RECOMMEND_CRASH_FREE_RATE:
        result.append(CRASH_RECOMMENDATION)

    if performance is not None and performance.app_start_time.average > cfg.RECOMMEND_START_SECONDS:
        result.append(STARTUP_RECOMMENDATION)

    if analytics is not None and analytics.retention_day7 < cfg.RECOMMEND_RETENTION_DAY7:
        result.append(ONBOARDING_RECOMMENDATION)

    if crash is not None and crash.total_crashes > cfg.RECOMMEND_MAX_CRASHES:
        result.append(STABILITY_RECOMMENDATION)

    if not result:
        result.append(HEALTHY_RECOMMENDATION)

    return result
