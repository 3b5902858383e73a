"""
Aggregation Request Tracking

Per-request performance and health counters for dashboard aggregations:
    - RequestMetricsTracker: counters for a single aggregation run
    - track_request(): context manager that starts/ends a tracker and logs a summary
    - get_current_tracker(): access the active tracker from source clients and the cache

The active tracker lives in a ContextVar, so concurrent requests served by the
same event loop each see their own tracker.
"""

import time
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

from teamdash.core.logging_config import get_logger

logger = get_logger(__name__)

_current_tracker: ContextVar["RequestMetricsTracker | None"] = ContextVar("current_request_tracker", default=None)


class RequestMetricsTracker:
    """
    Tracks external API usage for one aggregation request.

    Attributes:
        operation: Aggregation name (e.g., "overview", "team")
        execution_time_ms: Wall time of the request in milliseconds
        api_call_count: Number of HTTP requests sent to external sources
        cache_hits: Reads served from the cache
        cache_misses: Reads that had to go to the source
        rate_limit_hits: Number of 429 responses
        retry_count: Number of transient-error retries
        source_errors: Sources that failed during the request

    Example:
        >>> tracker = RequestMetricsTracker("overview")
        >>> tracker.start()
        >>> tracker.record_api_call()
        >>> tracker.end()
        >>> tracker.api_call_count
        1
    """

    def __init__(self, operation: str):
        self.operation = operation
        self.start_time: float | None = None
        self.execution_time_ms: float = 0
        self.api_call_count: int = 0
        self.cache_hits: int = 0
        self.cache_misses: int = 0
        self.rate_limit_hits: int = 0
        self.retry_count: int = 0
        self.source_errors: list[str] = []

    def start(self) -> None:
        self.start_time = time.perf_counter()

    def end(self) -> None:
        if self.start_time is not None:
            self.execution_time_ms = (time.perf_counter() - self.start_time) * 1000

    def record_api_call(self) -> None:
        self.api_call_count += 1

    def record_cache_hit(self) -> None:
        self.cache_hits += 1

    def record_cache_miss(self) -> None:
        self.cache_misses += 1

    def record_rate_limit_hit(self) -> None:
        """Record a 429 response."""
        self.rate_limit_hits += 1
        logger.warning(
            f"Rate limit hit during {self.operation} aggregation",
            extra={"operation": self.operation, "total_rate_limit_hits": self.rate_limit_hits},
        )

    def record_retry(self) -> None:
        self.retry_count += 1

    def record_source_error(self, source: str) -> None:
        self.source_errors.append(source)

    def to_dict(self) -> dict[str, Any]:
        """Convert counters to a dictionary for structured logging."""
        return {
            "operation": self.operation,
            "execution_time_ms": round(self.execution_time_ms, 2),
            "api_call_count": self.api_call_count,
            "cache_hits": self.cache_hits,
            "cache_misses": self.cache_misses,
            "rate_limit_hits": self.rate_limit_hits,
            "retry_count": self.retry_count,
            "source_errors": list(self.source_errors),
        }


def get_current_tracker() -> RequestMetricsTracker | None:
    """
    Get the tracker for the request currently being aggregated.

    Returns:
        Active tracker, or None outside of track_request()
    """
    return _current_tracker.get()


@contextmanager
def track_request(operation: str) -> Generator[RequestMetricsTracker, None, None]:
    """
    Track one aggregation request.

    Example:
        with track_request("overview") as tracker:
            snapshot = await aggregator.build_overview(...)
        # Summary logged with api_call_count, cache hits, errors, elapsed time
    """
    tracker = RequestMetricsTracker(operation)
    token = _current_tracker.set(tracker)
    tracker.start()
    try:
        yield tracker
    finally:
        tracker.end()
        _current_tracker.reset(token)
        logger.info(
            f"{operation} aggregation finished in {tracker.execution_time_ms:.0f}ms "
            f"({tracker.api_call_count} API calls, {tracker.cache_hits} cache hits, "
            f"{len(tracker.source_errors)} source errors)",
            extra=tracker.to_dict(),
        )
