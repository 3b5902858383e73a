"""
Core Infrastructure - Logging, Cache, Request Tracking

Usage:
    from teamdash.core import get_logger, TTLCache, cache_key, track_request

    logger = get_logger(__name__)
    cache = TTLCache()
"""

from .cache import CacheEntry, TTLCache, cache_key
from .logging_config import get_logger, log_with_context, setup_logging
from .request_metrics import RequestMetricsTracker, get_current_tracker, track_request

__all__ = [
    # Logging
    "get_logger",
    "log_with_context",
    "setup_logging",
    # Cache
    "CacheEntry",
    "TTLCache",
    "cache_key",
    # Request tracking
    "RequestMetricsTracker",
    "get_current_tracker",
    "track_request",
]
