"""
In-process TTL cache shared by all source clients

Stores JSON-serialized payloads with a per-key time-to-live:
    - get(): returns the decoded value, or None when absent or expired
    - set(): overwrites unconditionally
    - get_or_fetch(): read-through helper used by the clients

Expiry is checked when an entry is read; there is no background eviction and
no LRU policy. Failed fetches are never cached.

Usage:
    from teamdash.core.cache import TTLCache, cache_key

    cache = TTLCache()
    key = cache_key("gitlab", "merge_requests", project_id, since)
    merge_requests = await cache.get_or_fetch(key, ttl.GITLAB_SECONDS, lambda: client.fetch(...))
"""

import json
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from teamdash.core.logging_config import get_logger
from teamdash.core.request_metrics import get_current_tracker

logger = get_logger(__name__)

_MISSING = object()


@dataclass(frozen=True)
class CacheEntry:
    """
    One cached payload.

    Attributes:
        key: Cache key (built from every parameter that affects the result)
        value: JSON text of the cached payload
        inserted_at: Clock reading when the entry was written
        ttl: Lifetime in seconds
    """

    key: str
    value: str
    inserted_at: float
    ttl: float

    def is_expired(self, now: float) -> bool:
        """An entry is stale once now > inserted_at + ttl."""
        return now > self.inserted_at + self.ttl


def cache_key(*parts: Any) -> str:
    """
    Build a cache key from query parameters.

    None parts are kept as empty segments so that ("a", None, "b") and
    ("a", "b") never collide. Lists are joined with commas in the given order.

    Example:
        >>> cache_key("jira", "team", ["alice", "bob"], 30)
        'jira:team:alice,bob:30'
    """
    segments = []
    for part in parts:
        if part is None:
            segments.append("")
        elif isinstance(part, list | tuple):
            segments.append(",".join(str(p) for p in part))
        else:
            segments.append(str(part))
    return ":".join(segments)


class TTLCache:
    """
    Key-value store with per-key time-to-live.

    The clock is injectable so tests can advance time without sleeping.
    Concurrent writers to the same key are last-writer-wins.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str, default: Any = None) -> Any:
        """
        Return the cached value for key, or default if absent or expired.

        A stored JSON null comes back as None, so callers that cache None
        pass their own sentinel as default to tell the two apart. An expired
        entry is dropped on the read that finds it.
        """
        entry = self._entries.get(key)
        if entry is None:
            return default

        if entry.is_expired(self._clock()):
            del self._entries[key]
            return default

        return json.loads(entry.value)

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        """Store value under key for ttl_seconds, replacing any existing entry."""
        self._entries[key] = CacheEntry(
            key=key,
            value=json.dumps(value),
            inserted_at=self._clock(),
            ttl=ttl_seconds,
        )

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    async def get_or_fetch(self, key: str, ttl_seconds: float, fetch: Callable[[], Awaitable[Any]]) -> Any:
        """
        Return the cached value for key, fetching and storing it on a miss.

        Exceptions raised by fetch propagate and nothing is stored.
        """
        tracker = get_current_tracker()

        cached = self.get(key, _MISSING)
        if cached is not _MISSING:
            if tracker:
                tracker.record_cache_hit()
            logger.debug(f"Cache hit: {key}")
            return cached

        if tracker:
            tracker.record_cache_miss()

        value = await fetch()
        self.set(key, value, ttl_seconds)
        return value
