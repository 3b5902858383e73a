"""
Base Source Client

Shared HTTP plumbing for every external source:
- Per-source auth header (subclasses implement ``_auth_header``)
- Retry on 429 (honouring Retry-After, capped) and 500/502/503 (exponential backoff)
- Fail fast on 401/403 and other client errors
- Uniform SourceFetchError on final failure
- Read-through caching against the shared TTLCache
- Request tracking (API calls, retries, rate-limit hits)
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from teamdash.async_http_client import AsyncSecureHTTPClient
from teamdash.core.cache import TTLCache
from teamdash.core.logging_config import get_logger
from teamdash.core.request_metrics import get_current_tracker
from teamdash.domain.constants import api_config
from teamdash.errors import SourceFetchError
from teamdash.utils.error_handling import log_and_continue

logger = get_logger(__name__)

RETRYABLE_STATUS = (500, 502, 503)
AUTH_FAILURE_STATUS = (401, 403)


class SourceClient(ABC):
    """
    Base class for all source clients.

    Subclasses set ``source_name`` and implement ``_auth_header()``. Every
    public fetch method goes through ``_request()`` (optionally wrapped in
    ``_cached()``), so the retry and error contract is identical for all
    sources.
    """

    source_name = "source"

    def __init__(
        self,
        http: AsyncSecureHTTPClient,
        cache: TTLCache,
        max_retries: int = api_config.MAX_RETRIES,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """
        Args:
            http: Shared, already opened HTTP client
            cache: Shared response cache
            max_retries: Attempts for retryable failures
            sleep: Awaitable sleep used between retries (tests pass a no-op)
        """
        self.http = http
        self.cache = cache
        self.max_retries = max_retries
        self._sleep = sleep

    @abstractmethod
    def _auth_header(self) -> dict[str, str]:
        """Headers that authenticate this client against its source."""

    def _headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        return {"Accept": "application/json", **self._auth_header(), **(extra or {})}

    @staticmethod
    def _retry_after_seconds(response: httpx.Response, fallback: float) -> float:
        """
        Seconds to wait after a 429.

        Uses Retry-After when it is a number of seconds, else the backoff
        fallback; never more than MAX_BACKOFF_SECONDS.
        """
        value = response.headers.get("Retry-After")
        try:
            wait = float(value) if value is not None else fallback
        except ValueError:
            wait = fallback
        return max(0.0, min(wait, api_config.MAX_BACKOFF_SECONDS))

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """
        Execute an API call with retry logic and error handling.

        Args:
            method: "GET" or "POST"
            url: Absolute URL
            params: Query parameters (None values are dropped)
            json: JSON body for POST
            headers: Extra headers merged over the auth headers

        Returns:
            Parsed JSON response

        Raises:
            SourceFetchError: On auth failure, non-retryable status, malformed
                body, or once retries are exhausted
        """
        request_headers = self._headers(headers)
        query = {k: v for k, v in (params or {}).items() if v is not None}
        last_error: Exception | None = None
        tracker = get_current_tracker()

        for attempt in range(self.max_retries):
            backoff = min(2**attempt, api_config.MAX_BACKOFF_SECONDS)
            if tracker:
                tracker.record_api_call()

            try:
                if method.upper() == "GET":
                    response = await self.http.get(url, headers=request_headers, params=query)
                elif method.upper() == "POST":
                    response = await self.http.post(url, headers=request_headers, params=query, json=json)
                else:
                    raise ValueError(f"Unsupported HTTP method: {method}")
                response.raise_for_status()

            except httpx.HTTPStatusError as e:
                status_code = e.response.status_code

                if status_code in AUTH_FAILURE_STATUS:
                    logger.error(
                        f"{self.source_name} authentication failed (HTTP {status_code})",
                        extra={"source": self.source_name, "url": url, "status_code": status_code},
                    )
                    raise SourceFetchError(
                        self.source_name, f"authentication failed (HTTP {status_code})", status_code
                    ) from e

                if status_code == 429:
                    if tracker:
                        tracker.record_rate_limit_hit()
                    wait = self._retry_after_seconds(e.response, backoff)
                    logger.warning(
                        f"{self.source_name} rate limited, retrying after {wait:.0f}s "
                        f"(attempt {attempt + 1}/{self.max_retries})"
                    )
                    last_error = e
                    await self._sleep(wait)
                    continue

                if status_code in RETRYABLE_STATUS:
                    if tracker:
                        tracker.record_retry()
                    logger.warning(
                        f"{self.source_name} server error (HTTP {status_code}), retrying in {backoff}s "
                        f"(attempt {attempt + 1}/{self.max_retries})"
                    )
                    last_error = e
                    await self._sleep(backoff)
                    continue

                logger.error(
                    f"{self.source_name} HTTP error {status_code}",
                    extra={"source": self.source_name, "url": url, "status_code": status_code},
                )
                raise SourceFetchError(self.source_name, f"HTTP {status_code} from {url}", status_code) from e

            except httpx.RequestError as e:
                if tracker:
                    tracker.record_retry()
                logger.warning(
                    f"{self.source_name} network error, retrying in {backoff}s "
                    f"(attempt {attempt + 1}/{self.max_retries}): {e}"
                )
                last_error = e
                await self._sleep(backoff)
                continue

            try:
                return response.json()
            except ValueError as e:
                raise SourceFetchError(self.source_name, f"invalid JSON from {url}", response.status_code) from e

        if last_error is None:
            raise SourceFetchError(self.source_name, "no attempts made")

        log_and_continue(logger, last_error, {"url": url, "max_retries": self.max_retries}, f"{self.source_name} API call")
        status_code = last_error.response.status_code if isinstance(last_error, httpx.HTTPStatusError) else None
        raise SourceFetchError(
            self.source_name, f"gave up after {self.max_retries} attempts: {last_error}", status_code
        ) from last_error

    async def _get(self, url: str, **params: Any) -> Any:
        return await self._request("GET", url, params=params)

    async def _cached(self, key: str, ttl_seconds: float, fetch: Callable[[], Awaitable[Any]]) -> Any:
        """Read-through the shared cache; failures propagate and are not cached."""
        return await self.cache.get_or_fetch(key, ttl_seconds, fetch)
