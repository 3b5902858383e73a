#!/usr/bin/env python3
"""
Tests for SourceClient retry and error handling

Every source client shares this contract:
- 429 waits for Retry-After (capped at 30s) and retries
- 500/502/503 and network errors retry with exponential backoff
- 401/403 and other client errors fail immediately
- Every final failure is a SourceFetchError
"""

import httpx
import pytest

from teamdash.collectors.base import SourceClient
from teamdash.core.cache import TTLCache
from teamdash.core.request_metrics import track_request
from teamdash.errors import SourceFetchError

URL = "https://api.example.com/things"


class DummyClient(SourceClient):
    source_name = "dummy"

    def _auth_header(self):
        return {"Authorization": "Bearer test-token"}


class Responses:
    """Handler that replays a fixed sequence of responses and records requests."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def make_client(mock_http, no_sleep):
    def _make(handler, **kwargs):
        return DummyClient(mock_http(handler), TTLCache(), sleep=no_sleep, **kwargs)

    return _make


class TestSuccess:
    @pytest.mark.asyncio
    async def test_returns_parsed_json_with_auth_header(self, make_client):
        handler = Responses(httpx.Response(200, json={"ok": True}))

        result = await make_client(handler)._get(URL, page=1)

        assert result == {"ok": True}
        request = handler.requests[0]
        assert request.headers["Authorization"] == "Bearer test-token"
        assert request.headers["Accept"] == "application/json"
        assert request.url.params["page"] == "1"

    @pytest.mark.asyncio
    async def test_none_params_are_dropped(self, make_client):
        handler = Responses(httpx.Response(200, json=[]))

        await make_client(handler)._get(URL, since="2026-01-01", until=None)

        assert "until" not in handler.requests[0].url.params
        assert handler.requests[0].url.params["since"] == "2026-01-01"


class TestRateLimiting:
    """Tests for 429 handling"""

    @pytest.mark.asyncio
    async def test_honours_retry_after(self, make_client, no_sleep):
        handler = Responses(
            httpx.Response(429, headers={"Retry-After": "5"}),
            httpx.Response(200, json={"values": []}),
        )

        result = await make_client(handler)._get(URL)

        assert result == {"values": []}
        assert no_sleep.waits == [5.0]

    @pytest.mark.asyncio
    async def test_retry_after_is_capped(self, make_client, no_sleep):
        handler = Responses(
            httpx.Response(429, headers={"Retry-After": "120"}),
            httpx.Response(200, json={}),
        )

        await make_client(handler)._get(URL)

        assert no_sleep.waits == [30]

    @pytest.mark.asyncio
    async def test_missing_retry_after_uses_backoff(self, make_client, no_sleep):
        handler = Responses(httpx.Response(429), httpx.Response(429), httpx.Response(200, json={}))

        await make_client(handler)._get(URL)

        assert no_sleep.waits == [1, 2]

    @pytest.mark.asyncio
    async def test_rate_limit_hits_are_tracked(self, make_client):
        handler = Responses(httpx.Response(429, headers={"Retry-After": "1"}), httpx.Response(200, json={}))

        with track_request("overview") as tracker:
            await make_client(handler)._get(URL)

        assert tracker.rate_limit_hits == 1
        assert tracker.api_call_count == 2


class TestServerErrors:
    @pytest.mark.asyncio
    async def test_retries_with_exponential_backoff(self, make_client, no_sleep):
        handler = Responses(httpx.Response(500), httpx.Response(502), httpx.Response(200, json={"id": 1}))

        result = await make_client(handler)._get(URL)

        assert result == {"id": 1}
        assert no_sleep.waits == [1, 2]

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self, make_client, no_sleep):
        handler = Responses(httpx.Response(503), httpx.Response(503), httpx.Response(503))

        with pytest.raises(SourceFetchError) as exc_info:
            await make_client(handler)._get(URL)

        assert exc_info.value.source == "dummy"
        assert exc_info.value.status_code == 503
        assert "gave up after 3 attempts" in exc_info.value.message
        assert len(handler.requests) == 3

    @pytest.mark.asyncio
    async def test_network_errors_are_retried(self, make_client, no_sleep):
        handler = Responses(httpx.ConnectError("connection refused"), httpx.Response(200, json={"ok": 1}))

        assert await make_client(handler)._get(URL) == {"ok": 1}
        assert no_sleep.waits == [1]

    @pytest.mark.asyncio
    async def test_network_failure_after_retries(self, make_client):
        handler = Responses(*(httpx.ReadTimeout("timed out") for _ in range(2)))

        with pytest.raises(SourceFetchError) as exc_info:
            await make_client(handler, max_retries=2)._get(URL)

        assert exc_info.value.status_code is None


class TestFailFast:
    """Tests for non-retryable responses"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 403])
    async def test_auth_failures_are_not_retried(self, make_client, no_sleep, status):
        handler = Responses(httpx.Response(status))

        with pytest.raises(SourceFetchError) as exc_info:
            await make_client(handler)._get(URL)

        assert exc_info.value.status_code == status
        assert "authentication failed" in str(exc_info.value)
        assert len(handler.requests) == 1
        assert no_sleep.waits == []

    @pytest.mark.asyncio
    async def test_not_found_is_not_retried(self, make_client):
        handler = Responses(httpx.Response(404))

        with pytest.raises(SourceFetchError) as exc_info:
            await make_client(handler)._get(URL)

        assert exc_info.value.status_code == 404
        assert len(handler.requests) == 1

    @pytest.mark.asyncio
    async def test_invalid_json(self, make_client):
        handler = Responses(httpx.Response(200, content=b"<html>"))

        with pytest.raises(SourceFetchError, match="invalid JSON"):
            await make_client(handler)._get(URL)


class TestCaching:
    @pytest.mark.asyncio
    async def test_cached_calls_hit_the_network_once(self, make_client):
        handler = Responses(httpx.Response(200, json={"n": 1}))
        client = make_client(handler)

        first = await client._cached("dummy:key", 60, lambda: client._get(URL))
        second = await client._cached("dummy:key", 60, lambda: client._get(URL))

        assert first == second == {"n": 1}
        assert len(handler.requests) == 1
