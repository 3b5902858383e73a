"""
Tests for FirebaseClient demo and live modes
"""

import httpx
import pytest

from teamdash.collectors.firebase_client import DEMO_SOURCE, LIVE_SOURCE, FirebaseClient
from teamdash.core.cache import TTLCache
from teamdash.errors import SourceFetchError
from teamdash.secure_config import FirebaseConfig

LIVE_PAYLOADS = {
    "/crashlytics": {"crashFreeRate": 99.9, "totalCrashes": 1, "newCrashes": 0},
    "/performance": {"appStartTime": {"average": 1.1}},
    "/analytics": {"activeUsers": {"daily": 10, "monthly": 50}, "retention": {"day1": 80, "day7": 70, "day30": 40}},
}


@pytest.fixture
def live_config():
    return FirebaseConfig(metrics_url="https://metrics.acme.io/firebase", token="fb-secret-token-1")


class TestDemoMode:
    """Tests for the unconfigured client"""

    @pytest.mark.asyncio
    async def test_serves_labelled_demo_data(self, mock_http):
        def handler(request):
            raise AssertionError("demo mode must not call the network")

        client = FirebaseClient(None, mock_http(handler), TTLCache())

        health = await client.get_app_health("mobile")

        assert client.is_demo
        assert health.is_demo
        assert health.source == DEMO_SOURCE
        assert health.crashlytics.is_demo
        assert health.crashlytics.crash_free_rate == 99.2
        assert health.to_dict()["isLiveData"] is False

    @pytest.mark.asyncio
    async def test_demo_score_applies_penalties(self, mock_http):
        client = FirebaseClient(None, mock_http(lambda request: httpx.Response(500)), TTLCache())

        health = await client.get_app_health()

        # 100 * 0.992 * 0.97 (2.3s start) * 0.98 (45% day-7 retention) = 94.3
        assert health.score == 94
        assert len(health.recommendations) >= 1


class TestLiveMode:
    @pytest.mark.asyncio
    async def test_fetches_each_component(self, mock_http, live_config, no_sleep):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json=LIVE_PAYLOADS[request.url.path.removeprefix("/firebase")])

        client = FirebaseClient(live_config, mock_http(handler), TTLCache(), sleep=no_sleep)

        health = await client.get_app_health("mobile")

        assert not health.is_demo
        assert health.source == LIVE_SOURCE
        assert health.score == 100
        assert len(requests) == 3
        assert all(r.headers["Authorization"] == "Bearer fb-secret-token-1" for r in requests)
        assert all(r.url.params["filter"] == "mobile" for r in requests)

    @pytest.mark.asyncio
    async def test_partial_failure_keeps_other_components(self, mock_http, live_config, no_sleep):
        def handler(request):
            path = request.url.path.removeprefix("/firebase")
            if path == "/performance":
                return httpx.Response(404)
            return httpx.Response(200, json=LIVE_PAYLOADS[path])

        client = FirebaseClient(live_config, mock_http(handler), TTLCache(), sleep=no_sleep)

        health = await client.get_app_health()

        assert health.performance is None
        assert health.crashlytics is not None

    @pytest.mark.asyncio
    async def test_total_failure_raises(self, mock_http, live_config, no_sleep):
        client = FirebaseClient(live_config, mock_http(lambda request: httpx.Response(403)), TTLCache(), sleep=no_sleep)

        with pytest.raises(SourceFetchError, match="no mobile health data"):
            await client.get_app_health()
