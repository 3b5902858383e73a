"""
Tests for the partial-failure fan-out
"""

import asyncio

import pytest

from teamdash.aggregator.envelope import FetchOutcome, collect_errors, gather_settled
from teamdash.core.request_metrics import track_request
from teamdash.errors import SourceFetchError


async def _value(value, delay=0):
    await asyncio.sleep(delay)
    return value


async def _fail(error):
    raise error


class TestGatherSettled:
    """Tests for gather_settled"""

    @pytest.mark.asyncio
    async def test_failure_does_not_cancel_siblings(self):
        outcomes = await gather_settled(
            {
                "jira": _fail(SourceFetchError("jira", "HTTP 503")),
                "gitlab": _value({"projects": 2}, delay=0.01),
            }
        )

        assert not outcomes["jira"].ok
        assert outcomes["jira"].value is None
        assert outcomes["gitlab"].ok
        assert outcomes["gitlab"].value == {"projects": 2}

    @pytest.mark.asyncio
    async def test_keeps_task_order(self):
        outcomes = await gather_settled({"b": _value(2, 0.01), "a": _value(1)})

        assert list(outcomes) == ["b", "a"]

    @pytest.mark.asyncio
    async def test_none_is_a_successful_value(self):
        outcomes = await gather_settled({"firebase": _value(None)})

        assert outcomes["firebase"].ok

    @pytest.mark.asyncio
    async def test_failures_are_recorded_on_tracker(self):
        with track_request("overview") as tracker:
            await gather_settled({"snyk": _fail(RuntimeError("boom")), "slack": _value(1)})

        assert tracker.source_errors == ["snyk"]


class TestCollectErrors:
    def test_source_fetch_error_uses_message(self):
        outcome = FetchOutcome(source="gitlab:123", error=SourceFetchError("gitlab", "HTTP 404 from /projects/123", 404))

        assert [e.to_dict() for e in collect_errors([outcome])] == [
            {"source": "gitlab:123", "message": "HTTP 404 from /projects/123"}
        ]

    def test_other_exceptions_use_text_or_class_name(self):
        outcomes = [
            FetchOutcome(source="a", error=ValueError("bad value")),
            FetchOutcome(source="b", error=TimeoutError()),
            FetchOutcome(source="c", value=1),
        ]

        assert [(e.source, e.message) for e in collect_errors(outcomes)] == [("a", "bad value"), ("b", "TimeoutError")]
