"""
Partial-failure envelope

Runs independent fetches concurrently and settles every branch: each one
yields either a value or an error, and one failure never cancels its
siblings. The caller then merges the outcomes sequentially.

Usage:
    outcomes = await gather_settled({
        "jira": jira.search_issues(jql, fields),
        "gitlab": gitlab.list_merge_requests(project_id, since=since),
    })
    jira_issues = outcomes["jira"].value          # None if the fetch failed
    errors = collect_errors(outcomes.values())    # [SourceError(...)]
"""

import asyncio
from collections.abc import Awaitable, Iterable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from teamdash.core.logging_config import get_logger
from teamdash.core.request_metrics import get_current_tracker
from teamdash.domain.snapshot import SourceError
from teamdash.errors import SourceFetchError
from teamdash.utils.error_handling import log_and_continue

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class FetchOutcome(Generic[T]):
    """
    Result of one fan-out branch.

    Exactly one of ``value`` / ``error`` is meaningful: ``error`` is None on
    success.
    """

    source: str
    value: T | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_source_error(self) -> SourceError | None:
        if self.error is None:
            return None
        if isinstance(self.error, SourceFetchError):
            return SourceError(source=self.source, message=self.error.message)
        return SourceError(source=self.source, message=str(self.error) or self.error.__class__.__name__)


async def gather_settled(tasks: dict[str, Awaitable[Any]]) -> dict[str, FetchOutcome[Any]]:
    """
    Await every task concurrently and settle each one.

    Regular exceptions become failed outcomes (logged and counted on the
    current request tracker). Cancellation and other BaseExceptions still
    propagate.

    Args:
        tasks: Branch name -> awaitable

    Returns:
        Branch name -> FetchOutcome, in the order of ``tasks``
    """
    names = list(tasks)
    results = await asyncio.gather(*tasks.values(), return_exceptions=True)
    tracker = get_current_tracker()

    outcomes: dict[str, FetchOutcome[Any]] = {}
    for name, result in zip(names, results):
        if isinstance(result, Exception):
            log_and_continue(logger, result, {"source": name}, f"{name} fetch")
            if tracker:
                tracker.record_source_error(name)
            outcomes[name] = FetchOutcome(source=name, error=result)
        elif isinstance(result, BaseException):
            raise result
        else:
            outcomes[name] = FetchOutcome(source=name, value=result)
    return outcomes


def collect_errors(outcomes: Iterable[FetchOutcome[Any]]) -> list[SourceError]:
    """SourceError entries for the failed outcomes, in order."""
    return [error for error in (outcome.to_source_error() for outcome in outcomes) if error is not None]
