"""
Recovery helpers for isolated failures.

A failing board, GitLab project or sampled Snyk project must not take the
rest of the aggregation down with it. These helpers log the failure once,
with the source and HTTP status when the error carries them, and let the
caller carry on.

    log_and_continue(logger, exc, {"board_id": "42"}, "Sprint fetch")
    definitions = log_and_return_default(logger, exc, {"path": p}, DashboardDefinitions(), "Dashboard config loading")
"""

import logging
from typing import Any

from teamdash.errors import SourceFetchError


def _failure_fields(error: Exception, context: dict[str, Any], operation: str) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "operation": operation,
        "exception_class": type(error).__name__,
        "context": context,
    }
    if isinstance(error, SourceFetchError):
        fields["source"] = error.source
        if error.status_code is not None:
            fields["status_code"] = error.status_code
    return fields


def log_and_continue(
    logger: logging.Logger,
    error: Exception,
    context: dict[str, Any],
    operation: str = "Operation",
) -> None:
    """
    Log a recovered failure at WARNING.

    Args:
        logger: Module logger
        error: The caught exception
        context: Identifiers of what failed (board_id, project_id, ...)
        operation: Human-readable name of the failed step
    """
    logger.warning(f"{operation} failed: {error}", extra=_failure_fields(error, context, operation))


def log_and_return_default(
    logger: logging.Logger,
    error: Exception,
    context: dict[str, Any],
    default_value: Any = None,
    operation: str = "Operation",
) -> Any:
    """Log a recovered failure and hand back ``default_value`` in place of the result."""
    fields = _failure_fields(error, context, operation)
    fields["default_value"] = repr(default_value)
    logger.warning(f"{operation} failed, using default: {error}", extra=fields)
    return default_value
