"""
Sprint discovery and selection across the configured boards.

Every matching board is queried twice (open sprints for the dropdown,
closed sprints for velocity). Boards are fetched concurrently; a board that
fails contributes no sprints and one error entry.
"""

import asyncio
from datetime import datetime

from teamdash.aggregator.envelope import collect_errors, gather_settled
from teamdash.collectors.jira_client import JiraClient
from teamdash.core.logging_config import get_logger
from teamdash.domain.snapshot import SourceError, SprintSelectionState
from teamdash.domain.work_items import Sprint
from teamdash.secure_config import BoardDefinition

logger = get_logger(__name__)

OPEN_STATES = "active,future"
CLOSED_STATE = "closed"


async def _board_sprints(jira: JiraClient, board: BoardDefinition) -> list[Sprint]:
    active, closed = await asyncio.gather(
        jira.list_sprints(board.id, OPEN_STATES),
        jira.list_sprints(board.id, CLOSED_STATE),
    )
    logger.info(
        f"Board {board.name} ({board.id}): {len(active)} active/future and {len(closed)} closed sprints",
        extra={"board_id": board.id},
    )
    return [sprint.with_board(board.id, board.name, board.category) for sprint in (*active, *closed)]


async def fetch_board_sprints(
    jira: JiraClient, boards: list[BoardDefinition]
) -> tuple[list[Sprint], list[SourceError]]:
    """
    Sprints of every board, tagged with their board, in board order.

    Returns:
        (sprints, errors) where each failed board yields one "jira:board:{id}" error
    """
    outcomes = await gather_settled({f"jira:board:{board.id}": _board_sprints(jira, board) for board in boards})
    sprints: list[Sprint] = []
    for outcome in outcomes.values():
        if outcome.ok:
            sprints.extend(outcome.value)
    return sprints, collect_errors(outcomes.values())


def merge_sprints(sprints: list[Sprint]) -> list[Sprint]:
    """Drop repeated sprint ids (a sprint shared by two boards), keeping the first."""
    seen: set[str] = set()
    unique = []
    for sprint in sprints:
        if sprint.id in seen:
            continue
        seen.add(sprint.id)
        unique.append(sprint)
    return unique


def sort_sprints(sprints: list[Sprint]) -> list[Sprint]:
    """Ascending by start date; sprints without a start date go last, in their original order."""
    dated = sorted((s for s in sprints if s.start_date is not None), key=lambda s: s.start_date)
    undated = [s for s in sprints if s.start_date is None]
    return dated + undated


def open_sprints(sprints: list[Sprint]) -> list[Sprint]:
    """Sprints offered in the dropdown."""
    return [sprint for sprint in sprints if sprint.is_open]


def sprints_in_window(sprints: list[Sprint], start: datetime, end: datetime, explicit: bool) -> list[Sprint]:
    """Sprints overlapping the window; every sprint when the window is the default one."""
    if not explicit:
        return list(sprints)
    return [sprint for sprint in sprints if sprint.intersects(start, end)]


def select_sprint(
    available: list[Sprint], sprint_id: str | None = None
) -> tuple[Sprint | None, SprintSelectionState]:
    """
    Pick the current sprint from the dropdown sprints.

    An explicit id wins when it names an available sprint; otherwise the
    first active sprint, then the first future one. An unknown id falls back
    to automatic selection.
    """
    if sprint_id:
        for sprint in available:
            if sprint.id == str(sprint_id):
                return sprint, SprintSelectionState.EXPLICIT_SELECTION
        logger.info(f"Requested sprint {sprint_id} is not open, selecting automatically")

    for sprint in available:
        if sprint.state == "active":
            return sprint, SprintSelectionState.AUTO_ACTIVE
    for sprint in available:
        if sprint.state == "future":
            return sprint, SprintSelectionState.AUTO_FUTURE
    return None, SprintSelectionState.NO_SPRINTS_AVAILABLE
