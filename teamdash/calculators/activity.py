"""
Chat activity calculations

Pure functions over raw Slack ``conversations.history`` messages.
"""

from collections import Counter
from datetime import UTC, date, datetime
from typing import Any

from teamdash.calculators.time_series import increment, seed_daily, to_series
from teamdash.domain.constants import metrics_config
from teamdash.utils.statistics import round_half_up


def is_human_message(message: dict[str, Any]) -> bool:
    """Plain user messages only; bot posts and channel events are excluded."""
    return message.get("type") == "message" and not message.get("bot_id")


def message_time(message: dict[str, Any]) -> datetime | None:
    try:
        return datetime.fromtimestamp(float(message["ts"]), tz=UTC)
    except (KeyError, TypeError, ValueError):
        return None


def channel_activity(messages: list[dict[str, Any]], days: int, today: date | datetime) -> dict[str, Any]:
    """
    Message counts for one channel over the trailing window.

    Returns:
        {"totalMessages", "messagesByUser", "dailyActivity",
         "averageMessagesPerDay", "mostActiveUsers"}
    """
    human = [m for m in messages if is_human_message(m)]
    by_user = Counter(m.get("user") or "unknown" for m in human)

    series = seed_daily(days, today)
    for message in human:
        increment(series, message_time(message))

    return {
        "totalMessages": len(human),
        "messagesByUser": dict(by_user),
        "dailyActivity": to_series(series, "count"),
        "averageMessagesPerDay": round_half_up(len(human) / days) if days > 0 else 0,
        "mostActiveUsers": [[user, count] for user, count in by_user.most_common(metrics_config.TOP_ACTIVE_USERS)],
    }


def team_activity(channel_counts: list[dict[str, int]], user_ids: list[str]) -> dict[str, Any]:
    """
    Sum per-channel message counts for the given team members.

    Args:
        channel_counts: ``messagesByUser`` of each sampled channel
        user_ids: Team member ids; other users are ignored
    """
    members = set(user_ids)
    totals: Counter[str] = Counter()
    for counts in channel_counts:
        for user, count in counts.items():
            if user in members:
                totals[user] += count

    total_messages = sum(totals.values())
    return {
        "totalTeamMessages": total_messages,
        "messagesByUser": dict(totals),
        "activeUsers": len(totals),
        "averageMessagesPerUser": round_half_up(total_messages / len(totals)) if totals else 0,
    }
