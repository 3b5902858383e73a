"""
Slack Web API Client

Channel history, user presence and channel listing (Bearer bot token).
Slack answers most errors with HTTP 200 and ``{"ok": false, "error": ...}``;
those are raised as SourceFetchError like any other failure.

API Documentation:
    https://api.slack.com/methods
"""

from datetime import UTC, datetime, timedelta
from typing import Any

from teamdash.calculators.activity import channel_activity, team_activity
from teamdash.collectors.base import SourceClient
from teamdash.core.cache import cache_key
from teamdash.core.logging_config import get_logger
from teamdash.domain.constants import api_config, cache_ttl
from teamdash.errors import SourceFetchError
from teamdash.secure_config import SlackConfig
from teamdash.utils.error_handling import log_and_continue

logger = get_logger(__name__)


class SlackClient(SourceClient):
    """Async Slack client."""

    source_name = "slack"

    def __init__(self, config: SlackConfig, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.config = config
        self.base_url = config.base_url.rstrip("/")

    def _auth_header(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.config.token}"}

    async def _call(self, method: str, **params: Any) -> dict[str, Any]:
        """GET a Web API method and unwrap the ok/error envelope."""
        payload = await self._get(f"{self.base_url}/{method}", **params)
        if not payload.get("ok"):
            raise SourceFetchError(self.source_name, f"{method} failed: {payload.get('error', 'unknown_error')}")
        return payload

    async def get_channel_messages(self, channel_id: str, oldest: int) -> list[dict[str, Any]]:
        """
        Raw messages posted since ``oldest`` (unix seconds).

        Web API method: conversations.history
        """
        payload = await self._cached(
            cache_key("slack", "history", channel_id, oldest),
            cache_ttl.SLACK_ACTIVITY_SECONDS,
            lambda: self._call(
                "conversations.history", channel=channel_id, oldest=str(oldest), limit=api_config.SLACK_HISTORY_LIMIT
            ),
        )
        return payload.get("messages") or []

    async def get_channel_activity(self, channel_id: str, days: int = 30, now: datetime | None = None) -> dict[str, Any]:
        """Message counts for one channel over the trailing window."""
        now = now or datetime.now(UTC)
        oldest = int((now - timedelta(days=days)).timestamp())
        messages = await self.get_channel_messages(channel_id, oldest)
        return channel_activity(messages, days, now)

    async def get_user_presence(self, user_id: str) -> dict[str, Any]:
        """
        Current presence of one user.

        Web API method: users.getPresence
        """
        payload = await self._cached(
            cache_key("slack", "presence", user_id),
            cache_ttl.SLACK_PRESENCE_SECONDS,
            lambda: self._call("users.getPresence", user=user_id),
        )
        return {
            "presence": payload.get("presence"),
            "online": payload.get("online"),
            "autoAway": payload.get("auto_away"),
            "manualAway": payload.get("manual_away"),
            "connectionCount": payload.get("connection_count"),
            "lastActivity": payload.get("last_activity"),
        }

    async def list_channels(self) -> list[dict[str, Any]]:
        """
        Public and private channels visible to the token (first page).

        Web API method: conversations.list
        """
        payload = await self._cached(
            cache_key("slack", "channels"),
            cache_ttl.SLACK_ACTIVITY_SECONDS,
            lambda: self._call("conversations.list", types="public_channel,private_channel", limit=100),
        )
        return payload.get("channels") or []

    async def get_team_activity(self, user_ids: list[str], days: int = 30, now: datetime | None = None) -> dict[str, Any]:
        """
        Message counts for a team across a sample of channels.

        Only the first SAMPLE_SIZE channels are read; a channel that fails is
        logged and skipped.
        """
        return await self._cached(
            cache_key("slack", "team", user_ids, days),
            cache_ttl.SLACK_ACTIVITY_SECONDS,
            lambda: self._team_activity(user_ids, days, now or datetime.now(UTC)),
        )

    async def _team_activity(self, user_ids: list[str], days: int, now: datetime) -> dict[str, Any]:
        channels = await self.list_channels()
        per_channel = []
        for channel in channels[: api_config.SAMPLE_SIZE]:
            channel_id = channel.get("id")
            if not channel_id:
                continue
            try:
                activity = await self.get_channel_activity(channel_id, days, now)
            except SourceFetchError as e:
                log_and_continue(logger, e, {"channel_id": channel_id}, "Slack channel activity")
                continue
            per_channel.append(activity["messagesByUser"])
        return team_activity(per_channel, user_ids)
