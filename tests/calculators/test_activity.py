"""
Tests for chat activity calculations
"""

from datetime import UTC, date, datetime

from teamdash.calculators.activity import channel_activity, is_human_message, message_time, team_activity


def _message(user, day, **extra):
    ts = datetime(2026, 3, day, 12, tzinfo=UTC).timestamp()
    return {"type": "message", "user": user, "ts": f"{ts:.6f}", **extra}


class TestMessages:
    def test_bot_messages_are_excluded(self):
        assert is_human_message({"type": "message", "user": "U1"})
        assert not is_human_message({"type": "message", "bot_id": "B1"})
        assert not is_human_message({"type": "channel_join"})

    def test_message_time(self):
        assert message_time(_message("U1", 9)) == datetime(2026, 3, 9, 12, tzinfo=UTC)
        assert message_time({"ts": "bogus"}) is None


class TestChannelActivity:
    def test_counts_human_messages(self):
        messages = [
            _message("U1", 9),
            _message("U1", 10),
            _message("U2", 10),
            _message("U3", 10, bot_id="B1"),
        ]

        result = channel_activity(messages, 3, date(2026, 3, 10))

        assert result["totalMessages"] == 3
        assert result["messagesByUser"] == {"U1": 2, "U2": 1}
        assert result["dailyActivity"] == [
            {"date": "2026-03-08", "count": 0},
            {"date": "2026-03-09", "count": 1},
            {"date": "2026-03-10", "count": 2},
        ]
        assert result["averageMessagesPerDay"] == 1
        assert result["mostActiveUsers"][0] == ["U1", 2]


class TestTeamActivity:
    def test_only_team_members_are_summed(self):
        result = team_activity([{"U1": 3, "U9": 50}, {"U1": 1, "U2": 2}], ["U1", "U2"])

        assert result == {
            "totalTeamMessages": 6,
            "messagesByUser": {"U1": 4, "U2": 2},
            "activeUsers": 2,
            "averageMessagesPerUser": 3,
        }

    def test_no_activity(self):
        assert team_activity([], ["U1"])["averageMessagesPerUser"] == 0
