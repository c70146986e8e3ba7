"""Pytest config: project root on sys.path plus fake transport fixtures."""
import sys
from pathlib import Path

import pytest

root = Path(__file__).resolve().parent.parent
if str(root) not in sys.path:
    sys.path.insert(0, str(root))

from core.constants import K, MsgType  # noqa: E402
from core.stats_storage import StatsStore  # noqa: E402
from core.types import InboundEvent, SelfProfile  # noqa: E402
from responders.context import BotContext  # noqa: E402
from responders.delivery import ResponseEmitter  # noqa: E402

SELF_ID = "@catbot:example.org"
ADMIN_ID = "@admin:example.org"
ROOM_ID = "!room:example.org"


class FakeTransport:
    """In-memory transport recording every call."""

    def __init__(self, members=None):
        self.members = list(members or [SELF_ID, "@alice:example.org"])
        self.notices = []
        self.replies = []
        self.raw_events = []
        self.fail_sends = False
        self.fail_reactions = False

    async def get_self_id(self):
        return SELF_ID

    async def get_self_profile(self, user_id):
        return SelfProfile(display_name="catBot")

    async def get_joined_members(self, room_id):
        return list(self.members)

    async def send_notice(self, room_id, html):
        if self.fail_sends:
            raise RuntimeError("send failed")
        self.notices.append((room_id, html))

    async def send_reply_notice(self, room_id, event, plain, html):
        if self.fail_sends:
            raise RuntimeError("send failed")
        self.replies.append((room_id, event, plain, html))

    async def send_raw_event(self, room_id, event_type, payload):
        if self.fail_reactions:
            raise RuntimeError("reaction failed")
        self.raw_events.append((room_id, event_type, payload))


def make_event(
    body="hello",
    sender="@alice:example.org",
    members=5,
    mentions=None,
    formatted_body=None,
    msgtype=MsgType.TEXT,
    event_id="$event1",
):
    content = {"msgtype": msgtype}
    if body is not None:
        content["body"] = body
    if formatted_body is not None:
        content["format"] = "org.matrix.custom.html"
        content["formatted_body"] = formatted_body
    if mentions is not None:
        content["m.mentions"] = {"user_ids": mentions}
    source = {
        "content": content,
        "sender": sender,
        "event_id": event_id,
        "origin_server_ts": 1700000000000,
        "type": "m.room.message",
    }
    return InboundEvent.from_source(ROOM_ID, source, members)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def stats(tmp_path):
    return StatsStore(tmp_path / "stats.json")


@pytest.fixture
def config(tmp_path):
    return {
        K.BOT_NAME: "catBot",
        K.ADMIN_IDS: [ADMIN_ID],
        K.STATS_PATH: str(tmp_path / "stats.json"),
        K.NIGHTSCOUT_URL: None,
        K.WEATHER_URL: "https://wttr.in",
    }


@pytest.fixture
def context(transport, stats, config):
    return BotContext(
        self_id=SELF_ID,
        config=config,
        emitter=ResponseEmitter(transport, stats),
        stats=stats,
    )
