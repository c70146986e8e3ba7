"""Tests for the response emitter."""
import logging

import pytest

from core.constants import Stat
from responders.delivery import UNSET, apply_prefix

from conftest import ROOM_ID, make_event


def test_prefix_policy():
    assert apply_prefix("hi") == "meow! hi"
    assert apply_prefix("hi", UNSET) == "meow! hi"
    assert apply_prefix("hi", None) == "🐱 hi"
    assert apply_prefix("hi", "Meow!") == "Meow! hi"


@pytest.mark.asyncio
async def test_send_msg_notice(context, transport, stats):
    ok = await context.emitter.send_msg(ROOM_ID, "<b>hi</b>", module_tag="universal")
    assert ok is True
    assert transport.notices == [(ROOM_ID, "meow! <b>hi</b>")]
    assert stats.get(ROOM_ID, "totalActivity.universal.sendMsg") == 1
    assert stats.get(ROOM_ID, Stat.TOTAL_ACTIVITY) == 1


@pytest.mark.asyncio
async def test_send_msg_reply_strips_tags(context, transport, stats):
    event = make_event(body="hi", event_id="$orig")
    ok = await context.emitter.send_msg(ROOM_ID, "<b>hello</b> <i>there</i>", reply_event=event, prefix=None)
    assert ok is True
    room_id, source, plain, html = transport.replies[0]
    assert source["event_id"] == "$orig"
    assert html == "🐱 <b>hello</b> <i>there</i>"
    assert plain == "🐱 hello there"
    assert stats.get(ROOM_ID, "totalActivity.general.sendReply") == 1


@pytest.mark.asyncio
async def test_reply_stray_angle_bracket_is_swallowed_by_tag_regex(context, transport):
    event = make_event(body="hi")
    await context.emitter.send_msg(ROOM_ID, "a < b <i>c", reply_event=event)
    assert transport.replies[0][2] == "meow! a c"


@pytest.mark.asyncio
async def test_send_msg_failure_is_contained(context, transport, stats, caplog):
    transport.fail_sends = True
    with caplog.at_level(logging.ERROR, logger="catbot.delivery"):
        ok = await context.emitter.send_msg(ROOM_ID, "hi")
    assert ok is False
    assert "Failed to send notice" in caplog.text
    assert stats.room_counters(ROOM_ID) == {}


@pytest.mark.asyncio
async def test_send_emote(context, transport, stats):
    ok = await context.emitter.send_emote(ROOM_ID, "$evt", "🐱", module_tag="reacts")
    assert ok is True
    room_id, event_type, payload = transport.raw_events[0]
    assert event_type == "m.reaction"
    assert payload == {"m.relates_to": {"event_id": "$evt", "key": "🐱", "rel_type": "m.annotation"}}
    assert stats.get(ROOM_ID, "totalActivity.reacts.sendEmote") == 1


@pytest.mark.asyncio
async def test_send_emote_failure_logged_not_counted(context, transport, stats, caplog):
    transport.fail_reactions = True
    with caplog.at_level(logging.ERROR, logger="catbot.delivery"):
        ok = await context.emitter.send_emote(ROOM_ID, "$evt", "🐱", module_tag="reacts")
    assert ok is False
    assert "$evt" in caplog.text
    assert "reaction failed" in caplog.text
    assert stats.get(ROOM_ID, Stat.TOTAL_ACTIVITY) == 0


@pytest.mark.asyncio
async def test_get_room_members(context, transport):
    members = await context.emitter.get_room_members(ROOM_ID)
    assert members.count == 2
    assert "@alice:example.org" in members.members
