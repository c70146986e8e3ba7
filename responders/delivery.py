"""
Response delivery.

Formats and sends notices, threaded replies and reactions through the
transport, and records a totalActivity counter for every successful send.
Failures are logged and reported as False; they never propagate.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from core.constants import DEFAULT_PREFIX, EMOJI_PREFIX, SendKind, Stat
from core.stats_storage import StatsStore
from core.transport import Transport
from core.types import InboundEvent, RoomMembers
from core.utils import strip_tags

logger = logging.getLogger("catbot.delivery")

DEFAULT_MODULE_TAG = "general"


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


# Distinguishes "no prefix argument" from an explicit None
UNSET: Any = _Unset()


def apply_prefix(text: str, prefix: Any = UNSET) -> str:
    """
    Prepend the lead-in to a message.

    - UNSET: the plain "meow!" prefix
    - None: the emoji cat prefix
    - a string: that string replaces "meow!"
    """
    if prefix is UNSET:
        return f"{DEFAULT_PREFIX} {text}"
    if prefix is None:
        return f"{EMOJI_PREFIX} {text}"
    return f"{prefix} {text}"


def build_reaction(event_id: str, emoji: str) -> dict[str, Any]:
    return {
        "m.relates_to": {
            "event_id": event_id,
            "key": emoji,
            "rel_type": "m.annotation",
        }
    }


class ResponseEmitter:
    """Outbound side of the bot, shared by every integration."""

    def __init__(self, transport: Transport, stats: StatsStore) -> None:
        self.transport = transport
        self.stats = stats

    async def _record(self, room_id: str, module_tag: str, kind: str) -> None:
        try:
            await self.stats.add_stats(Stat.TOTAL_ACTIVITY, room_id, module_tag, kind)
        except Exception as e:
            logger.error("Failed to record %s stats for room %s: %s", kind, room_id, e)

    async def send_msg(
        self,
        room_id: str,
        text: str,
        reply_event: Optional[Any] = None,
        prefix: Any = UNSET,
        module_tag: str = DEFAULT_MODULE_TAG,
    ) -> bool:
        """
        Send an HTML notice, or a threaded reply when reply_event is given.

        reply_event may be an InboundEvent or a raw event dict.
        Returns True when the transport accepted the send.
        """
        html = apply_prefix(text, prefix)

        if reply_event is None:
            kind = SendKind.MSG
            try:
                await self.transport.send_notice(room_id, html)
            except Exception as e:
                logger.error(
                    "Failed to send notice %s",
                    {"room_id": room_id, "text": html, "error": str(e)},
                )
                return False
        else:
            kind = SendKind.REPLY
            source = reply_event.source if isinstance(reply_event, InboundEvent) else reply_event
            try:
                await self.transport.send_reply_notice(room_id, source, strip_tags(html), html)
            except Exception as e:
                logger.error(
                    "Failed to send reply %s",
                    {
                        "room_id": room_id,
                        "event_id": (source or {}).get("event_id"),
                        "text": html,
                        "error": str(e),
                    },
                )
                return False

        await self._record(room_id, module_tag, kind)
        return True

    async def send_emote(
        self,
        room_id: str,
        event_id: str,
        emoji: str,
        module_tag: str = DEFAULT_MODULE_TAG,
    ) -> bool:
        """Attach a reaction to an event. Failures are logged and swallowed."""
        try:
            await self.transport.send_raw_event(room_id, "m.reaction", build_reaction(event_id, emoji))
        except Exception as e:
            logger.error(
                "Failed to send reaction %s",
                {"room_id": room_id, "event_id": event_id, "emote": emoji, "error": str(e)},
            )
            return False

        await self._record(room_id, module_tag, SendKind.EMOTE)
        return True

    async def get_room_members(self, room_id: str) -> RoomMembers:
        """Joined members of a room; empty when the lookup fails."""
        try:
            members = list(await self.transport.get_joined_members(room_id))
        except Exception as e:
            logger.warning("Failed to fetch members for room %s: %s", room_id, e)
            members = []
        return RoomMembers(members=members, count=len(members))
