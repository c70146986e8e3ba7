"""
Type definitions and dataclasses for the bot.

Using dataclasses instead of raw dicts provides:
- Type safety and IDE autocomplete
- Self-documenting code
- A single seam where loosely-typed Matrix events are validated
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Optional

from .constants import NONE

BOUNDARY_RE = re.compile(r"\\b")
# "(bg|glucose|sugar)" lists as three words
ALTERNATION_RE = re.compile(r"^\(([\w ]+(?:\|[\w ]+)+)\)$")


@dataclass(frozen=True)
class Action:
    """
    One recognized command.

    Triggers are tested in order and the first match wins. Case sensitivity
    is decided per pattern by its compile flags.
    """
    name: str
    triggers: tuple[re.Pattern[str], ...]
    effect: str = ""

    def keywords(self) -> list[str]:
        """Human-readable trigger words for help text."""
        words: list[str] = []
        for trigger in self.triggers:
            text = BOUNDARY_RE.sub("", trigger.pattern)
            group = ALTERNATION_RE.match(text)
            words.extend(group.group(1).split("|") if group else [text])
        return words


@dataclass(frozen=True)
class DispatchResult:
    """Outcome of matching one body against a registry."""
    active: bool = False
    action: str = NONE


NO_MATCH = DispatchResult()


@dataclass(frozen=True)
class InboundEvent:
    """A normalized room message, built fresh per transport callback."""
    room_id: str
    event_id: str
    sender_id: str
    body: Optional[str]
    msgtype: Optional[str] = None
    formatted_body: Optional[str] = None
    mentioned_ids: tuple[str, ...] = (NONE,)
    room_member_count: int = 0
    origin_server_ts: int = 0
    source: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_source(
        cls,
        room_id: str,
        source: Any,
        room_member_count: int = 0,
    ) -> Optional[InboundEvent]:
        """
        Convert a raw Matrix event dict into an InboundEvent.

        Returns None when the payload is not usable at all (not a dict, no
        content object, no sender). Events that are merely not plain text are
        still returned so the router can filter them.
        """
        if not isinstance(source, dict):
            return None
        content = source.get("content")
        sender = source.get("sender")
        if not isinstance(content, dict) or not isinstance(sender, str):
            return None

        body = content.get("body")
        formatted = content.get("formatted_body")

        mentioned: tuple[str, ...] = (NONE,)
        mentions = content.get("m.mentions")
        if isinstance(mentions, dict):
            user_ids = mentions.get("user_ids")
            if isinstance(user_ids, list) and user_ids:
                mentioned = tuple(str(uid) for uid in user_ids)

        ts = source.get("origin_server_ts")
        return cls(
            room_id=room_id,
            event_id=str(source.get("event_id") or ""),
            sender_id=sender,
            body=body if isinstance(body, str) else None,
            msgtype=content.get("msgtype") if isinstance(content.get("msgtype"), str) else None,
            formatted_body=formatted if isinstance(formatted, str) else None,
            mentioned_ids=mentioned,
            room_member_count=int(room_member_count or 0),
            origin_server_ts=ts if isinstance(ts, int) else 0,
            source=source,
        )


@dataclass
class RoomMembers:
    """Joined members of a room."""
    members: list[str]
    count: int


@dataclass
class SelfProfile:
    display_name: Optional[str] = None
