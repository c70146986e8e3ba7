"""
Matrix transport adapter over matrix-nio.

nio reports most failures as error response objects rather than exceptions;
this adapter turns them into TransportError so callers have one failure path.
"""
from __future__ import annotations

import logging
from typing import Any

from nio import (
    AsyncClient,
    ErrorResponse,
    JoinedMembersResponse,
    ProfileGetDisplayNameResponse,
    WhoamiResponse,
)

from core.constants import MsgType
from core.transport import TransportError
from core.types import SelfProfile
from core.utils import strip_tags

logger = logging.getLogger("catbot.transport")

HTML_FORMAT = "org.matrix.custom.html"


def _check(resp: Any, what: str) -> Any:
    if isinstance(resp, ErrorResponse):
        raise TransportError(f"{what} failed: {resp.message} ({resp.status_code})")
    return resp


def build_notice(html: str, plain: str | None = None) -> dict[str, Any]:
    return {
        "msgtype": MsgType.NOTICE,
        "body": plain if plain is not None else strip_tags(html),
        "format": HTML_FORMAT,
        "formatted_body": html,
    }


class MatrixTransport:
    """Narrow send/lookup interface used by the responders."""

    def __init__(self, client: AsyncClient) -> None:
        self.client = client

    async def get_self_id(self) -> str:
        if self.client.user_id:
            return self.client.user_id
        resp = _check(await self.client.whoami(), "whoami")
        if not isinstance(resp, WhoamiResponse):
            raise TransportError("whoami returned an unexpected response")
        self.client.user_id = resp.user_id
        return resp.user_id

    async def get_self_profile(self, user_id: str) -> SelfProfile:
        resp = _check(await self.client.get_displayname(user_id), "get_displayname")
        if isinstance(resp, ProfileGetDisplayNameResponse):
            return SelfProfile(display_name=resp.displayname)
        return SelfProfile()

    async def get_joined_members(self, room_id: str) -> list[str]:
        resp = _check(await self.client.joined_members(room_id), "joined_members")
        if not isinstance(resp, JoinedMembersResponse):
            raise TransportError("joined_members returned an unexpected response")
        return [member.user_id for member in resp.members]

    async def send_raw_event(self, room_id: str, event_type: str, payload: dict[str, Any]) -> Any:
        resp = await self.client.room_send(
            room_id,
            message_type=event_type,
            content=payload,
            ignore_unverified_devices=True,
        )
        return _check(resp, f"room_send {event_type}")

    async def send_notice(self, room_id: str, html: str) -> Any:
        return await self.send_raw_event(room_id, "m.room.message", build_notice(html))

    async def send_reply_notice(
        self,
        room_id: str,
        event: dict[str, Any],
        plain: str,
        html: str,
    ) -> Any:
        content = build_notice(html, plain)
        event_id = (event or {}).get("event_id")
        if event_id:
            content["m.relates_to"] = {"m.in_reply_to": {"event_id": event_id}}
        return await self.send_raw_event(room_id, "m.room.message", content)
