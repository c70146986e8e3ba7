"""
Transport interface consumed by the responders.

The concrete implementation lives in bot.transport; tests substitute a fake.
"""
from __future__ import annotations

from typing import Any, Protocol

from .types import SelfProfile


class TransportError(RuntimeError):
    """A send or lookup against the homeserver failed."""


class Transport(Protocol):
    async def get_self_id(self) -> str: ...

    async def get_self_profile(self, user_id: str) -> SelfProfile: ...

    async def get_joined_members(self, room_id: str) -> list[str]: ...

    async def send_notice(self, room_id: str, html: str) -> Any: ...

    async def send_reply_notice(
        self,
        room_id: str,
        event: dict[str, Any],
        plain: str,
        html: str,
    ) -> Any: ...

    async def send_raw_event(self, room_id: str, event_type: str, payload: dict[str, Any]) -> Any: ...
