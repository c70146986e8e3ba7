"""
Dispatch engine - admission filter, activation gate and handler fan-out.

Every admitted message is counted, handed to the always-on integrations,
checked against the activation gate, and then offered to each triggered
integration. Handler failures are contained here so the sync loop keeps
flowing.
"""
from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Optional, Sequence

from core.constants import ACTIVATION_PREFIX, MsgType, Stat
from core.types import InboundEvent

from .context import BotContext
from .sampler import LivenessSampler

if TYPE_CHECKING:
    from classes.response_handlers import BaseIntegration

logger = logging.getLogger("catbot.responder")

LIVENESS_PREFIX = "Meow!"
LIVENESS_TEXT = "It's me CatBot! 🐱🤖"
MATRIX_TO_PREFIX = "https://matrix.to/#/"


def is_admitted(event: InboundEvent, self_id: str) -> bool:
    """Own messages and anything that is not a plain-text message are dropped."""
    if event.sender_id == self_id:
        return False
    if event.msgtype != MsgType.TEXT:
        return False
    return isinstance(event.body, str)


def is_activated(event: InboundEvent, self_id: str) -> bool:
    """
    Whether command integrations should see this message.

    Any one of these opens the gate:
    - body starts with !meow
    - the bot is in m.mentions
    - the room is a 1:1 (two joined members)
    - the formatted body links to the bot
    """
    body = event.body or ""
    if body.startswith(ACTIVATION_PREFIX):
        return True
    if self_id in event.mentioned_ids:
        return True
    if event.room_member_count == 2:
        return True
    formatted = event.formatted_body or ""
    return f"{MATRIX_TO_PREFIX}{self_id}" in formatted


class Dispatcher:
    """
    Routes inbound events to integrations.

    Integrations are resolved once at startup and iterated uniformly.
    """

    def __init__(
        self,
        context: BotContext,
        integrations: Sequence["BaseIntegration"] = (),
        sampler: Optional[LivenessSampler] = None,
    ) -> None:
        self.context = context
        self.always_on = [i for i in integrations if i.always_on]
        self.triggered = [i for i in integrations if not i.always_on]
        self.sampler = sampler or LivenessSampler()

    async def _run_safely(self, integration: "BaseIntegration", event: InboundEvent) -> bool:
        try:
            return await integration.run(event)
        except Exception as e:
            logger.error(
                "Integration %s failed for event %s in room %s: %s",
                integration.name,
                event.event_id,
                event.room_id,
                e,
                exc_info=True,
            )
            return False

    async def _run_all(self, integrations: Sequence["BaseIntegration"], event: InboundEvent) -> list[bool]:
        if not integrations:
            return []
        return list(await asyncio.gather(*(self._run_safely(i, event) for i in integrations)))

    async def _add_stats(self, counter: str, room_id: str) -> None:
        try:
            await self.context.stats.add_stats(counter, room_id)
        except Exception as e:
            logger.error("Failed to record %s for room %s: %s", counter, room_id, e)

    async def _sample(self, event: InboundEvent) -> None:
        outcome = self.sampler.roll()
        if not outcome.random_hit:
            return
        await self._add_stats(Stat.RANDOM_FUNCTIONS, event.room_id)
        if outcome.liveness:
            logger.info("Liveness reply in room %s", event.room_id)
            sent = await self.context.emitter.send_msg(
                event.room_id,
                LIVENESS_TEXT,
                reply_event=event,
                prefix=LIVENESS_PREFIX,
                module_tag=Stat.RANDOM_FUNCTIONS,
            )
            if sent:
                await self._add_stats(Stat.MSG_ACTION, event.room_id)

    async def on_message(self, event: InboundEvent) -> None:
        """
        Process one inbound event.

        Never raises; the caller schedules this as a fire-and-forget task.
        """
        self_id = self.context.self_id
        if not is_admitted(event, self_id):
            return

        await self._add_stats(Stat.TOTAL_PROCESSED_MSGS, event.room_id)

        await self._run_all(self.always_on, event)

        if is_activated(event, self_id):
            await self._run_all(self.triggered, event)

        try:
            await self._sample(event)
        except Exception as e:
            logger.error("Random functions failed for event %s: %s", event.event_id, e, exc_info=True)
