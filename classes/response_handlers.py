"""
Base integration classes.

An integration owns an action registry and a handler. The dispatcher calls
run() for every message that reaches it; run() re-runs the matcher against
the integration's own registry and only calls handle() on a match.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

from core.constants import Stat
from core.types import Action, DispatchResult, InboundEvent
from responders.matching import extract_argument, find_action, match

if TYPE_CHECKING:
    from responders.context import BotContext

logger = logging.getLogger("catbot.integration")


@dataclass
class ResponderInput:
    event: InboundEvent
    result: DispatchResult
    action: Action
    argument: str
    actions: Sequence[Action]


class BaseIntegration:
    """Base class for every integration module."""

    name = "base"
    description = ""
    actions: Sequence[Action] = ()
    # Always-on integrations run before the activation gate
    always_on = False

    def __init__(self, context: "BotContext") -> None:
        self.context = context

    def registry(self, event: InboundEvent) -> Sequence[Action]:
        """Actions available for this event. Override to vary by sender."""
        return self.actions

    def register_help(self) -> None:
        self.context.help.register_module(self.name, self.description, self.actions)

    async def run(self, event: InboundEvent) -> bool:
        """Match and handle an event. Returns True when a response was delivered."""
        actions = self.registry(event)
        result = match(actions, event.body)
        if not result.active:
            return False

        action = find_action(actions, result.action)
        if action is None:
            return False

        payload = ResponderInput(
            event=event,
            result=result,
            action=action,
            argument=extract_argument(event.body or "", action),
            actions=actions,
        )
        logger.debug("%s matched %s in room %s", self.name, action.name, event.room_id)
        if not await self.handle(payload):
            logger.debug("%s did not deliver %s in room %s", self.name, action.name, event.room_id)
            return False
        await self.context.stats.add_stats(Stat.COMMANDS, event.room_id, self.name, action.name)
        return True

    async def handle(self, payload: ResponderInput) -> bool:
        """Respond to a matched action. Returns the emitter's send status."""
        raise NotImplementedError
