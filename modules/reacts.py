"""
Cat reactions - emoji responses to keywords on every admitted message.

Runs before the activation gate. Rules are tested in order and only the
first matching rule reacts; rules marked addressed_only also need the bot to
be mentioned (or the room to be a 1:1).
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Sequence

from classes.response_handlers import BaseIntegration, ResponderInput
from core.types import Action, InboundEvent
from responders.engine import is_activated
from responders.registry import word_trigger

logger = logging.getLogger("catbot.reacts")

MODULE_NAME = "reacts"


@dataclass(frozen=True)
class ReactionRule:
    action: Action
    emoji: str
    addressed_only: bool = False


REACTION_RULES: tuple[ReactionRule, ...] = (
    ReactionRule(
        Action(
            name="good_bot",
            triggers=(re.compile(r"\bgood (bot|kitty|cat)\b", re.IGNORECASE),),
            effect="Purrs at praise",
        ),
        emoji="❤️",
        addressed_only=True,
    ),
    ReactionRule(
        Action(
            name="bad_bot",
            triggers=(re.compile(r"\bbad (bot|kitty|cat)\b", re.IGNORECASE),),
            effect="Sulks at scolding",
        ),
        emoji="😿",
        addressed_only=True,
    ),
    ReactionRule(
        Action(
            name="meow",
            triggers=(re.compile(r"\bm+e+o+w+\b", re.IGNORECASE), word_trigger("purr", case_sensitive=False)),
            effect="Meows back",
        ),
        emoji="😺",
    ),
    ReactionRule(
        Action(
            name="cat",
            triggers=(re.compile(r"\b(cats?|kitty|kitten|kittens)\b", re.IGNORECASE),),
            effect="Notices cats",
        ),
        emoji="🐱",
    ),
)


class CatbotReacts(BaseIntegration):
    name = MODULE_NAME
    description = "Reacts to cat words with emoji"
    always_on = True

    def __init__(self, context, rules: Sequence[ReactionRule] = REACTION_RULES) -> None:
        super().__init__(context)
        self.rules = tuple(rules)
        self.actions = tuple(rule.action for rule in self.rules)

    def registry(self, event: InboundEvent) -> Sequence[Action]:
        if is_activated(event, self.context.self_id):
            return self.actions
        return tuple(rule.action for rule in self.rules if not rule.addressed_only)

    def register_help(self) -> None:
        self.context.help.register_module("Cat Reactions", self.description, self.actions, hidden=True)

    async def handle(self, payload: ResponderInput) -> bool:
        for rule in self.rules:
            if rule.action.name == payload.action.name:
                return await self.context.emitter.send_emote(
                    payload.event.room_id,
                    payload.event.event_id,
                    rule.emoji,
                    module_tag=self.name,
                )
        return False
