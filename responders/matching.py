"""
Trigger matching logic.

The matcher is a pure function of a registry and a message body. Actions are
tested in declaration order and so are the triggers within an action; the
first trigger that matches decides the result and nothing later is evaluated.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Iterable, Optional

from core.types import NO_MATCH, Action, DispatchResult

logger = logging.getLogger("catbot.responder")


def match_trigger(body: str, trigger: Any) -> bool:
    """Test a single trigger against a body. Invalid triggers never match."""
    if isinstance(trigger, re.Pattern):
        return trigger.search(body) is not None
    if isinstance(trigger, str):
        try:
            return re.search(trigger, body) is not None
        except re.error:
            return False
    return False


def match(registry: Iterable[Action], body: Optional[str]) -> DispatchResult:
    """
    Find the first action whose first matching trigger hits the body.

    Returns NO_MATCH for an empty or missing body, an empty registry, or when
    nothing matches. Never raises.
    """
    if not body or not isinstance(body, str):
        return NO_MATCH

    for action in registry or ():
        name = getattr(action, "name", None)
        triggers = getattr(action, "triggers", None)
        if not isinstance(name, str) or not triggers:
            continue
        for trigger in triggers:
            if match_trigger(body, trigger):
                return DispatchResult(active=True, action=name)

    return NO_MATCH


def find_action(registry: Iterable[Action], name: str) -> Optional[Action]:
    for action in registry:
        if action.name == name:
            return action
    return None


def extract_argument(body: str, action: Action) -> str:
    """Text following the first matching trigger of an action."""
    for trigger in action.triggers:
        found = trigger.search(body)
        if found:
            return body[found.end():].strip()
    return ""
