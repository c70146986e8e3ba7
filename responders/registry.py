"""
Action registries for the universal command set.

Registries are plain ordered tuples of Action. Declaration order is the
tie-break rule used by the matcher, so entries must not be reordered.
"""
from __future__ import annotations

import re

from core.constants import Scope
from core.types import Action


def word_trigger(word: str, case_sensitive: bool = True) -> re.Pattern[str]:
    """Compile a word-boundary pattern for a single trigger word."""
    flags = 0 if case_sensitive else re.IGNORECASE
    return re.compile(rf"\b{word}\b", flags)


# Case sensitivity differs per trigger and is kept as configured.
BASE_ACTIONS: tuple[Action, ...] = (
    Action(
        name="about",
        triggers=(word_trigger("about", case_sensitive=False),),
        effect="Find out about catBot",
    ),
    Action(
        name="help",
        triggers=(word_trigger("help"),),
        effect="This help message",
    ),
    Action(
        name="version",
        triggers=(word_trigger("version", case_sensitive=False),),
        effect="Get catBot version number",
    ),
)

ADMIN_ACTIONS: tuple[Action, ...] = (
    Action(
        name="stats",
        triggers=(word_trigger("stats"),),
        effect="Show message statistics for this room",
    ),
    Action(
        name="uptime",
        triggers=(word_trigger("uptime"),),
        effect="Show how long catBot has been awake",
    ),
)


def build_registry(scope: str = Scope.BASE) -> tuple[Action, ...]:
    """
    Build the universal action registry for a scope.

    The admin scope is a superset of the base scope. Unknown scopes fall back
    to the base registry.
    """
    if scope == Scope.ADMIN:
        return BASE_ACTIONS + ADMIN_ACTIONS
    return BASE_ACTIONS
