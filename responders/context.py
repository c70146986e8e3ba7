"""
Shared bot context passed to the dispatcher and every integration.

Built once at startup by the client; replaces a module-level client handle.
"""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Any

from core.constants import K
from core.help_system import HelpSystem
from core.stats_storage import StatsStore
from core.utils import utcnow

from .delivery import ResponseEmitter


@dataclass
class BotContext:
    self_id: str
    config: dict[str, Any]
    emitter: ResponseEmitter
    stats: StatsStore
    help: HelpSystem = field(default_factory=HelpSystem)
    started_at: dt.datetime = field(default_factory=utcnow)
    display_name: str | None = None

    @property
    def bot_name(self) -> str:
        return str(self.config.get(K.BOT_NAME) or "catBot")

    def is_admin(self, user_id: str) -> bool:
        return user_id in (self.config.get(K.ADMIN_IDS) or [])
