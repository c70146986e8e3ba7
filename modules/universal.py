"""
Universal commands - about, help, version, and the admin-only stats/uptime.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace
from importlib import metadata
from typing import Sequence

import psutil

from classes.response_handlers import BaseIntegration, ResponderInput
from core.constants import Scope
from core.help_system import build_help_html
from core.types import Action, InboundEvent
from core.utils import format_duration, sanitize_text, utcnow
from responders.registry import build_registry

logger = logging.getLogger("catbot.universal")

MODULE_NAME = "universal"
DISTRIBUTION = "catbot"


@dataclass
class About:
    name: str
    description: str
    author: str
    version: str
    license: str


FALLBACK_ABOUT = About(
    name="catBot",
    description="A cat-themed Matrix bot",
    author="catBot contributors",
    version="0.0.0",
    license="MIT",
)


def get_about(bot_name: str | None = None) -> About:
    """Package details from installed metadata, falling back to built-in values."""
    try:
        meta = metadata.metadata(DISTRIBUTION)
    except metadata.PackageNotFoundError:
        about = FALLBACK_ABOUT
    else:
        author = meta.get("Author") or meta.get("Author-email") or FALLBACK_ABOUT.author
        about = About(
            name=meta.get("Name") or FALLBACK_ABOUT.name,
            description=meta.get("Summary") or FALLBACK_ABOUT.description,
            author=author,
            version=meta.get("Version") or FALLBACK_ABOUT.version,
            license=meta.get("License-Expression") or meta.get("License") or FALLBACK_ABOUT.license,
        )
    if bot_name:
        about = replace(about, name=bot_name)
    return about


class UniversalCommands(BaseIntegration):
    name = MODULE_NAME
    description = "General built in functions"
    actions = build_registry(Scope.ADMIN)

    def registry(self, event: InboundEvent) -> Sequence[Action]:
        scope = Scope.ADMIN if self.context.is_admin(event.sender_id) else Scope.BASE
        return build_registry(scope)

    def register_help(self) -> None:
        self.context.help.register_module("General Functions", "General Built in functions", build_registry(Scope.BASE))

    async def handle(self, payload: ResponderInput) -> bool:
        handler = getattr(self, f"_{payload.action.name}", None)
        if handler is None:
            logger.warning("No handler for universal action %s", payload.action.name)
            return False
        return await handler(payload)

    async def _send(self, payload: ResponderInput, html: str) -> bool:
        return await self.context.emitter.send_msg(payload.event.room_id, html, module_tag=self.name)

    async def _help(self, payload: ResponderInput) -> bool:
        html = self.context.help.get_help_html()
        if self.context.is_admin(payload.event.sender_id):
            base = {action.name for action in build_registry(Scope.BASE)}
            admin_only = [action for action in build_registry(Scope.ADMIN) if action.name not in base]
            html += "<br>" + build_help_html("Admin Functions", "Only for bot admins", admin_only)
        return await self._send(payload, html)

    async def _about(self, payload: ResponderInput) -> bool:
        res = get_about(self.context.bot_name)
        return await self._send(
            payload,
            f"Let me tell you about <b>{sanitize_text(res.name)}</b>! <br>"
            f"{sanitize_text(res.description)} by <b>{sanitize_text(res.author)}</b><br> "
            f"Version is <b>{sanitize_text(res.version)}</b><br>"
            f"Licensed under {sanitize_text(res.license)}",
        )

    async def _version(self, payload: ResponderInput) -> bool:
        res = get_about(self.context.bot_name)
        return await self._send(
            payload,
            f"<b>{sanitize_text(res.name)}</b> version is <b>{sanitize_text(res.version)}</b>",
        )

    async def _stats(self, payload: ResponderInput) -> bool:
        counters = self.context.stats.room_counters(payload.event.room_id)
        if not counters:
            return await self._send(payload, "No stats for this room yet.")
        items = "".join(
            f"<li>{sanitize_text(key)}: <b>{value}</b></li>" for key, value in counters.items()
        )
        return await self._send(payload, f"Here are the stats for this room:<ul>{items}</ul>")

    async def _uptime(self, payload: ResponderInput) -> bool:
        bot_uptime = format_duration((utcnow() - self.context.started_at).total_seconds())
        try:
            host_uptime = format_duration(time.time() - psutil.boot_time())
        except (psutil.Error, OSError) as e:
            logger.warning("Unable to read host boot time: %s", e)
            host_uptime = "unknown"
        return await self._send(
            payload,
            f"I've been awake for <b>{bot_uptime}</b> (host up for <b>{host_uptime}</b>)",
        )
