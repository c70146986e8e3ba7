"""
Nightscout module - latest glucose reading from a Nightscout site.

Only loaded when the NIGHTSCOUT environment variable holds the site URL.
"""
from __future__ import annotations

import asyncio
import logging
import re
import time
from typing import Any, Awaitable, Callable, Optional

import aiohttp

from classes.response_handlers import BaseIntegration, ResponderInput
from core.constants import K
from core.types import Action
from core.utils import format_duration

logger = logging.getLogger("catbot.nightscout")

MODULE_NAME = "nightscout"
MMOL_FACTOR = 18.0

DIRECTION_ARROWS = {
    "DoubleUp": "⇈",
    "SingleUp": "↑",
    "FortyFiveUp": "↗",
    "Flat": "→",
    "FortyFiveDown": "↘",
    "SingleDown": "↓",
    "DoubleDown": "⇊",
    "NOT COMPUTABLE": "?",
    "RATE OUT OF RANGE": "⚠",
}

NIGHTSCOUT_ACTIONS: tuple[Action, ...] = (
    Action(
        name="glucose",
        triggers=(re.compile(r"\b(bg|glucose|sugar)\b", re.IGNORECASE),),
        effect="Get the latest Nightscout glucose reading",
    ),
)

Fetcher = Callable[[], Awaitable[Optional[dict[str, Any]]]]


async def fetch_latest_entry(base_url: str, token: Optional[str] = None) -> Optional[dict[str, Any]]:
    """Fetch the newest entry from the Nightscout entries API."""
    params = {"count": "1"}
    if token:
        params["token"] = token
    timeout = aiohttp.ClientTimeout(total=15, connect=5, sock_read=10)
    async with aiohttp.ClientSession(timeout=timeout) as session:
        async with session.get(f"{base_url}/api/v1/entries.json", params=params) as resp:
            if resp.status != 200:
                logger.warning("Nightscout returned HTTP %s", resp.status)
                return None
            data = await resp.json(content_type=None)
    if isinstance(data, list) and data and isinstance(data[0], dict):
        return data[0]
    return None


def format_entry(entry: dict[str, Any], now_ms: Optional[int] = None) -> Optional[str]:
    """Render an entry as HTML, or None when it has no glucose value."""
    sgv = entry.get("sgv")
    if not isinstance(sgv, (int, float)) or isinstance(sgv, bool):
        return None
    arrow = DIRECTION_ARROWS.get(str(entry.get("direction") or ""), "")
    mmol = round(sgv / MMOL_FACTOR, 1)
    text = f"Glucose is <b>{int(sgv)} mg/dL</b> ({mmol} mmol/L)"
    if arrow:
        text += f" {arrow}"
    date = entry.get("date")
    if isinstance(date, (int, float)) and not isinstance(date, bool):
        if now_ms is None:
            now_ms = int(time.time() * 1000)
        text += f", {format_duration((now_ms - date) / 1000)} ago"
    return text


class NightscoutIntegration(BaseIntegration):
    name = MODULE_NAME
    description = "Glucose readings from Nightscout"
    actions = NIGHTSCOUT_ACTIONS

    def __init__(self, context, fetcher: Optional[Fetcher] = None) -> None:
        super().__init__(context)
        base_url = context.config.get(K.NIGHTSCOUT_URL)
        token = context.config.get(K.NIGHTSCOUT_TOKEN)
        self._fetch: Fetcher = fetcher or (lambda: fetch_latest_entry(base_url, token))

    async def handle(self, payload: ResponderInput) -> bool:
        try:
            entry = await self._fetch()
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.warning("Nightscout lookup failed: %s", e)
            entry = None

        text = format_entry(entry) if entry else None
        if text is None:
            text = "I couldn't reach Nightscout right now"
        return await self.context.emitter.send_msg(payload.event.room_id, text, module_tag=self.name)


def setup(context) -> Optional[NightscoutIntegration]:
    """Build the integration when a Nightscout URL is configured."""
    if not context.config.get(K.NIGHTSCOUT_URL):
        return None
    return NightscoutIntegration(context)
