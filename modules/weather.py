"""
Weather module - one-line weather reports on request.
"""
from __future__ import annotations

import asyncio
import logging
import re
from typing import Awaitable, Callable, Optional
from urllib.parse import quote

import aiohttp

from classes.response_handlers import BaseIntegration, ResponderInput
from core.constants import K
from core.types import Action
from core.utils import sanitize_text

logger = logging.getLogger("catbot.weather")

MODULE_NAME = "weather"

WEATHER_ACTIONS: tuple[Action, ...] = (
    Action(
        name="weather",
        triggers=(re.compile(r"\bweather\b", re.IGNORECASE),),
        effect="Get the weather for a place, e.g. weather London",
    ),
)

Fetcher = Callable[[str], Awaitable[Optional[str]]]


async def fetch_weather(base_url: str, location: str) -> Optional[str]:
    """Fetch a one-line report. Returns None when the service has no answer."""
    url = f"{base_url.rstrip('/')}/{quote(location)}"
    timeout = aiohttp.ClientTimeout(total=15, connect=5, sock_read=10)
    async with aiohttp.ClientSession(timeout=timeout) as session:
        async with session.get(url, params={"format": "3"}, headers={"User-Agent": "curl/8"}) as resp:
            if resp.status != 200:
                logger.warning("Weather lookup for %s returned HTTP %s", location, resp.status)
                return None
            text = (await resp.text()).strip()
    return text or None


class WeatherIntegration(BaseIntegration):
    name = MODULE_NAME
    description = "Weather reports on demand"
    actions = WEATHER_ACTIONS

    def __init__(self, context, fetcher: Optional[Fetcher] = None) -> None:
        super().__init__(context)
        base_url = context.config.get(K.WEATHER_URL) or "https://wttr.in"
        self._fetch: Fetcher = fetcher or (lambda location: fetch_weather(base_url, location))

    async def handle(self, payload: ResponderInput) -> bool:
        room_id = payload.event.room_id
        location = payload.argument
        if not location:
            return await self.context.emitter.send_msg(
                room_id, "Tell me where! Try <code>weather London</code>", module_tag=self.name
            )

        try:
            report = await self._fetch(location)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            # ValueError covers undecodable response bodies
            logger.warning("Weather lookup for %s failed: %s", location, e)
            report = None

        if not report:
            return await self.context.emitter.send_msg(
                room_id,
                f"I couldn't find the weather for <b>{sanitize_text(location)}</b>",
                module_tag=self.name,
            )

        return await self.context.emitter.send_msg(room_id, sanitize_text(report), module_tag=self.name)
