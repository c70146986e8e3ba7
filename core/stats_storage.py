"""
Statistics counter store.

Counters are keyed by room and a dotted counter path. Recording
("totalActivity", room, "universal", "sendMsg") increments
"totalActivity", "totalActivity.universal" and
"totalActivity.universal.sendMsg" both for the room and for the global bucket.
Counters only ever increase.
"""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from .io_utils import read_json, write_json_atomic
from .utils import dt_to_iso, utcnow

logger = logging.getLogger("catbot.stats")

GLOBAL_BUCKET = "global"


def counter_keys(
    counter: str,
    module_tag: Optional[str] = None,
    sub_category: Optional[str] = None,
) -> list[str]:
    """Expand a counter reference into every dotted prefix it increments."""
    parts = [counter]
    if module_tag:
        parts.append(module_tag)
        if sub_category:
            parts.append(sub_category)
    elif sub_category:
        parts.append(sub_category)
    return [".".join(parts[: i + 1]) for i in range(len(parts))]


class StatsStore:
    """JSON-backed monotonic counters, written through on every increment."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._lock = asyncio.Lock()
        self._data: Dict[str, Any] = {"rooms": {}}
        self._loaded = False

    async def initialize(self) -> None:
        data = await read_json(self.path, default=None)
        if not isinstance(data, dict) or not isinstance(data.get("rooms"), dict):
            data = {"rooms": {}, "created_at": dt_to_iso(utcnow())}
        self._data = data
        self._loaded = True

    async def add_stats(
        self,
        counter: str,
        room_id: str,
        module_tag: Optional[str] = None,
        sub_category: Optional[str] = None,
    ) -> None:
        """Increment a counter for a room. Persistence failures are logged."""
        keys = counter_keys(counter, module_tag, sub_category)
        async with self._lock:
            if not self._loaded:
                await self.initialize()
            rooms = self._data.setdefault("rooms", {})
            for bucket in (room_id, GLOBAL_BUCKET):
                counters = rooms.setdefault(bucket, {})
                for key in keys:
                    counters[key] = int(counters.get(key, 0)) + 1
            self._data["updated_at"] = dt_to_iso(utcnow())
            try:
                await write_json_atomic(self.path, self._data)
            except OSError as exc:
                logger.error("Failed to persist stats to %s: %s", self.path, exc)

    def get(self, room_id: str, key: str) -> int:
        return int(self._data.get("rooms", {}).get(room_id, {}).get(key, 0))

    def room_counters(self, room_id: str) -> Dict[str, int]:
        counters = self._data.get("rooms", {}).get(room_id, {})
        return {key: int(value) for key, value in sorted(counters.items())}
