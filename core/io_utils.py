from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger("catbot.io")


async def read_json(path: Path, default: Any = None) -> Any:
    def _read() -> Any:
        try:
            with path.open("r", encoding="utf-8") as handle:
                return json.load(handle)
        except FileNotFoundError:
            return default
        except ValueError as exc:
            logger.warning("Ignoring unreadable JSON file %s: %s", path, exc)
            return default

    return await asyncio.to_thread(_read)


async def write_json_atomic(path: Path, data: Any) -> None:
    def _write() -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as handle:
            json.dump(data, handle, ensure_ascii=False, indent=2, sort_keys=True)
        os.replace(tmp_path, path)

    await asyncio.to_thread(_write)
