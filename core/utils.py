"""
General utility functions.

Provides date/time helpers, text sanitization and HTML helpers.
"""
from __future__ import annotations

import datetime as dt
import html
import re
from typing import Any, Optional

UTC = dt.timezone.utc

CONTROL_RE = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")
TAG_RE = re.compile(r"<[^>]+>")


def utcnow() -> dt.datetime:
    return dt.datetime.now(tz=UTC)


def dt_to_iso(value: Optional[dt.datetime]) -> Optional[str]:
    if value is None:
        return None
    value = value.astimezone(UTC).replace(microsecond=0)
    return value.isoformat().replace("+00:00", "Z")


def strip_tags(text: str) -> str:
    """Plain-text fallback for an HTML body. Unclosed tags pass through."""
    return TAG_RE.sub("", text)


def sanitize_text(text: Any, max_len: int = 1500) -> str:
    """Escape untrusted text for inclusion in an HTML notice."""
    if text is None:
        return ""
    text = CONTROL_RE.sub("", str(text))
    if len(text) > max_len:
        text = text[: max_len - 3] + "..."
    return html.escape(text, quote=False)


def format_duration(seconds: float) -> str:
    secs = max(0, int(seconds))
    days, rem = divmod(secs, 86400)
    hours, rem = divmod(rem, 3600)
    mins, secs = divmod(rem, 60)
    if days:
        return f"{days}d {hours}h {mins}m"
    if hours:
        return f"{hours}h {mins}m"
    if mins:
        return f"{mins}m {secs}s"
    return f"{secs}s"


def parse_csv(value: Optional[str]) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]
