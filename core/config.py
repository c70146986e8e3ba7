"""
Bot configuration loading and validation.

Reads settings from the process environment (populated from .env by main.py),
validates them against CONFIG_SCHEMA and returns a normalized dict keyed by
core.constants.ConfigKey.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple
from urllib.parse import urlparse

from .constants import K
from .paths import resolve_repo_path
from .utils import parse_csv

DEFAULT_CONFIG: Dict[str, Any] = {
    K.HOMESERVER: None,
    K.ACCESS_TOKEN: None,
    K.USER_ID: None,
    K.DEVICE_ID: None,
    K.BOT_NAME: "catBot",
    K.ADMIN_IDS: [],
    K.STATS_PATH: "data/stats.json",
    K.STORE_PATH: None,
    K.NIGHTSCOUT_URL: None,
    K.NIGHTSCOUT_TOKEN: None,
    K.WEATHER_URL: "https://wttr.in",
    K.RANDOM_CHANCE: 0.01,
    K.LIVENESS_CHANCE: 0.01,
}

# key -> (environment variable, type name, required)
CONFIG_SCHEMA: Dict[str, Tuple[str, str, bool]] = {
    K.HOMESERVER: ("MATRIX_HOMESERVER", "url", True),
    K.ACCESS_TOKEN: ("MATRIX_ACCESS_TOKEN", "str", True),
    K.USER_ID: ("MATRIX_USER_ID", "user_id_or_none", False),
    K.DEVICE_ID: ("MATRIX_DEVICE_ID", "str_or_none", False),
    K.BOT_NAME: ("CATBOT_NAME", "str", False),
    K.ADMIN_IDS: ("CATBOT_ADMINS", "list_user_id", False),
    K.STATS_PATH: ("CATBOT_STATS_PATH", "path", False),
    K.STORE_PATH: ("CATBOT_STORE_PATH", "str_or_none", False),
    K.NIGHTSCOUT_URL: ("NIGHTSCOUT", "url_or_none", False),
    K.NIGHTSCOUT_TOKEN: ("NIGHTSCOUT_TOKEN", "str_or_none", False),
    K.WEATHER_URL: ("CATBOT_WEATHER_URL", "url", False),
    K.RANDOM_CHANCE: ("CATBOT_RANDOM_CHANCE", "probability", False),
    K.LIVENESS_CHANCE: ("CATBOT_LIVENESS_CHANCE", "probability", False),
}


class ConfigError(RuntimeError):
    pass


def _is_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _is_user_id(value: str) -> bool:
    return value.startswith("@") and ":" in value


def _convert(key: str, env_name: str, type_name: str, raw: str, errors: List[str]) -> Any:
    value = raw.strip()
    if type_name == "str":
        if not value:
            errors.append(f"{env_name} must not be empty")
            return None
        return value
    if type_name == "str_or_none":
        return value or None
    if type_name == "url":
        if not _is_url(value):
            errors.append(f"{env_name} must be an http(s) URL")
            return None
        return value.rstrip("/")
    if type_name == "url_or_none":
        if not value:
            return None
        if not _is_url(value):
            errors.append(f"{env_name} must be an http(s) URL or empty")
            return None
        return value.rstrip("/")
    if type_name == "user_id_or_none":
        if not value:
            return None
        if not _is_user_id(value):
            errors.append(f"{env_name} must be a Matrix user ID like @cat:example.org")
            return None
        return value
    if type_name == "list_user_id":
        items = parse_csv(value)
        bad = [item for item in items if not _is_user_id(item)]
        if bad:
            errors.append(f"{env_name} contains invalid user IDs: {', '.join(bad)}")
            return []
        return items
    if type_name == "path":
        if not value:
            errors.append(f"{env_name} must not be empty")
            return None
        return value
    if type_name == "probability":
        try:
            number = float(value)
        except ValueError:
            errors.append(f"{env_name} must be a number between 0 and 1")
            return None
        if not 0.0 <= number <= 1.0:
            errors.append(f"{env_name} must be a number between 0 and 1")
            return None
        return number
    errors.append(f"Unknown config type for {key}")
    return None


def load_config(env: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """
    Build the bot configuration from environment variables.

    Raises ConfigError listing every invalid or missing setting.
    """
    if env is None:
        env = os.environ

    errors: List[str] = []
    normalized: Dict[str, Any] = {}

    for key, (env_name, type_name, required) in CONFIG_SCHEMA.items():
        raw = env.get(env_name)
        if raw is None or (not raw.strip() and type_name not in ("str_or_none", "url_or_none")):
            if required:
                errors.append(f"Missing required setting: {env_name}")
            else:
                normalized[key] = DEFAULT_CONFIG.get(key)
            continue
        normalized[key] = _convert(key, env_name, type_name, raw, errors)

    # The encryption store is bound to one user and device
    if normalized.get(K.STORE_PATH) and not (normalized.get(K.USER_ID) and normalized.get(K.DEVICE_ID)):
        errors.append("CATBOT_STORE_PATH requires MATRIX_USER_ID and MATRIX_DEVICE_ID")

    if errors:
        raise ConfigError("; ".join(errors))

    return normalized


def stats_path(config: Mapping[str, Any]) -> Path:
    return resolve_repo_path(config.get(K.STATS_PATH) or DEFAULT_CONFIG[K.STATS_PATH])


def store_path(config: Mapping[str, Any]) -> Optional[Path]:
    """Directory for nio's encryption store, or None when encryption is off."""
    value = config.get(K.STORE_PATH)
    return resolve_repo_path(value) if value else None
