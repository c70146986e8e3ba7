"""
Configuration key and counter name constants.

Using constants instead of string literals provides:
- IDE autocomplete
- Typo protection (caught at import time)
- Single source of truth for key names
"""
from __future__ import annotations


class ConfigKey:
    """All configuration keys produced by core.config.load_config."""

    # Identity
    HOMESERVER = "homeserver"
    ACCESS_TOKEN = "access_token"
    USER_ID = "user_id"
    DEVICE_ID = "device_id"
    BOT_NAME = "bot_name"

    # Access
    ADMIN_IDS = "admin_ids"

    # Storage
    STATS_PATH = "stats_path"
    STORE_PATH = "store_path"

    # Integrations
    NIGHTSCOUT_URL = "nightscout_url"
    NIGHTSCOUT_TOKEN = "nightscout_token"
    WEATHER_URL = "weather_url"

    # Randomized behaviors
    RANDOM_CHANCE = "random_chance"
    LIVENESS_CHANCE = "liveness_chance"


class Stat:
    """Counter names recorded in the stats store."""
    TOTAL_PROCESSED_MSGS = "totalProcessedMsgs"
    TOTAL_ACTIVITY = "totalActivity"
    RANDOM_FUNCTIONS = "randomFunctions"
    MSG_ACTION = "msgAction"
    COMMANDS = "commands"


class SendKind:
    """Outbound send kinds used as the stats sub-category."""
    MSG = "sendMsg"
    REPLY = "sendReply"
    EMOTE = "sendEmote"


class MsgType:
    """Matrix message types the bot cares about."""
    TEXT = "m.text"
    NOTICE = "m.notice"


class Scope:
    """Registry scopes for the universal command set."""
    BASE = "base"
    ADMIN = "admin"


# Sentinel used where no action matched or no mentions were present
NONE = "none"

# Literal prefix that always opens the activation gate
ACTIVATION_PREFIX = "!meow"

DEFAULT_PREFIX = "meow!"
EMOJI_PREFIX = "🐱"

# Shorthand alias for cleaner imports
K = ConfigKey
