"""
Core utilities and infrastructure for the bot.

This package contains:
- config: Environment configuration loading and validation
- constants: Configuration keys, counter names and sentinels
- help_system: HTML help rendering for action registries
- io_utils: File I/O helpers
- paths: Path resolution
- stats_storage: Persistent monotonic counters
- types: Dataclasses and the inbound event seam
- utils: General utilities
"""
from .constants import K, NONE, ConfigKey, MsgType, Scope, SendKind, Stat
from .types import (
    NO_MATCH,
    Action,
    DispatchResult,
    InboundEvent,
    RoomMembers,
    SelfProfile,
)

__all__ = [
    # Constants
    "ConfigKey",
    "K",
    "MsgType",
    "NONE",
    "Scope",
    "SendKind",
    "Stat",
    # Types
    "Action",
    "DispatchResult",
    "InboundEvent",
    "NO_MATCH",
    "RoomMembers",
    "SelfProfile",
]
