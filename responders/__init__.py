"""
Responder system - classification and dispatch of room messages.

This package decides which action an incoming message triggers and sends
the resulting responses.
"""
from .context import BotContext
from .delivery import UNSET, ResponseEmitter
from .engine import Dispatcher, is_activated, is_admitted
from .matching import match
from .registry import build_registry
from .sampler import LivenessSampler, SampleOutcome

__all__ = [
    "BotContext",
    "Dispatcher",
    "LivenessSampler",
    "ResponseEmitter",
    "SampleOutcome",
    "UNSET",
    "build_registry",
    "is_activated",
    "is_admitted",
    "match",
]
