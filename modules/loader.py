"""
Integration loader.

Resolves the active integrations once at startup. Optional integrations are
imported by path only when their configuration key is set; a failure to load
one is logged and the bot starts without it.
"""
from __future__ import annotations

import importlib
import logging
from typing import Any, Optional

from classes.response_handlers import BaseIntegration
from core.constants import K

from modules.reacts import CatbotReacts
from modules.universal import UniversalCommands
from modules.weather import WeatherIntegration

logger = logging.getLogger("catbot.loader")

_HANDLER_NAMESPACE = "modules"

# (config key that enables it, "module:factory")
OPTIONAL_INTEGRATIONS: list[tuple[str, str]] = [
    (K.NIGHTSCOUT_URL, "nightscout:setup"),
]


def _load_factory(path: str) -> Optional[Any]:
    """Import a factory by module:attr path within the modules namespace."""
    if ":" not in path:
        return None
    module_name, attr = path.split(":", 1)
    module_name = module_name.strip()
    attr = attr.strip()
    if not module_name or not attr:
        return None
    if not module_name.startswith(f"{_HANDLER_NAMESPACE}."):
        module_name = f"{_HANDLER_NAMESPACE}.{module_name}"
    module = importlib.import_module(module_name)
    return getattr(module, attr, None)


def load_optional(context, key: str, path: str) -> Optional[BaseIntegration]:
    if not context.config.get(key):
        return None
    try:
        factory = _load_factory(path)
        if factory is None:
            logger.warning("Optional integration %s has no factory", path)
            return None
        integration = factory(context)
    except Exception as e:
        logger.warning("Failed to load optional integration %s: %s", path, e)
        return None
    if integration is not None:
        logger.info("Loaded optional integration %s", integration.name)
    return integration


def resolve_integrations(context) -> list[BaseIntegration]:
    """
    Build the integration list in dispatch order.

    Always-on reactions come first, then weather, the optional integrations,
    and finally the universal commands. Each is registered with the help
    system.
    """
    integrations: list[BaseIntegration] = [CatbotReacts(context), WeatherIntegration(context)]

    for key, path in OPTIONAL_INTEGRATIONS:
        integration = load_optional(context, key, path)
        if integration is not None:
            integrations.append(integration)

    integrations.append(UniversalCommands(context))

    for integration in integrations:
        integration.register_help()

    return integrations
