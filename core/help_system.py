"""
Help system - centralized help registration and display.

Each integration registers its action registry with the help system, which
then renders HTML help text from the action names, trigger keywords and
effect descriptions.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from .types import Action
from .utils import sanitize_text


@dataclass
class ModuleHelp:
    """Help information for a single module."""

    name: str
    description: str
    actions: list[Action] = field(default_factory=list)
    hidden: bool = False  # If True, omit from the help overview

    def to_html(self) -> str:
        """Render this module as an HTML section with one line per action."""
        parts = [f"<b>{sanitize_text(self.name)}</b> - {sanitize_text(self.description)}"]
        if self.actions:
            items = []
            for action in self.actions:
                words = " / ".join(f"<code>{sanitize_text(w)}</code>" for w in action.keywords())
                items.append(f"<li>{words} - {sanitize_text(action.effect)}</li>")
            parts.append("<ul>" + "".join(items) + "</ul>")
        return "".join(parts)


def build_help_html(name: str, description: str, actions: Sequence[Action]) -> str:
    """Render help for a single set of actions."""
    return ModuleHelp(name=name, description=description, actions=list(actions)).to_html()


class HelpSystem:
    """
    Central help registry that integrations register with.

    Usage:
        help_system.register_module(
            name="Weather",
            description="Weather reports on demand.",
            actions=weather_registry,
        )
    """

    def __init__(self) -> None:
        self._modules: dict[str, ModuleHelp] = {}
        self._registered_order: list[str] = []

    def register_module(
        self,
        name: str,
        description: str,
        actions: Optional[Iterable[Action]] = None,
        *,
        hidden: bool = False,
    ) -> None:
        """Register (or replace) a module's help information."""
        if name not in self._modules:
            self._registered_order.append(name)
        self._modules[name] = ModuleHelp(
            name=name,
            description=description,
            actions=list(actions or []),
            hidden=hidden,
        )

    def get_module_names(self) -> list[str]:
        return list(self._registered_order)

    def get_module_html(self, name: str) -> Optional[str]:
        module_help = self._modules.get(name)
        if module_help is None:
            return None
        return module_help.to_html()

    def get_help_html(self, title: str = "Here's what I can do") -> str:
        """Overview of every visible module, in registration order."""
        sections = [
            self._modules[module_name].to_html()
            for module_name in self._registered_order
            if not self._modules[module_name].hidden
        ]
        if not sections:
            return f"{sanitize_text(title)}: nothing yet!"
        return f"{sanitize_text(title)}:<br>" + "<br>".join(sections)
