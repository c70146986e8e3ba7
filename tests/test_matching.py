"""Tests for the action registry and trigger matcher."""
import re

from core.constants import NONE, Scope
from core.types import NO_MATCH, Action, DispatchResult
from responders.matching import extract_argument, match
from responders.registry import build_registry, word_trigger


def test_base_registry_order():
    assert [a.name for a in build_registry(Scope.BASE)] == ["about", "help", "version"]


def test_admin_registry_is_superset():
    base = build_registry(Scope.BASE)
    admin = build_registry(Scope.ADMIN)
    assert admin[: len(base)] == base
    assert [a.name for a in admin[len(base):]] == ["stats", "uptime"]


def test_unknown_scope_falls_back_to_base():
    assert build_registry("nonsense") == build_registry(Scope.BASE)


def test_registry_is_deterministic():
    assert build_registry(Scope.ADMIN) == build_registry(Scope.ADMIN)


def test_empty_and_missing_body():
    registry = build_registry(Scope.ADMIN)
    assert match(registry, "") == DispatchResult(active=False, action=NONE)
    assert match(registry, None) == NO_MATCH


def test_empty_registry_matches_nothing():
    assert match((), "help") == NO_MATCH
    assert match(None, "help") == NO_MATCH


def test_no_match_is_normal():
    assert match(build_registry(Scope.BASE), "just chatting") == NO_MATCH


def test_about_matches():
    result = match(build_registry(Scope.BASE), "!meow about")
    assert result == DispatchResult(active=True, action="about")


def test_first_declared_action_wins():
    # "about" is declared before "help" and "version"
    result = match(build_registry(Scope.BASE), "!meow help version about")
    assert result.action == "about"


def test_later_action_when_earlier_absent():
    result = match(build_registry(Scope.BASE), "!meow version and help")
    assert result.action == "help"


def test_case_sensitivity_is_per_trigger():
    registry = build_registry(Scope.ADMIN)
    assert match(registry, "ABOUT").action == "about"
    assert match(registry, "Version").action == "version"
    assert match(registry, "HELP") == NO_MATCH
    assert match(registry, "Stats") == NO_MATCH
    assert match(registry, "UPTIME") == NO_MATCH
    assert match(registry, "uptime").action == "uptime"


def test_word_boundary_required():
    registry = build_registry(Scope.BASE)
    assert match(registry, "helpful") == NO_MATCH
    assert match(registry, "versions") == NO_MATCH


def test_admin_actions_absent_from_base():
    assert match(build_registry(Scope.BASE), "stats") == NO_MATCH
    assert match(build_registry(Scope.ADMIN), "stats").action == "stats"


def test_first_matching_trigger_within_action():
    registry = (
        Action("first", (re.compile("zzz"), re.compile("cat"))),
        Action("second", (re.compile("cat"),)),
    )
    assert match(registry, "a cat").action == "first"


def test_malformed_entries_are_skipped():
    registry = (
        object(),
        Action("broken", ()),
        Action("string", ("[unclosed",)),
        Action("ok", (word_trigger("meow"),)),
    )
    assert match(registry, "meow").action == "ok"


def test_matcher_is_idempotent():
    registry = build_registry(Scope.ADMIN)
    body = "!meow version please"
    assert match(registry, body) == match(registry, body)


def test_extract_argument():
    action = Action("weather", (re.compile(r"\bweather\b", re.IGNORECASE),))
    assert extract_argument("!meow Weather  New York ", action) == "New York"
    assert extract_argument("!meow weather", action) == ""


def test_keywords_strip_boundaries():
    assert build_registry(Scope.BASE)[0].keywords() == ["about"]


def test_keywords_split_simple_alternation():
    action = Action(name="bg", triggers=(re.compile(r"\b(bg|glucose|sugar)\b"),))
    assert action.keywords() == ["bg", "glucose", "sugar"]
    nested = Action(name="good", triggers=(re.compile(r"\bgood (bot|cat)\b"),))
    assert nested.keywords() == ["good (bot|cat)"]
