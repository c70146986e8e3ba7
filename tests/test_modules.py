"""Tests for the reaction, weather and Nightscout integrations and the loader."""
from unittest.mock import AsyncMock, patch

import aiohttp
import pytest

from core.constants import K
from modules.loader import load_optional, resolve_integrations
from modules.nightscout import NightscoutIntegration, format_entry
from modules.reacts import CatbotReacts
from modules.universal import UniversalCommands
from modules.weather import WeatherIntegration
from responders.engine import Dispatcher
from responders.sampler import LivenessSampler

from conftest import ROOM_ID, SELF_ID, make_event


def _reactions(transport):
    return [payload["m.relates_to"]["key"] for _, _, payload in transport.raw_events]


# ─── Reactions ────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_cat_word_gets_cat_reaction(context, transport):
    assert await CatbotReacts(context).run(make_event(body="look at my Kitten", event_id="$k"))
    assert _reactions(transport) == ["🐱"]
    assert transport.raw_events[0][2]["m.relates_to"]["event_id"] == "$k"


@pytest.mark.asyncio
async def test_meow_beats_cat(context, transport):
    await CatbotReacts(context).run(make_event(body="meeeow said the cat"))
    assert _reactions(transport) == ["😺"]


@pytest.mark.asyncio
async def test_praise_needs_addressing(context, transport):
    reacts = CatbotReacts(context)
    assert not await reacts.run(make_event(body="good bot"))
    assert await reacts.run(make_event(body="good bot", mentions=[SELF_ID]))
    assert _reactions(transport) == ["❤️"]


@pytest.mark.asyncio
async def test_plain_chat_no_reaction(context, transport):
    assert not await CatbotReacts(context).run(make_event(body="lunch at noon?"))
    assert transport.raw_events == []


@pytest.mark.asyncio
async def test_failed_reaction_is_not_counted(context, transport, stats):
    transport.fail_reactions = True
    assert not await CatbotReacts(context).run(make_event(body="cats"))
    assert stats.room_counters(ROOM_ID) == {}


@pytest.mark.asyncio
async def test_failed_reaction_through_dispatcher(context, transport, stats):
    transport.fail_reactions = True
    dispatcher = Dispatcher(context, [CatbotReacts(context)], LivenessSampler(rng=lambda: 1.0))
    await dispatcher.on_message(make_event(body="cats"))
    assert stats.room_counters(ROOM_ID) == {"totalProcessedMsgs": 1}


# ─── Weather ──────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_weather_report(context, transport):
    fetcher = AsyncMock(return_value="London: ⛅️ +12°C")
    integration = WeatherIntegration(context, fetcher=fetcher)
    assert await integration.run(make_event(body="!meow weather London"))
    fetcher.assert_awaited_once_with("London")
    assert transport.notices == [(ROOM_ID, "meow! London: ⛅️ +12°C")]


@pytest.mark.asyncio
async def test_weather_without_place(context, transport):
    fetcher = AsyncMock()
    await WeatherIntegration(context, fetcher=fetcher).run(make_event(body="!meow weather"))
    fetcher.assert_not_called()
    assert "Tell me where" in transport.notices[0][1]


@pytest.mark.asyncio
async def test_weather_lookup_error(context, transport):
    fetcher = AsyncMock(side_effect=aiohttp.ClientError("down"))
    await WeatherIntegration(context, fetcher=fetcher).run(make_event(body="!meow weather <Paris>"))
    html = transport.notices[0][1]
    assert "couldn't find the weather" in html
    assert "&lt;Paris&gt;" in html


@pytest.mark.asyncio
async def test_weather_undecodable_body(context, transport):
    fetcher = AsyncMock(side_effect=UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte"))
    assert await WeatherIntegration(context, fetcher=fetcher).run(make_event(body="!meow weather Oslo"))
    assert "couldn't find the weather for <b>Oslo</b>" in transport.notices[0][1]


@pytest.mark.asyncio
async def test_weather_failed_send_is_not_counted(context, transport, stats):
    transport.fail_sends = True
    fetcher = AsyncMock(return_value="Oslo: +1°C")
    assert not await WeatherIntegration(context, fetcher=fetcher).run(make_event(body="!meow weather Oslo"))
    assert stats.get(ROOM_ID, "commands.weather") == 0


# ─── Nightscout ───────────────────────────────────────────────────────────────


def test_format_entry():
    text = format_entry({"sgv": 108, "direction": "Flat", "date": 1_000_000}, now_ms=1_000_000 + 300_000)
    assert text == "Glucose is <b>108 mg/dL</b> (6.0 mmol/L) →, 5m 0s ago"


def test_nightscout_help_lists_each_word(context):
    NightscoutIntegration(context).register_help()
    html = context.help.get_help_html()
    assert "<code>bg</code> / <code>glucose</code> / <code>sugar</code>" in html
    assert "(bg|" not in html


def test_format_entry_without_value():
    assert format_entry({"direction": "Flat"}) is None
    assert format_entry({"sgv": True}) is None


@pytest.mark.asyncio
async def test_nightscout_reading(context, transport):
    fetcher = AsyncMock(return_value={"sgv": 180, "direction": "SingleUp"})
    assert await NightscoutIntegration(context, fetcher=fetcher).run(make_event(body="!meow bg"))
    assert "180 mg/dL" in transport.notices[0][1]
    assert "↑" in transport.notices[0][1]


@pytest.mark.asyncio
async def test_nightscout_unreachable(context, transport):
    fetcher = AsyncMock(return_value=None)
    await NightscoutIntegration(context, fetcher=fetcher).run(make_event(body="!meow glucose"))
    assert "couldn't reach Nightscout" in transport.notices[0][1]


# ─── Loader ───────────────────────────────────────────────────────────────────


def test_resolve_without_nightscout(context):
    names = [i.name for i in resolve_integrations(context)]
    assert names == ["reacts", "weather", "universal"]
    assert "General Functions" in context.help.get_module_names()


def test_resolve_with_nightscout(context):
    context.config[K.NIGHTSCOUT_URL] = "https://ns.example.org"
    integrations = resolve_integrations(context)
    assert [i.name for i in integrations] == ["reacts", "weather", "nightscout", "universal"]
    assert isinstance(integrations[-1], UniversalCommands)


def test_optional_load_failure_is_contained(context, caplog):
    context.config[K.NIGHTSCOUT_URL] = "https://ns.example.org"
    with patch("modules.loader.importlib.import_module", side_effect=ImportError("nope")):
        assert load_optional(context, K.NIGHTSCOUT_URL, "nightscout:setup") is None
    assert "Failed to load optional integration" in caplog.text


def test_optional_skipped_when_not_configured(context):
    assert load_optional(context, K.NIGHTSCOUT_URL, "nightscout:setup") is None
