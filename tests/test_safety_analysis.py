"""Prompt construction, response parsing and the safety analyzer."""

from __future__ import annotations

import asyncio
import json

import pytest

from agents.safety_analyzer import OutfitSafetyAnalyzer
from logic.safety import SAFETY_RULES, build_analysis_prompt
from logic.validation import ensure_ready_for_analysis, parse_risk_report, strip_code_fences
from models.errors import EmptySelection, MalformedResponse, MissingLocation, UpstreamError
from models.outfit import OutfitSelection
from models.weather import Location, WeatherSnapshot
from fakes import VALID_REPORT, FakeReasoningClient

FENCED = (
    "```json\n"
    '{"hypothermiaRisk":"Low: ...","frostbiteRisk":"Low: ...","safeExposure":"4 hours","improvements":[]}'
    "\n```"
)


def _outfit() -> OutfitSelection:
    return OutfitSelection(frozenset({"thermals"}), frozenset({"hoodie", "jeans"}))


def test_prompt_embeds_city_weather_layers_and_rules(cold_weather: WeatherSnapshot) -> None:
    prompt = build_analysis_prompt("Oslo", cold_weather, _outfit())

    assert "City: Oslo" in prompt
    assert "- Temperature: -10.0°C" in prompt
    assert "- Condition: Snow" in prompt
    assert "- Humidity: 80%" in prompt
    assert "- Wind Speed: 5.0 m/s" in prompt
    assert "Inner Layers: Thermals" in prompt
    assert "Outer Layers: Hoodie, Jeans" in prompt
    for rule in SAFETY_RULES:
        assert rule in prompt
    assert "Return ONLY a JSON object" in prompt


def test_prompt_marks_empty_category_as_none(cold_weather: WeatherSnapshot) -> None:
    prompt = build_analysis_prompt("Oslo", cold_weather, OutfitSelection(frozenset(), frozenset({"hoodie"})))

    assert "Inner Layers: None" in prompt


def test_fenced_response_is_parsed_with_empty_improvements() -> None:
    report = parse_risk_report(FENCED)

    assert report.hypothermia_risk == "Low: ..."
    assert report.safe_exposure == "4 hours"
    assert report.improvements == []


def test_strip_code_fences_leaves_plain_json_alone() -> None:
    assert strip_code_fences('  {"a": 1}  ') == '{"a": 1}'
    assert strip_code_fences('```\n{"a": 1}\n```') == '{"a": 1}'


def test_missing_field_is_malformed() -> None:
    payload = json.loads(VALID_REPORT)
    payload.pop("safeExposure")

    with pytest.raises(MalformedResponse) as excinfo:
        parse_risk_report(json.dumps(payload))
    assert "safeExposure" in str(excinfo.value)


@pytest.mark.parametrize(
    "body",
    [
        "not json at all",
        "[1, 2, 3]",
        '{"hypothermiaRisk": "Low", "frostbiteRisk": "Low", "safeExposure": "1h", "improvements": "wear a hat"}',
        '{"hypothermiaRisk": "", "frostbiteRisk": "Low", "safeExposure": "1h", "improvements": []}',
        '{"hypothermiaRisk": "Low", "frostbiteRisk": "Low", "safeExposure": "1h", "improvements": [null, 3]}',
    ],
)
def test_invalid_shapes_are_malformed(body: str) -> None:
    with pytest.raises(MalformedResponse):
        parse_risk_report(body)


def test_report_payload_uses_wire_names() -> None:
    report = parse_risk_report(VALID_REPORT)

    assert report.to_payload()["improvements"] == ["Add a scarf"]
    assert set(report.to_payload()) == {"hypothermiaRisk", "frostbiteRisk", "safeExposure", "improvements"}


def test_preconditions(cold_weather: WeatherSnapshot) -> None:
    location = Location(name="Oslo", lat=59.91, lng=10.75)

    with pytest.raises(MissingLocation):
        ensure_ready_for_analysis(None, cold_weather, _outfit())
    with pytest.raises(MissingLocation):
        ensure_ready_for_analysis(location, None, _outfit())
    with pytest.raises(EmptySelection):
        ensure_ready_for_analysis(location, cold_weather, OutfitSelection())
    ensure_ready_for_analysis(location, cold_weather, _outfit())


def test_analyzer_uses_deterministic_settings(cold_weather: WeatherSnapshot) -> None:
    client = FakeReasoningClient([FENCED])
    analyzer = OutfitSafetyAnalyzer(client)

    report = asyncio.run(analyzer.analyze("Oslo", cold_weather, _outfit()))

    assert report.improvements == []
    assert len(client.prompts) == 1
    assert client.settings[0].temperature <= 0.1
    assert client.settings[0].top_k == 1


def test_analyzer_refuses_empty_selection_without_remote_call(cold_weather: WeatherSnapshot) -> None:
    client = FakeReasoningClient()
    analyzer = OutfitSafetyAnalyzer(client)

    with pytest.raises(EmptySelection):
        asyncio.run(analyzer.analyze("Oslo", cold_weather, OutfitSelection()))
    assert client.prompts == []


def test_analyzer_propagates_upstream_errors_without_retry(cold_weather: WeatherSnapshot) -> None:
    client = FakeReasoningClient([UpstreamError("API Error: quota")])
    analyzer = OutfitSafetyAnalyzer(client)

    with pytest.raises(UpstreamError):
        asyncio.run(analyzer.analyze("Oslo", cold_weather, _outfit()))
    assert len(client.prompts) == 1


def test_analyzer_never_caches(cold_weather: WeatherSnapshot) -> None:
    client = FakeReasoningClient()
    analyzer = OutfitSafetyAnalyzer(client)

    async def run_twice() -> None:
        await analyzer.analyze("Oslo", cold_weather, _outfit())
        await analyzer.analyze("Oslo", cold_weather, _outfit())

    asyncio.run(run_twice())
    assert len(client.prompts) == 2
