"""In-memory stand-ins for the remote collaborators."""

from __future__ import annotations

import asyncio
from typing import Dict, List, Sequence

from models.weather import Location, LocationCandidate, WeatherSnapshot
from tools.location_resolver import GeocodingProvider
from tools.reasoning_client import DETERMINISTIC, GenerationSettings, ReasoningClient
from tools.weather_provider import WeatherProvider

VALID_REPORT = (
    '{"hypothermiaRisk": "Low: layered clothing", '
    '"frostbiteRisk": "Low: no exposed skin", '
    '"safeExposure": "4 hours", '
    '"improvements": ["Add a scarf"]}'
)

LONDON = LocationCandidate(name="London", country="United Kingdom", lat=51.52, lon=-0.11)
OSLO = LocationCandidate(name="Oslo", country="Norway", lat=59.91, lon=10.75)


class FakeGeocoder(GeocodingProvider):
    """Returns canned candidates keyed by the exact query."""

    def __init__(self, results: Dict[str, List[LocationCandidate]] | None = None, error: Exception | None = None, delay: float = 0.0) -> None:
        self.results = results if results is not None else {"London": [LONDON], "Oslo": [OSLO]}
        self.error = error
        self.delay = delay
        self.calls: List[str] = []

    async def search(self, query: str) -> List[LocationCandidate]:
        self.calls.append(query)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return list(self.results.get(query, []))


class FakeWeatherProvider(WeatherProvider):
    """Per-city snapshots with optional per-city latency or failure."""

    def __init__(
        self,
        snapshots: Dict[str, WeatherSnapshot] | None = None,
        delays: Dict[str, float] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.snapshots = snapshots or {}
        self.delays = delays or {}
        self.error = error
        self.calls: List[Location] = []

    async def fetch(self, location: Location) -> WeatherSnapshot:
        self.calls.append(location)
        delay = self.delays.get(location.name, 0.0)
        if delay:
            await asyncio.sleep(delay)
        if self.error:
            raise self.error
        return self.snapshots.get(
            location.name,
            WeatherSnapshot(temperature_c=-10.0, condition="Snow", humidity_pct=80, wind_speed_ms=5.0),
        )


class FakeReasoningClient(ReasoningClient):
    """Replays scripted responses; exceptions in the script are raised."""

    def __init__(self, responses: Sequence[object] = (VALID_REPORT,), delay: float = 0.0) -> None:
        self.responses = list(responses)
        self.delay = delay
        self.prompts: List[str] = []
        self.settings: List[GenerationSettings] = []

    async def generate(self, prompt: str, settings: GenerationSettings = DETERMINISTIC) -> str:
        self.prompts.append(prompt)
        self.settings.append(settings)
        if self.delay:
            await asyncio.sleep(self.delay)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return str(response)
