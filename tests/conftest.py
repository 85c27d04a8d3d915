"""Shared fixtures for the WeatherWear test suite."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))
sys.path.append(str(Path(__file__).resolve().parent))

from agents.outfit_session import OutfitSession  # noqa: E402
from agents.safety_analyzer import OutfitSafetyAnalyzer  # noqa: E402
from fakes import FakeGeocoder, FakeReasoningClient, FakeWeatherProvider  # noqa: E402
from memory.accounts import AccountStore  # noqa: E402
from memory.identity import IdentityProvider  # noqa: E402
from models.weather import WeatherSnapshot  # noqa: E402
from tools.location_resolver import LocationResolver  # noqa: E402
from tools.outfit_store import OutfitPersistenceGateway, SQLiteOutfitStore  # noqa: E402


@pytest.fixture()
def cold_weather() -> WeatherSnapshot:
    return WeatherSnapshot(temperature_c=-10.0, condition="Snow", humidity_pct=80, wind_speed_ms=5.0)


@pytest.fixture()
def geocoder() -> FakeGeocoder:
    return FakeGeocoder()


@pytest.fixture()
def weather_provider() -> FakeWeatherProvider:
    return FakeWeatherProvider()


@pytest.fixture()
def reasoning_client() -> FakeReasoningClient:
    return FakeReasoningClient()


@pytest.fixture()
def outfit_store(tmp_path: Path) -> SQLiteOutfitStore:
    return SQLiteOutfitStore(tmp_path / "outfits.db")


@pytest.fixture()
def account_store(tmp_path: Path) -> AccountStore:
    return AccountStore(tmp_path / "accounts.json")


@pytest.fixture()
def session(
    geocoder: FakeGeocoder,
    weather_provider: FakeWeatherProvider,
    reasoning_client: FakeReasoningClient,
    outfit_store: SQLiteOutfitStore,
    account_store: AccountStore,
) -> OutfitSession:
    return OutfitSession(
        session_id="test-session",
        resolver=LocationResolver(geocoder),
        weather_provider=weather_provider,
        analyzer=OutfitSafetyAnalyzer(reasoning_client),
        outfits=OutfitPersistenceGateway(outfit_store),
        identity=IdentityProvider(account_store),
        debounce_seconds=0.05,
    )
