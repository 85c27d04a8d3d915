"""Weather provider abstractions and implementations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict

import httpx
from pydantic import BaseModel, Field, ValidationError

from models.errors import MalformedResponse, TransportError
from models.weather import Location, WeatherSnapshot, kph_to_ms
from tools.observability import instrument_call
from weatherwear_app.logging_config import get_logger


LOGGER = get_logger(__name__)


class _Condition(BaseModel):
    text: str


class _Current(BaseModel):
    temp_c: float
    condition: _Condition
    humidity: int = Field(ge=0, le=100)
    wind_kph: float = Field(ge=0)


class _CurrentResponse(BaseModel):
    current: _Current


class WeatherProvider(ABC):
    """Abstract current-weather provider."""

    @abstractmethod
    async def fetch(self, location: Location) -> WeatherSnapshot:
        """Return the current weather snapshot for a confirmed location."""


class WeatherApiProvider(WeatherProvider):
    """weatherapi.com ``current.json`` client with schema validation.

    Non-success statuses and network failures raise :class:`TransportError`;
    there is no fallback profile so a failed fetch leaves no weather shown.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = "https://api.weatherapi.com/v1",
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout_seconds, transport=self.transport)

    @instrument_call("weather.fetch")
    async def fetch(self, location: Location) -> WeatherSnapshot:
        params = {"key": self.api_key or "", "q": location.query, "aqi": "no"}
        payload = await self._get_json("/current.json", params)
        try:
            parsed = _CurrentResponse.model_validate(payload)
        except ValidationError as exc:
            LOGGER.error("Weather payload schema validation failed", exc_info=exc)
            raise MalformedResponse("Unexpected weather payload") from exc

        current = parsed.current
        try:
            return WeatherSnapshot(
                temperature_c=current.temp_c,
                condition=current.condition.text,
                humidity_pct=current.humidity,
                wind_speed_ms=kph_to_ms(current.wind_kph),
            )
        except ValueError as exc:
            raise MalformedResponse(f"Unexpected weather payload: {exc}") from exc

    async def _get_json(self, path: str, params: Dict[str, Any]) -> Any:
        async with self._client() as client:
            try:
                response = await client.get(f"{self.base_url}{path}", params=params)
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                raise TransportError(
                    f"Failed to fetch weather data (status {exc.response.status_code})"
                ) from exc
            except httpx.HTTPError as exc:
                raise TransportError("Failed to fetch weather data") from exc
        try:
            return response.json()
        except ValueError as exc:
            raise MalformedResponse("Weather response is not JSON") from exc


class MockWeatherProvider(WeatherProvider):
    """Offline deterministic weather provider for tests and local runs."""

    def __init__(self, snapshot: WeatherSnapshot | None = None) -> None:
        self.snapshot = snapshot or WeatherSnapshot(
            temperature_c=4.0,
            condition="Overcast",
            humidity_pct=75,
            wind_speed_ms=3.5,
        )
        self.calls: list[Location] = []

    async def fetch(self, location: Location) -> WeatherSnapshot:
        LOGGER.info("Returning mock weather", extra={"city": location.name})
        self.calls.append(location)
        return self.snapshot


__all__ = ["WeatherProvider", "WeatherApiProvider", "MockWeatherProvider"]
