"""Location and weather value objects."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict

KPH_PER_MS = 3.6

_CONDITION_ICONS = {
    "Clear": "sun",
    "Sunny": "sun",
    "PartlyCloudy": "cloud",
    "Cloudy": "cloud",
    "Overcast": "cloud",
    "Rain": "rain",
    "LightRain": "rain",
    "ModerateRain": "rain",
    "HeavyRain": "rain",
    "Snow": "cloud",
}


@dataclass(frozen=True)
class LocationCandidate:
    """One geocoding match offered as a suggestion."""

    name: str
    country: str
    lat: float
    lon: float

    @property
    def label(self) -> str:
        return f"{self.name}, {self.country}" if self.country else self.name

    def to_location(self) -> "Location":
        return Location(name=self.name, lat=self.lat, lng=self.lon)


@dataclass(frozen=True)
class Location:
    """The confirmed geocoded point driving weather and analysis."""

    name: str
    lat: float
    lng: float

    @property
    def query(self) -> str:
        return f"{self.lat},{self.lng}"


@dataclass(frozen=True)
class WeatherSnapshot:
    """Normalised current weather for one location."""

    temperature_c: float
    condition: str
    humidity_pct: int
    wind_speed_ms: float

    def __post_init__(self) -> None:
        if not 0 <= self.humidity_pct <= 100:
            raise ValueError(f"humidity_pct must be within [0, 100], got {self.humidity_pct}")
        if self.wind_speed_ms < 0:
            raise ValueError(f"wind_speed_ms must be >= 0, got {self.wind_speed_ms}")

    @property
    def icon(self) -> str:
        return condition_icon(self.condition)

    def summary(self) -> str:
        return (
            f"{self.temperature_c}°C, {self.condition}, "
            f"Humidity: {self.humidity_pct}%, Wind: {self.wind_speed_ms:.1f} m/s"
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "WeatherSnapshot":
        return cls(
            temperature_c=float(payload["temperature_c"]),
            condition=str(payload["condition"]),
            humidity_pct=int(payload["humidity_pct"]),
            wind_speed_ms=float(payload["wind_speed_ms"]),
        )


def kph_to_ms(speed_kph: float) -> float:
    return speed_kph / KPH_PER_MS


def condition_icon(condition: str) -> str:
    """Map provider condition text to a display icon tag."""

    key = "".join(condition.split())
    return _CONDITION_ICONS.get(key, "cloud")


__all__ = [
    "LocationCandidate",
    "Location",
    "WeatherSnapshot",
    "kph_to_ms",
    "condition_icon",
]
