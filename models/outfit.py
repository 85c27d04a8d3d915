"""Outfit selection and saved outfit schemas."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import FrozenSet, List

from models.taxonomy import display_name
from models.weather import WeatherSnapshot


@dataclass(frozen=True)
class OutfitSelection:
    """Immutable snapshot of the two garment-id sets."""

    inner_layers: FrozenSet[str] = frozenset()
    outer_layers: FrozenSet[str] = frozenset()

    @property
    def is_empty(self) -> bool:
        return not self.inner_layers and not self.outer_layers

    def describe_inner(self) -> str:
        return _describe(self.inner_layers)

    def describe_outer(self) -> str:
        return _describe(self.outer_layers)


def _describe(layers: FrozenSet[str]) -> str:
    if not layers:
        return "None"
    return ", ".join(display_name(garment_id) for garment_id in sorted(layers))


@dataclass
class SavedOutfitRecord:
    """A persisted (city, weather, outfit) combination owned by one user."""

    id: str
    user_id: str
    city: str
    weather: WeatherSnapshot
    inner_layers: List[str] = field(default_factory=list)
    outer_layers: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def selection(self) -> OutfitSelection:
        return OutfitSelection(frozenset(self.inner_layers), frozenset(self.outer_layers))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "city": self.city,
            "weather": self.weather.to_dict(),
            "inner_layers": list(self.inner_layers),
            "outer_layers": list(self.outer_layers),
            "created_at": self.created_at.isoformat(),
        }


__all__ = ["OutfitSelection", "SavedOutfitRecord"]
