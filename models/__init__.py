"""Model package exports."""

from models.errors import *  # noqa: F401,F403
from models.outfit import OutfitSelection, SavedOutfitRecord
from models.risk_report import RiskReport
from models.taxonomy import CATALOG, Garment, LayerCategory
from models.weather import Location, LocationCandidate, WeatherSnapshot

__all__ = [
    "CATALOG",
    "Garment",
    "LayerCategory",
    "Location",
    "LocationCandidate",
    "OutfitSelection",
    "RiskReport",
    "SavedOutfitRecord",
    "WeatherSnapshot",
]
