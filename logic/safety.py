"""Cold-weather policy rules and the analysis prompt built around them."""

from __future__ import annotations

from typing import List

from models.outfit import OutfitSelection
from models.weather import WeatherSnapshot

SAFETY_RULES: List[str] = [
    "For temperatures below 10°C, always recommend multiple layers",
    "For temperatures below 0°C, require both inner and outer layers",
    "For temperatures below -5°C, require thermal layers and heavy outerwear",
    "Consider wind chill factor when wind speed is above 3 m/s",
    "Consider humidity's effect on perceived temperature",
    "Be very strict about safety in extreme conditions",
]

RESPONSE_SHAPE = """{
  "hypothermiaRisk": "Risk Level (High/Medium/Low): detailed explanation including wind chill and humidity factors",
  "frostbiteRisk": "Risk Level (High/Medium/Low): detailed explanation including exposure time considerations",
  "safeExposure": "Maximum recommended exposure time with current clothing",
  "improvements": ["specific clothing recommendation 1", "specific clothing recommendation 2", "etc"]
}"""


def layer_lines(outfit: OutfitSelection) -> List[str]:
    """Render the two layer lists, each ``None`` when empty."""

    return [
        f"Inner Layers: {outfit.describe_inner()}",
        f"Outer Layers: {outfit.describe_outer()}",
    ]


def build_analysis_prompt(city: str, weather: WeatherSnapshot, outfit: OutfitSelection) -> str:
    """Compose the single free-text request sent to the reasoning service."""

    rules = "\n".join(f"{index}. {rule}" for index, rule in enumerate(SAFETY_RULES, start=1))
    clothing = "\n".join(layer_lines(outfit))
    return (
        "You are a highly accurate weather safety and clothing recommendation system. "
        "Analyze the following weather and clothing combination with extreme attention "
        "to safety and appropriate clothing layers:\n\n"
        f"City: {city}\n"
        "Weather Conditions:\n"
        f"- Temperature: {weather.temperature_c}°C\n"
        f"- Condition: {weather.condition}\n"
        f"- Humidity: {weather.humidity_pct}%\n"
        f"- Wind Speed: {weather.wind_speed_ms:.1f} m/s\n\n"
        "Current Clothing:\n"
        f"{clothing}\n\n"
        "Provide a detailed safety analysis following these strict guidelines:\n"
        f"{rules}\n\n"
        "Return ONLY a JSON object with this EXACT structure (no other text):\n"
        f"{RESPONSE_SHAPE}"
    )


__all__ = ["SAFETY_RULES", "RESPONSE_SHAPE", "layer_lines", "build_analysis_prompt"]
