"""Outfit safety analyzer: weather + clothing in, validated risk report out."""

from __future__ import annotations

import logging

from logic.safety import build_analysis_prompt
from logic.validation import parse_risk_report
from models.errors import EmptySelection
from models.outfit import OutfitSelection
from models.risk_report import RiskReport
from models.weather import WeatherSnapshot
from tools.reasoning_client import DETERMINISTIC, GenerationSettings, ReasoningClient
from weatherwear_app.logging_config import get_logger, log_event, operation_context


LOGGER = get_logger(__name__)


class OutfitSafetyAnalyzer:
    """Asks the reasoning service for a hypothermia/frostbite assessment.

    Every call builds a fresh prompt and makes exactly one remote request;
    nothing is cached and failures are never retried. ``TransportError``,
    ``UpstreamError`` and ``MalformedResponse`` propagate to the caller.
    """

    def __init__(self, client: ReasoningClient, settings: GenerationSettings = DETERMINISTIC) -> None:
        self.client = client
        self.settings = settings

    async def analyze(self, city: str, weather: WeatherSnapshot, outfit: OutfitSelection) -> RiskReport:
        if outfit.is_empty:
            raise EmptySelection()

        with operation_context("agent:safety_analyzer.analyze", city=city, temperature_c=weather.temperature_c):
            prompt = build_analysis_prompt(city, weather, outfit)
            log_event(
                LOGGER,
                level=logging.INFO,
                event="analysis_requested",
                inner_count=len(outfit.inner_layers),
                outer_count=len(outfit.outer_layers),
            )

            text = await self.client.generate(prompt, self.settings)
            report = parse_risk_report(text)

            log_event(
                LOGGER,
                level=logging.INFO,
                event="analysis_completed",
                improvement_count=len(report.improvements),
            )
            return report


__all__ = ["OutfitSafetyAnalyzer"]
