"""Precondition checks and risk report parsing."""

from __future__ import annotations

import json
import re
from typing import Any, Dict, Optional

from pydantic import ValidationError as SchemaError

from models.errors import EmptySelection, MalformedResponse, MissingLocation
from models.outfit import OutfitSelection
from models.risk_report import RiskReport
from models.weather import Location, WeatherSnapshot

_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*|\s*```$")


def ensure_ready_for_analysis(
    location: Optional[Location],
    weather: Optional[WeatherSnapshot],
    outfit: OutfitSelection,
) -> None:
    """Refuse analysis unless location, weather and at least one garment exist."""

    if location is None or weather is None:
        raise MissingLocation()
    if outfit.is_empty:
        raise EmptySelection()


def strip_code_fences(text: str) -> str:
    """Remove a leading ```json and trailing ``` wrapper if present."""

    return _FENCE_PATTERN.sub("", text.strip())


def decode_report_payload(text: str) -> Dict[str, Any]:
    cleaned = strip_code_fences(text)
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise MalformedResponse(f"Analysis response is not valid JSON: {exc.msg}") from exc
    if not isinstance(payload, dict):
        raise MalformedResponse("Analysis response must be a single JSON object")
    return payload


def parse_risk_report(text: str) -> RiskReport:
    """Decode and validate a reasoning response into a :class:`RiskReport`.

    Raises :class:`MalformedResponse` for non-JSON text or a missing or
    mistyped field.
    """

    payload = decode_report_payload(text)
    try:
        return RiskReport.model_validate(payload)
    except SchemaError as exc:
        fields = sorted({str(error["loc"][0]) for error in exc.errors() if error.get("loc")})
        raise MalformedResponse(
            f"Invalid analysis data structure: {', '.join(fields) or 'unknown field'}"
        ) from exc


__all__ = [
    "ensure_ready_for_analysis",
    "strip_code_fences",
    "decode_report_payload",
    "parse_risk_report",
]
