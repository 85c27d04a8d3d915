"""Risk report schema returned by the outfit safety analysis."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RiskReport(BaseModel):
    """Structured hypothermia/frostbite assessment for one outfit.

    Field aliases match the JSON keys the reasoning service is asked to emit.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    hypothermia_risk: str = Field(alias="hypothermiaRisk", min_length=1)
    frostbite_risk: str = Field(alias="frostbiteRisk", min_length=1)
    safe_exposure: str = Field(alias="safeExposure", min_length=1)
    improvements: List[str] = Field(alias="improvements")

    @field_validator("hypothermia_risk", "frostbite_risk", "safe_exposure", mode="before")
    @classmethod
    def _require_text(cls, value: object) -> object:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("must be a non-empty string")
        return value

    @field_validator("improvements", mode="before")
    @classmethod
    def _require_sequence(cls, value: object) -> object:
        if not isinstance(value, list):
            raise ValueError("improvements must be a JSON array")
        if not all(isinstance(item, str) for item in value):
            raise ValueError("improvements must contain only strings")
        return value

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)


__all__ = ["RiskReport"]
