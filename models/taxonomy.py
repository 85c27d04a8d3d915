"""Canonical garment catalog.

Every garment belongs to exactly one layer category. The two namespaces are
fixed here and never overlap, which is what keeps an outfit's inner and outer
selections disjoint.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional


class LayerCategory(str, Enum):
    INNER = "inner"
    OUTER = "outer"


class Garment(Enum):
    """Closed set of selectable garments with their display metadata."""

    UNDERSHIRT = ("undershirt", "Undershirt", LayerCategory.INNER)
    THERMALS = ("thermals", "Thermals", LayerCategory.INNER)
    UNDERPANTS = ("underpants", "Underpants", LayerCategory.INNER)
    SOCKS = ("socks", "Socks", LayerCategory.INNER)
    VEST = ("vest", "Thermal Vest", LayerCategory.INNER)
    HOODIE = ("hoodie", "Hoodie", LayerCategory.OUTER)
    JEANS = ("jeans", "Jeans", LayerCategory.OUTER)
    TSHIRT = ("tshirt", "T-Shirt", LayerCategory.OUTER)

    def __init__(self, garment_id: str, display_name: str, category: LayerCategory) -> None:
        self.garment_id = garment_id
        self.display_name = display_name
        self.category = category


CATALOG: Dict[str, Garment] = {garment.garment_id: garment for garment in Garment}


def _normalize_key(value: str) -> str:
    """Normalise a free-form string into a catalog key."""

    return value.strip().lower().replace(" ", "_")


def parse_category(value: str | LayerCategory) -> LayerCategory:
    """Validate and normalise a layer category.

    Raises a :class:`ValueError` if the category is not ``inner`` or ``outer``.
    """

    if isinstance(value, LayerCategory):
        return value
    key = _normalize_key(value)
    try:
        return LayerCategory(key)
    except ValueError:
        allowed = [category.value for category in LayerCategory]
        raise ValueError(f"Unsupported layer category '{value}'. Allowed: {allowed}") from None


def lookup_garment(garment_id: str) -> Optional[Garment]:
    return CATALOG.get(_normalize_key(garment_id))


def garments_for(category: str | LayerCategory) -> List[Garment]:
    category_key = parse_category(category)
    return [garment for garment in Garment if garment.category is category_key]


def display_name(garment_id: str) -> str:
    """Human-readable name for a garment id; unknown ids render as given."""

    garment = lookup_garment(garment_id)
    return garment.display_name if garment else garment_id


__all__ = [
    "LayerCategory",
    "Garment",
    "CATALOG",
    "parse_category",
    "lookup_garment",
    "garments_for",
    "display_name",
]
