"""Mutable holder for the user's clothing selection with change notification."""

from __future__ import annotations

from typing import Callable, Dict, FrozenSet, Iterable, List

from models.errors import InvalidGarment
from models.outfit import OutfitSelection
from models.taxonomy import LayerCategory, lookup_garment, parse_category

OutfitListener = Callable[[OutfitSelection], None]


def sets_equal(a: FrozenSet[str], b: FrozenSet[str]) -> bool:
    """Membership equality: same size and every element of one is in the other."""

    return len(a) == len(b) and all(value in b for value in a)


class OutfitState:
    """Holds the inner and outer garment-id sets.

    Listeners fire only when a category's membership differs from the last
    notified value, so re-seeding with an identical selection is a no-op.

    With ``strict=True`` ids outside the garment catalog raise
    :class:`InvalidGarment`. A catalog garment toggled under the other
    category always raises, since that would break the inner/outer partition.
    """

    def __init__(self, strict: bool = True) -> None:
        self.strict = strict
        self._layers: Dict[LayerCategory, FrozenSet[str]] = {
            LayerCategory.INNER: frozenset(),
            LayerCategory.OUTER: frozenset(),
        }
        self._notified: Dict[LayerCategory, FrozenSet[str]] = dict(self._layers)
        self._listeners: List[OutfitListener] = []

    @property
    def selection(self) -> OutfitSelection:
        return OutfitSelection(
            inner_layers=self._layers[LayerCategory.INNER],
            outer_layers=self._layers[LayerCategory.OUTER],
        )

    def layers(self, category: str | LayerCategory) -> FrozenSet[str]:
        return self._layers[parse_category(category)]

    def subscribe(self, listener: OutfitListener) -> Callable[[], None]:
        """Register a listener and return a callable that removes it."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def toggle(self, category: str | LayerCategory, garment_id: str) -> OutfitSelection:
        category_key = parse_category(category)
        garment_id = self._check_garment(category_key, garment_id)
        current = self._layers[category_key]
        if garment_id in current:
            updated = current - {garment_id}
        else:
            updated = current | {garment_id}
        self._layers[category_key] = updated
        self._notify_if_changed()
        return self.selection

    def seed(self, inner_layers: Iterable[str] = (), outer_layers: Iterable[str] = ()) -> OutfitSelection:
        """Replace both sets, e.g. from a restored outfit."""

        inner = frozenset(self._check_garment(LayerCategory.INNER, garment_id) for garment_id in inner_layers)
        outer = frozenset(self._check_garment(LayerCategory.OUTER, garment_id) for garment_id in outer_layers)
        self._layers[LayerCategory.INNER] = inner
        self._layers[LayerCategory.OUTER] = outer
        self._notify_if_changed()
        return self.selection

    def clear(self) -> OutfitSelection:
        return self.seed((), ())

    def _check_garment(self, category: LayerCategory, garment_id: str) -> str:
        """Return the canonical id for a garment, rejecting invalid ones."""

        garment = lookup_garment(garment_id)
        if garment is None:
            if self.strict:
                raise InvalidGarment(f"Unknown garment '{garment_id}'")
            return garment_id
        if garment.category is not category:
            raise InvalidGarment(
                f"Garment '{garment_id}' is an {garment.category.value} layer, not {category.value}"
            )
        return garment.garment_id

    def _notify_if_changed(self) -> None:
        changed = [
            category
            for category, layers in self._layers.items()
            if not sets_equal(layers, self._notified[category])
        ]
        if not changed:
            return
        for category in changed:
            self._notified[category] = self._layers[category]
        snapshot = self.selection
        for listener in list(self._listeners):
            listener(snapshot)


__all__ = ["OutfitState", "OutfitListener", "sets_equal"]
