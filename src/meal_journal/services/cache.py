"""Catalog cache abstractions."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol

from meal_journal.domain.meals import CatalogEntry, Serving
from meal_journal.domain.nutrients import NutrientVector


class CatalogCache(Protocol):
    """Key-value store of resolved catalog entries."""

    def get(self, key: str) -> CatalogEntry | None:
        """Return the entry for a lookup key, if present."""

    def set(self, key: str, entry: CatalogEntry) -> None:
        """Store or replace the entry for a lookup key."""


@dataclass
class InMemoryCatalogCache(CatalogCache):
    """Process-local catalog, lost on restart."""

    _entries: dict[str, CatalogEntry]

    def __init__(self, seed: Mapping[str, CatalogEntry] | None = None) -> None:
        self._entries = dict(seed or {})

    def get(self, key: str) -> CatalogEntry | None:
        return self._entries.get(key)

    def set(self, key: str, entry: CatalogEntry) -> None:
        self._entries[key] = entry

    def __len__(self) -> int:
        return len(self._entries)


def seed_catalog() -> dict[str, CatalogEntry]:
    """Return the built-in catalog entries keyed by lookup key."""
    return {
        "egg": CatalogEntry(
            id="food-egg",
            name="Egg, whole",
            serving=Serving(unit="piece", grams=50),
            nutrients=NutrientVector(calories=72, protein_g=6, carbs_g=0.4, fat_g=4.8),
            source="catalog",
        ),
        "toast": CatalogEntry(
            id="food-toast",
            name="Toast, white bread slice",
            serving=Serving(unit="slice", grams=30),
            nutrients=NutrientVector(calories=80, protein_g=3, carbs_g=14, fat_g=1),
            source="catalog",
        ),
    }
