"""Domain models for meal logging."""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum
from uuid import UUID

from meal_journal.domain.nutrients import NutrientVector, total_of


class MealType(StrEnum):
    """Meal categories a logged meal can fall into."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


MEAL_TYPE_UNSPECIFIED = "unspecified"


@dataclass(frozen=True)
class FoodMention:
    """A food reference extracted from free text."""

    food: str
    brand: str | None = None
    quantity: float = 1.0
    unit: str = "serving"


@dataclass(frozen=True)
class Serving:
    unit: str
    grams: float


@dataclass(frozen=True)
class CatalogEntry:
    """Per-serving nutrient record for a resolved food."""

    id: str
    name: str
    serving: Serving
    nutrients: NutrientVector
    source: str

    @property
    def is_fallback(self) -> bool:
        """Whether the nutrients came from a degraded estimate."""
        return "fallback" in self.source


@dataclass(frozen=True)
class MealItem:
    """A food line on a logged meal, scaled by quantity."""

    id: UUID
    food_id: str
    name: str
    quantity: float
    unit: str
    grams: float
    nutrients: NutrientVector
    source: str
    user_edited: bool = False


@dataclass(frozen=True)
class Meal:
    """Logged meal with its items and cached total."""

    id: UUID
    user_id: UUID
    meal_type: MealType
    consumed_at: datetime
    text: str
    local_date: date
    tz_offset_minutes: int
    items: list[MealItem]
    total: NutrientVector


def meal_total(items: Iterable[MealItem]) -> NutrientVector:
    """Sum item nutrients into a meal total."""
    return total_of(item.nutrients for item in items)
