"""Domain models for daily statistics."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from meal_journal.domain.meals import Meal
from meal_journal.domain.nutrients import NutrientVector


@dataclass(frozen=True)
class DailyTotal:
    """Nutrient totals for one user on one local date."""

    user_id: UUID
    day: date
    nutrients: NutrientVector


@dataclass(frozen=True)
class DayView:
    """A local day with its meals, newest first."""

    total: DailyTotal
    meals: list[Meal]


@dataclass(frozen=True)
class MealCreated:
    """Result of logging a meal: the meal and its refreshed day."""

    meal: Meal
    day: DailyTotal
