"""Supabase repository for logged meals."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from meal_journal.adapters.supabase_rows import (
    ITEM_COLUMNS,
    MEAL_COLUMNS,
    item_payload,
    meal_payload,
    nutrient_columns,
    parse_item_row,
    parse_meal_row,
)
from meal_journal.domain.meals import Meal, MealItem
from meal_journal.domain.nutrients import NutrientVector
from meal_journal.services.meals import MealLogRepository


HISTORY_CANDIDATES = 20


def _escape_like(value: str) -> str:
    """Escape LIKE metacharacters for a PostgREST ``ilike`` filter.

    PostgREST rewrites every ``*`` to ``%`` with no escape, so ``*`` becomes
    the single-character wildcard and callers must compare names exactly.
    """
    escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return escaped.replace("*", "_")


@dataclass
class SupabaseMealLogRepository(MealLogRepository):
    """Supabase implementation for meals and meal items."""

    client: Client

    def save_meal(self, meal: Meal) -> None:
        """Insert the meal and items and bump the day total in one transaction."""
        response = self.client.rpc(
            "log_meal",
            {
                "p_meal": meal_payload(meal),
                "p_items": [item_payload(item) for item in meal.items],
            },
        ).execute()
        if response.data is None:
            raise RuntimeError("Failed to save meal")

    def get_meal(self, user_id: UUID, meal_id: UUID) -> Meal | None:
        """Return a user's meal with items, if present."""
        response = (
            self.client.table("meals")
            .select(MEAL_COLUMNS)
            .eq("id", str(meal_id))
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_meal_row(response.data[0])

    def update_meal_item(self, item_id: UUID, nutrients: NutrientVector) -> None:
        """Overwrite item nutrients and flag the edit."""
        response = (
            self.client.table("meal_items")
            .update({**nutrient_columns(nutrients), "user_edited": True})
            .eq("id", str(item_id))
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update meal item")

    def update_meal_total(self, meal_id: UUID, total: NutrientVector) -> None:
        """Overwrite the cached meal total."""
        self.client.table("meals").update({"totals": nutrient_columns(total)}).eq(
            "id", str(meal_id)
        ).execute()

    def find_latest_item_by_name(self, name: str) -> MealItem | None:
        """Return the newest item whose name matches exactly, ignoring case."""
        response = (
            self.client.table("meal_items")
            .select(ITEM_COLUMNS)
            .ilike("name", _escape_like(name))
            .order("created_at", desc=True)
            .limit(HISTORY_CANDIDATES)
            .execute()
        )
        wanted = name.lower()
        for row in response.data or []:
            if str(row.get("name") or "").lower() == wanted:
                return parse_item_row(row)
        return None
