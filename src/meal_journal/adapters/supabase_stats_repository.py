"""Supabase repository for daily statistics."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from supabase import Client

from meal_journal.adapters.supabase_rows import (
    MEAL_COLUMNS,
    nutrient_columns,
    parse_meal_row,
)
from meal_journal.domain.meals import Meal
from meal_journal.domain.nutrients import NUTRIENT_KEYS, normalize
from meal_journal.domain.stats import DailyTotal
from meal_journal.services.stats import StatsRepository


@dataclass
class SupabaseStatsRepository(StatsRepository):
    """Supabase implementation for stats queries."""

    client: Client

    def list_meals_in_range(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[Meal]:
        """Return meals in the time range, newest first."""
        response = (
            self.client.table("meals")
            .select(MEAL_COLUMNS)
            .eq("user_id", str(user_id))
            .gte("consumed_at", start.isoformat())
            .lt("consumed_at", end.isoformat())
            .order("consumed_at", desc=True)
            .execute()
        )
        return [parse_meal_row(row) for row in response.data or []]

    def upsert_daily_total(self, total: DailyTotal) -> None:
        """Overwrite the stored total for a user and day."""
        self.client.table("daily_totals").upsert(
            {
                "user_id": str(total.user_id),
                "date": total.day.isoformat(),
                **nutrient_columns(total.nutrients),
            },
            on_conflict="user_id,date",
        ).execute()

    def list_daily_totals(
        self, user_id: UUID, start: date, end: date
    ) -> list[DailyTotal]:
        """Return stored totals between two dates, inclusive, ascending."""
        response = (
            self.client.table("daily_totals")
            .select("user_id, date, " + ", ".join(NUTRIENT_KEYS))
            .eq("user_id", str(user_id))
            .gte("date", start.isoformat())
            .lte("date", end.isoformat())
            .order("date", desc=False)
            .execute()
        )
        return [_parse_daily_row(row) for row in response.data or []]


def _parse_daily_row(row: dict[str, object]) -> DailyTotal:
    return DailyTotal(
        user_id=UUID(str(row["user_id"])),
        day=date.fromisoformat(str(row["date"])),
        nutrients=normalize({key: row.get(key) for key in NUTRIENT_KEYS}),
    )
