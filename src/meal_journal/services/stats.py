"""Daily statistics over local-day windows."""

from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import Protocol
from uuid import UUID

from meal_journal.domain.errors import InvalidDateError, MissingRangeStartError
from meal_journal.domain.meals import Meal
from meal_journal.domain.nutrients import total_of
from meal_journal.domain.stats import DailyTotal, DayView


class StatsRepository(Protocol):
    """Persistence interface for daily statistics."""

    def list_meals_in_range(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[Meal]:
        """Return meals with ``start <= consumed_at < end``, items included."""

    def upsert_daily_total(self, total: DailyTotal) -> None:
        """Overwrite the stored total for the user and day."""

    def list_daily_totals(
        self, user_id: UUID, start: date, end: date
    ) -> list[DailyTotal]:
        """Return stored totals for days in ``[start, end]``, ascending."""


def parse_local_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` string."""
    try:
        return date.fromisoformat(value.strip())
    except (AttributeError, ValueError) as exc:
        raise InvalidDateError(f"Invalid date: {value!r}") from exc


def local_day_window(day: date, tz_offset_minutes: int) -> tuple[datetime, datetime]:
    """Return the UTC instants bounding a local day.

    The offset is minutes west of UTC, so 300 means UTC-5 and the local day
    starts at 05:00Z.
    """
    midnight = datetime(day.year, day.month, day.day, tzinfo=UTC)
    start = midnight + timedelta(minutes=tz_offset_minutes)
    return start, start + timedelta(days=1)


def local_today(tz_offset_minutes: int, now: datetime | None = None) -> date:
    """Return the caller's local date for the given offset."""
    current = now or datetime.now(tz=UTC)
    return (current.astimezone(UTC) - timedelta(minutes=tz_offset_minutes)).date()


@dataclass
class StatsService:
    """Service for computing and persisting daily totals."""

    repository: StatsRepository

    def recompute_day(
        self, user_id: UUID, day: date, tz_offset_minutes: int
    ) -> DailyTotal:
        """Recompute a day's total from its meals and store it."""
        start, end = local_day_window(day, tz_offset_minutes)
        meals = self.repository.list_meals_in_range(user_id, start, end)
        total = DailyTotal(
            user_id=user_id, day=day, nutrients=total_of(meal.total for meal in meals)
        )
        self.repository.upsert_daily_total(total)
        return total

    def get_day(
        self, user_id: UUID, day: str | None, tz_offset_minutes: int
    ) -> DayView:
        """Return a local day's meals, newest first, with totals computed live."""
        resolved_day = parse_local_date(day) if day else local_today(tz_offset_minutes)
        start, end = local_day_window(resolved_day, tz_offset_minutes)
        meals = sorted(
            self.repository.list_meals_in_range(user_id, start, end),
            key=lambda meal: meal.consumed_at,
            reverse=True,
        )
        total = DailyTotal(
            user_id=user_id,
            day=resolved_day,
            nutrients=total_of(meal.total for meal in meals),
        )
        return DayView(total=total, meals=meals)

    def get_range(
        self,
        user_id: UUID,
        start: str | None,
        end: str | None,
        tz_offset_minutes: int,
    ) -> list[DailyTotal]:
        """Return stored daily totals between two local dates, inclusive."""
        if not start:
            raise MissingRangeStartError()
        start_day = parse_local_date(start)
        end_day = parse_local_date(end) if end else local_today(tz_offset_minutes)
        return self.repository.list_daily_totals(user_id, start_day, end_day)
