"""Meal logging service."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol
from uuid import UUID, uuid4

from meal_journal.domain.errors import (
    EmptyMealTextError,
    MealItemNotFoundError,
    MealNotFoundError,
    NoFoodsIdentifiedError,
)
from meal_journal.domain.meals import (
    MEAL_TYPE_UNSPECIFIED,
    FoodMention,
    Meal,
    MealItem,
    MealType,
    meal_total,
)
from meal_journal.domain.nutrients import NutrientVector, normalize, scale
from meal_journal.domain.stats import DailyTotal, MealCreated
from meal_journal.services.extractor import FoodExtractor
from meal_journal.services.resolver import FoodResolver, display_name
from meal_journal.services.stats import StatsService, parse_local_date

_logger = logging.getLogger(__name__)

BREAKFAST_BEFORE_HOUR = 11
LUNCH_BEFORE_HOUR = 17


class MealLogRepository(Protocol):
    """Persistence interface for logged meals."""

    def save_meal(self, meal: Meal) -> None:
        """Store the meal, its items and the day's increment atomically."""

    def get_meal(self, user_id: UUID, meal_id: UUID) -> Meal | None:
        """Return a user's meal with its items, if present."""

    def update_meal_item(self, item_id: UUID, nutrients: NutrientVector) -> None:
        """Replace an item's nutrients and mark it as user edited."""

    def update_meal_total(self, meal_id: UUID, total: NutrientVector) -> None:
        """Replace the cached meal total."""

    def find_latest_item_by_name(self, name: str) -> MealItem | None:
        """Return the most recent item with a matching name."""


def resolve_meal_type(
    explicit: str | None, text: str, consumed_at: datetime
) -> MealType:
    """Use the explicit type, else a keyword in the text, else the UTC hour."""
    if explicit and explicit.lower() != MEAL_TYPE_UNSPECIFIED:
        try:
            return MealType(explicit.lower())
        except ValueError:
            _logger.warning("Ignoring unknown meal type %r", explicit)
    lowered = text.lower()
    for meal_type in MealType:
        if meal_type.value in lowered:
            return meal_type
    hour = consumed_at.astimezone(UTC).hour
    if hour < BREAKFAST_BEFORE_HOUR:
        return MealType.BREAKFAST
    if hour < LUNCH_BEFORE_HOUR:
        return MealType.LUNCH
    return MealType.DINNER


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


@dataclass
class MealLogService:
    """Service that turns meal descriptions into persisted meals."""

    extractor: FoodExtractor
    resolver: FoodResolver
    repository: MealLogRepository
    stats_service: StatsService

    async def create_meal(  # noqa: PLR0913
        self,
        user_id: UUID,
        text: str,
        meal_type: str | None = None,
        consumed_at: datetime | None = None,
        client_date: str | None = None,
        tz_offset_minutes: int = 0,
    ) -> MealCreated:
        """Extract, resolve and persist a meal, then refresh its day."""
        if not text or not text.strip():
            raise EmptyMealTextError()
        consumed = _as_utc(consumed_at or datetime.now(tz=UTC))
        local_date = (
            parse_local_date(client_date)
            if client_date
            else (consumed - timedelta(minutes=tz_offset_minutes)).date()
        )

        mentions = await self.extractor.extract(text)
        if not mentions:
            raise NoFoodsIdentifiedError(
                "Could not identify any foods in that description."
            )
        items = [await self._build_item(mention) for mention in mentions]

        meal = Meal(
            id=uuid4(),
            user_id=user_id,
            meal_type=resolve_meal_type(meal_type, text, consumed),
            consumed_at=consumed,
            text=text.strip(),
            local_date=local_date,
            tz_offset_minutes=tz_offset_minutes,
            items=items,
            total=meal_total(items),
        )
        self.repository.save_meal(meal)
        _logger.info(
            "Logged meal %s with %s items for %s", meal.id, len(items), local_date
        )

        try:
            day = self.stats_service.recompute_day(
                user_id, local_date, tz_offset_minutes
            )
        except Exception:
            _logger.exception("Failed to recompute daily total for %s", local_date)
            day = DailyTotal(user_id=user_id, day=local_date, nutrients=meal.total)
        return MealCreated(meal=meal, day=day)

    def edit_meal_item(
        self,
        user_id: UUID,
        meal_id: UUID,
        item_id: UUID,
        values: Mapping[str, object],
    ) -> NutrientVector:
        """Overwrite an item's nutrients and return the new meal total."""
        meal = self.repository.get_meal(user_id, meal_id)
        if meal is None:
            raise MealNotFoundError()
        if not any(item.id == item_id for item in meal.items):
            raise MealItemNotFoundError()

        self.repository.update_meal_item(item_id, normalize(values))
        refreshed = self.repository.get_meal(user_id, meal_id)
        total = meal_total(refreshed.items if refreshed else [])
        self.repository.update_meal_total(meal_id, total)
        self.stats_service.recompute_day(
            user_id, meal.local_date, meal.tz_offset_minutes
        )
        return total

    async def _build_item(self, mention: FoodMention) -> MealItem:
        entry = await self.resolver.resolve(mention)
        quantity = mention.quantity if mention.quantity > 0 else 1.0
        return MealItem(
            id=uuid4(),
            food_id=entry.id,
            name=display_name(mention),
            quantity=quantity,
            unit=mention.unit or entry.serving.unit,
            grams=quantity * entry.serving.grams,
            nutrients=scale(entry.nutrients, quantity),
            source=entry.source,
        )
