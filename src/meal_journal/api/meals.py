"""Meal and daily statistics endpoints with bearer token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Header, Query, Request

from meal_journal.api.models import (
    MAX_TZ_OFFSET_MINUTES,
    CreateMealRequest,
    MealItemUpdateRequest,
)
from meal_journal.domain.errors import InvalidTokenError, UnauthorizedError

if TYPE_CHECKING:
    from meal_journal.containers import AppContainer
    from meal_journal.domain.meals import Meal, MealItem
    from meal_journal.domain.stats import DailyTotal

router = APIRouter(prefix="/api", tags=["meals"])

_BEARER_PREFIX = "bearer "


async def require_user(
    request: Request, authorization: str | None = Header(default=None)
) -> UUID:
    """Resolve the bearer token to a user id."""
    container: AppContainer = request.app.state.container
    if not authorization or not authorization.lower().startswith(_BEARER_PREFIX):
        raise UnauthorizedError()
    token = authorization[len(_BEARER_PREFIX) :].strip()
    if not token:
        raise UnauthorizedError()
    user_id = container.token_verifier.verify(token)
    if user_id is None:
        raise InvalidTokenError()
    return user_id


@router.post("/meals")
async def create_meal(
    payload: CreateMealRequest,
    request: Request,
    user_id: UUID = Depends(require_user),
) -> dict[str, object]:
    """Log a meal from a free-text description."""
    container: AppContainer = request.app.state.container
    created = await container.meal_log_service.create_meal(
        user_id=user_id,
        text=payload.text,
        meal_type=payload.meal_type,
        consumed_at=payload.consumed_at,
        client_date=payload.client_date_str,
        tz_offset_minutes=payload.tz_offset_minutes,
    )
    return {"meal": _meal_payload(created.meal), "day": _day_payload(created.day)}


@router.patch("/meals/{meal_id}/items/{item_id}")
async def edit_meal_item(
    meal_id: UUID,
    item_id: UUID,
    payload: MealItemUpdateRequest,
    request: Request,
    user_id: UUID = Depends(require_user),
) -> dict[str, object]:
    """Overwrite an item's nutrients and return the new meal totals."""
    container: AppContainer = request.app.state.container
    total = container.meal_log_service.edit_meal_item(
        user_id=user_id,
        meal_id=meal_id,
        item_id=item_id,
        values=payload.model_dump(),
    )
    return {"ok": True, "mealTotals": total.to_dict()}


@router.get("/daily")
async def get_daily(
    request: Request,
    date: str | None = None,
    tz_offset_minutes: int = Query(
        default=0,
        alias="tzOffsetMinutes",
        ge=-MAX_TZ_OFFSET_MINUTES,
        le=MAX_TZ_OFFSET_MINUTES,
    ),
    user_id: UUID = Depends(require_user),
) -> dict[str, object]:
    """Return a local day's meals and live totals."""
    container: AppContainer = request.app.state.container
    view = container.stats_service.get_day(user_id, date, tz_offset_minutes)
    return {
        "day": _day_payload(view.total),
        "meals": [_meal_payload(meal) for meal in view.meals],
    }


@router.get("/days")
async def get_days(
    request: Request,
    start: str | None = None,
    end: str | None = None,
    tz_offset_minutes: int = Query(
        default=0,
        alias="tzOffsetMinutes",
        ge=-MAX_TZ_OFFSET_MINUTES,
        le=MAX_TZ_OFFSET_MINUTES,
    ),
    user_id: UUID = Depends(require_user),
) -> dict[str, object]:
    """Return stored daily totals for a date range."""
    container: AppContainer = request.app.state.container
    days = container.stats_service.get_range(user_id, start, end, tz_offset_minutes)
    return {"days": [_day_payload(day) for day in days]}


def _item_payload(item: MealItem) -> dict[str, object]:
    return {
        "id": str(item.id),
        "foodId": item.food_id,
        "name": item.name,
        "quantity": item.quantity,
        "unit": item.unit,
        "grams": item.grams,
        "nutrients": item.nutrients.to_dict(),
        "source": item.source,
        "userEdited": item.user_edited,
    }


def _meal_payload(meal: Meal) -> dict[str, object]:
    return {
        "id": str(meal.id),
        "userId": str(meal.user_id),
        "mealType": meal.meal_type.value,
        "consumedAt": meal.consumed_at.isoformat(),
        "text": meal.text,
        "localDate": meal.local_date.isoformat(),
        "tzOffsetMinutes": meal.tz_offset_minutes,
        "items": [_item_payload(item) for item in meal.items],
        "total": meal.total.to_dict(),
    }


def _day_payload(day: DailyTotal) -> dict[str, object]:
    return {
        "userId": str(day.user_id),
        "date": day.day.isoformat(),
        **day.nutrients.to_dict(),
    }
