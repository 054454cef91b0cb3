"""Row mapping shared by the Supabase repositories."""

from datetime import UTC, date, datetime
from uuid import UUID

from meal_journal.domain.meals import Meal, MealItem, MealType, meal_total
from meal_journal.domain.nutrients import NUTRIENT_KEYS, NutrientVector, normalize

MEAL_COLUMNS = (
    "id, user_id, meal_type, consumed_at, text, local_date, tz_offset_minutes, "
    "meal_items(*)"
)
ITEM_COLUMNS = (
    "id, food_id, name, quantity, unit, grams, source, user_edited, "
    + ", ".join(NUTRIENT_KEYS)
)


def nutrient_columns(nutrients: NutrientVector) -> dict[str, float]:
    return nutrients.to_dict()


def item_payload(item: MealItem) -> dict[str, object]:
    """Serialize an item for insertion."""
    return {
        "id": str(item.id),
        "food_id": item.food_id,
        "name": item.name,
        "quantity": item.quantity,
        "unit": item.unit,
        "grams": item.grams,
        "source": item.source,
        "user_edited": item.user_edited,
        **nutrient_columns(item.nutrients),
    }


def meal_payload(meal: Meal) -> dict[str, object]:
    """Serialize a meal header for insertion."""
    return {
        "id": str(meal.id),
        "user_id": str(meal.user_id),
        "meal_type": meal.meal_type.value,
        "consumed_at": meal.consumed_at.isoformat(),
        "text": meal.text,
        "local_date": meal.local_date.isoformat(),
        "tz_offset_minutes": meal.tz_offset_minutes,
        "totals": nutrient_columns(meal.total),
    }


def parse_timestamp(value: object) -> datetime:
    if isinstance(value, str) and value:
        parsed = datetime.fromisoformat(value)
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    return datetime.min.replace(tzinfo=UTC)


def parse_item_row(row: dict[str, object]) -> MealItem:
    return MealItem(
        id=UUID(str(row["id"])),
        food_id=str(row.get("food_id") or ""),
        name=str(row.get("name") or ""),
        quantity=float(row.get("quantity") or 1.0),
        unit=str(row.get("unit") or "serving"),
        grams=float(row.get("grams") or 0.0),
        nutrients=normalize({key: row.get(key) for key in NUTRIENT_KEYS}),
        source=str(row.get("source") or ""),
        user_edited=bool(row.get("user_edited", False)),
    )


def parse_meal_row(row: dict[str, object]) -> Meal:
    """Map a meal row with embedded items; the total is summed from items."""
    item_rows = row.get("meal_items") or []
    items = [parse_item_row(item) for item in item_rows if isinstance(item, dict)]
    local_date_raw = row.get("local_date")
    consumed_at = parse_timestamp(row.get("consumed_at"))
    return Meal(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        meal_type=MealType(str(row.get("meal_type") or MealType.SNACK.value)),
        consumed_at=consumed_at,
        text=str(row.get("text") or ""),
        local_date=(
            date.fromisoformat(local_date_raw)
            if isinstance(local_date_raw, str) and local_date_raw
            else consumed_at.date()
        ),
        tz_offset_minutes=int(row.get("tz_offset_minutes") or 0),
        items=items,
        total=meal_total(items),
    )
