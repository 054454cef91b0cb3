"""Pydantic models for API request bodies."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# UTC-14:00 to UTC+14:00, in Date.getTimezoneOffset minutes.
MAX_TZ_OFFSET_MINUTES = 840

MealTypeName = Literal["breakfast", "lunch", "dinner", "snack", "unspecified"]


class CreateMealRequest(BaseModel):
    """Body for logging a meal from free text."""

    model_config = ConfigDict(populate_by_name=True)

    text: str = ""
    meal_type: MealTypeName | None = Field(default=None, alias="mealType")
    consumed_at: datetime | None = Field(default=None, alias="consumedAt")
    tz_offset_minutes: int = Field(
        default=0,
        alias="tzOffsetMinutes",
        ge=-MAX_TZ_OFFSET_MINUTES,
        le=MAX_TZ_OFFSET_MINUTES,
    )
    client_date_str: str | None = Field(default=None, alias="clientDateStr")


class MealItemUpdateRequest(BaseModel):
    """Body for overwriting an item's nutrients; omitted values become 0."""

    calories: float | None = None
    protein_g: float | None = None
    carbs_g: float | None = None
    fat_g: float | None = None
    fiber_g: float | None = None
    sugars_g: float | None = None
    saturated_fat_g: float | None = None
    trans_fat_g: float | None = None
    cholesterol_mg: float | None = None
    sodium_mg: float | None = None
    vitamin_d_mcg: float | None = None
    calcium_mg: float | None = None
    iron_mg: float | None = None
    potassium_mg: float | None = None


class ProfileUpdateRequest(BaseModel):
    """Body for updating names and body measurements."""

    model_config = ConfigDict(populate_by_name=True)

    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")
    height_unit: str | None = Field(default=None, alias="heightUnit")
    height_value: float | None = Field(default=None, alias="heightValue")
    height_feet: float | None = Field(default=None, alias="heightFeet")
    height_inches: float | None = Field(default=None, alias="heightInches")
    weight_unit: str | None = Field(default=None, alias="weightUnit")
    weight_value: float | None = Field(default=None, alias="weightValue")
