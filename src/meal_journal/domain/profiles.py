"""Domain models for user profiles."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class Profile:
    """Body measurements stored in metric, plus the units the user entered."""

    user_id: UUID
    first_name: str | None = None
    last_name: str | None = None
    height_cm: float | None = None
    height_unit: str | None = None
    weight_kg: float | None = None
    weight_unit: str | None = None


@dataclass(frozen=True)
class ProfileUpdate:
    """Raw profile values as submitted, before unit conversion."""

    first_name: str | None = None
    last_name: str | None = None
    height_unit: str | None = None
    height_value: object = None
    height_feet: object = None
    height_inches: object = None
    weight_unit: str | None = None
    weight_value: object = None
