"""User profile service with height and weight unit conversion."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from meal_journal.domain.errors import ProfileNotFoundError
from meal_journal.domain.nutrients import to_number
from meal_journal.domain.profiles import Profile, ProfileUpdate

_logger = logging.getLogger(__name__)

CM_PER_INCH = 2.54
KG_PER_POUND = 0.453592

_CM_UNITS = {"cm"}
_INCH_UNITS = {"in", "inch", "inches"}
_FEET_UNITS = {"ft", "feet", "ftin"}
_KG_UNITS = {"kg", "kgs", "kilograms"}
_POUND_UNITS = {"lb", "lbs", "pounds"}


class ProfileRepository(Protocol):
    """Persistence interface for user profiles."""

    def get_profile(self, user_id: UUID) -> Profile | None:
        """Return the stored profile for a user."""

    def upsert_profile(self, profile: Profile) -> Profile:
        """Insert or replace a user's profile and return the stored row."""


def normalize_height(
    unit: str | None, value: object, feet: object = None, inches: object = None
) -> float | None:
    """Convert a height to centimetres; unknown units or bad values give None.

    Feet and inches are combined, and a missing part counts as 0.
    """
    lowered = (unit or "").lower()
    if lowered in _CM_UNITS:
        return to_number(value)
    if lowered in _INCH_UNITS:
        number = to_number(value)
        return number * CM_PER_INCH if number is not None else None
    if lowered in _FEET_UNITS:
        total_inches = (to_number(feet) or 0.0) * 12 + (to_number(inches) or 0.0)
        return total_inches * CM_PER_INCH if total_inches > 0 else None
    return None


def normalize_weight(unit: str | None, value: object) -> float | None:
    """Convert a weight to kilograms; unknown units or bad values give None."""
    lowered = (unit or "").lower()
    number = to_number(value)
    if number is None:
        return None
    if lowered in _KG_UNITS:
        return number
    if lowered in _POUND_UNITS:
        return number * KG_PER_POUND
    return None


@dataclass
class ProfileService:
    """Service for reading and updating user profiles."""

    repository: ProfileRepository

    def get_profile(self, user_id: UUID) -> Profile:
        """Return the user's profile or raise ProfileNotFoundError."""
        profile = self.repository.get_profile(user_id)
        if profile is None:
            raise ProfileNotFoundError()
        return profile

    def update_profile(self, user_id: UUID, update: ProfileUpdate) -> Profile:
        """Store converted measurements; omitted names keep their stored value."""
        current = self.repository.get_profile(user_id) or Profile(user_id=user_id)
        profile = Profile(
            user_id=user_id,
            first_name=(
                update.first_name
                if update.first_name is not None
                else current.first_name
            ),
            last_name=(
                update.last_name if update.last_name is not None else current.last_name
            ),
            height_cm=normalize_height(
                update.height_unit,
                update.height_value,
                update.height_feet,
                update.height_inches,
            ),
            height_unit=update.height_unit,
            weight_kg=normalize_weight(update.weight_unit, update.weight_value),
            weight_unit=update.weight_unit,
        )
        stored = self.repository.upsert_profile(profile)
        _logger.info("Updated profile for %s", user_id)
        return stored
