"""Supabase repository for user profiles."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from meal_journal.domain.nutrients import to_number
from meal_journal.domain.profiles import Profile
from meal_journal.services.profiles import ProfileRepository

PROFILE_COLUMNS = (
    "user_id, first_name, last_name, height_cm, height_unit, weight_kg, weight_unit"
)


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase implementation for user profiles."""

    client: Client

    def get_profile(self, user_id: UUID) -> Profile | None:
        """Return the stored profile for a user."""
        response = (
            self.client.table("profiles")
            .select(PROFILE_COLUMNS)
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_profile_row(response.data[0])

    def upsert_profile(self, profile: Profile) -> Profile:
        """Insert or replace the profile row keyed by user id."""
        response = (
            self.client.table("profiles")
            .upsert(
                {
                    "user_id": str(profile.user_id),
                    "first_name": profile.first_name,
                    "last_name": profile.last_name,
                    "height_cm": profile.height_cm,
                    "height_unit": profile.height_unit,
                    "weight_kg": profile.weight_kg,
                    "weight_unit": profile.weight_unit,
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                },
                on_conflict="user_id",
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to store profile")
        return _parse_profile_row(response.data[0])


def _parse_profile_row(row: dict[str, object]) -> Profile:
    return Profile(
        user_id=UUID(str(row["user_id"])),
        first_name=row.get("first_name"),
        last_name=row.get("last_name"),
        height_cm=to_number(row.get("height_cm")),
        height_unit=row.get("height_unit"),
        weight_kg=to_number(row.get("weight_kg")),
        weight_unit=row.get("weight_unit"),
    )
