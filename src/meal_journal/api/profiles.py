"""Profile endpoints for the authenticated user."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Request

from meal_journal.api.meals import require_user
from meal_journal.api.models import ProfileUpdateRequest
from meal_journal.domain.profiles import ProfileUpdate

if TYPE_CHECKING:
    from meal_journal.containers import AppContainer
    from meal_journal.domain.profiles import Profile

router = APIRouter(prefix="/api", tags=["profile"])


@router.get("/profile")
async def get_profile(
    request: Request, user_id: UUID = Depends(require_user)
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    profile = container.profile_service.get_profile(user_id)
    return {"user": _profile_payload(profile)}


@router.put("/profile")
async def update_profile(
    payload: ProfileUpdateRequest,
    request: Request,
    user_id: UUID = Depends(require_user),
) -> dict[str, object]:
    """Store names and measurements, converting to centimetres and kilograms."""
    container: AppContainer = request.app.state.container
    profile = container.profile_service.update_profile(
        user_id, ProfileUpdate(**payload.model_dump())
    )
    return {"user": _profile_payload(profile)}


def _profile_payload(profile: Profile) -> dict[str, object]:
    return {
        "id": str(profile.user_id),
        "firstName": profile.first_name,
        "lastName": profile.last_name,
        "heightCm": profile.height_cm,
        "heightUnit": profile.height_unit,
        "weightKg": profile.weight_kg,
        "weightUnit": profile.weight_unit,
    }
