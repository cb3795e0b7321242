"""User settings routes."""

from fastapi import APIRouter, Depends, Form, HTTPException, Request

from ...db.repositories import ProfileRepository
from ...models.user_profile import Identity, Profile, Units, WeekStart
from ..deps import get_db_path, get_identity

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("")
async def profile_page(request: Request, identity: Identity = Depends(get_identity)):
    """Current settings, defaults when never saved."""
    profile_repo = ProfileRepository(get_db_path(request))
    profile = await profile_repo.get(identity.user_id) or Profile.default(identity)
    return profile.to_dict()


@router.put("")
async def save_profile(
    request: Request,
    units: str | None = Form(None),
    week_start: str | None = Form(None),
    identity: Identity = Depends(get_identity),
):
    """Save units and week start; omitted fields keep their value."""
    profile_repo = ProfileRepository(get_db_path(request))
    profile = await profile_repo.get(identity.user_id) or Profile.default(identity)

    try:
        if units:
            profile.units = Units(units.lower())
        if week_start:
            profile.week_start = WeekStart(week_start.lower())
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    if identity.email:
        profile.email = identity.email
    await profile_repo.upsert(profile)
    return profile.to_dict()
