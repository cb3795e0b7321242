"""Home screen routes."""

from datetime import date

from fastapi import APIRouter, Depends, Request

from ...models.user_profile import Identity
from ...services.schedule import ScheduleService
from ..deps import get_db_path, get_identity

router = APIRouter(tags=["dashboard"])


@router.get("/today")
async def today_overview(
    request: Request,
    on: date | None = None,
    identity: Identity = Depends(get_identity),
):
    """Today's scheduled workout, the week calendar and completion state.

    ``on`` overrides the local date.
    """
    service = ScheduleService(get_db_path(request))
    overview = await service.get_today(identity, on)
    return overview.to_dict()
