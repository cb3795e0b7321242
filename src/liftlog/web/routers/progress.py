"""Progress routes."""

from fastapi import APIRouter, Depends, HTTPException, Request

from ...models.user_profile import Identity
from ...services.progress import ProgressService
from ..deps import get_db_path, get_identity

router = APIRouter(prefix="/progress", tags=["progress"])


@router.get("/stats")
async def progress_stats(request: Request, identity: Identity = Depends(get_identity)):
    """Completed-workout count."""
    return await ProgressService(get_db_path(request)).stats(identity)


@router.get("/{exercise_id}")
async def exercise_progress(
    exercise_id: int, request: Request, identity: Identity = Depends(get_identity)
):
    """Estimated 1RM over time for one exercise."""
    progress = await ProgressService(get_db_path(request)).exercise_progress(identity, exercise_id)
    if not progress:
        raise HTTPException(status_code=404, detail="Exercise not found")
    return progress.to_dict()
