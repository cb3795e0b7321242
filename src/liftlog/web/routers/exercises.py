"""Exercise library routes."""

from fastapi import APIRouter, Depends, Form, HTTPException, Request

from ...models.user_profile import Identity
from ...services.programs import ExerciseLibrary
from ..deps import get_db_path, get_identity

router = APIRouter(prefix="/exercises", tags=["exercises"])


def _library(request: Request) -> ExerciseLibrary:
    return ExerciseLibrary(get_db_path(request))


@router.get("")
async def exercises_list(
    request: Request,
    search: str | None = None,
    identity: Identity = Depends(get_identity),
):
    """Global exercises plus the caller's custom ones."""
    exercises = await _library(request).list_exercises(identity, search)
    return {"exercises": [e.to_dict() for e in exercises]}


@router.post("", status_code=201)
async def add_exercise(
    request: Request,
    name: str = Form(...),
    category: str = Form(...),
    description: str = Form(""),
    identity: Identity = Depends(get_identity),
):
    """Add a custom exercise."""
    exercise = await _library(request).add_custom(identity, name, category, description)
    return exercise.to_dict()


@router.put("/{exercise_id}")
async def update_exercise(
    exercise_id: int,
    request: Request,
    name: str = Form(...),
    category: str = Form(...),
    description: str = Form(""),
    identity: Identity = Depends(get_identity),
):
    """Edit a custom exercise."""
    exercise = await _library(request).update_custom(
        identity, exercise_id, name, category, description
    )
    if not exercise:
        raise HTTPException(status_code=404, detail="Custom exercise not found")
    return exercise.to_dict()


@router.delete("/{exercise_id}")
async def delete_exercise(
    exercise_id: int, request: Request, identity: Identity = Depends(get_identity)
):
    """Delete a custom exercise."""
    if not await _library(request).delete_custom(identity, exercise_id):
        raise HTTPException(status_code=404, detail="Custom exercise not found")
    return {"status": "deleted", "exercise_id": exercise_id}
