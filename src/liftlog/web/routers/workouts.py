"""Live workout routes.

Set rows are edited on the tracked in-memory session and only written
when the workout is finished.
"""

from fastapi import APIRouter, Depends, Form, HTTPException, Request

from ...db.repositories import ExerciseRepository
from ...models.user_profile import Identity
from ...services.progress import ProgressService
from ...services.session import SessionService, WorkoutSession
from ..deps import get_db_path, get_identity, get_tracker

router = APIRouter(prefix="/workouts", tags=["workouts"])


async def _load_session(request: Request, identity: Identity, workout_id: int) -> WorkoutSession:
    """Tracked session of a workout, reopened from storage if needed."""
    service = SessionService(get_db_path(request))
    session = await get_tracker(request).get_or_open(
        identity.user_id, workout_id, lambda: service.open_session(identity, workout_id)
    )
    if not session:
        raise HTTPException(status_code=404, detail="Workout not found")
    return session


async def _session_view(request: Request, identity: Identity, session: WorkoutSession) -> dict:
    """Session with last-performance hints for its exercises."""
    service = SessionService(get_db_path(request))
    hints = await service.last_performance(identity, session.exercise_ids)
    return {
        **session.to_dict(),
        "last_performance": {str(ex_id): log.to_dict() for ex_id, log in hints.items()},
    }


@router.post("", status_code=201)
async def start_workout(
    request: Request,
    program_id: int | None = Form(None),
    identity: Identity = Depends(get_identity),
):
    """Start a workout, optionally following a program."""
    service = SessionService(get_db_path(request))
    workout = await service.start_workout(identity, program_id)
    session = await service.open_session(identity, workout.id)
    await get_tracker(request).put(identity.user_id, session)
    return session.to_dict()


@router.get("/history")
async def workout_history(request: Request, identity: Identity = Depends(get_identity)):
    """Most recently completed workouts."""
    workouts = await ProgressService(get_db_path(request)).recent_history(identity)
    return {"workouts": [w.to_dict() for w in workouts]}


@router.get("/{workout_id}")
async def workout_detail(
    workout_id: int, request: Request, identity: Identity = Depends(get_identity)
):
    """Current state of a workout session."""
    session = await _load_session(request, identity, workout_id)
    return await _session_view(request, identity, session)


@router.post("/{workout_id}/day")
async def select_day(
    workout_id: int,
    request: Request,
    day_id: str = Form(...),
    identity: Identity = Depends(get_identity),
):
    """Pick the program day to follow, or ``freestyle``."""
    session = await _load_session(request, identity, workout_id)
    service = SessionService(get_db_path(request))
    await service.select_day(identity, session, day_id.strip().lower())
    return await _session_view(request, identity, session)


@router.patch("/{workout_id}/logs")
async def update_log(
    workout_id: int,
    request: Request,
    exercise_id: int = Form(...),
    set_number: int = Form(...),
    field: str = Form(...),
    value: str = Form(""),
    identity: Identity = Depends(get_identity),
):
    """Set reps or weight of one set; an empty value clears it."""
    session = await _load_session(request, identity, workout_id)
    updated = session.update_log(exercise_id, set_number, field, value)
    if not updated:
        raise HTTPException(status_code=404, detail="Set not found")
    return {"updated": updated, **session.to_dict()}


@router.post("/{workout_id}/exercises")
async def add_exercise(
    workout_id: int,
    request: Request,
    exercise_id: int = Form(...),
    identity: Identity = Depends(get_identity),
):
    """Add an unplanned exercise with empty default sets."""
    session = await _load_session(request, identity, workout_id)
    exercise = await ExerciseRepository(get_db_path(request)).get(identity.user_id, exercise_id)
    if not exercise:
        raise HTTPException(status_code=404, detail="Exercise not found")
    session.add_exercise(exercise_id)
    return await _session_view(request, identity, session)


@router.post("/{workout_id}/exercises/{exercise_id}/sets")
async def add_set(
    workout_id: int,
    exercise_id: int,
    request: Request,
    identity: Identity = Depends(get_identity),
):
    """Append one more set to an exercise."""
    session = await _load_session(request, identity, workout_id)
    log = session.add_set(exercise_id)
    return {"added": log.to_dict(), **session.to_dict()}


@router.post("/{workout_id}/finish")
async def finish_workout(
    workout_id: int, request: Request, identity: Identity = Depends(get_identity)
):
    """Store every set and mark the workout completed."""
    session = await _load_session(request, identity, workout_id)
    workout = await SessionService(get_db_path(request)).complete(identity, session)
    await get_tracker(request).mark_finished(identity.user_id, workout_id)
    return {"workout": workout.to_dict(), "sets_saved": len(session.logs)}
