"""Strength progress from recorded sets."""

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from ..db.repositories import ExerciseRepository, WorkoutLogRepository, WorkoutRepository
from ..models.exercises import Exercise
from ..models.user_profile import Identity
from ..models.workout import Workout, WorkoutLog

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 10


def estimated_one_rep_max(weight: float | None, reps: float | None) -> int | None:
    """Estimate a one-rep max with the Epley formula.

    ``weight * (1 + reps / 30)``, rounded half-up to a whole number.

    Args:
        weight: Weight lifted
        reps: Repetitions performed

    Returns:
        Estimated 1RM, or None when either input is missing
    """
    if weight is None or reps is None:
        return None
    return math.floor(weight * (1 + reps / 30) + 0.5)


@dataclass
class ProgressPoint:
    """One point of an exercise's 1RM series."""

    recorded_at: datetime | None
    weight: float
    reps: float
    one_rep_max: int

    def to_dict(self) -> dict:
        return {
            "date": self.recorded_at.isoformat() if self.recorded_at else None,
            "weight": self.weight,
            "reps": self.reps,
            "one_rep_max": self.one_rep_max,
        }


def build_progress_series(logs: list[WorkoutLog]) -> list[ProgressPoint]:
    """Turn logs (oldest first) into 1RM points in the same order.

    Logs missing weight or reps are left out rather than counted as zero.
    """
    series = []
    for log in logs:
        one_rep_max = estimated_one_rep_max(log.weight, log.reps)
        if one_rep_max is None:
            continue
        series.append(
            ProgressPoint(
                recorded_at=log.created_at,
                weight=log.weight,
                reps=log.reps,
                one_rep_max=one_rep_max,
            )
        )
    return series


@dataclass
class ExerciseProgress:
    """An exercise with its 1RM series."""

    exercise: Exercise
    points: list[ProgressPoint]

    @property
    def best(self) -> ProgressPoint | None:
        if not self.points:
            return None
        return max(self.points, key=lambda p: p.one_rep_max)

    def to_dict(self) -> dict:
        best = self.best
        return {
            "exercise": self.exercise.to_dict(),
            "points": [p.to_dict() for p in self.points],
            "best_one_rep_max": best.one_rep_max if best else None,
        }


class ProgressService:
    """Read-only views over completed training."""

    def __init__(self, db_path: Path | None = None):
        self.exercises = ExerciseRepository(db_path)
        self.logs = WorkoutLogRepository(db_path)
        self.workouts = WorkoutRepository(db_path)

    async def exercise_progress(
        self, identity: Identity, exercise_id: int
    ) -> ExerciseProgress | None:
        """1RM series for one exercise, or None if the exercise is not visible."""
        exercise = await self.exercises.get(identity.user_id, exercise_id)
        if exercise is None:
            return None
        logs = await self.logs.list_for_exercise(identity.user_id, exercise_id)
        points = build_progress_series(logs)
        logger.debug("Exercise %s: %d logs, %d points", exercise_id, len(logs), len(points))
        return ExerciseProgress(exercise=exercise, points=points)

    async def stats(self, identity: Identity) -> dict:
        """Summary counters for the progress page."""
        total = await self.workouts.count_completed(identity.user_id)
        return {"total_workouts": total}

    async def recent_history(self, identity: Identity, limit: int = HISTORY_LIMIT) -> list[Workout]:
        """Most recently completed workouts, newest first."""
        return await self.workouts.list_completed(identity.user_id, limit=limit)
