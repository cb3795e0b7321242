"""Database layer for liftlog."""

from .engine import connect, get_db_path, init_db, seed_exercises
from .repositories import (
    ExerciseRepository,
    ProfileRepository,
    ProgramDayRepository,
    ProgramRepository,
    WorkoutLogRepository,
    WorkoutRepository,
)

__all__ = [
    "connect",
    "ExerciseRepository",
    "get_db_path",
    "init_db",
    "ProfileRepository",
    "ProgramDayRepository",
    "ProgramRepository",
    "seed_exercises",
    "WorkoutLogRepository",
    "WorkoutRepository",
]
