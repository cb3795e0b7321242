"""Data models for liftlog."""

from .exercises import DEFAULT_EXERCISES, Exercise, ExerciseCategory
from .program import (
    WEEKDAYS,
    DayDraft,
    PlannedExerciseDraft,
    Program,
    ProgramDay,
    ProgramDraft,
    ProgramExercise,
)
from .user_profile import Identity, Profile, Units, WeekStart
from .workout import Workout, WorkoutLog, WorkoutStatus

__all__ = [
    "DayDraft",
    "DEFAULT_EXERCISES",
    "Exercise",
    "ExerciseCategory",
    "Identity",
    "PlannedExerciseDraft",
    "Profile",
    "Program",
    "ProgramDay",
    "ProgramDraft",
    "ProgramExercise",
    "Units",
    "WEEKDAYS",
    "WeekStart",
    "Workout",
    "WorkoutLog",
    "WorkoutStatus",
]
