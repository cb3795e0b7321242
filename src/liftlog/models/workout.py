"""Workout session and set log models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class WorkoutStatus(str, Enum):
    """Workout lifecycle status."""

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass
class Workout:
    """One concrete training session.

    Created ``in_progress`` and moved to ``completed`` exactly once.
    """

    owner_id: str
    program_id: int | None = None
    program_day_id: int | None = None
    status: WorkoutStatus = WorkoutStatus.IN_PROGRESS
    started_at: datetime | None = None
    ended_at: datetime | None = None
    program_name: str | None = None
    id: int | None = None

    @property
    def is_completed(self) -> bool:
        return self.status == WorkoutStatus.COMPLETED

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "program_id": self.program_id,
            "program_day_id": self.program_day_id,
            "program_name": self.program_name,
            "status": self.status.value,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "ended_at": self.ended_at.isoformat() if self.ended_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Workout":
        """Create from dictionary."""
        started_at = data.get("started_at")
        ended_at = data.get("ended_at")
        return cls(
            id=data.get("id"),
            owner_id=data["owner_id"],
            program_id=data.get("program_id"),
            program_day_id=data.get("program_day_id"),
            program_name=data.get("program_name"),
            status=WorkoutStatus(data.get("status", "in_progress")),
            started_at=datetime.fromisoformat(started_at) if started_at else None,
            ended_at=datetime.fromisoformat(ended_at) if ended_at else None,
        )


@dataclass
class WorkoutLog:
    """One recorded set within a workout.

    ``reps`` and ``weight`` are None while the set is still being edited;
    stored rows always carry numbers.
    """

    exercise_id: int
    set_number: int
    reps: float | None = None
    weight: float | None = None
    workout_id: int | None = None
    created_at: datetime | None = None
    id: int | None = None

    @property
    def is_filled(self) -> bool:
        return self.reps is not None or self.weight is not None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "workout_id": self.workout_id,
            "exercise_id": self.exercise_id,
            "set_number": self.set_number,
            "reps": self.reps,
            "weight": self.weight,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WorkoutLog":
        """Create from dictionary."""
        created_at = data.get("created_at")
        return cls(
            id=data.get("id"),
            workout_id=data.get("workout_id"),
            exercise_id=data["exercise_id"],
            set_number=data["set_number"],
            reps=data.get("reps"),
            weight=data.get("weight"),
            created_at=datetime.fromisoformat(created_at) if created_at else None,
        )
