"""Request bodies accepted as JSON."""

from pydantic import BaseModel, Field

from ..models.program import (
    DEFAULT_REPS,
    DEFAULT_SETS,
    DayDraft,
    PlannedExerciseDraft,
    ProgramDraft,
)


class PlannedExerciseIn(BaseModel):
    exercise_id: int | None = None
    sets: int | None = DEFAULT_SETS
    reps: str = DEFAULT_REPS


class DayIn(BaseModel):
    name: str
    exercises: list[PlannedExerciseIn] = Field(default_factory=list)


class ProgramIn(BaseModel):
    """A program as submitted by the editor.

    Without ``days`` the program gets a blank Monday..Sunday week.
    """

    name: str = ""
    description: str = ""
    days: list[DayIn] | None = None

    def to_draft(self) -> ProgramDraft:
        if self.days is None:
            return ProgramDraft.weekly(self.name, self.description)
        return ProgramDraft(
            name=self.name,
            description=self.description,
            days=[
                DayDraft(
                    name=day.name,
                    exercises=[
                        PlannedExerciseDraft(exercise_id=ex.exercise_id, sets=ex.sets, reps=ex.reps)
                        for ex in day.exercises
                    ],
                )
                for day in self.days
            ],
        )
