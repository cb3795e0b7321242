"""Program and exercise library management."""

import logging
from pathlib import Path

from ..db.repositories import ExerciseRepository, ProgramDayRepository, ProgramRepository
from ..errors import ValidationError
from ..models.exercises import Exercise, ExerciseCategory
from ..models.program import Program, ProgramDay, ProgramDraft, ProgramExercise
from ..models.user_profile import Identity

logger = logging.getLogger(__name__)


def build_days(draft: ProgramDraft) -> list[ProgramDay]:
    """Turn a draft into day rows.

    Every draft day gets a row, rest days included, with its Monday-based
    position as ``order``. Planned exercises are numbered densely from 0.
    """
    return [
        ProgramDay(
            name=day.name,
            order=index,
            exercises=[
                ProgramExercise(
                    exercise_id=ex.exercise_id,
                    sets=ex.sets,
                    reps=ex.reps,
                    order=position,
                )
                for position, ex in enumerate(day.exercises)
            ],
        )
        for index, day in enumerate(draft.days)
    ]


class ProgramService:
    """Create, edit and activate weekly programs."""

    def __init__(self, db_path: Path | None = None):
        self.programs = ProgramRepository(db_path)
        self.days = ProgramDayRepository(db_path)

    async def create_program(self, identity: Identity, draft: ProgramDraft) -> Program:
        """Validate a draft and store it with all of its days."""
        draft.validate()
        program = Program(
            name=draft.name.strip(),
            owner_id=identity.user_id,
            description=draft.description or None,
        )
        days = build_days(draft)
        await self.programs.create(program, days)
        program.days = days
        return program

    async def update_program(
        self, identity: Identity, program_id: int, draft: ProgramDraft
    ) -> Program | None:
        """Replace name, description and every day of a program."""
        draft.validate()
        program = await self.programs.get(identity.user_id, program_id)
        if program is None:
            return None

        program.name = draft.name.strip()
        program.description = draft.description or None
        await self.programs.update(program)
        days = build_days(draft)
        await self.programs.replace_days(identity.user_id, program_id, days)
        program.days = days
        logger.info("Updated program %s", program_id)
        return program

    async def get_program(self, identity: Identity, program_id: int) -> Program | None:
        """A program with its days and planned exercises."""
        program = await self.programs.get(identity.user_id, program_id)
        if program is None:
            return None
        program.days = await self.days.list_for_program(identity.user_id, program_id)
        return program

    async def list_programs(self, identity: Identity) -> list[Program]:
        return await self.programs.list_for_owner(identity.user_id)

    async def set_active(self, identity: Identity, program_id: int) -> bool:
        """Make ``program_id`` the only active program."""
        changed = await self.programs.set_active(identity.user_id, program_id)
        if changed:
            logger.info("Program %s is now active for %s", program_id, identity.user_id)
        return changed

    async def delete_program(self, identity: Identity, program_id: int) -> bool:
        return await self.programs.delete(identity.user_id, program_id)


class ExerciseLibrary:
    """Global exercises plus each user's custom ones."""

    def __init__(self, db_path: Path | None = None):
        self.exercises = ExerciseRepository(db_path)

    async def list_exercises(self, identity: Identity, search: str | None = None) -> list[Exercise]:
        if search and search.strip():
            return await self.exercises.search(identity.user_id, search)
        return await self.exercises.list_visible(identity.user_id)

    async def get(self, identity: Identity, exercise_id: int) -> Exercise | None:
        return await self.exercises.get(identity.user_id, exercise_id)

    async def add_custom(
        self, identity: Identity, name: str, category: str, description: str | None = None
    ) -> Exercise:
        """Add a custom exercise owned by the caller."""
        exercise = Exercise(
            name=self._require_name(name),
            category=self._check_category(category),
            description=description or None,
            is_custom=True,
            owner_id=identity.user_id,
        )
        await self.exercises.add_custom(exercise)
        logger.info("Added custom exercise %r for %s", exercise.name, identity.user_id)
        return exercise

    async def update_custom(
        self,
        identity: Identity,
        exercise_id: int,
        name: str,
        category: str,
        description: str | None = None,
    ) -> Exercise | None:
        """Edit one of the caller's custom exercises; global ones are read-only."""
        exercise = Exercise(
            id=exercise_id,
            name=self._require_name(name),
            category=self._check_category(category),
            description=description or None,
            is_custom=True,
            owner_id=identity.user_id,
        )
        if not await self.exercises.update_custom(exercise):
            return None
        return exercise

    async def delete_custom(self, identity: Identity, exercise_id: int) -> bool:
        return await self.exercises.delete_custom(identity.user_id, exercise_id)

    @staticmethod
    def _require_name(name: str) -> str:
        if not name or not name.strip():
            raise ValidationError("Exercise name is required")
        return name.strip()

    @staticmethod
    def _check_category(category: str) -> str:
        for known in ExerciseCategory:
            if category.strip().lower() == known.value.lower():
                return known.value
        allowed = ", ".join(c.value for c in ExerciseCategory)
        raise ValidationError(f"Unknown category {category!r}; expected one of {allowed}")
