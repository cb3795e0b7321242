"""Live workout session model.

A session holds the set rows of one workout in memory from day
selection until the user finishes. Nothing is written while editing;
finishing stores every row in one batch and only then marks the
workout completed.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

from ..db.repositories import (
    ProgramDayRepository,
    ProgramRepository,
    WorkoutLogRepository,
    WorkoutRepository,
)
from ..errors import GatewayError, SessionCompletionError, SessionStateError, ValidationError
from ..models.program import DEFAULT_SETS, ProgramDay, ProgramExercise
from ..models.user_profile import Identity
from ..models.workout import Workout, WorkoutLog, WorkoutStatus

logger = logging.getLogger(__name__)

FREESTYLE = "freestyle"
LOG_FIELDS = ("reps", "weight")


class SessionState(str, Enum):
    """Lifecycle of a workout session."""

    UNINITIALIZED = "uninitialized"  # waiting for a day (or freestyle)
    LOADED = "loaded"  # planned rows synthesised
    EDITING = "editing"  # user changed something
    COMPLETING = "completing"  # a finish is in flight
    SAVED = "saved"  # rows stored, status update still pending
    COMPLETED = "completed"


def parse_entry(value: str | float | int | None) -> float | None:
    """Parse a reps/weight entry; blank means "not entered yet"."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValidationError(f"Not a number: {value!r}")
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = value.strip()
        if text == "":
            return None
        try:
            number = float(text)
        except ValueError:
            raise ValidationError(f"Not a number: {value!r}") from None
    if not math.isfinite(number):
        raise ValidationError(f"Not a finite number: {value!r}")
    return number


@dataclass
class WorkoutSession:
    """In-memory state of one workout in progress."""

    workout: Workout
    state: SessionState = SessionState.UNINITIALIZED
    day: ProgramDay | None = None
    exercise_ids: list[int] = field(default_factory=list)
    logs: list[WorkoutLog] = field(default_factory=list)
    logs_saved: bool = False

    @property
    def is_freestyle(self) -> bool:
        return self.state != SessionState.UNINITIALIZED and self.day is None

    @property
    def has_unsaved_changes(self) -> bool:
        """True once any row has reps or weight entered."""
        if self.logs_saved or self.state == SessionState.COMPLETED:
            return False
        return any(log.is_filled for log in self.logs)

    def select_day(self, day: ProgramDay, planned: list[ProgramExercise] | None = None) -> None:
        """Load the planned exercises of a program day.

        Each planned exercise with N sets becomes N empty rows numbered
        1..N. A planned exercise without a set count gets the default.
        """
        self._require(SessionState.UNINITIALIZED)
        planned = day.exercises if planned is None else planned

        self.day = day
        self.exercise_ids = []
        self.logs = []
        for item in sorted(planned, key=lambda ex: ex.order):
            self.exercise_ids.append(item.exercise_id)
            sets = DEFAULT_SETS if item.sets is None else item.sets
            for set_number in range(1, sets + 1):
                self.logs.append(WorkoutLog(exercise_id=item.exercise_id, set_number=set_number))
        self.state = SessionState.LOADED

    def start_freestyle(self) -> None:
        """Skip the program day; exercises are added by hand."""
        self._require(SessionState.UNINITIALIZED)
        self.day = None
        self.state = SessionState.LOADED

    def sets_for(self, exercise_id: int) -> list[WorkoutLog]:
        """Rows of one exercise, in entry order."""
        return [log for log in self.logs if log.exercise_id == exercise_id]

    def update_log(self, exercise_id: int, set_number: int, field_name: str, value) -> int:
        """Change reps or weight of the row(s) keyed by exercise and set.

        Returns:
            Number of rows updated (duplicates share a key)
        """
        self._require_editable()
        if field_name not in LOG_FIELDS:
            raise ValidationError(f"Unknown field {field_name!r}; expected reps or weight")
        parsed = parse_entry(value)

        updated = 0
        for log in self.logs:
            if log.exercise_id == exercise_id and log.set_number == set_number:
                setattr(log, field_name, parsed)
                updated += 1
        if updated:
            self.state = SessionState.EDITING
        return updated

    def add_set(self, exercise_id: int) -> WorkoutLog:
        """Append one more set to an exercise."""
        self._require_editable()
        log = WorkoutLog(exercise_id=exercise_id, set_number=len(self.sets_for(exercise_id)) + 1)
        self.logs.append(log)
        if exercise_id not in self.exercise_ids:
            self.exercise_ids.append(exercise_id)
        self.state = SessionState.EDITING
        return log

    def add_exercise(self, exercise_id: int, sets: int = DEFAULT_SETS) -> list[WorkoutLog]:
        """Add an exercise that was not planned, with default empty sets."""
        self._require_editable()
        self.exercise_ids.append(exercise_id)
        start = len(self.sets_for(exercise_id))
        new_logs = [
            WorkoutLog(exercise_id=exercise_id, set_number=start + i) for i in range(1, sets + 1)
        ]
        self.logs.extend(new_logs)
        self.state = SessionState.EDITING
        return new_logs

    def to_records(self) -> list[WorkoutLog]:
        """Rows as they are stored: blanks become 0, none are dropped."""
        return [
            WorkoutLog(
                workout_id=self.workout.id,
                exercise_id=log.exercise_id,
                set_number=log.set_number,
                reps=log.reps or 0,
                weight=log.weight or 0,
            )
            for log in self.logs
        ]

    def to_dict(self) -> dict:
        return {
            "workout": self.workout.to_dict(),
            "state": self.state.value,
            "day": {"id": self.day.id, "name": self.day.name} if self.day else None,
            "freestyle": self.is_freestyle,
            "exercises": [
                {
                    "exercise_id": exercise_id,
                    "sets": [log.to_dict() for log in self.sets_for(exercise_id)],
                }
                for exercise_id in dict.fromkeys(self.exercise_ids)
            ],
            "has_unsaved_changes": self.has_unsaved_changes,
        }

    def _require(self, state: SessionState) -> None:
        if self.state != state:
            raise SessionStateError(f"Session is {self.state.value}, expected {state.value}")

    def _require_editable(self) -> None:
        if self.state not in (SessionState.LOADED, SessionState.EDITING):
            raise SessionStateError(f"Cannot edit a session that is {self.state.value}")


class SessionService:
    """Starts, loads and finishes workout sessions against the gateway."""

    def __init__(self, db_path: Path | None = None):
        self.workouts = WorkoutRepository(db_path)
        self.logs = WorkoutLogRepository(db_path)
        self.days = ProgramDayRepository(db_path)
        self.programs = ProgramRepository(db_path)

    async def start_workout(self, identity: Identity, program_id: int | None = None) -> Workout:
        """Create a new in-progress workout, optionally following a program."""
        if program_id is not None and await self.programs.get(identity.user_id, program_id) is None:
            raise ValidationError(f"Program {program_id} not found")
        workout = Workout(owner_id=identity.user_id, program_id=program_id)
        await self.workouts.create(workout)
        logger.info("Started workout %s (program %s)", workout.id, program_id)
        return workout

    async def open_session(self, identity: Identity, workout_id: int) -> WorkoutSession | None:
        """Build a session for an existing workout.

        A workout that already recorded its program day comes back with
        that day loaded. Completed workouts come back in the completed
        state and cannot be edited. An in-progress workout whose rows
        are already stored comes back saved, so finishing it only
        updates the status.
        """
        workout = await self.workouts.get(identity.user_id, workout_id)
        if workout is None:
            return None

        session = WorkoutSession(workout=workout)
        stored = await self.logs.list_for_workout(identity.user_id, workout_id)
        if workout.is_completed or stored:
            session.state = SessionState.COMPLETED if workout.is_completed else SessionState.SAVED
            session.logs = stored
            session.exercise_ids = list(dict.fromkeys(log.exercise_id for log in stored))
            session.logs_saved = True
            if workout.program_day_id is not None:
                session.day = await self.days.get(identity.user_id, workout.program_day_id)
            return session

        if workout.program_day_id is not None:
            day = await self.days.get(identity.user_id, workout.program_day_id)
            if day is not None:
                session.select_day(day)
        elif workout.program_id is None:
            session.start_freestyle()
        return session

    async def select_day(
        self, identity: Identity, session: WorkoutSession, day_id: int | str
    ) -> WorkoutSession:
        """Choose the program day (or freestyle) for a session."""
        if day_id == FREESTYLE:
            session.start_freestyle()
            return session

        try:
            day_id = int(day_id)
        except ValueError:
            raise ValidationError(f"Invalid day: {day_id!r}") from None

        day = await self.days.get(identity.user_id, day_id)
        if day is None or day.program_id != session.workout.program_id:
            raise ValidationError(f"Day {day_id} is not part of this workout's program")

        session.select_day(day)
        await self.workouts.set_program_day(identity.user_id, session.workout.id, day.id)
        session.workout.program_day_id = day.id
        return session

    async def complete(
        self, identity: Identity, session: WorkoutSession, now: datetime | None = None
    ) -> Workout:
        """Store all rows, then mark the workout completed.

        If storing the rows fails the workout stays in progress and the
        whole call may be repeated. If the status update fails after the
        rows were stored, calling again only repeats the status update.

        Raises:
            SessionStateError: If the session is already completed, is
                being finished by another call, or no day has been
                chosen yet.
            SessionCompletionError: If either step fails.
        """
        if session.state == SessionState.COMPLETED:
            raise SessionStateError("Workout is already completed")
        if session.state == SessionState.COMPLETING:
            raise SessionStateError("Workout is already being finished")
        if session.state == SessionState.UNINITIALIZED:
            raise SessionStateError("Choose a program day before finishing")

        workout = session.workout
        previous = session.state
        # claimed before the first await; a concurrent finish sees COMPLETING
        session.state = SessionState.COMPLETING
        logger.info("Finishing workout %s with %d sets", workout.id, len(session.logs))
        try:
            await self._store_logs(identity, session)
            ended_at = now or datetime.now()
            await self._mark_completed(identity, workout, ended_at)
        finally:
            if session.state == SessionState.COMPLETING:
                session.state = SessionState.SAVED if session.logs_saved else previous

        workout.status = WorkoutStatus.COMPLETED
        workout.ended_at = ended_at
        session.state = SessionState.COMPLETED
        logger.info("Workout %s completed", workout.id)
        return workout

    async def _store_logs(self, identity: Identity, session: WorkoutSession) -> None:
        if session.logs_saved:
            return
        workout = session.workout
        try:
            await self.logs.insert_many(identity.user_id, workout.id, session.to_records())
        except GatewayError as e:
            logger.error("Saving logs for workout %s failed: %s", workout.id, e)
            raise SessionCompletionError(f"Could not save sets: {e}", logs_saved=False) from e
        session.logs_saved = True

    async def _mark_completed(self, identity: Identity, workout: Workout, ended_at: datetime) -> None:
        try:
            updated = await self.workouts.mark_completed(identity.user_id, workout.id, ended_at)
        except GatewayError as e:
            logger.error("Completing workout %s failed after logs were saved: %s", workout.id, e)
            raise SessionCompletionError(
                f"Sets saved but workout not marked complete: {e}", logs_saved=True
            ) from e
        if not updated:
            raise SessionCompletionError(
                f"Workout {workout.id} could not be marked complete", logs_saved=True
            )

    async def last_performance(
        self, identity: Identity, exercise_ids: list[int]
    ) -> dict[int, WorkoutLog]:
        """Latest weighted set per exercise, shown as a hint only."""
        return await self.logs.latest_with_weight(identity.user_id, list(dict.fromkeys(exercise_ids)))
