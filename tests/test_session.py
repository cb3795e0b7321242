"""Tests for the live workout session."""

import asyncio
from datetime import datetime

import pytest

from liftlog.db import WorkoutLogRepository, WorkoutRepository
from liftlog.errors import GatewayError, SessionCompletionError, SessionStateError, ValidationError
from liftlog.models.program import PlannedExerciseDraft, ProgramDay, ProgramDraft, ProgramExercise
from liftlog.models.workout import Workout, WorkoutLog, WorkoutStatus
from liftlog.services.programs import ProgramService
from liftlog.services.session import (
    FREESTYLE,
    SessionService,
    SessionState,
    WorkoutSession,
    parse_entry,
)


@pytest.fixture
def day():
    return ProgramDay(
        id=10,
        name="Monday",
        order=0,
        exercises=[
            ProgramExercise(exercise_id=2, sets=2, order=1),
            ProgramExercise(exercise_id=1, sets=3, order=0),
        ],
    )


@pytest.fixture
def session(day):
    s = WorkoutSession(workout=Workout(owner_id="alice", id=1))
    s.select_day(day)
    return s


class TestParseEntry:
    """Tests for parse_entry."""

    def test_blank_is_none(self):
        assert parse_entry("") is None
        assert parse_entry("   ") is None
        assert parse_entry(None) is None

    def test_numbers(self):
        assert parse_entry("8") == 8.0
        assert parse_entry(" 62.5 ") == 62.5
        assert parse_entry(5) == 5.0

    def test_invalid(self):
        with pytest.raises(ValidationError):
            parse_entry("ten")

    @pytest.mark.parametrize("value", ["nan", "inf", "-Infinity", float("nan"), True, False])
    def test_rejects_non_finite_and_bool(self, value):
        with pytest.raises(ValidationError):
            parse_entry(value)


class TestWorkoutSession:
    """Tests for the in-memory session state machine."""

    def test_select_day_seeds_rows(self, session):
        """Test that each planned exercise gets one empty row per set."""
        assert session.state == SessionState.LOADED
        assert session.exercise_ids == [1, 2]
        assert [(l.exercise_id, l.set_number) for l in session.logs] == [
            (1, 1), (1, 2), (1, 3), (2, 1), (2, 2),
        ]
        assert all(l.reps is None and l.weight is None for l in session.logs)
        assert not session.has_unsaved_changes

    def test_unknown_sets_seed_default(self):
        """Test that a planned exercise without a set count gets three rows."""
        s = WorkoutSession(workout=Workout(owner_id="alice", id=1))
        s.select_day(
            ProgramDay(name="Monday", order=0, exercises=[ProgramExercise(exercise_id=1, sets=None)])
        )

        assert len(s.logs) == 3

    def test_zero_sets_seed_nothing(self):
        """Test that zero planned sets seeds no rows."""
        s = WorkoutSession(workout=Workout(owner_id="alice", id=1))
        s.select_day(
            ProgramDay(name="Monday", order=0, exercises=[ProgramExercise(exercise_id=1, sets=0)])
        )

        assert s.logs == []
        assert s.exercise_ids == [1]

    def test_select_day_only_once(self, session, day):
        """Test that a loaded session cannot load another day."""
        with pytest.raises(SessionStateError):
            session.select_day(day)
        with pytest.raises(SessionStateError):
            session.start_freestyle()

    def test_edit_requires_loaded_session(self):
        """Test that rows cannot be edited before a day is chosen."""
        s = WorkoutSession(workout=Workout(owner_id="alice", id=1))

        with pytest.raises(SessionStateError):
            s.add_set(1)

    def test_update_log(self, session):
        """Test updating reps and weight."""
        assert session.update_log(1, 2, "reps", "8") == 1
        session.update_log(1, 2, "weight", "62.5")

        row = session.sets_for(1)[1]
        assert (row.reps, row.weight) == (8.0, 62.5)
        assert session.state == SessionState.EDITING
        assert session.has_unsaved_changes

    def test_update_log_blank_clears(self, session):
        """Test that an empty entry clears the value."""
        session.update_log(1, 1, "weight", "100")
        session.update_log(1, 1, "weight", "")

        assert session.sets_for(1)[0].weight is None

    def test_update_log_rejects_bad_input(self, session):
        """Test rejection of non-numeric values and unknown fields."""
        with pytest.raises(ValidationError):
            session.update_log(1, 1, "reps", "lots")
        with pytest.raises(ValidationError):
            session.update_log(1, 1, "tempo", "3")

    def test_update_log_missing_row(self, session):
        """Test that an unknown key updates nothing."""
        assert session.update_log(1, 9, "reps", "5") == 0
        assert session.state == SessionState.LOADED

    def test_update_log_duplicate_keys(self, session):
        """Test that every row sharing a key is updated."""
        session.add_exercise(1, sets=1)

        assert session.update_log(1, 1, "reps", "5") == 1
        assert session.update_log(1, 4, "reps", "6") == 1

        session.logs.append(WorkoutLog(exercise_id=1, set_number=1))
        assert session.update_log(1, 1, "reps", "7") == 2

    def test_add_set(self, session):
        """Test set numbering when adding a set."""
        log = session.add_set(2)

        assert log.set_number == 3
        assert len(session.sets_for(2)) == 3

    def test_add_exercise(self, session):
        """Test adding an unplanned exercise."""
        added = session.add_exercise(9)

        assert [l.set_number for l in added] == [1, 2, 3]
        assert session.exercise_ids[-1] == 9

    def test_freestyle(self):
        """Test a session without a program day."""
        s = WorkoutSession(workout=Workout(owner_id="alice", id=1))
        s.start_freestyle()
        s.add_exercise(4)

        assert s.is_freestyle
        assert len(s.logs) == 3

    def test_to_records_coerces_blanks(self, session):
        """Test that blank rows are stored as zero, not dropped."""
        session.update_log(1, 1, "reps", "10")

        records = session.to_records()

        assert len(records) == 5
        assert (records[0].reps, records[0].weight) == (10.0, 0)
        assert all(r.workout_id == 1 for r in records)
        assert all(r.reps is not None and r.weight is not None for r in records)


def _program_with_day(db_path, identity):
    async def create():
        draft = ProgramDraft.weekly("Strength")
        draft.day("Monday").exercises.extend([
            PlannedExerciseDraft(exercise_id=1, sets=3),
            PlannedExerciseDraft(exercise_id=2, sets=2),
        ])
        return await ProgramService(db_path).create_program(identity, draft)

    program = asyncio.run(create())
    return program, program.days[0]


class TestSessionService:
    """Tests for SessionService against a database."""

    def test_start_and_select_day(self, db_path, identity):
        """Test that choosing a day is remembered by the workout."""
        program, monday = _program_with_day(db_path, identity)

        async def run():
            service = SessionService(db_path)
            workout = await service.start_workout(identity, program.id)
            session = await service.open_session(identity, workout.id)
            assert session.state == SessionState.UNINITIALIZED

            await service.select_day(identity, session, monday.id)
            return await service.open_session(identity, workout.id)

        reopened = asyncio.run(run())

        assert reopened.workout.program_day_id == monday.id
        assert reopened.state == SessionState.LOADED
        assert len(reopened.logs) == 5

    def test_select_freestyle(self, db_path, identity):
        program, _ = _program_with_day(db_path, identity)

        async def run():
            service = SessionService(db_path)
            workout = await service.start_workout(identity, program.id)
            session = await service.open_session(identity, workout.id)
            return await service.select_day(identity, session, FREESTYLE)

        session = asyncio.run(run())

        assert session.is_freestyle
        assert session.logs == []

    def test_select_day_from_other_program(self, db_path, identity):
        """Test that a day of another program is rejected."""
        _, monday = _program_with_day(db_path, identity)

        async def run():
            service = SessionService(db_path)
            workout = await service.start_workout(identity)
            session = WorkoutSession(workout=workout)
            await service.select_day(identity, session, monday.id)

        with pytest.raises(ValidationError):
            asyncio.run(run())

    def test_start_with_unknown_program(self, db_path, identity):
        with pytest.raises(ValidationError):
            asyncio.run(SessionService(db_path).start_workout(identity, 999))

    def test_open_other_users_workout(self, db_path, identity, other_identity):
        """Test that workouts are owner-scoped."""

        async def run():
            service = SessionService(db_path)
            workout = await service.start_workout(identity)
            return await service.open_session(other_identity, workout.id)

        assert asyncio.run(run()) is None

    def test_complete_persists_all_rows(self, db_path, identity):
        """Test that completion stores N rows with blanks as zero, then completes."""
        program, monday = _program_with_day(db_path, identity)
        finished_at = datetime(2024, 1, 1, 19, 0)

        async def run():
            service = SessionService(db_path)
            workout = await service.start_workout(identity, program.id)
            session = await service.open_session(identity, workout.id)
            await service.select_day(identity, session, monday.id)
            session.update_log(1, 1, "reps", "5")
            session.update_log(1, 1, "weight", "100")
            await service.complete(identity, session, now=finished_at)

            logs = await WorkoutLogRepository(db_path).list_for_workout(identity.user_id, workout.id)
            stored = await WorkoutRepository(db_path).get(identity.user_id, workout.id)
            return session, logs, stored

        session, logs, stored = asyncio.run(run())

        assert len(logs) == 5
        assert (logs[0].reps, logs[0].weight) == (5, 100)
        assert all(l.reps == 0 and l.weight == 0 for l in logs[1:])
        assert stored.status == WorkoutStatus.COMPLETED
        assert stored.ended_at == finished_at
        assert session.state == SessionState.COMPLETED
        assert not session.has_unsaved_changes

    def test_complete_twice(self, db_path, identity):
        """Test that a completed workout cannot be completed again."""

        async def run():
            service = SessionService(db_path)
            workout = await service.start_workout(identity)
            session = await service.open_session(identity, workout.id)
            await service.complete(identity, session)
            await service.complete(identity, session)

        with pytest.raises(SessionStateError):
            asyncio.run(run())

    def test_complete_requires_day(self, db_path, identity):
        program, _ = _program_with_day(db_path, identity)

        async def run():
            service = SessionService(db_path)
            workout = await service.start_workout(identity, program.id)
            session = await service.open_session(identity, workout.id)
            await service.complete(identity, session)

        with pytest.raises(SessionStateError):
            asyncio.run(run())

    def test_log_insert_failure(self, db_path, identity, monkeypatch):
        """Test that a failed log write leaves the workout in progress."""
        service = SessionService(db_path)

        async def failing_insert(*args, **kwargs):
            raise GatewayError("disk full")

        monkeypatch.setattr(service.logs, "insert_many", failing_insert)

        async def run():
            workout = await service.start_workout(identity)
            session = await service.open_session(identity, workout.id)
            session.add_exercise(1)
            with pytest.raises(SessionCompletionError) as exc_info:
                await service.complete(identity, session)
            stored = await WorkoutRepository(db_path).get(identity.user_id, workout.id)
            return exc_info.value, session, stored

        error, session, stored = asyncio.run(run())

        assert error.logs_saved is False
        assert not session.logs_saved
        assert session.state == SessionState.EDITING
        assert stored.status == WorkoutStatus.IN_PROGRESS

    def test_status_failure_then_retry(self, db_path, identity, monkeypatch):
        """Test that a retry after a failed status update does not store logs twice."""
        service = SessionService(db_path)
        original = service.workouts.mark_completed

        async def failing_mark(*args, **kwargs):
            raise GatewayError("connection lost")

        async def run():
            workout = await service.start_workout(identity)
            session = await service.open_session(identity, workout.id)
            session.add_exercise(1)

            monkeypatch.setattr(service.workouts, "mark_completed", failing_mark)
            with pytest.raises(SessionCompletionError) as exc_info:
                await service.complete(identity, session)
            assert exc_info.value.logs_saved is True

            monkeypatch.setattr(service.workouts, "mark_completed", original)
            await service.complete(identity, session)

            logs = await WorkoutLogRepository(db_path).list_for_workout(identity.user_id, workout.id)
            stored = await WorkoutRepository(db_path).get(identity.user_id, workout.id)
            return logs, stored

        logs, stored = asyncio.run(run())

        assert len(logs) == 3
        assert stored.is_completed

    def test_completed_workout_reopens_read_only(self, db_path, identity):
        """Test reopening a finished workout."""

        async def run():
            service = SessionService(db_path)
            workout = await service.start_workout(identity)
            session = await service.open_session(identity, workout.id)
            session.add_exercise(3, sets=2)
            await service.complete(identity, session)
            return await service.open_session(identity, workout.id)

        reopened = asyncio.run(run())

        assert reopened.state == SessionState.COMPLETED
        assert len(reopened.logs) == 2
        with pytest.raises(SessionStateError):
            reopened.add_set(3)

    def test_last_performance(self, db_path, identity):
        """Test the latest weighted set is offered as a hint."""

        async def run():
            service = SessionService(db_path)
            workout = await service.start_workout(identity)
            session = await service.open_session(identity, workout.id)
            session.add_exercise(1, sets=2)
            session.update_log(1, 1, "weight", "80")
            session.update_log(1, 1, "reps", "5")
            await service.complete(identity, session)
            return await service.last_performance(identity, [1, 2, 1])

        hints = asyncio.run(run())

        assert list(hints) == [1]
        assert (hints[1].weight, hints[1].reps) == (80, 5)

    def test_reopened_after_status_failure_keeps_logs(self, db_path, identity, monkeypatch):
        """Test that a workout reopened after a failed status update is not stored twice."""
        service = SessionService(db_path)

        async def failing_mark(*args, **kwargs):
            raise GatewayError("connection lost")

        async def run():
            workout = await service.start_workout(identity)
            session = await service.open_session(identity, workout.id)
            session.add_exercise(1)
            session.update_log(1, 1, "weight", "60")

            monkeypatch.setattr(service.workouts, "mark_completed", failing_mark)
            with pytest.raises(SessionCompletionError):
                await service.complete(identity, session)

            # a restarted process only has storage to go on
            fresh = SessionService(db_path)
            reopened = await fresh.open_session(identity, workout.id)
            state, saved, unsaved = reopened.state, reopened.logs_saved, reopened.has_unsaved_changes
            with pytest.raises(SessionStateError):
                reopened.add_set(1)
            await fresh.complete(identity, reopened)

            logs = await WorkoutLogRepository(db_path).list_for_workout(identity.user_id, workout.id)
            stored = await WorkoutRepository(db_path).get(identity.user_id, workout.id)
            return state, saved, unsaved, reopened, logs, stored

        state, saved, unsaved, reopened, logs, stored = asyncio.run(run())

        assert state == SessionState.SAVED
        assert saved is True
        assert unsaved is False
        assert reopened.exercise_ids == [1]
        assert reopened.state == SessionState.COMPLETED
        assert len(logs) == 3
        assert logs[0].weight == 60
        assert stored.is_completed

    def test_concurrent_finish_stores_once(self, db_path, identity):
        """Test that overlapping finishes of one session write its rows once."""
        service = SessionService(db_path)

        async def run():
            workout = await service.start_workout(identity)
            session = await service.open_session(identity, workout.id)
            session.add_exercise(1)
            results = await asyncio.gather(
                service.complete(identity, session),
                service.complete(identity, session),
                return_exceptions=True,
            )
            logs = await WorkoutLogRepository(db_path).list_for_workout(identity.user_id, workout.id)
            return results, session, logs

        results, session, logs = asyncio.run(run())

        assert isinstance(results[0], Workout)
        assert isinstance(results[1], SessionStateError)
        assert session.state == SessionState.COMPLETED
        assert len(logs) == 3

    def test_cancelled_finish_can_be_retried(self, db_path, identity, monkeypatch):
        """Test that an interrupted finish does not leave the session stuck."""
        service = SessionService(db_path)

        async def cancelled_insert(*args, **kwargs):
            raise asyncio.CancelledError()

        async def run():
            workout = await service.start_workout(identity)
            session = await service.open_session(identity, workout.id)
            session.add_exercise(1)
            monkeypatch.setattr(service.logs, "insert_many", cancelled_insert)
            with pytest.raises(asyncio.CancelledError):
                await service.complete(identity, session)
            return session

        session = asyncio.run(run())

        assert session.state == SessionState.EDITING
        assert session.logs_saved is False
