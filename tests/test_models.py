"""Tests for data models."""

from datetime import datetime

import pytest

from liftlog.errors import ValidationError
from liftlog.models.exercises import DEFAULT_EXERCISES, Exercise, ExerciseCategory
from liftlog.models.program import (
    WEEKDAYS,
    DayDraft,
    PlannedExerciseDraft,
    Program,
    ProgramDay,
    ProgramDraft,
    ProgramExercise,
)
from liftlog.models.user_profile import Identity, Profile, Units, WeekStart
from liftlog.models.workout import Workout, WorkoutLog, WorkoutStatus


class TestExercise:
    """Tests for Exercise model."""

    def test_exercise_round_trip(self):
        """Test exercise serialization."""
        exercise = Exercise(name="Front Squat", category="Legs", is_custom=True, owner_id="alice", id=7)
        restored = Exercise.from_dict(exercise.to_dict())

        assert restored == exercise

    def test_matches_name_or_category(self):
        """Test case-insensitive search matching."""
        exercise = Exercise(name="Bench Press", category="Chest")

        assert exercise.matches("bench")
        assert exercise.matches("CHEST")
        assert not exercise.matches("squat")

    def test_default_library(self):
        """Test that the built-in library covers every category."""
        assert len(DEFAULT_EXERCISES) == 21

        categories = {e.category for e in DEFAULT_EXERCISES}
        assert categories == {c.value for c in ExerciseCategory}
        assert all(e.owner_id is None and not e.is_custom for e in DEFAULT_EXERCISES)


class TestProgram:
    """Tests for Program models."""

    def test_has_workout(self):
        """Test that a day with no exercises is a rest day."""
        rest = ProgramDay(name="Sunday", order=6)
        training = ProgramDay(name="Monday", order=0, exercises=[ProgramExercise(exercise_id=1)])

        assert not rest.has_workout
        assert training.has_workout

    def test_program_from_dict(self):
        """Test program deserialization with nested days."""
        data = {
            "id": 3,
            "owner_id": "alice",
            "name": "Upper/Lower",
            "is_active": 1,
            "created_at": "2024-01-01T08:00:00",
            "days": [
                {
                    "name": "Monday",
                    "order": 0,
                    "exercises": [{"exercise_id": 1, "sets": 4, "reps": "6-8"}],
                }
            ],
        }
        program = Program.from_dict(data)

        assert program.is_active is True
        assert program.created_at == datetime(2024, 1, 1, 8, 0)
        assert program.days[0].exercises[0].reps == "6-8"
        assert len(program.training_days) == 1

    def test_get_summary(self):
        """Test the plain-text weekly summary."""
        program = Program(
            name="Full Body",
            owner_id="alice",
            days=[
                ProgramDay(
                    name="Monday",
                    order=0,
                    exercises=[ProgramExercise(exercise_id=1, exercise_name="Squat", sets=5, reps="5")],
                ),
                ProgramDay(name="Tuesday", order=1),
            ],
        )
        summary = program.get_summary()

        assert "Training days: 1/week" in summary
        assert "Squat: 5x5" in summary
        assert "Tuesday: rest" in summary


class TestProgramDraft:
    """Tests for ProgramDraft."""

    def test_weekly_has_seven_days(self):
        """Test blank weekly draft."""
        draft = ProgramDraft.weekly("PPL")

        assert [d.name for d in draft.days] == WEEKDAYS
        assert all(not d.exercises for d in draft.days)

    def test_day_lookup_is_case_insensitive(self):
        """Test finding a draft day by name."""
        draft = ProgramDraft.weekly("PPL")

        assert draft.day("wednesday").name == "Wednesday"
        with pytest.raises(KeyError):
            draft.day("Funday")

    def test_validate_requires_name(self):
        """Test that an empty name is rejected."""
        with pytest.raises(ValidationError):
            ProgramDraft.weekly("   ").validate()

    def test_validate_requires_exercise(self):
        """Test that a planned exercise without an exercise is rejected."""
        draft = ProgramDraft.weekly("PPL")
        draft.day("Monday").exercises.append(PlannedExerciseDraft(exercise_id=None))

        with pytest.raises(ValidationError):
            draft.validate()

    def test_validate_rejects_negative_sets(self):
        """Test that negative set counts are rejected."""
        draft = ProgramDraft(
            name="PPL",
            days=[DayDraft(name="Monday", exercises=[PlannedExerciseDraft(exercise_id=1, sets=-1)])],
        )

        with pytest.raises(ValidationError):
            draft.validate()

    def test_validate_accepts_zero_sets(self):
        """Test that zero sets is allowed."""
        draft = ProgramDraft(
            name="PPL",
            days=[DayDraft(name="Monday", exercises=[PlannedExerciseDraft(exercise_id=1, sets=0)])],
        )

        draft.validate()

    def test_from_program_fills_missing_weekdays(self):
        """Test that editing a stored program shows the full week."""
        program = Program(
            name="Two Day",
            owner_id="alice",
            days=[
                ProgramDay(
                    name="Thursday",
                    order=3,
                    exercises=[
                        ProgramExercise(exercise_id=2, order=1),
                        ProgramExercise(exercise_id=1, order=0),
                    ],
                )
            ],
        )
        draft = ProgramDraft.from_program(program)

        assert [d.name for d in draft.days] == WEEKDAYS
        assert [e.exercise_id for e in draft.day("Thursday").exercises] == [1, 2]
        assert draft.day("Monday").exercises == []


class TestProfile:
    """Tests for Profile model."""

    def test_default_profile(self):
        """Test defaults used when no settings were saved."""
        profile = Profile.default(Identity(user_id="alice", email="a@example.com"))

        assert profile.id == "alice"
        assert profile.units == Units.KG
        assert profile.week_start == WeekStart.MONDAY
        assert profile.email == "a@example.com"

    def test_profile_from_dict(self):
        """Test profile deserialization."""
        profile = Profile.from_dict({"id": "bob", "units": "lbs", "week_start": "sunday"})

        assert profile.units == Units.LBS
        assert profile.week_start == WeekStart.SUNDAY


class TestWorkout:
    """Tests for Workout and WorkoutLog models."""

    def test_new_workout_in_progress(self):
        """Test default workout status."""
        workout = Workout(owner_id="alice")

        assert workout.status == WorkoutStatus.IN_PROGRESS
        assert not workout.is_completed

    def test_workout_from_dict(self):
        """Test workout deserialization."""
        workout = Workout.from_dict(
            {
                "owner_id": "alice",
                "status": "completed",
                "started_at": "2024-01-01T09:00:00",
                "ended_at": "2024-01-01T10:00:00",
            }
        )

        assert workout.is_completed
        assert workout.ended_at == datetime(2024, 1, 1, 10, 0)

    def test_log_is_filled(self):
        """Test that a log counts as filled once reps or weight is set."""
        assert not WorkoutLog(exercise_id=1, set_number=1).is_filled
        assert WorkoutLog(exercise_id=1, set_number=1, weight=0).is_filled
