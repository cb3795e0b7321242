"""Tests for today's workout resolution and the weekly calendar."""

import asyncio
from datetime import date, datetime, timedelta

import pytest

from liftlog.db import ProfileRepository, ProgramRepository
from liftlog.models.program import PlannedExerciseDraft, Program, ProgramDay, ProgramDraft, ProgramExercise
from liftlog.models.user_profile import Profile, WeekStart
from liftlog.services.programs import ProgramService
from liftlog.services.schedule import (
    ScheduleEntry,
    ScheduleService,
    build_week_calendar,
    build_weekly_schedule,
    current_day_index,
    display_slot_to_order,
    monday_index,
    resolve_todays_day,
    weekday_name,
)
from liftlog.services.session import SessionService

MONDAY = date(2024, 1, 1)
WEDNESDAY = date(2024, 1, 3)
SUNDAY = date(2024, 1, 7)


def _day(name: str, order: int, exercises: int = 1) -> ProgramDay:
    return ProgramDay(
        name=name,
        order=order,
        exercises=[ProgramExercise(exercise_id=i + 1) for i in range(exercises)],
    )


class TestDayIndex:
    """Tests for weekday index helpers."""

    def test_monday_start(self):
        """Test Monday-based display index."""
        assert current_day_index(MONDAY, WeekStart.MONDAY) == 0
        assert current_day_index(SUNDAY, WeekStart.MONDAY) == 6

    def test_sunday_start(self):
        """Test Sunday-based display index."""
        assert current_day_index(SUNDAY, WeekStart.SUNDAY) == 0
        assert current_day_index(MONDAY, WeekStart.SUNDAY) == 1
        assert current_day_index(date(2024, 1, 6), WeekStart.SUNDAY) == 6

    @pytest.mark.parametrize("week_start", list(WeekStart))
    @pytest.mark.parametrize("start", [date(2024, 2, 27), date(2023, 12, 29), date(2025, 6, 15)])
    def test_bijective_over_a_week(self, week_start, start):
        """Test that seven consecutive days map onto 0..6 exactly once."""
        indices = [current_day_index(start + timedelta(days=i), week_start) for i in range(7)]

        assert sorted(indices) == list(range(7))

    def test_monday_index_and_name(self):
        """Test stored-order index and locale-independent weekday name."""
        assert monday_index(WEDNESDAY) == 2
        assert weekday_name(WEDNESDAY) == "Wednesday"
        assert weekday_name(SUNDAY) == "Sunday"


class TestResolveTodaysDay:
    """Tests for resolve_todays_day."""

    def test_name_match_wins_over_order(self):
        """Test that a day named after today wins even at another order."""
        days = [_day("Push", 0), _day("Monday", 3)]

        resolved = resolve_todays_day(days, "Monday", 0)

        assert resolved.name == "Monday"

    def test_name_match_is_case_insensitive(self):
        """Test case-insensitive name matching."""
        resolved = resolve_todays_day([_day("wednesday", 5)], "Wednesday", 2)

        assert resolved.order == 5

    def test_duplicate_names_pick_lowest_order(self):
        """Test that duplicate day names resolve to the lowest order."""
        days = [_day("Monday", 4), _day("Monday", 1)]

        assert resolve_todays_day(days, "Monday", 0).order == 1

    def test_falls_back_to_order(self):
        """Test order fallback when no day is named after today."""
        days = [_day("Push", 0), _day("Pull", 2), _day("Legs", 4)]

        assert resolve_todays_day(days, "Wednesday", 2).name == "Pull"

    def test_rest_day(self):
        """Test that no match is a rest day, not an error."""
        days = [_day("Push", 0), _day("Pull", 2)]

        assert resolve_todays_day(days, "Tuesday", 1) is None
        assert resolve_todays_day([], "Tuesday", 1) is None


class TestWeeklySchedule:
    """Tests for schedule and calendar building."""

    def test_build_weekly_schedule(self):
        """Test has_workout flags per day."""
        schedule = build_weekly_schedule([_day("Monday", 0), _day("Tuesday", 1, exercises=0)])

        assert schedule == [
            ScheduleEntry(day_name="Monday", day_order=0, has_workout=True),
            ScheduleEntry(day_name="Tuesday", day_order=1, has_workout=False),
        ]

    def test_display_slot_to_order(self):
        """Test translation of display slots to stored order."""
        assert display_slot_to_order(0, WeekStart.SUNDAY) == 6
        assert display_slot_to_order(1, WeekStart.SUNDAY) == 0
        assert display_slot_to_order(6, WeekStart.SUNDAY) == 5
        assert [display_slot_to_order(i, WeekStart.MONDAY) for i in range(7)] == list(range(7))

    def test_sunday_calendar(self):
        """Test a Sunday-start week shows Sunday's program day first."""
        schedule = [
            ScheduleEntry(day_name="Sunday", day_order=6, has_workout=True),
            ScheduleEntry(day_name="Monday", day_order=0, has_workout=False),
        ]

        calendar = build_week_calendar(schedule, WEDNESDAY, WeekStart.SUNDAY)

        assert [s.label for s in calendar] == ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
        assert calendar[0].day_date == date(2023, 12, 31)
        assert calendar[0].has_workout
        assert not calendar[1].has_workout
        assert [s.is_today for s in calendar].index(True) == 3

    def test_monday_calendar(self):
        """Test a Monday-start week."""
        calendar = build_week_calendar([], SUNDAY, WeekStart.MONDAY)

        assert calendar[0].day_date == MONDAY
        assert calendar[6].is_today
        assert calendar[6].day_order == 6
        assert calendar[0].to_dict()["date"] == "2024-01-01"


class TestScheduleService:
    """Tests for ScheduleService against a database."""

    def _create_weekly(self, db_path, identity, name: str) -> Program:
        async def create():
            draft = ProgramDraft.weekly(name)
            draft.day("Monday").exercises.append(PlannedExerciseDraft(exercise_id=1, sets=3))
            draft.day("Wednesday").exercises.append(PlannedExerciseDraft(exercise_id=2, sets=2))
            return await ProgramService(db_path).create_program(identity, draft)

        return asyncio.run(create())

    def test_no_program(self, db_path, identity):
        """Test that having no program is an empty overview."""
        overview = asyncio.run(ScheduleService(db_path).get_today(identity, MONDAY))

        assert overview.program is None
        assert overview.todays_day is None
        assert overview.is_rest_day
        assert len(overview.calendar) == 7

    def test_today_from_program(self, db_path, identity):
        """Test resolving today's planned day."""
        self._create_weekly(db_path, identity, "Full Body")

        overview = asyncio.run(ScheduleService(db_path).get_today(identity, WEDNESDAY))

        assert overview.program.name == "Full Body"
        assert overview.todays_day.name == "Wednesday"
        assert [e.exercise_id for e in overview.todays_day.exercises] == [2]
        assert len(overview.schedule) == 7
        assert not overview.is_rest_day

    def test_rest_day_in_program(self, db_path, identity):
        """Test a weekday without exercises."""
        self._create_weekly(db_path, identity, "Full Body")

        overview = asyncio.run(ScheduleService(db_path).get_today(identity, date(2024, 1, 2)))

        assert overview.todays_day.name == "Tuesday"
        assert overview.is_rest_day

    def test_active_program_preferred(self, db_path, identity):
        """Test that the active program is used over a newer one."""
        first = self._create_weekly(db_path, identity, "First")
        self._create_weekly(db_path, identity, "Second")

        async def run():
            await ProgramRepository(db_path).set_active(identity.user_id, first.id)
            return await ScheduleService(db_path).current_program(identity)

        assert asyncio.run(run()).name == "First"

    def test_most_recent_when_none_active(self, db_path, identity):
        """Test fallback to the most recently created program."""

        async def run():
            repo = ProgramRepository(db_path)
            await repo.create(Program(name="Old", owner_id="alice", created_at=datetime(2024, 1, 1)))
            await repo.create(Program(name="New", owner_id="alice", created_at=datetime(2024, 2, 1)))
            return await ScheduleService(db_path).current_program(identity)

        assert asyncio.run(run()).name == "New"

    def test_other_users_programs_ignored(self, db_path, identity, other_identity):
        """Test that programs are resolved per owner."""
        self._create_weekly(db_path, other_identity, "Bob's")

        overview = asyncio.run(ScheduleService(db_path).get_today(identity, MONDAY))

        assert overview.program is None

    def test_sunday_week_start_from_profile(self, db_path, identity):
        """Test that the calendar follows the saved week start."""

        async def run():
            profile = Profile.default(identity)
            profile.week_start = WeekStart.SUNDAY
            await ProfileRepository(db_path).upsert(profile)
            return await ScheduleService(db_path).get_today(identity, MONDAY)

        overview = asyncio.run(run())

        assert overview.calendar[0].label == "Sun"
        assert overview.to_dict()["current_day_index"] == 1

    def test_completed_today(self, db_path, identity):
        """Test detection of a workout finished today."""

        async def run():
            service = SessionService(db_path)
            workout = await service.start_workout(identity)
            session = await service.open_session(identity, workout.id)
            await service.complete(identity, session, now=datetime(2024, 1, 1, 18, 30))
            schedule = ScheduleService(db_path)
            return (
                await schedule.get_today(identity, MONDAY),
                await schedule.get_today(identity, date(2024, 1, 2)),
            )

        monday, tuesday = asyncio.run(run())

        assert monday.completed_today
        assert not tuesday.completed_today
