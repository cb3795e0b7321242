"""Today's workout resolution and weekly schedule.

Stored day order is always Monday-based (Monday=0 .. Sunday=6). The
user's week-start preference only changes where the displayed week
begins, so every display position is translated back to a stored order
before it is compared with program data.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from pathlib import Path

from ..db.repositories import (
    ProfileRepository,
    ProgramDayRepository,
    ProgramRepository,
    WorkoutRepository,
)
from ..models.program import WEEKDAYS, Program, ProgramDay
from ..models.user_profile import Identity, Profile, WeekStart

logger = logging.getLogger(__name__)

SHORT_WEEKDAYS = [name[:3] for name in WEEKDAYS]


def sunday_based_weekday(today: date) -> int:
    """Weekday with Sunday=0 .. Saturday=6."""
    return (today.weekday() + 1) % 7


def monday_index(today: date) -> int:
    """Weekday with Monday=0 .. Sunday=6, the stored day order."""
    return (sunday_based_weekday(today) + 6) % 7


def current_day_index(today: date, week_start: WeekStart) -> int:
    """Position of today within the displayed week (0..6)."""
    if week_start == WeekStart.MONDAY:
        return monday_index(today)
    return sunday_based_weekday(today)


def weekday_name(today: date) -> str:
    """English weekday name, independent of the process locale."""
    return WEEKDAYS[monday_index(today)]


def display_slot_to_order(slot: int, week_start: WeekStart) -> int:
    """Translate a displayed week position to the stored Monday-based order."""
    if week_start == WeekStart.MONDAY:
        return slot
    return (slot + 6) % 7


def resolve_todays_day(
    days: list[ProgramDay], today_name: str, today_monday_index: int
) -> ProgramDay | None:
    """Pick the program day scheduled for today.

    The day name wins when it matches (case-insensitive), whatever its
    order says. Otherwise fall back to the day stored at today's
    Monday-based order, which covers programs whose names were not kept
    as weekday names. Returns None on a rest day.

    Args:
        days: All days of the program
        today_name: Today's weekday name, e.g. "Monday"
        today_monday_index: Today's Monday-based index

    Returns:
        The scheduled day, or None
    """
    wanted = today_name.strip().casefold()
    by_name = [day for day in days if day.name.strip().casefold() == wanted]
    if by_name:
        return min(by_name, key=lambda d: d.order)

    for day in days:
        if day.order == today_monday_index:
            return day

    return None


@dataclass
class ScheduleEntry:
    """One program day as shown on the weekly calendar."""

    day_name: str
    day_order: int
    has_workout: bool

    def to_dict(self) -> dict:
        return {
            "day_name": self.day_name,
            "day_order": self.day_order,
            "has_workout": self.has_workout,
        }


@dataclass
class CalendarSlot:
    """A displayed day of the current week."""

    label: str
    day_date: date
    day_order: int
    is_today: bool
    has_workout: bool

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "date": self.day_date.isoformat(),
            "day_order": self.day_order,
            "is_today": self.is_today,
            "has_workout": self.has_workout,
        }


def build_weekly_schedule(days: list[ProgramDay]) -> list[ScheduleEntry]:
    """Summarise every program day for calendar indicators."""
    return [
        ScheduleEntry(day_name=day.name, day_order=day.order, has_workout=day.has_workout)
        for day in days
    ]


def build_week_calendar(
    schedule: list[ScheduleEntry], today: date, week_start: WeekStart
) -> list[CalendarSlot]:
    """Lay out the current week in display order.

    Slot ``i`` shows the stored order ``display_slot_to_order(i)``; a
    slot has a workout when any schedule entry at that order does.
    """
    today_slot = current_day_index(today, week_start)
    first_day = today - timedelta(days=today_slot)

    slots = []
    for slot in range(7):
        order = display_slot_to_order(slot, week_start)
        has_workout = any(e.has_workout for e in schedule if e.day_order == order)
        slots.append(
            CalendarSlot(
                label=SHORT_WEEKDAYS[order],
                day_date=first_day + timedelta(days=slot),
                day_order=order,
                is_today=slot == today_slot,
                has_workout=has_workout,
            )
        )
    return slots


@dataclass
class TodayOverview:
    """Everything the home screen needs for one day."""

    today: date
    profile: Profile
    program: Program | None = None
    todays_day: ProgramDay | None = None
    schedule: list[ScheduleEntry] = field(default_factory=list)
    calendar: list[CalendarSlot] = field(default_factory=list)
    completed_today: bool = False

    @property
    def is_rest_day(self) -> bool:
        return self.todays_day is None or not self.todays_day.has_workout

    def to_dict(self) -> dict:
        return {
            "today": self.today.isoformat(),
            "weekday": weekday_name(self.today),
            "week_start": self.profile.week_start.value,
            "current_day_index": current_day_index(self.today, self.profile.week_start),
            "program": (
                {"id": self.program.id, "name": self.program.name} if self.program else None
            ),
            "todays_workout": self.todays_day.to_dict() if self.todays_day else None,
            "is_rest_day": self.is_rest_day,
            "completed_today": self.completed_today,
            "schedule": [e.to_dict() for e in self.schedule],
            "calendar": [s.to_dict() for s in self.calendar],
        }


class ScheduleService:
    """Resolves today's workout from stored programs."""

    def __init__(self, db_path: Path | None = None):
        self.profiles = ProfileRepository(db_path)
        self.programs = ProgramRepository(db_path)
        self.days = ProgramDayRepository(db_path)
        self.workouts = WorkoutRepository(db_path)

    async def current_program(self, identity: Identity) -> Program | None:
        """The active program, else the most recently created one."""
        program = await self.programs.get_active(identity.user_id)
        if program is None:
            program = await self.programs.most_recent(identity.user_id)
        return program

    async def get_today(self, identity: Identity, today: date | None = None) -> TodayOverview:
        """Build the overview for ``today`` (defaults to the local date)."""
        today = today or date.today()
        profile = await self.profiles.get(identity.user_id) or Profile.default(identity)
        overview = TodayOverview(today=today, profile=profile)

        overview.completed_today = await self.workouts.count_completed(
            identity.user_id,
            ended_after=datetime.combine(today, time.min),
            ended_before=datetime.combine(today, time.max),
        ) > 0

        program = await self.current_program(identity)
        if program is None:
            overview.calendar = build_week_calendar([], today, profile.week_start)
            return overview

        days = await self.days.list_for_program(identity.user_id, program.id)
        program.days = days
        overview.program = program
        overview.todays_day = resolve_todays_day(days, weekday_name(today), monday_index(today))
        overview.schedule = build_weekly_schedule(days)
        overview.calendar = build_week_calendar(overview.schedule, today, profile.week_start)

        logger.debug(
            "Resolved %s for program %s: %s",
            today,
            program.id,
            overview.todays_day.name if overview.todays_day else "rest day",
        )
        return overview
