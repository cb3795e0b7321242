"""Training program data models."""

from dataclasses import dataclass, field
from datetime import datetime

from ..errors import ValidationError

# Monday-based: a day's stored order is its index in this list.
WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

DEFAULT_SETS = 3
DEFAULT_REPS = "10"


@dataclass
class ProgramExercise:
    """A planned exercise within a program day."""

    exercise_id: int
    sets: int | None = DEFAULT_SETS
    reps: str = DEFAULT_REPS  # free text, e.g. "8-12"
    order: int = 0
    day_id: int | None = None
    exercise_name: str | None = None
    id: int | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "day_id": self.day_id,
            "exercise_id": self.exercise_id,
            "exercise_name": self.exercise_name,
            "sets": self.sets,
            "reps": self.reps,
            "order": self.order,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ProgramExercise":
        """Create from dictionary."""
        return cls(
            id=data.get("id"),
            day_id=data.get("day_id"),
            exercise_id=data["exercise_id"],
            exercise_name=data.get("exercise_name"),
            sets=data.get("sets", DEFAULT_SETS),
            reps=str(data.get("reps", DEFAULT_REPS)),
            order=data.get("order", 0),
        )


@dataclass
class ProgramDay:
    """One weekday slot of a program.

    ``order`` is Monday-based (Monday=0 .. Sunday=6) whatever the user's
    week-start preference is.
    """

    name: str
    order: int
    program_id: int | None = None
    exercises: list[ProgramExercise] = field(default_factory=list)
    id: int | None = None

    @property
    def has_workout(self) -> bool:
        return len(self.exercises) > 0

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "program_id": self.program_id,
            "name": self.name,
            "order": self.order,
            "exercises": [ex.to_dict() for ex in self.exercises],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ProgramDay":
        """Create from dictionary."""
        return cls(
            id=data.get("id"),
            program_id=data.get("program_id"),
            name=data["name"],
            order=data["order"],
            exercises=[ProgramExercise.from_dict(ex) for ex in data.get("exercises", [])],
        )


@dataclass
class Program:
    """A user-owned weekly workout template."""

    name: str
    owner_id: str
    description: str | None = None
    is_active: bool = False
    days: list[ProgramDay] = field(default_factory=list)
    id: int | None = None
    created_at: datetime | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "name": self.name,
            "description": self.description,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "days": [day.to_dict() for day in self.days],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Program":
        """Create from dictionary."""
        created_at = data.get("created_at")
        return cls(
            id=data.get("id"),
            owner_id=data["owner_id"],
            name=data["name"],
            description=data.get("description"),
            is_active=bool(data.get("is_active", False)),
            created_at=datetime.fromisoformat(created_at) if created_at else None,
            days=[ProgramDay.from_dict(day) for day in data.get("days", [])],
        )

    @property
    def training_days(self) -> list[ProgramDay]:
        """Days that have at least one planned exercise."""
        return [day for day in self.days if day.has_workout]

    def get_summary(self) -> str:
        """Generate a plain-text summary of the weekly plan."""
        summary = f"Program: {self.name}\n"
        if self.description:
            summary += f"Description: {self.description}\n"
        summary += f"Training days: {len(self.training_days)}/week\n\n"

        for day in sorted(self.days, key=lambda d: d.order):
            if not day.exercises:
                summary += f"  {day.name}: rest\n"
                continue
            summary += f"  {day.name}:\n"
            for ex in day.exercises:
                label = ex.exercise_name or f"exercise #{ex.exercise_id}"
                summary += f"    - {label}: {ex.sets}x{ex.reps}\n"

        return summary


@dataclass
class PlannedExerciseDraft:
    """A planned exercise as entered in the program editor."""

    exercise_id: int | None
    sets: int = DEFAULT_SETS
    reps: str = DEFAULT_REPS


@dataclass
class DayDraft:
    """A weekday as entered in the program editor."""

    name: str
    exercises: list[PlannedExerciseDraft] = field(default_factory=list)


@dataclass
class ProgramDraft:
    """Editable program structure submitted for create or update."""

    name: str
    description: str = ""
    days: list[DayDraft] = field(default_factory=list)

    @classmethod
    def weekly(cls, name: str, description: str = "") -> "ProgramDraft":
        """A blank draft with one day per weekday, Monday first."""
        return cls(
            name=name,
            description=description,
            days=[DayDraft(name=day) for day in WEEKDAYS],
        )

    def day(self, name: str) -> DayDraft:
        """Get a day by name (case-insensitive)."""
        for day in self.days:
            if day.name.lower() == name.lower():
                return day
        raise KeyError(name)

    def validate(self) -> None:
        """Check required fields before anything is written.

        Raises:
            ValidationError: If the name is missing, there are more than
                seven days, or a planned exercise is incomplete.
        """
        if not self.name or not self.name.strip():
            raise ValidationError("Program name is required")
        if len(self.days) > len(WEEKDAYS):
            raise ValidationError(f"A program has at most {len(WEEKDAYS)} days")
        for day in self.days:
            for ex in day.exercises:
                if ex.exercise_id is None:
                    raise ValidationError(f"{day.name}: every planned exercise needs an exercise")
                if ex.sets is None or ex.sets < 0:
                    raise ValidationError(f"{day.name}: sets must be zero or more")

    @classmethod
    def from_program(cls, program: Program) -> "ProgramDraft":
        """Build an editable draft from a stored program.

        Stored days are matched to weekdays by name; missing weekdays come
        back empty so the editor always shows a full week.
        """
        by_name = {day.name: day for day in program.days}
        days = []
        for weekday in WEEKDAYS:
            stored = by_name.get(weekday)
            exercises = []
            if stored:
                exercises = [
                    PlannedExerciseDraft(exercise_id=ex.exercise_id, sets=ex.sets, reps=ex.reps)
                    for ex in sorted(stored.exercises, key=lambda e: e.order)
                ]
            days.append(DayDraft(name=weekday, exercises=exercises))
        return cls(name=program.name, description=program.description or "", days=days)
