"""Exercise library models."""

from dataclasses import dataclass
from enum import Enum


class ExerciseCategory(str, Enum):
    """Categories used by the built-in library."""

    CHEST = "Chest"
    BACK = "Back"
    LEGS = "Legs"
    SHOULDERS = "Shoulders"
    ARMS = "Arms"
    CORE = "Core"


@dataclass
class Exercise:
    """An exercise in the library.

    Global entries have no owner. Custom entries belong to the user
    that created them and are the only ones that user may edit.
    """

    name: str
    category: str
    description: str | None = None
    is_custom: bool = False
    owner_id: str | None = None
    id: int | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "description": self.description,
            "is_custom": self.is_custom,
            "owner_id": self.owner_id,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Exercise":
        """Create from dictionary."""
        return cls(
            id=data.get("id"),
            name=data["name"],
            category=data["category"],
            description=data.get("description"),
            is_custom=data.get("is_custom", False),
            owner_id=data.get("owner_id"),
        )

    def matches(self, query: str) -> bool:
        """Case-insensitive match against name or category."""
        query = query.strip().lower()
        return query in self.name.lower() or query in self.category.lower()


def _ex(name: str, category: ExerciseCategory, description: str) -> Exercise:
    return Exercise(name=name, category=category.value, description=description)


DEFAULT_EXERCISES: list[Exercise] = [
    # Chest
    _ex("Bench Press", ExerciseCategory.CHEST,
        "Lie on a flat bench and press the barbell up from your chest."),
    _ex("Push Up", ExerciseCategory.CHEST,
        "A classic bodyweight exercise starting from a plank position."),
    _ex("Incline Bench Press", ExerciseCategory.CHEST,
        "Press the barbell up from your chest on an inclined bench to target upper chest."),
    _ex("Dumbbell Fly", ExerciseCategory.CHEST,
        "Lie on a bench and spread your arms wide with dumbbells, then bring them together."),
    # Back
    _ex("Deadlift", ExerciseCategory.BACK,
        "Lift a loaded barbell from the ground to the hips, then lower it back down."),
    _ex("Pull Up", ExerciseCategory.BACK,
        "Hang from a bar and pull your body up until your chin is over the bar."),
    _ex("Bent Over Row", ExerciseCategory.BACK,
        "Bend at the hips and pull a barbell towards your lower chest."),
    _ex("Lat Pulldown", ExerciseCategory.BACK,
        "Pull a hanging bar down towards your upper chest while seated."),
    # Legs
    _ex("Squat", ExerciseCategory.LEGS,
        "Lower your hips from a standing position and then stand back up."),
    _ex("Lunge", ExerciseCategory.LEGS,
        "Step forward with one leg and lower your hips until both knees are bent at 90 degrees."),
    _ex("Leg Press", ExerciseCategory.LEGS,
        "Push a weighted platform away from you using your legs while seated."),
    _ex("Calf Raise", ExerciseCategory.LEGS,
        "Raise your heels off the ground while standing or seated."),
    # Shoulders
    _ex("Overhead Press", ExerciseCategory.SHOULDERS,
        "Press a barbell or dumbbells from your shoulders up over your head."),
    _ex("Lateral Raise", ExerciseCategory.SHOULDERS,
        "Lift dumbbells out to the side until they are at shoulder height."),
    _ex("Front Raise", ExerciseCategory.SHOULDERS,
        "Lift dumbbells forward until they are at shoulder height."),
    # Arms
    _ex("Bicep Curl", ExerciseCategory.ARMS,
        "Curl a barbell or dumbbells towards your shoulders."),
    _ex("Tricep Extension", ExerciseCategory.ARMS,
        "Extend your arms to lift a weight, focusing on the triceps."),
    _ex("Hammer Curl", ExerciseCategory.ARMS,
        "Curl dumbbells with your palms facing each other."),
    # Core
    _ex("Plank", ExerciseCategory.CORE,
        "Hold a push-up position, resting on your forearms."),
    _ex("Crunch", ExerciseCategory.CORE,
        "Lie on your back and lift your shoulders off the ground."),
    _ex("Leg Raise", ExerciseCategory.CORE,
        "Lie on your back and lift your legs up towards the ceiling."),
]
