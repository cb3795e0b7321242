"""CLI commands for liftlog."""

from .exercises import exercises
from .init import init
from .programs import programs
from .progress import progress
from .serve import serve
from .settings import settings
from .today import today
from .workout import workout

__all__ = [
    "exercises",
    "init",
    "programs",
    "progress",
    "serve",
    "settings",
    "today",
    "workout",
]
