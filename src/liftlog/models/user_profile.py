"""User profile and identity models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Units(str, Enum):
    """Display units for weights."""

    KG = "kg"
    LBS = "lbs"


class WeekStart(str, Enum):
    """First day of the displayed week."""

    MONDAY = "monday"
    SUNDAY = "sunday"


@dataclass(frozen=True)
class Identity:
    """The authenticated caller, passed explicitly to every operation."""

    user_id: str
    email: str | None = None


@dataclass
class Profile:
    """User preferences.

    ``week_start`` only changes how the week is displayed; stored day
    order stays Monday-based.
    """

    id: str
    units: Units = Units.KG
    week_start: WeekStart = WeekStart.MONDAY
    email: str | None = None
    updated_at: datetime | None = None

    @classmethod
    def default(cls, identity: Identity) -> "Profile":
        """Profile used when the user has never saved settings."""
        return cls(id=identity.user_id, email=identity.email)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "units": self.units.value,
            "week_start": self.week_start.value,
            "email": self.email,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Profile":
        """Create from dictionary."""
        updated_at = data.get("updated_at")
        return cls(
            id=data["id"],
            units=Units(data.get("units") or "kg"),
            week_start=WeekStart(data.get("week_start") or "monday"),
            email=data.get("email"),
            updated_at=datetime.fromisoformat(updated_at) if updated_at else None,
        )
