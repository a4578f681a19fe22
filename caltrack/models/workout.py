"""
Workout record model.

Field aliases are the persisted names (id, type, duration, calories, date,
intensity) so a history written by the browser client loads unchanged.
"""
import threading
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Intensity(str, Enum):
    """Workout intensity level."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def label(self) -> str:
        """Capitalized form for display ("Medium")."""
        return self.value.capitalize()

    @classmethod
    def parse(cls, value: Any) -> "Intensity":
        """Case-insensitive lookup. Raises ValueError for anything else."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise ValueError(f"intensity must be one of low, medium, high (got {value!r})")


def format_intensity(intensity: Optional[Intensity | str]) -> str:
    """Display label for an intensity, "Medium" when none was recorded."""
    if not intensity:
        return Intensity.MEDIUM.label
    try:
        return Intensity.parse(intensity).label
    except ValueError:
        text = str(intensity)
        return text[:1].upper() + text[1:]


_id_lock = threading.Lock()
_last_id_ms = 0


def new_record_id() -> str:
    """
    Timestamp-derived record id (epoch milliseconds).

    Ids handed out by one process are strictly increasing, so two records
    created within the same millisecond still get distinct ids.
    """
    global _last_id_ms
    now_ms = int(time.time() * 1000)
    with _id_lock:
        if now_ms <= _last_id_ms:
            now_ms = _last_id_ms + 1
        _last_id_ms = now_ms
    return str(now_ms)


class WorkoutRecord(BaseModel):
    """One completed, estimated workout. Immutable once created."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., min_length=1, description="Opaque unique identifier")
    workout_type: str = Field(..., alias="type", min_length=1, description="Free-form workout label")
    duration_minutes: int = Field(..., alias="duration", gt=0, description="Duration in minutes")
    calories: int = Field(..., ge=0, description="Estimated calories burned")
    recorded_at: datetime = Field(..., alias="date", description="Creation timestamp")
    intensity: Intensity = Field(Intensity.MEDIUM, description="Workout intensity")

    @field_validator("intensity", mode="before")
    @classmethod
    def _default_intensity(cls, value: Any) -> Any:
        # Records saved before intensity was tracked have none
        if value is None or value == "":
            return Intensity.MEDIUM
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @classmethod
    def create(
        cls,
        workout_type: str,
        duration_minutes: int,
        intensity: Intensity | str,
        calories: int,
    ) -> "WorkoutRecord":
        """Build a new record stamped with a fresh id and the current time."""
        return cls(
            id=new_record_id(),
            workout_type=workout_type,
            duration_minutes=duration_minutes,
            intensity=Intensity.parse(intensity),
            calories=calories,
            recorded_at=datetime.now(timezone.utc),
        )

    @property
    def intensity_label(self) -> str:
        return format_intensity(self.intensity)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the persisted/API dictionary form."""
        return self.model_dump(mode="json", by_alias=True)
