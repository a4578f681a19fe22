"""
Quick-start workout presets offered to the client.
"""
from pydantic import BaseModel, ConfigDict, Field


class WorkoutPreset(BaseModel):
    """A named workout with a suggested duration."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    default_duration: int = Field(..., alias="defaultDuration", gt=0)


PRESETS: tuple[WorkoutPreset, ...] = (
    WorkoutPreset(name="Running", default_duration=30),
    WorkoutPreset(name="Swimming", default_duration=45),
    WorkoutPreset(name="Cycling", default_duration=40),
    WorkoutPreset(name="Weight Training", default_duration=60),
    WorkoutPreset(name="Walking", default_duration=30),
)
