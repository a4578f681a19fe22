"""
Workout statistics model.
Derived from the full history on demand, never persisted.
"""
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class WorkoutStats(BaseModel):
    """Aggregate metrics over the recorded workouts."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    total_workouts: int = Field(..., alias="totalWorkouts")
    total_calories: int = Field(..., alias="totalCalories")
    total_duration: int = Field(..., alias="totalDuration")
    avg_calories_per_workout: int = Field(..., alias="avgCaloriesPerWorkout")
    avg_duration: int = Field(..., alias="avgDuration")
    most_frequent_workout: str = Field(..., alias="mostFrequentWorkout")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API response."""
        return self.model_dump(by_alias=True)
