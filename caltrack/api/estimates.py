"""
Calorie estimation API endpoint.
"""
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from caltrack.api.deps import get_estimation_service
from caltrack.services.estimation import EstimationService

router = APIRouter()


class CalculateCaloriesRequest(BaseModel):
    """Workout parameters to estimate."""
    workoutType: Optional[str] = Field(None, description="Workout label, e.g. running")
    duration: Optional[float] = Field(None, description="Duration in minutes")
    intensity: Optional[str] = Field(None, description="low, medium or high")


class CalculateCaloriesResponse(BaseModel):
    """Estimated calories."""
    calories: int
    source: str = Field(..., description="estimator or fallback")


@router.post("/calculate-calories", response_model=CalculateCaloriesResponse)
async def calculate_calories(
    request: CalculateCaloriesRequest,
    service: EstimationService = Depends(get_estimation_service),
):
    """
    Estimate calories burned for a workout.
    """
    result = await service.estimate_detailed(
        request.workoutType,
        request.duration,
        request.intensity,
    )
    return CalculateCaloriesResponse(calories=result.calories, source=result.source)
