"""
Workout history API endpoints.
"""
from typing import Any, Optional

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response
from pydantic import BaseModel, Field

from caltrack.api.deps import get_estimation_service, get_history_store
from caltrack.core.exceptions import ValidationError
from caltrack.core.logging import get_logger
from caltrack.models.workout import Intensity, WorkoutRecord
from caltrack.services.estimation import EstimationService
from caltrack.services.history import HistoryStore

logger = get_logger(__name__)
router = APIRouter()


# ========================================
# Request/Response Schemas
# ========================================

class CreateWorkoutRequest(BaseModel):
    """Request to estimate and record a workout."""
    workoutType: Optional[str] = Field(None, description="Workout label")
    duration: Optional[float] = Field(None, description="Duration in whole minutes")
    intensity: Optional[str] = Field(Intensity.MEDIUM.value, description="low, medium or high")


class WorkoutResponse(BaseModel):
    """Workout record response."""
    id: str
    type: str
    duration: int
    calories: int
    date: str
    intensity: str


class DeleteWorkoutResponse(BaseModel):
    deleted: int


def _to_response(record: WorkoutRecord) -> WorkoutResponse:
    return WorkoutResponse(**record.to_dict())


# ========================================
# API Endpoints
# ========================================

@router.get("", response_model=list[WorkoutResponse])
async def list_workouts(store: HistoryStore = Depends(get_history_store)):
    """
    Get all recorded workouts in the order they were added.
    """
    return [_to_response(r) for r in store.records()]


@router.post("", response_model=WorkoutResponse, status_code=201)
async def create_workout(
    request: CreateWorkoutRequest,
    service: EstimationService = Depends(get_estimation_service),
    store: HistoryStore = Depends(get_history_store),
):
    """
    Estimate calories for a workout and add it to the history.
    """
    intensity = request.intensity or Intensity.MEDIUM.value
    duration = request.duration
    if duration is not None and not float(duration).is_integer():
        raise ValidationError("Invalid duration", details="duration must be a whole number of minutes")

    calories = await service.estimate(request.workoutType, duration, intensity)

    record = WorkoutRecord.create(
        workout_type=request.workoutType.strip(),
        duration_minutes=int(duration),
        intensity=intensity,
        calories=calories,
    )
    # Storage writes block, keep them off the event loop
    await run_in_threadpool(store.append, record)
    return _to_response(record)


@router.get("/stats")
async def workout_stats(store: HistoryStore = Depends(get_history_store)) -> Optional[dict[str, Any]]:
    """
    Aggregate statistics over all workouts, null when there are none.
    """
    stats = store.stats()
    return stats.to_dict() if stats else None


@router.get("/export/json")
async def export_json(store: HistoryStore = Depends(get_history_store)):
    """
    Download the workout history as JSON.
    """
    return _download(store, store.export_json(), "json")


@router.get("/export/csv")
async def export_csv(store: HistoryStore = Depends(get_history_store)):
    """
    Download the workout history as CSV.
    """
    return _download(store, store.export_csv(), "csv")


def _download(store: HistoryStore, content: str, extension: str) -> Response:
    filename = store.export_filename(extension)
    return Response(
        content=content,
        media_type=store.export_service.get_content_type(extension),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.delete("/{record_id}", response_model=DeleteWorkoutResponse)
def delete_workout(
    record_id: str,
    store: HistoryStore = Depends(get_history_store),
):
    """
    Delete a workout. Unknown ids delete nothing.
    """
    removed = store.delete(record_id)
    return DeleteWorkoutResponse(deleted=removed)
