"""
Quick-start presets endpoint.
"""
from typing import Any

from fastapi import APIRouter

from caltrack.models.preset import PRESETS

router = APIRouter()


@router.get("")
async def list_presets() -> list[dict[str, Any]]:
    """
    Get the quick-start workouts with their suggested durations.
    """
    return [preset.model_dump(by_alias=True) for preset in PRESETS]
