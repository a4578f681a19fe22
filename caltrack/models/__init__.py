from caltrack.models.workout import WorkoutRecord, Intensity, format_intensity, new_record_id
from caltrack.models.stats import WorkoutStats
from caltrack.models.preset import WorkoutPreset, PRESETS
from caltrack.models.storage import StorageSlot

__all__ = [
    "WorkoutRecord",
    "Intensity",
    "format_intensity",
    "new_record_id",
    "WorkoutStats",
    "WorkoutPreset",
    "PRESETS",
    "StorageSlot",
]
