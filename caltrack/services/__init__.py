"""
Services module - Application business logic layer.

Modules:
- adapter: Estimator provider abstraction layer
- estimation: Calorie estimates with deterministic fallback
- history: Workout history storage, statistics and export
"""
from caltrack.services.estimation import EstimationService
from caltrack.services.history import HistoryStore, build_storage
from caltrack.services.adapter import get_ai_adapter

__all__ = [
    "EstimationService",
    "HistoryStore",
    "build_storage",
    "get_ai_adapter",
]
