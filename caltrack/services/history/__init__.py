"""
History module - Durable workout history with derived statistics.

This module provides:
- Storage backends holding the serialized collection
- The HistoryStore owning the collection
- Aggregation into WorkoutStats
- JSON and CSV export
"""
from caltrack.services.history.storage import (
    StorageBackend,
    InMemoryStorage,
    JSONFileStorage,
    DatabaseStorage,
    build_storage,
)
from caltrack.services.history.aggregation import compute_stats, most_frequent_type
from caltrack.services.history.export import ExportService, CSV_HEADERS
from caltrack.services.history.store import HistoryStore, DEFAULT_HISTORY_KEY

__all__ = [
    # Storage
    "StorageBackend",
    "InMemoryStorage",
    "JSONFileStorage",
    "DatabaseStorage",
    "build_storage",
    # Aggregation
    "compute_stats",
    "most_frequent_type",
    # Export
    "ExportService",
    "CSV_HEADERS",
    # Store
    "HistoryStore",
    "DEFAULT_HISTORY_KEY",
]
