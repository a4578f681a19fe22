"""
History Store - The recorded workouts and everything derived from them.
"""
import json
import threading
from datetime import date
from typing import Optional

from pydantic import ValidationError as ModelValidationError
from sqlalchemy.exc import SQLAlchemyError

from caltrack.core.exceptions import StorageReadFailure
from caltrack.core.logging import get_logger
from caltrack.models.stats import WorkoutStats
from caltrack.models.workout import WorkoutRecord
from caltrack.services.history.aggregation import compute_stats
from caltrack.services.history.export import ExportService
from caltrack.services.history.storage import StorageBackend

logger = get_logger(__name__)

DEFAULT_HISTORY_KEY = "workouts"


class HistoryStore:
    """
    Owns the workout collection.

    The collection is read once by load() and the whole of it is written
    back to the storage slot after every append or delete. load, append
    and delete share one lock, so the read-modify-write cycle is safe in a
    multi-threaded host.

    Usage:
        store = HistoryStore(JSONFileStorage(".caltrack"))
        store.load()
        store.append(WorkoutRecord.create("Running", 30, "high", 360))
        stats = store.stats()
    """

    def __init__(
        self,
        storage: StorageBackend,
        key: str = DEFAULT_HISTORY_KEY,
        export_service: Optional[ExportService] = None,
    ):
        self.storage = storage
        self.key = key
        self.export_service = export_service or ExportService()
        self._lock = threading.RLock()
        self._records: Optional[list[WorkoutRecord]] = None

    @property
    def loaded(self) -> bool:
        return self._records is not None

    def _require_loaded(self) -> list[WorkoutRecord]:
        if self._records is None:
            raise RuntimeError("HistoryStore.load() must be called before use")
        return self._records

    # ========================================
    # Persistence
    # ========================================

    def load(self) -> list[WorkoutRecord]:
        """
        Read the whole collection from storage.

        A missing slot yields an empty collection. So does a slot that
        cannot be read or parsed; that case is logged and nothing from the
        bad slot is kept.

        Returns:
            The loaded records, in stored order
        """
        with self._lock:
            try:
                records = self._read_slot()
            except StorageReadFailure as e:
                logger.error(
                    "Stored workout history is unreadable, starting empty",
                    key=self.key,
                    error=e.message,
                    details=e.details,
                )
                records = []

            self._records = records
            logger.info("Workout history loaded", key=self.key, count=len(records))
            return list(records)

    def _read_slot(self) -> list[WorkoutRecord]:
        try:
            raw = self.storage.read(self.key)
        except (OSError, UnicodeDecodeError, SQLAlchemyError) as e:
            raise StorageReadFailure("Could not read workout history", details=str(e)) from e

        if raw is None:
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageReadFailure("Workout history is not valid JSON", details=str(e)) from e

        if not isinstance(data, list):
            raise StorageReadFailure(
                "Workout history is not a list",
                details=f"found {type(data).__name__}",
            )

        try:
            return [WorkoutRecord.model_validate(item) for item in data]
        except ModelValidationError as e:
            raise StorageReadFailure(
                "Workout history contains an invalid record",
                details=str(e),
            ) from e

    def _persist(self, records: list[WorkoutRecord]) -> None:
        payload = json.dumps([r.to_dict() for r in records], ensure_ascii=False)
        self.storage.write(self.key, payload)

    # ========================================
    # Mutations
    # ========================================

    def append(self, record: WorkoutRecord) -> None:
        """
        Add a record at the end of the collection and persist.

        Ids are not checked for duplicates.
        """
        with self._lock:
            updated = self._require_loaded() + [record]
            self._persist(updated)
            self._records = updated

        logger.info(
            "Workout appended",
            record_id=record.id,
            workout_type=record.workout_type,
            calories=record.calories,
        )

    def delete(self, record_id: str) -> int:
        """
        Remove every record with ``record_id`` and persist.

        Deleting an unknown id is a no-op.

        Returns:
            Number of records removed
        """
        with self._lock:
            current = self._require_loaded()
            updated = [r for r in current if r.id != record_id]
            removed = len(current) - len(updated)
            if removed:
                self._persist(updated)
                self._records = updated

        logger.info("Workout deleted", record_id=record_id, removed=removed)
        return removed

    # ========================================
    # Queries
    # ========================================

    def records(self) -> list[WorkoutRecord]:
        """Snapshot of the collection in insertion order."""
        with self._lock:
            return list(self._require_loaded())

    def get(self, record_id: str) -> Optional[WorkoutRecord]:
        """First record with ``record_id``, or None."""
        with self._lock:
            for record in self._require_loaded():
                if record.id == record_id:
                    return record
        return None

    def __len__(self) -> int:
        with self._lock:
            return len(self._require_loaded())

    def stats(self) -> Optional[WorkoutStats]:
        """Aggregate metrics, or None when there are no workouts."""
        return compute_stats(self.records())

    def export_json(self) -> str:
        """Pretty-printed JSON snapshot of the collection."""
        return self.export_service.export_to_json(self.records())

    def export_csv(self) -> str:
        """CSV snapshot of the collection, header row first."""
        return self.export_service.export_to_csv(self.records())

    def export_filename(self, extension: str, today: Optional[date] = None) -> str:
        return self.export_service.get_filename(extension, today)
