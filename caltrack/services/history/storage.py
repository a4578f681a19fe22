"""
Storage backends for the workout history.

A backend holds named slots, each containing one whole serialized
collection. Writes replace a slot in one step so a reader never observes
a partially written value.
"""
import os
import re
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from sqlalchemy import select
from sqlalchemy.engine import Engine

from caltrack.core.config import Settings, settings as default_settings
from caltrack.core.database import create_db_engine, create_session_factory
from caltrack.core.logging import get_logger
from caltrack.models.storage import StorageSlot

logger = get_logger(__name__)

_SLOT_KEY_RE = re.compile(r"[A-Za-z0-9_.-]+")


class StorageBackend(ABC):
    """Key/value slot storage."""

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """Return the slot's value, or None if the slot was never written."""

    @abstractmethod
    def write(self, key: str, value: str) -> None:
        """Replace the slot's value."""


class InMemoryStorage(StorageBackend):
    """Dict-backed storage, lost when the process exits."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._slots: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self._slots.get(key)

    def write(self, key: str, value: str) -> None:
        self._slots[key] = value


class JSONFileStorage(StorageBackend):
    """
    One file per slot, ``<directory>/<key>.json``.

    Writes go to a temporary file in the same directory which then
    replaces the slot file.
    """

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        if not _SLOT_KEY_RE.fullmatch(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def read(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def write(self, key: str, value: str) -> None:
        path = self._path(key)
        self.directory.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(prefix=f".{key}.", suffix=".tmp", dir=self.directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class DatabaseStorage(StorageBackend):
    """Slots stored as rows of the ``storage_slots`` table."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self._session_factory = create_session_factory(engine)

    @classmethod
    def from_url(cls, database_url: str) -> "DatabaseStorage":
        return cls(create_db_engine(database_url))

    def read(self, key: str) -> Optional[str]:
        with self._session_factory() as session:
            return session.scalar(select(StorageSlot.value).where(StorageSlot.key == key))

    def write(self, key: str, value: str) -> None:
        with self._session_factory.begin() as session:
            slot = session.get(StorageSlot, key)
            if slot is None:
                session.add(StorageSlot(key=key, value=value))
            else:
                slot.value = value


def build_storage(config: Settings | None = None) -> StorageBackend:
    """
    Create the storage backend selected by STORAGE_BACKEND.

    Supports:
    - file: JSON files under STORAGE_DIR (default)
    - database: SQLAlchemy table at DATABASE_URL
    - memory: process-local, for development and tests
    """
    config = config or default_settings
    backend = config.STORAGE_BACKEND.lower()

    logger.info("Initializing history storage", backend=backend)

    if backend == "file":
        return JSONFileStorage(config.STORAGE_DIR)
    elif backend == "database":
        return DatabaseStorage.from_url(config.DATABASE_URL)
    elif backend == "memory":
        return InMemoryStorage()

    raise ValueError(
        f"Unsupported storage backend '{backend}'. Expected one of: file, database, memory."
    )
