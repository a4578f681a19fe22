"""
Database engine and session factory for the SQL storage backend.
"""
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from caltrack.core.logging import get_logger

logger = get_logger(__name__)


class Base(DeclarativeBase):
    """Declarative base for ORM models."""


def create_db_engine(database_url: str) -> Engine:
    """
    Create an engine and make sure the schema exists.

    For file-based SQLite URLs the parent directory is created first.
    """
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database not in (None, "", ":memory:"):
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(database_url)

    # Register models on Base.metadata before creating tables
    from caltrack.models.storage import StorageSlot  # noqa: F401

    Base.metadata.create_all(engine)
    logger.info("Database initialized", backend=url.get_backend_name())
    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Session factory bound to the given engine."""
    return sessionmaker(bind=engine, expire_on_commit=False)
