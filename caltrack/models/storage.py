"""
Storage slot database model.
"""
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column

from caltrack.core.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StorageSlot(Base):
    """One named slot holding a whole serialized collection."""

    __tablename__ = "storage_slots"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
    )
