from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Text

from product_manager.db import Base


def _utcnow():
    return datetime.now(timezone.utc)


class StorageEntry(Base):
    """One key-value slot. The product collection lives in a single row."""

    __tablename__ = "storage_entries"

    key = Column(String(128), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    def __repr__(self):
        return f"<StorageEntry key={self.key} size={len(self.value or '')}>"
