"""
Stored Collection Model - one row per logical collection.

The persistence contract is key -> list of records, so each collection
(users, ngos, reports) is kept as a single JSON document.
"""

from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, JSON

from app.db.base import Base


class StoredCollection(Base):
    __tablename__ = "collections"

    key = Column(String(64), primary_key=True)
    payload = Column(JSON, default=list, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
