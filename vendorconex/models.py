from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Integer, String, UniqueConstraint

from .db import Base


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Document(Base):
    """One stored document. ``collection`` plays the role of a Mongo collection."""

    __tablename__ = "documents"
    __table_args__ = (UniqueConstraint("collection", "id", name="uq_documents_collection_id"),)

    # insertion order, used for newest-first listings
    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(32), nullable=False, index=True)
    collection = Column(String(64), nullable=False, index=True)
    body = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)
