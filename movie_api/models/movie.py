"""Movie ORM — one row per movie, show times stored as a JSON document field.

Invariants:
    - id is UUID primary key (client-side default)
    - name and rating are non-nullable
    - time is a non-empty list of strings (enforced at the schema boundary)
    - updated_at moves forward on every write

Design Decisions:
    - JSON column for time: keeps the list shape clients send, no join table
    - Generic Uuid type: same model runs on PostgreSQL and SQLite (tests)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Float, DateTime, JSON, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from movie_api.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Movie(Base):
    """A movie with its show times and rating."""
    __tablename__ = "movies"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    time: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    rating: Mapped[float] = mapped_column(Float, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow,
    )
