"""
SQLAlchemy ORM models.

Tables
------
* ``rides`` -- one row per planned group ride, roster stored inline as a
  JSON array of identities.

Indexes
-------
* **B-Tree** on ``created_at`` for the newest-first catalog listing and on
  ``created_by`` for "my rides" look-ups.

``revision`` is bumped on every roster write and used as the
compare-and-set token for concurrent join/leave requests.
"""

from sqlalchemy import (
    JSON,
    Column,
    Date,
    DateTime,
    Enum,
    Float,
    Index,
    Integer,
    String,
    Text,
    Time,
    func,
)

from .database import Base
from src.domain.enums import Difficulty


class RideModel(Base):
    __tablename__ = "rides"

    id = Column(String(64), primary_key=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    start_location = Column(String(255), nullable=False)

    # Plain floats; the map only needs the start point
    start_latitude = Column(Float, nullable=False)
    start_longitude = Column(Float, nullable=False)

    date = Column(Date, nullable=True)
    time = Column(Time, nullable=True)  # local clock time, no timezone
    difficulty = Column(
        Enum(Difficulty, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    distance_km = Column(Integer, nullable=False)
    max_participants = Column(Integer, nullable=False)

    # Always written together with ``participants``
    current_participants = Column(Integer, nullable=False, default=1)
    participants = Column(JSON, nullable=False, default=list)

    created_by = Column(String(128), nullable=False)
    creator_name = Column(String(255), nullable=False, default="")
    creator_email = Column(String(255), nullable=False, default="")

    revision = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("idx_rides_created_at", "created_at"),
        Index("idx_rides_created_by", "created_by"),
    )
