"""
Domain entities with business logic.

Patterns used
-------------
- ``Ride`` is an immutable value: every roster change produces a new
  instance, so a rejected write can never leave a half-mutated ride behind.
  Its invariants are checked on construction.
- ``RideCollection`` is the working set a view holds, plus the read-only
  flag set while the catalog runs on the fallback dataset.
- ``validate_creation`` turns raw form input into the first ``Ride``
  (creator auto-enrolled).
"""

from __future__ import annotations

import dataclasses
import uuid
from dataclasses import dataclass
from datetime import date as Date
from datetime import datetime, time as Time, timezone
from typing import Optional, Union

from .enums import Difficulty
from .errors import ValidationError

MIN_PARTICIPANTS = 2
MAX_PARTICIPANTS = 50
DEFAULT_START_POINT = (37.7749, -122.4194)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_ride_id() -> str:
    return f"ride_{uuid.uuid4().hex}"


# ── Entities ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class User:
    id: str
    email: str
    display_name: Optional[str] = None

    @property
    def name(self) -> str:
        return self.display_name or self.email


@dataclass(frozen=True)
class Ride:
    id: str
    title: str
    created_by: str
    description: str = ""
    start_location: str = ""
    start_latitude: float = DEFAULT_START_POINT[0]
    start_longitude: float = DEFAULT_START_POINT[1]
    date: Optional[Date] = None
    time: Optional[Time] = None
    difficulty: Difficulty = Difficulty.EASY
    distance_km: int = 1
    max_participants: int = MIN_PARTICIPANTS
    creator_name: str = ""
    creator_email: str = ""
    participants: tuple[str, ...] = ()
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    revision: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "participants", tuple(self.participants))

        errors: dict[str, str] = {}
        try:
            object.__setattr__(self, "difficulty", Difficulty(self.difficulty))
        except ValueError:
            errors["difficulty"] = "must be one of Easy, Moderate, Hard"
        if len(set(self.participants)) != len(self.participants):
            errors["participants"] = "duplicate participant"
        elif self.created_by not in self.participants:
            errors["participants"] = "creator must be a participant"
        if not MIN_PARTICIPANTS <= self.max_participants <= MAX_PARTICIPANTS:
            errors["max_participants"] = (
                f"must be between {MIN_PARTICIPANTS} and {MAX_PARTICIPANTS}"
            )
        elif len(self.participants) > self.max_participants:
            errors["participants"] = "more participants than places"
        if self.distance_km < 1:
            errors["distance_km"] = "must be at least 1 km"
        if errors:
            raise ValidationError(errors)

    @property
    def current_participants(self) -> int:
        return len(self.participants)

    @property
    def is_full(self) -> bool:
        return self.current_participants >= self.max_participants

    def has_participant(self, identity: str) -> bool:
        return identity in self.participants


@dataclass(frozen=True)
class RideCollection:
    rides: tuple[Ride, ...] = ()
    read_only: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "rides", tuple(self.rides))

    def __iter__(self):
        return iter(self.rides)

    def __len__(self) -> int:
        return len(self.rides)

    def get(self, ride_id: str) -> Optional[Ride]:
        for ride in self.rides:
            if ride.id == ride_id:
                return ride
        return None

    def replace(self, ride: Ride) -> RideCollection:
        """Return a copy with the ride of the same id swapped in place."""
        return dataclasses.replace(
            self,
            rides=tuple(ride if r.id == ride.id else r for r in self.rides),
        )

    def prepend(self, ride: Ride) -> RideCollection:
        return dataclasses.replace(self, rides=(ride,) + self.rides)

    def remove(self, ride_id: str) -> RideCollection:
        return dataclasses.replace(
            self, rides=tuple(r for r in self.rides if r.id != ride_id)
        )


# ── Creation ──────────────────────────────────────────────────────────


@dataclass
class RideDraft:
    """Raw ride-creation input as typed by the organiser."""

    title: str = ""
    description: str = ""
    start_location: str = ""
    date: Optional[Date] = None
    time: Optional[Time] = None
    difficulty: Union[Difficulty, str, None] = None
    distance_km: Optional[int] = None
    max_participants: Optional[int] = None
    start_latitude: Optional[float] = None
    start_longitude: Optional[float] = None


def validate_creation(
    draft: RideDraft,
    creator: User,
    *,
    now: Optional[datetime] = None,
    default_point: tuple[float, float] = DEFAULT_START_POINT,
) -> Ride:
    """Check *draft* and build the new ride, or raise ``ValidationError``."""
    errors: dict[str, str] = {}

    for name in ("title", "description", "start_location"):
        if not (getattr(draft, name) or "").strip():
            errors[name] = "is required"

    difficulty: Optional[Difficulty] = None
    try:
        difficulty = Difficulty(draft.difficulty)
    except ValueError:
        errors["difficulty"] = "must be one of Easy, Moderate, Hard"

    if draft.date is None:
        errors["date"] = "is required"
    if draft.time is None:
        errors["time"] = "is required"

    if draft.distance_km is None or draft.distance_km < 1:
        errors["distance_km"] = "must be at least 1 km"

    if draft.max_participants is None or not (
        MIN_PARTICIPANTS <= draft.max_participants <= MAX_PARTICIPANTS
    ):
        errors["max_participants"] = (
            f"must be between {MIN_PARTICIPANTS} and {MAX_PARTICIPANTS}"
        )

    if errors:
        raise ValidationError(errors)

    now = now or utcnow()
    return Ride(
        id=new_ride_id(),
        title=draft.title.strip(),
        description=draft.description.strip(),
        start_location=draft.start_location.strip(),
        # 0 means "not picked on the map"
        start_latitude=draft.start_latitude or default_point[0],
        start_longitude=draft.start_longitude or default_point[1],
        date=draft.date,
        time=draft.time,
        difficulty=difficulty,
        distance_km=draft.distance_km,
        max_participants=draft.max_participants,
        created_by=creator.id,
        creator_name=creator.name,
        creator_email=creator.email,
        participants=(creator.id,),
        created_at=now,
        updated_at=now,
        revision=0,
    )
