"""
Backing-store collaborator.

``RideStore`` is the contract the engine depends on; ``SqlRideStore`` is the
SQLAlchemy implementation.  Each call opens its own unit-of-work, is bounded
by ``timeout_seconds`` and translates driver errors into the domain
taxonomy:

* missing ``rides`` table       -> ``ProvisioningUnavailable``
* anything else / timeouts      -> ``PersistenceFailure``
* roster write lost a race      -> ``StaleRevision``
"""

from __future__ import annotations

import asyncio
import logging
import re
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional, Protocol, TypeVar

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .models import RideModel
from src.domain.entities import Ride
from src.domain.errors import (
    PersistenceFailure,
    ProvisioningUnavailable,
    RideNotFound,
    StaleRevision,
    ValidationError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# SQLite: "no such table"; PostgreSQL: 'relation "rides" does not exist'
# (asyncpg UndefinedTableError).  Other "... does not exist" errors (role,
# type, function) are misconfiguration, not an unprovisioned table.
MISSING_TABLE_PATTERNS = (
    re.compile(r"no such table"),
    re.compile(r"undefinedtable"),
    re.compile(r"relation \S+ does not exist"),
)


class RideStore(Protocol):
    async def list_rides(self) -> list[Ride]: ...

    async def get_ride(self, ride_id: str) -> Optional[Ride]: ...

    async def create_ride(self, ride: Ride) -> Ride: ...

    async def update_roster(self, ride: Ride, expected_revision: int) -> Ride: ...


def is_missing_table(exc: BaseException) -> bool:
    orig = getattr(exc, "orig", None) or exc
    text = f"{type(orig).__name__} {orig}".lower()
    return any(pattern.search(text) for pattern in MISSING_TABLE_PATTERNS)


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite drops tzinfo on read
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_entity(row: RideModel) -> Ride:
    return Ride(
        id=row.id,
        title=row.title,
        description=row.description or "",
        start_location=row.start_location,
        start_latitude=row.start_latitude,
        start_longitude=row.start_longitude,
        date=row.date,
        time=row.time,
        difficulty=row.difficulty,
        distance_km=row.distance_km,
        max_participants=row.max_participants,
        created_by=row.created_by,
        creator_name=row.creator_name or "",
        creator_email=row.creator_email or "",
        participants=tuple(row.participants or ()),
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
        revision=row.revision or 0,
    )


def to_model(ride: Ride) -> RideModel:
    return RideModel(
        id=ride.id,
        title=ride.title,
        description=ride.description,
        start_location=ride.start_location,
        start_latitude=ride.start_latitude,
        start_longitude=ride.start_longitude,
        date=ride.date,
        time=ride.time,
        difficulty=ride.difficulty,
        distance_km=ride.distance_km,
        max_participants=ride.max_participants,
        current_participants=ride.current_participants,
        participants=list(ride.participants),
        created_by=ride.created_by,
        creator_name=ride.creator_name,
        creator_email=ride.creator_email,
        revision=ride.revision,
        created_at=ride.created_at,
        updated_at=ride.updated_at,
    )


class SqlRideStore:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        timeout_seconds: float = 10.0,
    ):
        self.session_factory = session_factory
        self.timeout = timeout_seconds

    # ── RideStore ─────────────────────────────────────────────────────

    async def list_rides(self) -> list[Ride]:
        return await self._run("list rides", self._list_rides)

    async def get_ride(self, ride_id: str) -> Optional[Ride]:
        return await self._run("get ride", lambda: self._get_ride(ride_id))

    async def create_ride(self, ride: Ride) -> Ride:
        return await self._run("create ride", lambda: self._create_ride(ride))

    async def update_roster(self, ride: Ride, expected_revision: int) -> Ride:
        return await self._run(
            "update roster", lambda: self._update_roster(ride, expected_revision)
        )

    # ── Internals ─────────────────────────────────────────────────────

    async def _run(self, what: str, op: Callable[[], Awaitable[T]]) -> T:
        try:
            return await asyncio.wait_for(op(), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            logger.warning("Store timed out after %.1fs: %s", self.timeout, what)
            raise PersistenceFailure(f"Timed out: {what}") from exc
        except SQLAlchemyError as exc:
            if is_missing_table(exc):
                raise ProvisioningUnavailable(str(exc)) from exc
            logger.warning("Store error during %s: %s", what, exc)
            raise PersistenceFailure(f"Store error: {what}") from exc
        except OSError as exc:  # connection refused / reset
            logger.warning("Store unreachable during %s: %s", what, exc)
            raise PersistenceFailure(f"Store unreachable: {what}") from exc

    async def _list_rides(self) -> list[Ride]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(RideModel).order_by(RideModel.created_at.desc())
            )
            rides: list[Ride] = []
            for row in result.scalars().all():
                try:
                    rides.append(to_entity(row))
                except ValidationError as exc:
                    logger.warning("Skipping invalid ride row %s: %s", row.id, exc)
            return rides

    async def _get_ride(self, ride_id: str) -> Optional[Ride]:
        async with self.session_factory() as session:
            row = await session.get(RideModel, ride_id)
            return to_entity(row) if row is not None else None

    async def _create_ride(self, ride: Ride) -> Ride:
        async with self.session_factory() as session:
            row = to_model(ride)
            session.add(row)
            await session.commit()
            return to_entity(row)

    async def _update_roster(self, ride: Ride, expected_revision: int) -> Ride:
        async with self.session_factory() as session:
            result = await session.execute(
                update(RideModel)
                .where(
                    RideModel.id == ride.id,
                    RideModel.revision == expected_revision,
                )
                .values(
                    participants=list(ride.participants),
                    current_participants=ride.current_participants,
                    updated_at=ride.updated_at,
                    revision=RideModel.revision + 1,
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                await session.rollback()
                existing = await session.get(RideModel, ride.id)
                if existing is None:
                    raise RideNotFound(ride.id)
                logger.warning(
                    "Stale roster write for %s (expected revision %d, found %d)",
                    ride.id, expected_revision, existing.revision,
                )
                raise StaleRevision(
                    f"Ride {ride.id} is at revision {existing.revision}"
                )
            await session.commit()
            row = await session.get(RideModel, ride.id, populate_existing=True)
            return to_entity(row)
