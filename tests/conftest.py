"""
Shared test fixtures.

Roster, availability and API tests run against ``FakeRideStore``, an
in-memory stand-in for the backing store that can be told to fail, or to
hold every call open until a gate is released.  SQL store tests use an
in-memory SQLite database (via aiosqlite) so they run without PostgreSQL.
"""

from __future__ import annotations

import asyncio
import dataclasses
from datetime import date, datetime, time, timedelta, timezone
from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from src.domain.entities import Ride, RideCollection, User
from src.domain.enums import Difficulty
from src.domain.errors import RideNotFound, StaleRevision
from src.infrastructure.database import create_schema
from src.infrastructure.store import SqlRideStore

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

T0 = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)

ALICE = User(id="alice", email="alice@example.com", display_name="Alice")
BOB = User(id="bob", email="bob@example.com")
CAROL = User(id="carol", email="carol@example.com", display_name="Carol")


def build_ride(
    ride_id: str = "ride_1",
    *,
    created_by: str = "alice",
    participants: Optional[tuple[str, ...]] = None,
    max_participants: int = 10,
    age_minutes: int = 0,
    **overrides,
) -> Ride:
    """A valid ride; ``age_minutes`` pushes ``created_at`` into the past."""
    created_at = T0 - timedelta(minutes=age_minutes)
    fields = dict(
        id=ride_id,
        title="Morning Coffee Ride",
        description="Relaxed loop with a cafe stop",
        start_location="Ferry Building",
        start_latitude=37.7955,
        start_longitude=-122.3937,
        date=date(2026, 11, 1),
        time=time(8, 0),
        difficulty=Difficulty.EASY,
        distance_km=25,
        max_participants=max_participants,
        created_by=created_by,
        creator_name=created_by.title(),
        creator_email=f"{created_by}@example.com",
        participants=participants if participants is not None else (created_by,),
        created_at=created_at,
        updated_at=created_at,
    )
    fields.update(overrides)
    return Ride(**fields)


class FakeRideStore:
    """In-memory ``RideStore`` with failure injection and a call gate."""

    def __init__(self, rides=()):
        self.rides: dict[str, Ride] = {r.id: r for r in rides}
        self.calls: list[str] = []
        self.fail_with: Optional[BaseException] = None
        self.gate: Optional[asyncio.Event] = None

    async def _enter(self, name: str) -> None:
        self.calls.append(name)
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            raise self.fail_with

    async def list_rides(self) -> list[Ride]:
        await self._enter("list_rides")
        return sorted(self.rides.values(), key=lambda r: r.created_at, reverse=True)

    async def get_ride(self, ride_id: str) -> Optional[Ride]:
        await self._enter("get_ride")
        return self.rides.get(ride_id)

    async def create_ride(self, ride: Ride) -> Ride:
        await self._enter("create_ride")
        self.rides[ride.id] = ride
        return ride

    async def update_roster(self, ride: Ride, expected_revision: int) -> Ride:
        await self._enter("update_roster")
        current = self.rides.get(ride.id)
        if current is None:
            raise RideNotFound(ride.id)
        if current.revision != expected_revision:
            raise StaleRevision(f"{ride.id} is at revision {current.revision}")
        stored = dataclasses.replace(ride, revision=current.revision + 1)
        self.rides[ride.id] = stored
        return stored


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest.fixture
def make_ride():
    return build_ride


@pytest.fixture
def users() -> dict[str, User]:
    return {"alice": ALICE, "bob": BOB, "carol": CAROL}


@pytest.fixture
def rides() -> list[Ride]:
    """Three rides, newest first; ``full`` is at capacity."""
    return [
        build_ride("open", age_minutes=0),
        build_ride(
            "pair",
            created_by="bob",
            max_participants=2,
            age_minutes=10,
            title="Hawk Hill Repeats",
            difficulty=Difficulty.HARD,
        ),
        build_ride(
            "full",
            participants=("alice", "carol"),
            max_participants=2,
            age_minutes=20,
            title="Twin Peaks Tempo",
            difficulty=Difficulty.MODERATE,
        ),
    ]


@pytest.fixture
def store(rides) -> FakeRideStore:
    return FakeRideStore(rides)


@pytest.fixture
def collection(rides) -> RideCollection:
    return RideCollection(tuple(rides), read_only=False)


@pytest_asyncio.fixture
async def sqlite_engine() -> AsyncGenerator[AsyncEngine, None]:
    """A fresh in-memory SQLite database *without* the rides table."""
    engine = create_async_engine(TEST_DB_URL, echo=False, poolclass=StaticPool)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def sql_store(sqlite_engine) -> SqlRideStore:
    """``SqlRideStore`` on a provisioned SQLite database."""
    await create_schema(sqlite_engine)
    factory = async_sessionmaker(
        sqlite_engine, class_=AsyncSession, expire_on_commit=False
    )
    return SqlRideStore(factory, timeout_seconds=5)
