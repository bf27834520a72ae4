"""
Seed script -- provisions the rides table and adds a few starter rides.

Run once per deployment:
    python seed.py

Until the table exists the API serves the read-only sample catalog; after
this script (and ``POST /api/v1/admin/reload``) it serves the live one.

Creates:
  - the ``rides`` table (if missing)
  - 3 starter rides from 3 organisers, each auto-enrolled in their ride
"""

import asyncio
from datetime import date, time, timedelta

from src.config import settings
from src.domain.entities import RideDraft, User, validate_creation
from src.infrastructure.database import async_session_factory, create_schema, engine
from src.infrastructure.store import SqlRideStore

ORGANISERS = [
    User(id="seed_rosa", email="rosa@example.com", display_name="Rosa Alvarez"),
    User(id="seed_tom", email="tom@example.com", display_name="Tom Becker"),
    User(id="seed_nia", email="nia@example.com"),
]

RIDES = [
    {
        "title": "Saturday Coffee Spin",
        "description": "No-drop social ride ending at a bakery.",
        "start_location": "Dolores Park, San Francisco",
        "lat": 37.7596, "lng": -122.4269,
        "days_ahead": 5, "time": time(9, 0),
        "difficulty": "Easy", "distance_km": 20, "max_participants": 20,
    },
    {
        "title": "Paradise Loop",
        "description": "Classic Tiburon loop, steady pace with one regroup.",
        "start_location": "Sausalito Ferry Terminal",
        "lat": 37.8590, "lng": -122.4852,
        "days_ahead": 6, "time": time(8, 30),
        "difficulty": "Moderate", "distance_km": 45, "max_participants": 12,
    },
    {
        "title": "Mount Diablo Summit",
        "description": "Full climb from the south gate. Fitness required.",
        "start_location": "Danville Park and Ride",
        "lat": 37.8216, "lng": -121.9999,
        "days_ahead": 12, "time": time(7, 0),
        "difficulty": "Hard", "distance_km": 60, "max_participants": 8,
    },
]


async def seed() -> None:
    await create_schema(engine)
    store = SqlRideStore(async_session_factory, settings.store_timeout_seconds)

    if await store.list_rides():
        print("Rides table already has data -- skipping seed.")
        await engine.dispose()
        return

    for organiser, r in zip(ORGANISERS, RIDES):
        ride = validate_creation(
            RideDraft(
                title=r["title"],
                description=r["description"],
                start_location=r["start_location"],
                start_latitude=r["lat"],
                start_longitude=r["lng"],
                date=date.today() + timedelta(days=r["days_ahead"]),
                time=r["time"],
                difficulty=r["difficulty"],
                distance_km=r["distance_km"],
                max_participants=r["max_participants"],
            ),
            organiser,
        )
        await store.create_ride(ride)
        print(f"  + {ride.title} ({ride.id}) by {organiser.name}")

    print(f"Seeded {len(RIDES)} rides.")
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
