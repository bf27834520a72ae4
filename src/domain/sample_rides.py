"""
Bundled sample rides shown in fallback (demo) mode.

These records exist only in memory while the rides table has not been
provisioned.  They are never written to any store.  Ordered newest first,
like a live ``list_rides`` result.
"""

from datetime import date, datetime, time, timezone

from .entities import Ride
from .enums import Difficulty

SAMPLE_RIDES = [
    {
        "id": "sample_golden_gate_loop",
        "title": "Golden Gate Sunrise Loop",
        "description": "Easy-paced spin across the bridge and back with a coffee stop in Sausalito.",
        "start_location": "Crissy Field, San Francisco",
        "lat": 37.8039, "lng": -122.4648,
        "date": date(2026, 11, 7), "time": time(7, 0),
        "difficulty": Difficulty.EASY, "distance_km": 24, "max_participants": 15,
        "creator": ("sample_maya", "Maya Chen", "maya@example.com"),
        "participants": ["sample_maya", "sample_luis", "sample_ines", "sample_omar"],
        "created_at": datetime(2026, 10, 12, 18, 30, tzinfo=timezone.utc),
    },
    {
        "id": "sample_hawk_hill_repeats",
        "title": "Hawk Hill Repeats",
        "description": "Three climbs of Hawk Hill. Bring lights, we regroup at the top each time.",
        "start_location": "Golden Gate Bridge North Vista Point",
        "lat": 37.8324, "lng": -122.4795,
        "date": date(2026, 11, 8), "time": time(8, 30),
        "difficulty": Difficulty.HARD, "distance_km": 42, "max_participants": 8,
        "creator": ("sample_luis", "Luis Ortega", "luis@example.com"),
        "participants": ["sample_luis", "sample_maya", "sample_ken", "sample_ada",
                         "sample_omar", "sample_ines", "sample_jo", "sample_pat"],
        "created_at": datetime(2026, 10, 11, 9, 15, tzinfo=timezone.utc),
    },
    {
        "id": "sample_embarcadero_cruise",
        "title": "Embarcadero Social Cruise",
        "description": "Flat waterfront ride along the Embarcadero to AT&T Park. All bikes welcome.",
        "start_location": "Ferry Building, San Francisco",
        "lat": 37.7955, "lng": -122.3937,
        "date": date(2026, 11, 9), "time": time(10, 0),
        "difficulty": Difficulty.EASY, "distance_km": 12, "max_participants": 30,
        "creator": ("sample_ada", "Ada Park", "ada@example.com"),
        "participants": ["sample_ada", "sample_jo"],
        "created_at": datetime(2026, 10, 9, 20, 0, tzinfo=timezone.utc),
    },
    {
        "id": "sample_twin_peaks_tempo",
        "title": "Twin Peaks Tempo",
        "description": "Steady tempo effort up Twin Peaks, then down through Glen Canyon.",
        "start_location": "Duboce Park, San Francisco",
        "lat": 37.7692, "lng": -122.4330,
        "date": date(2026, 11, 12), "time": time(18, 0),
        "difficulty": Difficulty.MODERATE, "distance_km": 28, "max_participants": 12,
        "creator": ("sample_ken", "Ken Watanabe", "ken@example.com"),
        "participants": ["sample_ken", "sample_pat", "sample_luis"],
        "created_at": datetime(2026, 10, 8, 7, 45, tzinfo=timezone.utc),
    },
    {
        "id": "sample_mount_tam_epic",
        "title": "Mount Tam Epic",
        "description": "Long day in Marin climbing Mount Tamalpais via Alpine Dam.",
        "start_location": "Mill Valley Depot",
        "lat": 37.9060, "lng": -122.5450,
        "date": date(2026, 11, 15), "time": time(8, 0),
        "difficulty": Difficulty.HARD, "distance_km": 85, "max_participants": 10,
        "creator": ("sample_ines", "Ines Silva", "ines@example.com"),
        "participants": ["sample_ines", "sample_luis", "sample_maya"],
        "created_at": datetime(2026, 10, 5, 16, 20, tzinfo=timezone.utc),
    },
    {
        "id": "sample_lake_merritt_laps",
        "title": "Lake Merritt Evening Laps",
        "description": "Relaxed laps around the lake at conversation pace, dinner afterwards.",
        "start_location": "Lake Merritt Boathouse, Oakland",
        "lat": 37.8044, "lng": -122.2606,
        "date": date(2026, 11, 13), "time": time(18, 30),
        "difficulty": Difficulty.MODERATE, "distance_km": 18, "max_participants": 20,
        "creator": ("sample_omar", "Omar Haddad", "omar@example.com"),
        "participants": ["sample_omar"],
        "created_at": datetime(2026, 10, 2, 12, 0, tzinfo=timezone.utc),
    },
]


def fallback_rides() -> tuple[Ride, ...]:
    """Build fresh ``Ride`` values from :data:`SAMPLE_RIDES`."""
    rides = []
    for r in SAMPLE_RIDES:
        creator_id, creator_name, creator_email = r["creator"]
        rides.append(
            Ride(
                id=r["id"],
                title=r["title"],
                description=r["description"],
                start_location=r["start_location"],
                start_latitude=r["lat"],
                start_longitude=r["lng"],
                date=r["date"],
                time=r["time"],
                difficulty=r["difficulty"],
                distance_km=r["distance_km"],
                max_participants=r["max_participants"],
                created_by=creator_id,
                creator_name=creator_name,
                creator_email=creator_email,
                participants=tuple(r["participants"]),
                created_at=r["created_at"],
                updated_at=r["created_at"],
            )
        )
    return tuple(sorted(rides, key=lambda ride: ride.created_at, reverse=True))
