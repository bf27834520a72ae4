"""
Geospatial view adapter.

Turns the visible ride subset into map state: a bounding box the renderer
fits to (with fixed padding), or a default centre/zoom when nothing is
visible, plus one difficulty-coloured marker per ride.  Markers carry the
same ``Affordance`` the list view shows, so the map never becomes a
separate data path.

Complexity: O(N) per call.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from .entities import DEFAULT_START_POINT, Ride, User
from .enums import Affordance, Difficulty
from .roster import affordance_for

DIFFICULTY_COLORS: dict[Difficulty, str] = {
    Difficulty.EASY: "#10B981",
    Difficulty.MODERATE: "#F59E0B",
    Difficulty.HARD: "#EF4444",
}

DEFAULT_ZOOM = 12
FIT_PADDING = 20


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class Bounds:
    south: float
    west: float
    north: float
    east: float

    @property
    def center(self) -> tuple[float, float]:
        return ((self.south + self.north) / 2, (self.west + self.east) / 2)


@dataclass(frozen=True)
class MapMarker:
    ride_id: str
    latitude: float
    longitude: float
    title: str
    difficulty: Difficulty
    color: str
    affordance: Affordance


@dataclass(frozen=True)
class MapView:
    center: tuple[float, float]
    zoom: Optional[int]
    fit_bounds: Optional[Bounds]
    padding: int
    markers: tuple[MapMarker, ...]


# ── Adapter ───────────────────────────────────────────────────────────


def compute_bounds(rides: Sequence[Ride]) -> Optional[Bounds]:
    if not rides:
        return None
    lats = [r.start_latitude for r in rides]
    lngs = [r.start_longitude for r in rides]
    return Bounds(south=min(lats), west=min(lngs), north=max(lats), east=max(lngs))


def marker_for(ride: Ride, viewer: Optional[User], read_only: bool) -> MapMarker:
    return MapMarker(
        ride_id=ride.id,
        latitude=ride.start_latitude,
        longitude=ride.start_longitude,
        title=ride.title,
        difficulty=ride.difficulty,
        color=DIFFICULTY_COLORS[ride.difficulty],
        affordance=affordance_for(ride, viewer, read_only),
    )


def build_map_view(
    rides: Sequence[Ride],
    viewer: Optional[User] = None,
    read_only: bool = False,
    *,
    default_center: tuple[float, float] = DEFAULT_START_POINT,
    default_zoom: int = DEFAULT_ZOOM,
    padding: int = FIT_PADDING,
) -> MapView:
    markers = tuple(marker_for(r, viewer, read_only) for r in rides)
    bounds = compute_bounds(rides)
    if bounds is None:
        return MapView(
            center=default_center,
            zoom=default_zoom,
            fit_bounds=None,
            padding=padding,
            markers=markers,
        )
    return MapView(
        center=bounds.center,
        zoom=None,  # renderer derives zoom from fit_bounds
        fit_bounds=bounds,
        padding=padding,
        markers=markers,
    )
