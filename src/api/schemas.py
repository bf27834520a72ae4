"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

import dataclasses
import datetime as dt
from typing import Optional

from pydantic import BaseModel, Field

from src.domain.entities import Ride, RideDraft, User
from src.domain.geo import MapView
from src.domain.roster import affordance_for


# ── Requests ──────────────────────────────────────────────────────────


class RideCreateRequest(BaseModel):
    """Field rules (required text, ranges) are enforced by the domain."""

    title: str = Field("", max_length=200)
    description: str = ""
    start_location: str = Field("", max_length=255)
    start_latitude: Optional[float] = Field(None, ge=-90, le=90)
    start_longitude: Optional[float] = Field(None, ge=-180, le=180)
    date: Optional[dt.date] = None
    time: Optional[dt.time] = None
    difficulty: Optional[str] = Field(None, examples=["Easy", "Moderate", "Hard"])
    distance_km: Optional[int] = None
    max_participants: Optional[int] = None

    def to_draft(self) -> RideDraft:
        return RideDraft(**self.model_dump())


# ── Responses ─────────────────────────────────────────────────────────


class RideResponse(BaseModel):
    id: str
    title: str
    description: str
    start_location: str
    start_latitude: float
    start_longitude: float
    date: Optional[dt.date] = None
    time: Optional[dt.time] = None
    difficulty: str
    distance_km: int
    max_participants: int
    current_participants: int
    created_by: str
    creator_name: str
    creator_email: str
    participants: list[str]
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None
    affordance: Optional[str] = Field(
        None, description="Roster control to offer the viewer (JOIN, LEAVE, ...)."
    )

    @classmethod
    def from_ride(
        cls, ride: Ride, viewer: Optional[User], read_only: bool
    ) -> RideResponse:
        data = dataclasses.asdict(ride)
        data.update(
            difficulty=ride.difficulty.value,
            participants=list(ride.participants),
            current_participants=ride.current_participants,
            affordance=affordance_for(ride, viewer, read_only).value,
        )
        return cls(**data)


class CatalogResponse(BaseModel):
    mode: str
    read_only: bool
    total: int
    rides: list[RideResponse] = []


class BoundsResponse(BaseModel):
    south: float
    west: float
    north: float
    east: float


class MarkerResponse(BaseModel):
    ride_id: str
    latitude: float
    longitude: float
    title: str
    difficulty: str
    color: str
    affordance: str


class MapViewResponse(BaseModel):
    center: tuple[float, float]
    zoom: Optional[int] = None
    fit_bounds: Optional[BoundsResponse] = None
    padding: int
    markers: list[MarkerResponse] = []

    @classmethod
    def from_view(cls, view: MapView) -> MapViewResponse:
        bounds = view.fit_bounds
        return cls(
            center=view.center,
            zoom=view.zoom,
            fit_bounds=(
                BoundsResponse(
                    south=bounds.south,
                    west=bounds.west,
                    north=bounds.north,
                    east=bounds.east,
                )
                if bounds
                else None
            ),
            padding=view.padding,
            markers=[
                MarkerResponse(
                    ride_id=m.ride_id,
                    latitude=m.latitude,
                    longitude=m.longitude,
                    title=m.title,
                    difficulty=m.difficulty.value,
                    color=m.color,
                    affordance=m.affordance.value,
                )
                for m in view.markers
            ],
        )


class HealthResponse(BaseModel):
    status: str = "ok"
    mode: str
    read_only: bool


class ErrorResponse(BaseModel):
    detail: str
    code: str
    errors: Optional[dict[str, str]] = None
