"""
Ride endpoints
==============

GET  /api/v1/rides                  -- browse / search the catalog
GET  /api/v1/rides/map              -- the same subset as map state
GET  /api/v1/rides/{ride_id}        -- one ride
POST /api/v1/rides                  -- create a ride (creator auto-joins)
POST /api/v1/rides/{ride_id}/join   -- join a ride
POST /api/v1/rides/{ride_id}/leave  -- leave a ride

Roster and validation errors are translated to HTTP by the handlers
registered in ``src.api.app``.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from src.api.dependencies import get_catalog, get_current_user, require_user
from src.api.middleware import limiter
from src.api.schemas import (
    CatalogResponse,
    ErrorResponse,
    MapViewResponse,
    RideCreateRequest,
    RideResponse,
)
from src.config import settings
from src.domain.entities import Ride, User
from src.domain.errors import RideNotFound
from src.services.session import CatalogSession

router = APIRouter(prefix="/rides", tags=["rides"])

_ERRORS = {
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    423: {"model": ErrorResponse, "description": "Catalog is in demo mode."},
    503: {"model": ErrorResponse},
}


def _confirmed(
    ride: Optional[Ride], viewer: User, catalog: CatalogSession
) -> RideResponse:
    if ride is None:
        # the view was reloaded or closed while the store was answering
        raise HTTPException(
            status_code=409,
            detail="The ride list was refreshed while saving. Please try again.",
        )
    return RideResponse.from_ride(ride, viewer, catalog.read_only)


@router.get(
    "",
    response_model=CatalogResponse,
    summary="Browse and search rides",
)
@limiter.limit(settings.rate_limit)
async def list_rides(
    request: Request,
    q: str = Query("", description="Matches title, start location or description"),
    difficulty: str = Query("all", description="all, Easy, Moderate or Hard"),
    catalog: CatalogSession = Depends(get_catalog),
    viewer: Optional[User] = Depends(get_current_user),
):
    rides = catalog.visible(q, difficulty)
    return CatalogResponse(
        mode=catalog.mode.value,
        read_only=catalog.read_only,
        total=len(catalog.collection),
        rides=[RideResponse.from_ride(r, viewer, catalog.read_only) for r in rides],
    )


@router.get(
    "/map",
    response_model=MapViewResponse,
    summary="Map bounds and markers for the visible rides",
)
@limiter.limit(settings.rate_limit)
async def ride_map(
    request: Request,
    q: str = "",
    difficulty: str = "all",
    catalog: CatalogSession = Depends(get_catalog),
    viewer: Optional[User] = Depends(get_current_user),
):
    return MapViewResponse.from_view(catalog.map_view(q, difficulty, viewer))


@router.get(
    "/{ride_id}",
    response_model=RideResponse,
    summary="Get one ride",
    responses={404: {"model": ErrorResponse}},
)
@limiter.limit(settings.rate_limit)
async def get_ride(
    request: Request,
    ride_id: str,
    catalog: CatalogSession = Depends(get_catalog),
    viewer: Optional[User] = Depends(get_current_user),
):
    ride = catalog.collection.get(ride_id)
    if ride is None:
        raise RideNotFound(ride_id)
    return RideResponse.from_ride(ride, viewer, catalog.read_only)


@router.post(
    "",
    status_code=201,
    response_model=RideResponse,
    summary="Create a ride",
    responses={422: {"model": ErrorResponse}, **_ERRORS},
)
@limiter.limit(settings.rate_limit)
async def create_ride(
    request: Request,
    body: RideCreateRequest,
    catalog: CatalogSession = Depends(get_catalog),
    user: User = Depends(require_user),
):
    ride = await catalog.create(body.to_draft(), user)
    return _confirmed(ride, user, catalog)


@router.post(
    "/{ride_id}/join",
    response_model=RideResponse,
    summary="Join a ride",
    responses=_ERRORS,
)
@limiter.limit(settings.rate_limit)
async def join_ride(
    request: Request,
    ride_id: str,
    catalog: CatalogSession = Depends(get_catalog),
    user: User = Depends(require_user),
):
    ride = await catalog.join(ride_id, user)
    return _confirmed(ride, user, catalog)


@router.post(
    "/{ride_id}/leave",
    response_model=RideResponse,
    summary="Leave a ride",
    description="The organiser of a ride can never leave it.",
    responses=_ERRORS,
)
@limiter.limit(settings.rate_limit)
async def leave_ride(
    request: Request,
    ride_id: str,
    catalog: CatalogSession = Depends(get_catalog),
    user: User = Depends(require_user),
):
    ride = await catalog.leave(ride_id, user)
    return _confirmed(ride, user, catalog)
