"""
Catalog session: the explicit context one view works against.

Holds the current ``RideCollection`` and the availability controller of the
latest load cycle, and hands both to the engine on every call instead of
keeping them in module globals.

Late results
------------
Every load and mutation remembers the session generation when it starts.
If the session was closed, or a reload committed a new collection, before
the store answered, the result is dropped and ``None`` is returned.  A
reload that fails leaves the generation alone, so in-flight results still
apply.  Confirmed rides are merged one by one into the *current*
collection, so two mutations on different rides finishing in any order
both stick.

Stale rides
-----------
When a roster write loses the revision race (another process, or a reload
that read before a write committed), the stored version of that ride is
fetched and merged before ``StaleRevision`` is re-raised, so the caller's
retry runs against the current roster.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Awaitable, Callable, Optional, Union

from src.domain.catalog import ALL_DIFFICULTIES, filter_rides
from src.domain.entities import (
    DEFAULT_START_POINT,
    Ride,
    RideCollection,
    RideDraft,
    User,
)
from src.domain.enums import AvailabilityMode, Difficulty
from src.domain.errors import PersistenceFailure, StaleRevision
from src.domain.geo import DEFAULT_ZOOM, FIT_PADDING, MapView, build_map_view
from src.infrastructure.store import RideStore
from src.services.availability import AvailabilityController
from src.services.roster_engine import RosterEngine

logger = logging.getLogger(__name__)

DifficultyFilter = Union[Difficulty, str, None]
RosterChange = Callable[[RideCollection, str, str], Awaitable[RideCollection]]


class SessionClosed(Exception):
    """Raised when a closed session is asked to start new work."""


class CatalogSession:
    def __init__(
        self,
        store: RideStore,
        engine: Optional[RosterEngine] = None,
        *,
        default_point: tuple[float, float] = DEFAULT_START_POINT,
        default_zoom: int = DEFAULT_ZOOM,
        map_padding: int = FIT_PADDING,
    ):
        self.store = store
        self.engine = engine or RosterEngine(store)
        self.default_point = default_point
        self.default_zoom = default_zoom
        self.map_padding = map_padding

        self.controller: Optional[AvailabilityController] = None
        self.collection = RideCollection()
        self._generation = 0
        self._load_ticket = 0
        self._closed = False

    # ── State ─────────────────────────────────────────────────────────

    @property
    def mode(self) -> AvailabilityMode:
        return self.controller.mode if self.controller else AvailabilityMode.LOADING

    @property
    def loaded(self) -> bool:
        return self.mode is not AvailabilityMode.LOADING

    @property
    def read_only(self) -> bool:
        return self.collection.read_only

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Detach the view; in-flight results will be discarded."""
        self._closed = True
        self._generation += 1

    def _check_open(self) -> None:
        if self._closed:
            raise SessionClosed("Catalog session is closed")

    def _is_stale(self, generation: int) -> bool:
        return self._closed or generation != self._generation

    # ── Loading ───────────────────────────────────────────────────────

    async def load(self) -> Optional[RideCollection]:
        """Run a fresh load cycle (LIVE is always attempted first)."""
        self._check_open()
        self._load_ticket += 1
        ticket = self._load_ticket
        controller = AvailabilityController()
        collection = await controller.load(self.store)
        if self._closed or ticket != self._load_ticket:
            logger.info("Discarding load result for a closed or reloaded view")
            return None
        # results of mutations started before this point are now stale
        self._generation += 1
        self.controller = controller
        self.collection = collection
        logger.info(
            "Catalog loaded: %d rides, mode=%s", len(collection), controller.mode.value
        )
        return collection

    async def ensure_loaded(self) -> RideCollection:
        if not self.loaded:
            await self.load()
        return self.collection

    # ── Read-only views ───────────────────────────────────────────────

    def visible(
        self, query: str = "", difficulty: DifficultyFilter = ALL_DIFFICULTIES
    ) -> list[Ride]:
        return filter_rides(self.collection, query, difficulty)

    def map_view(
        self,
        query: str = "",
        difficulty: DifficultyFilter = ALL_DIFFICULTIES,
        viewer: Optional[User] = None,
    ) -> MapView:
        return build_map_view(
            self.visible(query, difficulty),
            viewer,
            self.read_only,
            default_center=self.default_point,
            default_zoom=self.default_zoom,
            padding=self.map_padding,
        )

    # ── Mutations ─────────────────────────────────────────────────────

    async def join(self, ride_id: str, user: User) -> Optional[Ride]:
        return await self._roster_change(self.engine.join, ride_id, user)

    async def leave(self, ride_id: str, user: User) -> Optional[Ride]:
        return await self._roster_change(self.engine.leave, ride_id, user)

    async def create(
        self, draft: RideDraft, user: User, *, now: Optional[datetime] = None
    ) -> Optional[Ride]:
        self._check_open()
        generation = self._generation
        result = await self.engine.create(
            self.collection, draft, user, now=now, default_point=self.default_point
        )
        ride = result.rides[0]
        if self._is_stale(generation):
            logger.info("Discarding late create result for ride %s", ride.id)
            return None
        self.collection = self.collection.prepend(ride)
        return ride

    async def _roster_change(
        self, change: RosterChange, ride_id: str, user: User
    ) -> Optional[Ride]:
        self._check_open()
        generation = self._generation
        try:
            result = await change(self.collection, ride_id, user.id)
        except StaleRevision:
            await self._reconcile(generation, ride_id)
            raise
        return self._merge(generation, result.get(ride_id))

    async def _reconcile(self, generation: int, ride_id: str) -> None:
        """Replace a ride whose write lost the revision race with the stored one."""
        try:
            current = await self.store.get_ride(ride_id)
        except PersistenceFailure as exc:
            logger.warning("Could not refresh ride %s: %s", ride_id, exc)
            return
        if self._is_stale(generation):
            return
        if current is None:
            self.collection = self.collection.remove(ride_id)
        else:
            self.collection = self.collection.replace(current)
        logger.info("Refreshed ride %s after a stale write", ride_id)

    def _merge(self, generation: int, ride: Optional[Ride]) -> Optional[Ride]:
        if ride is None:
            return None
        if self._is_stale(generation):
            logger.info("Discarding late roster result for ride %s", ride.id)
            return None
        self.collection = self.collection.replace(ride)
        return ride
