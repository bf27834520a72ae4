"""
Roster Engine
=============

The single authority for changing ride membership.

Order of checks for join / leave
--------------------------------
1. Read-only (fallback) collection  -> ``ReadOnlyMode``; nothing else runs,
   the store is never touched.
2. Unknown ride id                  -> ``RideNotFound``.
3. Per-ride guard                   -> ``MutationInProgress`` if another
   change to the same ride is in flight.
4. Roster rule                      -> ``RosterFull`` / ``AlreadyJoined`` /
   ``NotAParticipant`` / ``CreatorCannotLeave``.
5. Store write, compare-and-set on the ride revision the collection holds
   -> ``PersistenceFailure`` (incl. ``StaleRevision`` and timeouts).
6. The ride *returned by the store* replaces the local one.

No step before 6 produces a new collection, so a failed write can never
leave a speculative roster behind.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Optional, TypeVar

from src.domain.entities import (
    DEFAULT_START_POINT,
    Ride,
    RideCollection,
    RideDraft,
    User,
    validate_creation,
)
from src.domain.enums import RosterOp
from src.domain.errors import PersistenceFailure, ReadOnlyMode, RideNotFound
from src.domain.roster import apply_participant_change
from src.infrastructure.locks import LocalRideLocks, RideLocks
from src.infrastructure.store import RideStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RosterEngine:
    def __init__(self, store: RideStore, locks: Optional[RideLocks] = None):
        self.store = store
        self.locks = locks or LocalRideLocks()

    # ── Public API ────────────────────────────────────────────────────

    async def join(
        self, collection: RideCollection, ride_id: str, identity: str
    ) -> RideCollection:
        return await self._change(collection, ride_id, identity, RosterOp.JOIN)

    async def leave(
        self, collection: RideCollection, ride_id: str, identity: str
    ) -> RideCollection:
        return await self._change(collection, ride_id, identity, RosterOp.LEAVE)

    async def create(
        self,
        collection: RideCollection,
        draft: RideDraft,
        creator: User,
        *,
        now: Optional[datetime] = None,
        default_point: tuple[float, float] = DEFAULT_START_POINT,
    ) -> RideCollection:
        """Validate, persist and prepend a new ride (creator enrolled)."""
        if collection.read_only:
            raise ReadOnlyMode(identity=creator.id)
        ride = validate_creation(
            draft, creator, now=now, default_point=default_point
        )
        persisted = await self._persist(self.store.create_ride(ride), ride.id)
        logger.info("Ride %s created by %s", persisted.id, creator.id)
        return collection.prepend(persisted)

    # ── Internals ─────────────────────────────────────────────────────

    async def _change(
        self,
        collection: RideCollection,
        ride_id: str,
        identity: str,
        op: RosterOp,
    ) -> RideCollection:
        if collection.read_only:
            raise ReadOnlyMode(ride_id, identity)
        ride = collection.get(ride_id)
        if ride is None:
            raise RideNotFound(ride_id, identity)

        async with self.locks.hold(ride_id):
            changed = apply_participant_change(ride, identity, op)
            persisted = await self._persist(
                self.store.update_roster(changed, expected_revision=ride.revision),
                ride_id,
            )

        logger.info(
            "%s %s ride %s (%d/%d)",
            identity, op.value.lower(), ride_id,
            persisted.current_participants, persisted.max_participants,
        )
        return collection.replace(persisted)

    async def _persist(self, pending: Awaitable[Ride], ride_id: str) -> Ride:
        try:
            return await pending
        except PersistenceFailure as exc:
            logger.warning("Store write for ride %s failed: %s", ride_id, exc)
            raise
        except asyncio.TimeoutError as exc:
            logger.warning("Store write for ride %s timed out", ride_id)
            raise PersistenceFailure(f"Timed out saving ride {ride_id}") from exc
