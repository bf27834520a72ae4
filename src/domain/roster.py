"""
Roster rules: who may join or leave a ride.

``apply_participant_change`` is the only place a participant tuple is
rewritten.  It is pure; persisting the result is the Roster Engine's job.
"""

from __future__ import annotations

import dataclasses
from datetime import datetime
from typing import Optional

from .entities import Ride, User, utcnow
from .enums import Affordance, RosterOp
from .errors import (
    AlreadyJoined,
    CreatorCannotLeave,
    NotAParticipant,
    RosterFull,
)


def apply_participant_change(
    ride: Ride,
    identity: str,
    op: RosterOp,
    *,
    now: Optional[datetime] = None,
) -> Ride:
    """Return *ride* with *identity* added or removed, or raise ``RosterError``."""
    if op is RosterOp.JOIN:
        if ride.has_participant(identity):
            raise AlreadyJoined(ride.id, identity)
        if ride.is_full:
            raise RosterFull(ride.id, identity)
        participants = ride.participants + (identity,)
    else:
        if identity == ride.created_by:
            raise CreatorCannotLeave(ride.id, identity)
        if not ride.has_participant(identity):
            raise NotAParticipant(ride.id, identity)
        participants = tuple(p for p in ride.participants if p != identity)

    return dataclasses.replace(
        ride, participants=participants, updated_at=now or utcnow()
    )


def affordance_for(
    ride: Ride, viewer: Optional[User], read_only: bool
) -> Affordance:
    """Which roster control the list card and the map popup show."""
    if viewer is None:
        return Affordance.SIGN_IN
    if ride.created_by == viewer.id:
        return Affordance.OWNER
    if read_only:
        return Affordance.DEMO
    if ride.has_participant(viewer.id):
        return Affordance.LEAVE
    if ride.is_full:
        return Affordance.FULL
    return Affordance.JOIN
