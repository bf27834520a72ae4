"""
Availability Degradation Controller.

One controller per load cycle::

    LOADING --store answered--------------------> LIVE      (read_only=False)
    LOADING --store says "not provisioned"-------> FALLBACK  (read_only=True)

Both end states are terminal.  Any other store failure propagates as a
plain ``PersistenceFailure`` and leaves the controller in LOADING, so a
transient outage is never mistaken for a missing database.  Getting back to
LIVE from FALLBACK takes a fresh controller (a new load cycle), which keeps
fallback data out of a live session.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Iterable

from src.domain.entities import Ride, RideCollection
from src.domain.enums import MODE_TRANSITIONS, AvailabilityMode
from src.domain.errors import PersistenceFailure, ProvisioningUnavailable
from src.domain.sample_rides import fallback_rides
from src.infrastructure.store import RideStore

logger = logging.getLogger(__name__)


class InvalidModeTransition(Exception):
    """Raised when the availability mode change violates the state machine."""


class AvailabilityController:
    def __init__(
        self, fallback: Callable[[], Iterable[Ride]] = fallback_rides
    ):
        self.mode = AvailabilityMode.LOADING
        self._fallback = fallback

    @property
    def read_only(self) -> bool:
        return self.mode is AvailabilityMode.FALLBACK

    def _transition(self, new_mode: AvailabilityMode) -> None:
        if new_mode not in MODE_TRANSITIONS.get(self.mode, set()):
            raise InvalidModeTransition(
                f"Cannot switch availability from {self.mode} to {new_mode}"
            )
        logger.info("Availability mode %s -> %s", self.mode.value, new_mode.value)
        self.mode = new_mode

    async def load(self, store: RideStore) -> RideCollection:
        if self.mode is not AvailabilityMode.LOADING:
            raise InvalidModeTransition(
                f"Load cycle already finished in {self.mode}; start a new one"
            )
        try:
            rides = await store.list_rides()
        except ProvisioningUnavailable as exc:
            logger.warning("Ride store not provisioned, serving sample rides: %s", exc)
            self._transition(AvailabilityMode.FALLBACK)
            return RideCollection(tuple(self._fallback()), read_only=True)
        except asyncio.TimeoutError as exc:
            raise PersistenceFailure("Timed out loading rides") from exc

        self._transition(AvailabilityMode.LIVE)
        return RideCollection(tuple(rides), read_only=False)
