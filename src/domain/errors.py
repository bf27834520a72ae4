"""
Error taxonomy shared by the domain, the services and the API.

Every error carries a ``user_message``: the explanation presentation code
shows for it.  Callers can tell "rejected for reason X" apart from
"nothing happened" by the exception type alone.
"""

from __future__ import annotations

from typing import Optional


class RideEngineError(Exception):
    user_message = "Something went wrong."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.user_message)


class ValidationError(RideEngineError):
    """Bad ride-creation input.  ``errors`` maps field name -> problem."""

    user_message = "Please correct the highlighted fields."

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        detail = "; ".join(f"{k}: {v}" for k, v in self.errors.items())
        super().__init__(f"Invalid ride: {detail}")


# ── Roster ────────────────────────────────────────────────────────────


class RosterError(RideEngineError):
    """A join/leave request was refused."""

    user_message = "This roster change is not allowed."

    def __init__(
        self, ride_id: Optional[str] = None, identity: Optional[str] = None
    ):
        self.ride_id = ride_id
        self.identity = identity
        if ride_id:
            super().__init__(f"{self.user_message} (ride={ride_id})")
        else:
            super().__init__()


class RosterFull(RosterError):
    user_message = "This ride is full."


class AlreadyJoined(RosterError):
    user_message = "You have already joined this ride."


class NotAParticipant(RosterError):
    user_message = "You are not a participant of this ride."


class CreatorCannotLeave(RosterError):
    user_message = "The organiser cannot leave their own ride."


class ReadOnlyMode(RosterError):
    user_message = (
        "Showing sample rides while the database is being set up. "
        "Changes are temporarily disabled."
    )


class RideNotFound(RosterError):
    user_message = "Ride not found."


class MutationInProgress(RosterError):
    user_message = "Another change to this ride is still being saved."


# ── Persistence ───────────────────────────────────────────────────────


class PersistenceFailure(RideEngineError):
    """The store read or write failed (network, store error, timeout)."""

    user_message = "Could not reach the ride database. Please try again."


class ProvisioningUnavailable(PersistenceFailure):
    """The rides table does not exist yet for this deployment."""

    user_message = "The ride database is not set up yet."


class StaleRevision(PersistenceFailure):
    """The stored ride changed since it was read; the write was refused."""

    user_message = "This ride was changed by someone else. Please refresh."
