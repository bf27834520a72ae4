"""Domain enumerations and state-transition rules."""

import enum


class Difficulty(str, enum.Enum):
    EASY = "Easy"
    MODERATE = "Moderate"
    HARD = "Hard"


class RosterOp(str, enum.Enum):
    JOIN = "JOIN"
    LEAVE = "LEAVE"


class AvailabilityMode(str, enum.Enum):
    LOADING = "LOADING"
    LIVE = "LIVE"
    FALLBACK = "FALLBACK"


# State machine: maps current mode -> set of valid next modes.
# LIVE and FALLBACK are terminal for one load cycle.
MODE_TRANSITIONS: dict[AvailabilityMode, set[AvailabilityMode]] = {
    AvailabilityMode.LOADING: {AvailabilityMode.LIVE, AvailabilityMode.FALLBACK},
    AvailabilityMode.LIVE: set(),
    AvailabilityMode.FALLBACK: set(),
}


class Affordance(str, enum.Enum):
    """The roster control a list card or map popup offers the viewer."""

    SIGN_IN = "SIGN_IN"
    OWNER = "OWNER"
    DEMO = "DEMO"
    JOIN = "JOIN"
    LEAVE = "LEAVE"
    FULL = "FULL"
