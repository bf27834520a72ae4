"""
Catalog filter: the visible subset of a ride collection.

A ride is visible when the query is a case-insensitive substring of its
title, start location or description, and (unless the selector is "all")
its difficulty equals the selected one.  Collection order is preserved.

Complexity: O(N) per call, cheap enough to rerun on every keystroke.
"""

from __future__ import annotations

from typing import Iterable, Optional, Union

from .entities import Ride
from .enums import Difficulty
from .errors import ValidationError

ALL_DIFFICULTIES = "all"


def parse_difficulty_filter(
    value: Union[Difficulty, str, None],
) -> Optional[Difficulty]:
    """``None`` means no difficulty restriction."""
    if value is None or value == "" or value == ALL_DIFFICULTIES:
        return None
    try:
        return Difficulty(value)
    except ValueError:
        raise ValidationError(
            {"difficulty": "must be all, Easy, Moderate or Hard"}
        ) from None


def matches_query(ride: Ride, query: str) -> bool:
    if not query:
        return True
    needle = query.casefold()
    return (
        needle in ride.title.casefold()
        or needle in ride.start_location.casefold()
        or needle in ride.description.casefold()
    )


def filter_rides(
    rides: Iterable[Ride],
    query: str = "",
    difficulty: Union[Difficulty, str, None] = ALL_DIFFICULTIES,
) -> list[Ride]:
    wanted = parse_difficulty_filter(difficulty)
    return [
        ride
        for ride in rides
        if matches_query(ride, query)
        and (wanted is None or ride.difficulty is wanted)
    ]
