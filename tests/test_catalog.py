"""Unit tests for the catalog search / difficulty filter."""

import pytest

from src.domain.catalog import filter_rides, parse_difficulty_filter
from src.domain.entities import RideCollection
from src.domain.enums import Difficulty
from src.domain.errors import ValidationError


@pytest.fixture
def catalog(make_ride) -> RideCollection:
    return RideCollection(
        (
            make_ride(
                "r1",
                title="Golden Gate Sunrise",
                start_location="Crissy Field",
                description="Bridge crossing",
                difficulty=Difficulty.EASY,
            ),
            make_ride(
                "r2",
                title="Hawk Hill Repeats",
                start_location="Vista Point",
                description="Three climbs, bring lights",
                difficulty=Difficulty.HARD,
            ),
            make_ride(
                "r3",
                title="Lake Loop",
                start_location="Oakland Boathouse",
                description="Golden hour laps",
                difficulty=Difficulty.MODERATE,
            ),
            make_ride(
                "r4",
                title="Tempo Tuesday",
                start_location="Golden Gate Park",
                description="Steady effort",
                difficulty=Difficulty.HARD,
            ),
        )
    )


def _ids(rides):
    return [r.id for r in rides]


class TestFilterRides:
    def test_empty_query_all_returns_everything_in_order(self, catalog):
        assert _ids(filter_rides(catalog, "", "all")) == ["r1", "r2", "r3", "r4"]

    def test_matches_title_location_or_description(self, catalog):
        # r1 title, r3 description, r4 location
        assert _ids(filter_rides(catalog, "golden", "all")) == ["r1", "r3", "r4"]

    def test_case_insensitive(self, catalog):
        assert _ids(filter_rides(catalog, "HAWK hill", "all")) == ["r2"]
        assert _ids(filter_rides(catalog, "oakland", "all")) == ["r3"]

    def test_difficulty_is_anded_with_query(self, catalog):
        assert _ids(filter_rides(catalog, "golden", "Hard")) == ["r4"]
        assert _ids(filter_rides(catalog, "golden", Difficulty.EASY)) == ["r1"]

    def test_difficulty_only(self, catalog):
        assert _ids(filter_rides(catalog, "", Difficulty.HARD)) == ["r2", "r4"]

    def test_no_match(self, catalog):
        assert filter_rides(catalog, "velodrome", "all") == []

    def test_deterministic_and_pure(self, catalog):
        before = catalog.rides
        first = filter_rides(catalog, "o", "all")
        second = filter_rides(catalog, "o", "all")
        assert first == second
        assert catalog.rides == before

    def test_accepts_plain_sequence(self, catalog):
        assert _ids(filter_rides(list(catalog), "tempo")) == ["r4"]


class TestParseDifficultyFilter:
    @pytest.mark.parametrize("value", ["all", "", None])
    def test_no_restriction(self, value):
        assert parse_difficulty_filter(value) is None

    def test_known_value(self):
        assert parse_difficulty_filter("Moderate") is Difficulty.MODERATE

    def test_unknown_value(self):
        with pytest.raises(ValidationError):
            parse_difficulty_filter("extreme")
