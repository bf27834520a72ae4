"""Unit tests for ride creation and the ride invariants."""

from datetime import date, datetime, time, timezone

import pytest

from src.domain.entities import (
    DEFAULT_START_POINT,
    Ride,
    RideCollection,
    RideDraft,
    User,
    validate_creation,
)
from src.domain.enums import Difficulty
from src.domain.errors import ValidationError

CREATOR = User(id="u1", email="rider@example.com", display_name="Rider One")
NOW = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)


def _draft(**overrides) -> RideDraft:
    fields = dict(
        title="Morning Coffee Ride",
        description="Easy loop with a cafe stop",
        start_location="Crissy Field",
        date=date(2026, 11, 1),
        time=time(7, 30),
        difficulty="Moderate",
        distance_km=30,
        max_participants=12,
        start_latitude=37.80,
        start_longitude=-122.46,
    )
    fields.update(overrides)
    return RideDraft(**fields)


class TestValidateCreation:
    def test_creator_is_the_only_participant(self):
        ride = validate_creation(_draft(), CREATOR, now=NOW)
        assert ride.participants == ("u1",)
        assert ride.current_participants == 1
        assert ride.created_by in ride.participants

    def test_stamps_creator_and_timestamps(self):
        ride = validate_creation(_draft(), CREATOR, now=NOW)
        assert ride.creator_name == "Rider One"
        assert ride.creator_email == "rider@example.com"
        assert ride.created_at == ride.updated_at == NOW
        assert ride.revision == 0
        assert ride.difficulty is Difficulty.MODERATE

    def test_creator_name_falls_back_to_email(self):
        anonymous = User(id="u2", email="quiet@example.com")
        ride = validate_creation(_draft(), anonymous, now=NOW)
        assert ride.creator_name == "quiet@example.com"

    def test_ids_are_unique(self):
        a = validate_creation(_draft(), CREATOR, now=NOW)
        b = validate_creation(_draft(), CREATOR, now=NOW)
        assert a.id != b.id
        assert a.id.startswith("ride_")

    def test_missing_coordinates_use_default_point(self):
        ride = validate_creation(
            _draft(start_latitude=None, start_longitude=0), CREATOR, now=NOW
        )
        assert (ride.start_latitude, ride.start_longitude) == DEFAULT_START_POINT

    def test_custom_default_point(self):
        ride = validate_creation(
            _draft(start_latitude=0, start_longitude=0),
            CREATOR,
            now=NOW,
            default_point=(52.52, 13.405),
        )
        assert (ride.start_latitude, ride.start_longitude) == (52.52, 13.405)

    def test_text_fields_are_stripped(self):
        ride = validate_creation(_draft(title="  Night Ride  "), CREATOR, now=NOW)
        assert ride.title == "Night Ride"

    # ── Rejections ────────────────────────────────────────────────

    @pytest.mark.parametrize("field", ["title", "description", "start_location"])
    def test_blank_text_rejected(self, field):
        with pytest.raises(ValidationError) as info:
            validate_creation(_draft(**{field: "   "}), CREATOR, now=NOW)
        assert field in info.value.errors

    def test_unknown_difficulty_rejected(self):
        with pytest.raises(ValidationError) as info:
            validate_creation(_draft(difficulty="Brutal"), CREATOR, now=NOW)
        assert "difficulty" in info.value.errors

    @pytest.mark.parametrize("distance", [0, -5, None])
    def test_distance_must_be_positive(self, distance):
        with pytest.raises(ValidationError) as info:
            validate_creation(_draft(distance_km=distance), CREATOR, now=NOW)
        assert "distance_km" in info.value.errors

    @pytest.mark.parametrize("places", [1, 51, None])
    def test_max_participants_out_of_range(self, places):
        with pytest.raises(ValidationError) as info:
            validate_creation(_draft(max_participants=places), CREATOR, now=NOW)
        assert "max_participants" in info.value.errors

    @pytest.mark.parametrize("places", [2, 50])
    def test_max_participants_bounds_accepted(self, places):
        ride = validate_creation(_draft(max_participants=places), CREATOR, now=NOW)
        assert ride.max_participants == places

    def test_all_problems_reported_together(self):
        with pytest.raises(ValidationError) as info:
            validate_creation(RideDraft(), CREATOR, now=NOW)
        assert {
            "title", "description", "start_location", "difficulty",
            "date", "time", "distance_km", "max_participants",
        } <= set(info.value.errors)


class TestRideInvariants:
    def test_current_participants_is_derived(self, make_ride):
        ride = make_ride(participants=("alice", "bob", "carol"))
        assert ride.current_participants == 3

    def test_creator_must_be_participant(self, make_ride):
        with pytest.raises(ValidationError):
            make_ride(participants=("bob",))

    def test_duplicates_rejected(self, make_ride):
        with pytest.raises(ValidationError):
            make_ride(participants=("alice", "bob", "bob"))

    def test_cannot_exceed_capacity(self, make_ride):
        with pytest.raises(ValidationError):
            make_ride(participants=("alice", "bob", "carol"), max_participants=2)

    def test_participants_normalised_to_tuple(self, make_ride):
        ride = make_ride(participants=["alice", "bob"])
        assert ride.participants == ("alice", "bob")

    def test_is_full(self, make_ride):
        assert make_ride(participants=("alice", "bob"), max_participants=2).is_full
        assert not make_ride(max_participants=2).is_full

    def test_ride_is_immutable(self, make_ride):
        ride = make_ride()
        with pytest.raises(AttributeError):
            ride.title = "changed"


class TestRideCollection:
    def test_replace_keeps_order(self, make_ride):
        a, b, c = make_ride("a"), make_ride("b"), make_ride("c")
        coll = RideCollection((a, b, c))
        new_b = make_ride("b", title="Renamed")
        updated = coll.replace(new_b)
        assert [r.id for r in updated] == ["a", "b", "c"]
        assert updated.get("b").title == "Renamed"
        assert coll.get("b").title == b.title  # original untouched

    def test_prepend_and_flag_kept(self, make_ride):
        coll = RideCollection((make_ride("a"),), read_only=True)
        updated = coll.prepend(make_ride("new"))
        assert [r.id for r in updated] == ["new", "a"]
        assert updated.read_only is True

    def test_get_unknown_is_none(self):
        assert RideCollection().get("nope") is None

    def test_remove(self, make_ride):
        coll = RideCollection((make_ride("a"), make_ride("b")))
        assert [r.id for r in coll.remove("a")] == ["b"]
        assert len(coll.remove("missing")) == 2

    def test_ride_constructor_accepts_difficulty_string(self, make_ride):
        ride = make_ride(difficulty="Hard")
        assert ride.difficulty is Difficulty.HARD
        assert isinstance(ride, Ride)
