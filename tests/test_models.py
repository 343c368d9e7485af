"""Tests for wire model parsing."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from pycriticalmaps.models._base import Coordinate, degrees, parse_epoch_timestamp
from pycriticalmaps.models.chat import ChatMessage
from pycriticalmaps.models.entities import FriendEntity, IdentifiableEntity, PeerEntity, RideEntity
from pycriticalmaps.models.location import Location
from pycriticalmaps.models.positions import PositionsResponse
from pycriticalmaps.models.ride import NextRideQuery, Ride


class TestLocation:
    def test_micro_degrees_are_normalized(self) -> None:
        location = Location.from_api("abc", {"latitude": 52520000, "longitude": 13405000, "timestamp": 1580000000})

        assert location.id == "abc"
        assert location.coordinate == Coordinate(52.52, 13.405)
        assert location.timestamp == 1580000000
        assert location.name is None

    def test_degrees_pass_through(self) -> None:
        location = Location.from_api("abc", {"latitude": 42, "longitude": 42, "timestamp": 0})
        assert location.coordinate == Coordinate(42.0, 42.0)

    def test_millisecond_timestamp(self) -> None:
        location = Location.from_api("abc", {"latitude": 1, "longitude": 1, "timestamp": 1580000000123})
        assert location.timestamp == 1580000000

    def test_optional_name_and_color(self) -> None:
        location = Location.from_api(
            "abc", {"latitude": 1, "longitude": 1, "timestamp": 0, "name": "Kim", "color": "#ff0000"}
        )
        assert (location.name, location.color) == ("Kim", "#ff0000")

    def test_blank_name_falls_back_to_none(self) -> None:
        location = Location.from_api("abc", {"latitude": 1, "longitude": 1, "name": ""})
        assert location.name is None

    def test_out_of_range_latitude_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Location(id="x", latitude=95.0, longitude=0.0)

    def test_is_immutable(self) -> None:
        location = Location(id="x", latitude=1.0, longitude=2.0)
        with pytest.raises(ValidationError):
            location.latitude = 3.0  # type: ignore[misc]


class TestRide:
    SAMPLE: dict = {
        "id": 4711,
        "title": "Critical Mass Berlin 27.03.2026",
        "dateTime": 1774634400,
        "latitude": 52.5,
        "longitude": 13.37,
        "location": "Mariannenplatz",
        "estimatedParticipants": 1200,
    }

    def test_parse_api_payload(self) -> None:
        ride = Ride.model_validate(self.SAMPLE)

        assert ride.id == "4711"
        assert ride.start_time == datetime.fromtimestamp(1774634400, tz=UTC)
        assert ride.coordinate == Coordinate(52.5, 13.37)
        assert ride.location == "Mariannenplatz"
        assert ride.raw["estimatedParticipants"] == 1200

    def test_title_and_time(self) -> None:
        ride = Ride.model_validate(self.SAMPLE)
        assert ride.title_and_time.startswith("Critical Mass Berlin 27.03.2026 - ")

    def test_missing_start_time_rejected(self) -> None:
        payload = dict(self.SAMPLE)
        del payload["dateTime"]
        with pytest.raises(ValidationError):
            Ride.model_validate(payload)


def test_next_ride_query_params_are_camel_case() -> None:
    query = NextRideQuery(center_latitude=52.52, center_longitude=13.405, radius=20, year=2026, month=3)

    assert query.to_params() == {
        "centerLatitude": "52.52",
        "centerLongitude": "13.405",
        "radius": "20",
        "year": "2026",
        "month": "3",
    }


def test_chat_message_from_api() -> None:
    message = ChatMessage.from_api("m1", {"message": "hi", "timestamp": 1700000000})

    assert message.text == "hi"
    assert message.identifier == "m1"
    assert message.timestamp == datetime.fromtimestamp(1700000000, tz=UTC)


def test_positions_response_skips_malformed_entries() -> None:
    response = PositionsResponse.from_api(
        {
            "locations": {
                "a": {"latitude": 52520000, "longitude": 13405000, "timestamp": 1},
                "broken": {"latitude": "north"},
                "b": {"latitude": 52530000, "longitude": 13405000, "timestamp": 1},
            },
            "chatMessages": {"m1": {"message": "hi", "timestamp": 1}},
        }
    )

    assert list(response.locations) == ["a", "b"]
    assert list(response.chat_messages) == ["m1"]


def test_positions_response_rejects_non_object_sections() -> None:
    with pytest.raises(TypeError):
        PositionsResponse.from_api({"locations": ["a"]})


def test_parse_epoch_timestamp() -> None:
    assert parse_epoch_timestamp(None) is None
    assert parse_epoch_timestamp(1700000000) == parse_epoch_timestamp(1700000000000)
    naive = datetime(2026, 1, 1)
    assert parse_epoch_timestamp(naive) == datetime(2026, 1, 1, tzinfo=UTC)


def test_degrees() -> None:
    assert degrees(13405000) == pytest.approx(13.405)
    assert degrees("-52.5") == -52.5


class TestEntities:
    def test_entities_satisfy_protocol(self) -> None:
        location = Location(id="abc", latitude=42.0, longitude=42.0)
        for entity in (PeerEntity.from_location(location), FriendEntity.from_location(location)):
            assert isinstance(entity, IdentifiableEntity)
            assert entity.identifier == "abc"
            assert entity.coordinate == Coordinate(42.0, 42.0)

    def test_value_equality_ignores_location_timestamp(self) -> None:
        first = PeerEntity.from_location(Location(id="a", latitude=1.0, longitude=2.0, timestamp=1))
        second = PeerEntity.from_location(Location(id="a", latitude=1.0, longitude=2.0, timestamp=2))
        assert first == second

    def test_peer_and_friend_with_same_values_differ(self) -> None:
        location = Location(id="a", latitude=1.0, longitude=2.0)
        assert PeerEntity.from_location(location) != FriendEntity.from_location(location)

    def test_ride_entity_from_ride(self) -> None:
        ride = Ride.model_validate(TestRide.SAMPLE)
        entity = RideEntity.from_ride(ride)
        assert entity.identifier == "4711"
        assert entity.name == ride.title
        assert entity.start_time == ride.start_time
