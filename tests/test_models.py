"""Tests for the Levitt Home data models."""

import dataclasses
import math

import pytest

from custom_components.levitt_home.const import DEFAULT_LAYOUT
from custom_components.levitt_home.models import (
    BlindPosition,
    Command,
    DataPoint,
    DataPointStatus,
    GatewayLayout,
    Room,
    Session,
    SessionState,
)


class TestSession:
    """Tests for Session dataclass."""

    def test_session_starts_logged_out(self) -> None:
        """Test that a new session holds no identifier."""
        session = Session()
        assert session.session_id == ""
        assert session.state is SessionState.LOGGED_OUT


class TestDataPoint:
    """Tests for DataPoint dataclass."""

    def test_unreadable_has_no_value(self) -> None:
        """Test that DataPoint.unreadable carries no value or unit."""
        point = DataPoint.unreadable(1391)
        assert point.id == 1391
        assert point.raw_value is None
        assert point.unit is None
        assert point.status is DataPointStatus.UNREADABLE
        assert point.is_ok is False

    def test_access_denied_keeps_unit(self) -> None:
        """Test that DataPoint.access_denied keeps the reported unit."""
        point = DataPoint.access_denied(1391, "C")
        assert point.unit == "C"
        assert point.status is DataPointStatus.ACCESS_DENIED
        assert point.is_ok is False

    def test_ok_point_has_read_time(self) -> None:
        """Test that a DataPoint records when it was read."""
        point = DataPoint(1391, "21.5", "C", DataPointStatus.OK)
        assert point.is_ok is True
        assert point.read_at.tzinfo is not None

    def test_data_point_is_frozen(self) -> None:
        """Test that DataPoint is immutable."""
        point = DataPoint.unreadable(1391)
        with pytest.raises(dataclasses.FrozenInstanceError):
            point.raw_value = "1"  # type: ignore[misc]


class TestGatewayLayout:
    """Tests for GatewayLayout dataclass."""

    def test_get_room_returns_mapping(self, sample_layout: GatewayLayout) -> None:
        """Test that get_room finds a configured room."""
        mapping = sample_layout.get_room(2)
        assert mapping is not None
        assert mapping.name == "Room 1"

    def test_get_room_returns_none_for_unknown_room(
        self, sample_layout: GatewayLayout
    ) -> None:
        """Test that get_room returns None for an unknown room."""
        assert sample_layout.get_room(99) is None

    def test_default_layout_shares_house_controls(self) -> None:
        """Test that every default room uses the house A/C and blinds."""
        assert len(DEFAULT_LAYOUT.rooms) == 5
        assert DEFAULT_LAYOUT.ac_status_id == 1377
        assert {room.ac_control_id for room in DEFAULT_LAYOUT.rooms} == {1083}
        assert {room.blind_control_id for room in DEFAULT_LAYOUT.rooms} == {816}


class TestRoom:
    """Tests for Room dataclass."""

    def test_from_mapping_starts_unknown(self, sample_layout: GatewayLayout) -> None:
        """Test that a new room has unknown readings."""
        room = Room.from_mapping(sample_layout.rooms[0])
        assert room.id == 1
        assert room.name == "Living Room"
        assert math.isnan(room.current_temperature)
        assert math.isnan(room.target_temperature)
        assert room.is_ac_on is False
        assert room.blind_position is BlindPosition.UNKNOWN
        assert room.last_updated is None


class TestCommand:
    """Tests for Command dataclass."""

    def test_command_holds_target_and_value(self) -> None:
        """Test that Command stores target and value."""
        command = Command(1083, "1")
        assert command.target_id == 1083
        assert command.desired_value == "1"
