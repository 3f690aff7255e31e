"""Data models for Levitt Home integration."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum, StrEnum


class SessionState(StrEnum):
    """Authentication state of the gateway session."""

    LOGGED_OUT = "logged_out"
    AUTHENTICATING = "authenticating"
    LOGGED_IN = "logged_in"


@dataclass
class Session:
    """The single gateway session held by the session manager."""

    session_id: str = ""
    state: SessionState = SessionState.LOGGED_OUT


class BlindPosition(Enum):
    """Position reported for the blinds."""

    UNKNOWN = 0
    UP = 1
    DOWN = 2
    PARTIAL = 3


class DataPointStatus(StrEnum):
    """Outcome of a single data point poll."""

    OK = "ok"
    ACCESS_DENIED = "access_denied"
    UNREADABLE = "unreadable"


@dataclass(frozen=True, slots=True)
class DataPoint:
    """A data point value as returned by one getDp poll."""

    id: int
    raw_value: str | None
    unit: str | None
    status: DataPointStatus
    read_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def unreadable(cls, plant_item_id: int) -> DataPoint:
        """Return a point that could not be fetched or decoded."""
        return cls(plant_item_id, None, None, DataPointStatus.UNREADABLE)

    @classmethod
    def access_denied(cls, plant_item_id: int, unit: str | None = None) -> DataPoint:
        """Return a point the gateway refused to disclose."""
        return cls(plant_item_id, None, unit, DataPointStatus.ACCESS_DENIED)

    @property
    def is_ok(self) -> bool:
        """Return True if the point carries a usable value."""
        return self.status is DataPointStatus.OK


@dataclass(frozen=True, slots=True)
class RoomMapping:
    """Static wiring of a room to its gateway data points."""

    id: int
    name: str
    temperature_sensor_id: int
    target_temp_sensor_id: int
    ac_control_id: int
    blind_control_id: int


@dataclass(frozen=True)
class GatewayLayout:
    """House-specific table of rooms and house-wide control IDs.

    Several rooms may share the same A/C and blind control IDs; a write
    through any of them affects the whole house.
    """

    rooms: tuple[RoomMapping, ...]
    ac_status_id: int
    ac_dialog_id: int
    blinds_dialog_id: int

    def get_room(self, room_id: int) -> RoomMapping | None:
        """Return the mapping for room_id, or None if it is not configured."""
        for room in self.rooms:
            if room.id == room_id:
                return room
        return None


@dataclass(slots=True)
class Room:
    """Room snapshot produced by a poll.

    Temperatures are NaN when unknown, never zero.
    """

    id: int
    name: str
    temperature_sensor_id: int
    target_temp_sensor_id: int
    ac_control_id: int
    blind_control_id: int
    current_temperature: float = math.nan
    target_temperature: float = math.nan
    is_ac_on: bool = False
    blind_position: BlindPosition = BlindPosition.UNKNOWN
    last_updated: datetime | None = None

    @classmethod
    def from_mapping(cls, mapping: RoomMapping) -> Room:
        """Create an empty snapshot for a configured room."""
        return cls(
            id=mapping.id,
            name=mapping.name,
            temperature_sensor_id=mapping.temperature_sensor_id,
            target_temp_sensor_id=mapping.target_temp_sensor_id,
            ac_control_id=mapping.ac_control_id,
            blind_control_id=mapping.blind_control_id,
        )


@dataclass(frozen=True, slots=True)
class Command:
    """A write intent: set target_id to desired_value."""

    target_id: int
    desired_value: str
