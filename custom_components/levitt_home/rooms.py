"""Room-level view of the Levitt Home gateway."""

from __future__ import annotations

import asyncio
import logging
import math
from datetime import UTC, datetime

import httpx

from .api import LevittProtocolViolationError
from .const import DEFAULT_LAYOUT, DEFAULT_TIMEOUT
from .dialog import DialogCommandExecutor
from .models import (
    BlindPosition,
    Command,
    DataPoint,
    GatewayLayout,
    Room,
    RoomMapping,
)
from .parsers import (
    encode_blind_position,
    parse_ac_state,
    parse_blind_position,
    parse_temperature,
)
from .reader import DataPointReader
from .session import SessionManager
from .transport import GatewayTransport

_LOGGER = logging.getLogger(__name__)


def _value(points: dict[int, DataPoint], plant_item_id: int) -> str | None:
    point = points.get(plant_item_id)
    if point is None or not point.is_ok:
        return None
    return point.raw_value


class RoomAggregator:
    """Read and write rooms using a static room to data point table.

    The A/C and blinds are house-wide: every room in the default layout
    points at the same controls, so a write through one room changes all
    of them.
    """

    def __init__(
        self,
        session_manager: SessionManager,
        reader: DataPointReader,
        executor: DialogCommandExecutor,
        layout: GatewayLayout = DEFAULT_LAYOUT,
    ) -> None:
        self._session = session_manager
        self._reader = reader
        self._executor = executor
        self.layout = layout
        self._poll_task: asyncio.Task[list[Room]] | None = None

    @classmethod
    def from_client(
        cls,
        client: httpx.AsyncClient,
        host: str,
        layout: GatewayLayout = DEFAULT_LAYOUT,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        scrape_hidden_fields: bool = False,
    ) -> RoomAggregator:
        """Wire transport, session, reader and executor for one gateway.

        Args:
            client: HTTP client to send requests with.
            host: Gateway address as host[:port].
            layout: Room to data point table.
            timeout: Per-request timeout in seconds.
            scrape_hidden_fields: Forward hidden dialog form inputs on writes.

        Returns:
            A ready to use aggregator, logged out.

        """
        transport = GatewayTransport(client, host, timeout)
        session_manager = SessionManager(transport)
        return cls(
            session_manager,
            DataPointReader(session_manager),
            DialogCommandExecutor(
                session_manager, scrape_hidden_fields=scrape_hidden_fields
            ),
            layout,
        )

    @property
    def session(self) -> SessionManager:
        """Return the session manager."""
        return self._session

    @property
    def is_logged_in(self) -> bool:
        """Return True if a gateway session is held."""
        return self._session.is_logged_in

    async def async_login(self, username: str, password: str) -> bool:
        """Log in to the gateway."""
        return await self._session.async_login(username, password)

    async def async_logout(self) -> None:
        """Log out of the gateway."""
        await self._session.async_logout()

    async def async_read_rooms(self) -> list[Room]:
        """Poll every configured room.

        A call made while a poll is running waits for that poll and gets
        its result instead of starting a second one.
        If no data point at all could be read the session is dropped, so
        the next poll logs in again.

        Returns:
            One Room per configured room, or an empty list if the poll
            failed unexpectedly. Unreadable fields hold NaN or UNKNOWN.

        Raises:
            LevittInvalidStateError: If no session is held.

        """
        self._session.require_logged_in()

        if self._poll_task is None or self._poll_task.done():
            self._poll_task = asyncio.create_task(self._async_poll_rooms())
        else:
            _LOGGER.debug("Room poll already in progress, waiting for it")

        return list(await asyncio.shield(self._poll_task))

    async def _async_poll_rooms(self) -> list[Room]:
        try:
            plant_item_ids = [self.layout.ac_status_id]
            for mapping in self.layout.rooms:
                plant_item_ids.extend(
                    (
                        mapping.temperature_sensor_id,
                        mapping.target_temp_sensor_id,
                        mapping.blind_control_id,
                    )
                )
            points = await self._reader.async_read_data_points(plant_item_ids)
            if not any(point.is_ok for point in points.values()):
                _LOGGER.warning(
                    "No data point was readable, dropping session %s",
                    self._session.session_id,
                )
                self._session.invalidate()

            is_ac_on = parse_ac_state(_value(points, self.layout.ac_status_id))
            rooms = []
            for mapping in self.layout.rooms:
                room = Room.from_mapping(mapping)
                room.current_temperature = parse_temperature(
                    _value(points, mapping.temperature_sensor_id)
                )
                room.target_temperature = parse_temperature(
                    _value(points, mapping.target_temp_sensor_id)
                )
                room.is_ac_on = is_ac_on
                room.blind_position = parse_blind_position(
                    _value(points, mapping.blind_control_id)
                )
                room.last_updated = datetime.now(UTC)
                rooms.append(room)
        except Exception:
            _LOGGER.exception("Failed to get rooms data")
            return []

        _LOGGER.debug("Polled %d rooms", len(rooms))
        return rooms

    def _get_room(self, room_id: int) -> RoomMapping | None:
        mapping = self.layout.get_room(room_id)
        if mapping is None:
            _LOGGER.warning("Unknown room %s", room_id)
        return mapping

    async def async_set_air_conditioning(self, room_id: int, is_on: bool) -> bool:
        """Switch the A/C serving a room; the A/C is house-wide.

        Returns:
            True if the gateway accepted the command, False if it did not
            or the room is unknown.

        """
        self._session.require_logged_in()
        mapping = self._get_room(room_id)
        if mapping is None:
            return False

        try:
            return await self._executor.async_set_house_ac(
                mapping.ac_control_id, is_on
            )
        except Exception:
            _LOGGER.exception("Failed to set AC for room %s", room_id)
            return False

    async def async_set_house_ac(self, is_on: bool) -> bool:
        """Switch the house A/C."""
        self._session.require_logged_in()
        try:
            return await self._executor.async_set_house_ac(
                self.layout.ac_dialog_id, is_on
            )
        except Exception:
            _LOGGER.exception("Failed to set house AC")
            return False

    async def async_set_house_blinds(self, command: str) -> bool:
        """Move the house blinds "UP" or "DOWN".

        Raises:
            LevittInvalidStateError: If no session is held.
            LevittProtocolViolationError: If command is not "UP" or "DOWN".

        """
        self._session.require_logged_in()
        try:
            return await self._executor.async_set_house_blinds(
                self.layout.blinds_dialog_id, command
            )
        except LevittProtocolViolationError:
            raise
        except Exception:
            _LOGGER.exception("Failed to send house blinds command %s", command)
            return False

    async def async_set_target_temperature(
        self, room_id: int, temperature: float
    ) -> bool:
        """Set the target temperature of a room.

        Raises:
            LevittInvalidStateError: If no session is held.
            LevittProtocolViolationError: If temperature is not a finite number.

        """
        self._session.require_logged_in()
        if not math.isfinite(temperature):
            error_msg = f"Invalid target temperature: {temperature}"
            raise LevittProtocolViolationError(error_msg)

        mapping = self._get_room(room_id)
        if mapping is None:
            return False

        try:
            return await self._executor.async_send_point_command(
                Command(mapping.target_temp_sensor_id, f"{temperature:.1f}")
            )
        except Exception:
            _LOGGER.exception(
                "Failed to set target temperature for room %s", room_id
            )
            return False

    async def async_set_blind_position(
        self, room_id: int, position: BlindPosition
    ) -> bool:
        """Set the blind position of a room.

        Whether the gateway honours this path is unconfirmed; the house-wide
        async_set_house_blinds is the reliable one.
        """
        self._session.require_logged_in()
        mapping = self._get_room(room_id)
        if mapping is None:
            return False

        try:
            return await self._executor.async_send_point_command(
                Command(mapping.blind_control_id, encode_blind_position(position))
            )
        except Exception:
            _LOGGER.exception("Failed to set blind position for room %s", room_id)
            return False
