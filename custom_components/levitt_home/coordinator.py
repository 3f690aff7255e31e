"""Coordinator for Levitt Home integration."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import TYPE_CHECKING

from homeassistant.const import CONF_PASSWORD, CONF_USERNAME
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from . import api
from .const import DEFAULT_POLL_INTERVAL, DOMAIN
from .models import Room

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant

    from .rooms import RoomAggregator

_LOGGER = logging.getLogger(__name__)


class LevittRoomCoordinator(DataUpdateCoordinator[dict[int, Room]]):
    """Coordinator that polls the rooms of the gateway."""

    def __init__(
        self,
        hass: HomeAssistant,
        gateway: RoomAggregator,
        config_entry: ConfigEntry,
    ) -> None:
        """Initialize the coordinator."""
        super().__init__(
            hass,
            _LOGGER,
            name=f"{DOMAIN}_rooms",
            update_interval=timedelta(seconds=DEFAULT_POLL_INTERVAL),
        )
        self.gateway = gateway
        self.config_entry = config_entry
        self.data = {}

    async def _async_update_data(self) -> dict[int, Room]:
        if not self.gateway.is_logged_in:
            await self._async_relogin()

        try:
            rooms = await self.gateway.async_read_rooms()
        except api.LevittInvalidStateError as err:
            raise UpdateFailed(f"Session lost while polling rooms: {err}") from err

        if not self.gateway.is_logged_in:
            raise UpdateFailed("Gateway session expired, logging in on next poll")

        if not rooms:
            raise UpdateFailed("No room data received from gateway")

        _LOGGER.debug("Polled status for %d rooms", len(rooms))
        return {room.id: room for room in rooms}

    async def _async_relogin(self) -> None:
        """Log in again with the stored credentials.

        Raises:
            UpdateFailed: If the gateway rejects the login.

        """
        username = self.config_entry.data.get(CONF_USERNAME)
        password = self.config_entry.data.get(CONF_PASSWORD)

        if not username or not password:
            error_msg = "Username or password not found in config entry."
            _LOGGER.error(error_msg)
            raise UpdateFailed(error_msg)

        _LOGGER.info("Session not active, logging in again as %s", username)
        if not await self.gateway.async_login(username, password):
            error_msg = "Automatic login to gateway failed"
            raise UpdateFailed(error_msg)
