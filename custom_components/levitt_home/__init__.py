from __future__ import annotations

import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import CONF_HOST, CONF_PASSWORD, CONF_USERNAME
from homeassistant.core import HomeAssistant

from .api import create_session_client
from .const import DOMAIN
from .coordinator import LevittRoomCoordinator
from .rooms import RoomAggregator

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    _LOGGER.info("Setting up Levitt Home integration for entry %s", entry.entry_id)

    if CONF_HOST not in entry.data:
        _LOGGER.error("Missing host in configuration for entry %s", entry.entry_id)
        return False

    session = create_session_client(hass)
    gateway = RoomAggregator.from_client(session, entry.data[CONF_HOST])

    try:
        logged_in = await gateway.async_login(
            entry.data[CONF_USERNAME], entry.data[CONF_PASSWORD]
        )
    except Exception as err:
        _LOGGER.exception(
            "Unexpected error during setup for entry %s: %s", entry.entry_id, err
        )
        return False

    if not logged_in:
        _LOGGER.warning("Login failed for entry %s", entry.entry_id)
        return False

    coordinator = LevittRoomCoordinator(hass, gateway, entry)
    await coordinator.async_refresh()
    if not coordinator.last_update_success:
        _LOGGER.warning(
            "Initial room poll failed for entry %s, will retry on schedule",
            entry.entry_id,
        )

    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = {
        "session": session,
        "gateway": gateway,
        "coordinator": coordinator,
    }
    _LOGGER.info(
        "Successfully setup Levitt Home integration for entry %s", entry.entry_id
    )
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    _LOGGER.info("Unloading Levitt Home integration for entry %s", entry.entry_id)

    entry_data = hass.data.get(DOMAIN, {}).pop(entry.entry_id, None)
    if entry_data is None:
        return True

    await entry_data["gateway"].async_logout()
    _LOGGER.debug("Cleaned up data for entry %s", entry.entry_id)
    return True
