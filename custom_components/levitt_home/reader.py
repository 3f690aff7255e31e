"""Data point polling for the Levitt Home gateway."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable

from .api import LevittTransportError, build_poll_url, is_success_status
from .models import DataPoint
from .parsers import parse_data_point
from .session import SessionManager

_LOGGER = logging.getLogger(__name__)


def _timestamp_ms() -> int:
    return int(time.time() * 1000)


class DataPointReader:
    """Read data points through the getDp service.

    Individual reads are expected to fail now and then; a failed read gives
    an unreadable DataPoint instead of an error.
    """

    def __init__(self, session_manager: SessionManager) -> None:
        self._session = session_manager
        self._transport = session_manager.transport

    async def async_read_data_point(self, plant_item_id: int) -> DataPoint:
        """Read a single data point.

        Raises:
            LevittInvalidStateError: If no session is held.

        """
        async with self._session.lock:
            self._session.require_logged_in()
            return await self._async_fetch(plant_item_id)

    async def async_read_data_points(
        self, plant_item_ids: Iterable[int]
    ) -> dict[int, DataPoint]:
        """Read several data points one after the other.

        Args:
            plant_item_ids: Data points to read; duplicates are read once.

        Returns:
            Mapping of ID to DataPoint, in first-seen order.

        Raises:
            LevittInvalidStateError: If no session is held.

        """
        points: dict[int, DataPoint] = {}
        async with self._session.lock:
            self._session.require_logged_in()
            for plant_item_id in plant_item_ids:
                if plant_item_id not in points:
                    points[plant_item_id] = await self._async_fetch(plant_item_id)
        return points

    async def _async_fetch(self, plant_item_id: int) -> DataPoint:
        # The timestamp keeps the gateway from serving a cached answer.
        url = build_poll_url(
            self._transport.base_url,
            self._session.session_id,
            plant_item_id,
            _timestamp_ms(),
        )
        try:
            response = await self._transport.async_get(url)
        except LevittTransportError as err:
            _LOGGER.warning("Error getting data point %s: %s", plant_item_id, err)
            return DataPoint.unreadable(plant_item_id)

        if not is_success_status(response.status_code):
            _LOGGER.warning(
                "Failed to get data point %s - HTTP %s",
                plant_item_id,
                response.status_code,
            )
            return DataPoint.unreadable(plant_item_id)

        _LOGGER.debug("Data point %s response: %s", plant_item_id, response.text)
        return parse_data_point(plant_item_id, response.text)
