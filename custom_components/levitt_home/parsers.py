"""Parsers for the loosely typed strings returned by the gateway.

Every function here is pure. Values that cannot be interpreted degrade to
an "unknown" sentinel (NaN, BlindPosition.UNKNOWN, an unreadable
DataPoint) instead of raising.
"""

from __future__ import annotations

import json
import logging
import math
import re
from collections.abc import Iterable

from .const import (
    AC_ON_CODE,
    AC_ON_KEYWORD,
    ACCESS_DENIED_VALUE,
    SESSION_COOKIE_NAME,
)
from .models import BlindPosition, DataPoint, DataPointStatus

_LOGGER = logging.getLogger(__name__)

_DECIMAL_PATTERN = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)", re.ASCII)

_BLIND_POSITION_MAP = {
    "0": BlindPosition.UP,
    "1": BlindPosition.DOWN,
    "2": BlindPosition.PARTIAL,
}
_BLIND_POSITION_REVERSE_MAP = {
    value: key for key, value in _BLIND_POSITION_MAP.items()
}


def parse_temperature(raw: str | None) -> float:
    """Parse a temperature reading.

    Args:
        raw: Raw value from the gateway, e.g. "21.5" or "21,5".
            Only plain decimal digits with an optional sign are accepted.

    Returns:
        The temperature in degrees, or NaN if the value is missing or
        cannot be parsed.

    """
    if raw is None:
        return math.nan

    text = raw.strip()
    if "," in text and "." not in text:
        text = text.replace(",", ".", 1)

    if not _DECIMAL_PATTERN.fullmatch(text):
        return math.nan

    value = float(text)
    return value if math.isfinite(value) else math.nan


def parse_blind_position(raw: str | None) -> BlindPosition:
    """Map a blind status code to a BlindPosition ("0" up, "1" down, "2" partial)."""
    if raw is None:
        return BlindPosition.UNKNOWN
    return _BLIND_POSITION_MAP.get(raw, BlindPosition.UNKNOWN)


def encode_blind_position(position: BlindPosition) -> str:
    """Return the status code written for a blind position.

    UNKNOWN has no code of its own and is written as "up".
    """
    return _BLIND_POSITION_REVERSE_MAP.get(position, "0")


def parse_ac_state(raw: str | None) -> bool:
    """Return True if the A/C status value means "on"."""
    if raw is None:
        return False
    return raw.lower() == AC_ON_KEYWORD or raw == AC_ON_CODE


def extract_session_id(set_cookie_values: Iterable[str]) -> str | None:
    """Extract the session identifier from Set-Cookie header values.

    Args:
        set_cookie_values: Raw Set-Cookie header values, in order.

    Returns:
        The value following the first "SessionId=" token up to the next
        ";" (or end of string), or None if no value carries one.

    """
    token = f"{SESSION_COOKIE_NAME}="
    for cookie in set_cookie_values:
        start = cookie.find(token)
        if start == -1:
            continue
        start += len(token)
        end = cookie.find(";", start)
        if end == -1:
            end = len(cookie)
        session_id = cookie[start:end].strip()
        if session_id:
            return session_id
    return None


def parse_data_point(plant_item_id: int, body: str) -> DataPoint:
    """Decode a getDp response body.

    Expected format::

        {"service":"getDp","plantItemId":"1391","value":"21.5","unit":"C"}

    Args:
        plant_item_id: The polled data point ID.
        body: Raw response body.

    Returns:
        A DataPoint with status OK, ACCESS_DENIED (the "Access denied"
        sentinel or an empty value) or UNREADABLE (malformed body).

    """
    try:
        payload = json.loads(body)
    except ValueError:
        _LOGGER.warning(
            "Failed to parse JSON response for plant item %s: %s",
            plant_item_id,
            body,
        )
        return DataPoint.unreadable(plant_item_id)

    if not isinstance(payload, dict) or "value" not in payload:
        _LOGGER.warning(
            "Unexpected response for plant item %s: %s", plant_item_id, body
        )
        return DataPoint.unreadable(plant_item_id)

    unit = payload.get("unit")
    if unit is not None:
        unit = str(unit)

    value = payload["value"]
    if value is None or value in ("", ACCESS_DENIED_VALUE):
        _LOGGER.warning(
            "Access denied or empty value for plant item %s", plant_item_id
        )
        return DataPoint.access_denied(plant_item_id, unit)

    return DataPoint(plant_item_id, str(value), unit, DataPointStatus.OK)
