"""Pytest configuration and fixtures for Levitt Home tests."""

import json
import re
from collections.abc import Callable

import pytest
from pytest_httpx import HTTPXMock

from custom_components.levitt_home.models import GatewayLayout, RoomMapping

HOST = "gateway.local"
BASE_URL = f"http://{HOST}"
SESSION_ID = "abc123"
USERNAME = "admin"
PASSWORD = "secret"


def poll_url_pattern(plant_item_id: int, session_id: str = SESSION_ID) -> re.Pattern:
    """Return a pattern matching the getDp URL of a data point, any timestamp."""
    return re.compile(
        rf"{re.escape(BASE_URL)}/ajax\.app\?SessionId={session_id}"
        rf"&service=getDp&plantItemId={plant_item_id}&_=\d+$"
    )


def data_point_body(plant_item_id: int, value: str | None, unit: str = "C") -> str:
    """Return a getDp response body as the gateway sends it."""
    return json.dumps(
        {
            "service": "getDp",
            "plantItemId": str(plant_item_id),
            "value": value,
            "unit": unit,
        }
    )


@pytest.fixture
def add_login_responses(httpx_mock: HTTPXMock) -> Callable[..., None]:
    """Fixture registering the three responses of a successful login.

    Returns:
        A function taking the session id set on the main page and an
        optional rotated id set on the login response.

    """

    def _add(session_id: str = SESSION_ID, rotated_id: str | None = None) -> None:
        auth_url = f"{BASE_URL}/main.app?SessionId={session_id}&section=auth"
        httpx_mock.add_response(
            url=f"{BASE_URL}/main.app",
            method="GET",
            headers={"Set-Cookie": f"SessionId={session_id}; Path=/"},
            text="<html>main</html>",
        )
        httpx_mock.add_response(
            url=auth_url,
            method="GET",
            text="<form method='post'></form>",
        )
        login_headers = {}
        if rotated_id:
            login_headers["Set-Cookie"] = f"SessionId={rotated_id}; Path=/"
        httpx_mock.add_response(
            url=auth_url,
            method="POST",
            headers=login_headers,
            text="<html>welcome</html>",
        )

    return _add


@pytest.fixture
def sample_layout() -> GatewayLayout:
    """Fixture providing a two room layout sharing house-wide controls."""
    return GatewayLayout(
        rooms=(
            RoomMapping(
                id=1,
                name="Living Room",
                temperature_sensor_id=1391,
                target_temp_sensor_id=775,
                ac_control_id=1083,
                blind_control_id=816,
            ),
            RoomMapping(
                id=2,
                name="Room 1",
                temperature_sensor_id=1398,
                target_temp_sensor_id=857,
                ac_control_id=1083,
                blind_control_id=816,
            ),
        ),
        ac_status_id=1377,
        ac_dialog_id=1083,
        blinds_dialog_id=1032,
    )
