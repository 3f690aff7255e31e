"""Constants for the Levitt Home integration.

This module contains all the constants used throughout the integration,
including gateway endpoints, protocol literals and the house wiring table.
"""

from .models import GatewayLayout, RoomMapping

DOMAIN = "levitt_home"

USER_AGENT = (
    "Mozilla/5.0 (Linux; Android 11; IN2013) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/93.0.4577.82 Mobile Safari/537.36"
)

DEFAULT_TIMEOUT = 30.0
DEFAULT_POLL_INTERVAL = 30

# Gateway pages
MAIN_PATH = "/main.app"
AJAX_PATH = "/ajax.app"
DIALOG_PATH = "/dialog.app"
LOGOUT_PATH = "/logout"

SESSION_COOKIE_NAME = "SessionId"
SESSION_QUERY_PARAM = "sessionId"
SECTION_AUTH = "auth"
SECTION_DIALOG = "dialog"
SERVICE_GET_DP = "getDp"

# Login form
FORM_USER = "user"
FORM_PASSWORD = "pwd"
FORM_SUBMIT = "login"
FORM_SUBMIT_VALUE = "Conectar"

# getDp payload
ACCESS_DENIED_VALUE = "Access denied"
AC_ON_KEYWORD = "encendido"
AC_ON_CODE = "1"

# Dialog protocol
DIALOG_ACTION_UPDATE = "update"
DIALOG_DP_DESCRIPTION = "COzwValME8"
DIALOG_FIELD_NAMES = ("action", "DpDescription", "id", "value")
DIALOG_SUCCESS_MARKER = "cleanupDialog"
DIALOG_BOUNDARY_PREFIX = "----WebKitFormBoundary"
DIALOG_LOG_PREVIEW = 500

AC_VALUE_ON = "1"
AC_VALUE_OFF = "2"

BLINDS_UP = "UP"
BLINDS_DOWN = "DOWN"
BLINDS_VALUE_MAP = {
    BLINDS_UP: "1",
    BLINDS_DOWN: "2",
}

ERROR_INVALID_AUTH = "invalid_auth"
ERROR_CANNOT_CONNECT = "cannot_connect"
ERROR_TIMEOUT = "timeout_error"
ERROR_UNKNOWN = "unknown_error"

AC_STATUS_SENSOR_ID = 1377
AC_DIALOG_ID = 1083
BLINDS_DIALOG_ID = 1032
HOUSE_BLIND_CONTROL_ID = 816

# 5 rooms for temperature monitoring, one A/C and one blinds control for
# the whole house.
DEFAULT_LAYOUT = GatewayLayout(
    rooms=(
        RoomMapping(
            id=1,
            name="Living Room",
            temperature_sensor_id=1391,
            target_temp_sensor_id=775,
            ac_control_id=AC_DIALOG_ID,
            blind_control_id=HOUSE_BLIND_CONTROL_ID,
        ),
        RoomMapping(
            id=2,
            name="Room 1",
            temperature_sensor_id=1398,
            target_temp_sensor_id=816,
            ac_control_id=AC_DIALOG_ID,
            blind_control_id=HOUSE_BLIND_CONTROL_ID,
        ),
        RoomMapping(
            id=3,
            name="Room 2",
            temperature_sensor_id=1405,
            target_temp_sensor_id=857,
            ac_control_id=AC_DIALOG_ID,
            blind_control_id=HOUSE_BLIND_CONTROL_ID,
        ),
        RoomMapping(
            id=4,
            name="Room 3",
            temperature_sensor_id=1412,
            target_temp_sensor_id=898,
            ac_control_id=AC_DIALOG_ID,
            blind_control_id=HOUSE_BLIND_CONTROL_ID,
        ),
        RoomMapping(
            id=5,
            name="Hallway",
            temperature_sensor_id=1419,
            target_temp_sensor_id=940,
            ac_control_id=AC_DIALOG_ID,
            blind_control_id=HOUSE_BLIND_CONTROL_ID,
        ),
    ),
    ac_status_id=AC_STATUS_SENSOR_ID,
    ac_dialog_id=AC_DIALOG_ID,
    blinds_dialog_id=BLINDS_DIALOG_ID,
)
