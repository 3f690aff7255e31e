"""API helpers for the Levitt Home gateway.

This module provides the error taxonomy, the browser-like request headers
and the URL builders for every gateway page the client talks to.
"""

from __future__ import annotations

from urllib.parse import urlencode

import httpx
from homeassistant.core import HomeAssistant
from homeassistant.helpers.httpx_client import create_async_httpx_client

from .const import (
    AJAX_PATH,
    DEFAULT_TIMEOUT,
    DIALOG_PATH,
    LOGOUT_PATH,
    MAIN_PATH,
    SECTION_AUTH,
    SECTION_DIALOG,
    SERVICE_GET_DP,
    SESSION_COOKIE_NAME,
    SESSION_QUERY_PARAM,
    USER_AGENT,
)

HTTP_OK = 200
HTTP_MULTIPLE_CHOICES = 300


class LevittApiClientError(Exception):
    """Base exception for Levitt Home API client errors."""


class LevittTransportError(LevittApiClientError):
    """Exception raised when the gateway cannot be reached or times out."""


class LevittTimeoutError(LevittTransportError):
    """Exception raised when the gateway does not answer in time."""


class LevittAuthError(LevittApiClientError):
    """Exception raised when a login step is rejected."""


class LevittProtocolViolationError(LevittApiClientError, ValueError):
    """Exception raised when the caller asks for an invalid command."""


class LevittInvalidStateError(LevittApiClientError, RuntimeError):
    """Exception raised when an operation needs a session that is not there."""


def create_headers() -> dict[str, str]:
    """Create the headers a browser sends to the gateway.

    Returns:
        Dictionary containing HTTP headers for gateway requests.

    """
    return {
        "user-agent": USER_AGENT,
        "accept": "text/html,application/xhtml+xml,application/json,*/*;q=0.8",
        "accept-language": "es-ES,es;q=0.9",
        "cache-control": "no-cache",
    }


def is_success_status(status: int) -> bool:
    """Check if HTTP status code indicates success.

    Args:
        status: HTTP status code to check.

    Returns:
        True if status code is in the 2xx range, False otherwise.

    """
    return HTTP_OK <= status < HTTP_MULTIPLE_CHOICES


def build_base_url(host: str) -> str:
    """Return the gateway root URL for host[:port].

    The gateway speaks plain HTTP; an explicit scheme is kept as given.
    """
    host = host.strip().rstrip("/")
    if host.startswith(("http://", "https://")):
        return host
    return f"http://{host}"


def _build_url(base_url: str, path: str, params: dict[str, str | int]) -> str:
    return f"{base_url}{path}?{urlencode(params)}"


def build_main_url(base_url: str) -> str:
    """Return the landing page URL."""
    return f"{base_url}{MAIN_PATH}"


def build_auth_url(base_url: str, session_id: str) -> str:
    """Return the session-scoped auth page URL."""
    return _build_url(
        base_url, MAIN_PATH, {SESSION_COOKIE_NAME: session_id, "section": SECTION_AUTH}
    )


def build_poll_url(
    base_url: str, session_id: str, plant_item_id: int, timestamp_ms: int
) -> str:
    """Return the getDp polling URL.

    Args:
        base_url: Gateway root URL.
        session_id: Current session identifier.
        plant_item_id: Data point to read.
        timestamp_ms: Cache buster, milliseconds since the epoch.

    Returns:
        The polling URL.

    """
    return _build_url(
        base_url,
        AJAX_PATH,
        {
            SESSION_COOKIE_NAME: session_id,
            "service": SERVICE_GET_DP,
            "plantItemId": plant_item_id,
            "_": timestamp_ms,
        },
    )


def build_command_url(base_url: str) -> str:
    """Return the generic per-point command URL."""
    return f"{base_url}{AJAX_PATH}"


def build_wait_url(base_url: str, session_id: str, dialog_id: int) -> str:
    """Return the dialog "wait" URL that arms a pending dialog."""
    return _build_url(
        base_url,
        MAIN_PATH,
        {
            SESSION_COOKIE_NAME: session_id,
            "section": SECTION_DIALOG,
            "action": "wait",
            "id": dialog_id,
        },
    )


def build_new_dialog_url(base_url: str, session_id: str, dialog_id: int) -> str:
    """Return the URL that loads the dialog form."""
    return _build_url(
        base_url,
        DIALOG_PATH,
        {SESSION_COOKIE_NAME: session_id, "action": "new", "id": dialog_id},
    )


def build_dialog_submit_url(base_url: str, session_id: str) -> str:
    """Return the generic dialog submission URL."""
    return _build_url(base_url, DIALOG_PATH, {SESSION_COOKIE_NAME: session_id})


def build_logout_url(base_url: str, session_id: str) -> str:
    """Return the logout URL."""
    return _build_url(base_url, LOGOUT_PATH, {SESSION_QUERY_PARAM: session_id})


def create_session_client(hass: HomeAssistant) -> httpx.AsyncClient:
    """Create a dedicated HTTP client for the gateway.

    The client is not shared with other integrations because the gateway
    session lives in its cookie jar and headers.

    Args:
        hass: Home Assistant instance.

    Returns:
        Configured httpx AsyncClient.

    """
    return create_async_httpx_client(
        hass,
        timeout=DEFAULT_TIMEOUT,
        follow_redirects=True,
    )
