"""Session management for the Levitt Home gateway.

The gateway was written for a browser: it hands out a session identifier
in a cookie on the landing page, expects the auth page to be loaded with
that identifier and only then accepts the login form. The session manager
replays that sequence and keeps the resulting identifier.
"""

from __future__ import annotations

import asyncio
import logging
import uuid

import httpx

from .api import (
    LevittAuthError,
    LevittInvalidStateError,
    LevittTransportError,
    build_auth_url,
    build_logout_url,
    build_main_url,
    is_success_status,
)
from .const import (
    FORM_PASSWORD,
    FORM_SUBMIT,
    FORM_SUBMIT_VALUE,
    FORM_USER,
    SESSION_COOKIE_NAME,
)
from .models import Session, SessionState
from .parsers import extract_session_id
from .transport import GatewayTransport

_LOGGER = logging.getLogger(__name__)

COOKIE_HEADER = "Cookie"


def _session_id_from_response(response: httpx.Response) -> str | None:
    """Return the SessionId cookie set by a response or its redirects."""
    cookies: list[str] = []
    for hop in (*response.history, response):
        cookies.extend(hop.headers.get_list("set-cookie"))
    return extract_session_id(cookies)


class SessionManager:
    """Own the single gateway session.

    State machine::

        logged_out --login ok--> logged_in --logout--> logged_out
        logged_out --login failed--> logged_out
    """

    def __init__(self, transport: GatewayTransport) -> None:
        self._transport = transport
        self._session = Session()
        self.lock = asyncio.Lock()

    @property
    def transport(self) -> GatewayTransport:
        """Return the transport the session is attached to."""
        return self._transport

    @property
    def state(self) -> SessionState:
        """Return the current authentication state."""
        return self._session.state

    @property
    def session_id(self) -> str:
        """Return the current session identifier, empty when logged out."""
        return self._session.session_id

    @property
    def is_logged_in(self) -> bool:
        """Return True if a session identifier is held."""
        return bool(self._session.session_id)

    @property
    def auth_url(self) -> str:
        """Return the auth page URL of the current session."""
        return build_auth_url(self._transport.base_url, self.session_id)

    def require_logged_in(self) -> None:
        """Raise LevittInvalidStateError unless a session is held."""
        if not self.is_logged_in:
            error_msg = "Not logged in"
            raise LevittInvalidStateError(error_msg)

    async def async_authenticate(self, username: str, password: str) -> str:
        """Run the browser login handshake.

        Args:
            username: Gateway user name.
            password: Gateway password.

        Returns:
            The session identifier to use from now on.

        Raises:
            LevittAuthError: If any login step is rejected.
            LevittTransportError: If the gateway cannot be reached.

        """
        base_url = self._transport.base_url

        main_response = await self._transport.async_get(build_main_url(base_url))
        if not is_success_status(main_response.status_code):
            error_msg = f"Failed to access main page: {main_response.status_code}"
            raise LevittAuthError(error_msg)

        session_id = _session_id_from_response(main_response)
        if not session_id:
            # The gateway accepts a client-picked identifier at this stage.
            session_id = str(uuid.uuid4())
            _LOGGER.debug("No session cookie on main page, using %s", session_id)

        auth_url = build_auth_url(base_url, session_id)
        auth_response = await self._transport.async_get(auth_url)
        if not is_success_status(auth_response.status_code):
            error_msg = f"Failed to access auth section: {auth_response.status_code}"
            raise LevittAuthError(error_msg)

        login_response = await self._transport.async_post(
            auth_url,
            data={
                FORM_USER: username,
                FORM_PASSWORD: password,
                FORM_SUBMIT: FORM_SUBMIT_VALUE,
            },
        )
        if not is_success_status(login_response.status_code):
            error_msg = f"Login failed with status: {login_response.status_code}"
            raise LevittAuthError(error_msg)

        return _session_id_from_response(login_response) or session_id

    async def async_login(self, username: str, password: str) -> bool:
        """Log in and keep the session.

        Returns:
            True if the handshake completed, False otherwise. Failures are
            logged and leave the manager logged out.

        """
        async with self.lock:
            self._clear()
            self._session.state = SessionState.AUTHENTICATING
            try:
                session_id = await self.async_authenticate(username, password)
            except LevittAuthError as err:
                _LOGGER.error("Login rejected by gateway: %s", err)
                self._clear()
                return False
            except LevittTransportError as err:
                _LOGGER.error("Login failed: %s", err)
                self._clear()
                return False

            self._session.session_id = session_id
            self._session.state = SessionState.LOGGED_IN
            self._transport.set_persistent_header(
                COOKIE_HEADER, f"{SESSION_COOKIE_NAME}={session_id}"
            )
            _LOGGER.info("Login successful with session: %s", session_id)
            return True

    async def async_logout(self) -> None:
        """Log out, best effort. The session is always cleared."""
        async with self.lock:
            if self.is_logged_in:
                url = build_logout_url(self._transport.base_url, self.session_id)
                try:
                    response = await self._transport.async_get(url)
                except LevittTransportError as err:
                    _LOGGER.warning("Error during logout: %s", err)
                else:
                    if not is_success_status(response.status_code):
                        _LOGGER.warning(
                            "Logout returned status %s", response.status_code
                        )
            self._clear()

    def invalidate(self) -> None:
        """Forget the session without telling the gateway."""
        _LOGGER.debug("Invalidating session %s", self.session_id)
        self._clear()

    def _clear(self) -> None:
        self._session = Session()
        self._transport.remove_persistent_header(COOKIE_HEADER)
        self._transport.clear_session_cookie()
