"""HTTP transport for the Levitt Home gateway.

This is the only module that touches the network. It sends one request at
a time with a bounded timeout and turns httpx failures into
LevittTransportError.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from .api import (
    LevittTimeoutError,
    LevittTransportError,
    build_base_url,
    create_headers,
)
from .const import DEFAULT_TIMEOUT, SESSION_COOKIE_NAME

_LOGGER = logging.getLogger(__name__)


class GatewayTransport:
    """Send requests to the gateway the way its browser front end does."""

    def __init__(
        self,
        session: httpx.AsyncClient,
        host: str,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the transport.

        Args:
            session: HTTP client used for every request.
            host: Gateway address as host[:port].
            timeout: Per-request timeout in seconds.

        """
        self._session = session
        self._timeout = timeout
        self._persistent_headers: dict[str, str] = {}
        self.base_url = build_base_url(host)

    @property
    def persistent_headers(self) -> dict[str, str]:
        """Return a copy of the headers attached to every request."""
        return dict(self._persistent_headers)

    def set_persistent_header(self, name: str, value: str) -> None:
        """Attach a header to every future request."""
        self._persistent_headers[name] = value

    def remove_persistent_header(self, name: str) -> None:
        """Stop attaching a header set with set_persistent_header."""
        self._persistent_headers.pop(name, None)

    def clear_session_cookie(self) -> None:
        """Drop the SessionId cookie the gateway stored in the client's jar."""
        self._session.cookies.delete(SESSION_COOKIE_NAME)

    async def async_request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        data: dict[str, str] | None = None,
        content: bytes | None = None,
    ) -> httpx.Response:
        """Send a request and return the response, whatever its status.

        Args:
            method: HTTP method.
            url: Absolute URL.
            headers: Extra headers for this request only.
            data: Form fields, sent URL-encoded.
            content: Raw request body.

        Returns:
            The HTTP response.

        Raises:
            LevittTransportError: If the request times out or fails to connect.

        """
        request_headers = {
            **create_headers(),
            **self._persistent_headers,
            **(headers or {}),
        }
        kwargs: dict[str, Any] = {}
        if data is not None:
            kwargs["data"] = data
        if content is not None:
            kwargs["content"] = content

        try:
            response = await self._session.request(
                method,
                url,
                headers=request_headers,
                timeout=self._timeout,
                follow_redirects=True,
                **kwargs,
            )
        except httpx.TimeoutException as err:
            error_msg = f"Timeout during {method} {url}"
            raise LevittTimeoutError(error_msg) from err
        except httpx.RequestError as err:
            error_msg = f"Request {method} {url} failed: {err}"
            raise LevittTransportError(error_msg) from err

        _LOGGER.debug("%s %s -> %s", method, url, response.status_code)
        return response

    async def async_get(
        self, url: str, *, headers: dict[str, str] | None = None
    ) -> httpx.Response:
        """Send a GET request."""
        return await self.async_request("GET", url, headers=headers)

    async def async_post(
        self,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        data: dict[str, str] | None = None,
        content: bytes | None = None,
    ) -> httpx.Response:
        """Send a POST request."""
        return await self.async_request(
            "POST", url, headers=headers, data=data, content=content
        )
