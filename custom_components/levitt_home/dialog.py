"""Write commands for the Levitt Home gateway.

House-wide controls (A/C, blinds) are written through the gateway's dialog
pages, exactly as the browser does it:

1. Arm: GET main.app?section=dialog&action=wait, referred by the auth page.
2. Load: GET dialog.app?action=new, referred by the arm URL.
3. Submit: POST a multipart form to dialog.app, referred by the load URL.

The gateway answers the submit with a page that calls cleanupDialog() when
the value was accepted; a 200 without it is a rejected command.

Single data points (target temperature, room blind) take a plain
form-encoded POST to ajax.app instead.
"""

from __future__ import annotations

import asyncio
import logging
import re
import uuid
from collections.abc import Callable, Sequence
from enum import StrEnum
from typing import Any

import httpx

from .api import (
    LevittInvalidStateError,
    LevittProtocolViolationError,
    LevittTransportError,
    build_command_url,
    build_dialog_submit_url,
    build_new_dialog_url,
    build_wait_url,
    is_success_status,
)
from .const import (
    AC_VALUE_OFF,
    AC_VALUE_ON,
    BLINDS_VALUE_MAP,
    DIALOG_ACTION_UPDATE,
    DIALOG_BOUNDARY_PREFIX,
    DIALOG_DP_DESCRIPTION,
    DIALOG_FIELD_NAMES,
    DIALOG_LOG_PREVIEW,
    DIALOG_SUCCESS_MARKER,
    SESSION_QUERY_PARAM,
)
from .models import Command
from .session import SessionManager
from .transport import GatewayTransport

_LOGGER = logging.getLogger(__name__)

_HIDDEN_INPUT_PATTERN = re.compile(
    r"<input[^>]*type\s*=\s*[\"']hidden[\"'][^>]*>", re.IGNORECASE
)
_NAME_PATTERN = re.compile(r"name\s*=\s*[\"']([^\"']*)[\"']", re.IGNORECASE)
_VALUE_PATTERN = re.compile(r"value\s*=\s*[\"']([^\"']*)[\"']", re.IGNORECASE)

SuccessPredicate = Callable[[str], bool]


def is_dialog_success(body: str) -> bool:
    """Return True if a submit response closes the dialog."""
    return DIALOG_SUCCESS_MARKER in body


def generate_boundary() -> str:
    """Return a browser-style multipart boundary."""
    return DIALOG_BOUNDARY_PREFIX + uuid.uuid4().hex[:16]


def build_multipart_body(fields: Sequence[tuple[str, str]], boundary: str) -> bytes:
    """Encode form fields the way a browser submits a multipart form.

    Each part is the boundary line, a Content-Disposition line, an empty
    line and the raw value, all CRLF terminated, followed by the closing
    boundary. Some gateway parsers reject anything else.

    Args:
        fields: (name, value) pairs in submission order.
        boundary: Boundary token, without the leading dashes.

    Returns:
        The encoded body.

    """
    lines: list[str] = []
    for name, value in fields:
        lines.append(f"--{boundary}")
        lines.append(f'Content-Disposition: form-data; name="{name}"')
        lines.append("")
        lines.append(value)
    lines.append(f"--{boundary}--")
    return ("\r\n".join(lines) + "\r\n").encode("utf-8")


def extract_hidden_fields(html: str) -> list[tuple[str, str]]:
    """Return hidden inputs of a dialog form, except the fixed dialog fields."""
    fields: list[tuple[str, str]] = []
    for tag in _HIDDEN_INPUT_PATTERN.findall(html):
        name_match = _NAME_PATTERN.search(tag)
        value_match = _VALUE_PATTERN.search(tag)
        if name_match is None or value_match is None:
            continue
        name = name_match.group(1)
        if name in DIALOG_FIELD_NAMES:
            continue
        _LOGGER.debug("Added hidden field: %s = %s", name, value_match.group(1))
        fields.append((name, value_match.group(1)))
    return fields


def _preview(text: str) -> str:
    if len(text) > DIALOG_LOG_PREVIEW:
        return text[:DIALOG_LOG_PREVIEW] + "..."
    return text


class DialogStep(StrEnum):
    """Progress of a dialog transaction."""

    PENDING = "pending"
    ARMED = "armed"
    LOADED = "loaded"
    SUBMITTED = "submitted"
    FAILED = "failed"


class DialogTransaction:
    """One arm/load/submit exchange for a single dialog value.

    Steps can only run in order and only once. A step that is rejected
    moves the transaction to FAILED and nothing else may run after it.
    """

    def __init__(
        self,
        transport: GatewayTransport,
        session_id: str,
        auth_url: str,
        command: Command,
        *,
        label: str = "Dialog",
        success_predicate: SuccessPredicate = is_dialog_success,
        scrape_hidden_fields: bool = False,
        boundary: str | None = None,
    ) -> None:
        """Initialize the transaction.

        Args:
            transport: Transport to send the three requests through.
            session_id: Session identifier carried in every URL.
            auth_url: Auth page of the session, referer of the arm request.
            command: Dialog ID and value to submit.
            label: Prefix for log messages, e.g. "A/C Control".
            success_predicate: Decides from the submit body whether the
                gateway accepted the value.
            scrape_hidden_fields: Forward hidden inputs of the loaded form.
            boundary: Multipart boundary; generated when omitted.

        """
        self._transport = transport
        self._command = command
        self._label = label
        self._success_predicate = success_predicate
        self._scrape_hidden_fields = scrape_hidden_fields
        self._extra_fields: list[tuple[str, str]] = []
        self.boundary = boundary or generate_boundary()
        self.step = DialogStep.PENDING

        base_url = transport.base_url
        self.referer_url = auth_url
        self.wait_url = build_wait_url(base_url, session_id, command.target_id)
        self.dialog_url = build_new_dialog_url(base_url, session_id, command.target_id)
        self.submit_url = build_dialog_submit_url(base_url, session_id)

    @property
    def fields(self) -> list[tuple[str, str]]:
        """Return the form fields sent on submit, in order."""
        return [
            ("action", DIALOG_ACTION_UPDATE),
            ("DpDescription", DIALOG_DP_DESCRIPTION),
            ("id", str(self._command.target_id)),
            ("value", self._command.desired_value),
            *self._extra_fields,
        ]

    def _expect(self, step: DialogStep) -> None:
        if self.step is not step:
            error_msg = f"Dialog step out of order: expected {step}, at {self.step}"
            raise LevittInvalidStateError(error_msg)

    async def _async_send(
        self, method: str, url: str, **kwargs: Any
    ) -> httpx.Response:
        try:
            return await self._transport.async_request(method, url, **kwargs)
        except LevittTransportError:
            self.step = DialogStep.FAILED
            raise

    async def async_arm(self) -> bool:
        """Step 1: allocate the pending dialog on the gateway."""
        self._expect(DialogStep.PENDING)
        _LOGGER.debug("%s: Step 1 - GET %s", self._label, self.wait_url)

        response = await self._async_send(
            "GET", self.wait_url, headers={"Referer": self.referer_url}
        )
        if not is_success_status(response.status_code):
            _LOGGER.error(
                "%s: Dialog wait failed with status %s",
                self._label,
                response.status_code,
            )
            self.step = DialogStep.FAILED
            return False

        self.step = DialogStep.ARMED
        return True

    async def async_load(self) -> bool:
        """Step 2: load the dialog form."""
        self._expect(DialogStep.ARMED)
        _LOGGER.debug("%s: Step 2 - GET %s", self._label, self.dialog_url)

        response = await self._async_send(
            "GET", self.dialog_url, headers={"Referer": self.wait_url}
        )
        if not is_success_status(response.status_code):
            _LOGGER.error(
                "%s: Dialog load failed with status %s",
                self._label,
                response.status_code,
            )
            self.step = DialogStep.FAILED
            return False

        _LOGGER.debug(
            "%s: Dialog response content length: %d", self._label, len(response.text)
        )
        if self._scrape_hidden_fields:
            self._extra_fields = extract_hidden_fields(response.text)

        self.step = DialogStep.LOADED
        return True

    async def async_submit(self) -> bool:
        """Step 3: post the value and check that the gateway closed the dialog."""
        self._expect(DialogStep.LOADED)
        _LOGGER.debug("%s: Step 3 - POST %s", self._label, self.submit_url)

        body = build_multipart_body(self.fields, self.boundary)
        _LOGGER.debug(
            "%s: Sending form data with boundary: %s", self._label, self.boundary
        )
        response = await self._async_send(
            "POST",
            self.submit_url,
            headers={
                "Referer": self.dialog_url,
                "Content-Type": f"multipart/form-data; boundary={self.boundary}",
            },
            content=body,
        )
        _LOGGER.debug(
            "%s: POST response status: %s, content: %s",
            self._label,
            response.status_code,
            _preview(response.text),
        )

        if not is_success_status(response.status_code):
            _LOGGER.error(
                "%s: POST request failed with status %s",
                self._label,
                response.status_code,
            )
            self.step = DialogStep.FAILED
            return False

        if not self._success_predicate(response.text):
            _LOGGER.warning(
                "%s: Command failed - no cleanup dialog found in response",
                self._label,
            )
            self.step = DialogStep.FAILED
            return False

        self.step = DialogStep.SUBMITTED
        _LOGGER.info("%s: Command sent successfully", self._label)
        return True

    async def async_run(self) -> bool:
        """Run all three steps, stopping at the first rejected one."""
        return (
            await self.async_arm()
            and await self.async_load()
            and await self.async_submit()
        )


class DialogCommandExecutor:
    """Run write commands against the gateway.

    Each command is attempted exactly once. Expected failures come back as
    False and are logged; only invalid commands and a missing session raise.
    """

    def __init__(
        self,
        session_manager: SessionManager,
        *,
        success_predicate: SuccessPredicate = is_dialog_success,
        scrape_hidden_fields: bool = False,
    ) -> None:
        self._session = session_manager
        self._transport = session_manager.transport
        self._success_predicate = success_predicate
        self._scrape_hidden_fields = scrape_hidden_fields

    async def async_execute(self, command: Command, label: str = "Dialog") -> bool:
        """Run one dialog transaction.

        A caller cancelled while waiting for the session lock sends nothing.
        Once the transaction has started it runs to completion under the
        lock even if the caller is cancelled.

        Args:
            command: Dialog ID and value.
            label: Prefix for log messages.

        Returns:
            True if the gateway accepted the value, False otherwise.

        Raises:
            LevittInvalidStateError: If no session is held.

        """
        self._session.require_logged_in()
        async with self._session.lock:
            self._session.require_logged_in()
            transaction = DialogTransaction(
                self._transport,
                self._session.session_id,
                self._session.auth_url,
                command,
                label=label,
                success_predicate=self._success_predicate,
                scrape_hidden_fields=self._scrape_hidden_fields,
            )
            run = asyncio.ensure_future(self._async_run(transaction, label))
            try:
                return await asyncio.shield(run)
            except asyncio.CancelledError:
                _LOGGER.warning(
                    "%s: Caller cancelled, finishing started dialog", label
                )
                while not run.done():
                    try:
                        await asyncio.shield(run)
                    except asyncio.CancelledError:
                        continue
                raise

    @staticmethod
    async def _async_run(transaction: DialogTransaction, label: str) -> bool:
        try:
            return await transaction.async_run()
        except LevittTransportError as err:
            _LOGGER.error("%s Error: %s", label, err)
            return False

    async def async_set_house_ac(self, dialog_id: int, is_on: bool) -> bool:
        """Turn the house A/C on or off."""
        _LOGGER.info(
            "A/C Control: Attempting to %s A/C", "turn on" if is_on else "turn off"
        )
        value = AC_VALUE_ON if is_on else AC_VALUE_OFF
        return await self.async_execute(Command(dialog_id, value), "A/C Control")

    async def async_set_house_blinds(self, dialog_id: int, command: str) -> bool:
        """Move the house blinds.

        Args:
            dialog_id: Blinds dialog ID.
            command: "UP" or "DOWN".

        Returns:
            True if the gateway accepted the command.

        Raises:
            LevittProtocolViolationError: If command is not "UP" or "DOWN".

        """
        value = BLINDS_VALUE_MAP.get(command)
        if value is None:
            error_msg = f"Command must be 'UP' or 'DOWN', got {command!r}"
            raise LevittProtocolViolationError(error_msg)

        _LOGGER.info("Blinds Control: Attempting to move blinds %s", command.lower())
        return await self.async_execute(Command(dialog_id, value), "Blinds Control")

    async def async_send_point_command(self, command: Command) -> bool:
        """Write a single data point through the generic command endpoint.

        Returns:
            True if the gateway answered with a 2xx status.

        Raises:
            LevittInvalidStateError: If no session is held.

        """
        self._session.require_logged_in()
        async with self._session.lock:
            self._session.require_logged_in()
            try:
                response = await self._transport.async_post(
                    build_command_url(self._transport.base_url),
                    data={
                        SESSION_QUERY_PARAM: self._session.session_id,
                        "plantItemId": str(command.target_id),
                        "value": command.desired_value,
                    },
                )
            except LevittTransportError as err:
                _LOGGER.error(
                    "Failed to send command to plant item %s: %s",
                    command.target_id,
                    err,
                )
                return False

        if not is_success_status(response.status_code):
            _LOGGER.warning(
                "Command to plant item %s failed with status %s",
                command.target_id,
                response.status_code,
            )
            return False

        _LOGGER.debug(
            "Command to plant item %s accepted: %s",
            command.target_id,
            command.desired_value,
        )
        return True
