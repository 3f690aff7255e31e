"""Tests for the Levitt Home Config Flow."""

from typing import Any
from unittest.mock import AsyncMock, Mock, patch

import pytest
from homeassistant.const import CONF_HOST, CONF_PASSWORD, CONF_USERNAME
from homeassistant.data_entry_flow import AbortFlow, FlowResultType

from custom_components.levitt_home import api
from custom_components.levitt_home.config_flow import LevittHomeConfigFlow
from custom_components.levitt_home.const import (
    ERROR_CANNOT_CONNECT,
    ERROR_INVALID_AUTH,
    ERROR_TIMEOUT,
    ERROR_UNKNOWN,
)

CREATE_CLIENT = "custom_components.levitt_home.config_flow.create_session_client"
AUTHENTICATE = (
    "custom_components.levitt_home.session.SessionManager.async_authenticate"
)


@pytest.fixture
def mock_hass() -> Mock:
    """Create a mock Home Assistant instance."""
    return Mock()


@pytest.fixture
def flow(mock_hass: Mock) -> LevittHomeConfigFlow:
    """Create a LevittHomeConfigFlow instance for testing."""
    flow_instance = LevittHomeConfigFlow()
    flow_instance.hass = mock_hass
    flow_instance.async_set_unique_id = AsyncMock()
    flow_instance._abort_if_unique_id_configured = Mock()
    flow_instance.async_create_entry = Mock(
        return_value={"type": FlowResultType.CREATE_ENTRY},
    )
    flow_instance.async_show_form = Mock(return_value={"type": FlowResultType.FORM})
    return flow_instance


@pytest.fixture
def user_input() -> dict[str, Any]:
    """Create user input for testing."""
    return {
        CONF_HOST: " Gateway.Local ",
        CONF_USERNAME: "admin",
        CONF_PASSWORD: "secret",
    }


@pytest.fixture
def mock_client() -> Mock:
    """Create a mock HTTP client for the validation handshake."""
    client = Mock()
    client.aclose = AsyncMock()
    return client


class TestLevittHomeConfigFlowAsyncStepUser:
    """Tests for async_step_user method."""

    @pytest.mark.asyncio
    async def test_async_step_user_shows_form_when_no_input(
        self,
        flow: LevittHomeConfigFlow,
    ) -> None:
        """Test that async_step_user shows form when no input provided."""
        result = await flow.async_step_user()
        flow.async_show_form.assert_called_once()
        call_args = flow.async_show_form.call_args
        assert call_args[1]["step_id"] == "user"
        assert call_args[1]["errors"] == {}
        assert result["type"] == FlowResultType.FORM

    @pytest.mark.asyncio
    async def test_async_step_user_creates_entry_on_successful_auth(
        self,
        flow: LevittHomeConfigFlow,
        user_input: dict[str, Any],
        mock_client: Mock,
    ) -> None:
        """Test that async_step_user creates entry on successful authentication."""
        with (
            patch(CREATE_CLIENT, return_value=mock_client) as mock_create_client,
            patch(AUTHENTICATE, new=AsyncMock(return_value="abc123")) as mock_auth,
        ):
            result = await flow.async_step_user(user_input)
            mock_create_client.assert_called_once_with(flow.hass)
            mock_client.aclose.assert_awaited_once()
            mock_auth.assert_awaited_once_with("admin", "secret")
            flow.async_set_unique_id.assert_called_once_with("gateway.local")
            flow._abort_if_unique_id_configured.assert_called_once()
            flow.async_create_entry.assert_called_once()
            call_args = flow.async_create_entry.call_args
            assert call_args[1]["title"] == "Levitt Home (Gateway.Local)"
            assert call_args[1]["data"] == {
                CONF_HOST: "Gateway.Local",
                CONF_USERNAME: "admin",
                CONF_PASSWORD: "secret",
            }
            assert result["type"] == FlowResultType.CREATE_ENTRY

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("error", "expected"),
        [
            (api.LevittAuthError("Login failed with status: 401"), ERROR_INVALID_AUTH),
            (api.LevittTimeoutError("Timeout during GET"), ERROR_TIMEOUT),
            (api.LevittTransportError("Connection refused"), ERROR_CANNOT_CONNECT),
            (RuntimeError("Unexpected"), ERROR_UNKNOWN),
        ],
    )
    async def test_async_step_user_shows_error_on_failure(
        self,
        flow: LevittHomeConfigFlow,
        user_input: dict[str, Any],
        mock_client: Mock,
        error: Exception,
        expected: str,
    ) -> None:
        """Test that async_step_user maps each failure to a form error."""
        with (
            patch(CREATE_CLIENT, return_value=mock_client),
            patch(AUTHENTICATE, new=AsyncMock(side_effect=error)),
        ):
            result = await flow.async_step_user(user_input)
            flow.async_create_entry.assert_not_called()
            flow.async_show_form.assert_called_once()
            call_args = flow.async_show_form.call_args
            assert call_args[1]["errors"]["base"] == expected
            assert result["type"] == FlowResultType.FORM
            mock_client.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_async_step_user_closes_client_when_already_configured(
        self,
        flow: LevittHomeConfigFlow,
        user_input: dict[str, Any],
        mock_client: Mock,
    ) -> None:
        """Test that the validation client is closed when the flow aborts."""
        flow._abort_if_unique_id_configured.side_effect = AbortFlow(
            "already_configured"
        )
        with (
            patch(CREATE_CLIENT, return_value=mock_client),
            patch(AUTHENTICATE, new=AsyncMock(return_value="abc123")),
            pytest.raises(AbortFlow),
        ):
            await flow.async_step_user(user_input)
        mock_client.aclose.assert_awaited_once()
        flow.async_create_entry.assert_not_called()
