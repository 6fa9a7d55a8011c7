"""Tests for the Figma token endpoint service.

Covers:
- Form encoding of the authorization-code and refresh grants
- TokenSet parsing from successful responses
- Non-2xx and malformed responses surfacing as OAuthExchangeError
"""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from figma_mcp.auth.models.tokens import (
    AuthorizationCodeRequest,
    RefreshTokenRequest,
    TokenSet,
)
from figma_mcp.auth.services.tokens import OAuthTokenManager
from figma_mcp.errors import OAuthExchangeError, RemoteStatusError

TOKEN_ENDPOINT = "https://www.figma.com/oauth/token"


def make_response(status_code: int, json_body=None, text: str = "") -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    if json_body is None:
        response.json.side_effect = ValueError("not json")
    else:
        response.json.return_value = json_body
    return response


class TestCodeExchange:
    """Test authorization code to token exchange."""

    def setup_method(self):
        # Arrange
        self.token_manager = OAuthTokenManager()
        self.token_manager._http_client = AsyncMock()
        self.token_request = AuthorizationCodeRequest(
            token_endpoint=TOKEN_ENDPOINT,
            client_id="client-456",
            client_secret="secret-789",
            redirect_uri="http://localhost:3000/callback",
            code="code1",
            code_verifier="verifier1",
            state="state1",
        )

    async def test_successful_exchange_with_all_fields(self):
        # Arrange
        self.token_manager._http_client.post.return_value = make_response(
            200,
            {
                "user_id": 123,
                "access_token": "AT",
                "refresh_token": "RT",
                "expires_in": 7776000,
                "token_type": "bearer",
            },
        )

        # Act
        token_set = await self.token_manager.exchange_code(self.token_request)

        # Assert
        assert token_set.access_token == "AT"
        assert token_set.refresh_token == "RT"
        assert token_set.expires_in == 7776000
        assert token_set.token_type == "bearer"
        assert token_set.user_id == 123
        assert token_set.can_refresh()

        # Verify HTTP request was made correctly
        self.token_manager._http_client.post.assert_awaited_once()
        call_args = self.token_manager._http_client.post.call_args
        assert call_args[0][0] == TOKEN_ENDPOINT

        form_data = call_args[1]["data"]
        assert form_data == {
            "client_id": "client-456",
            "client_secret": "secret-789",
            "redirect_uri": "http://localhost:3000/callback",
            "code": "code1",
            "code_verifier": "verifier1",
            "state": "state1",
            "grant_type": "authorization_code",
        }

        headers = call_args[1]["headers"]
        assert headers["Content-Type"] == "application/x-www-form-urlencoded"
        assert headers["Accept"] == "application/json"

    async def test_exchange_without_refresh_token(self):
        # Arrange
        self.token_manager._http_client.post.return_value = make_response(
            200, {"access_token": "AT", "expires_in": 3600, "token_type": "bearer"}
        )

        # Act
        token_set = await self.token_manager.exchange_code(self.token_request)

        # Assert
        assert token_set.access_token == "AT"
        assert token_set.refresh_token is None
        assert not token_set.can_refresh()

    async def test_rejected_exchange_keeps_raw_body(self):
        # Arrange
        response = make_response(
            400, {"error": "invalid_grant"}, text='{"error":"invalid_grant"}'
        )
        self.token_manager._http_client.post.return_value = response

        # Act
        with pytest.raises(OAuthExchangeError) as exc_info:
            await self.token_manager.exchange_code(self.token_request)

        # Assert
        assert exc_info.value.status_code == 400
        assert exc_info.value.raw_body == '{"error":"invalid_grant"}'
        assert exc_info.value.grant_type == "authorization_code"
        assert isinstance(exc_info.value, RemoteStatusError)
        response.json.assert_not_called()

    async def test_success_without_access_token_is_rejected(self):
        # Arrange
        self.token_manager._http_client.post.return_value = make_response(
            200, {"token_type": "bearer"}, text='{"token_type":"bearer"}'
        )

        # Act / Assert
        with pytest.raises(OAuthExchangeError) as exc_info:
            await self.token_manager.exchange_code(self.token_request)
        assert exc_info.value.status_code == 200
        assert exc_info.value.raw_body == '{"token_type":"bearer"}'

    async def test_success_with_non_json_body_is_rejected(self):
        # Arrange
        self.token_manager._http_client.post.return_value = make_response(
            200, text="ok"
        )

        # Act / Assert
        with pytest.raises(OAuthExchangeError):
            await self.token_manager.exchange_code(self.token_request)

    async def test_transport_error_propagates_unchanged(self):
        # Arrange
        self.token_manager._http_client.post.side_effect = httpx.ReadTimeout("slow")

        # Act / Assert
        with pytest.raises(httpx.ReadTimeout):
            await self.token_manager.exchange_code(self.token_request)


class TestRefresh:
    def setup_method(self):
        # Arrange
        self.token_manager = OAuthTokenManager()
        self.token_manager._http_client = AsyncMock()
        self.refresh_request = RefreshTokenRequest(
            token_endpoint=TOKEN_ENDPOINT,
            client_id="client-456",
            client_secret="secret-789",
            refresh_token="rt-1",
        )

    async def test_successful_refresh(self):
        # Arrange
        self.token_manager._http_client.post.return_value = make_response(
            200, {"access_token": "AT-2", "expires_in": 3600, "token_type": "bearer"}
        )

        # Act
        token_set = await self.token_manager.refresh(self.refresh_request)

        # Assert
        assert token_set.access_token == "AT-2"
        form_data = self.token_manager._http_client.post.call_args[1]["data"]
        assert form_data == {
            "client_id": "client-456",
            "client_secret": "secret-789",
            "refresh_token": "rt-1",
            "grant_type": "refresh_token",
        }

    @pytest.mark.parametrize("status_code", [400, 401, 429, 500])
    async def test_rejected_refresh(self, status_code):
        # Arrange
        self.token_manager._http_client.post.return_value = make_response(
            status_code, text="nope"
        )

        # Act
        with pytest.raises(OAuthExchangeError) as exc_info:
            await self.token_manager.refresh(self.refresh_request)

        # Assert
        assert exc_info.value.status_code == status_code
        assert exc_info.value.raw_body == "nope"
        assert exc_info.value.grant_type == "refresh_token"

    async def test_close_closes_http_client(self):
        await self.token_manager.close()

        self.token_manager._http_client.aclose.assert_awaited_once()


class TestTokenSet:
    def test_calculate_expires_at_from_issue_time(self):
        token_set = TokenSet(access_token="AT", expires_in=3600)

        assert token_set.calculate_expires_at(issued_at=1000.0) == 4600.0

    def test_unknown_fields_are_ignored(self):
        token_set = TokenSet.model_validate(
            {"access_token": "AT", "expires_in": 60, "scope": "file_read"}
        )

        assert token_set.access_token == "AT"
        assert token_set.token_type == "bearer"
