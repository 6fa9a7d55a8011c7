"""Figma token endpoint interactions.

Performs the authorization-code exchange and the refresh grant as
form-encoded POSTs and normalizes every failure into OAuthExchangeError.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError as PydanticValidationError

from figma_mcp.auth.models.tokens import (
    AuthorizationCodeRequest,
    RefreshTokenRequest,
    TokenSet,
)
from figma_mcp.config import DEFAULT_TIMEOUT
from figma_mcp.errors import OAuthExchangeError

logger = logging.getLogger(__name__)


class OAuthTokenManager:
    """Sends token requests to the Figma token endpoint.

    Handles:
    - Authorization code to access token exchange (RFC 6749 Section 4.1.3)
    - Access token refresh (RFC 6749 Section 6)

    No retries and no status-specific handling: a 429 and a 500 surface the
    same way.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT):
        """Initialize the token manager.

        Args:
            timeout: HTTP request timeout in seconds
        """
        self.timeout = timeout
        self._http_client = httpx.AsyncClient(timeout=timeout)

    async def exchange_code(self, token_request: AuthorizationCodeRequest) -> TokenSet:
        """Exchange an authorization code for tokens.

        Raises:
            OAuthExchangeError: If the endpoint rejects the exchange
        """
        logger.debug(
            f"Exchanging authorization code at {token_request.token_endpoint} "
            f"for client {token_request.client_id}"
        )
        return await self._post(
            token_request.token_endpoint,
            token_request.to_form_data(),
            token_request.grant_type,
        )

    async def refresh(self, refresh_request: RefreshTokenRequest) -> TokenSet:
        """Mint a new access token from a refresh token.

        Raises:
            OAuthExchangeError: If the endpoint rejects the refresh
        """
        logger.debug(
            f"Refreshing access token at {refresh_request.token_endpoint} "
            f"for client {refresh_request.client_id}"
        )
        return await self._post(
            refresh_request.token_endpoint,
            refresh_request.to_form_data(),
            refresh_request.grant_type,
        )

    async def _post(
        self, token_endpoint: str, form_data: dict[str, str], grant_type: str
    ) -> TokenSet:
        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Accept": "application/json",
        }

        response = await self._http_client.post(
            token_endpoint,
            data=form_data,
            headers=headers,
        )

        if not 200 <= response.status_code < 300:
            logger.warning(
                f"Token endpoint rejected {grant_type} grant "
                f"with {response.status_code}"
            )
            raise OAuthExchangeError(response.status_code, response.text, grant_type)

        try:
            token_set = TokenSet.model_validate(response.json())
        except (ValueError, PydanticValidationError) as e:
            raise OAuthExchangeError(
                response.status_code, response.text, grant_type
            ) from e

        logger.info(f"Token endpoint accepted {grant_type} grant")
        return token_set

    async def close(self) -> None:
        """Close the HTTP client and clean up resources."""
        await self._http_client.aclose()
