"""Figma OAuth 2.0 authorization-code flow with PKCE.

The flow per authorization attempt:

    generate_auth_url()  -> user visits URL and approves
    handle_callback()    -> authorization code from the redirect
    exchange_code_for_token(code, verifier, state) -> TokenSet
    refresh_token(refresh_token) -> TokenSet, replacing the previous one

The manager keeps no per-attempt state. The caller holds the verifier and
state between the redirect and the exchange.
"""

from __future__ import annotations

import logging

from figma_mcp.auth.models.flow import (
    AuthorizationRequest,
    AuthorizationResponse,
    AuthorizationSession,
    OAuthClientInfo,
)
from figma_mcp.auth.models.tokens import (
    AuthorizationCodeRequest,
    RefreshTokenRequest,
    TokenSet,
)
from figma_mcp.auth.primitives.pkce import PKCEManager
from figma_mcp.auth.services.security import generate_state, validate_state
from figma_mcp.auth.services.tokens import OAuthTokenManager
from figma_mcp.config import DEFAULT_TIMEOUT, OAuthConfig
from figma_mcp.errors import (
    AuthorizationCallbackError,
    AuthorizationError,
    ConfigurationError,
    ValidationError,
)

logger = logging.getLogger(__name__)

FIGMA_OAUTH_BASE_URL = "https://www.figma.com/oauth"
FIGMA_TOKEN_ENDPOINT = f"{FIGMA_OAUTH_BASE_URL}/token"


class FigmaOAuthManager:
    """Drives the PKCE authorization and refresh flows against Figma.

    Only constructed when OAuth is configured; there is no partially
    configured mode.
    """

    def __init__(self, config: OAuthConfig, *, timeout: float = DEFAULT_TIMEOUT):
        """Initialize the OAuth manager.

        Args:
            config: Registered OAuth application settings
            timeout: HTTP request timeout in seconds

        Raises:
            ConfigurationError: If the client id is missing
        """
        if not config.client_id:
            raise ConfigurationError("client id is required")
        self._config = config
        self._pkce_manager = PKCEManager()
        self._token_manager = OAuthTokenManager(timeout=timeout)

    def generate_auth_url(self) -> AuthorizationSession:
        """Start an authorization attempt.

        Generates a fresh verifier/challenge pair and state value and builds
        the URL the user should visit. No network call is made.

        Returns:
            AuthorizationSession: URL to visit, plus the verifier and state
            the caller must keep for the code exchange
        """
        pkce_params = self._pkce_manager.generate_parameters()
        state = generate_state()

        auth_request = AuthorizationRequest(
            authorization_endpoint=FIGMA_OAUTH_BASE_URL,
            client_id=self._config.client_id,
            redirect_uri=self._config.redirect_uri,
            scope=self._config.scope,
            state=state,
            code_challenge=pkce_params.code_challenge,
            code_challenge_method=pkce_params.code_challenge_method,
        )

        logger.info(f"Generated authorization URL for client {self._config.client_id}")

        return AuthorizationSession(
            url=auth_request.build_authorization_url(),
            code_verifier=pkce_params.code_verifier,
            state=state,
        )

    def handle_callback(self, callback_url: str, expected_state: str) -> str:
        """Extract the authorization code from Figma's redirect.

        Args:
            callback_url: Full redirect URL received on the callback endpoint
            expected_state: State from the matching AuthorizationSession

        Returns:
            The authorization code

        Raises:
            StateValidationError: If the state does not match, or is missing
                from a successful redirect
            AuthorizationError: If the user or server denied authorization
            AuthorizationCallbackError: If the redirect carries no code
        """
        auth_response = AuthorizationResponse.from_callback_url(callback_url)

        if auth_response.is_error():
            # Error redirects may omit state; a state that is present must match
            if auth_response.state:
                validate_state(expected_state, auth_response.state)
            logger.warning(f"Authorization denied: {auth_response.error}")
            raise AuthorizationError(
                f"Authorization failed: {auth_response.error} "
                f"({auth_response.error_description or ''})"
            )

        validate_state(expected_state, auth_response.state)

        if not auth_response.is_success():
            raise AuthorizationCallbackError("Missing authorization code")

        return auth_response.code

    async def exchange_code_for_token(
        self,
        code: str,
        code_verifier: str,
        state: str,
        *,
        expected_state: str | None = None,
    ) -> TokenSet:
        """Exchange an authorization code for tokens.

        The verifier must be the one whose challenge went out with the
        authorization URL, or Figma rejects the exchange.

        Args:
            code: Authorization code from the redirect
            code_verifier: Verifier from the AuthorizationSession
            state: State echoed back by the redirect
            expected_state: When given, checked against `state` before any
                network call

        Raises:
            ValidationError: If an argument is empty or the state mismatches
            OAuthExchangeError: If the token endpoint rejects the exchange
        """
        _require(code, "code")
        _require(code_verifier, "code_verifier")
        _require(state, "state")
        if expected_state is not None:
            validate_state(expected_state, state)

        token_request = AuthorizationCodeRequest(
            token_endpoint=FIGMA_TOKEN_ENDPOINT,
            client_id=self._config.client_id,
            client_secret=self._config.client_secret,
            redirect_uri=self._config.redirect_uri,
            code=code,
            code_verifier=code_verifier,
            state=state,
        )
        return await self._token_manager.exchange_code(token_request)

    async def refresh_token(self, refresh_token: str) -> TokenSet:
        """Mint a new TokenSet from a stored refresh token.

        The new access token supersedes the old one; rebind it to a fresh
        FigmaClient.

        Raises:
            ValidationError: If the refresh token is empty
            OAuthExchangeError: If the token endpoint rejects the refresh
        """
        _require(refresh_token, "refresh_token")

        refresh_request = RefreshTokenRequest(
            token_endpoint=FIGMA_TOKEN_ENDPOINT,
            client_id=self._config.client_id,
            client_secret=self._config.client_secret,
            refresh_token=refresh_token,
        )
        return await self._token_manager.refresh(refresh_request)

    def get_config(self) -> OAuthClientInfo:
        """Non-secret OAuth settings for display during setup."""
        return OAuthClientInfo(
            client_id=self._config.client_id,
            redirect_uri=self._config.redirect_uri,
            scope=self._config.scope,
        )

    async def close(self) -> None:
        await self._token_manager.close()

    async def __aenter__(self) -> FigmaOAuthManager:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()


def _require(value: str, field: str) -> None:
    if not isinstance(value, str) or not value:
        raise ValidationError(f"{field} is required", field=field)
