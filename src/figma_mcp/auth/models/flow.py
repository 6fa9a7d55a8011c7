"""Authorization flow models for the Figma OAuth integration.

Covers the outgoing authorization request, what the caller must keep between
the redirect and the code exchange, and the parsed redirect callback.
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import parse_qs, urlencode, urlparse


@dataclass(frozen=True)
class AuthorizationRequest:
    """Query parameters for the Figma authorization endpoint."""

    authorization_endpoint: str
    client_id: str
    redirect_uri: str
    scope: str
    state: str
    code_challenge: str
    code_challenge_method: str = "S256"

    def build_authorization_url(self) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": self.scope,
            "state": self.state,
            "code_challenge": self.code_challenge,
            "code_challenge_method": self.code_challenge_method,
            "response_type": "code",
        }
        return f"{self.authorization_endpoint}?{urlencode(params)}"


@dataclass(frozen=True)
class AuthorizationSession:
    """Result of starting an authorization attempt.

    The caller sends the user to `url` and keeps `code_verifier` and `state`
    until the authorization code comes back. Nothing is stored server-side.
    """

    url: str
    code_verifier: str
    state: str


@dataclass(frozen=True)
class AuthorizationResponse:
    """Parameters Figma appends to the redirect URI."""

    code: str | None = None
    state: str | None = None
    error: str | None = None
    error_description: str | None = None

    @classmethod
    def from_callback_url(cls, callback_url: str) -> AuthorizationResponse:
        query_params = parse_qs(urlparse(callback_url).query)

        def get_single_param(key: str) -> str | None:
            values = query_params.get(key, [])
            return values[0] if values else None

        return cls(
            code=get_single_param("code"),
            state=get_single_param("state"),
            error=get_single_param("error"),
            error_description=get_single_param("error_description"),
        )

    def is_success(self) -> bool:
        return self.error is None and self.code is not None

    def is_error(self) -> bool:
        return self.error is not None


@dataclass(frozen=True)
class OAuthClientInfo:
    """Non-secret OAuth settings, safe to show during setup."""

    client_id: str
    redirect_uri: str
    scope: str
