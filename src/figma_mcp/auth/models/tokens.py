"""Token endpoint request and response models.

Figma's token endpoint takes application/x-www-form-urlencoded bodies for
both the authorization-code grant and the refresh grant.
"""

from __future__ import annotations

import time
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict


class TokenSet(BaseModel):
    """Tokens returned by a code exchange or a refresh.

    Not persisted anywhere; the caller stores it and replaces it with the
    result of the next refresh.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    access_token: str
    expires_in: int
    token_type: str = "bearer"
    refresh_token: str | None = None
    user_id: int | str | None = None

    def calculate_expires_at(self, issued_at: float | None = None) -> float:
        """Absolute expiry timestamp, counted from `issued_at` (default: now)."""
        return (time.time() if issued_at is None else issued_at) + self.expires_in

    def can_refresh(self) -> bool:
        return bool(self.refresh_token)


@dataclass(frozen=True)
class AuthorizationCodeRequest:
    """Exchange of an authorization code for tokens (RFC 6749 Section 4.1.3).

    Includes the PKCE code_verifier (RFC 7636) and the echoed state.
    """

    token_endpoint: str
    client_id: str
    client_secret: str
    redirect_uri: str
    code: str
    code_verifier: str
    state: str

    grant_type: str = "authorization_code"

    def to_form_data(self) -> dict[str, str]:
        return {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": self.redirect_uri,
            "code": self.code,
            "code_verifier": self.code_verifier,
            "state": self.state,
            "grant_type": self.grant_type,
        }


@dataclass(frozen=True)
class RefreshTokenRequest:
    """Refresh of an access token (RFC 6749 Section 6)."""

    token_endpoint: str
    client_id: str
    client_secret: str
    refresh_token: str

    grant_type: str = "refresh_token"

    def to_form_data(self) -> dict[str, str]:
        return {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "refresh_token": self.refresh_token,
            "grant_type": self.grant_type,
        }
