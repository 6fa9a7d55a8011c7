"""Exception hierarchy for the Figma API client and OAuth flow.

Provides specific exception types for each failure mode so callers can tell
a fixable argument apart from a remote rejection.
"""

from __future__ import annotations


class FigmaMCPError(Exception):
    """Base exception for all figma-mcp errors."""

    pass


class ConfigurationError(FigmaMCPError):
    """Raised when a required setup value is missing or invalid."""

    pass


class ValidationError(FigmaMCPError):
    """Raised when a call argument is missing, empty or out of range.

    Always raised before any network call is attempted.
    """

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class StateValidationError(ValidationError):
    """Raised when the OAuth state parameter is missing or does not match.

    A mismatch could indicate a CSRF attack or a stale authorization attempt.
    """

    def __init__(self, message: str):
        super().__init__(message, field="state")


class RemoteStatusError(FigmaMCPError):
    """Base for non-2xx responses from a Figma endpoint.

    The response body is kept verbatim and never parsed; error pages may be
    HTML or plain text.
    """

    def __init__(self, status_code: int, raw_body: str, message: str | None = None):
        super().__init__(message or f"HTTP {status_code}: {raw_body}")
        self.status_code = status_code
        self.raw_body = raw_body


class RemoteApiError(RemoteStatusError):
    """Raised when the Figma REST API returns a non-2xx response."""

    def __init__(self, status_code: int, raw_body: str):
        super().__init__(
            status_code, raw_body, f"Figma API error {status_code}: {raw_body}"
        )


class OAuthExchangeError(RemoteStatusError):
    """Raised when the token endpoint rejects a code exchange or refresh."""

    def __init__(self, status_code: int, raw_body: str, grant_type: str):
        super().__init__(
            status_code,
            raw_body,
            f"OAuth {grant_type} grant failed {status_code}: {raw_body}",
        )
        self.grant_type = grant_type


class AuthorizationError(FigmaMCPError):
    """Raised when the user or the authorization server denied access."""

    pass


class AuthorizationCallbackError(FigmaMCPError):
    """Raised when the authorization callback URL is malformed.

    This indicates the authorization server sent an invalid redirect, not
    that our callback handling failed.
    """

    pass
