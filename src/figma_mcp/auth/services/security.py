"""State parameter handling for the Figma OAuth flow.

The state value ties the redirect back to the attempt that started it.
"""

from __future__ import annotations

import secrets
import string

from figma_mcp.errors import StateValidationError

STATE_LENGTH = 32
STATE_ALPHABET = string.ascii_letters + string.digits + "-_"


def generate_state() -> str:
    """Generate a cryptographically secure, URL-safe state value."""
    return "".join(secrets.choice(STATE_ALPHABET) for _ in range(STATE_LENGTH))


def validate_state(expected: str, actual: str | None) -> None:
    """Check a returned state against the one sent with the authorization URL.

    Raises:
        StateValidationError: If the state is missing or does not match
    """
    if not actual:
        raise StateValidationError("Missing state parameter")
    if not secrets.compare_digest(expected, actual):
        raise StateValidationError("State parameter mismatch - possible CSRF attack")
