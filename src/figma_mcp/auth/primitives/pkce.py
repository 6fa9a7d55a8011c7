"""PKCE (Proof Key for Code Exchange) generation for the Figma OAuth flow.

Implements the RFC 7636 S256 method. The challenge derivation must stay
byte-exact for the authorization server to accept the exchange.
"""

from __future__ import annotations

import base64
import hashlib
import secrets
import string

from figma_mcp.auth.models.security import VERIFIER_MAX_LENGTH, PKCEParameters

# RFC 7636 Section 4.1 unreserved characters
VERIFIER_ALPHABET = string.ascii_letters + string.digits + "-._~"


def derive_code_challenge(code_verifier: str) -> str:
    """Derive the S256 code challenge for a verifier.

    RFC 7636 Section 4.2: BASE64URL-ENCODE(SHA256(ASCII(code_verifier)))
    with the trailing padding removed.
    """
    digest = hashlib.sha256(code_verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


class PKCEManager:
    """Generates fresh PKCE parameters for each authorization attempt.

    Verifiers are drawn from `secrets`, never from `random`; a predictable
    verifier defeats the protection against code interception.
    """

    def __init__(self, verifier_length: int = VERIFIER_MAX_LENGTH):
        self.verifier_length = verifier_length

    def generate_parameters(self) -> PKCEParameters:
        """Generate a verifier and its S256 challenge.

        Raises:
            ValueError: If the configured verifier length is outside 43-128
        """
        code_verifier = self._generate_code_verifier()
        return PKCEParameters(
            code_verifier=code_verifier,
            code_challenge=derive_code_challenge(code_verifier),
        )

    def _generate_code_verifier(self) -> str:
        return "".join(
            secrets.choice(VERIFIER_ALPHABET) for _ in range(self.verifier_length)
        )
