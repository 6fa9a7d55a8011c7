"""Security parameters generated per Figma authorization attempt."""

from __future__ import annotations

from dataclasses import dataclass

VERIFIER_MIN_LENGTH = 43
VERIFIER_MAX_LENGTH = 128


@dataclass(frozen=True)
class PKCEParameters:
    """Verifier/challenge pair for one authorization attempt (RFC 7636, S256).

    Only the challenge travels with the authorization URL. The verifier stays
    with the caller and is presented once, at code exchange.
    """

    code_verifier: str
    code_challenge: str
    code_challenge_method: str = "S256"

    def __post_init__(self) -> None:
        for name in ("code_verifier", "code_challenge"):
            length = len(getattr(self, name))
            if not VERIFIER_MIN_LENGTH <= length <= VERIFIER_MAX_LENGTH:
                raise ValueError(
                    f"{name} must be {VERIFIER_MIN_LENGTH}-{VERIFIER_MAX_LENGTH}"
                    f" characters, got {length}"
                )
        if self.code_challenge_method != "S256":
            raise ValueError("Figma only accepts the S256 code challenge method")
