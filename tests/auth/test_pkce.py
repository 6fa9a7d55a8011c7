import base64
import hashlib
import string

import pytest

from figma_mcp.auth.models.security import PKCEParameters
from figma_mcp.auth.primitives.pkce import PKCEManager, derive_code_challenge
from figma_mcp.auth.services.security import generate_state, validate_state
from figma_mcp.errors import StateValidationError, ValidationError


class TestPKCEManager:
    def test_generate_parameters_crypto_requirements(self) -> None:
        # Arrange
        pkce_manager = PKCEManager()

        # Act
        params = pkce_manager.generate_parameters()

        # Assert RFC 7636 requirements
        assert 43 <= len(params.code_verifier) <= 128
        allowed = set(string.ascii_letters + string.digits + "-._~")
        assert set(params.code_verifier) <= allowed
        assert params.code_challenge_method == "S256"

        expected_challenge = (
            base64.urlsafe_b64encode(
                hashlib.sha256(params.code_verifier.encode("ascii")).digest()
            )
            .decode("ascii")
            .rstrip("=")
        )
        assert params.code_challenge == expected_challenge

    def test_challenge_reproducible_from_verifier(self) -> None:
        pkce_manager = PKCEManager()

        for _ in range(20):
            params = pkce_manager.generate_parameters()
            assert derive_code_challenge(params.code_verifier) == params.code_challenge

    def test_generate_parameters_uniqueness(self) -> None:
        pkce_manager = PKCEManager()

        params1 = pkce_manager.generate_parameters()
        params2 = pkce_manager.generate_parameters()

        assert params1.code_verifier != params2.code_verifier
        assert params1.code_challenge != params2.code_challenge

    def test_minimum_verifier_length(self) -> None:
        params = PKCEManager(verifier_length=43).generate_parameters()

        assert len(params.code_verifier) == 43

    def test_verifier_length_outside_rfc_range_rejected(self) -> None:
        with pytest.raises(ValueError):
            PKCEManager(verifier_length=42).generate_parameters()


class TestDeriveCodeChallenge:
    def test_rfc7636_appendix_b_vector(self) -> None:
        verifier = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"

        expected = "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"
        assert derive_code_challenge(verifier) == expected

    def test_challenge_is_unpadded_base64url(self) -> None:
        challenge = derive_code_challenge("a" * 64)

        assert "=" not in challenge
        assert "+" not in challenge
        assert "/" not in challenge
        assert len(challenge) == 43


class TestPKCEParameters:
    def test_rejects_plain_method(self) -> None:
        with pytest.raises(ValueError, match="S256"):
            PKCEParameters(
                code_verifier="a" * 43,
                code_challenge="b" * 43,
                code_challenge_method="plain",
            )

    def test_rejects_short_verifier(self) -> None:
        with pytest.raises(ValueError, match="code_verifier"):
            PKCEParameters(code_verifier="short", code_challenge="b" * 43)


class TestState:
    def test_generate_state_is_url_safe_and_unique(self) -> None:
        state1 = generate_state()
        state2 = generate_state()

        assert len(state1) == 32
        assert set(state1) <= set(string.ascii_letters + string.digits + "-_")
        assert state1 != state2

    def test_matching_state_passes(self) -> None:
        state = generate_state()

        validate_state(state, state)

    def test_mismatched_state_raises(self) -> None:
        with pytest.raises(StateValidationError) as exc_info:
            validate_state("expected", "other")

        assert isinstance(exc_info.value, ValidationError)
        assert exc_info.value.field == "state"

    def test_missing_state_raises(self) -> None:
        with pytest.raises(StateValidationError, match="Missing"):
            validate_state("expected", None)
