"""Environment-backed configuration for the Figma client and OAuth flow.

Settings are read once at the composition root and passed down explicitly;
nothing in the package reads the environment on its own.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TypeVar

from dotenv import load_dotenv

from figma_mcp.errors import ConfigurationError

logger = logging.getLogger(__name__)

NumberT = TypeVar("NumberT", int, float)

DEFAULT_TIMEOUT = 30.0
DEFAULT_OAUTH_PORT = 3000
DEFAULT_SCOPE = "file_read"


@dataclass(frozen=True)
class FigmaApiConfig:
    """Settings for the REST API client."""

    token: str
    default_file_id: str | None = None
    timeout: float = DEFAULT_TIMEOUT


@dataclass(frozen=True)
class OAuthConfig:
    """OAuth application credentials registered with Figma.

    `port` is only used by whatever serves the local redirect; the flow
    itself just needs `redirect_uri`.
    """

    client_id: str
    client_secret: str
    redirect_uri: str
    port: int = DEFAULT_OAUTH_PORT
    scope: str = DEFAULT_SCOPE


@dataclass(frozen=True)
class Settings:
    api: FigmaApiConfig
    oauth: OAuthConfig | None = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from environment variables.

        OAuth settings are only produced when FIGMA_CLIENT_ID is set.

        Args:
            environ: Mapping to read from; defaults to os.environ

        Raises:
            ConfigurationError: If a value is malformed or an OAuth client id
                is given without its secret
        """
        env = os.environ if environ is None else environ

        api = FigmaApiConfig(
            token=env.get("FIGMA_TOKEN", ""),
            default_file_id=env.get("FIGMA_FILE_ID") or None,
            timeout=_parse_number(env, "FIGMA_TIMEOUT", DEFAULT_TIMEOUT, float),
        )

        oauth = None
        client_id = env.get("FIGMA_CLIENT_ID")
        if client_id:
            client_secret = env.get("FIGMA_CLIENT_SECRET")
            if not client_secret:
                raise ConfigurationError(
                    "FIGMA_CLIENT_SECRET is required when FIGMA_CLIENT_ID is set"
                )
            port = _parse_number(env, "FIGMA_OAUTH_PORT", DEFAULT_OAUTH_PORT, int)
            oauth = OAuthConfig(
                client_id=client_id,
                client_secret=client_secret,
                redirect_uri=env.get("FIGMA_REDIRECT_URI")
                or f"http://localhost:{port}/callback",
                port=port,
            )
        else:
            logger.debug("FIGMA_CLIENT_ID not set - OAuth flow disabled")

        return cls(
            api=api,
            oauth=oauth,
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )


def load_settings(env_file: str | None = ".env") -> Settings:
    """Load settings from the process environment, seeded from a .env file.

    Variables already present in the environment win over the file.
    """
    if env_file:
        load_dotenv(env_file)
    return Settings.from_env()


def _parse_number(
    env: Mapping[str, str],
    name: str,
    default: NumberT,
    parse: Callable[[str], NumberT],
) -> NumberT:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return parse(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e
