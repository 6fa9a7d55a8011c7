"""Composition root wiring settings into the API client and OAuth manager.

The tool shell builds one FigmaServices at startup and passes it to its
handlers; nothing here is a module-level singleton.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, replace

from figma_mcp.api.client import FigmaClient
from figma_mcp.auth.oauth_client import FigmaOAuthManager
from figma_mcp.config import DEFAULT_TIMEOUT, Settings
from figma_mcp.errors import ConfigurationError, ValidationError

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Send log records to stderr; stdout belongs to the stdio transport."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT, stream=sys.stderr)


@dataclass(frozen=True)
class FigmaServices:
    """API client, OAuth manager and defaults shared by the tool handlers.

    With OAuth configured and no FIGMA_TOKEN, `client` stays None until an
    access token is bound with `with_access_token`.
    """

    client: FigmaClient | None = None
    oauth: FigmaOAuthManager | None = None
    default_file_id: str | None = None
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_settings(cls, settings: Settings) -> FigmaServices:
        """Build the client, and the OAuth manager when OAuth is configured.

        Raises:
            ConfigurationError: If neither an API token nor OAuth is configured
        """
        client = None
        if settings.api.token:
            client = FigmaClient.from_config(settings.api)
        elif settings.oauth is None:
            raise ConfigurationError(
                "credential is required: set FIGMA_TOKEN or configure OAuth"
            )
        else:
            logger.info("FIGMA_TOKEN not set - waiting for an OAuth access token")

        oauth = None
        if settings.oauth is not None:
            oauth = FigmaOAuthManager(settings.oauth, timeout=settings.api.timeout)
            logger.info("OAuth flow enabled")
        return cls(
            client=client,
            oauth=oauth,
            default_file_id=settings.api.default_file_id,
            timeout=settings.api.timeout,
        )

    def require_client(self) -> FigmaClient:
        if self.client is None:
            raise ConfigurationError(
                "no access token bound yet; complete the OAuth flow first"
            )
        return self.client

    def resolve_file_id(self, file_id: str | None = None) -> str:
        """Return `file_id`, falling back to the configured default."""
        target = file_id or self.default_file_id
        if not target:
            raise ValidationError(
                "file_id is required (or set FIGMA_FILE_ID)", field="file_id"
            )
        return target

    def with_access_token(self, access_token: str) -> FigmaServices:
        """Return services whose client is bound to a new access token.

        The OAuth manager is shared with the returned services. The previous
        client is left open for calls still in flight; release it with
        `aclose_client()` on these services once they finish.
        """
        return replace(
            self, client=FigmaClient(access_token, timeout=self.timeout)
        )

    async def aclose_client(self) -> None:
        """Close only the API client, leaving the shared OAuth manager open."""
        if self.client is not None:
            await self.client.close()

    async def aclose(self) -> None:
        await self.aclose_client()
        if self.oauth is not None:
            await self.oauth.close()
