"""Figma REST API client and OAuth PKCE flow for MCP tool servers."""

from figma_mcp.api.client import FigmaClient
from figma_mcp.auth.oauth_client import FigmaOAuthManager
from figma_mcp.config import Settings, load_settings
from figma_mcp.services import FigmaServices

__all__ = [
    "FigmaClient",
    "FigmaOAuthManager",
    "FigmaServices",
    "Settings",
    "load_settings",
]
