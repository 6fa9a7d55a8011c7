"""Authenticated client for the Figma REST API.

Every public method validates its arguments locally, builds a path and a
query, and delegates to a single GET primitive that attaches the credential
and normalizes non-2xx responses into RemoteApiError.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, cast
from urllib.parse import quote

import httpx

from figma_mcp.api.models import (
    MAX_IMAGE_SCALE,
    MIN_IMAGE_SCALE,
    CommentsResponse,
    FileNodesResponse,
    FileResponse,
    ImageFillsResponse,
    ImageFormat,
    ImagesResponse,
    ProjectFilesResponse,
    ProjectsResponse,
    SearchResponse,
    TeamFilesResponse,
    TeamResponse,
    UserResponse,
    VersionsResponse,
)
from figma_mcp.config import DEFAULT_TIMEOUT, FigmaApiConfig
from figma_mcp.errors import ConfigurationError, RemoteApiError, ValidationError

logger = logging.getLogger(__name__)

FIGMA_API_BASE_URL = "https://api.figma.com/v1"
TOKEN_HEADER = "X-Figma-Token"
DEFAULT_THUMBNAIL_SCALE = 0.25


class FigmaClient:
    """Read-only Figma REST API client bound to one credential.

    The credential is fixed for the lifetime of the instance. To switch
    tokens (for example after an OAuth refresh) construct a new client.

    The underlying httpx.AsyncClient is shared by concurrent calls; no call
    depends on another and completions may arrive in any order.
    """

    def __init__(
        self,
        token: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize the client.

        Args:
            token: Personal access token or OAuth access token
            timeout: HTTP request timeout in seconds
            http_client: Optional preconfigured httpx client

        Raises:
            ConfigurationError: If the token is empty
        """
        if not token:
            raise ConfigurationError("credential is required")
        self.timeout = timeout
        self._headers = {TOKEN_HEADER: token, "Accept": "application/json"}
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_config(cls, config: FigmaApiConfig) -> FigmaClient:
        return cls(config.token, timeout=config.timeout)

    async def close(self) -> None:
        """Close the HTTP client if this instance created it.

        An injected http_client belongs to the caller and is left open.
        """
        if self._owns_http_client:
            await self._http_client.aclose()

    async def __aenter__(self) -> FigmaClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # Files

    async def get_file(
        self,
        file_id: str,
        *,
        version: str | None = None,
        depth: int | None = None,
    ) -> FileResponse:
        """Fetch a file document, optionally at a version or truncated depth."""
        _require_id(file_id, "file_id")
        _check_depth(depth)
        data = await self._get_json(
            _path("files", file_id), _query(version=version, depth=depth)
        )
        return cast(FileResponse, data)

    async def search_nodes(self, file_id: str, query: str) -> SearchResponse:
        """Search nodes in a file by free-text query."""
        _require_id(file_id, "file_id")
        _require_id(query, "query")
        data = await self._get_json(
            _path("files", file_id, "search"), _query(query=query)
        )
        return cast(SearchResponse, data)

    async def get_file_nodes(
        self,
        file_id: str,
        node_ids: list[str],
        *,
        depth: int | None = None,
    ) -> FileNodesResponse:
        """Fetch the subtrees rooted at the given node ids."""
        _require_id(file_id, "file_id")
        _require_ids(node_ids, "node_ids")
        _check_depth(depth)
        data = await self._get_json(
            _path("files", file_id, "nodes"), _query(ids=node_ids, depth=depth)
        )
        return cast(FileNodesResponse, data)

    async def get_image_fills(self, file_id: str) -> ImageFillsResponse:
        """Export download URLs for every image used in a file."""
        _require_id(file_id, "file_id")
        data = await self._get_json(_path("files", file_id, "images"))
        return cast(ImageFillsResponse, data)

    async def get_comments(self, file_id: str) -> CommentsResponse:
        _require_id(file_id, "file_id")
        data = await self._get_json(_path("files", file_id, "comments"))
        return cast(CommentsResponse, data)

    async def get_versions(self, file_id: str) -> VersionsResponse:
        _require_id(file_id, "file_id")
        data = await self._get_json(_path("files", file_id, "versions"))
        return cast(VersionsResponse, data)

    # Rendering

    async def get_node_images(
        self,
        file_id: str,
        node_ids: list[str],
        *,
        format: ImageFormat | str | None = None,
        scale: float | None = None,
    ) -> ImagesResponse:
        """Render nodes to images and return their temporary URLs.

        Args:
            file_id: File containing the nodes
            node_ids: Node ids to render; must not be empty
            format: Output format, server default (png) when omitted
            scale: Scale factor between 0.1 and 4.0

        Raises:
            ValidationError: If an argument is missing or out of range
            RemoteApiError: If the API responds with a non-2xx status
        """
        _require_id(file_id, "file_id")
        _require_ids(node_ids, "node_ids")
        image_format = _coerce_format(format)
        _check_scale(scale)
        data = await self._get_json(
            _path("images", file_id),
            _query(ids=node_ids, format=image_format, scale=scale),
        )
        return cast(ImagesResponse, data)

    async def get_node_thumbnails(
        self,
        file_id: str,
        node_ids: list[str],
        *,
        scale: float = DEFAULT_THUMBNAIL_SCALE,
    ) -> ImagesResponse:
        """Render small PNG previews of the given nodes."""
        return await self.get_node_images(
            file_id, node_ids, format=ImageFormat.PNG, scale=scale
        )

    # Teams and projects

    async def get_team(self, team_id: str) -> TeamResponse:
        _require_id(team_id, "team_id")
        data = await self._get_json(_path("teams", team_id))
        return cast(TeamResponse, data)

    async def list_team_projects(self, team_id: str) -> ProjectsResponse:
        _require_id(team_id, "team_id")
        data = await self._get_json(_path("teams", team_id, "projects"))
        return cast(ProjectsResponse, data)

    async def list_team_files(self, team_id: str) -> TeamFilesResponse:
        _require_id(team_id, "team_id")
        data = await self._get_json(_path("teams", team_id, "files"))
        return cast(TeamFilesResponse, data)

    async def list_project_files(self, project_id: str) -> ProjectFilesResponse:
        _require_id(project_id, "project_id")
        data = await self._get_json(_path("projects", project_id, "files"))
        return cast(ProjectFilesResponse, data)

    # Users

    async def get_me(self) -> UserResponse:
        """Get the user the credential belongs to."""
        data = await self._get_json("/me")
        return cast(UserResponse, data)

    async def _get_json(
        self, path: str, params: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """GET a path under the API base URL and return the JSON object body.

        Non-2xx bodies are kept as raw text and never parsed. httpx transport
        errors propagate unchanged.

        Raises:
            RemoteApiError: On a non-2xx status, or a 2xx body that is not a
                JSON object
        """
        logger.debug(f"GET {path} params={sorted((params or {}).keys())}")

        response = await self._http_client.get(
            f"{FIGMA_API_BASE_URL}{path}",
            params=params or {},
            headers=self._headers,
        )

        if not 200 <= response.status_code < 300:
            logger.warning(f"Figma API returned {response.status_code} for {path}")
            raise RemoteApiError(response.status_code, response.text)

        try:
            data = response.json()
        except ValueError as e:
            raise RemoteApiError(response.status_code, response.text) from e

        if not isinstance(data, dict):
            raise RemoteApiError(response.status_code, response.text)

        return data


def _path(*segments: str) -> str:
    return "".join(f"/{quote(segment, safe='')}" for segment in segments)


def _query(**params: Any) -> dict[str, Any]:
    """Serialize optional parameters, dropping unset ones.

    Lists are comma-joined and enums are sent by value.
    """
    query: dict[str, Any] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            value = ",".join(value)
        elif isinstance(value, Enum):
            value = value.value
        query[key] = value
    return query


def _require_id(value: str, field: str) -> None:
    if not isinstance(value, str) or not value:
        raise ValidationError(f"{field} is required", field=field)


def _require_ids(values: list[str], field: str) -> None:
    if not isinstance(values, (list, tuple)) or not values:
        raise ValidationError(f"{field} must be a non-empty list", field=field)
    for value in values:
        if not isinstance(value, str) or not value:
            raise ValidationError(
                f"{field} must contain only non-empty strings", field=field
            )


def _coerce_format(value: ImageFormat | str | None) -> ImageFormat | None:
    if value is None:
        return None
    try:
        return ImageFormat(value)
    except ValueError:
        allowed = ", ".join(f.value for f in ImageFormat)
        raise ValidationError(
            f"format must be one of: {allowed}", field="format"
        ) from None


def _check_scale(scale: float | None) -> None:
    if scale is None:
        return
    if (
        isinstance(scale, bool)
        or not isinstance(scale, (int, float))
        or not MIN_IMAGE_SCALE <= scale <= MAX_IMAGE_SCALE
    ):
        raise ValidationError(
            f"scale must be between {MIN_IMAGE_SCALE} and {MAX_IMAGE_SCALE}",
            field="scale",
        )


def _check_depth(depth: int | None) -> None:
    if depth is None:
        return
    if isinstance(depth, bool) or not isinstance(depth, int) or depth < 1:
        raise ValidationError("depth must be a positive integer", field="depth")
