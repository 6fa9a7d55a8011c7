"""Request parameter types and response shapes for the Figma REST API.

Response types are structural hints only. The client checks that a response
is a JSON object and hands it back unchanged; callers that need stronger
guarantees validate on top.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, TypedDict

MIN_IMAGE_SCALE = 0.1
MAX_IMAGE_SCALE = 4.0


class ImageFormat(str, Enum):
    """Render formats accepted by the image endpoint."""

    PNG = "png"
    JPG = "jpg"
    SVG = "svg"
    PDF = "pdf"


class FileResponse(TypedDict, total=False):
    name: str
    role: str
    lastModified: str
    editorType: str
    thumbnailUrl: str
    version: str
    document: dict[str, Any]
    components: dict[str, Any]
    componentSets: dict[str, Any]
    schemaVersion: int
    styles: dict[str, Any]


class FileNodesResponse(TypedDict, total=False):
    name: str
    lastModified: str
    version: str
    nodes: dict[str, Any]


class SearchResponse(TypedDict, total=False):
    nodes: list[dict[str, Any]]


class ImagesResponse(TypedDict, total=False):
    err: str | None
    images: dict[str, str | None]
    status: int


class ImageFillsResponse(TypedDict, total=False):
    error: bool
    status: int
    meta: dict[str, Any]


class CommentsResponse(TypedDict, total=False):
    comments: list[dict[str, Any]]


class VersionsResponse(TypedDict, total=False):
    versions: list[dict[str, Any]]
    pagination: dict[str, Any]


class TeamResponse(TypedDict, total=False):
    id: str
    name: str


class ProjectsResponse(TypedDict, total=False):
    name: str
    projects: list[dict[str, Any]]


class ProjectFilesResponse(TypedDict, total=False):
    name: str
    files: list[dict[str, Any]]


class TeamFilesResponse(TypedDict, total=False):
    files: list[dict[str, Any]]


class UserResponse(TypedDict, total=False):
    id: str
    email: str
    handle: str
    img_url: str
