"""
Contracts between the router, the downloaders and the backend clients.

Downloaders depend on these protocols rather than on the concrete httpx
clients, so they can be driven by in-memory fakes in tests.
"""

from typing import Optional, Protocol, runtime_checkable

import httpx
from flask import Request

from .models import DownloadRequest, DownloadResult


@runtime_checkable
class ContentClient(Protocol):
    """Fetches the raw definition of a piece of content."""

    def get_resource_body(
        self,
        access_token: Optional[str],
        collection_id: Optional[str],
        locale: str,
        uri: str,
    ) -> bytes:
        ...


@runtime_checkable
class RenderClient(Protocol):
    """Posts a definition to the renderer and returns its streamed response."""

    def post_body(self, format: str, body: bytes) -> httpx.Response:
        ...


@runtime_checkable
class Downloader(Protocol):
    """Handles GET /download/<type> for one type of file."""

    def type(self) -> str:
        """The (conceptual) type of file, used as the last path segment."""
        ...

    def query_parameters(self) -> list[str]:
        """Names of the query parameters this downloader reads."""
        ...

    def parse_request(self, request: Request) -> DownloadRequest:
        ...

    def download(self, request: DownloadRequest) -> DownloadResult:
        """
        Fetch or build the requested file.

        The returned result's body must be closed by the caller.
        """
        ...
