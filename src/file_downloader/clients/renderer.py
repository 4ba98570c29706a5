"""
Table renderer client
"""

import logging

import httpx

from ..errors import RendererError
from .base import ServiceClient


logger = logging.getLogger(__name__)


class TableRendererClient(ServiceClient):
    """Posts table definitions to the table renderer."""

    service = "table-renderer"

    def post_body(self, format: str, body: bytes) -> httpx.Response:
        """
        POST body to /render/{format} and return the streamed response.

        The response is returned whatever its status. Its body has not been
        read, so the caller must close it.
        """
        url = f"{self.url}/render/{format}"
        request = self._client.build_request(
            "POST",
            url,
            content=body,
            headers={"Content-Type": "application/json"},
        )
        try:
            return self._client.send(request, stream=True)
        except httpx.HTTPError as exc:
            raise RendererError(f"error calling table renderer: {exc}", url=url) from exc
