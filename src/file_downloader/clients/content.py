"""
Content server (Zebedee) client

Zebedee is reached through the API router. Published content lives under
/resource; content in an unpublished collection lives under
/resource/{collection_id} and needs a Florence access token.
"""

import logging
from typing import Optional

import httpx

from ..errors import ContentServerError
from .base import ServiceClient


logger = logging.getLogger(__name__)

FLORENCE_TOKEN_HEADER = "X-Florence-Token"


class ZebedeeClient(ServiceClient):
    """Fetches resource bodies from the content server."""

    service = "zebedee"

    def resource_url(self, collection_id: Optional[str]) -> str:
        path = "/resource"
        if collection_id:
            path += f"/{collection_id}"
        return self.url + path

    def get_resource_body(
        self,
        access_token: Optional[str],
        collection_id: Optional[str],
        locale: str,
        uri: str,
    ) -> bytes:
        """
        Return the raw body of the resource at uri.

        Redirects are followed. Raises ContentServerError if the final answer
        is not a 2xx status.
        Transport failures propagate as httpx.HTTPError.
        """
        params = {"uri": uri}
        if locale:
            params["lang"] = locale

        headers = {}
        if access_token:
            headers[FLORENCE_TOKEN_HEADER] = access_token

        url = self.resource_url(collection_id)
        response = self._client.get(url, params=params, headers=headers, follow_redirects=True)
        if not 200 <= response.status_code < 300:
            logger.debug("zebedee returned %d for %s", response.status_code, response.url)
            raise ContentServerError(response.status_code, str(response.url))
        return response.content
