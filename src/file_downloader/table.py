"""
Table downloader

Downloads a table by fetching its JSON definition from the content server and
posting that definition to the table renderer, which converts it to the
requested format (html, xlsx or csv).
"""

import logging

import httpx
from flask import Request

from .errors import BadRequestError, ContentServerError, RendererError
from .interfaces import ContentClient, RenderClient
from .models import DownloadRequest, DownloadResult
from .request_context import get_access_token, get_collection_id, get_locale_code


logger = logging.getLogger(__name__)

FORMAT_PARAM = "format"
URI_PARAM = "uri"


class TableDownloader:
    """
    Handles GET /download/table?format=...&uri=...

    'format' is the format of the file to return - xlsx, csv or html.
    'uri' is the location of the file that defines the table, a path that
    resolves to a .json file on the content server.
    """

    def __init__(self, content_client: ContentClient, render_client: RenderClient):
        self.content_client = content_client
        self.render_client = render_client

    def type(self) -> str:
        return "table"

    def query_parameters(self) -> list[str]:
        return [FORMAT_PARAM, URI_PARAM]

    def parse_request(self, request: Request) -> DownloadRequest:
        """Build a DownloadRequest from the query string, headers and cookies."""
        return DownloadRequest(
            format=request.args.get(FORMAT_PARAM, ""),
            uri=request.args.get(URI_PARAM, ""),
            locale=get_locale_code(request),
            collection_id=get_collection_id(request),
            access_token=get_access_token(request),
        )

    def download(self, request: DownloadRequest) -> DownloadResult:
        """
        Fulfil a request to download a table.

        The body of a successful result is the renderer's response stream and
        must be closed by the caller.
        """
        try:
            request.validate_required()
        except BadRequestError as exc:
            return DownloadResult.failure(exc.status_code, exc)

        # call the content server to get the json definition of the table
        try:
            definition = self.content_client.get_resource_body(
                request.access_token, request.collection_id, request.locale, request.uri
            )
        except ContentServerError as exc:
            logger.error("error calling content server: %s", exc, extra={"uri": request.uri})
            if exc.actual_code == 404:
                return DownloadResult.failure(404, exc)
            if exc.actual_code == 500:
                return DownloadResult.failure(500, exc)
            return DownloadResult.failure(400, exc)
        except Exception as exc:
            logger.exception("error calling content server", extra={"uri": request.uri})
            return DownloadResult.failure(500, exc)

        # post the json definition to the renderer
        try:
            response = self.render_client.post_body(request.format, definition)
        except (RendererError, httpx.HTTPError) as exc:
            logger.error("error calling renderer server: %s", exc, extra={"format": request.format})
            return DownloadResult.failure(500, exc)
        except Exception as exc:
            logger.exception("error calling renderer server", extra={"format": request.format})
            return DownloadResult.failure(500, exc)

        return DownloadResult(
            status=response.status_code,
            headers=create_headers(response, request.uri, request.format),
            body=response,
        )


def create_headers(response: httpx.Response, uri: str, format: str) -> dict[str, str]:
    """Copy the renderer's Content-Type and name the file after the last element of uri."""
    headers = {"Content-Type": response.headers.get("Content-Type", "")}
    filename = uri.split("/")[-1].removesuffix(".json") + "." + format
    headers["Content-Disposition"] = f'attachment; filename="{quote_filename(filename)}"'
    return headers


def quote_filename(filename: str) -> str:
    """Drop characters that would end the quoted filename or split the header."""
    return "".join(c for c in filename if c not in '"\\' and c.isprintable())
