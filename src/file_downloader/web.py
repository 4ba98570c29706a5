"""
Web Server for the File Downloader

Routes GET /download/<type> to the downloader registered for that type and
serves the service health on /health.
"""

import logging
from typing import Iterator

import httpx
from flask import Flask, Response, jsonify, request

from .errors import NotFoundError
from .health import HealthCheck
from .interfaces import Downloader
from .models import DownloadResult


logger = logging.getLogger(__name__)

CORS_ALLOWED_HEADERS = [
    "Accept",
    "Content-Type",
    "Access-Control-Allow-Origin",
    "Access-Control-Allow-Methods",
    "X-Requested-With",
]
CORS_ALLOWED_METHODS = ["GET", "POST", "OPTIONS"]


def create_app(health_check: HealthCheck, *downloaders: Downloader, cors_allowed_origins: str = "*") -> Flask:
    """Create the Flask application serving the given downloaders."""
    app = Flask(__name__)
    registry = {downloader.type(): downloader for downloader in downloaders}

    for downloader in downloaders:
        logger.info(
            "handling GET method on path /download/%s, query parameters: %s",
            downloader.type(),
            downloader.query_parameters(),
        )

    @app.route('/health')
    @app.route('/health/')
    def health():
        """Report the aggregate health of the service and its dependencies."""
        report = health_check.report()
        return jsonify(report.model_dump(mode='json')), health_check.http_status(report.status)

    @app.route('/download/<download_type>', methods=['GET'])
    def download(download_type):
        """Download a file of the given type."""
        downloader = registry.get(download_type)
        if downloader is None:
            return write_result(DownloadResult.failure(404, NotFoundError(f"no downloader for type {download_type!r}")))

        result = downloader.download(downloader.parse_request(request))
        return write_result(result)

    @app.after_request
    def add_cors_headers(response):
        response.headers['Access-Control-Allow-Origin'] = cors_allowed_origins
        response.headers['Access-Control-Allow-Methods'] = ', '.join(CORS_ALLOWED_METHODS)
        response.headers['Access-Control-Allow-Headers'] = ', '.join(CORS_ALLOWED_HEADERS)
        return response

    return app


def write_result(result: DownloadResult) -> Response:
    """
    Turn a DownloadResult into a Flask response.

    The result is closed once its body has been streamed, if streaming fails
    part way, or if the response is closed before the body is read.
    """
    if result.error is not None:
        close_result(result)
        logger.error(
            "error returned from downloader: %s",
            result.error,
            extra={"path": request.path, "query": request.query_string.decode(errors="replace")},
        )
        status = result.status if result.status >= 400 else 500
        body = "" if status == 404 else str(result.error)
        return Response(body, status=status, mimetype='text/plain')

    response = Response(stream_body(result, request.path), status=result.status, headers=result.headers)
    response.call_on_close(lambda: close_result(result))
    return response


def stream_body(result: DownloadResult, path: str) -> Iterator[bytes]:
    try:
        for chunk in result.iter_bytes():
            yield chunk
    except (httpx.HTTPError, httpx.StreamError, OSError):
        # the status line has already been sent, so all that can be done is log it
        logger.exception("error while copying from reader", extra={"path": path})
    finally:
        close_result(result)


def close_result(result: DownloadResult) -> None:
    try:
        result.close()
    except Exception:
        logger.exception("unable to close reader cleanly")
