"""
Error types for the file downloader.

Each error knows the HTTP status it is reported with when it reaches the
router. Upstream errors also keep the status the upstream service answered
with, so the downloader can decide how to classify them.
"""

from typing import Optional


class DownloaderError(Exception):
    """Base class for errors raised while fulfilling a download."""

    status_code = 500


class BadRequestError(DownloaderError):
    """The incoming request is missing something the downloader needs."""

    status_code = 400

    def __init__(self, message: str = "bad request"):
        super().__init__(message)


class NotFoundError(DownloaderError):
    """The requested resource does not exist."""

    status_code = 404

    def __init__(self, message: str = "not found"):
        super().__init__(message)


class ContentServerError(DownloaderError):
    """The content server answered with a status outside the 2xx/3xx range."""

    def __init__(self, actual_code: int, uri: str, message: Optional[str] = None):
        self.actual_code = actual_code
        self.uri = uri
        super().__init__(message or f"invalid response from zebedee: got status {actual_code}, path: {uri}")


class RendererError(DownloaderError):
    """The table renderer could not be reached or failed before responding."""

    def __init__(self, message: str, url: Optional[str] = None):
        self.url = url
        super().__init__(message)
