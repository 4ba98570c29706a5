"""
In-memory stand-ins for the backend clients

The fakes record every call so tests can assert on what the downloader and the
router did without starting a content server or a table renderer.
"""

from typing import Optional

import httpx

__all__ = [
    "FakeBody",
    "FakeContentClient",
    "FakeRenderClient",
]


class FakeBody:
    """A body stream that records how it was read and closed."""

    def __init__(
        self,
        content: bytes = b"",
        fail_after: Optional[int] = None,
        close_error: Optional[Exception] = None,
    ):
        self.content = content
        self.fail_after = fail_after
        self.close_error = close_error
        self.chunks_read = 0
        self.close_calls = 0

    def iter_bytes(self, chunk_size=None):
        for index, byte in enumerate(self.content):
            if self.fail_after is not None and index >= self.fail_after:
                raise httpx.ReadError("connection reset")
            self.chunks_read += 1
            yield bytes([byte])

    def close(self):
        self.close_calls += 1
        if self.close_error is not None:
            raise self.close_error


class FakeContentClient:
    """Records calls to get_resource_body and returns a canned answer."""

    def __init__(self, body: bytes = b"", error: Optional[Exception] = None):
        self.body = body
        self.error = error
        self.calls = []

    def get_resource_body(self, access_token, collection_id, locale, uri):
        self.calls.append(
            {"access_token": access_token, "collection_id": collection_id, "locale": locale, "uri": uri}
        )
        if self.error is not None:
            raise self.error
        return self.body


class FakeRenderClient:
    """Records calls to post_body and returns a canned response."""

    def __init__(
        self,
        status: int = 200,
        content: bytes = b"",
        content_type: str = "",
        error: Optional[Exception] = None,
    ):
        headers = {"Content-Type": content_type} if content_type else {}
        self.response = httpx.Response(status, headers=headers, content=content)
        self.error = error
        self.calls = []

    def post_body(self, format, body):
        self.calls.append({"format": format, "body": body})
        if self.error is not None:
            raise self.error
        return self.response
