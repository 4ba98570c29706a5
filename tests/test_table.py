"""
Tests for the Table Downloader
"""

import httpx
import pytest
from flask import Flask, request

from file_downloader.errors import BadRequestError, ContentServerError, RendererError
from file_downloader.models import DownloadRequest
from file_downloader.table import TableDownloader, create_headers
from file_downloader.testing import FakeContentClient, FakeRenderClient


CONTENT_SERVER_RESPONSE = b"contentServerResponse"
RENDER_SERVER_RESPONSE = b"renderServerResponse"


class TestTableDownloader:
    """Tests for TableDownloader.download."""

    @pytest.fixture
    def content_client(self):
        return FakeContentClient(CONTENT_SERVER_RESPONSE)

    @pytest.fixture
    def render_client(self):
        return FakeRenderClient(200, RENDER_SERVER_RESPONSE, "text/html")

    def test_successful_download(self, content_client, render_client):
        """Test a table is fetched, rendered and returned with download headers."""
        downloader = TableDownloader(content_client, render_client)

        result = downloader.download(DownloadRequest(format="html", uri="/foo/bar.json"))

        assert result.error is None
        assert result.status == 200
        assert result.headers == {
            "Content-Type": "text/html",
            "Content-Disposition": 'attachment; filename="bar.html"',
        }
        assert b"".join(result.iter_bytes()) == RENDER_SERVER_RESPONSE

        assert len(content_client.calls) == 1
        assert content_client.calls[0]["uri"] == "/foo/bar.json"
        assert render_client.calls == [{"format": "html", "body": CONTENT_SERVER_RESPONSE}]

    def test_context_is_forwarded_to_content_server(self, content_client, render_client):
        """Test the collection, locale and access token reach the content client."""
        downloader = TableDownloader(content_client, render_client)

        downloader.download(
            DownloadRequest(
                format="csv",
                uri="/foo/bar.json",
                locale="cy",
                collection_id="myCollection",
                access_token="token",
            )
        )

        assert content_client.calls == [
            {"access_token": "token", "collection_id": "myCollection", "locale": "cy", "uri": "/foo/bar.json"}
        ]

    @pytest.mark.parametrize("format,uri", [("", ""), ("html", ""), ("", "/foo/bar.json")])
    def test_missing_parameters_are_rejected(self, content_client, render_client, format, uri):
        """Test a request without format or uri never reaches a backend."""
        downloader = TableDownloader(content_client, render_client)

        result = downloader.download(DownloadRequest(format=format, uri=uri))

        assert result.status == 400
        assert isinstance(result.error, BadRequestError)
        assert result.body is None
        assert content_client.calls == []
        assert render_client.calls == []

    def test_content_not_found(self, render_client):
        """Test a 404 from the content server is reported as not found."""
        content_client = FakeContentClient(error=ContentServerError(404, "test/url"))
        downloader = TableDownloader(content_client, render_client)

        result = downloader.download(DownloadRequest(format="html", uri="/foo/bar"))

        assert result.status == 404
        assert result.error is content_client.error
        assert result.body is None
        assert render_client.calls == []

    def test_content_server_error(self, render_client):
        """Test a 500 from the content server is reported as an internal error."""
        content_client = FakeContentClient(error=ContentServerError(500, "test/url"))
        downloader = TableDownloader(content_client, render_client)

        result = downloader.download(DownloadRequest(format="html", uri="/foo/bar"))

        assert result.status == 500
        assert result.error is content_client.error
        assert render_client.calls == []

    @pytest.mark.parametrize("upstream_status", [401, 403, 502, 503])
    def test_other_content_failures_are_bad_requests(self, render_client, upstream_status):
        """Test any other content server status is reported as a bad request."""
        content_client = FakeContentClient(error=ContentServerError(upstream_status, "test/url"))
        downloader = TableDownloader(content_client, render_client)

        result = downloader.download(DownloadRequest(format="html", uri="/foo/bar"))

        assert result.status == 400
        assert result.error is content_client.error
        assert render_client.calls == []

    def test_content_server_unreachable(self, render_client):
        """Test a transport failure reaching the content server is an internal error."""
        content_client = FakeContentClient(error=httpx.ConnectError("connection refused"))
        downloader = TableDownloader(content_client, render_client)

        result = downloader.download(DownloadRequest(format="html", uri="/foo/bar"))

        assert result.status == 500
        assert result.error is content_client.error
        assert render_client.calls == []

    def test_renderer_down(self, content_client):
        """Test a renderer transport failure is an internal error."""
        render_client = FakeRenderClient(error=RendererError("The render server is down"))
        downloader = TableDownloader(content_client, render_client)

        result = downloader.download(DownloadRequest(format="html", uri="/foo/bar"))

        assert result.status == 500
        assert result.error is render_client.error
        assert result.body is None

    def test_unexpected_content_failure(self, render_client):
        """Test an unexpected exception from the content client is an internal error."""
        content_client = FakeContentClient(error=ValueError("boom"))
        downloader = TableDownloader(content_client, render_client)

        result = downloader.download(DownloadRequest(format="html", uri="/foo/bar"))

        assert result.status == 500
        assert result.error is content_client.error
        assert result.body is None
        assert render_client.calls == []

    def test_unexpected_renderer_failure(self, content_client):
        """Test an unexpected exception from the render client is an internal error."""
        render_client = FakeRenderClient(error=ValueError("boom"))
        downloader = TableDownloader(content_client, render_client)

        result = downloader.download(DownloadRequest(format="html", uri="/foo/bar"))

        assert result.status == 500
        assert result.error is render_client.error
        assert result.body is None

    def test_renderer_status_is_relayed(self, content_client):
        """Test a renderer error status is passed through rather than treated as a failure."""
        render_client = FakeRenderClient(400, b"unsupported format", "text/plain")
        downloader = TableDownloader(content_client, render_client)

        result = downloader.download(DownloadRequest(format="pdf", uri="/foo/bar.json"))

        assert result.error is None
        assert result.status == 400
        assert result.headers["Content-Disposition"] == 'attachment; filename="bar.pdf"'

    def test_type_and_query_parameters(self):
        downloader = TableDownloader(FakeContentClient(), FakeRenderClient())

        assert downloader.type() == "table"
        assert downloader.query_parameters() == ["format", "uri"]


class TestParseRequest:
    """Tests for building a DownloadRequest from an incoming request."""

    @pytest.fixture
    def app(self):
        return Flask(__name__)

    def test_query_parameters(self, app):
        downloader = TableDownloader(FakeContentClient(), FakeRenderClient())

        with app.test_request_context("/download/table?format=xlsx&uri=/a/b.json"):
            parsed = downloader.parse_request(request)

        assert parsed.format == "xlsx"
        assert parsed.uri == "/a/b.json"
        assert parsed.locale == "en"
        assert parsed.collection_id is None
        assert parsed.access_token is None

    def test_cookies(self, app):
        downloader = TableDownloader(FakeContentClient(), FakeRenderClient())

        with app.test_request_context(
            "/download/table?format=html&uri=/a/b.json",
            headers={"Cookie": "collection=myCollection; access_token=abc; lang=cy"},
        ):
            parsed = downloader.parse_request(request)

        assert parsed.collection_id == "myCollection"
        assert parsed.access_token == "abc"
        assert parsed.locale == "cy"

    def test_headers_take_precedence(self, app):
        downloader = TableDownloader(FakeContentClient(), FakeRenderClient())

        with app.test_request_context(
            "/download/table?format=html&uri=/a/b.json",
            headers={
                "Cookie": "collection=fromCookie; access_token=cookieToken",
                "Collection-Id": "fromHeader",
                "X-Florence-Token": "Bearer headerToken",
                "LocaleCode": "fr",
            },
        ):
            parsed = downloader.parse_request(request)

        assert parsed.collection_id == "fromHeader"
        assert parsed.access_token == "headerToken"
        assert parsed.locale == "en"


class TestCreateHeaders:
    """Tests for the download headers."""

    @pytest.mark.parametrize("uri,format,filename", [
        ("/foo/bar.json", "html", "bar.html"),
        ("/foo/bar", "csv", "bar.csv"),
        ("bar.json", "xlsx", "bar.xlsx"),
        ("/foo/bar.json.json", "csv", "bar.json.csv"),
    ])
    def test_filename(self, uri, format, filename):
        response = httpx.Response(200, headers={"Content-Type": "text/csv"})

        headers = create_headers(response, uri, format)

        assert headers["Content-Disposition"] == f'attachment; filename="{filename}"'
        assert headers["Content-Type"] == "text/csv"

    @pytest.mark.parametrize("uri,format,filename", [
        ('/foo/ba"r.json', "html", "bar.html"),
        ("/foo/bar.json", 'csv"; name="x', "bar.csv; name=x"),
        ("/foo/bar\r\nSet-Cookie: a=b.json", "html", "barSet-Cookie: a=b.html"),
        ("/foo/b\\ar.json", "xlsx", "bar.xlsx"),
    ])
    def test_filename_cannot_break_header(self, uri, format, filename):
        """Test quotes, backslashes and line breaks are dropped from the filename."""
        response = httpx.Response(200, headers={"Content-Type": "text/csv"})

        headers = create_headers(response, uri, format)

        assert headers["Content-Disposition"] == f'attachment; filename="{filename}"'
