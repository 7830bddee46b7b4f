"""Streaming downloads with byte ceilings, redirects and atomic writes."""

import httpx
import pytest

from docbound.config import FrozenConfig
from docbound.exceptions import (
    FetchError,
    FetchTimeoutError,
    HTTPStatusError,
    SizeExceededError,
)
from docbound.files.fetcher import Fetcher

URL = "https://files.example.com/docs/report.pdf"


def _fetcher(server, **overrides) -> Fetcher:
    return Fetcher(FrozenConfig(**overrides), transport=server.transport)


@pytest.mark.unit
class TestFetcher:
    def test_downloads_to_destination(self, tmp_path, fake_server):
        server = fake_server({URL: httpx.Response(200, content=b"%PDF-bytes")})
        destination = tmp_path / "nested" / "report.pdf"

        written = _fetcher(server).fetch(URL, destination)

        assert written == len(b"%PDF-bytes")
        assert destination.read_bytes() == b"%PDF-bytes"
        assert server.requests[0].headers["user-agent"] == "docbound/0.1"

    def test_advertised_size_over_limit_writes_nothing(self, tmp_path, fake_server):
        server = fake_server(
            {URL: httpx.Response(200, headers={"Content-Length": "5000"}, content=b"x")}
        )
        destination = tmp_path / "report.pdf"

        with pytest.raises(SizeExceededError, match="File too large") as exc:
            _fetcher(server).fetch(URL, destination, max_bytes=1000)

        assert exc.value.size_bytes == 5000
        assert exc.value.max_bytes == 1000
        assert list(tmp_path.iterdir()) == []

    def test_streamed_size_over_limit_leaves_no_partial_file(
        self, tmp_path, fake_server
    ):
        server = fake_server(
            {URL: lambda request: httpx.Response(200, content=iter([b"a" * 600, b"b" * 600]))}
        )
        destination = tmp_path / "report.pdf"

        with pytest.raises(SizeExceededError, match="during download"):
            _fetcher(server).fetch(URL, destination, max_bytes=1000)

        assert list(tmp_path.iterdir()) == []

    def test_default_ceiling_comes_from_config(self, tmp_path, fake_server):
        server = fake_server(
            {URL: httpx.Response(200, headers={"Content-Length": str(2 * 1024 * 1024)}, content=b"x")}
        )
        with pytest.raises(SizeExceededError):
            _fetcher(server, max_download_mb=1).fetch(URL, tmp_path / "r.pdf")

    def test_follows_relative_redirects(self, tmp_path, fake_server):
        final = "https://files.example.com/final/report.pdf"
        server = fake_server(
            {
                URL: httpx.Response(302, headers={"Location": "/final/report.pdf"}),
                final: httpx.Response(200, content=b"done"),
            }
        )

        _fetcher(server).fetch(URL, tmp_path / "report.pdf")

        assert [str(r.url) for r in server.requests] == [URL, final]
        assert (tmp_path / "report.pdf").read_bytes() == b"done"

    def test_redirect_target_respects_ceiling(self, tmp_path, fake_server):
        final = "https://cdn.example.com/report.pdf"
        server = fake_server(
            {
                URL: httpx.Response(301, headers={"Location": final}),
                final: httpx.Response(200, content=b"y" * 2000),
            }
        )
        with pytest.raises(SizeExceededError):
            _fetcher(server).fetch(URL, tmp_path / "report.pdf", max_bytes=1000)

    def test_redirect_loop_is_bounded(self, tmp_path, fake_server):
        server = fake_server({URL: httpx.Response(307, headers={"Location": URL})})

        with pytest.raises(FetchError, match="Too many redirects"):
            _fetcher(server, max_redirects=2).fetch(URL, tmp_path / "report.pdf")

        assert server.count(URL) == 3

    def test_http_error_status(self, tmp_path, fake_server):
        server = fake_server({})

        with pytest.raises(HTTPStatusError, match="Failed to download: HTTP 404") as exc:
            _fetcher(server).fetch(URL, tmp_path / "report.pdf")

        assert exc.value.status_code == 404
        assert exc.value.url == URL
        assert not (tmp_path / "report.pdf").exists()

    def test_timeout(self, tmp_path, fake_server):
        def stall(request):
            raise httpx.ReadTimeout("stalled", request=request)

        server = fake_server({URL: stall})

        with pytest.raises(FetchTimeoutError, match="Download timeout"):
            _fetcher(server).fetch(URL, tmp_path / "report.pdf")

    def test_transport_failure(self, tmp_path, fake_server):
        def refuse(request):
            raise httpx.ConnectError("refused", request=request)

        server = fake_server({URL: refuse})

        with pytest.raises(FetchError, match="Failed to fetch URL") as exc:
            _fetcher(server).fetch(URL, tmp_path / "report.pdf")

        assert not isinstance(exc.value, FetchTimeoutError)

    def test_overwrites_existing_destination_atomically(self, tmp_path, fake_server):
        destination = tmp_path / "report.pdf"
        destination.write_bytes(b"old")
        server = fake_server({URL: httpx.Response(200, content=b"new")})

        _fetcher(server).fetch(URL, destination)

        assert destination.read_bytes() == b"new"
        assert [p.name for p in tmp_path.iterdir()] == ["report.pdf"]
