"""End-to-end retrieval through the front door with a mocked HTTP server."""

import zipfile

import httpx
import pytest

from docbound import (
    DocumentService,
    ExplicitPages,
    FrozenConfig,
    LimitOptions,
    PageRange,
    govern_response,
)
from docbound.files.fetcher import Fetcher

PDF_URL = "https://files.example.com/filings/report.pdf"
TXT_URL = "https://files.example.com/notes/readme.txt"
ZIP_URL = "https://files.example.com/bundles/bundle.zip"

CACHED_NOTE = "[Note: Used cached file - already downloaded]"


@pytest.fixture
def pdf_bytes(tmp_path, make_pdf) -> bytes:
    path = make_pdf(
        tmp_path / "fixtures" / "report.pdf",
        ["Revenue grew strongly", "Margins held steady", "Outlook remains positive"],
    )
    return path.read_bytes()


@pytest.fixture
def zip_bytes(tmp_path) -> bytes:
    path = tmp_path / "fixtures" / "bundle.zip"
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("summary.txt", "bundle summary text")
        zf.writestr("data/prices.csv", "symbol,price\nAAPL,189.5\n")
    return path.read_bytes()


@pytest.fixture
def server(fake_server, pdf_bytes, zip_bytes):
    return fake_server(
        {
            PDF_URL: httpx.Response(200, content=pdf_bytes),
            TXT_URL: httpx.Response(200, content=b"plain notes"),
            ZIP_URL: httpx.Response(200, content=zip_bytes),
        }
    )


@pytest.fixture
def service(config, server) -> DocumentService:
    return DocumentService(config, fetcher=Fetcher(config, transport=server.transport))


@pytest.mark.integration
class TestDownloadAndExtract:
    def test_pdf_download(self, service):
        response = service.download_and_extract(PDF_URL)

        assert response.is_error is False
        assert response.was_truncated is False
        data = response.data
        assert data["success"] is True
        assert data["content"].startswith("PDF: report.pdf\nTotal Pages: 3")
        assert "Outlook remains positive" in data["content"]
        assert CACHED_NOTE not in data["content"]
        assert data["metadata"]["filename"] == "report.pdf"
        assert data["metadata"]["type"] == "pdf"
        assert data["metadata"]["pages"] == 3
        assert data["metadata"]["extracted_pages"] == "1-3"
        assert data["metadata"]["size"].endswith(" MB")

    def test_second_download_uses_cache(self, service, server, cache_dir):
        service.download_and_extract(PDF_URL)
        mtime = (cache_dir / "report.pdf").stat().st_mtime_ns

        response = service.download_and_extract(PDF_URL)

        assert server.count(PDF_URL) == 1
        assert (cache_dir / "report.pdf").stat().st_mtime_ns == mtime
        assert response.data["content"].endswith(CACHED_NOTE)
        assert response.was_truncated is False

    def test_page_range(self, service):
        response = service.download_and_extract(PDF_URL, pages=PageRange(2, 3))

        content = response.data["content"]
        assert "Revenue grew strongly" not in content
        assert "Margins held steady" in content
        assert response.data["metadata"]["extracted_pages"] == "2-3"

    def test_text_download(self, service):
        response = service.download_and_extract(TXT_URL)

        assert response.data["content"] == "plain notes"
        assert response.data["metadata"]["type"] == "text"
        assert "pages" not in response.data["metadata"]

    def test_archive_download_lists_files(self, service):
        response = service.download_and_extract(ZIP_URL)

        assert response.data["files"] == ["summary.txt", "data/prices.csv"]
        assert response.data["metadata"]["type"] == "zip"
        assert "bundle summary text" in response.data["content"]
        assert "AAPL,189.5" in response.data["content"]

    def test_size_ceiling_becomes_error_response(self, service, cache_dir):
        response = service.download_and_extract(PDF_URL, max_size_mb=0.0001)

        assert response.is_error is True
        assert response.data["success"] is False
        assert response.data["error_type"] == "SizeExceededError"
        assert not (cache_dir / "report.pdf").exists()

    def test_http_failure_becomes_error_response(self, service):
        response = service.download_and_extract("https://files.example.com/gone.pdf")

        assert response.is_error is True
        assert response.data["error"] == "Failed to download: HTTP 404"
        assert response.to_tool_result()["isError"] is True

    def test_degraded_pdf_is_still_a_success(self, config, fake_server):
        url = "https://files.example.com/broken.pdf"
        server = fake_server({url: httpx.Response(200, content=b"garbage bytes")})
        service = DocumentService(
            config, fetcher=Fetcher(config, transport=server.transport)
        )

        response = service.download_and_extract(url)

        assert response.is_error is False
        assert "Error extracting text" in response.data["content"]
        assert response.data["metadata"]["extracted_pages"] == "error"

    def test_oversized_extraction_is_governed(self, config, fake_server):
        url = "https://files.example.com/big.txt"
        body = " ".join(f"word{i}" for i in range(6000)).encode()
        server = fake_server({url: httpx.Response(200, content=body)})
        service = DocumentService(
            config, fetcher=Fetcher(config, transport=server.transport)
        )

        response = service.download_and_extract(url)

        assert response.was_truncated is True
        assert response.metadata is not None
        assert response.metadata.exceeds_limit is True
        assert "_metadata" in response.data


@pytest.mark.integration
class TestReadDocumentPages:
    def test_reads_cached_pdf_by_filename(self, service, server):
        service.download_and_extract(PDF_URL)

        response = service.read_document_pages(
            filename="report.pdf", pages=ExplicitPages((3, 1))
        )

        content = response.data["content"]
        assert content.index("--- PAGE 3 ---") < content.index("--- PAGE 1 ---")
        assert "--- PAGE 2 ---" not in content
        assert CACHED_NOTE not in content
        assert server.count(PDF_URL) == 1

    def test_downloads_when_missing_and_url_given(self, service, server):
        response = service.read_document_pages(filename="filing.pdf", url=PDF_URL)

        assert response.is_error is False
        assert response.data["metadata"]["filename"] == "filing.pdf"
        assert server.count(PDF_URL) == 1

    def test_missing_without_url(self, service):
        response = service.read_document_pages(filename="absent.pdf")

        assert response.is_error is True
        assert response.data["error_type"] == "NotFoundAndNoUrlError"
        assert "Please provide a URL to download it." in response.data["error"]

    def test_only_pdfs_are_accepted(self, service):
        service.download_and_extract(TXT_URL)

        response = service.read_document_pages(filename="readme.txt")

        assert response.is_error is True
        assert response.data["error"] == (
            "This tool only supports PDF files. File type: .txt"
        )

    def test_requires_filename_or_url(self, service):
        response = service.read_document_pages()

        assert response.is_error is True
        assert response.data["error_type"] == "ValidationError"


@pytest.mark.integration
class TestToolDispatch:
    def test_download_document_tool(self, service):
        result = service.handle_tool(
            "download_document", {"url": PDF_URL, "pages": [2]}
        )

        text = result["content"][0]["text"]
        assert "isError" not in result
        assert "--- PAGE 2 ---" in text
        assert "--- PAGE 1 ---" not in text

    def test_read_document_pages_tool_with_range(self, service):
        service.handle_tool("download_document", {"url": PDF_URL})

        result = service.handle_tool(
            "read_document_pages",
            {"filename": "report.pdf", "start_page": 2, "end_page": 2},
        )

        text = result["content"][0]["text"]
        assert "Extracted Pages: 2-2" in text

    def test_unknown_tool(self, service):
        assert service.handle_tool("delete_everything", {}) == {
            "content": [{"type": "text", "text": "Error: Unknown tool: delete_everything"}],
            "isError": True,
        }

    def test_missing_url_is_an_error(self, service):
        result = service.handle_tool("download_document", {})

        assert result["isError"] is True
        assert "url is required" in result["content"][0]["text"]


@pytest.mark.integration
class TestGovernResponse:
    def test_market_data_passes_through_governor(self, service):
        quotes = [{"symbol": f"S{i}", "note": "x " * 50} for i in range(200)]

        response = service.govern_response(quotes, LimitOptions(max_items=3))

        assert [q["symbol"] for q in response.data] == ["S0", "S1", "S2"]
        assert response.payload.startswith("WARNING: Response limited")

    def test_module_level_helper(self, tmp_path):
        cfg = FrozenConfig(cache_dir=tmp_path)
        value = {"symbol": "AAPL"}
        assert govern_response(value, cfg=cfg).data is value
