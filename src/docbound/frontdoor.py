"""Entry points for document retrieval and response governing.

`DocumentService` wires one fetcher, cache resolver, extractor manager and
response governor from a single `FrozenConfig`. The module-level helpers
build a fresh service from `resolve_config()` on every call.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any

from docbound.config import FrozenConfig, mb_to_bytes, resolve_config
from docbound.core.types import (
    ALL_PAGES,
    CachedFile,
    DocumentResult,
    ExtractionResult,
    Failure,
    PageSelector,
    Result,
    RetrievalRequest,
    Success,
    page_selector,
)
from docbound.exceptions import DocboundError, UnsupportedTypeError, ValidationError
from docbound.files.cache import CacheResolver
from docbound.files.extractors import ExtractorManager
from docbound.files.fetcher import Fetcher
from docbound.files.utils import file_kind
from docbound.governor import GovernedResponse, LimitOptions, ResponseGovernor
from docbound.telemetry import TelemetryContext, TelemetryContextProtocol

log = logging.getLogger(__name__)

CACHED_NOTE = "\n\n[Note: Used cached file - already downloaded]"

TOOL_NAMES = ("download_document", "read_document_pages")

type _Retrieved = tuple[CachedFile, ExtractionResult]


class DocumentService:
    """Retrieve, extract and govern documents under one configuration."""

    def __init__(
        self,
        config: FrozenConfig | None = None,
        *,
        fetcher: Fetcher | None = None,
        telemetry: TelemetryContextProtocol | None = None,
    ) -> None:
        self.config = config or resolve_config()
        self.tele = telemetry or TelemetryContext()
        self.fetcher = fetcher or Fetcher(self.config, telemetry=self.tele)
        self.resolver = CacheResolver(self.config, self.fetcher)
        self.extractors = ExtractorManager(self.config, telemetry=self.tele)
        self.governor = ResponseGovernor(self.config, telemetry=self.tele)

    # ------------------------------
    # Public entry points
    # ------------------------------
    def download_and_extract(
        self,
        url: str,
        max_size_mb: float | None = None,
        pages: PageSelector = ALL_PAGES,
    ) -> GovernedResponse:
        """Download `url` (unless cached), extract its text and govern the result.

        Errors never propagate: they come back as an error-shaped response
        with `is_error=True`.
        """
        if not url:
            return self._error_response(ValidationError("url is required"))
        outcome = self._retrieve(
            url=url, filename=None, pages=pages, max_size_mb=max_size_mb
        )
        return self._respond(outcome, note_cached=True)

    def read_document_pages(
        self,
        filename: str | None = None,
        url: str | None = None,
        pages: PageSelector = ALL_PAGES,
        max_size_mb: float | None = None,
    ) -> GovernedResponse:
        """Read selected pages of a cached PDF, downloading it first if needed."""
        outcome = self._retrieve(
            url=url,
            filename=filename,
            pages=pages,
            max_size_mb=max_size_mb,
            pdf_only=True,
        )
        return self._respond(outcome)

    def govern_response(
        self, value: Any, options: LimitOptions | None = None
    ) -> GovernedResponse:
        """Bound an arbitrary JSON-like value (e.g. a market-data result)."""
        try:
            return self.governor.govern(value, options)
        except Exception as e:
            log.exception("Unexpected error while governing a response")
            return self._error_response(e)

    def handle_tool(self, name: str, args: dict[str, Any] | None = None) -> dict[str, Any]:
        """Dispatch a tool call by name and return the tool-result envelope."""
        args = args or {}
        try:
            if name not in TOOL_NAMES:
                raise ValidationError(f"Unknown tool: {name}")
            selector = page_selector(
                start_page=args.get("start_page"),
                end_page=args.get("end_page"),
                pages=args.get("pages"),
            )
            max_size_mb = args.get("max_size_mb") or self.config.max_download_mb
            if name == "download_document":
                response = self.download_and_extract(
                    args.get("url"), max_size_mb=max_size_mb, pages=selector
                )
            else:
                response = self.read_document_pages(
                    filename=args.get("filename"),
                    url=args.get("url"),
                    pages=selector,
                    max_size_mb=max_size_mb,
                )
        except Exception as e:
            if not isinstance(e, DocboundError):
                log.exception("Unexpected error handling tool %s", name)
            return {
                "content": [{"type": "text", "text": f"Error: {e}"}],
                "isError": True,
            }
        return response.to_tool_result()

    # ------------------------------
    # Internal helpers
    # ------------------------------
    def _retrieve(
        self,
        *,
        url: str | None,
        filename: str | None,
        pages: PageSelector,
        max_size_mb: float | None,
        pdf_only: bool = False,
    ) -> Result[_Retrieved, Exception]:
        try:
            request = RetrievalRequest(
                url=url,
                filename=filename,
                pages=pages,
                max_bytes=mb_to_bytes(
                    max_size_mb if max_size_mb else self.config.max_download_mb
                ),
            )
            cached = self.resolver.resolve(
                request.filename, request.url, max_bytes=request.max_bytes
            )
            if pdf_only and cached.extension != ".pdf":
                raise UnsupportedTypeError(
                    "This tool only supports PDF files. "
                    f"File type: {cached.extension or '(none)'}",
                    supported=(".pdf",),
                )
            extraction = self.extractors.extract(cached.path, request.pages)
        except DocboundError as e:
            log.warning("Document retrieval failed: %s", e)
            return Failure(e)
        except Exception as e:
            log.exception("Unexpected error during document retrieval")
            return Failure(e)
        return Success((cached, extraction))

    def _respond(
        self, outcome: Result[_Retrieved, Exception], *, note_cached: bool = False
    ) -> GovernedResponse:
        if isinstance(outcome, Failure):
            return self._error_response(outcome.error)

        cached, extraction = outcome.value
        content = extraction.text
        if note_cached and cached.was_cached:
            content += CACHED_NOTE

        result = DocumentResult(
            success=True,
            content=content,
            files=extraction.contained_files or None,
            metadata={
                "filename": cached.name,
                "size": f"{cached.size_mb} MB",
                "type": file_kind(cached.path).value,
                "pages": extraction.total_pages or None,
                "extracted_pages": extraction.extracted_pages or None,
            },
        )
        return self.govern_response(result.to_dict())

    def _error_response(self, error: Exception) -> GovernedResponse:
        result = DocumentResult(
            success=False,
            error=str(error),
            error_type=type(error).__name__,
        )
        response = self.governor.govern(result.to_dict())
        return dataclasses.replace(
            response, is_error=True, advisory_message=str(error)
        )


# --- Convenience functions ---


def download_and_extract(
    url: str,
    max_size_mb: float | None = None,
    pages: PageSelector = ALL_PAGES,
    *,
    cfg: FrozenConfig | None = None,
) -> GovernedResponse:
    """Download and extract a document with a freshly resolved configuration.

    Example:
        ```python
        from docbound import PageRange, download_and_extract

        response = download_and_extract(
            "https://example.com/annual-report.pdf", pages=PageRange(1, 3)
        )
        print(response.payload)
        ```
    """
    return DocumentService(cfg).download_and_extract(url, max_size_mb, pages)


def read_document_pages(
    filename: str | None = None,
    url: str | None = None,
    pages: PageSelector = ALL_PAGES,
    max_size_mb: float | None = None,
    *,
    cfg: FrozenConfig | None = None,
) -> GovernedResponse:
    """Read pages from a cached (or downloadable) PDF."""
    return DocumentService(cfg).read_document_pages(filename, url, pages, max_size_mb)


def govern_response(
    value: Any,
    options: LimitOptions | None = None,
    *,
    cfg: FrozenConfig | None = None,
) -> GovernedResponse:
    """Bound an arbitrary value under the configured word ceiling."""
    return DocumentService(cfg).govern_response(value, options)
