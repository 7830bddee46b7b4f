"""Text extraction from cached PDFs, ZIP archives and text files"""

from abc import ABC, abstractmethod
import logging
import os
from pathlib import Path
import shutil
import uuid
import zipfile

import fitz  # PyMuPDF

from ..config import FrozenConfig
from ..constants import SEPARATOR_WIDTH
from ..core.types import (
    ALL_PAGES,
    ExplicitPages,
    ExtractionResult,
    PageRange,
    PageSelector,
)
from ..exceptions import ExtractionError, FileError, UnsupportedTypeError
from ..telemetry import TelemetryContext, TelemetryContextProtocol
from .scanner import iter_files
from .utils import SUPPORTED_EXTENSIONS, FileKind, extraction_dir_for, file_kind

log = logging.getLogger(__name__)

SEPARATOR = "=" * SEPARATOR_WIDTH
TRUNCATION_MARKER = "\n\n[Content truncated - file too large]\n"


def select_pages(total_pages: int, selector: PageSelector) -> tuple[list[int], str]:
    """Resolve a selector against a page count.

    Returns the 1-based page numbers to render, in render order, and the
    descriptor reported back to the caller.
    """
    if isinstance(selector, ExplicitPages) and selector.pages:
        numbers = [p for p in selector.pages if 1 <= p <= total_pages]
        descriptor = ", ".join(str(p) for p in numbers)
    elif isinstance(selector, PageRange):
        start, end = selector.clamp(total_pages)
        numbers = list(range(start, end + 1))
        descriptor = f"{start}-{end}"
    else:
        numbers = list(range(1, total_pages + 1))
        descriptor = f"1-{total_pages}"
    if not numbers:
        descriptor = "none"
    return numbers, descriptor


class BaseExtractor(ABC):
    """Base class for content extractors"""

    kind: FileKind = FileKind.UNKNOWN

    def __init__(
        self,
        config: FrozenConfig | None = None,
        *,
        telemetry: TelemetryContextProtocol | None = None,
    ):
        self.config = config or FrozenConfig()
        self.tele = telemetry or TelemetryContext()

    def can_extract(self, path: Path) -> bool:
        """Check if this extractor can handle the file type"""
        return file_kind(path) is self.kind

    @abstractmethod
    def extract(self, path: Path, pages: PageSelector = ALL_PAGES) -> ExtractionResult:
        """Extract text from the file"""


class PdfExtractor(BaseExtractor):
    """Per-page text from PDF documents.

    Parse failures never raise: they produce a degraded result carrying a
    diagnostic so one bad document cannot break a batch of retrievals.
    """

    kind = FileKind.PDF

    def read_pages(self, path: Path) -> list[str]:
        with fitz.open(str(path)) as doc:
            return [page.get_text() for page in doc]

    def extract(self, path: Path, pages: PageSelector = ALL_PAGES) -> ExtractionResult:
        with self.tele("extract.pdf", file=path.name):
            try:
                page_texts = self.read_pages(path)
            except Exception as e:
                log.warning("PDF text extraction failed for %s: %s", path, e)
                return ExtractionResult(
                    text=(
                        f"PDF file: {path.name}\n\n"
                        f"Error extracting text: {e}\n\n"
                        f"File location: {path}"
                    ),
                    total_pages=0,
                    extracted_pages="error",
                    degraded=True,
                )

            total = len(page_texts)
            numbers, descriptor = select_pages(total, pages)
            body = "".join(
                f"\n\n--- PAGE {n} ---\n\n{page_texts[n - 1]}" for n in numbers
            )
            self.tele.metric("pages_extracted", len(numbers))

        header = (
            f"PDF: {path.name}\n"
            f"Total Pages: {total} | Extracted Pages: {descriptor} | "
            f"Text Length: {len(body)} characters\n\n"
        )
        return ExtractionResult(
            text=f"{header}{SEPARATOR}\n{body}",
            total_pages=total,
            extracted_pages=descriptor,
        )


class TextExtractor(BaseExtractor):
    """Read text-like files verbatim"""

    kind = FileKind.TEXT

    def extract(self, path: Path, pages: PageSelector = ALL_PAGES) -> ExtractionResult:
        with self.tele("extract.text", file=path.name):
            try:
                text = path.read_text(encoding="utf-8", errors="replace")
            except OSError as e:
                raise FileError(f"Failed to read {path}: {e}") from e
        return ExtractionResult(text=text)


class ArchiveExtractor(BaseExtractor):
    """Expand a ZIP archive next to itself and extract every entry.

    The expansion directory doubles as a cache: when it already holds files
    the archive is not expanded again.
    """

    kind = FileKind.ARCHIVE

    def __init__(
        self,
        config: FrozenConfig | None = None,
        *,
        pdf_extractor: PdfExtractor | None = None,
        telemetry: TelemetryContextProtocol | None = None,
    ):
        super().__init__(config, telemetry=telemetry)
        self.pdf_extractor = pdf_extractor or PdfExtractor(
            self.config, telemetry=self.tele
        )

    def extract(self, path: Path, pages: PageSelector = ALL_PAGES) -> ExtractionResult:
        with self.tele("extract.zip", file=path.name):
            target = extraction_dir_for(path)
            if self._has_contents(target):
                log.info("Using cached extraction: %s", target.name)
            else:
                log.info("Extracting ZIP: %s", path.name)
                self.expand(path, target)

            files = list(iter_files(target, include_hidden=True))
            parts = [f"Extracted {len(files)} file(s):\n\n"]
            for entry in files:
                parts.append(f"\n{SEPARATOR}\nFile: {entry.name}\n{SEPARATOR}\n\n")
                parts.append(self._render_entry(entry))

        return ExtractionResult(
            text="".join(parts),
            contained_files=tuple(f.relative_to(target).as_posix() for f in files),
        )

    def expand(self, archive: Path, target: Path) -> None:
        """Expand into a temporary sibling, then move it into place."""
        staging = target.with_name(f".{target.name}.{uuid.uuid4().hex}.tmp")
        try:
            with zipfile.ZipFile(archive) as zf:
                zf.extractall(staging)
            staging.mkdir(exist_ok=True)
            if target.is_dir() and not any(target.iterdir()):
                target.rmdir()
            try:
                os.replace(staging, target)
            except OSError:
                # Another caller finished first; its expansion is used
                if not self._has_contents(target):
                    raise
        except (zipfile.BadZipFile, OSError) as e:
            raise ExtractionError(
                f"ZIP extraction failed for {archive.name}: {e}"
            ) from e
        finally:
            if staging.exists():
                shutil.rmtree(staging, ignore_errors=True)

    @staticmethod
    def _has_contents(directory: Path) -> bool:
        return directory.is_dir() and any(directory.iterdir())

    def _cap(self, text: str) -> str:
        limit = self.config.container_entry_char_limit
        if len(text) > limit:
            return text[:limit] + TRUNCATION_MARKER
        return text + "\n"

    def _render_entry(self, entry: Path) -> str:
        kind = file_kind(entry)
        if kind is FileKind.TEXT:
            try:
                content = entry.read_text(encoding="utf-8", errors="replace")
            except OSError as e:
                return f"[Error reading file: {e}]\n"
            return self._cap(content)
        if kind is FileKind.PDF:
            return self._cap(self.pdf_extractor.extract(entry, ALL_PAGES).text)
        return f"[Binary file - {entry.suffix.lower() or 'no extension'}]\n"


class ExtractorManager:
    """Picks the extractor for a file by its extension"""

    def __init__(
        self,
        config: FrozenConfig | None = None,
        *,
        telemetry: TelemetryContextProtocol | None = None,
    ):
        self.config = config or FrozenConfig()
        pdf = PdfExtractor(self.config, telemetry=telemetry)
        self.extractors: list[BaseExtractor] = [
            pdf,
            ArchiveExtractor(self.config, pdf_extractor=pdf, telemetry=telemetry),
            TextExtractor(self.config, telemetry=telemetry),
        ]

    def extract(
        self, path: str | Path, pages: PageSelector = ALL_PAGES
    ) -> ExtractionResult:
        """Extract using the first capable extractor.

        Raises:
            UnsupportedTypeError: No extractor handles the extension.
            ExtractionError: An archive could not be expanded.
        """
        path = Path(path)
        for extractor in self.extractors:
            if extractor.can_extract(path):
                return extractor.extract(path, pages)

        raise UnsupportedTypeError(
            f"Unsupported file type: {path.suffix.lower() or '(none)'}. "
            f"Supported: {', '.join(SUPPORTED_EXTENSIONS)}",
            supported=SUPPORTED_EXTENSIONS,
        )

    def get_supported_extensions(self) -> tuple[str, ...]:
        return SUPPORTED_EXTENSIONS
