"""
File kind detection and cache naming helpers
"""

from enum import Enum
from pathlib import Path, PurePosixPath
from urllib.parse import unquote, urlparse

from ..constants import DEFAULT_DOCUMENT_NAME, EXTRACTED_DIR_SUFFIX


class FileKind(Enum):
    """File kinds the extractor understands"""

    PDF = "pdf"  # paginated document
    ARCHIVE = "zip"  # compressed container
    TEXT = "text"  # TXT, CSV, JSON, XML, HTML, Markdown
    UNKNOWN = "unknown"


PDF_EXTENSIONS = frozenset({".pdf"})
ARCHIVE_EXTENSIONS = frozenset({".zip"})
TEXT_EXTENSIONS = frozenset({".txt", ".csv", ".json", ".xml", ".html", ".md"})

# Order used in user-facing messages
SUPPORTED_EXTENSIONS = (".pdf", ".zip", ".txt", ".csv", ".json", ".xml", ".html", ".md")


def file_kind(path: str | Path) -> FileKind:
    """Infer the file kind from the extension"""
    suffix = Path(path).suffix.lower()
    if suffix in PDF_EXTENSIONS:
        return FileKind.PDF
    if suffix in ARCHIVE_EXTENSIONS:
        return FileKind.ARCHIVE
    if suffix in TEXT_EXTENSIONS:
        return FileKind.TEXT
    return FileKind.UNKNOWN


def _usable(name: str) -> str:
    if name in ("", ".", ".."):
        return DEFAULT_DOCUMENT_NAME
    return name


def filename_from_url(url: str) -> str:
    """Basename of the URL path, or a fixed default when the path is empty"""
    name = PurePosixPath(unquote(urlparse(url).path)).name
    return _usable(name)


def safe_filename(filename: str) -> str:
    """Strip directory components so lookups stay inside the cache root"""
    name = PurePosixPath(filename.replace("\\", "/")).name
    return _usable(name)


def extraction_dir_for(archive_path: Path) -> Path:
    """`<archive-stem>_extracted/` next to the archive"""
    return archive_path.with_name(f"{archive_path.stem}{EXTRACTED_DIR_SUFFIX}")
