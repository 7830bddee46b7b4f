"""
File handling for docbound: fetching, caching, traversal and extraction
"""

from . import utils
from .cache import CacheResolver
from .extractors import (
    ArchiveExtractor,
    BaseExtractor,
    ExtractorManager,
    PdfExtractor,
    TextExtractor,
    select_pages,
)
from .fetcher import Fetcher
from .scanner import find_by_basename, iter_files
from .utils import FileKind, file_kind

__all__ = [  # noqa: RUF022
    "CacheResolver",
    "Fetcher",
    "ExtractorManager",
    "BaseExtractor",
    "PdfExtractor",
    "ArchiveExtractor",
    "TextExtractor",
    "select_pages",
    "FileKind",
    "file_kind",
    "find_by_basename",
    "iter_files",
    "utils",
]
