"""Core data types that flow between the resolver, extractor and governor.

Requests and results are immutable; each call builds fresh instances and
nothing is retained between calls.
"""

from __future__ import annotations

import dataclasses
from pathlib import Path
import typing

from docbound.exceptions import ValidationError

# --- Result type for explicit error handling ---

TSuccess = typing.TypeVar("TSuccess")
TFailure = typing.TypeVar("TFailure", bound=Exception)


@dataclasses.dataclass(frozen=True, slots=True)
class Success(typing.Generic[TSuccess]):
    """A successful outcome."""

    value: TSuccess


@dataclasses.dataclass(frozen=True, slots=True)
class Failure(typing.Generic[TFailure]):
    """A failed outcome, containing the error."""

    error: TFailure


Result = Success[TSuccess] | Failure[TFailure]

# --- Page selection ---


@dataclasses.dataclass(frozen=True, slots=True)
class ExplicitPages:
    """An explicit list of 1-based page numbers, in caller order.

    Duplicates are dropped, keeping the first occurrence.
    """

    pages: tuple[int, ...]

    def __post_init__(self) -> None:
        ordered = tuple(dict.fromkeys(int(p) for p in self.pages))
        object.__setattr__(self, "pages", ordered)


@dataclasses.dataclass(frozen=True, slots=True)
class PageRange:
    """An inclusive page range; `end=None` means the last page."""

    start: int = 1
    end: int | None = None

    def clamp(self, total_pages: int) -> tuple[int, int]:
        """Clamp to `[1, total_pages]`. The result may be empty (start > end)."""
        start = max(1, self.start)
        end = total_pages if self.end is None else min(total_pages, self.end)
        return start, end


@dataclasses.dataclass(frozen=True, slots=True)
class AllPages:
    """Select every page."""


ALL_PAGES = AllPages()

PageSelector = ExplicitPages | PageRange | AllPages


def page_selector(
    start_page: int | None = None,
    end_page: int | None = None,
    pages: typing.Iterable[int] | None = None,
) -> PageSelector:
    """Build a selector from loose tool arguments.

    A non-empty `pages` list wins over a range; no arguments select all pages.
    """
    explicit = tuple(pages or ())
    if explicit:
        return ExplicitPages(explicit)
    if start_page or end_page:
        return PageRange(start=start_page or 1, end=end_page or None)
    return ALL_PAGES


# --- Retrieval ---


@dataclasses.dataclass(frozen=True, slots=True)
class RetrievalRequest:
    """A single retrieval call. At least one of `url`/`filename` is required."""

    url: str | None = None
    filename: str | None = None
    pages: PageSelector = ALL_PAGES
    max_bytes: int = 50 * 1024 * 1024

    def __post_init__(self) -> None:
        if not self.url and not self.filename:
            raise ValidationError("Either filename or url must be provided")
        if self.max_bytes <= 0:
            raise ValidationError("max_bytes must be positive")


@dataclasses.dataclass(frozen=True, slots=True)
class CachedFile:
    """A file present in the local cache."""

    path: Path
    size_bytes: int
    extension: str
    was_cached: bool = False

    @classmethod
    def from_path(cls, path: Path, *, was_cached: bool) -> CachedFile:
        return cls(
            path=path,
            size_bytes=path.stat().st_size,
            extension=path.suffix.lower(),
            was_cached=was_cached,
        )

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def size_mb(self) -> float:
        return round(self.size_bytes / (1024 * 1024), 2)


@dataclasses.dataclass(frozen=True, slots=True)
class ExtractionResult:
    """Text extracted from a local file."""

    text: str
    total_pages: int = 0
    extracted_pages: str = ""
    contained_files: tuple[str, ...] = ()
    degraded: bool = False


@dataclasses.dataclass(frozen=True, slots=True)
class DocumentResult:
    """The record a retrieval entry point hands to the governor."""

    success: bool
    content: str | None = None
    files: tuple[str, ...] | None = None
    error: str | None = None
    error_type: str | None = None
    metadata: typing.Mapping[str, typing.Any] | None = None

    def to_dict(self) -> dict[str, typing.Any]:
        """Plain-dict form; unset fields are omitted."""
        data: dict[str, typing.Any] = {"success": self.success}
        if self.content is not None:
            data["content"] = self.content
        if self.files is not None:
            data["files"] = list(self.files)
        if self.error is not None:
            data["error"] = self.error
        if self.error_type is not None:
            data["error_type"] = self.error_type
        if self.metadata is not None:
            data["metadata"] = {
                k: v for k, v in self.metadata.items() if v is not None
            }
        return data
