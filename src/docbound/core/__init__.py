"""Core data types for docbound."""

from .types import (
    ALL_PAGES,
    AllPages,
    CachedFile,
    DocumentResult,
    ExplicitPages,
    ExtractionResult,
    Failure,
    PageRange,
    PageSelector,
    Result,
    RetrievalRequest,
    Success,
    page_selector,
)

__all__ = [
    "ALL_PAGES",
    "AllPages",
    "CachedFile",
    "DocumentResult",
    "ExplicitPages",
    "ExtractionResult",
    "Failure",
    "PageRange",
    "PageSelector",
    "Result",
    "RetrievalRequest",
    "Success",
    "page_selector",
]
