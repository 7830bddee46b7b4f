"""Bounded document retrieval and response governing."""

import importlib.metadata
import logging

from docbound.config import FrozenConfig, resolve_config
from docbound.core.types import (
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
from docbound.exceptions import (
    ConfigurationError,
    DocboundError,
    ExtractionError,
    FetchError,
    FetchTimeoutError,
    FileError,
    HTTPStatusError,
    NotFoundAndNoUrlError,
    SizeExceededError,
    UnsupportedTypeError,
    ValidationError,
)
from docbound.frontdoor import (
    DocumentService,
    download_and_extract,
    govern_response,
    read_document_pages,
)
from docbound.governor import (
    GovernedResponse,
    LimitOptions,
    ResponseGovernor,
    ResponseMetadata,
)
from docbound.telemetry import TelemetryContext, TelemetryReporter

try:
    __version__ = importlib.metadata.version("docbound")
except importlib.metadata.PackageNotFoundError:
    __version__ = "development"

# Library code installs no handlers of its own
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [  # noqa: RUF022
    # Entry points
    "DocumentService",
    "download_and_extract",
    "read_document_pages",
    "govern_response",
    # Configuration
    "FrozenConfig",
    "resolve_config",
    # Types
    "ALL_PAGES",
    "AllPages",
    "ExplicitPages",
    "PageRange",
    "PageSelector",
    "page_selector",
    "RetrievalRequest",
    "CachedFile",
    "ExtractionResult",
    "DocumentResult",
    "GovernedResponse",
    "LimitOptions",
    "ResponseGovernor",
    "ResponseMetadata",
    "Success",
    "Failure",
    "Result",
    # Telemetry
    "TelemetryContext",
    "TelemetryReporter",
    # Exceptions
    "DocboundError",
    "ConfigurationError",
    "ValidationError",
    "FileError",
    "NotFoundAndNoUrlError",
    "ExtractionError",
    "UnsupportedTypeError",
    "FetchError",
    "SizeExceededError",
    "FetchTimeoutError",
    "HTTPStatusError",
]
