"""Exceptions raised by docbound."""


class DocboundError(Exception):
    """Base exception for document retrieval and response governing errors."""


class ConfigurationError(DocboundError):
    """Raised when configuration values are invalid."""


class ValidationError(DocboundError):
    """Raised when input validation fails."""


class FileError(DocboundError):
    """Raised when local file operations fail."""


class NotFoundAndNoUrlError(FileError):
    """Raised when a file is not cached and no URL was given to fetch it."""

    def __init__(self, filename: str) -> None:
        self.filename = filename
        super().__init__(
            f"File not found in cache: {filename}. "
            "Please provide a URL to download it."
        )


class ExtractionError(FileError):
    """Raised when a container cannot be expanded."""


class UnsupportedTypeError(DocboundError):
    """Raised when a file extension is not in the supported set."""

    def __init__(self, message: str, supported: tuple[str, ...] = ()) -> None:
        self.supported = supported
        super().__init__(message)


class FetchError(DocboundError):
    """Raised when a remote resource cannot be downloaded."""

    def __init__(self, message: str, url: str | None = None) -> None:
        self.url = url
        super().__init__(message)


class SizeExceededError(FetchError):
    """Raised when a download breaches its byte ceiling."""

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        max_bytes: int,
        size_bytes: int | None = None,
    ) -> None:
        self.max_bytes = max_bytes
        self.size_bytes = size_bytes
        super().__init__(message, url=url)


class FetchTimeoutError(FetchError):
    """Raised when the network stalls past the fetch timeout."""


class HTTPStatusError(FetchError):
    """Raised when the terminal HTTP response is not 2xx."""

    def __init__(self, status_code: int, url: str | None = None) -> None:
        self.status_code = status_code
        super().__init__(f"Failed to download: HTTP {status_code}", url=url)
