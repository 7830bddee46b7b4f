"""Streaming HTTP downloads into the local cache"""

import logging
import os
from pathlib import Path
import uuid
from urllib.parse import urljoin

import httpx

from ..config import FrozenConfig
from ..constants import DOWNLOAD_CHUNK_SIZE, REDIRECT_STATUSES
from ..exceptions import (
    FetchError,
    FetchTimeoutError,
    FileError,
    HTTPStatusError,
    SizeExceededError,
)
from ..telemetry import TelemetryContext, TelemetryContextProtocol

log = logging.getLogger(__name__)

_MB = 1024 * 1024


def _mb(size: int) -> str:
    return f"{size / _MB:.2f} MB"


class Fetcher:
    """Downloads one URL to one destination path.

    Redirects are followed hop by hop, the byte ceiling is checked against
    `Content-Length` and again while streaming, and bytes land in a temporary
    file that replaces the destination only on success. Whether to download
    at all is the caller's decision; the fetcher never checks the cache.
    """

    def __init__(
        self,
        config: FrozenConfig | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
        telemetry: TelemetryContextProtocol | None = None,
    ):
        self.config = config or FrozenConfig()
        self.timeout = self.config.fetch_timeout
        self._transport = transport
        self.tele = telemetry or TelemetryContext()

    def _create_http_client(self) -> httpx.Client:
        """Create a configured HTTP client - centralized configuration"""
        return httpx.Client(
            timeout=self.timeout,
            follow_redirects=False,
            headers={"User-Agent": self.config.user_agent},
            transport=self._transport,
        )

    def fetch(
        self, url: str, destination: str | Path, max_bytes: int | None = None
    ) -> int:
        """Download `url` to `destination` and return the number of bytes written.

        Raises:
            SizeExceededError: The advertised or streamed size passed `max_bytes`.
            FetchTimeoutError: The network stalled past the configured timeout.
            HTTPStatusError: The terminal response was not 2xx.
            FetchError: Too many redirects or another transport failure.
            FileError: The destination could not be written.
        """
        destination = Path(destination)
        max_bytes = max_bytes or self.config.max_download_bytes

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FileError(f"Cannot create cache directory: {e}") from e

        log.info("Downloading: %s", url)
        with self.tele("fetch", url=url):
            try:
                with self._create_http_client() as client:
                    written = self._fetch_following_redirects(
                        client, url, destination, max_bytes
                    )
            except httpx.TimeoutException as e:
                raise FetchTimeoutError(f"Download timeout: {url}", url=url) from e
            except httpx.HTTPError as e:
                raise FetchError(f"Failed to fetch URL {url}: {e}", url=url) from e
            self.tele.metric("bytes_downloaded", written)

        log.info("Downloaded: %s (%s)", destination.name, _mb(written))
        return written

    def _fetch_following_redirects(
        self,
        client: httpx.Client,
        url: str,
        destination: Path,
        max_bytes: int,
    ) -> int:
        current = url
        for _ in range(self.config.max_redirects + 1):
            with client.stream("GET", current) as response:
                location = response.headers.get("location")
                if response.status_code in REDIRECT_STATUSES and location:
                    target = urljoin(current, location)
                    log.debug(
                        "Redirect %d: %s -> %s", response.status_code, current, target
                    )
                    current = target
                    continue

                if not response.is_success:
                    raise HTTPStatusError(response.status_code, url=current)

                self._check_advertised_size(response, current, max_bytes)
                return self._stream_to_file(response, current, destination, max_bytes)

        raise FetchError(
            f"Too many redirects (more than {self.config.max_redirects}): {url}",
            url=url,
        )

    @staticmethod
    def _check_advertised_size(
        response: httpx.Response, url: str, max_bytes: int
    ) -> None:
        raw = response.headers.get("content-length")
        try:
            advertised = int(raw) if raw else 0
        except ValueError:
            advertised = 0
        if advertised > max_bytes:
            raise SizeExceededError(
                f"File too large: {_mb(advertised)} (max: {_mb(max_bytes)})",
                url=url,
                max_bytes=max_bytes,
                size_bytes=advertised,
            )

    @staticmethod
    def _stream_to_file(
        response: httpx.Response, url: str, destination: Path, max_bytes: int
    ) -> int:
        partial = destination.with_name(
            f".{destination.name}.{uuid.uuid4().hex}.part"
        )
        written = 0
        try:
            with partial.open("wb") as fh:
                for chunk in response.iter_bytes(DOWNLOAD_CHUNK_SIZE):
                    written += len(chunk)
                    if written > max_bytes:
                        raise SizeExceededError(
                            "File exceeded size limit during download "
                            f"(max: {_mb(max_bytes)})",
                            url=url,
                            max_bytes=max_bytes,
                        )
                    fh.write(chunk)
            os.replace(partial, destination)
        except OSError as e:
            raise FileError(f"Failed to write {destination}: {e}") from e
        finally:
            partial.unlink(missing_ok=True)
        return written
