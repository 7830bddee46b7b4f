"""
Cache resolution: map a filename and/or URL to a local file
"""

from collections.abc import Iterator
from contextlib import contextmanager
import logging
from pathlib import Path
import threading

from ..config import FrozenConfig
from ..core.types import CachedFile
from ..exceptions import NotFoundAndNoUrlError, ValidationError
from .fetcher import Fetcher
from .scanner import find_by_basename
from .utils import filename_from_url, safe_filename

log = logging.getLogger(__name__)


class CacheResolver:
    """Finds cached files and downloads only on a genuine miss.

    The same URL or filename is never downloaded twice while the cached file
    stays on disk. Downloads to the same destination are serialized by a
    per-path lock; after taking the lock the path is checked again, so a
    caller that lost the race reuses the winner's file. A path's lock is
    dropped from the registry once no caller holds or awaits it.
    """

    def __init__(self, config: FrozenConfig | None = None, fetcher: Fetcher | None = None):
        self.config = config or FrozenConfig()
        self.fetcher = fetcher or Fetcher(self.config)
        self._locks: dict[Path, tuple[threading.Lock, int]] = {}
        self._locks_guard = threading.Lock()

    @property
    def cache_root(self) -> Path:
        return Path(self.config.cache_dir)

    def resolve(
        self,
        filename: str | None = None,
        url: str | None = None,
        *,
        max_bytes: int | None = None,
    ) -> CachedFile:
        """Return the cached file for `filename` and/or `url`.

        Raises:
            ValidationError: Neither argument was given.
            NotFoundAndNoUrlError: `filename` is not cached and there is no URL.
            FetchError: The download failed (see `Fetcher.fetch`).
        """
        if filename:
            return self._resolve_filename(safe_filename(filename), url, max_bytes)
        if url:
            return self._resolve_url(url, max_bytes)
        raise ValidationError("Either filename or url must be provided")

    def _resolve_filename(
        self, filename: str, url: str | None, max_bytes: int | None
    ) -> CachedFile:
        direct = self.cache_root / filename
        if direct.is_file():
            log.info("Using cached file: %s", filename)
            return CachedFile.from_path(direct, was_cached=True)

        log.debug("Searching for file: %s in subdirectories...", filename)
        found = find_by_basename(self.cache_root, filename)
        if found is not None:
            log.info("Found cached file: %s", found)
            return CachedFile.from_path(found, was_cached=True)

        if not url:
            raise NotFoundAndNoUrlError(filename)

        log.info("File not cached, downloading from: %s", url)
        return self._download(url, direct, max_bytes)

    def _resolve_url(self, url: str, max_bytes: int | None) -> CachedFile:
        direct = self.cache_root / filename_from_url(url)
        if direct.is_file():
            log.info(
                "File already exists: %s - Skipping download", direct.name
            )
            return CachedFile.from_path(direct, was_cached=True)
        return self._download(url, direct, max_bytes)

    def _download(self, url: str, destination: Path, max_bytes: int | None) -> CachedFile:
        with self._locked(destination):
            if destination.is_file():
                log.info("Downloaded concurrently, reusing: %s", destination.name)
                return CachedFile.from_path(destination, was_cached=True)
            self.fetcher.fetch(url, destination, max_bytes)
        return CachedFile.from_path(destination, was_cached=False)

    @contextmanager
    def _locked(self, path: Path) -> Iterator[None]:
        key = path.resolve()
        with self._locks_guard:
            lock, users = self._locks.get(key, (None, 0))
            lock = lock or threading.Lock()
            self._locks[key] = (lock, users + 1)
        try:
            with lock:
                yield
        finally:
            with self._locks_guard:
                _, users = self._locks[key]
                if users == 1:
                    del self._locks[key]
                else:
                    self._locks[key] = (lock, users - 1)
