"""
Cache directory traversal
"""

from collections import deque
from collections.abc import Iterator
import logging
import os
from pathlib import Path

log = logging.getLogger(__name__)


def _is_hidden(name: str) -> bool:
    # In-flight downloads and expansions use hidden temporary names
    return name.startswith(".")


def iter_files(root: str | Path, *, include_hidden: bool = False) -> Iterator[Path]:
    """Yield every file under `root`, depth-first, sorted within each directory.

    A directory's own files come before the contents of its subdirectories.
    Dot-named entries are skipped unless `include_hidden` is set.

    Uses an explicit stack of pending directories, so arbitrarily deep trees
    never hit the recursion limit. Unreadable directories are skipped.
    """
    root = Path(root)
    if not root.is_dir():
        return

    pending: deque[Path] = deque([root])
    while pending:
        current = pending.pop()
        try:
            with os.scandir(current) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            log.debug("Skipping unreadable directory %s: %s", current, e)
            continue

        subdirs = []
        for entry in entries:
            if not include_hidden and _is_hidden(entry.name):
                continue
            try:
                if entry.is_dir(follow_symlinks=False):
                    subdirs.append(Path(entry.path))
                elif entry.is_file():
                    yield Path(entry.path)
            except OSError:
                continue
        # Reversed so the alphabetically first subdirectory is walked next
        pending.extend(reversed(subdirs))


def find_by_basename(root: str | Path, filename: str) -> Path | None:
    """First file under `root` whose name equals `filename`."""
    for path in iter_files(root):
        if path.name == filename:
            return path
    return None
