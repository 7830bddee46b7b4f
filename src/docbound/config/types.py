"""Core configuration data types.

Configuration follows a resolve-once, freeze-then-flow pattern: values are
merged and validated a single time, then passed by reference into each
component constructor.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Literal

from docbound import constants

ConfigOrigin = Literal["programmatic", "env", "file", "default"]
SourceMap = Mapping[str, ConfigOrigin]

_MB = 1024 * 1024


@dataclass(frozen=True)
class FrozenConfig:
    """Immutable configuration shared by the fetcher, extractor and governor.

    Any attempt to modify this object will raise an exception; use
    `with_overrides()` to derive a variant.
    """

    cache_dir: Path = Path(constants.DEFAULT_CACHE_DIR)
    max_download_mb: float = constants.DEFAULT_MAX_DOWNLOAD_MB
    fetch_timeout: float = constants.FETCH_TIMEOUT
    max_redirects: int = constants.MAX_REDIRECTS
    user_agent: str = constants.USER_AGENT
    container_entry_char_limit: int = constants.CONTAINER_ENTRY_CHAR_LIMIT
    max_words: int = constants.MAX_WORDS
    tokens_per_word: float = constants.TOKENS_PER_WORD
    chars_per_word: int = constants.CHARS_PER_WORD
    nested_list_limit: int = constants.NESTED_LIST_LIMIT
    sample_text_chars: int = constants.SAMPLE_TEXT_CHARS

    # Audit metadata, not part of equality
    origin: SourceMap = field(default_factory=dict, compare=False, repr=False)

    @property
    def max_download_bytes(self) -> int:
        """Default download ceiling in bytes."""
        return mb_to_bytes(self.max_download_mb)

    def with_overrides(self, **overrides: object) -> "FrozenConfig":
        """Return a copy with the given fields replaced.

        Unknown fields are ignored, matching how the resolver treats them.
        """
        known = {f.name for f in fields(self)} - {"origin"}
        applied = {k: v for k, v in overrides.items() if k in known}
        if "cache_dir" in applied:
            applied["cache_dir"] = Path(applied["cache_dir"])  # type: ignore[arg-type]
        origin = dict(self.origin)
        origin.update(dict.fromkeys(applied, "programmatic"))
        return replace(self, origin=origin, **applied)  # type: ignore[arg-type]

    def audit(self) -> str:
        """Human-readable report showing where each value came from."""
        lines = []
        for f in fields(self):
            if f.name == "origin":
                continue
            origin = self.origin.get(f.name, "default")
            value = getattr(self, f.name)
            if origin == "env":
                lines.append(f"{f.name}: env:DOCBOUND_{f.name.upper()}={value}")
            else:
                lines.append(f"{f.name}: {origin}:{value}")
        return "\n".join(lines)


def mb_to_bytes(megabytes: float) -> int:
    """Convert a size in megabytes to bytes."""
    return int(megabytes * _MB)
