"""Configuration management for docbound.

- DocboundSettings: Pydantic schema with defaults and validation
- FrozenConfig: Immutable configuration passed into every component
- resolve_config: Merge programmatic, environment, file and default values
"""

from .file_loader import ConfigFileError, FileConfigLoader
from .resolver import ConfigResolver, resolve_config
from .schema import DocboundSettings
from .types import ConfigOrigin, FrozenConfig, SourceMap, mb_to_bytes

__all__ = [
    "ConfigFileError",
    "ConfigOrigin",
    "ConfigResolver",
    "DocboundSettings",
    "FileConfigLoader",
    "FrozenConfig",
    "SourceMap",
    "mb_to_bytes",
    "resolve_config",
]
