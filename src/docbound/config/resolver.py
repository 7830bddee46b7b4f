"""Configuration resolution with precedence handling.

Precedence order: Programmatic > Environment > Project file > Defaults
"""

import logging
import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import ValidationError as PydanticValidationError

from docbound.exceptions import ConfigurationError

from .file_loader import FileConfigLoader
from .schema import DocboundSettings
from .types import ConfigOrigin, FrozenConfig

log = logging.getLogger(__name__)

ENV_PREFIX = "DOCBOUND_"


class ConfigResolver:
    """Resolves configuration from multiple sources with proper precedence."""

    def __init__(self) -> None:
        self.file_loader = FileConfigLoader()

    def resolve(
        self,
        overrides: dict[str, Any] | None = None,
        *,
        env_file: str | Path | None = None,
        project_root: Path | None = None,
    ) -> FrozenConfig:
        """Resolve configuration from all sources.

        Args:
            overrides: Programmatic overrides (highest precedence). Unknown
                fields are ignored.
            env_file: Optional .env file loaded before reading the environment.
                Existing environment variables are never overwritten.
            project_root: Directory to search for pyproject.toml.

        Returns:
            FrozenConfig with merged values and source tracking.

        Raises:
            ConfigurationError: If a merged value fails validation.
            ConfigFileError: If pyproject.toml exists but is malformed.
        """
        merged: dict[str, Any] = {}
        origin: dict[str, ConfigOrigin] = {}
        field_names = tuple(DocboundSettings.model_fields)

        def apply(values: dict[str, Any], source: ConfigOrigin) -> None:
            for name, value in values.items():
                if name in field_names:
                    merged[name] = value
                    origin[name] = source

        apply(DocboundSettings.model_construct().to_dict(), "default")
        apply(self.file_loader.load_project_config(project_root), "file")

        if env_file:
            env_path = Path(env_file)
            if not env_path.exists():
                raise ConfigurationError(f"Environment file not found: {env_path}")
            load_dotenv(env_path, override=False)
        apply(self._load_env(field_names), "env")

        if overrides:
            apply(overrides, "programmatic")

        try:
            settings = DocboundSettings(**merged)
        except PydanticValidationError as e:
            raise ConfigurationError(f"Configuration validation failed: {e}") from e

        log.debug("Resolved configuration origins: %s", origin)
        return FrozenConfig(**settings.to_dict(), origin=origin)

    @staticmethod
    def _load_env(field_names: tuple[str, ...]) -> dict[str, str]:
        values = {}
        for name in field_names:
            env_var = f"{ENV_PREFIX}{name.upper()}"
            if env_var in os.environ:
                values[name] = os.environ[env_var]
        return values


_resolver = ConfigResolver()


def resolve_config(
    overrides: dict[str, Any] | None = None,
    *,
    env_file: str | Path | None = None,
    project_root: Path | None = None,
) -> FrozenConfig:
    """Resolve configuration from all sources with proper precedence.

    Example:
        config = resolve_config()
        config = resolve_config({"cache_dir": "/tmp/docs", "max_words": 2000})
    """
    return _resolver.resolve(overrides, env_file=env_file, project_root=project_root)
