"""Configuration schema and validation using Pydantic.

This module defines the settings schema that validates and coerces configuration
values from various sources (environment, files, programmatic) into the correct
types with proper defaults.
"""

from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from docbound import constants


class DocboundSettings(BaseSettings):
    """Pydantic settings schema for docbound configuration.

    This handles validation, type coercion, and default values for all
    configuration fields. It integrates with environment variables using
    the DOCBOUND_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="DOCBOUND_",
        env_file=None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Retrieval ---

    cache_dir: Path = Field(
        default=Path(constants.DEFAULT_CACHE_DIR),
        description="Directory holding downloaded files and expanded archives",
    )

    max_download_mb: float = Field(
        default=constants.DEFAULT_MAX_DOWNLOAD_MB,
        description="Default per-download size ceiling in megabytes",
        gt=0,
    )

    fetch_timeout: float = Field(
        default=constants.FETCH_TIMEOUT,
        description="Network timeout in seconds",
        gt=0,
    )

    max_redirects: int = Field(
        default=constants.MAX_REDIRECTS,
        description="Maximum redirect hops followed per download",
        ge=0,
    )

    user_agent: str = Field(
        default=constants.USER_AGENT,
        description="User-Agent header sent with downloads",
        min_length=1,
    )

    container_entry_char_limit: int = Field(
        default=constants.CONTAINER_ENTRY_CHAR_LIMIT,
        description="Characters kept per archive entry",
        ge=1,
    )

    # --- Response governor ---

    max_words: int = Field(
        default=constants.MAX_WORDS,
        description="Word ceiling for a governed response",
        ge=1,
    )

    tokens_per_word: float = Field(
        default=constants.TOKENS_PER_WORD,
        description="Multiplier used for the token estimate",
        gt=0,
    )

    chars_per_word: int = Field(
        default=constants.CHARS_PER_WORD,
        description="Average characters per word used for the character estimate",
        ge=1,
    )

    nested_list_limit: int = Field(
        default=constants.NESTED_LIST_LIMIT,
        description="Elements kept from each long list inside an oversized record",
        ge=1,
    )

    sample_text_chars: int = Field(
        default=constants.SAMPLE_TEXT_CHARS,
        description="Characters kept from long strings in metadata samples",
        ge=1,
    )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary keyed by field name."""
        return {name: getattr(self, name) for name in type(self).model_fields}
