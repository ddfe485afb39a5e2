# src/filestages/plugins/config_base.py
"""Base classes for typed stage configurations.

Stages receive their options as plain dicts from the host runtime. These
models give every stage:
- Strict validation (reject unknown fields)
- A factory method with clear error messages
- Common validation patterns (path handling, text/binary output mode)

Example usage:
    class ReadFolderConfig(PathConfig):
        pause_ms: int = 5000

    cfg = ReadFolderConfig.from_dict(options)
    path = cfg.path  # Direct access, fails fast if missing
"""

import codecs
from pathlib import Path
from typing import Any, Self

from pydantic import BaseModel, Field, ValidationError, field_validator


class PluginConfigError(Exception):
    """Raised when stage configuration is invalid."""

    pass


class StageConfig(BaseModel):
    """Base class for typed stage configurations.

    All stage configs should inherit from this class.
    """

    model_config = {"extra": "forbid"}  # Reject unknown fields

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> Self:
        """Create config from dict with clear error on validation failure.

        Args:
            config: Dictionary of configuration values.

        Returns:
            Validated configuration instance.

        Raises:
            PluginConfigError: If configuration is invalid.
        """
        if not isinstance(config, dict):
            raise PluginConfigError(f"Invalid configuration for {cls.__name__}: config must be a dict, got {type(config).__name__}.")

        try:
            return cls.model_validate(config)
        except ValidationError as e:
            raise PluginConfigError(f"Invalid configuration for {cls.__name__}: {e}") from e
        except ValueError as e:
            raise PluginConfigError(f"Invalid configuration for {cls.__name__}: {e}") from e


class TextConfig(StageConfig):
    """Base for stages that decode bytes into text records."""

    encoding: str = Field(
        default="utf-8",
        description="Codec used when bytes are turned into text records",
    )

    @field_validator("encoding")
    @classmethod
    def validate_encoding(cls, v: str) -> str:
        """Reject codec names Python doesn't know."""
        try:
            codecs.lookup(v)
        except LookupError as e:
            raise ValueError(f"unknown encoding: {v}") from e
        return v

    def decode(self, data: bytes) -> str:
        """Decode bytes, substituting U+FFFD for undecodable sequences."""
        return data.decode(self.encoding, errors="replace")


class OutputModeConfig(TextConfig):
    """Config for expansion stages that emit either text or raw bytes."""

    output_as_buffer: bool = Field(
        default=False,
        description="Emit raw bytes instead of decoded text",
    )

    def render(self, data: bytes) -> str | bytes:
        """Turn extracted bytes into the configured record type."""
        return data if self.output_as_buffer else self.decode(data)


class PathConfig(TextConfig):
    """Base for configs that include a filesystem path."""

    path: str

    @field_validator("path")
    @classmethod
    def validate_path_not_empty(cls, v: str) -> str:
        """Validate that path is not empty or whitespace-only."""
        if not v or not v.strip():
            raise ValueError("path cannot be empty")
        return v

    def resolved_path(self, base_dir: Path | None = None) -> Path:
        """Resolve path relative to base directory if provided.

        Args:
            base_dir: Base directory for relative path resolution.
                     If None, path is returned as-is.

        Returns:
            Resolved Path object.
        """
        p = Path(self.path)
        if base_dir and not p.is_absolute():
            return base_dir / p
        return p
