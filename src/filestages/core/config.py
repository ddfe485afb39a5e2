# src/filestages/core/config.py
"""
Runtime settings for filestages.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from filestages.core.logging import configure_logging


class LoggingSettings(BaseModel):
    """Logging output options."""

    model_config = {"frozen": True, "extra": "forbid"}

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    json_output: bool = False

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper()
        return v


class FilestagesSettings(BaseModel):
    """Top-level settings.

    stage_defaults maps a stage name to options applied underneath the
    options the host passes when creating that stage. Example YAML:

        logging:
          level: DEBUG
        stage_defaults:
          read_folder:
            pause_ms: 1000
    """

    model_config = {"frozen": True, "extra": "forbid"}

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    stage_defaults: dict[str, dict[str, Any]] = Field(default_factory=dict)

    def defaults_for(self, stage_name: str) -> dict[str, Any]:
        """Return a copy of the configured defaults for one stage."""
        return dict(self.stage_defaults.get(stage_name, {}))


def load_settings(config_path: Path | None = None) -> FilestagesSettings:
    """Load settings from an optional YAML file with environment overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (FILESTAGES_*) - highest priority
    2. Config file, if given
    3. Defaults from the Pydantic models - lowest priority

    Environment variable format: FILESTAGES_LOGGING__LEVEL for nested keys.

    Args:
        config_path: Path to YAML configuration file, or None for
            environment and defaults only

    Returns:
        Validated FilestagesSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config_path is given but doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if config_path is not None and not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="FILESTAGES",
        settings_files=[str(config_path)] if config_path is not None else [],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    # Dynaconf returns uppercase top-level keys and adds its own bookkeeping
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k.lower(): _lower_keys(v) for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}

    return FilestagesSettings(**raw_config)


def _lower_keys(value: Any) -> Any:
    """Lowercase nested mapping keys (env overrides arrive uppercased)."""
    if isinstance(value, dict):
        return {str(k).lower(): _lower_keys(v) for k, v in value.items()}
    return value


def configure_logging_from_settings(settings: FilestagesSettings) -> None:
    """Apply the logging section of settings."""
    configure_logging(json_output=settings.logging.json_output, level=settings.logging.level)
