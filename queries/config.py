"""queries Configuration.

Includes:
- EngineSettings: Runtime settings with environment variable support

Environment Variables:
    QUERIES_SMALL_DATA_REGIME_THRESHOLD: Training examples below which tagging
        augments the statistical parser (default: 5)
    QUERIES_LOG_LEVEL: Log level used by the CLI (default: WARNING)
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SMALL_DATA_REGIME_THRESHOLD = 5


class EngineSettings(BaseSettings):
    """Engine settings with environment variable support.

    Settings are loaded from environment variables with QUERIES_ prefix.
    For example, QUERIES_LOG_LEVEL sets log_level.

    Precedence (highest to lowest):
        1. Settings file passed to ``load``
        2. Environment variables (QUERIES_*)
        3. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="QUERIES_",
        extra="ignore",
    )

    small_data_regime_threshold: int = Field(
        default=DEFAULT_SMALL_DATA_REGIME_THRESHOLD,
        ge=0,
        description="Minimum training examples for trusting statistical slot filling",
    )
    log_level: str = "WARNING"

    @classmethod
    def load(cls, path: Path) -> "EngineSettings":
        """Load settings from a YAML file if it exists.

        Args:
            path: Path to a YAML settings file

        Returns:
            EngineSettings with file values applied over environment and defaults

        Raises:
            ConfigurationError: If the file does not hold a mapping
        """
        from ruamel.yaml import YAML

        from .core.errors import ConfigurationError

        data = {}
        if path.exists():
            yaml = YAML(typ="safe")
            with path.open() as f:
                data = yaml.load(f) or {}

        if not isinstance(data, dict):
            raise ConfigurationError(f"Settings {path} must contain a mapping")

        return cls(**data)


__all__ = ["DEFAULT_SMALL_DATA_REGIME_THRESHOLD", "EngineSettings"]
