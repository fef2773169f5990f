"""Configuration management for fieldcheck using Pydantic models."""

import json
import logging
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

CONFIG_FILE_NAME = ".fieldcheck.json"


class LogLevel(str, Enum):
    """Logging levels."""
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"


_LEVELS = {
    LogLevel.ERROR: logging.ERROR,
    LogLevel.WARN: logging.WARNING,
    LogLevel.INFO: logging.INFO,
    LogLevel.DEBUG: logging.DEBUG,
}


class EngineConfig(BaseModel):
    """Validation engine configuration section."""
    generic_message: str = Field(alias="genericMessage", default="Validation error for {field}")
    cache_descriptors: bool = Field(alias="cacheDescriptors", default=True)
    freeze_registry_on_first_use: bool = Field(alias="freezeRegistryOnFirstUse", default=True)

    @field_validator("generic_message")
    @classmethod
    def validate_generic_message(cls, v):
        if "{field}" not in v:
            raise ValueError("generic_message must contain the '{field}' placeholder")
        return v

    model_config = ConfigDict(populate_by_name=True)


class LoggingConfig(BaseModel):
    """Logging configuration section."""
    level: LogLevel = LogLevel.WARN


class FieldcheckConfig(BaseModel):
    """Complete fieldcheck configuration model."""
    engine: EngineConfig = Field(default_factory=EngineConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(extra="forbid")


def load_config(config_path: str | Path | None = None) -> FieldcheckConfig:
    """Load configuration from file with fallback to defaults.

    Args:
        config_path: Optional path to configuration file. If None, searches
                    current directory and parents for .fieldcheck.json

    Returns:
        FieldcheckConfig: Loaded and validated configuration

    Raises:
        ValueError: If configuration is invalid
    """
    if config_path is None:
        config_path = find_config_file()
    else:
        config_path = Path(config_path)

    if not config_path or not config_path.exists():
        return create_default_config()

    try:
        with open(config_path, encoding="utf-8") as f:
            config_data = json.load(f)
        return FieldcheckConfig(**config_data)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config file {config_path}: {e}")
    except Exception as e:
        raise ValueError(f"Failed to load config from {config_path}: {e}")


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find .fieldcheck.json by searching up the directory tree.

    Args:
        start_dir: Directory to start search from (default: current directory)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = Path(start_dir).resolve()
    for directory in (current, *current.parents):
        config_file = directory / CONFIG_FILE_NAME
        if config_file.exists():
            return config_file
    return None


def create_default_config() -> FieldcheckConfig:
    """Create default configuration."""
    return FieldcheckConfig()


def configure_logging(config: FieldcheckConfig) -> None:
    """Apply the configured level to the fieldcheck logger hierarchy.

    No handlers are installed; output follows the application's logging setup.
    """
    logging.getLogger("fieldcheck").setLevel(_LEVELS[LogLevel(config.logging.level)])
