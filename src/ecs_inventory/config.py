"""Configuration for ecs-inventory.

Configuration values are resolved from the following places, highest
precedence first:

1. Command line arguments
2. A YAML config file (explicit path, or the first one found of
   ``./.ecs-inventory.yaml``, ``./.ecs-inventory/config.yaml``,
   ``~/.ecs-inventory.yaml``, ``$XDG_CONFIG_HOME/ecs-inventory/config.yaml``)
3. Environment variables prefixed with ``ECS_INVENTORY_`` (nested keys use
   ``__``, e.g. ``ECS_INVENTORY_ANCHORE__HTTP__TIMEOUT_SECONDS``)
4. Defaults
"""

from __future__ import annotations

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ecs_inventory.utils.errors import ConfigurationError

logger = logging.getLogger(__name__)

APPLICATION_NAME = "ecs-inventory"

REDACTED = "******"


class LogLevel(str, Enum):
    """Logging levels accepted in configuration."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class HTTPConfig(BaseModel):
    """Settings for the HTTP client used to talk to Anchore."""

    insecure: bool = Field(False, description="Skip TLS certificate verification")
    timeout_seconds: int = Field(
        10, ge=0, description="Per-phase request timeout in seconds; 0 disables it"
    )


class AnchoreInfo(BaseModel):
    """Where and how to deliver inventory reports."""

    url: str = Field("", description="Base URL of the Anchore API")
    user: str = Field("", description="Anchore username")
    password: str = Field("", description="Anchore password")
    account: str = Field("admin", description="Anchore account the inventory belongs to")
    http: HTTPConfig = Field(default_factory=HTTPConfig)

    def is_valid(self) -> bool:
        """Whether enough details are present to attempt delivery."""
        return bool(self.url and self.user and self.password)


class LogConfig(BaseModel):
    """Logging settings."""

    level: LogLevel | None = Field(None, description="Explicit log level")
    file: str = Field("", description="Optional file to also write logs to")

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper() or None
        return value


class AppConfig(BaseSettings):
    """Application configuration for ecs-inventory."""

    model_config = SettingsConfigDict(
        env_prefix="ECS_INVENTORY_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    region: str | None = Field(None, description="AWS region to inventory (default: from AWS config)")
    quiet: bool = Field(False, description="Do not print reports to stdout")
    dry_run: bool = Field(False, description="Do not deliver reports to Anchore")
    metadata: bool = Field(False, description="Include task and service metadata in reports")
    polling_interval_seconds: int = Field(
        300, ge=0, description="Seconds between inventory runs; 0 runs once"
    )
    max_concurrent_clusters: int = Field(
        10, ge=1, description="Maximum number of clusters processed at the same time"
    )
    log: LogConfig = Field(default_factory=LogConfig)
    anchore: AnchoreInfo = Field(default_factory=AnchoreInfo)

    def redacted_yaml(self) -> str:
        """Render the configuration as YAML with secrets masked."""
        data = self.model_dump(mode="json")
        if data["anchore"]["password"]:
            data["anchore"]["password"] = REDACTED
        return yaml.safe_dump(data, sort_keys=False)


def resolve_log_level(config: AppConfig, verbosity: int) -> LogLevel:
    """Pick the effective log level from config and ``-v`` count.

    Raises:
        ConfigurationError: If a level is configured and ``-v`` is also given.
    """
    if config.log.level is not None:
        if verbosity > 0:
            raise ConfigurationError(
                "cannot explicitly set log level (config file or env var) and use -v flag together"
            )
        return config.log.level
    if verbosity == 1:
        return LogLevel.INFO
    if verbosity >= 2:
        return LogLevel.DEBUG
    return LogLevel.ERROR


def _normalize_keys(data: Any) -> Any:
    """Turn dashed YAML keys (``timeout-seconds``) into field names."""
    if isinstance(data, dict):
        return {str(k).replace("-", "_"): _normalize_keys(v) for k, v in data.items()}
    return data


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def config_search_paths() -> list[Path]:
    """Candidate config files, in the order they are tried."""
    xdg_home = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return [
        Path(f".{APPLICATION_NAME}.yaml"),
        Path(f".{APPLICATION_NAME}") / "config.yaml",
        Path.home() / f".{APPLICATION_NAME}.yaml",
        Path(xdg_home) / APPLICATION_NAME / "config.yaml",
    ]


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigurationError(f"unable to read config: {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"unable to parse config: {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"unable to parse config: {path}: expected a mapping")
    return _normalize_keys(data)


def find_config_file(config_path: str | None = None) -> Path | None:
    """Locate the config file to use.

    An explicit path must exist; otherwise the search paths are tried in order
    and ``None`` is returned when nothing is found.
    """
    if config_path:
        path = Path(config_path).expanduser()
        if not path.is_file():
            raise ConfigurationError(f"unable to read config: {config_path}")
        return path
    for candidate in config_search_paths():
        if candidate.is_file():
            return candidate
    return None


def load_config(
    config_path: str | None = None,
    overrides: dict[str, Any] | None = None,
) -> AppConfig:
    """Build the application configuration.

    Args:
        config_path: Explicit config file path (skips the search).
        overrides: Values from the command line, as nested dicts.

    Raises:
        ConfigurationError: If the config file is unreadable or a value is invalid.
    """
    data: dict[str, Any] = {}
    path = find_config_file(config_path)
    if path is not None:
        logger.debug(f"Using config file: {path}")
        data = _read_yaml(path)
    if overrides:
        data = _merge(data, overrides)

    try:
        return AppConfig(**data)
    except ValueError as e:
        raise ConfigurationError(f"invalid config: {e}") from e
