# NetBird API Exporter
# Copyright (C) 2025 Amirreza "Farnam" Taheri
# This program comes with ABSOLUTELY NO WARRANTY; for details type `show w`.
# This is free software, and you are welcome to redistribute it
# under certain conditions; type `show c` for details.

"""Application configuration for the NetBird API exporter.

Settings are read from environment variables (``NETBIRD_API_URL``,
``NETBIRD_API_TOKEN``, ``LISTEN_ADDRESS``, ``METRICS_PATH``, ``LOG_LEVEL``, ...)
and, optionally, from a YAML file whose keys are the lower-case field names.
Environment variables win over the file.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional, Type

import yaml
from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from .constants import (
    CONFIG_FILE_NAME,
    DEFAULT_API_TIMEOUT,
    DEFAULT_API_URL,
    DEFAULT_LISTEN_ADDRESS,
    DEFAULT_LOG_LEVEL,
    DEFAULT_METRICS_PATH,
    DEFAULT_SHUTDOWN_TIMEOUT,
)
from .exceptions import ConfigError

logger = logging.getLogger(__name__)


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """
    A Pydantic settings source that loads variables from a YAML file.
    """

    def __init__(self, settings_cls: Type[BaseSettings], yaml_file: Path | None):
        super().__init__(settings_cls)
        self.yaml_file = yaml_file
        self._data: dict[str, Any] | None = None
        if self.yaml_file and self.yaml_file.exists():
            try:
                self._data = yaml.safe_load(self.yaml_file.read_text()) or {}
            except (yaml.YAMLError, IOError) as exc:
                logger.warning(f"Ignoring unreadable config file {self.yaml_file}: {exc}")
                self._data = {}
        else:
            self._data = {}

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str] | None:
        if not self._data:
            return None
        return (self._data.get(field_name), field_name)

    def __call__(self) -> dict[str, Any]:
        return dict(self._data or {})


class Settings(BaseSettings):
    """
    Main application configuration model.
    """

    netbird_api_url: str = Field(
        DEFAULT_API_URL, description="Base URL of the NetBird management API."
    )
    netbird_api_token: Optional[str] = Field(
        None, description="Personal access token used for the Authorization header (required)."
    )
    netbird_api_timeout: float = Field(
        DEFAULT_API_TIMEOUT, gt=0, description="Timeout for a single API request in seconds."
    )
    listen_address: str = Field(
        DEFAULT_LISTEN_ADDRESS, description="host:port the HTTP server binds to; ':8080' means all interfaces."
    )
    metrics_path: str = Field(
        DEFAULT_METRICS_PATH, description="Path the Prometheus metrics are served on."
    )
    log_level: str = Field(DEFAULT_LOG_LEVEL, description="Logging verbosity.")
    log_file: Optional[Path] = Field(
        None, description="Optional file that receives a copy of the log output."
    )
    shutdown_timeout: float = Field(
        DEFAULT_SHUTDOWN_TIMEOUT, ge=0, description="Seconds to wait for in-flight requests on shutdown."
    )

    config_file: Optional[Path] = Field(default=None, exclude=True)

    model_config = SettingsConfigDict(
        env_prefix="", env_file=".env", case_sensitive=False, extra="ignore"
    )

    @field_validator("metrics_path")
    @classmethod
    def _normalise_metrics_path(cls, value: str) -> str:
        value = value.strip()
        if not value:
            return DEFAULT_METRICS_PATH
        return value if value.startswith("/") else f"/{value}"

    @field_validator("listen_address")
    @classmethod
    def _validate_listen_address(cls, value: str) -> str:
        _, sep, port = value.strip().rpartition(":")
        if not sep or not port.isdigit() or not 0 <= int(port) <= 65535:
            raise ValueError(f"listen_address must look like 'host:port', got {value!r}")
        return value.strip()

    @field_validator("netbird_api_token")
    @classmethod
    def _blank_token_is_missing(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip()

    @property
    def listen_host(self) -> str:
        host = self.listen_address.rpartition(":")[0].strip("[]")
        return host or "0.0.0.0"

    @property
    def listen_port(self) -> int:
        return int(self.listen_address.rpartition(":")[2])

    def require_token(self) -> str:
        """Return the API token or raise ``ConfigError`` when it is not configured."""
        if not self.netbird_api_token:
            raise ConfigError("NETBIRD_API_TOKEN environment variable is required")
        return self.netbird_api_token

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        config_file = init_settings.init_kwargs.get("config_file")
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=config_file),
            file_secret_settings,
        )


def load_config(path: Path | None = None, **overrides: Any) -> Settings:
    """
    Load application settings from a YAML file and environment variables.

    Keyword overrides (e.g. values given on the command line) take precedence
    over both; ``None`` overrides are ignored.
    """
    config_file = path
    if config_file is None:
        default_config_path = Path.cwd() / CONFIG_FILE_NAME
        if default_config_path.exists():
            config_file = default_config_path
    elif not config_file.exists():
        raise ConfigError(f"Config file not found: {config_file}")
    init_kwargs = {key: value for key, value in overrides.items() if value is not None}
    return Settings(config_file=config_file, **init_kwargs)
