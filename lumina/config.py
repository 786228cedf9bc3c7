"""
Lumina configuration.

Uses pydantic-settings with TOML file support and environment variable
overrides.

Resolution priority (highest wins):
  1. Init arguments
  2. Environment variables (LUMINA_ prefix, e.g. LUMINA_CLOUD__API_URL)
  3. TOML config file (~/.lumina/config.toml)
  4. Built-in defaults

The backend is decided by ``cloud.api_url`` alone: empty means the
password lives in local storage on this device only.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

CONFIG_DIR = Path.home() / ".lumina"
CONFIG_PATH = CONFIG_DIR / "config.toml"
DEFAULT_STORAGE_PATH = CONFIG_DIR / "storage.json"


class CloudConfig(BaseModel):
    """Remote edge service configuration.

    api_url: Base endpoint of the worker. Empty selects local mode.
    api_key: Shared secret sent as ``X-Secret-Key`` on uploads.
    timeout: Per-request timeout in seconds.
    """

    api_url: str = ""
    api_key: str = ""
    timeout: float = 10.0

    @field_validator("api_url")
    @classmethod
    def _strip_url(cls, value: str) -> str:
        return value.strip()

    @property
    def configured(self) -> bool:
        return bool(self.api_url)


class StorageConfig(BaseModel):
    """On-device key/value storage used in local mode."""

    path: str = str(DEFAULT_STORAGE_PATH)


class GateConfig(BaseModel):
    """Login/setup gate behaviour."""

    min_password_length: int = Field(default=4, ge=1)
    shake_duration: float = Field(default=0.3, ge=0.0)


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: Literal["console", "json"] = "console"


class TracingConfig(BaseModel):
    """OpenTelemetry tracing configuration."""

    console: bool = False


class TomlSource(PydanticBaseSettingsSource):
    """Settings source that reads the default TOML file, if present."""

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        # Unused: __call__ returns the whole document
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        if CONFIG_PATH.exists():
            try:
                import tomllib

                with open(CONFIG_PATH, "rb") as f:
                    return tomllib.load(f)
            except (OSError, ValueError):
                pass
        return {}


class LuminaConfig(BaseSettings):
    """Root configuration for Lumina."""

    model_config = SettingsConfigDict(
        env_prefix="LUMINA_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    cloud: CloudConfig = Field(default_factory=CloudConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    gate: GateConfig = Field(default_factory=GateConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    tracing: TracingConfig = Field(default_factory=TracingConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            TomlSource(settings_cls),
            file_secret_settings,
        )

    def model_post_init(self, __context: Any) -> None:
        _log = logging.getLogger("lumina.config")

        if self.cloud.configured and not self.cloud.api_key:
            _log.warning(
                "cloud.api_url is set but cloud.api_key is empty; image uploads "
                "will be rejected by the worker. Set LUMINA_CLOUD__API_KEY."
            )
        if self.cloud.configured and not self.cloud.api_url.startswith(("http://", "https://")):
            _log.warning("cloud.api_url=%r does not look like an HTTP(S) URL", self.cloud.api_url)

    @property
    def is_cloud(self) -> bool:
        """True when the remote backend is selected."""
        return self.cloud.configured

    @classmethod
    def load(cls, config_path: Path | None = None) -> LuminaConfig:
        """Load configuration.

        Args:
            config_path: Explicit TOML file. Its values are passed as init
                arguments and therefore win over environment variables.
                Without it the default file is read with the usual
                precedence (env > TOML).
        """
        if config_path and config_path.exists():
            import tomllib

            with open(config_path, "rb") as f:
                toml_data = tomllib.load(f)
            return cls(**toml_data)

        return cls()
