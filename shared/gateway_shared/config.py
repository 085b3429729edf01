"""Base configuration using Pydantic Settings.

All service-specific settings should inherit from ``BaseServiceSettings``.
Values are loaded, highest priority first, from init kwargs, environment
variables, a ``.env`` file, and an optional JSON config file whose path
comes from ``GATEWAY_CONFIG_FILE`` (default ``gateway.json``).
"""

from __future__ import annotations

import os

from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

CONFIG_FILE_ENV = "GATEWAY_CONFIG_FILE"
DEFAULT_CONFIG_FILE = "gateway.json"


class BaseServiceSettings(BaseSettings):
    """Common settings shared across gateway services."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # ── General ───────────────────────────────
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    service_name: str = "gateway"
    service_port: int = 8000

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # A missing JSON file yields no values rather than an error
        json_settings = JsonConfigSettingsSource(
            settings_cls,
            json_file=os.getenv(CONFIG_FILE_ENV, DEFAULT_CONFIG_FILE),
        )
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            json_settings,
            file_secret_settings,
        )

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def json_logs(self) -> bool:
        return self.is_production
