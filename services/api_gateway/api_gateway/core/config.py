"""API Gateway — environment-based configuration.

Warmup settings live under ``gateway_warmup`` and the cluster table under
``reverse_proxy.clusters``. Both can come from the JSON config file or
from nested environment variables, e.g.::

    GATEWAY_WARMUP__MAX_RETRIES=3
    REVERSE_PROXY__CLUSTERS__orders__DESTINATIONS__d1__ADDRESS=http://orders:8001

Cluster-table keys also accept the PascalCase spelling used by YARP-style
config files (``Clusters``, ``WarmupPath``, ``Destinations``, ``Address``).
Environment variable names are case-insensitive, so cluster and destination
names that arrive through the environment are lowercased; use the JSON file
when the cluster name case matters.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator

from api_gateway.services.warmup.models import ClusterConfig
from gateway_shared.config import BaseServiceSettings

DEFAULT_TIMEOUT_SECONDS = 30
DEFAULT_MAX_RETRIES = 5
DEFAULT_RETRY_DELAY_SECONDS = 4
DEFAULT_WARMUP_PATH = "/"


def _int_or_default(value: Any, default: int, *, minimum: int) -> int:
    """Coerce *value* to an int >= *minimum*, falling back to *default*."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = int(str(value).strip())
    except ValueError:
        return default
    return number if number >= minimum else default


class WarmupSettings(BaseModel):
    """Startup warmup knobs. Bad values fall back to defaults, never raise."""

    enabled: bool = True
    request_timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_delay_seconds: int = DEFAULT_RETRY_DELAY_SECONDS
    default_path: str = DEFAULT_WARMUP_PATH

    @field_validator("enabled", mode="before")
    @classmethod
    def _enabled(cls, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower() if value is not None else ""
        if text in ("false", "0", "no", "off"):
            return False
        if text in ("true", "1", "yes", "on"):
            return True
        return True

    @field_validator("request_timeout_seconds", mode="before")
    @classmethod
    def _timeout(cls, value: Any) -> int:
        return _int_or_default(value, DEFAULT_TIMEOUT_SECONDS, minimum=1)

    @field_validator("max_retries", mode="before")
    @classmethod
    def _retries(cls, value: Any) -> int:
        return _int_or_default(value, DEFAULT_MAX_RETRIES, minimum=0)

    @field_validator("retry_delay_seconds", mode="before")
    @classmethod
    def _delay(cls, value: Any) -> int:
        return _int_or_default(value, DEFAULT_RETRY_DELAY_SECONDS, minimum=0)

    @field_validator("default_path", mode="before")
    @classmethod
    def _path(cls, value: Any) -> str:
        # An explicit empty string is meaningful: probe the address as-is
        return DEFAULT_WARMUP_PATH if value is None else str(value)


class DestinationSettings(BaseModel):
    address: str | None = Field(None, validation_alias=AliasChoices("address", "Address"))


class ClusterSettings(BaseModel):
    warmup_path: str | None = Field(
        None, validation_alias=AliasChoices("warmup_path", "WarmupPath")
    )
    destinations: dict[str, DestinationSettings] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("destinations", "Destinations"),
    )


class ReverseProxySettings(BaseModel):
    """The slice of the proxy cluster table the warmup service reads."""

    clusters: dict[str, ClusterSettings] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("clusters", "Clusters"),
    )

    def cluster_configs(self) -> list[ClusterConfig]:
        return [
            ClusterConfig(
                name=name,
                warmup_path=cluster.warmup_path,
                addresses=tuple(
                    destination.address or ""
                    for destination in cluster.destinations.values()
                ),
            )
            for name, cluster in self.clusters.items()
        ]


class ApiGatewaySettings(BaseServiceSettings):
    """Settings specific to the API Gateway."""

    service_name: str = "api_gateway"
    service_port: int = 8000

    gateway_warmup: WarmupSettings = WarmupSettings()
    reverse_proxy: ReverseProxySettings = ReverseProxySettings()


settings = ApiGatewaySettings()
