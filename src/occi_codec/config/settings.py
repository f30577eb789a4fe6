"""Configuration system for the OCCI codec."""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from enum import Enum
from functools import lru_cache
from typing import Any

from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SERVER_HEADER = "OCCIWare MART Server v1.0 OCCI/1.2"


class Environment(str, Enum):
    """Deployment environments supported by the server."""

    DEV = "dev"
    STAGING = "staging"
    PROD = "prod"


class LoggingSettings(BaseModel):
    """Structured logging configuration."""

    level: str = Field(default="INFO", description="Log level for application output")
    correlation_id_header: str = Field(
        default="X-Correlation-ID", description="Header used for trace correlation"
    )
    scrub_fields: Sequence[str] = Field(
        default_factory=lambda: ["password", "token", "secret", "authorization"],
        description="Fields that should be redacted in logs",
    )


class RenderingSettings(BaseModel):
    """Wire rendering limits and fixed response headers."""

    server_header: str = Field(
        default=DEFAULT_SERVER_HEADER, description="Value of the Server response header"
    )
    server_uri: str = Field(
        default="",
        description="Prefix prepended to entity locations in X-OCCI-Location headers",
    )
    header_budget_bytes: int = Field(
        default=8000,
        gt=0,
        description="Largest text/occi discovery rendering carried in headers",
    )
    header_entity_limit: int = Field(
        default=1,
        ge=1,
        description="Entities rendered per text/occi collection response",
    )
    accepted_media_types: Sequence[str] = Field(
        default_factory=lambda: [
            "text/occi",
            "application/occi+json",
            "application/json",
            "text/plain",
        ],
        description="Media types advertised in the Accept response header",
    )


class CodecSettings(BaseSettings):
    """Top-level codec settings."""

    environment: Environment = Environment.DEV
    debug: bool = False
    service_name: str = "occi-codec"
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    rendering: RenderingSettings = Field(default_factory=RenderingSettings)

    model_config = SettingsConfigDict(env_prefix="OCCI_", env_nested_delimiter="__")


ENVIRONMENT_DEFAULTS: Mapping[Environment, dict[str, Any]] = {
    Environment.DEV: {
        "debug": True,
        "logging": {"level": "DEBUG"},
    },
    Environment.STAGING: {
        "logging": {"level": "INFO"},
    },
    Environment.PROD: {
        "logging": {"level": "WARNING"},
    },
}


def _deep_update(target: dict[str, Any], updates: Mapping[str, Any]) -> dict[str, Any]:
    for key, value in updates.items():
        current = target.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            target[key] = _deep_update(dict(current), value)
        else:
            target[key] = value
    return target


def load_settings(environment: str | None = None) -> CodecSettings:
    """Load codec settings with environment specific defaults applied."""
    env_value = (environment or os.getenv("OCCI_ENV", "dev")).lower()
    env = Environment(env_value)
    defaults = ENVIRONMENT_DEFAULTS.get(env, {})
    try:
        base_settings = CodecSettings()
    except ValidationError as err:
        raise RuntimeError(f"Invalid configuration: {err}") from err
    # Explicitly configured values win over the environment defaults.
    merged = _deep_update(dict(defaults), base_settings.model_dump(exclude_unset=True))
    merged["environment"] = env
    return CodecSettings.model_validate(merged)


@lru_cache(maxsize=1)
def get_settings() -> CodecSettings:
    """Cached accessor used by production code."""
    return load_settings()
