"""Lightweight configuration package exports."""

from __future__ import annotations

from .settings import (
    DEFAULT_SERVER_HEADER,
    CodecSettings,
    Environment,
    LoggingSettings,
    RenderingSettings,
    get_settings,
    load_settings,
)

__all__ = [
    "DEFAULT_SERVER_HEADER",
    "CodecSettings",
    "Environment",
    "LoggingSettings",
    "RenderingSettings",
    "get_settings",
    "load_settings",
]
