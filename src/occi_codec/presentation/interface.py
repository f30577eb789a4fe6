"""Presentation layer interfaces for OCCI payload shaping.

This module defines the protocols implemented by the two OCCI wire formats,
so that the transport layer can parse requests and render responses without
knowing which format was negotiated.

Key Responsibilities:
    - Define the media type constants of both wire formats
    - Define request parsing and response presentation protocols
    - Read repeatable header values from any header container

Collaborators:
    - Upstream: The HTTP transport and :mod:`occi_codec.presentation.negotiation`
    - Downstream: ``text_occi`` and ``json_occi`` implementations

Thread Safety:
    - Thread-safe: Protocols are stateless interfaces
"""

# ==============================================================================
# IMPORTS
# ==============================================================================

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, Union

from fastapi import Response

from occi_codec.config.settings import RenderingSettings, get_settings
from occi_codec.models.core import Kind, Mixin
from occi_codec.models.request import InputData

# ==============================================================================
# CONSTANTS
# ==============================================================================

MEDIA_TYPE_TEXT_OCCI = "text/occi"
MEDIA_TYPE_JSON_OCCI = "application/occi+json"
MEDIA_TYPE_JSON = "application/json"
MEDIA_TYPE_TEXT_PLAIN = "text/plain"

HEADER_CATEGORY = "Category"
HEADER_ATTRIBUTE = "X-OCCI-Attribute"
HEADER_LOCATION = "X-OCCI-Location"
HEADER_LINK = "Link"

HeaderSource = Union[Mapping[str, Union[str, Sequence[str]]], Any]

# ==============================================================================
# PRESENTATION PROTOCOLS
# ==============================================================================


class RequestParser(Protocol):
    """Protocol for parsers turning an inbound request into normalized requests."""

    media_type: str

    def parse(self, headers: HeaderSource | None, body: bytes | str | None = None) -> list[InputData]:
        """Decode the request headers and body."""


class ResponsePresenter(Protocol):
    """Protocol describing presentation responsibilities for route handlers."""

    media_type: str

    def render(self, result: Any, *, status_code: int = 200) -> Response:
        """Render a message, entity, entity list or location list."""

    def error(self, detail: Any, *, status_code: int | None = None) -> Response:
        """Render an error payload in the transport format."""

    def interface(
        self,
        kinds: Sequence[Kind],
        mixins: Sequence[Mixin],
        *,
        category_filter: str | None = None,
        user: str | None = None,
    ) -> Response:
        """Render the ``/-/`` discovery document."""

    def empty(self, status_code: int = 204) -> Response:
        """Render a response without body."""


# ==============================================================================
# HEADER HELPERS
# ==============================================================================


def header_values(headers: HeaderSource | None, name: str) -> list[str]:
    """Return every value of the header ``name``, matched case-insensitively.

    Accepts multi-dicts exposing ``getlist`` (Starlette ``Headers``) as well as
    plain mappings whose values are a string or a sequence of strings.
    """
    if headers is None:
        return []
    getlist = getattr(headers, "getlist", None)
    if callable(getlist):
        return [str(value) for value in getlist(name)]
    wanted = name.lower()
    values: list[str] = []
    for key, value in headers.items():
        if key.lower() != wanted:
            continue
        if isinstance(value, str):
            values.append(value)
        else:
            values.extend(str(item) for item in value)
    return values


def split_outside_quotes(value: str, separator: str = ",") -> list[str]:
    """Split ``value`` on ``separator`` occurrences that are not inside quotes."""
    parts: list[str] = []
    current: list[str] = []
    quoted = False
    escaped = False
    for char in value:
        if escaped:
            current.append(char)
            escaped = False
            continue
        if char == "\\" and quoted:
            current.append(char)
            escaped = True
            continue
        if char == '"':
            quoted = not quoted
        if char == separator and not quoted:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    parts.append("".join(current))
    return parts


def accepted_types(settings: RenderingSettings | None = None) -> str:
    """Return the value of the ``Accept`` header advertised by every response."""
    settings = settings or get_settings().rendering
    return ", ".join(settings.accepted_media_types)


# ==============================================================================
# EXPORTS
# ==============================================================================

__all__ = [
    "HEADER_ATTRIBUTE",
    "HEADER_CATEGORY",
    "HEADER_LINK",
    "HEADER_LOCATION",
    "MEDIA_TYPE_JSON",
    "MEDIA_TYPE_JSON_OCCI",
    "MEDIA_TYPE_TEXT_OCCI",
    "MEDIA_TYPE_TEXT_PLAIN",
    "HeaderSource",
    "RequestParser",
    "ResponsePresenter",
    "accepted_types",
    "header_values",
    "split_outside_quotes",
]
