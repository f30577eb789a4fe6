"""Codec selection from negotiated media types."""

from __future__ import annotations

from functools import lru_cache

import structlog

from occi_codec.config.settings import CodecSettings, get_settings
from occi_codec.models.collaborators import DomainModel

from .interface import (
    MEDIA_TYPE_JSON,
    MEDIA_TYPE_JSON_OCCI,
    MEDIA_TYPE_TEXT_OCCI,
    MEDIA_TYPE_TEXT_PLAIN,
    RequestParser,
    ResponsePresenter,
    accepted_types,
)
from .json_occi import JsonOcciParser, JsonOcciPresenter
from .text_occi import TextOcciParser, TextOcciPresenter

logger = structlog.get_logger(__name__)

JSON_MEDIA_TYPES = frozenset({MEDIA_TYPE_JSON_OCCI, MEDIA_TYPE_JSON})
SUPPORTED_MEDIA_TYPES = (
    MEDIA_TYPE_TEXT_OCCI,
    MEDIA_TYPE_JSON_OCCI,
    MEDIA_TYPE_JSON,
    MEDIA_TYPE_TEXT_PLAIN,
)


def _media_ranges(header: str) -> list[tuple[float, int, str]]:
    ranges: list[tuple[float, int, str]] = []
    for position, item in enumerate(header.split(",")):
        media_type, *params = (part.strip() for part in item.split(";"))
        if not media_type:
            continue
        quality = 1.0
        for param in params:
            name, _, value = param.partition("=")
            if name.strip().lower() == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = 0.0
        ranges.append((quality, position, media_type.lower()))
    # Highest quality first; equal qualities keep header order.
    ranges.sort(key=lambda entry: (-entry[0], entry[1]))
    return ranges


def select_media_type(header: str | None, default: str = MEDIA_TYPE_TEXT_OCCI) -> str:
    """Pick the supported media type a ``Content-Type``/``Accept`` value asks for.

    Wildcards and unsupported or missing values fall back to ``default``.
    """
    if not header:
        return default
    for quality, _, media_type in _media_ranges(header):
        if quality <= 0:
            continue
        if media_type in SUPPORTED_MEDIA_TYPES:
            return media_type
        if media_type == "application/*":
            return MEDIA_TYPE_JSON_OCCI
        if media_type == "*/*":
            return default
    logger.debug("occi.negotiation.default", header=header, media_type=default)
    return default


def is_json(media_type: str) -> bool:
    return media_type in JSON_MEDIA_TYPES


def codec_for(
    media_type: str | None,
    model: DomainModel,
    settings: CodecSettings | None = None,
) -> tuple[RequestParser, ResponsePresenter]:
    """Return the parser and presenter pair serving ``media_type``.

    JSON media types get the structured codec, everything else the text/occi
    header codec.
    """
    settings = settings or get_settings()
    selected = select_media_type(media_type)
    header = settings.logging.correlation_id_header or "X-Correlation-ID"
    if is_json(selected):
        return (
            JsonOcciParser(selected),
            JsonOcciPresenter(
                model, settings.rendering, media_type=selected, correlation_header=header
            ),
        )
    return TextOcciParser(), TextOcciPresenter(model, settings.rendering, correlation_header=header)


@lru_cache(maxsize=None)
def _text_parser() -> TextOcciParser:
    return TextOcciParser()


@lru_cache(maxsize=None)
def _json_parser(media_type: str) -> JsonOcciParser:
    return JsonOcciParser(media_type)


def parser_for(media_type: str | None) -> RequestParser:
    """Return a shared parser for ``media_type``; parsers hold no state."""
    selected = select_media_type(media_type)
    if is_json(selected):
        return _json_parser(selected)
    return _text_parser()


__all__ = [
    "JSON_MEDIA_TYPES",
    "SUPPORTED_MEDIA_TYPES",
    "accepted_types",
    "codec_for",
    "is_json",
    "parser_for",
    "select_media_type",
]
